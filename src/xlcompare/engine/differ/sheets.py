"""
Workbook- and worksheet-level diffs.

Sheet presence, visibility and order are compared on the workbook's sheet
list. Used range, data validations, conditional formatting and hidden
rows/columns are compared per sheet, at whole-sheet granularity.
"""
import logging
from typing import Dict, List

from xlcompare.engine.differ.cells import text_equals
from xlcompare.engine.differ.models import (
    CATEGORY_CONDITIONAL_FORMATTING,
    CATEGORY_DATA_VALIDATION,
    CATEGORY_HIDDEN_COLUMNS,
    CATEGORY_HIDDEN_ROWS,
    CATEGORY_SHEET,
    CATEGORY_SHEET_ORDER,
    CATEGORY_SHEET_VISIBILITY,
    CATEGORY_USED_RANGE,
    DiffKind,
    DiffRecord,
)
from xlcompare.engine.reader.workbook import SheetDescriptor, WorkbookSnapshot, sheet_key
from xlcompare.engine.reader.worksheet import WorksheetSnapshot

logger = logging.getLogger(__name__)

VISIBLE = "Visible"
HIDDEN = "Hidden"
VERY_HIDDEN = "VeryHidden"

PRESENT = "Present"
MISSING = "Missing"


def visibility_label(sheet: SheetDescriptor) -> str:
    """Visibility of a sheet; very hidden wins over hidden."""
    if sheet.very_hidden:
        return VERY_HIDDEN
    if sheet.hidden:
        return HIDDEN
    return VISIBLE


def display_names(workbook_a: WorkbookSnapshot, workbook_b: WorkbookSnapshot) -> Dict[str, str]:
    """
    Reported spelling of every sheet, by case-insensitive key.

    When the two workbooks spell a sheet differently (case only), the
    ordinally smaller spelling is reported, whichever side it comes from.
    """
    names: Dict[str, str] = {}
    for workbook in (workbook_a, workbook_b):
        for key, sheet in workbook.sheets_by_key.items():
            current = names.get(key)
            names[key] = sheet.name if current is None else min(current, sheet.name)
    return names


def sheet_name_union(workbook_a: WorkbookSnapshot, workbook_b: WorkbookSnapshot) -> List[str]:
    """
    Union of sheet names from both workbooks, case-insensitive.

    Returns:
        Names (see display_names) in case-insensitive lexicographic order
    """
    names = display_names(workbook_a, workbook_b)
    return [names[key] for key in sorted(names)]


def diff_sheets(workbook_a: WorkbookSnapshot, workbook_b: WorkbookSnapshot) -> List[DiffRecord]:
    """Detect added and removed sheets and visibility changes."""
    diffs = []

    for name in sheet_name_union(workbook_a, workbook_b):
        sheet_a = workbook_a.get_sheet(name)
        sheet_b = workbook_b.get_sheet(name)

        if sheet_b is None:
            diffs.append(DiffRecord(name, "", DiffKind.REMOVED, CATEGORY_SHEET, PRESENT, MISSING))
            continue

        if sheet_a is None:
            diffs.append(DiffRecord(name, "", DiffKind.ADDED, CATEGORY_SHEET, MISSING, PRESENT))
            continue

        if sheet_a.hidden != sheet_b.hidden or sheet_a.very_hidden != sheet_b.very_hidden:
            diffs.append(DiffRecord(
                name, "", DiffKind.MODIFIED, CATEGORY_SHEET_VISIBILITY,
                visibility_label(sheet_a), visibility_label(sheet_b),
            ))

    return diffs


def diff_sheet_order(workbook_a: WorkbookSnapshot, workbook_b: WorkbookSnapshot) -> List[DiffRecord]:
    """
    Report sheets whose zero-based position changed.

    Sheets are visited in workbook A's native order; sheets missing from
    either side are skipped.
    """
    names = display_names(workbook_a, workbook_b)
    positions_b = {}
    for position, name in enumerate(workbook_b.sheet_order):
        positions_b.setdefault(sheet_key(name), position)

    diffs = []
    seen = set()
    for position_a, name in enumerate(workbook_a.sheet_order):
        key = sheet_key(name)
        if key in seen or key not in positions_b:
            continue
        seen.add(key)

        position_b = positions_b[key]
        if position_a != position_b:
            diffs.append(DiffRecord(
                names[key], "", DiffKind.MODIFIED, CATEGORY_SHEET_ORDER,
                str(position_a), str(position_b),
            ))

    return diffs


def diff_used_range(sheet_name: str, ws_a: WorksheetSnapshot, ws_b: WorksheetSnapshot) -> List[DiffRecord]:
    range_a = ws_a.used_range()
    range_b = ws_b.used_range()
    if range_a == range_b:
        return []
    return [DiffRecord(sheet_name, "", DiffKind.MODIFIED, CATEGORY_USED_RANGE, range_a, range_b)]


def diff_data_validations(sheet_name: str, ws_a: WorksheetSnapshot, ws_b: WorksheetSnapshot) -> List[DiffRecord]:
    summary_a = ws_a.validation_summary()
    summary_b = ws_b.validation_summary()
    if text_equals(summary_a, summary_b):
        return []
    return [DiffRecord(sheet_name, "", DiffKind.MODIFIED, CATEGORY_DATA_VALIDATION, summary_a, summary_b)]


def diff_conditional_formatting(
    sheet_name: str, ws_a: WorksheetSnapshot, ws_b: WorksheetSnapshot
) -> List[DiffRecord]:
    blocks_a = ws_a.conditional_format_blocks()
    blocks_b = ws_b.conditional_format_blocks()
    if blocks_a == blocks_b:
        return []
    return [DiffRecord(
        sheet_name, "", DiffKind.MODIFIED, CATEGORY_CONDITIONAL_FORMATTING,
        "|".join(blocks_a), "|".join(blocks_b),
    )]


def diff_hidden_rows_cols(sheet_name: str, ws_a: WorksheetSnapshot, ws_b: WorksheetSnapshot) -> List[DiffRecord]:
    """Compare hidden column ranges and hidden row indices (columns first)."""
    diffs = []

    cols_a = ws_a.hidden_columns()
    cols_b = ws_b.hidden_columns()
    if cols_a != cols_b:
        diffs.append(DiffRecord(
            sheet_name, "", DiffKind.MODIFIED, CATEGORY_HIDDEN_COLUMNS,
            ",".join(cols_a), ",".join(cols_b),
        ))

    rows_a = ws_a.hidden_rows()
    rows_b = ws_b.hidden_rows()
    if rows_a != rows_b:
        diffs.append(DiffRecord(
            sheet_name, "", DiffKind.MODIFIED, CATEGORY_HIDDEN_ROWS,
            ",".join(str(r) for r in rows_a), ",".join(str(r) for r in rows_b),
        ))

    return diffs
