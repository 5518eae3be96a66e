"""
Cell snapshot and cell-level diff.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from xlcompare.core.options import ComparisonOptions
from xlcompare.engine.differ.models import (
    CATEGORY_CELL,
    CATEGORY_FORMULA,
    CATEGORY_NUMBER_FORMAT,
    CATEGORY_STYLE_INDEX,
    CATEGORY_VALUE,
    DiffKind,
    DiffRecord,
)
from xlcompare.engine.reader.number_formats import NumberFormatResolver
from xlcompare.engine.reader.worksheet import WorksheetSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellRecord:
    """Normalized, comparison-relevant content of one cell."""
    value_text: Optional[str] = None
    formula_text: Optional[str] = None
    style_index: Optional[int] = None
    number_format_code: Optional[str] = None


CellSnapshot = Dict[str, CellRecord]


def build_cell_snapshot(
    worksheet: WorksheetSnapshot,
    options: ComparisonOptions,
    resolver: NumberFormatResolver,
) -> CellSnapshot:
    """
    Build the address -> CellRecord map for one sheet.

    Cells with neither value nor formula are dropped unless cell format
    comparison is on. Style index and number format are only filled in when
    cell format comparison is on. If the part repeats an address, the last
    occurrence wins.

    Args:
        worksheet: Parsed worksheet
        options: Comparison options
        resolver: Number-format resolver of the cell's workbook

    Returns:
        Dict keyed by upper-cased cell address
    """
    cells: CellSnapshot = {}

    for raw in worksheet.raw_cells:
        if raw.value_text is None and raw.formula_text is None and not options.compare_cell_format:
            continue

        style_index = None
        number_format = None
        if options.compare_cell_format:
            style_index = raw.style_index
            number_format = resolver.resolve(style_index)

        key = raw.address.upper()
        if key in cells:
            logger.debug(f"Duplicate cell address {key}, keeping the last occurrence")

        cells[key] = CellRecord(
            value_text=raw.value_text,
            formula_text=raw.formula_text,
            style_index=style_index,
            number_format_code=number_format,
        )

    return cells


def render_cell_summary(record: Optional[CellRecord], options: ComparisonOptions) -> Optional[str]:
    """
    Render a one-line summary of a cell for Added/Removed records.

    Formula ("=" prefixed), value and style parts are joined with " | ",
    each only when its comparison is enabled. An empty summary is None.
    """
    if record is None:
        return None

    parts = []

    if options.compare_formulas and _has_text(record.formula_text):
        parts.append(f"={record.formula_text}")

    if options.compare_values and _has_text(record.value_text):
        parts.append(record.value_text)

    if options.compare_cell_format:
        style = "" if record.style_index is None else str(record.style_index)
        number_format = record.number_format_code or ""
        parts.append(f"style:{style} nf:{number_format}")

    if not parts:
        return None

    return " | ".join(parts)


def diff_cells(
    sheet_name: str,
    cells_a: CellSnapshot,
    cells_b: CellSnapshot,
    options: ComparisonOptions,
) -> List[DiffRecord]:
    """
    Compare the cell snapshots of one sheet.

    Addresses are visited in case-insensitive lexicographic order. For an
    address present on both sides, one Modified record is emitted per
    differing dimension, in the order Value, Formula, StyleIndex,
    NumberFormat.

    Returns:
        List of DiffRecord in emission order
    """
    diffs: List[DiffRecord] = []

    for address in sorted(set(cells_a) | set(cells_b)):
        cell_a = cells_a.get(address)
        cell_b = cells_b.get(address)

        if cell_b is None:
            diffs.append(DiffRecord(
                sheet_name, address, DiffKind.REMOVED, CATEGORY_CELL,
                render_cell_summary(cell_a, options), None,
            ))
            continue

        if cell_a is None:
            diffs.append(DiffRecord(
                sheet_name, address, DiffKind.ADDED, CATEGORY_CELL,
                None, render_cell_summary(cell_b, options),
            ))
            continue

        diffs.extend(_diff_cell_pair(sheet_name, address, cell_a, cell_b, options))

    return diffs


def _diff_cell_pair(
    sheet_name: str,
    address: str,
    cell_a: CellRecord,
    cell_b: CellRecord,
    options: ComparisonOptions,
) -> List[DiffRecord]:
    checks = []

    if options.compare_values:
        checks.append((CATEGORY_VALUE, cell_a.value_text, cell_b.value_text))

    if options.compare_formulas:
        checks.append((CATEGORY_FORMULA, cell_a.formula_text, cell_b.formula_text))

    if options.compare_cell_format:
        checks.append((CATEGORY_STYLE_INDEX, _index_text(cell_a.style_index), _index_text(cell_b.style_index)))
        checks.append((CATEGORY_NUMBER_FORMAT, cell_a.number_format_code, cell_b.number_format_code))

    return [
        DiffRecord(sheet_name, address, DiffKind.MODIFIED, category, before, after)
        for category, before, after in checks
        if not text_equals(before, after)
    ]


def text_equals(a: Optional[str], b: Optional[str]) -> bool:
    """Ordinal, case-sensitive equality with None treated as ""."""
    return (a or "") == (b or "")


def _has_text(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def _index_text(index: Optional[int]) -> Optional[str]:
    return None if index is None else str(index)
