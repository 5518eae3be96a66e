"""
Worksheet-level reading.

Parses one worksheet part into the raw material the comparison needs:
cells (text value, formula, style index), the declared dimension, data
validations, conditional-formatting blocks and hidden rows/columns.
A damaged part reads as "no data" rather than failing.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from openpyxl.cell.text import Text
from openpyxl.utils.cell import coordinate_from_string, column_index_from_string, get_column_letter
from openpyxl.utils.exceptions import CellCoordinatesException
from openpyxl.xml.constants import SHEET_MAIN_NS
from openpyxl.xml.functions import fromstring, tostring

logger = logging.getLogger(__name__)


def _tag(name: str) -> str:
    return f"{{{SHEET_MAIN_NS}}}{name}"


DIMENSION_TAG = _tag("dimension")
SHEET_DATA_TAG = _tag("sheetData")
ROW_TAG = _tag("row")
CELL_TAG = _tag("c")
VALUE_TAG = _tag("v")
FORMULA_TAG = _tag("f")
INLINE_STRING_TAG = _tag("is")
COLS_TAG = _tag("cols")
COL_TAG = _tag("col")
DATA_VALIDATION_TAG = _tag("dataValidation")
FORMULA1_TAG = _tag("formula1")
FORMULA2_TAG = _tag("formula2")
CONDITIONAL_FORMATTING_TAG = _tag("conditionalFormatting")

TRUE_VALUES = ("1", "true")


@dataclass(frozen=True)
class RawCell:
    """A cell as it appears in the worksheet part."""
    address: str
    value_text: Optional[str]
    formula_text: Optional[str]
    style_index: Optional[int]
    data_type: Optional[str]


@dataclass
class WorksheetSnapshot:
    """Everything read from one worksheet part."""
    raw_cells: List[RawCell] = field(default_factory=list)
    declared_dimension: Optional[str] = None
    max_row: int = 0
    max_column: int = 0
    validations: List[Tuple[str, str, str, str, str]] = field(default_factory=list)
    conditional_formats: List[str] = field(default_factory=list)
    hidden_column_ranges: List[str] = field(default_factory=list)
    hidden_row_indices: List[int] = field(default_factory=list)

    def used_range(self) -> str:
        """
        Get the used range of the sheet.

        The declared dimension wins when present. Otherwise the range is
        computed from the highest row and column seen; a sheet without any
        addressed cell yields an empty string.
        """
        if self.declared_dimension:
            return self.declared_dimension

        if self.max_row == 0 or self.max_column == 0:
            return ""

        return f"A1:{get_column_letter(self.max_column)}{self.max_row}"

    def validation_summary(self) -> str:
        """Concatenate all validation rules as bracketed tuples, document order."""
        parts = []
        for sqref, rule_type, operator, formula1, formula2 in self.validations:
            parts.append(f"[{sqref}; {rule_type} {operator}; {formula1} {formula2}]")
        return "".join(parts)

    def conditional_format_blocks(self) -> List[str]:
        return list(self.conditional_formats)

    def hidden_columns(self) -> List[str]:
        return sorted(self.hidden_column_ranges)

    def hidden_rows(self) -> List[int]:
        return sorted(self.hidden_row_indices)


def parse_worksheet(xml: bytes, shared_strings: Optional[Sequence[str]] = None) -> WorksheetSnapshot:
    """
    Parse a worksheet part.

    Args:
        xml: Raw worksheet XML
        shared_strings: Workbook shared-string table (None if the workbook has none)

    Returns:
        WorksheetSnapshot
    """
    root = fromstring(xml)
    snapshot = WorksheetSnapshot()

    dimension = root.find(DIMENSION_TAG)
    if dimension is not None:
        ref = dimension.get("ref")
        if ref and ref.strip():
            snapshot.declared_dimension = ref

    sheet_data = root.find(SHEET_DATA_TAG)
    if sheet_data is not None:
        _read_sheet_data(sheet_data, shared_strings, snapshot)

    _read_columns(root, snapshot)
    _read_validations(root, snapshot)

    for block in root.iter(CONDITIONAL_FORMATTING_TAG):
        snapshot.conditional_formats.append(tostring(block).decode("utf-8"))

    return snapshot


def _read_sheet_data(sheet_data, shared_strings, snapshot: WorksheetSnapshot) -> None:
    for row in sheet_data.iter(ROW_TAG):
        row_index = _parse_int(row.get("r"))
        if row_index is not None:
            snapshot.max_row = max(snapshot.max_row, row_index)
            if row.get("hidden") in TRUE_VALUES:
                snapshot.hidden_row_indices.append(row_index)

        for cell in row.iter(CELL_TAG):
            raw = _read_cell(cell, shared_strings)
            if raw is None:
                continue

            column_letter, cell_row = coordinate_from_string(raw.address)
            snapshot.max_row = max(snapshot.max_row, cell_row)
            snapshot.max_column = max(snapshot.max_column, column_index_from_string(column_letter))
            snapshot.raw_cells.append(raw)


def _read_cell(cell, shared_strings) -> Optional[RawCell]:
    address = cell.get("r")
    if not address or not address.strip():
        return None

    address = address.strip().upper()
    try:
        coordinate_from_string(address)
    except (CellCoordinatesException, ValueError):
        logger.warning(f"Skipping cell with invalid address: {address!r}")
        return None

    data_type = cell.get("t")

    formula_text = None
    formula = cell.find(FORMULA_TAG)
    if formula is not None:
        formula_text = formula.text or ""

    return RawCell(
        address=address,
        value_text=_read_value_text(cell, data_type, shared_strings),
        formula_text=formula_text,
        style_index=_parse_int(cell.get("s")),
        data_type=data_type,
    )


def _read_value_text(cell, data_type: Optional[str], shared_strings) -> Optional[str]:
    """
    Get the text of a cell's literal or cached value.

    Shared-string references are resolved through the table; when the table
    is missing or the index is bad, the raw index text is returned instead.
    """
    value = cell.find(VALUE_TAG)

    if value is None:
        if data_type == "inlineStr":
            inline = cell.find(INLINE_STRING_TAG)
            if inline is not None:
                return Text.from_tree(inline).content
        return None

    raw = value.text or ""

    if data_type == "s":
        if shared_strings is None:
            return raw
        index = _parse_int(raw)
        if index is None or index < 0 or index >= len(shared_strings):
            return raw
        return shared_strings[index]

    return raw


def _read_columns(root, snapshot: WorksheetSnapshot) -> None:
    cols = root.find(COLS_TAG)
    if cols is None:
        return

    for col in cols.iter(COL_TAG):
        if col.get("hidden") in TRUE_VALUES:
            snapshot.hidden_column_ranges.append(f"{col.get('min', '')}-{col.get('max', '')}")


def _read_validations(root, snapshot: WorksheetSnapshot) -> None:
    for dv in root.iter(DATA_VALIDATION_TAG):
        formula1 = dv.find(FORMULA1_TAG)
        formula2 = dv.find(FORMULA2_TAG)
        snapshot.validations.append((
            dv.get("sqref", ""),
            dv.get("type", ""),
            dv.get("operator", ""),
            (formula1.text or "") if formula1 is not None else "",
            (formula2.text or "") if formula2 is not None else "",
        ))


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
