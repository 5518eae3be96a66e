"""Read-only access to workbook packages"""

from .workbook import SheetDescriptor, WorkbookSnapshot, open_workbook
from .worksheet import RawCell, WorksheetSnapshot, parse_worksheet
from .number_formats import NumberFormatResolver

__all__ = [
    'SheetDescriptor',
    'WorkbookSnapshot',
    'open_workbook',
    'RawCell',
    'WorksheetSnapshot',
    'parse_worksheet',
    'NumberFormatResolver',
]
