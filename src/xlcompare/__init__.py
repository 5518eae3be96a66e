"""xlcompare - semantic diff of two spreadsheet workbooks"""

from xlcompare.core.errors import (
    CancelledError,
    ComparisonError,
    DocumentOpenError,
    MalformedStructureError,
)
from xlcompare.core.options import ComparisonOptions
from xlcompare.core.progress import CancellationToken, ProgressInfo
from xlcompare.engine.differ.compare import WorkbookComparer, compare, compare_in_background
from xlcompare.engine.differ.models import (
    ComparisonResult,
    DiffKind,
    DiffRecord,
    SheetSummary,
    filter_diffs,
    summarize_by_sheet,
)

__version__ = "1.0.0"

__all__ = [
    'CancelledError',
    'ComparisonError',
    'DocumentOpenError',
    'MalformedStructureError',
    'ComparisonOptions',
    'CancellationToken',
    'ProgressInfo',
    'WorkbookComparer',
    'compare',
    'compare_in_background',
    'ComparisonResult',
    'DiffKind',
    'DiffRecord',
    'SheetSummary',
    'filter_diffs',
    'summarize_by_sheet',
]
