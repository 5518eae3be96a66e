"""
Workbook comparison engine.

Opens two workbooks and runs each comparison dimension in a fixed order:

1. Read both workbooks' structure
2. Sheet presence and visibility
3. Sheet order (optional)
4. Per sheet: used range, data validations, conditional formatting,
   hidden rows/columns and cells (each optional)

The run reports progress, honours cooperative cancellation once before
starting and once per sheet, and produces a deterministic, ordered result.
"""
import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Union

from xlcompare.core.options import ComparisonOptions
from xlcompare.core.progress import CancellationToken, ProgressReporter, ProgressSink
from xlcompare.engine.differ.cells import build_cell_snapshot, diff_cells
from xlcompare.engine.differ.models import ComparisonResult, DiffRecord
from xlcompare.engine.differ.sheets import (
    diff_conditional_formatting,
    diff_data_validations,
    diff_hidden_rows_cols,
    diff_sheet_order,
    diff_sheets,
    diff_used_range,
    sheet_name_union,
)
from xlcompare.engine.reader.workbook import SheetDescriptor, WorkbookSnapshot, open_workbook

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

SHEET_PROGRESS_START = 10
SHEET_PROGRESS_SPAN = 85


class WorkbookComparer:
    """
    Compare two workbooks.

    Holds no state between runs: every call to compare() opens its own
    snapshots, so one comparer may serve concurrent comparisons.
    """

    def compare(
        self,
        path_a: PathLike,
        path_b: PathLike,
        options: Optional[ComparisonOptions] = None,
        progress: Optional[ProgressSink] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ComparisonResult:
        """
        Compare two workbooks.

        Args:
            path_a: Path to the "before" workbook
            path_b: Path to the "after" workbook
            options: Comparison options (defaults if None)
            progress: Callable receiving (percent, message)
            cancel_token: Token checked before starting and once per sheet

        Returns:
            ComparisonResult with all differences in emission order

        Raises:
            DocumentOpenError: Either file cannot be opened as a workbook
            MalformedStructureError: Either workbook lacks its sheet list
            CancelledError: Cancellation was observed; nothing is returned
        """
        options = options or ComparisonOptions()
        cancel_token = cancel_token or CancellationToken()
        reporter = ProgressReporter(progress)

        cancel_token.raise_if_cancelled()

        path_a = Path(path_a)
        path_b = Path(path_b)
        logger.info(f"Comparing {path_a.name} and {path_b.name}")

        # Step 1: Workbook structure
        reporter.report(1, "Reading workbook structure...")
        with open_workbook(path_a) as workbook_a, open_workbook(path_b) as workbook_b:
            diffs = self._run(workbook_a, workbook_b, options, reporter, cancel_token)

        reporter.report(100, "Done.")
        logger.info(f"Comparison complete: {len(diffs)} difference(s)")

        return ComparisonResult(diffs=tuple(diffs))

    def _run(
        self,
        workbook_a: WorkbookSnapshot,
        workbook_b: WorkbookSnapshot,
        options: ComparisonOptions,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> List[DiffRecord]:
        diffs: List[DiffRecord] = []

        # Step 2: Sheet presence and visibility
        reporter.report(5, "Comparing sheets...")
        diffs.extend(diff_sheets(workbook_a, workbook_b))

        # Step 3: Sheet order
        if options.compare_sheet_order:
            diffs.extend(diff_sheet_order(workbook_a, workbook_b))

        # Step 4: Per-sheet scan
        names = sheet_name_union(workbook_a, workbook_b)
        total = len(names)

        for index, name in enumerate(names):
            cancel_token.raise_if_cancelled()

            percent = SHEET_PROGRESS_START + int(index / max(1, total) * SHEET_PROGRESS_SPAN)
            reporter.report(percent, f"Comparing sheet: {name} ({index + 1}/{total})")

            sheet_a = workbook_a.get_sheet(name)
            sheet_b = workbook_b.get_sheet(name)
            if sheet_a is None or sheet_b is None:
                continue

            if not options.include_hidden_sheets and (sheet_a.is_hidden or sheet_b.is_hidden):
                logger.debug(f"Skipping hidden sheet: {name}")
                continue

            diffs.extend(self._compare_sheet(name, workbook_a, sheet_a, workbook_b, sheet_b, options))

        return diffs

    def _compare_sheet(
        self,
        name: str,
        workbook_a: WorkbookSnapshot,
        sheet_a: SheetDescriptor,
        workbook_b: WorkbookSnapshot,
        sheet_b: SheetDescriptor,
        options: ComparisonOptions,
    ) -> List[DiffRecord]:
        logger.debug(f"Comparing sheet: {name}")

        ws_a = workbook_a.read_worksheet(sheet_a)
        ws_b = workbook_b.read_worksheet(sheet_b)

        diffs: List[DiffRecord] = []

        if options.compare_used_range:
            diffs.extend(diff_used_range(name, ws_a, ws_b))

        if options.compare_validations:
            diffs.extend(diff_data_validations(name, ws_a, ws_b))

        if options.compare_conditional_formats:
            diffs.extend(diff_conditional_formatting(name, ws_a, ws_b))

        if options.compare_hidden_rows_cols:
            diffs.extend(diff_hidden_rows_cols(name, ws_a, ws_b))

        if options.compares_cells:
            cells_a = build_cell_snapshot(ws_a, options, workbook_a.number_formats)
            cells_b = build_cell_snapshot(ws_b, options, workbook_b.number_formats)
            diffs.extend(diff_cells(name, cells_a, cells_b, options))

        return diffs


def compare(
    path_a: PathLike,
    path_b: PathLike,
    options: Optional[ComparisonOptions] = None,
    progress: Optional[ProgressSink] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> ComparisonResult:
    """Compare two workbooks on the calling thread. See WorkbookComparer.compare."""
    return WorkbookComparer().compare(path_a, path_b, options, progress, cancel_token)


def compare_in_background(
    path_a: PathLike,
    path_b: PathLike,
    options: Optional[ComparisonOptions] = None,
    progress: Optional[ProgressSink] = None,
    cancel_token: Optional[CancellationToken] = None,
    executor: Optional[Executor] = None,
) -> Future:
    """
    Run a comparison off the calling thread.

    Progress callbacks are invoked from the worker thread.

    Args:
        executor: Executor to run on; a private single-worker pool is used
                  (and shut down after the run) when None

    Returns:
        Future resolving to a ComparisonResult, or raising the comparison's error
    """
    if executor is not None:
        return executor.submit(compare, path_a, path_b, options, progress, cancel_token)

    own_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="xlcompare")
    future = own_executor.submit(compare, path_a, path_b, options, progress, cancel_token)
    own_executor.shutdown(wait=False)
    return future
