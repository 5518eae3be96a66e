"""
Diff Command - Compare two workbooks

Runs the comparison in the background, shows a progress bar and prints the
differences as a text table or JSON.
"""

import logging
import queue
import sys
from pathlib import Path

import click
from click.core import ParameterSource

from xlcompare.core.errors import CancelledError, ComparisonError
from xlcompare.core.options import ComparisonOptions
from xlcompare.core.options_loader import load_options
from xlcompare.core.progress import CancellationToken, ProgressInfo
from xlcompare.engine.differ import JSONFormatter, TextFormatter, compare_in_background
from xlcompare.utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)

EXIT_NO_DIFFERENCES = 0
EXIT_DIFFERENCES = 1
EXIT_ERROR = 2
EXIT_CANCELLED = 130

# CLI flag -> ComparisonOptions field
FLAG_OPTIONS = {
    'values': 'compare_values',
    'formulas': 'compare_formulas',
    'hidden_sheets': 'include_hidden_sheets',
    'sheet_order': 'compare_sheet_order',
    'used_range': 'compare_used_range',
    'validations': 'compare_validations',
    'conditional_formats': 'compare_conditional_formats',
    'hidden_rows_cols': 'compare_hidden_rows_cols',
    'cell_format': 'compare_cell_format',
}

POLL_SECONDS = 0.1


def comparison_flags(func):
    """Attach one --x/--no-x option per comparison flag."""
    defaults = ComparisonOptions()
    helps = {
        'values': 'Compare cell values',
        'formulas': 'Compare cell formulas',
        'hidden_sheets': 'Compare sheets hidden in either workbook',
        'sheet_order': 'Compare sheet positions',
        'used_range': 'Compare used ranges',
        'validations': 'Compare data validations',
        'conditional_formats': 'Compare conditional formatting',
        'hidden_rows_cols': 'Compare hidden rows and columns',
        'cell_format': 'Compare style index and number format',
    }
    for flag in reversed(list(FLAG_OPTIONS)):
        name = flag.replace('_', '-')
        func = click.option(
            f'--{name}/--no-{name}',
            flag,
            default=getattr(defaults, FLAG_OPTIONS[flag]),
            show_default=True,
            help=helps[flag],
        )(func)
    return func


def build_options(ctx: click.Context, config_path, flags: dict) -> ComparisonOptions:
    """
    Profile options overridden by flags given on the command line.

    Args:
        ctx: Click context (used to tell explicit flags from defaults)
        config_path: Profile path from --config, or None
        flags: Flag values keyed by CLI parameter name
    """
    options = load_options(config_path)
    overrides = {
        FLAG_OPTIONS[flag]: value
        for flag, value in flags.items()
        if ctx.get_parameter_source(flag) not in (ParameterSource.DEFAULT, None)
    }
    return options.replace(**overrides) if overrides else options


def run_with_progress(file1: Path, file2: Path, options: ComparisonOptions, show_progress: bool):
    """
    Run the comparison on a worker thread and draw a progress bar.

    Ctrl-C cancels the comparison; the worker's CancelledError is re-raised here.
    """
    token = CancellationToken()
    updates: "queue.Queue[ProgressInfo]" = queue.Queue()

    future = compare_in_background(
        file1, file2, options,
        progress=lambda percent, message: updates.put(ProgressInfo(percent, message)),
        cancel_token=token,
    )

    try:
        if show_progress:
            with click.progressbar(length=100, label='Comparing', file=sys.stderr) as bar:
                shown = 0
                while not future.done() or not updates.empty():
                    try:
                        info = updates.get(timeout=POLL_SECONDS)
                    except queue.Empty:
                        continue
                    if info.percent > shown:
                        bar.update(info.percent - shown)
                        shown = info.percent
        return future.result()
    except KeyboardInterrupt:
        token.cancel()
        click.echo("\nCancelling...", err=True)
        return future.result()


@click.command('diff')
@click.argument('file1', type=click.Path(path_type=Path))
@click.argument('file2', type=click.Path(path_type=Path))
@comparison_flags
@click.option(
    '--config', 'config_path',
    type=click.Path(path_type=Path),
    help='Comparison profile (YAML). Default: $XLCOMPARE_OPTIONS, ./config/xlcompare.yaml, ./xlcompare.yaml'
)
@click.option('--filter', 'filter_query', help='Only show differences containing this text')
@click.option(
    '--format', 'output_format',
    type=click.Choice(['text', 'json'], case_sensitive=False),
    default='text',
    help='Output format (default: text)'
)
@click.option(
    '--output', '-o',
    type=click.Path(path_type=Path),
    help='Output file for results (default: print to console)'
)
@click.option('--progress/--no-progress', default=True, help='Show a progress bar on stderr')
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='WARNING',
    help='Console log level (default: WARNING)'
)
@click.option('--log-dir', type=click.Path(path_type=Path), help='Also write a DEBUG log file here')
@click.pass_context
def diff_command(ctx, file1, file2, config_path, filter_query, output_format, output, progress,
                 log_level, log_dir, **flags):
    """
    Compare two workbooks.

    FILE1: Path to the "before" workbook
    FILE2: Path to the "after" workbook

    Exit status is 0 when no differences are found, 1 when there are
    differences, 2 on error and 130 when cancelled.

    \b
    Examples:
      # Compare two versions
      xlcompare diff old.xlsx new.xlsx

      # Include formatting, skip values, save JSON
      xlcompare diff old.xlsx new.xlsx --cell-format --no-values --format json -o diff.json

      # Only show changes on one sheet
      xlcompare diff old.xlsx new.xlsx --filter Summary
    """
    setup_logging(log_level.upper(), str(log_dir) if log_dir else None, component='xlcompare-diff')

    try:
        options = build_options(ctx, config_path, flags)
    except (FileNotFoundError, ValueError) as e:
        click.echo(f"✗ Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    try:
        result = run_with_progress(file1, file2, options, show_progress=progress)
    except CancelledError:
        click.echo("✗ Comparison cancelled", err=True)
        sys.exit(EXIT_CANCELLED)
    except ComparisonError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(EXIT_ERROR)

    if output_format.lower() == 'json':
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    if output:
        formatter.save(result, str(output), filter_query=filter_query)
        click.echo(f"✓ {len(result)} difference(s), results saved to: {output}", err=True)
    else:
        click.echo(formatter.format(result, filter_query=filter_query))

    sys.exit(EXIT_NO_DIFFERENCES if result.is_empty else EXIT_DIFFERENCES)
