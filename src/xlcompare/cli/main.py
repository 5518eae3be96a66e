"""
xlcompare - command line entry point

Commands:
  diff  - Compare two workbooks and show the differences
  serve - Run the HTTP API
"""

import click

from xlcompare import __version__
from xlcompare.cli.diff_command import diff_command
from xlcompare.cli.serve_command import serve_command


@click.group()
@click.version_option(version=__version__, prog_name='xlcompare')
def cli():
    """
    xlcompare - Semantic diff of two spreadsheet workbooks

    Reports added, removed and modified sheets, cells, formulas, formats,
    validations and layout details between a "before" and an "after"
    workbook.

    \b
    Examples:
      # Compare two versions
      xlcompare diff old.xlsx new.xlsx

      # Run the API server
      xlcompare serve
    """
    pass


cli.add_command(diff_command)
cli.add_command(serve_command)


if __name__ == '__main__':
    cli()
