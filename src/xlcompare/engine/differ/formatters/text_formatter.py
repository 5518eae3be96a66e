"""
Text Formatter for comparison results

Renders a plain-text table of differences followed by a per-sheet summary,
e.g. ``Data (+2 ~5 -1)``.
"""

from typing import List, Optional, Sequence

from xlcompare.engine.differ.models import ComparisonResult, DiffRecord, filter_diffs, summarize_by_sheet

COLUMNS = ("Sheet", "Address", "Kind", "Category", "Before", "After")
MAX_CELL_WIDTH = 40


class TextFormatter:
    """Format comparison results as a console table"""

    def __init__(self, max_width: int = MAX_CELL_WIDTH):
        self.max_width = max_width

    def _cell(self, value: Optional[str]) -> str:
        text = "" if value is None else value.replace("\r", " ").replace("\n", " ")
        if len(text) > self.max_width:
            text = text[:self.max_width - 3] + "..."
        return text

    def _rows(self, diffs: Sequence[DiffRecord]) -> List[List[str]]:
        return [
            [self._cell(d.sheet), self._cell(d.address), d.kind.value, d.category,
             self._cell(d.before), self._cell(d.after)]
            for d in diffs
        ]

    def format(self, result: ComparisonResult, filter_query: Optional[str] = None) -> str:
        """
        Format a comparison result as text.

        Args:
            result: ComparisonResult from the engine
            filter_query: Optional text filter applied to the diffs

        Returns:
            Multi-line string (table, then summary)
        """
        diffs = filter_diffs(result.diffs, filter_query)
        if not diffs:
            return "No differences found."

        rows = self._rows(diffs)
        widths = [len(c) for c in COLUMNS]
        for row in rows:
            widths = [max(w, len(v)) for w, v in zip(widths, row)]

        def line(values: Sequence[str]) -> str:
            return "  ".join(v.ljust(w) for v, w in zip(values, widths)).rstrip()

        lines = [line(COLUMNS), line(["-" * w for w in widths])]
        lines.extend(line(row) for row in rows)

        lines.append("")
        lines.append(f"{len(diffs)} difference(s)")
        for summary in summarize_by_sheet(diffs):
            name = summary.sheet or "(workbook)"
            lines.append(f"  {name} (+{summary.added} ~{summary.modified} -{summary.removed})")

        return "\n".join(lines)

    def save(self, result: ComparisonResult, output_path: str, filter_query: Optional[str] = None):
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(self.format(result, filter_query=filter_query))
            f.write('\n')
