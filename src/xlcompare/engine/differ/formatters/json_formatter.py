"""
JSON Formatter for comparison results

Formats comparison results as JSON for programmatic consumption.
"""

import json
from typing import Optional

from xlcompare.engine.differ.models import ComparisonResult, filter_diffs


class JSONFormatter:
    """Format comparison results as JSON"""

    def to_dict(self, result: ComparisonResult, filter_query: Optional[str] = None) -> dict:
        """Result as a plain dictionary, optionally filtered."""
        if filter_query:
            result = ComparisonResult(diffs=tuple(filter_diffs(result.diffs, filter_query)))
        return result.to_dict()

    def format(self, result: ComparisonResult, pretty: bool = True, filter_query: Optional[str] = None) -> str:
        """
        Format a comparison result as JSON string.

        Args:
            result: ComparisonResult from the engine
            pretty: If True, format with indentation for readability
            filter_query: Optional text filter applied to the diffs

        Returns:
            JSON string
        """
        data = self.to_dict(result, filter_query)
        if pretty:
            return json.dumps(data, indent=2, ensure_ascii=False)
        return json.dumps(data, ensure_ascii=False)

    def save(self, result: ComparisonResult, output_path: str, pretty: bool = True,
             filter_query: Optional[str] = None):
        """
        Save a comparison result to a JSON file.

        Args:
            result: ComparisonResult from the engine
            output_path: Path where to save JSON file
            pretty: If True, format with indentation
            filter_query: Optional text filter applied to the diffs
        """
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(self.format(result, pretty=pretty, filter_query=filter_query))
            f.write('\n')
