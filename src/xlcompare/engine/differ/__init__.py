"""Workbook differ - comparison engine and diff model"""

from .compare import WorkbookComparer, compare, compare_in_background
from .formatters.json_formatter import JSONFormatter
from .formatters.text_formatter import TextFormatter

__all__ = ['WorkbookComparer', 'compare', 'compare_in_background', 'JSONFormatter', 'TextFormatter']
