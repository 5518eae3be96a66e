"""Diff formatters"""

from .json_formatter import JSONFormatter
from .text_formatter import TextFormatter

__all__ = ['JSONFormatter', 'TextFormatter']
