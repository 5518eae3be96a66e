"""
Error types raised by the comparison engine.

Every failure aborts the whole comparison; there is no partial result.
"""


class ComparisonError(Exception):
    """Base class for all comparison failures."""


class DocumentOpenError(ComparisonError):
    """
    A document could not be opened as a workbook container.

    Raised when the path is missing or unreadable, or when the file is not a
    valid spreadsheet package.
    """

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot open workbook '{self.path}': {reason}")


class MalformedStructureError(ComparisonError):
    """The workbook lacks a required internal structure (e.g. no sheet list)."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Malformed workbook '{self.path}': {reason}")


class CancelledError(ComparisonError):
    """Cooperative cancellation was observed. Not a failure of the inputs."""

    def __init__(self, message: str = "Comparison cancelled"):
        super().__init__(message)
