"""
Exceptions raised while importing part spreadsheets
"""

NO_VALID_ROWS_MESSAGE = "No valid data found in Excel. Please check column names 'Part' and 'Website'."
UNREADABLE_FILE_MESSAGE = "Failed to parse Excel file. Ensure it has 'Part' and 'Website' columns."


class PartLifecycleError(Exception):
    """Base class for errors surfaced to the user."""


class ParseError(PartLifecycleError):
    """The workbook was read but no row has both a part and a website."""

    def __init__(self, message: str = NO_VALID_ROWS_MESSAGE):
        super().__init__(message)


class ReadError(PartLifecycleError):
    """The uploaded file could not be read as a workbook."""

    def __init__(self, message: str = UNREADABLE_FILE_MESSAGE):
        super().__init__(message)
