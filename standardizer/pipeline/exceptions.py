"""Import pipeline exceptions."""


class ImportPipelineError(Exception):
    """Base exception for import pipeline errors."""

    pass


class ImportFileError(ImportPipelineError):
    """Raised when an input file cannot be read or parsed as a table.

    Examples:
    - File missing or unreadable
    - Not valid UTF-8
    - No header row
    """

    pass
