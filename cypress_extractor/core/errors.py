from typing import Optional


class ExtractionError(Exception):
    """Base class for failures that stop the analysis of a file or a run."""


class SourceParseError(ExtractionError):
    """
    The analysed text is not valid JavaScript.

    ``line`` and ``column`` are 1-based; ``line_text`` is the offending
    source line, used to render a caret under the error position.
    """

    def __init__(
        self,
        message: str,
        line: int,
        column: int,
        filename: Optional[str] = None,
        line_text: str = "",
    ):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.filename = filename
        self.line_text = line_text

    def __str__(self) -> str:
        where = f"{self.filename}:" if self.filename else ""
        return f"{self.message} ({where}{self.line}:{self.column})"


class PathResolutionError(ExtractionError):
    """An input path does not exist or is not a supported source file."""


class InvalidCommandNameError(ExtractionError):
    """A command registration whose name is not a literal string."""

    def __init__(self, message: str, location: int, filename: Optional[str] = None):
        super().__init__(message)
        self.location = location
        self.filename = filename
