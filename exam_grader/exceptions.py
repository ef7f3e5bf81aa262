class ProcessingError(Exception):
    """Base class for processing failures."""


class UnsupportedFileError(ProcessingError):
    """Raised when an input file cannot be read as text."""


class ParseError(ProcessingError):
    """Raised when parsing fails."""


class JsonRecoveryError(ParseError):
    """Raised when JSON text cannot be recovered by any strategy."""

    def __init__(self, message: str, excerpt: str = "") -> None:
        super().__init__(message)
        self.excerpt = excerpt
