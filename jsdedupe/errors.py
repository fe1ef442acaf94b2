"""jsdedupe-specific exceptions."""


class DedupeError(Exception):
    """Base class for errors raised while deduplicating a program."""


class DedupeParseError(DedupeError):
    """Raised when the input is not a well-formed program.

    The transformation is all-or-nothing: when this is raised no output is
    produced for the input.  ``line`` and ``column`` are 1-based.
    """

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        super().__init__(message)
        self.line = line
        self.column = column
