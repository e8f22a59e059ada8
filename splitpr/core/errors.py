"""Typed exception hierarchy for splitpr."""

from __future__ import annotations


class SplitError(Exception):
    """Base class for all splitpr errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(SplitError):
    """Raised for configuration issues (bad strategy parameters, invalid config files)."""


class LoadError(SplitError):
    """Raised when a JSON file cannot be found, read, or decoded."""

    pass


class InternalInvariantViolation(SplitError):
    """Raised when partitioning or serialization breaks an invariant.

    This always indicates a bug, never bad input. It is not caught anywhere
    inside splitpr.
    """


# === Parse errors ===


def _location(path: str | None, line_number: int | None) -> str:
    parts = []
    if path:
        parts.append(path)
    if line_number is not None:
        parts.append(f"line {line_number}")
    return ", ".join(parts)


class ParseError(SplitError):
    """Base class for errors raised while parsing patch text.

    Attributes:
        line_number: 1-based line in the input where the problem was found.
        path: Path of the file entry being parsed, if known.
    """

    def __init__(
        self, message: str, line_number: int | None = None, path: str | None = None
    ) -> None:
        self.line_number = line_number
        self.path = path
        where = _location(path, line_number)
        super().__init__(f"{where}: {message}" if where else message)


class MalformedHeader(ParseError):
    """A header line could not be recognized or parsed."""

    def __init__(
        self, line_number: int, line: str, reason: str, path: str | None = None
    ) -> None:
        self.line = line
        self.reason = reason
        super().__init__(f"{reason}: {line!r}", line_number=line_number, path=path)


class HunkCountMismatch(ParseError):
    """A hunk body does not match the line counts declared in its header.

    Attributes:
        hunk_index: 0-based index of the hunk within its file.
        expected: (old_count, new_count) declared by the @@ header.
        actual: (old_count, new_count) found in the body.
    """

    def __init__(
        self,
        path: str | None,
        hunk_index: int,
        expected: tuple[int, int],
        actual: tuple[int, int],
        line_number: int | None = None,
    ) -> None:
        self.hunk_index = hunk_index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"hunk #{hunk_index + 1} line count mismatch: "
            f"header declares -{expected[0]},+{expected[1]} "
            f"but body has -{actual[0]},+{actual[1]}",
            line_number=line_number,
            path=path,
        )


class UnexpectedEndOfInput(ParseError):
    """The input ended in the middle of a header or a hunk."""

    def __init__(
        self, reason: str, line_number: int | None = None, path: str | None = None
    ) -> None:
        self.reason = reason
        super().__init__(f"unexpected end of input: {reason}", line_number=line_number, path=path)
