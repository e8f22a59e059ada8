"""Core errors and encoding helpers."""

from splitpr.core.encoding import ENCODING, ENCODING_ERRORS, decode_patch, encode_patch
from splitpr.core.errors import (
    ConfigError,
    HunkCountMismatch,
    InternalInvariantViolation,
    LoadError,
    MalformedHeader,
    ParseError,
    SplitError,
    UnexpectedEndOfInput,
)

__all__ = [
    "ENCODING",
    "ENCODING_ERRORS",
    "decode_patch",
    "encode_patch",
    "SplitError",
    "ConfigError",
    "LoadError",
    "InternalInvariantViolation",
    # Parse errors
    "ParseError",
    "MalformedHeader",
    "HunkCountMismatch",
    "UnexpectedEndOfInput",
]
