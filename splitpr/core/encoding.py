"""Encoding constants and helpers for splitpr.

Patch text is decoded with ``surrogateescape`` so that bytes which are not
valid UTF-8 (latin-1 sources, binary noise in headers) survive a
decode/encode round trip unchanged.
"""

import sys

# Encoding constants
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"  # Lossless for arbitrary bytes


def decode_patch(data: bytes) -> str:
    """Decode raw patch bytes into text without losing any byte."""
    return data.decode(ENCODING, ENCODING_ERRORS)


def encode_patch(text: str) -> bytes:
    """Encode patch text back into the exact bytes it was decoded from."""
    return text.encode(ENCODING, ENCODING_ERRORS)


def read_stdin() -> str:
    """Read all of stdin as patch text."""
    return decode_patch(sys.stdin.buffer.read())
