"""Writing split patches to disk.

Each group is written to ``<label>.diff`` in the output directory, with
characters that are unsafe in file names replaced by ``_``. The ``.`` is
replaced too since ``.diff`` is appended. Existing files are never
overwritten: ``-1``, ``-2``, ... is appended to the stem instead.
"""

import logging
from pathlib import Path

from splitpr.core.encoding import encode_patch

logger = logging.getLogger(__name__)

FILENAME_FORBIDDEN_CHARS = frozenset('/<>:"\\|?*.')
PATCH_SUFFIX = ".diff"


def sanitize_label(label: str) -> str:
    """Turn a group label into a file name stem."""
    stem = "".join("_" if c in FILENAME_FORBIDDEN_CHARS else c for c in label)
    return stem or "patch"


def generate_filename(label: str, directory: Path) -> Path:
    """Get the first free ``.diff`` path for a label in a directory."""
    stem = sanitize_label(label)
    candidate = directory / f"{stem}{PATCH_SUFFIX}"
    counter = 0
    while candidate.exists():
        counter += 1
        candidate = directory / f"{stem}-{counter}{PATCH_SUFFIX}"
    return candidate


def write_groups(blobs: list[tuple[str, str]], directory: Path) -> list[Path]:
    """Write labelled patch texts to a directory.

    Args:
        blobs: (label, patch text) pairs, written in order
        directory: Output directory, created if missing

    Returns:
        Paths written, in the same order as blobs.
    """
    directory.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for label, text in blobs:
        data = encode_patch(text)
        while True:
            path = generate_filename(label, directory)
            try:
                # "x" refuses to clobber a file created since the exists() check
                with path.open("xb") as f:
                    f.write(data)
            except FileExistsError:
                continue
            break
        logger.info("Writing: %s", path)
        written.append(path)
    return written
