"""JSON loading for config layers and group assignment files.

- load_json_file() for files that must exist (config passed with --config,
  groups passed with --groups)
- load_json_file_optional() for config layers that may be absent
- load_group_file() for a path -> group id assignment

All failures surface as LoadError so callers can wrap them into a
ConfigError with one except clause.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from splitpr.core.errors import LoadError

logger = logging.getLogger(__name__)


def _parse_object(content: str, path: Path, prefix: str) -> dict[str, Any]:
    if not content.strip():
        return {}
    try:
        result = json.loads(content)
    except json.JSONDecodeError as e:
        raise LoadError(f"{prefix}Invalid JSON in {path}: {e}") from e
    if not isinstance(result, dict):
        raise LoadError(f"{prefix}Expected object in {path}, got {type(result).__name__}")
    return result


def load_json_file(path: Path, error_context: str = "") -> dict[str, Any]:
    """Read a file holding one JSON object.

    Args:
        path: File to read.
        error_context: Prefix for error messages, e.g. "config" or "groups".

    Returns:
        The decoded object; an empty or blank file gives an empty dict.

    Raises:
        LoadError: If the file is missing or unreadable, is not valid JSON,
            or holds something other than an object.
    """
    prefix = f"{error_context}: " if error_context else ""
    try:
        # utf-8-sig tolerates a BOM written by Windows editors
        content = path.resolve().read_bytes().decode("utf-8-sig")
    except FileNotFoundError as e:
        raise LoadError(f"{prefix}File not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"{prefix}Failed to read file {path}: {e}") from e
    return _parse_object(content, path, prefix)


def load_json_file_optional(path: Path, error_context: str = "") -> dict[str, Any] | None:
    """Like load_json_file(), but a missing file (or a directory) gives None."""
    resolved = path.resolve()
    if not resolved.is_file():
        logger.debug("Config file not found: %s", resolved)
        return None
    logger.debug("Loading config file: %s", resolved)
    return load_json_file(resolved, error_context)


def load_group_file(path: Path) -> dict[str, str]:
    """Load a path -> group id assignment.

    The file holds one JSON object mapping file paths (as they appear in
    the patch, without a/ or b/ prefixes) to group ids.

    Raises:
        LoadError: If the file is missing, invalid, or maps a path to a
            non-string or empty group id.
    """
    data = load_json_file(path, error_context="groups")
    bad = [key for key, value in data.items() if not isinstance(value, str) or not value]
    if bad:
        raise LoadError(f"groups: group ids must be non-empty strings in {path} (bad entries: {bad})")
    return data
