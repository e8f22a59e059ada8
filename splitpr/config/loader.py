"""Configuration loading with fail-fast behavior and layered merging.

When no explicit config path is given, configs are merged from two layers:
1. Global user config (~/.splitpr/config.json)
2. Project local config (<cwd>/.splitpr/config.json)

Later layers override earlier ones key by key; the "groups" mapping is
merged entry by entry. With no config files at all, pydantic defaults apply.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from splitpr.config.load_utils import load_json_file, load_json_file_optional
from splitpr.config.schema import SplitConfig
from splitpr.core.errors import ConfigError, LoadError

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".splitpr"
CONFIG_FILE_NAME = "config.json"


def get_global_config_dir() -> Path:
    """Get ~/.splitpr (global config directory)."""
    return Path.home() / CONFIG_DIR_NAME


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key == "groups" and isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = {**result[key], **value}
        else:
            result[key] = value
    return result


def load_config(path: Path | None = None, cwd: Path | None = None) -> SplitConfig:
    """Load configuration from file with layered merging.

    Args:
        path: Explicit config file path. If provided, skips layered loading.
        cwd: Working directory for the local layer. Defaults to Path.cwd().

    Returns:
        Validated SplitConfig object.

    Raises:
        ConfigError: If any config file contains invalid JSON or the merged
            config fails validation.
    """
    if path is not None:
        return _load_from_path(path)

    effective_cwd = cwd or Path.cwd()
    layers = [
        get_global_config_dir() / CONFIG_FILE_NAME,
        effective_cwd / CONFIG_DIR_NAME / CONFIG_FILE_NAME,
    ]

    merged: dict[str, Any] = {}
    loaded_from: list[Path] = []
    for layer in dict.fromkeys(p.resolve() for p in layers):
        try:
            data = load_json_file_optional(layer, error_context="config")
        except LoadError as e:
            raise ConfigError(e.message) from e
        if data:
            merged = _merge(merged, data)
            loaded_from.append(layer)

    if loaded_from:
        logger.debug("Config loaded from: %s", [str(p) for p in loaded_from])
    else:
        logger.debug("No config files found, using defaults")
        return SplitConfig()

    try:
        return SplitConfig.model_validate(merged)
    except ValidationError as e:
        sources = ", ".join(str(p) for p in loaded_from)
        raise ConfigError(f"Config validation failed (merged from {sources}): {e}") from e


def _load_from_path(path: Path) -> SplitConfig:
    """Load and validate config from a specific path.

    Raises:
        ConfigError: If file doesn't exist, contains invalid JSON, or fails validation.
    """
    try:
        data = load_json_file(path, error_context="config")
    except LoadError as e:
        raise ConfigError(e.message) from e

    try:
        return SplitConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed for {path}: {e}") from e
