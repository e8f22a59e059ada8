"""Logging configuration for the splitpr CLI."""

import logging
import os
import sys

LOG_ENV_VAR = "SPLITPR_LOG"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_level(default: int) -> int:
    """Apply the SPLITPR_LOG override (a level name) to a default level."""
    override = os.environ.get(LOG_ENV_VAR, "").strip().upper()
    if not override:
        return default
    level = logging.getLevelName(override)
    if not isinstance(level, int):
        logging.getLogger(__name__).warning("Ignoring unknown %s level: %s", LOG_ENV_VAR, override)
        return default
    return level


def configure_logging(level: int = logging.INFO) -> None:
    """Send splitpr.* logs to stderr.

    Installs a single stderr handler on the splitpr namespace logger;
    calling it again replaces the handler instead of adding a duplicate.

    Args:
        level: Logging level, subject to the SPLITPR_LOG override.
    """
    level = resolve_level(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))

    splitpr_logger = logging.getLogger("splitpr")
    splitpr_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates on reconfigure
    splitpr_logger.handlers.clear()
    splitpr_logger.addHandler(handler)

    # Don't propagate to root logger
    splitpr_logger.propagate = False
