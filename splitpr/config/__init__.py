"""Configuration loading and validation."""

from splitpr.config.load_utils import load_group_file
from splitpr.config.loader import load_config
from splitpr.config.schema import SplitConfig

__all__ = [
    "SplitConfig",
    "load_config",
    "load_group_file",
]
