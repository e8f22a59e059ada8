"""Pydantic models for splitpr configuration validation."""

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from splitpr.patch.partition import (
    ByDirectoryPrefix,
    ByExplicitGrouping,
    ByFile,
    BySizeBalance,
    PartitionStrategy,
)

StrategyName = Literal["file", "directory", "explicit", "size"]

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SplitConfig(BaseModel):
    """Top-level splitpr configuration.

    Example .splitpr/config.json:
        {
            "strategy": "directory",
            "depth": 2,
            "output_dir": "patches"
        }
    """

    model_config = ConfigDict(extra="forbid")

    strategy: StrategyName = "file"
    depth: int = Field(default=1, ge=1, description="Path components for 'directory'")
    max_lines: int = Field(default=400, ge=1, description="Changed-line budget for 'size'")
    groups: dict[str, str] = Field(
        default_factory=dict, description="Path -> group id for 'explicit'"
    )
    output_dir: str = "."
    verify: bool = True
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {v!r}")
        return level

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    def build_strategy(self) -> PartitionStrategy:
        """Create the partition strategy this config selects."""
        if self.strategy == "directory":
            return ByDirectoryPrefix(self.depth)
        if self.strategy == "explicit":
            return ByExplicitGrouping(dict(self.groups))
        if self.strategy == "size":
            return BySizeBalance(self.max_lines)
        return ByFile()
