"""Command line interface for splitpr."""

from splitpr.cli.main import main, run

__all__ = ["main", "run"]
