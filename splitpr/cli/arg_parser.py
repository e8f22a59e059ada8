"""Argument parsing for the splitpr CLI."""

import argparse
from pathlib import Path

STRATEGY_CHOICES = ["file", "directory", "explicit", "size"]


def add_strategy_args(parser: argparse.ArgumentParser) -> None:
    """Add strategy selection arguments to a parser.

    Defaults are None so that unset flags fall through to the config file.
    """
    group = parser.add_argument_group("grouping")
    group.add_argument(
        "--strategy", "-s",
        choices=STRATEGY_CHOICES,
        help="How to group files: one per file (default), by directory prefix, "
        "by an explicit assignment, or by changed-line budget",
    )
    group.add_argument(
        "--depth",
        type=int,
        help="Path components shared by a group for --strategy directory (default: 1)",
    )
    group.add_argument(
        "--max-lines",
        dest="max_lines",
        type=int,
        help="Changed-line budget per group for --strategy size (default: 400)",
    )
    group.add_argument(
        "--groups",
        type=Path,
        help="JSON file mapping paths to group ids for --strategy explicit",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="splitpr",
        description="Split one multi-file unified diff into several standalone patches.",
    )
    parser.add_argument(
        "inputs",
        nargs="*",
        type=Path,
        help="Patch files to split (default: read a single patch from stdin)",
    )
    add_strategy_args(parser)
    parser.add_argument(
        "--output-dir", "-o",
        dest="output_dir",
        type=Path,
        help="Directory to write the split patches to (default: current directory)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Config file (default: ~/.splitpr/config.json and ./.splitpr/config.json)",
    )
    parser.add_argument(
        "--no-verify",
        dest="verify",
        action="store_false",
        default=None,
        help="Skip re-parsing every emitted patch",
    )
    parser.add_argument(
        "--dry-run", "-n",
        dest="dry_run",
        action="store_true",
        help="Show the groups that would be written without writing anything",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output",
    )
    verbosity.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)
