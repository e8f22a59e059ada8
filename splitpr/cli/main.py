"""Entry point for the splitpr command line tool.

Reads one or more patches (or a single patch from stdin), splits each one
with the configured strategy, and writes every group to its own .diff file.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from splitpr.cli.arg_parser import parse_args
from splitpr.cli.logging_setup import configure_logging
from splitpr.cli.output import print_error, print_groups, print_info
from splitpr.cli.writer import sanitize_label, write_groups
from splitpr.config.load_utils import load_group_file
from splitpr.config.loader import load_config
from splitpr.config.schema import SplitConfig
from splitpr.core.encoding import decode_patch, read_stdin
from splitpr.core.errors import ConfigError, LoadError, SplitError
from splitpr.patch.parser import parse_patch
from splitpr.patch.partition import ByExplicitGrouping, partition_labeled
from splitpr.pipeline import split_patches

logger = logging.getLogger(__name__)


def build_config(args: argparse.Namespace) -> SplitConfig:
    """Load the config file layers and apply command line overrides.

    Raises:
        ConfigError: If a config or groups file is invalid, or an override
            fails validation.
    """
    config = load_config(args.config)

    overrides: dict[str, Any] = {}
    for name in ("strategy", "depth", "max_lines", "verify"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    if args.output_dir is not None:
        overrides["output_dir"] = str(args.output_dir)
    if args.groups is not None:
        try:
            overrides["groups"] = load_group_file(args.groups)
        except LoadError as e:
            raise ConfigError(e.message) from e
        overrides.setdefault("strategy", "explicit")
    if not overrides:
        return config

    try:
        return SplitConfig.model_validate({**config.model_dump(), **overrides})
    except ValidationError as e:
        raise ConfigError(f"Invalid command line options: {e}") from e


def _read_inputs(inputs: list[Path]) -> list[tuple[str, str]]:
    """Read (name, text) pairs from files, or from stdin when none are given."""
    if not inputs:
        logger.info("Detected input on stdin, reading a diff from stdin.")
        return [("stdin", read_stdin())]
    texts = []
    for path in inputs:
        try:
            texts.append((path.stem, decode_patch(path.read_bytes())))
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e
    return texts


def run(args: argparse.Namespace) -> int:
    """Run the split; returns the process exit status."""
    if args.verbose:
        configure_logging(logging.DEBUG)
    elif args.quiet:
        configure_logging(logging.WARNING)
    else:
        configure_logging()

    try:
        config = build_config(args)
        if not (args.verbose or args.quiet):
            configure_logging(config.log_level_number)
        strategy = config.build_strategy()
        if isinstance(strategy, ByExplicitGrouping) and not config.groups:
            logger.warning("No group assignment given; every file goes to the misc group")

        inputs = _read_inputs(args.inputs)
        output_dir = Path(config.output_dir)

        if args.dry_run:
            for name, text in inputs:
                groups = partition_labeled(parse_patch(text), strategy)
                print_groups(groups, title=name)
            return 0

        results = split_patches([text for _, text in inputs], strategy, verify=config.verify)
        total = 0
        for (name, _), blobs in zip(inputs, results):
            if not blobs:
                logger.warning("No file diffs found in %s", name)
                continue
            directory = output_dir / sanitize_label(name) if len(inputs) > 1 else output_dir
            total += len(write_groups(blobs, directory))
    except SplitError as e:
        print_error(str(e))
        return 1

    if not args.quiet:
        print_info(f"Wrote {total} patch(es) to {output_dir}")
    return 0


def main(argv: list[str] | None = None) -> None:
    """Console script entry point."""
    sys.exit(run(parse_args(argv)))


if __name__ == "__main__":
    main()
