"""Patch module for parsing, partitioning, and re-emitting unified diffs.

This module provides tools for splitting one multi-file unified diff, as
produced by git diff, git format-patch or diff -Nru, into several
independently applicable patches.

Main components:
- Types: Line, Hunk, FileDiff, Patch - span-based representation of diffs
- Parser: parse_patch() - convert diff text to a Patch, validating hunk counts
- Partition: partition() - regroup files with a PartitionStrategy
- Serializer: serialize() - render a group as the exact original text

Example usage:
    >>> from splitpr.patch import ByDirectoryPrefix, parse_patch, partition, serialize
    >>> patch = parse_patch(diff_text)
    >>> for group in partition(patch, ByDirectoryPrefix(1)):
    ...     print(serialize(group), end="")
"""

from splitpr.patch.parser import parse_patch
from splitpr.patch.partition import (
    ByDirectoryPrefix,
    ByExplicitGrouping,
    ByFile,
    BySizeBalance,
    Group,
    PartitionStrategy,
    merge,
    partition,
    partition_labeled,
)
from splitpr.patch.serializer import serialize, serialize_all
from splitpr.patch.types import FileDiff, Hunk, Line, LineKind, ModeChange, Patch, Span
from splitpr.patch.validator import check_cover, check_hunk_counts, check_round_trip

__all__ = [
    # Types
    "Span",
    "LineKind",
    "Line",
    "Hunk",
    "ModeChange",
    "FileDiff",
    "Patch",
    # Parser
    "parse_patch",
    # Partition
    "PartitionStrategy",
    "ByFile",
    "ByDirectoryPrefix",
    "ByExplicitGrouping",
    "BySizeBalance",
    "Group",
    "partition",
    "partition_labeled",
    "merge",
    # Serializer
    "serialize",
    "serialize_all",
    # Validator
    "check_hunk_counts",
    "check_cover",
    "check_round_trip",
]
