"""Partitioning of a parsed Patch into independently applicable groups.

A partition is a disjoint, lossless cover of a Patch's FileDiffs at
whole-file granularity: every FileDiff lands in exactly one group, and
files within a group keep their source order. Strategies only decide which
files travel together; they never look inside hunks.

Example usage:
    >>> groups = partition(patch, ByDirectoryPrefix(1))
    >>> [g.paths() for g in groups]
    [['src/lib.rs', 'src/main.rs'], ['Cargo.toml']]
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import NamedTuple

from splitpr.core.errors import ConfigError
from splitpr.patch.types import FileDiff, Patch
from splitpr.patch.validator import check_cover

logger = logging.getLogger(__name__)

MISC_GROUP = "misc"

GroupAssignment = Mapping[str, str] | Callable[[str], str | None]


class Group(NamedTuple):
    """A partition group with the label a strategy gave it."""

    label: str
    patch: Patch


class PartitionStrategy(ABC):
    """Base class for grouping strategies.

    Subclasses return (label, files) pairs; files must keep source order
    and every file must be assigned exactly once.
    """

    @abstractmethod
    def assign(self, files: Sequence[FileDiff]) -> list[tuple[str, list[FileDiff]]]:
        """Group files, returning (label, files) pairs in emission order."""


def _group_by_key(
    files: Sequence[FileDiff], key: Callable[[FileDiff], str]
) -> dict[str, list[FileDiff]]:
    # dicts keep insertion order, so groups come out in first-seen order
    groups: dict[str, list[FileDiff]] = {}
    for fd in files:
        groups.setdefault(key(fd), []).append(fd)
    return groups


@dataclass(frozen=True)
class ByFile(PartitionStrategy):
    """One group per file, in source order. The default strategy."""

    def assign(self, files: Sequence[FileDiff]) -> list[tuple[str, list[FileDiff]]]:
        return [(fd.path, [fd]) for fd in files]


@dataclass(frozen=True)
class ByDirectoryPrefix(PartitionStrategy):
    """Group files sharing the first ``depth`` components of their path.

    The new path is used, or the old path for deletions. A path with fewer
    than ``depth`` components is its own prefix.
    """

    depth: int = 1

    def __post_init__(self) -> None:
        if self.depth < 1:
            raise ConfigError(f"directory prefix depth must be at least 1, got {self.depth}")

    def prefix(self, fd: FileDiff) -> str:
        parts = PurePosixPath(fd.path).parts
        # The root of an absolute path is not a directory component
        if parts and parts[0] == "/":
            parts = parts[1:]
        return "/".join(parts[:self.depth])

    def assign(self, files: Sequence[FileDiff]) -> list[tuple[str, list[FileDiff]]]:
        return list(_group_by_key(files, self.prefix).items())


@dataclass(frozen=True)
class ByExplicitGrouping(PartitionStrategy):
    """Group files by a caller-supplied assignment of paths to group ids.

    ``assignment`` is either a mapping or a callable returning a group id
    (or None). The effective path is looked up first, then the old path of
    a renamed or copied file. Unassigned files go to a trailing "misc"
    group.
    """

    assignment: GroupAssignment

    def group_of(self, fd: FileDiff) -> str | None:
        candidates = [fd.path]
        if fd.old_path is not None and fd.old_path != fd.path:
            candidates.append(fd.old_path)

        for path in candidates:
            if isinstance(self.assignment, Mapping):
                group_id = self.assignment.get(path)
            else:
                try:
                    group_id = self.assignment(path)
                except Exception as e:
                    raise ConfigError(f"grouping function failed for {path!r}: {e}") from e
            if group_id is not None:
                return str(group_id)
        return None

    def assign(self, files: Sequence[FileDiff]) -> list[tuple[str, list[FileDiff]]]:
        assigned: dict[str, list[FileDiff]] = {}
        misc: list[FileDiff] = []
        for fd in files:
            group_id = self.group_of(fd)
            if group_id is None:
                misc.append(fd)
            else:
                assigned.setdefault(group_id, []).append(fd)

        result = list(assigned.items())
        if misc:
            if MISC_GROUP in assigned:
                # An explicit "misc" group would otherwise collide
                result.append((f"{MISC_GROUP}-unassigned", misc))
            else:
                result.append((MISC_GROUP, misc))
        return result


@dataclass(frozen=True)
class BySizeBalance(PartitionStrategy):
    """Greedily pack files into groups of at most ``max_lines`` changed lines.

    Files are taken in source order; a new group starts when the next file
    would push the current group over the limit. A file larger than the
    limit on its own still gets a group of its own.
    """

    max_lines: int = 400

    def __post_init__(self) -> None:
        if self.max_lines < 1:
            raise ConfigError(f"max_lines must be at least 1, got {self.max_lines}")

    def assign(self, files: Sequence[FileDiff]) -> list[tuple[str, list[FileDiff]]]:
        batches: list[list[FileDiff]] = []
        current: list[FileDiff] = []
        total = 0
        for fd in files:
            size = fd.changed_lines
            if current and total + size > self.max_lines:
                batches.append(current)
                current, total = [], 0
            current.append(fd)
            total += size
        if current:
            batches.append(current)
        return [(f"part-{i}", batch) for i, batch in enumerate(batches, start=1)]


def partition_labeled(patch: Patch, strategy: PartitionStrategy | None = None) -> list[Group]:
    """Partition a Patch and keep the label of every group.

    Args:
        patch: Parsed Patch to split
        strategy: Grouping strategy (defaults to ByFile)

    Returns:
        Groups in emission order. An empty Patch gives no groups.

    Raises:
        ConfigError: If an explicit grouping function fails.
        InternalInvariantViolation: If the result is not a lossless cover.
    """
    strategy = strategy or ByFile()
    groups = [
        Group(label, Patch(files=tuple(files), source=patch.source))
        for label, files in strategy.assign(patch.files)
        if files
    ]
    check_cover(patch, [g.patch for g in groups])
    logger.debug(
        "Partitioned %d file(s) into %d group(s) with %s",
        len(patch),
        len(groups),
        type(strategy).__name__,
    )
    return groups


def partition(patch: Patch, strategy: PartitionStrategy | None = None) -> tuple[Patch, ...]:
    """Partition a Patch into an ordered sequence of groups.

    See partition_labeled() for details.
    """
    return tuple(g.patch for g in partition_labeled(patch, strategy))


def merge(groups: Sequence[Patch]) -> Patch:
    """Concatenate groups back into one Patch, in the given order."""
    if not groups:
        return Patch()
    return groups[0].concat(*groups[1:])
