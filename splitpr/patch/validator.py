"""Invariant checks for parsed patches and their partitions.

The checks here are not a pipeline stage of their own:
- check_hunk_counts() runs inline in the parser, so no Patch with
  inconsistent hunk arithmetic is ever constructed
- check_cover() runs after every partition
- check_round_trip() runs when serializer output is verified by re-parsing

A failure of the last two is a bug in splitpr, never bad input, and is
reported as InternalInvariantViolation.
"""

from collections.abc import Sequence

from splitpr.core.errors import HunkCountMismatch, InternalInvariantViolation
from splitpr.patch.types import FileDiff, Hunk, Patch


def check_hunk_counts(
    hunk: Hunk, path: str | None, index: int, line_number: int | None = None
) -> None:
    """Validate that hunk line counts match actual content.

    Args:
        hunk: Hunk to check
        path: Path of the file the hunk belongs to (for the error message)
        index: 0-based index of the hunk within its file
        line_number: 1-based line of the @@ header in the source

    Raises:
        HunkCountMismatch: If context+removed != old_count or
            context+added != new_count.
    """
    actual = hunk.compute_counts()
    expected = (hunk.old_count, hunk.new_count)
    if actual != expected:
        raise HunkCountMismatch(path, index, expected, actual, line_number=line_number)


def check_cover(patch: Patch, groups: Sequence[Patch]) -> None:
    """Verify that groups are a disjoint, lossless, order-preserving cover.

    Every FileDiff of ``patch`` must appear in exactly one group, no group
    may contain anything else, and files within a group must keep their
    relative source order. FileDiffs are identified by their span, which is
    unique within one source buffer.

    Raises:
        InternalInvariantViolation: If any of the above does not hold.
    """
    position = {fd.span: i for i, fd in enumerate(patch.files)}
    seen: set[int] = set()

    for group_index, group in enumerate(groups):
        if not group.files:
            raise InternalInvariantViolation(f"group {group_index} is empty")
        last = -1
        for fd in group.files:
            pos = position.get(fd.span)
            if pos is None or patch.files[pos] != fd:
                raise InternalInvariantViolation(
                    f"group {group_index} contains {fd.path!r}, which is not part of the patch"
                )
            if pos in seen:
                raise InternalInvariantViolation(
                    f"{fd.path!r} appears in more than one group"
                )
            if pos < last:
                raise InternalInvariantViolation(
                    f"group {group_index} reorders {fd.path!r}"
                )
            seen.add(pos)
            last = pos

    if len(seen) != len(patch.files):
        missing = [fd.path for i, fd in enumerate(patch.files) if i not in seen]
        raise InternalInvariantViolation(f"files dropped by partition: {missing}")


def _shape(fd: FileDiff) -> tuple:
    return (
        fd.old_path,
        fd.new_path,
        fd.binary,
        fd.rename,
        fd.copy,
        fd.mode_change,
        tuple(
            (h.old_start, h.old_count, h.new_start, h.new_count, len(h.lines))
            for h in fd.hunks
        ),
    )


def check_round_trip(group: Patch, reparsed: Patch) -> None:
    """Verify that re-parsed serializer output describes the same files.

    Compares paths, flags and hunk headers of every FileDiff, in order.

    Raises:
        InternalInvariantViolation: If the two patches differ.
    """
    if len(group) != len(reparsed):
        raise InternalInvariantViolation(
            f"serialized group re-parses to {len(reparsed)} file(s), expected {len(group)}"
        )
    for original, again in zip(group.files, reparsed.files):
        if _shape(original) != _shape(again):
            raise InternalInvariantViolation(
                f"serialized entry for {original.path!r} does not re-parse to the same diff"
            )
