"""Types for unified diff patch representation.

This module provides frozen dataclasses for representing a parsed multi-file
patch. Nothing here copies patch text: every value records a Span of
character offsets into one shared source buffer and reads its text lazily,
so a parsed Patch and every group derived from it stay proportional to the
input size and can be re-emitted byte for byte.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple


class Span(NamedTuple):
    """Half-open range [start, end) of character offsets into a source buffer."""

    start: int
    end: int

    def text(self, source: str) -> str:
        return source[self.start:self.end]


_EMPTY_SPAN = Span(0, 0)


class LineKind(Enum):
    """Kind of a hunk body line, keyed by its leading marker."""

    CONTEXT = " "
    ADDED = "+"
    REMOVED = "-"


@dataclass(frozen=True)
class Line:
    """A single body line of a hunk.

    Attributes:
        kind: CONTEXT, ADDED or REMOVED
        span: Raw line in the source, including marker and line terminator
        no_newline: True if a '\\ No newline at end of file' marker follows
        source: Shared source buffer the span points into
    """

    kind: LineKind
    span: Span
    no_newline: bool = False
    source: str = field(default="", repr=False, compare=False)

    @property
    def raw(self) -> str:
        """Line exactly as it appears in the source."""
        return self.span.text(self.source)

    @property
    def content(self) -> str:
        """Line text without its marker and without the trailing newline."""
        text = self.raw
        if text.endswith("\n"):
            text = text[:-1]
        # A bare empty line is an empty context line with no marker at all
        if text and text[0] == self.kind.value:
            text = text[1:]
        return text


@dataclass(frozen=True)
class Hunk:
    """A single hunk in a unified diff.

    A hunk represents a contiguous section of changes in a file,
    including context lines before and after the actual modifications.

    Attributes:
        old_start: Line number in original file (1-indexed)
        old_count: Number of lines from original (context + removed)
        new_start: Line number in new file (1-indexed)
        new_count: Number of lines in new version (context + added)
        lines: Body lines in order
        section: Optional function/class context from the @@ line
        span: Header line plus body in the source
    """

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: tuple[Line, ...] = ()
    section: str = ""
    span: Span = _EMPTY_SPAN

    def count_removals(self) -> int:
        """Count lines being removed (- prefix)."""
        return sum(1 for line in self.lines if line.kind is LineKind.REMOVED)

    def count_additions(self) -> int:
        """Count lines being added (+ prefix)."""
        return sum(1 for line in self.lines if line.kind is LineKind.ADDED)

    def count_context(self) -> int:
        """Count context lines (space prefix)."""
        return sum(1 for line in self.lines if line.kind is LineKind.CONTEXT)

    def compute_counts(self) -> tuple[int, int]:
        """Compute actual old_count and new_count from lines.

        Returns:
            Tuple of (old_count, new_count) based on actual line kinds.
            old_count = context + removals
            new_count = context + additions
        """
        context = removals = additions = 0
        for line in self.lines:
            match line.kind:
                case LineKind.CONTEXT:
                    context += 1
                case LineKind.REMOVED:
                    removals += 1
                case LineKind.ADDED:
                    additions += 1
        return (context + removals, context + additions)

    @property
    def changed_lines(self) -> int:
        return self.count_additions() + self.count_removals()


@dataclass(frozen=True)
class ModeChange:
    """File mode metadata from git extended headers.

    For a new file only new_mode is set, for a deleted file only old_mode.
    """

    old_mode: str | None = None
    new_mode: str | None = None


@dataclass(frozen=True)
class FileDiff:
    """The diff of a single file.

    Attributes:
        old_path: Path of the original file, None if the file is created
        new_path: Path of the new file, None if the file is deleted
        hunks: Hunks in order (empty for binary and header-only entries)
        span: Exact text of this entry in the source buffer
        binary: True for entries with no line-addressable content
        rename: True if git reports a rename
        copy: True if git reports a copy
        similarity: Similarity index percentage for renames/copies
        mode_change: File mode metadata, if any
        header_line: 1-based line number where the entry's header starts
        source: Shared source buffer the spans point into
    """

    old_path: str | None
    new_path: str | None
    hunks: tuple[Hunk, ...] = ()
    span: Span = _EMPTY_SPAN
    binary: bool = False
    rename: bool = False
    copy: bool = False
    similarity: int | None = None
    mode_change: ModeChange | None = None
    header_line: int = 1
    source: str = field(default="", repr=False, compare=False)

    @property
    def path(self) -> str:
        """Get the effective file path (new_path for edits/creates, old_path for deletes)."""
        if self.new_path is None:
            return self.old_path or ""
        return self.new_path

    @property
    def is_new_file(self) -> bool:
        return self.old_path is None

    @property
    def is_deleted(self) -> bool:
        return self.new_path is None

    @property
    def added(self) -> int:
        return sum(h.count_additions() for h in self.hunks)

    @property
    def removed(self) -> int:
        return sum(h.count_removals() for h in self.hunks)

    @property
    def changed_lines(self) -> int:
        """Added plus removed lines across all hunks."""
        return self.added + self.removed

    @property
    def text(self) -> str:
        """This entry exactly as it appears in the source."""
        return self.span.text(self.source)


@dataclass(frozen=True)
class Patch:
    """An ordered collection of file diffs parsed from one input buffer.

    Groups produced by partitioning are Patch values too; they share the
    source buffer of the Patch they were derived from.

    Attributes:
        files: FileDiff values in source order
        source: The complete input buffer
    """

    files: tuple[FileDiff, ...] = ()
    source: str = field(default="", repr=False, compare=False)

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self) -> Iterator[FileDiff]:
        return iter(self.files)

    def get_file(self, path: str) -> FileDiff | None:
        """Get the diff for a specific file path."""
        for fd in self.files:
            if path in (fd.path, fd.old_path, fd.new_path):
                return fd
        return None

    def paths(self) -> list[str]:
        """Get list of all affected file paths."""
        return [fd.path for fd in self.files]

    @property
    def changed_lines(self) -> int:
        return sum(fd.changed_lines for fd in self.files)

    def concat(self, *others: "Patch") -> "Patch":
        """Return a new Patch with the files of ``others`` appended in order.

        Raises:
            ValueError: If any of ``others`` was derived from a different source.
        """
        files = list(self.files)
        source = self.source
        for other in others:
            if not other.files:
                continue
            if not files:
                # An empty patch adopts the source of whatever follows it
                source = other.source
            elif other.source is not source and other.source != source:
                raise ValueError("cannot concatenate patches parsed from different sources")
            files.extend(other.files)
        return Patch(files=tuple(files), source=source)
