"""Parser for unified diff format.

This module turns multi-file unified diff text (plain ``diff -u``/``-Nru``
output or ``git diff``/``git format-patch`` output with extended headers)
into a Patch of FileDiff and Hunk values.

Parsing is strict and all-or-nothing: a hunk whose body does not match its
header, a truncated entry, or an unrecognized header line raises a
ParseError and no partial Patch is returned. Every value records the span
of text it was parsed from, and the spans of consecutive FileDiffs tile the
whole input, so nothing is lost on re-emission:

- text before the first file header (commit message, diffstat) belongs to
  the first file entry
- blank lines after an entry, and a ``-- `` mail signature with whatever
  follows it up to the next file header, belong to the preceding entry
"""

import dataclasses
import logging
import re

from splitpr.core.encoding import decode_patch, encode_patch
from splitpr.core.errors import HunkCountMismatch, MalformedHeader, UnexpectedEndOfInput
from splitpr.patch.types import FileDiff, Hunk, Line, LineKind, ModeChange, Patch, Span
from splitpr.patch.validator import check_hunk_counts

logger = logging.getLogger(__name__)

# Pattern for hunk header: @@ -old_start[,old_count] +new_start[,new_count] @@ [context]
HUNK_HEADER_RE = re.compile(
    r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$"
)

# Pattern for binary marker written by diff and by git without --binary
BINARY_FILES_RE = re.compile(r"^Binary files (.+) and (.+) differ$")

# Fallback for asymmetric git headers: diff --git a/old b/new
GIT_PATHS_RE = re.compile(r"^(a/.+?) (b/.+)$")

SIMILARITY_RE = re.compile(r"^(\d+)%$")

DEV_NULL = "/dev/null"
GIT_SIGNATURE = "-- "

_C_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    '"': '"',
}


def _strip_path_prefix(path: str) -> str:
    """Strip a/ or b/ prefix from path if present."""
    if path.startswith("a/") or path.startswith("b/"):
        return path[2:]
    return path


def _unquote(value: str) -> tuple[str, str]:
    """Decode a C-style quoted path as written by git.

    Args:
        value: Text starting with a double quote

    Returns:
        Tuple of (decoded path, text after the closing quote)

    Raises:
        ValueError: If the quoted string is unterminated or has a bad escape.
    """
    out = bytearray()
    i = 1
    while i < len(value):
        char = value[i]
        if char == '"':
            return decode_patch(bytes(out)), value[i + 1:]
        if char == "\\":
            escape = value[i + 1:i + 2]
            if escape.isdigit():
                out.append(int(value[i + 1:i + 4], 8))
                i += 4
                continue
            if escape not in _C_ESCAPES:
                raise ValueError(f"bad escape in quoted path: {value!r}")
            out += _C_ESCAPES[escape].encode()
            i += 2
            continue
        out += encode_patch(char)
        i += 1
    raise ValueError(f"unterminated quoted path: {value!r}")


def _parse_header_path(value: str) -> str | None:
    """Parse the path of a ---/+++ or Binary files line.

    Drops a tab-separated timestamp, unquotes git quoting, strips the a/ or
    b/ prefix and maps /dev/null to None.
    """
    if value.startswith('"'):
        path, _ = _unquote(value)
    else:
        path = value.split("\t", 1)[0]
    if path == DEV_NULL:
        return None
    return _strip_path_prefix(path)


def _parse_git_paths(rest: str) -> tuple[str, str] | None:
    """Split the two paths of a ``diff --git`` line.

    Returns:
        Tuple of (old, new) paths with prefixes stripped, or None if the
        line cannot be split.
    """
    if rest.startswith('"'):
        old, remainder = _unquote(rest)
        remainder = remainder[1:] if remainder.startswith(" ") else remainder
        new = _unquote(remainder)[0] if remainder.startswith('"') else remainder
        return _strip_path_prefix(old), _strip_path_prefix(new)

    if ' "' in rest:
        old, quoted = rest.split(' "', 1)
        return _strip_path_prefix(old), _strip_path_prefix(_unquote('"' + quoted)[0])

    # Unchanged paths are symmetric: "a/X b/X", even when X contains spaces
    if len(rest) % 2 == 1:
        half = len(rest) // 2
        old, new = rest[:half], rest[half + 1:]
        if rest[half] == " " and _strip_path_prefix(old) == _strip_path_prefix(new):
            return _strip_path_prefix(old), _strip_path_prefix(new)

    match = GIT_PATHS_RE.match(rest)
    if match:
        return _strip_path_prefix(match.group(1)), _strip_path_prefix(match.group(2))

    parts = rest.split(" ")
    if len(parts) == 2:
        return parts[0], parts[1]
    return None


@dataclasses.dataclass
class _EntryHeader:
    """Mutable accumulator for one file entry while its headers are read."""

    old_path: str | None = None
    new_path: str | None = None
    binary: bool = False
    rename: bool = False
    copy: bool = False
    similarity: int | None = None
    old_mode: str | None = None
    new_mode: str | None = None

    @property
    def path(self) -> str | None:
        return self.new_path if self.new_path is not None else self.old_path


class _PatchParser:
    """Single-use, index-based scanner over one input buffer."""

    def __init__(self, text: str, strict_end: bool = True) -> None:
        self.text = text
        self.strict_end = strict_end
        # (start, end) offsets of each line, end including the newline
        self.offsets: list[tuple[int, int]] = []
        start = 0
        while start < len(text):
            end = text.find("\n", start)
            end = len(text) if end == -1 else end + 1
            self.offsets.append((start, end))
            start = end
        self.n = len(self.offsets)

    # --- line access ---

    def raw(self, idx: int) -> str:
        start, end = self.offsets[idx]
        return self.text[start:end]

    def line(self, idx: int) -> str:
        """Line text without its line terminator."""
        raw = self.raw(idx)
        if raw.endswith("\n"):
            raw = raw[:-1]
        if raw.endswith("\r"):
            raw = raw[:-1]
        return raw

    def is_file_start(self, idx: int) -> bool:
        line = self.line(idx)
        if line.startswith("diff "):
            return True
        if line.startswith("--- "):
            # A lone trailing "---" line is a truncated header, not free text
            return idx + 1 == self.n or self.line(idx + 1).startswith("+++ ")
        return BINARY_FILES_RE.match(line) is not None

    # --- top level ---

    def parse(self) -> list[FileDiff]:
        idx = 0
        while idx < self.n and not self.is_file_start(idx):
            idx += 1
        if idx == self.n:
            first = next(i for i in range(self.n) if self.line(i).strip())
            raise MalformedHeader(first + 1, self.line(first), "no file header found")

        entries: list[tuple[int, _EntryHeader, list[Hunk]]] = []
        while idx < self.n:
            header_idx = idx
            header, hunks, idx = self._parse_entry(idx)
            entries.append((header_idx, header, hunks))

        files = []
        for i, (header_idx, header, hunks) in enumerate(entries):
            # Spans tile the buffer: preamble goes to the first entry, the
            # tail of each entry runs up to the next entry's header
            start = 0 if i == 0 else self.offsets[header_idx][0]
            if i + 1 < len(entries):
                end = self.offsets[entries[i + 1][0]][0]
            else:
                end = len(self.text)
            files.append(self._build_file(header, hunks, Span(start, end), header_idx + 1))
        return files

    def _build_file(
        self, header: _EntryHeader, hunks: list[Hunk], span: Span, header_line: int
    ) -> FileDiff:
        mode_change = None
        if header.old_mode is not None or header.new_mode is not None:
            mode_change = ModeChange(old_mode=header.old_mode, new_mode=header.new_mode)
        return FileDiff(
            old_path=header.old_path,
            new_path=header.new_path,
            hunks=tuple(hunks),
            span=span,
            # Entries without hunks are opaque: never line-addressable
            binary=header.binary or not hunks,
            rename=header.rename,
            copy=header.copy,
            similarity=header.similarity,
            mode_change=mode_change,
            header_line=header_line,
            source=self.text,
        )

    # --- file entries ---

    def _parse_entry(self, idx: int) -> tuple[_EntryHeader, list[Hunk], int]:
        header = _EntryHeader()
        line = self.line(idx)
        git = line.startswith("diff --git ")

        if git:
            idx = self._parse_git_header(idx, header)
            if header.binary:
                return header, [], self._skip_entry_tail(idx, header.path)
            if idx == self.n or not self.line(idx).startswith("--- "):
                # Header-only entry: rename, mode change, empty file
                return header, [], self._skip_entry_tail(idx, header.path)
        elif line.startswith("diff "):
            idx += 1
            if idx == self.n and self.strict_end:
                raise UnexpectedEndOfInput("diff command line without file header", line_number=idx)
            if idx == self.n or self.line(idx).startswith("diff "):
                self._diff_command_paths(idx - 1, header)
                return header, [], idx
            line = self.line(idx)
            if not (line.startswith("--- ") or BINARY_FILES_RE.match(line)):
                raise MalformedHeader(idx + 1, line, "expected '---' or 'Binary files' after diff line")

        line = self.line(idx)
        match = BINARY_FILES_RE.match(line)
        if match:
            header.binary = True
            if not git:
                header.old_path = self._header_path(match.group(1), idx)
                header.new_path = self._header_path(match.group(2), idx)
            return header, [], self._skip_entry_tail(idx + 1, header.path)

        idx = self._parse_unified_header(idx, header, git)
        if idx == self.n or not self.line(idx).startswith("@@"):
            # File headers directly followed by the next entry or the end
            return header, [], idx

        hunks: list[Hunk] = []
        while True:
            hunk_header_idx = idx
            hunk, idx = self._parse_hunk(idx, header.path, len(hunks))
            hunks.append(hunk)
            after = idx
            while after < self.n and not self.line(after).strip():
                after += 1
            if after < self.n and self.line(after).startswith("@@"):
                idx = after
                continue
            if after < self.n and self._looks_like_body(after):
                # Body lines keep coming after the declared counts were met
                raise HunkCountMismatch(
                    header.path,
                    len(hunks) - 1,
                    (hunk.old_count, hunk.new_count),
                    self._scan_counts(hunk_header_idx + 1),
                    line_number=hunk_header_idx + 1,
                )
            break
        return header, hunks, self._skip_entry_tail(idx, header.path)

    def _parse_git_header(self, idx: int, header: _EntryHeader) -> int:
        line = self.line(idx)
        try:
            paths = _parse_git_paths(line[len("diff --git "):])
        except ValueError as e:
            raise MalformedHeader(idx + 1, line, str(e)) from e
        if paths is None:
            raise MalformedHeader(idx + 1, line, "cannot split paths of git diff header")
        header.old_path, header.new_path = paths
        header_idx = idx
        idx += 1
        created = deleted = False

        while idx < self.n:
            line = self.line(idx)
            if line.startswith("--- ") or self.is_file_start(idx) and not BINARY_FILES_RE.match(line):
                break
            if line.startswith("index "):
                pass
            elif line.startswith("old mode "):
                header.old_mode = line[len("old mode "):]
            elif line.startswith("new mode "):
                header.new_mode = line[len("new mode "):]
            elif line.startswith("new file mode "):
                header.new_mode = line[len("new file mode "):]
                created = True
            elif line.startswith("deleted file mode "):
                header.old_mode = line[len("deleted file mode "):]
                deleted = True
            elif line.startswith("similarity index ") or line.startswith("dissimilarity index "):
                match = SIMILARITY_RE.match(line.split("index ", 1)[1])
                if not match:
                    raise MalformedHeader(idx + 1, line, "bad similarity index", header.path)
                if line.startswith("similarity"):
                    header.similarity = int(match.group(1))
            elif line.startswith("rename from "):
                header.old_path = self._extended_path(line[len("rename from "):], idx)
                header.rename = True
            elif line.startswith("rename to "):
                header.new_path = self._extended_path(line[len("rename to "):], idx)
                header.rename = True
            elif line.startswith("copy from "):
                header.old_path = self._extended_path(line[len("copy from "):], idx)
                header.copy = True
            elif line.startswith("copy to "):
                header.new_path = self._extended_path(line[len("copy to "):], idx)
                header.copy = True
            elif BINARY_FILES_RE.match(line):
                header.binary = True
            elif line == "GIT binary patch":
                header.binary = True
                # literal/delta payload runs up to the next file entry
                idx += 1
                while idx < self.n and not self.line(idx).startswith("diff "):
                    idx += 1
                break
            else:
                raise MalformedHeader(idx + 1, line, "unrecognized extended header line", header.path)
            idx += 1

        if idx == header_idx + 1 == self.n and self.strict_end:
            raise UnexpectedEndOfInput(
                "git diff header without content", line_number=idx, path=header.path
            )
        if created:
            header.old_path = None
        if deleted:
            header.new_path = None
        return idx

    def _parse_unified_header(self, idx: int, header: _EntryHeader, git: bool) -> int:
        """Parse the ---/+++ pair at idx.

        Returns the index of the first hunk header, or of the next file
        entry when the headers carry no hunks.
        """
        old_path = self._header_path(self.line(idx)[4:], idx)
        idx += 1
        if idx == self.n:
            raise UnexpectedEndOfInput("'---' header without '+++'", line_number=idx, path=old_path)
        line = self.line(idx)
        if not line.startswith("+++ "):
            raise MalformedHeader(idx + 1, line, "expected '+++' after '---'", old_path)
        new_path = self._header_path(line[4:], idx)
        header.old_path = old_path
        header.new_path = new_path
        idx += 1
        if idx == self.n:
            if not self.strict_end:
                return idx
            raise UnexpectedEndOfInput("file header without hunks", line_number=idx, path=header.path)
        line = self.line(idx)
        if not line.startswith("@@") and not self.is_file_start(idx):
            raise MalformedHeader(idx + 1, line, "expected hunk header", header.path)
        return idx

    def _diff_command_paths(self, idx: int, header: _EntryHeader) -> None:
        """Take the paths of a bare ``diff [options] OLD NEW`` line."""
        args = self.line(idx).split()
        if len(args) < 3:
            raise MalformedHeader(idx + 1, self.line(idx), "diff line without paths")
        header.old_path = _strip_path_prefix(args[-2])
        header.new_path = _strip_path_prefix(args[-1])

    def _header_path(self, value: str, idx: int) -> str | None:
        try:
            return _parse_header_path(value)
        except ValueError as e:
            raise MalformedHeader(idx + 1, self.line(idx), str(e)) from e

    def _extended_path(self, value: str, idx: int) -> str:
        if not value.startswith('"'):
            return value
        try:
            return _unquote(value)[0]
        except ValueError as e:
            raise MalformedHeader(idx + 1, self.line(idx), str(e)) from e

    def _skip_entry_tail(self, idx: int, path: str | None) -> int:
        """Consume blank lines and a mail signature after an entry."""
        while idx < self.n and not self.is_file_start(idx):
            line = self.line(idx)
            if line == GIT_SIGNATURE:
                idx += 1
                while idx < self.n and not self.is_file_start(idx):
                    idx += 1
                break
            if line.strip():
                raise MalformedHeader(idx + 1, line, "unexpected line after file entry", path)
            idx += 1
        return idx

    # --- hunks ---

    def _looks_like_body(self, idx: int) -> bool:
        if self.is_file_start(idx) or self.line(idx) == GIT_SIGNATURE:
            return False
        return self.raw(idx)[0] in " +-\\"

    def _scan_counts(self, idx: int) -> tuple[int, int]:
        """Count (old, new) lines of a run of body lines, for error reports."""
        context = added = removed = 0
        while idx < self.n and not self.is_file_start(idx):
            raw = self.raw(idx)
            if raw.startswith("@@") or self.line(idx) == GIT_SIGNATURE:
                break
            if raw[0] == " " or not self.line(idx):
                context += 1
            elif raw[0] == "+":
                added += 1
            elif raw[0] == "-":
                removed += 1
            elif raw[0] != "\\":
                break
            idx += 1
        return (context + removed, context + added)

    def _parse_hunk(self, idx: int, path: str | None, index: int) -> tuple[Hunk, int]:
        header_idx = idx
        header = self.line(idx)
        match = HUNK_HEADER_RE.match(header)
        if not match:
            raise MalformedHeader(idx + 1, header, "malformed hunk header", path)

        old_start = int(match.group(1))
        # Count defaults to 1 if omitted (e.g., @@ -1 +1,2 @@)
        old_count = int(match.group(2)) if match.group(2) is not None else 1
        new_start = int(match.group(3))
        new_count = int(match.group(4)) if match.group(4) is not None else 1
        expected = (old_count, new_count)

        need_old, need_new = old_count, new_count
        lines: list[Line] = []
        idx += 1

        while need_old > 0 or need_new > 0:
            if idx == self.n:
                last = self.raw(idx - 1)
                cut_off = not last.endswith("\n") and not last.startswith("\\")
                if not lines or cut_off:
                    raise UnexpectedEndOfInput(
                        f"hunk #{index + 1} ends before its declared line counts",
                        line_number=idx,
                        path=path,
                    )
                raise HunkCountMismatch(
                    path, index, expected, self._scan_counts(header_idx + 1), line_number=header_idx + 1
                )

            raw = self.raw(idx)
            marker = raw[0]
            if marker == "\\":
                if not lines:
                    raise MalformedHeader(idx + 1, self.line(idx), "marker line before any hunk line", path)
                lines[-1] = dataclasses.replace(lines[-1], no_newline=True)
                idx += 1
                continue

            if marker == " " or raw in ("\n", "\r\n"):
                kind = LineKind.CONTEXT
                need_old -= 1
                need_new -= 1
            elif marker == "-":
                kind = LineKind.REMOVED
                need_old -= 1
            elif marker == "+":
                kind = LineKind.ADDED
                need_new -= 1
            else:
                # A header or foreign text arrived before the counts were met
                raise HunkCountMismatch(
                    path, index, expected, self._scan_counts(header_idx + 1), line_number=header_idx + 1
                )

            if need_old < 0 or need_new < 0:
                raise HunkCountMismatch(
                    path, index, expected, self._scan_counts(header_idx + 1), line_number=header_idx + 1
                )
            start, end = self.offsets[idx]
            lines.append(Line(kind=kind, span=Span(start, end), source=self.text))
            idx += 1

        if idx < self.n and self.raw(idx).startswith("\\") and lines:
            lines[-1] = dataclasses.replace(lines[-1], no_newline=True)
            idx += 1

        hunk = Hunk(
            old_start=old_start,
            old_count=old_count,
            new_start=new_start,
            new_count=new_count,
            lines=tuple(lines),
            section=match.group(5).strip(),
            span=Span(self.offsets[header_idx][0], self.offsets[idx - 1][1]),
        )
        check_hunk_counts(hunk, path, index, line_number=header_idx + 1)
        return hunk, idx


def parse_patch(text: str, strict_end: bool = True) -> Patch:
    """Parse unified diff text into a Patch.

    Handles:
    - Standard unified diff format (--- a/path, +++ b/path, @@ ... @@)
    - ``diff -Nru`` command lines and ``Binary files ... differ`` markers
    - Git extended format (diff --git, index, mode, rename, copy, similarity,
      binary markers and ``GIT binary patch`` payloads)
    - '\\ No newline at end of file' markers
    - /dev/null paths (mapped to None for creations and deletions)
    - ``git format-patch`` mail headers and signatures

    File headers with no hunks (a ---/+++ pair, a bare diff command line
    or a git header block) directly followed by the next file entry parse
    to a FileDiff with binary=True and no hunks.

    Args:
        text: Unified diff text to parse
        strict_end: If True, such a header block at the very end of the
            text is treated as truncated input. Pass False when the text is
            known to be complete, e.g. when re-parsing serialized groups.

    Returns:
        Patch with one FileDiff per file entry, in input order. Empty or
        whitespace-only text gives an empty Patch. This is the one input
        that does not round-trip: a Patch without files re-serializes to
        the empty string, so the whitespace is dropped.

    Raises:
        MalformedHeader: A header line is not recognized.
        HunkCountMismatch: A hunk body does not match its @@ header.
        UnexpectedEndOfInput: The text ends inside a header or hunk.

    Example:
        >>> patch = parse_patch('''\\
        ... --- a/file.py
        ... +++ b/file.py
        ... @@ -1,2 +1,2 @@
        ...  context
        ... -removed
        ... +added
        ... ''')
        >>> patch.paths()
        ['file.py']
    """
    if not text.strip():
        return Patch(source=text)

    parser = _PatchParser(text, strict_end=strict_end)
    files = parser.parse()
    logger.debug(
        "Parsed %d file(s), %d hunk(s) from %d line(s)",
        len(files),
        sum(len(fd.hunks) for fd in files),
        parser.n,
    )
    return Patch(files=tuple(files), source=text)
