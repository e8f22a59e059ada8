"""Unit tests for splitpr.patch.parser module."""

import dataclasses

import pytest

from splitpr.core.errors import HunkCountMismatch, MalformedHeader, UnexpectedEndOfInput
from splitpr.patch import parse_patch, partition, serialize_all
from splitpr.patch.types import LineKind, ModeChange, Patch


class TestParsePatch:
    """Tests for parse_patch on well-formed input."""

    def test_parse_simple_hunk(self) -> None:
        """Test parsing a single hunk with add/remove."""
        diff_text = """\
--- a/file.py
+++ b/file.py
@@ -1,4 +1,4 @@
 line1
-old line
+new line
 line3
 line4
"""
        patch = parse_patch(diff_text)

        assert len(patch) == 1
        fd = patch.files[0]
        assert fd.old_path == "file.py"
        assert fd.new_path == "file.py"
        assert fd.binary is False
        assert len(fd.hunks) == 1

        hunk = fd.hunks[0]
        assert hunk.old_start == 1
        assert hunk.old_count == 4
        assert hunk.new_start == 1
        assert hunk.new_count == 4

        # Check line parsing
        assert [(line.kind, line.content) for line in hunk.lines] == [
            (LineKind.CONTEXT, "line1"),
            (LineKind.REMOVED, "old line"),
            (LineKind.ADDED, "new line"),
            (LineKind.CONTEXT, "line3"),
            (LineKind.CONTEXT, "line4"),
        ]
        assert hunk.lines[1].raw == "-old line\n"

    def test_parse_multiple_hunks(self) -> None:
        """Test parsing multiple hunks in the same file."""
        diff_text = """\
--- a/file.py
+++ b/file.py
@@ -1,3 +1,4 @@
 line1
+added at top
 line2
 line3
@@ -10,3 +11,2 @@
 line10
-removed
 line11
"""
        patch = parse_patch(diff_text)

        fd = patch.files[0]
        assert len(fd.hunks) == 2

        hunk1 = fd.hunks[0]
        assert (hunk1.old_start, hunk1.old_count, hunk1.new_start, hunk1.new_count) == (1, 3, 1, 4)
        assert hunk1.count_additions() == 1
        assert hunk1.count_removals() == 0
        assert hunk1.count_context() == 3

        hunk2 = fd.hunks[1]
        assert (hunk2.old_start, hunk2.old_count, hunk2.new_start, hunk2.new_count) == (10, 3, 11, 2)
        assert hunk2.count_removals() == 1
        assert hunk2.count_context() == 2
        assert fd.added == 1
        assert fd.removed == 1
        assert fd.changed_lines == 2

    def test_parse_section_context(self) -> None:
        """Trailing text of the @@ line is kept as the hunk section."""
        diff_text = """\
diff --git a/src/module.py b/src/module.py
index abc1234..def5678 100644
--- a/src/module.py
+++ b/src/module.py
@@ -5,3 +5,4 @@ def function():
     pass
+    # new comment
     return None

"""
        patch = parse_patch(diff_text)

        hunk = patch.files[0].hunks[0]
        assert hunk.section == "def function():"
        assert hunk.compute_counts() == (3, 4)

    def test_omitted_count_defaults_to_one(self) -> None:
        """Test that '@@ -1 +1 @@' declares one line on each side."""
        diff_text = """\
--- a/f.txt
+++ b/f.txt
@@ -3 +3 @@
-old
+new
"""
        hunk = parse_patch(diff_text).files[0].hunks[0]

        assert (hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count) == (3, 1, 3, 1)

    def test_git_multi_file(self, fixture_text) -> None:
        """Creations and deletions map /dev/null to None."""
        patch = parse_patch(fixture_text("git-multi-file.diff"))

        assert patch.paths() == ["Cargo.toml", "src/main.rs", "src/splitpr.rs"]

        cargo, main, splitpr = patch.files
        assert cargo.old_path == cargo.new_path == "Cargo.toml"
        assert cargo.hunks[0].section == 'edition = "2021"'
        assert cargo.added == 4

        assert main.old_path == "src/main.rs"
        assert main.new_path is None
        assert main.is_deleted is True
        assert main.path == "src/main.rs"
        assert main.mode_change == ModeChange(old_mode="100644", new_mode=None)

        assert splitpr.old_path is None
        assert splitpr.new_path == "src/splitpr.rs"
        assert splitpr.is_new_file is True
        assert splitpr.mode_change == ModeChange(old_mode=None, new_mode="100644")
        assert splitpr.header_line == 22
        assert splitpr.text.endswith("+    Ok(())\n+}\n")

    def test_diff_nru_multi_file(self, fixture_text) -> None:
        """Plain diff output keeps directory prefixes and drops timestamps."""
        patch = parse_patch(fixture_text("diff-Nru-multi-file.diff"))

        assert len(patch) == 3
        assert [(fd.old_path, fd.new_path) for fd in patch] == [
            ("multipr-2/Cargo.toml", "multipr-3/Cargo.toml"),
            ("multipr-2/src/main.rs", "multipr-3/src/main.rs"),
            ("multipr-2/src/splitpr.rs", "multipr-3/src/splitpr.rs"),
        ]
        assert patch.files[1].removed == 3
        assert patch.files[2].added == 3

    def test_spans_tile_the_input(self, fixture_text) -> None:
        """Concatenated file spans reproduce the input exactly."""
        for name in (
            "git-multi-file.diff",
            "diff-Nru-multi-file.diff",
            "git-binary-rename.diff",
            "format-patch.diff",
        ):
            text = fixture_text(name)
            patch = parse_patch(text)
            assert "".join(fd.text for fd in patch) == text, name

    def test_format_patch_preamble_and_signature(self, fixture_text) -> None:
        """Mail headers go to the first entry, the signature to the last."""
        text = fixture_text("format-patch.diff")
        patch = parse_patch(text)

        assert len(patch) == 1
        fd = patch.files[0]
        assert fd.path == "greet.py"
        assert fd.span.start == 0
        assert fd.text.startswith("From 1a2b3c4d")
        assert fd.text.endswith("-- \n2.43.0\n\n")
        assert fd.header_line == 10
        assert fd.hunks[0].compute_counts() == (2, 3)

    def test_no_newline_marker(self) -> None:
        """The '\\ No newline' marker is an attribute of the preceding line."""
        diff_text = """\
--- a/f.txt
+++ b/f.txt
@@ -1 +1 @@
-old
\\ No newline at end of file
+new
\\ No newline at end of file
"""
        hunk = parse_patch(diff_text).files[0].hunks[0]

        assert len(hunk.lines) == 2
        assert hunk.lines[0].kind is LineKind.REMOVED
        assert hunk.lines[0].no_newline is True
        assert hunk.lines[1].kind is LineKind.ADDED
        assert hunk.lines[1].no_newline is True
        assert hunk.compute_counts() == (1, 1)

    def test_blank_line_is_empty_context(self) -> None:
        """A bare empty line inside a hunk counts as an empty context line."""
        diff_text = "--- a/f\n+++ b/f\n@@ -1,3 +1,3 @@\n a\n\n-b\n+c\n"

        hunk = parse_patch(diff_text).files[0].hunks[0]

        assert hunk.lines[1].kind is LineKind.CONTEXT
        assert hunk.lines[1].content == ""

    def test_trailing_blank_lines_after_entry(self) -> None:
        """Blank lines after a complete hunk belong to the entry, not the hunk."""
        diff_text = "--- a/f\n+++ b/f\n@@ -1 +1 @@\n-a\n+b\n\n\n"

        fd = parse_patch(diff_text).files[0]

        assert len(fd.hunks[0].lines) == 2
        assert fd.text == diff_text

    def test_binary_marker(self, fixture_text) -> None:
        """Binary entries carry no hunks."""
        patch = parse_patch(fixture_text("git-binary-rename.diff"))

        logo = patch.files[0]
        assert logo.path == "docs/logo.png"
        assert logo.binary is True
        assert logo.hunks == ()
        assert logo.changed_lines == 0

    def test_plain_binary_files_line(self) -> None:
        """A standalone 'Binary files ... differ' line is its own entry."""
        diff_text = """\
Binary files old/img.gif and new/img.gif differ
--- old/a.txt
+++ new/a.txt
@@ -1 +1 @@
-x
+y
"""
        patch = parse_patch(diff_text)

        assert [(fd.old_path, fd.new_path, fd.binary) for fd in patch] == [
            ("old/img.gif", "new/img.gif", True),
            ("old/a.txt", "new/a.txt", False),
        ]

    def test_git_binary_patch_payload(self) -> None:
        """The literal/delta payload of 'GIT binary patch' is not parsed as hunks."""
        diff_text = """\
diff --git a/blob.bin b/blob.bin
new file mode 100644
index 0000000000000000000000000000000000000000..1b2c3d4e5f60718293a4b5c6d7e8f90a1b2c3d4e
GIT binary patch
literal 12
TcmZQzWMXDvWn*S#V`l;g0RR91

literal 0
HcmV?d00001

diff --git a/a.txt b/a.txt
--- a/a.txt
+++ b/a.txt
@@ -1 +1 @@
-x
+y
"""
        patch = parse_patch(diff_text)

        blob, text_file = patch.files
        assert blob.binary is True
        assert blob.is_new_file is True
        assert blob.text.endswith("HcmV?d00001\n\n")
        assert text_file.binary is False

    def test_rename_and_mode_change(self, fixture_text) -> None:
        """Rename and mode-only entries keep their git metadata."""
        patch = parse_patch(fixture_text("git-binary-rename.diff"))

        renamed = patch.files[1]
        assert renamed.rename is True
        assert renamed.similarity == 90
        assert renamed.old_path == "src/old_name.py"
        assert renamed.new_path == "src/new_name.py"
        assert renamed.path == "src/new_name.py"

        mode_only = patch.files[2]
        assert mode_only.mode_change == ModeChange(old_mode="100644", new_mode="100755")
        assert mode_only.hunks == ()
        # Header-only entries are opaque, like binary ones
        assert mode_only.binary is True

    def test_pure_rename_without_hunks(self) -> None:
        diff_text = """\
diff --git a/old.txt b/new.txt
similarity index 100%
rename from old.txt
rename to new.txt
"""
        fd = parse_patch(diff_text).files[0]

        assert (fd.old_path, fd.new_path) == ("old.txt", "new.txt")
        assert fd.rename is True
        assert fd.similarity == 100
        assert fd.hunks == ()

    def test_unified_headers_without_hunks(self) -> None:
        """A ---/+++ pair followed by the next entry is an opaque entry."""
        diff_text = "--- a/x\n+++ b/x\n--- a/y\n+++ b/y\n@@ -1 +1 @@\n-a\n+b\n"

        patch = parse_patch(diff_text)

        empty, changed = patch.files
        assert (empty.old_path, empty.new_path) == ("x", "x")
        assert empty.binary is True
        assert empty.hunks == ()
        assert empty.text == "--- a/x\n+++ b/x\n"
        assert changed.path == "y"
        assert changed.binary is False
        assert serialize_all(partition(patch), verify=True) == [empty.text, changed.text]

    def test_diff_command_headers_without_hunks(self) -> None:
        diff_text = """\
diff -Nru a/x b/x
--- a/x
+++ b/x
diff -Nru a/y b/y
--- a/y
+++ b/y
@@ -1 +1 @@
-a
+b
"""
        patch = parse_patch(diff_text)

        assert [(fd.path, fd.binary, len(fd.hunks)) for fd in patch] == [("x", True, 0), ("y", False, 1)]
        assert "".join(serialize_all(partition(patch), verify=True)) == diff_text

    def test_bare_diff_command_line(self) -> None:
        """A diff command line alone takes its paths from its arguments."""
        diff_text = "diff -u old/x new/x\ndiff -u old/y new/y\n--- old/y\n+++ new/y\n@@ -1 +1 @@\n-a\n+b\n"

        patch = parse_patch(diff_text)

        first = patch.files[0]
        assert (first.old_path, first.new_path) == ("old/x", "new/x")
        assert first.binary is True
        assert first.text == "diff -u old/x new/x\n"
        assert "".join(serialize_all(partition(patch), verify=True)) == diff_text

    def test_headers_at_end_without_strict_end(self) -> None:
        """Complete text may end with a header-only entry."""
        fd = parse_patch("--- a/f\n+++ b/f\n", strict_end=False).files[0]

        assert fd.path == "f"
        assert fd.binary is True
        assert fd.hunks == ()

    def test_copy_headers(self) -> None:
        diff_text = """\
diff --git a/a.py b/b.py
similarity index 80%
copy from a.py
copy to b.py
--- a/a.py
+++ b/b.py
@@ -1 +1 @@
-x = 1
+x = 2
"""
        fd = parse_patch(diff_text).files[0]

        assert fd.copy is True
        assert fd.rename is False
        assert (fd.old_path, fd.new_path) == ("a.py", "b.py")

    def test_quoted_paths(self) -> None:
        """Git C-quoted paths are unquoted, including octal UTF-8 escapes."""
        diff_text = """\
diff --git "a/docs/caf\\303\\251 menu.txt" "b/docs/caf\\303\\251 menu.txt"
index 1111111..2222222 100644
--- "a/docs/caf\\303\\251 menu.txt"
+++ "b/docs/caf\\303\\251 menu.txt"
@@ -1 +1 @@
-tea
+coffee
"""
        fd = parse_patch(diff_text).files[0]

        assert fd.old_path == "docs/café menu.txt"
        assert fd.new_path == "docs/café menu.txt"

    def test_git_header_with_spaces_in_path(self) -> None:
        diff_text = """\
diff --git a/my file.txt b/my file.txt
new file mode 100644
index 0000000..e69de29
"""
        fd = parse_patch(diff_text).files[0]

        assert fd.old_path is None
        assert fd.new_path == "my file.txt"

    def test_crlf_line_endings(self) -> None:
        """Headers are recognized with CRLF endings and content keeps the CR."""
        diff_text = "--- a/f\r\n+++ b/f\r\n@@ -1 +1 @@\r\n-a\r\n+b\r\n"

        patch = parse_patch(diff_text)

        fd = patch.files[0]
        assert fd.path == "f"
        assert fd.hunks[0].lines[0].content == "a\r"
        assert fd.text == diff_text

    def test_removed_line_looking_like_header(self) -> None:
        """Body lines are consumed by count, even if they resemble headers."""
        diff_text = """\
--- a/query.sql
+++ b/query.sql
@@ -1,2 +1,2 @@
--- old comment
+++ new comment
 SELECT 1;
"""
        hunk = parse_patch(diff_text).files[0].hunks[0]

        assert [line.kind for line in hunk.lines] == [
            LineKind.REMOVED,
            LineKind.ADDED,
            LineKind.CONTEXT,
        ]
        assert hunk.lines[0].content == "-- old comment"

    def test_empty_input(self) -> None:
        """Empty input parses to an empty Patch."""
        assert parse_patch("") == Patch()
        assert len(parse_patch("")) == 0

    def test_whitespace_only_input(self) -> None:
        assert len(parse_patch("\n  \n")) == 0

    def test_patch_is_immutable(self, fixture_text) -> None:
        patch = parse_patch(fixture_text("git-multi-file.diff"))

        with pytest.raises(dataclasses.FrozenInstanceError):
            patch.files = ()  # type: ignore[misc]
        with pytest.raises(dataclasses.FrozenInstanceError):
            patch.files[0].hunks[0].old_count = 99  # type: ignore[misc]


class TestParseErrors:
    """Tests for parse failures."""

    def test_hunk_count_short_body(self) -> None:
        """A hunk declaring 5 old lines with 4 in its body fails."""
        diff_text = """\
diff --git a/app.py b/app.py
--- a/app.py
+++ b/app.py
@@ -1,5 +1,4 @@
 a
 b
 c
 d
"""
        with pytest.raises(HunkCountMismatch) as exc_info:
            parse_patch(diff_text)

        err = exc_info.value
        assert err.path == "app.py"
        assert err.hunk_index == 0
        assert err.expected == (5, 4)
        assert err.actual == (4, 4)
        assert err.line_number == 4
        assert "app.py" in str(err)
        assert "hunk #1" in str(err)

    def test_hunk_count_short_body_before_next_file(self) -> None:
        diff_text = """\
--- a/one.py
+++ b/one.py
@@ -1,3 +1,3 @@
-x
+y
 z
diff --git a/two.py b/two.py
--- a/two.py
+++ b/two.py
@@ -1 +1 @@
-a
+b
"""
        with pytest.raises(HunkCountMismatch) as exc_info:
            parse_patch(diff_text)

        assert exc_info.value.path == "one.py"
        assert exc_info.value.actual == (2, 2)

    def test_hunk_count_names_second_hunk(self) -> None:
        diff_text = """\
--- a/f.py
+++ b/f.py
@@ -1 +1 @@
-a
+b
@@ -10,3 +10,3 @@
 c
-d
+e
@@ -20 +20 @@
-f
+g
"""
        with pytest.raises(HunkCountMismatch) as exc_info:
            parse_patch(diff_text)

        assert exc_info.value.hunk_index == 1
        assert exc_info.value.expected == (3, 3)
        assert exc_info.value.actual == (2, 2)
        assert exc_info.value.line_number == 6

    def test_hunk_count_excess_body(self) -> None:
        """Body lines after the declared counts are met are a mismatch too."""
        diff_text = """\
--- a/f.py
+++ b/f.py
@@ -1,2 +1,2 @@
 a
-b
+c
+d
"""
        with pytest.raises(HunkCountMismatch) as exc_info:
            parse_patch(diff_text)

        assert exc_info.value.expected == (2, 2)
        assert exc_info.value.actual == (2, 3)

    def test_truncated_hunk_without_body(self) -> None:
        with pytest.raises(UnexpectedEndOfInput):
            parse_patch("--- a/f\n+++ b/f\n@@ -1,2 +1,2 @@\n")

    def test_truncated_mid_line(self) -> None:
        """Input cut off inside the last body line is a truncation."""
        with pytest.raises(UnexpectedEndOfInput) as exc_info:
            parse_patch("--- a/f\n+++ b/f\n@@ -1,3 +1,3 @@\n a\n b")

        assert exc_info.value.path == "f"

    def test_truncated_after_old_header(self) -> None:
        with pytest.raises(UnexpectedEndOfInput):
            parse_patch("diff --git a/f b/f\n--- a/f\n")

    def test_truncated_before_hunks(self) -> None:
        with pytest.raises(UnexpectedEndOfInput):
            parse_patch("--- a/f\n+++ b/f\n")

    def test_truncated_git_header(self) -> None:
        with pytest.raises(UnexpectedEndOfInput):
            parse_patch("diff --git a/f b/f\n")

    def test_malformed_hunk_header(self) -> None:
        diff_text = "--- a/f\n+++ b/f\n@@ -1,x +1 @@\n-a\n"

        with pytest.raises(MalformedHeader) as exc_info:
            parse_patch(diff_text)

        assert exc_info.value.line_number == 3
        assert exc_info.value.line == "@@ -1,x +1 @@"

    def test_unrecognized_extended_header(self) -> None:
        diff_text = "diff --git a/f b/f\nfrobnicate 42\n--- a/f\n+++ b/f\n@@ -1 +1 @@\n-a\n+b\n"

        with pytest.raises(MalformedHeader) as exc_info:
            parse_patch(diff_text)

        assert exc_info.value.line_number == 2
        assert exc_info.value.path == "f"

    def test_missing_new_file_header(self) -> None:
        diff_text = "diff --git a/f b/f\n--- a/f\n@@ -1 +1 @@\n-a\n+b\n"

        with pytest.raises(MalformedHeader) as exc_info:
            parse_patch(diff_text)

        assert exc_info.value.line_number == 3

    def test_garbage_between_entries(self) -> None:
        diff_text = "--- a/f\n+++ b/f\n@@ -1 +1 @@\n-a\n+b\nOnly in new: extra.txt\n"

        with pytest.raises(MalformedHeader) as exc_info:
            parse_patch(diff_text)

        assert exc_info.value.line_number == 6

    def test_text_without_file_header(self) -> None:
        with pytest.raises(MalformedHeader) as exc_info:
            parse_patch("\nthis is not a patch\n")

        assert exc_info.value.line_number == 2

    def test_error_is_all_or_nothing(self, fixture_text) -> None:
        """A single bad hunk anywhere aborts the whole parse."""
        text = fixture_text("git-multi-file.diff").replace("@@ -1,3 +0,0 @@", "@@ -1,4 +0,0 @@")

        with pytest.raises(HunkCountMismatch) as exc_info:
            parse_patch(text)

        assert exc_info.value.path == "src/main.rs"
