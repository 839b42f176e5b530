"""Tests for unified-diff hunk parsing."""

from prledger_core.utils.patch import Hunk, hunk_for_range, number_new_lines, parse_hunks

PATCH = """@@ -1,2 +1,3 @@
 line1
+new line
 line2
@@ -10,3 +11,2 @@
 ctx
-removed
 ctx2
@@ -20,2 +20,0 @@
-gone
-gone2"""


class TestParseHunks:
    def test_new_file_ranges(self):
        hunks = parse_hunks(PATCH)
        assert [(h.start_line, h.end_line) for h in hunks] == [(1, 3), (11, 12)]

    def test_pure_deletion_dropped(self):
        assert parse_hunks("@@ -5,2 +4,0 @@\n-a\n-b") == []

    def test_count_defaults_to_one(self):
        assert [(h.start_line, h.end_line) for h in parse_hunks("@@ -1 +1 @@\n-a\n+b")] == [(1, 1)]

    def test_empty_patch(self):
        assert parse_hunks("") == []


class TestHunkForRange:
    def test_range_inside_hunk(self):
        hunks = parse_hunks(PATCH)
        assert hunk_for_range(hunks, 11, 12).start_line == 11

    def test_range_spanning_hunks_rejected(self):
        assert hunk_for_range(parse_hunks(PATCH), 2, 11) is None


class TestNumberNewLines:
    def test_numbers_only_new_file_lines(self):
        hunk = Hunk(11, 12, "@@ -10,3 +11,2 @@\n ctx\n-removed\n ctx2")
        lines = number_new_lines(hunk).splitlines()
        assert lines[0].strip().startswith("11")
        assert lines[1].strip() == "-removed"
        assert lines[2].strip().startswith("12")
