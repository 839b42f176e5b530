"""Tests for marker-bounded region helpers."""

from prledger_core.markers import (
    COMMENT_TAG,
    DESCRIPTION_END_TAG,
    DESCRIPTION_START_TAG,
    RAW_SUMMARY_END_TAG,
    RAW_SUMMARY_START_TAG,
    SHORT_SUMMARY_END_TAG,
    SHORT_SUMMARY_START_TAG,
    content_within,
    description_without_release_notes,
    raw_summary,
    release_notes,
    remove_content_within,
    short_summary,
    wrap_region,
)


class TestMarkerLiterals:
    def test_literals_are_stable(self):
        assert COMMENT_TAG == "<!-- This is an auto-generated comment by OpenAI -->"
        assert DESCRIPTION_START_TAG.startswith("\n<!--")
        assert RAW_SUMMARY_START_TAG.endswith("<!--\n")
        assert RAW_SUMMARY_END_TAG.startswith("-->\n")


class TestContentWithin:
    def test_returns_text_between_markers(self):
        assert content_within("a[[x]]b", "[[", "]]") == "x"

    def test_missing_start_returns_empty(self):
        assert content_within("a x]]b", "[[", "]]") == ""

    def test_missing_end_returns_empty(self):
        assert content_within("a[[x b", "[[", "]]") == ""


class TestRemoveContentWithin:
    def test_removes_region_including_markers(self):
        assert remove_content_within("a[[x]]b", "[[", "]]") == "ab"

    def test_noop_when_markers_missing(self):
        assert remove_content_within("a[[x b", "[[", "]]") == "a[[x b"


class TestSummaries:
    def test_wrapped_region_round_trips(self):
        body = "intro\n" + wrap_region("short\n", SHORT_SUMMARY_START_TAG, SHORT_SUMMARY_END_TAG)
        assert short_summary(body) == "short\n"
        assert raw_summary(body) == ""

    def test_raw_summary(self):
        body = wrap_region("a.py: 1 finding(s)\n", RAW_SUMMARY_START_TAG, RAW_SUMMARY_END_TAG)
        assert raw_summary(body) == "a.py: 1 finding(s)\n"


class TestReleaseNotes:
    def test_description_without_release_notes(self):
        description = "Human text" + DESCRIPTION_START_TAG + "\nnotes\n" + DESCRIPTION_END_TAG
        assert description_without_release_notes(description) == "Human text"

    def test_release_notes_drop_quoted_lines(self):
        description = DESCRIPTION_START_TAG + "\n- New feature\n> quoted\n" + DESCRIPTION_END_TAG
        notes = release_notes(description)
        assert "- New feature" in notes
        assert "quoted" not in notes
