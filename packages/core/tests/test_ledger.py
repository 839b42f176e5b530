"""Tests for the reviewed-commit ledger."""

from prledger_core.ledger import (
    append_commit_id,
    append_commit_ids,
    highest_reviewed_commit_id,
    reviewed_commit_ids,
    reviewed_commit_ids_block,
)
from prledger_core.markers import COMMIT_ID_END_TAG, COMMIT_ID_START_TAG

LEDGER = f"summary\n{COMMIT_ID_START_TAG}\n<!-- c1 -->\n<!-- c2 -->\n{COMMIT_ID_END_TAG}\ntrailer"


class TestReviewedCommitIds:
    def test_reads_ids_in_order(self):
        assert reviewed_commit_ids(LEDGER) == ["c1", "c2"]

    def test_absent_region_is_empty(self):
        assert reviewed_commit_ids("no ledger here") == []

    def test_missing_end_marker_is_empty(self):
        assert reviewed_commit_ids(f"{COMMIT_ID_START_TAG}\n<!-- c1 -->") == []

    def test_block_includes_both_markers(self):
        block = reviewed_commit_ids_block(LEDGER)
        assert block.startswith(COMMIT_ID_START_TAG)
        assert block.endswith(COMMIT_ID_END_TAG)
        assert "trailer" not in block

    def test_block_absent(self):
        assert reviewed_commit_ids_block("nothing") == ""

    def test_stray_end_marker_before_region(self):
        body = f"quoted {COMMIT_ID_END_TAG}\n{LEDGER}"
        assert reviewed_commit_ids(body) == ["c1", "c2"]
        assert reviewed_commit_ids_block(body).startswith(COMMIT_ID_START_TAG)


class TestAppendCommitId:
    def test_creates_region_when_absent(self):
        body = append_commit_id("summary", "c1")
        assert body == f"summary\n{COMMIT_ID_START_TAG}\n<!-- c1 -->\n{COMMIT_ID_END_TAG}"
        assert reviewed_commit_ids(body) == ["c1"]

    def test_appends_after_last_entry(self):
        body = append_commit_id(LEDGER, "c3")
        assert reviewed_commit_ids(body) == ["c1", "c2", "c3"]
        assert body.endswith("trailer")

    def test_existing_entries_untouched(self):
        body = append_commit_id(LEDGER, "c3")
        assert body.startswith(LEDGER[: LEDGER.index(COMMIT_ID_END_TAG)])

    def test_append_many_skips_recorded(self):
        body = append_commit_ids(LEDGER, ["c2", "c3", "c3", "c4"])
        assert reviewed_commit_ids(body) == ["c1", "c2", "c3", "c4"]

    def test_stray_end_marker_does_not_grow_new_regions(self):
        body = f"quoted {COMMIT_ID_END_TAG}\nsummary"
        body = append_commit_id(body, "c1")
        body = append_commit_id(body, "c2")
        assert body.count(COMMIT_ID_START_TAG) == 1
        assert reviewed_commit_ids(body) == ["c1", "c2"]

    def test_orphan_start_marker_does_not_break_later_region(self):
        body = append_commit_id(f"{COMMIT_ID_START_TAG} cut off\nsummary", "c1")
        body = append_commit_id(body, "c2")
        assert reviewed_commit_ids(body) == ["c1", "c2"]


class TestHighestReviewedCommitId:
    def test_returns_first_match_in_given_order(self):
        assert highest_reviewed_commit_id(["c3", "c2", "c1"], ["c1", "c2"]) == "c2"

    def test_returns_none_without_match(self):
        assert highest_reviewed_commit_id(["c3"], ["c1"]) is None

    def test_empty_inputs(self):
        assert highest_reviewed_commit_id([], []) is None

    def test_by_value_with_set(self):
        assert highest_reviewed_commit_id(["c1", "c2", "c3"], {"c2"}) == "c2"


class TestLedgerRoundTrip:
    def test_sequence_preserved(self):
        shas = ["f" * 40, "0" * 40, "a1b2c3", "deadbeef"]
        body = "summary"
        for sha in shas:
            body = append_commit_id(body, sha)
        assert reviewed_commit_ids(body) == shas
