"""Tests for conversation-chain reconstruction."""

from prledger_core.chains import CHAIN_SEPARATOR, chain_entries, compose_comment_chain, thread_roots, top_level_of
from prledger_core.gh.models import Comment


def c(id, body="", author="alice", reply_to=None):
    return Comment(id=id, body=body, author_login=author, path="a.py", line=5, in_reply_to_id=reply_to)


class TestTopLevelOf:
    def test_walks_to_root(self):
        comments = [c(1), c(2, reply_to=1), c(3, reply_to=2)]
        assert top_level_of(comments[2], comments).id == 1

    def test_missing_parent_stops_at_current(self):
        orphan = c(5, reply_to=99)
        assert top_level_of(orphan, [orphan]).id == 5

    def test_cycle_terminates(self):
        comments = [c(1, reply_to=2), c(2, reply_to=1)]
        assert top_level_of(comments[0], comments).id in (1, 2)

    def test_root_returns_itself(self):
        root = c(1)
        assert top_level_of(root, [root]) is root


class TestComposeCommentChain:
    def test_root_then_direct_replies(self):
        comments = [c(1, "root", "bot"), c(2, "first", "alice", 1), c(3, "other")]
        assert compose_comment_chain(comments, comments[0]) == CHAIN_SEPARATOR.join(["bot: root", "alice: first"])

    def test_root_only(self):
        root = c(1, "alone", "bob")
        assert compose_comment_chain([root], root) == "bob: alone"


class TestThreadRoots:
    def test_distinct_roots_in_first_seen_order(self):
        comments = [c(1), c(2, reply_to=1), c(3), c(4, reply_to=3)]
        roots = thread_roots([comments[3], comments[1], comments[0]], comments)
        assert [r.id for r in roots] == [3, 1]


class TestChainEntries:
    def test_root_then_replies_by_author(self):
        comments = [c(1, "root", "A"), c(2, "first", "B", 1), c(3, "second", "C", 1)]
        assert chain_entries(comments, comments[0]) == ["A: root", "B: first", "C: second"]
