"""Shared fixtures: an in-memory pull request for engine tests."""

from __future__ import annotations

import itertools

import pytest

from prledger_core.gh.base import BasePullRequest
from prledger_core.gh.models import Comment, Comparison, ReviewCommentArgs
from prledger_core.providers.base import BaseBot, Ids, Reply


class FakePullRequest(BasePullRequest):
    """BasePullRequest held entirely in memory.

    ``fail_on`` maps a method name to an exception raised on every call, and
    ``calls`` records each write so tests can assert on side effects.
    """

    def __init__(
        self,
        comments=None,
        review_comments=None,
        commits=None,
        comparisons=None,
        contents=None,
        body="",
        head_sha="head",
        base_sha="base",
        draft=False,
    ):
        self.repo_name = "owner/repo"
        self.number = 1
        self.title = "Add feature"
        self.body = body
        self.base_sha = base_sha
        self.head_sha = head_sha
        self.draft = draft
        self.description = body
        self.comments: list[Comment] = list(comments or [])
        self.review_comments: list[Comment] = list(review_comments or [])
        self.commits: list[str] = list(commits or [])
        self.comparisons: dict[tuple[str, str], Comparison] = dict(comparisons or {})
        self.contents: dict[str, str] = dict(contents or {})
        self.fail_on: dict[str, Exception] = {}
        self.calls: list[tuple] = []
        self._ids = itertools.count(1000)

    def _maybe_fail(self, name):
        if name in self.fail_on:
            raise self.fail_on[name]

    def get_description(self):
        self._maybe_fail("get_description")
        return self.description

    def update_description(self, description):
        self._maybe_fail("update_description")
        self.calls.append(("update_description", description))
        self.description = description

    def list_commits(self):
        self._maybe_fail("list_commits")
        return list(self.commits)

    def compare_commits(self, base, head):
        self._maybe_fail("compare_commits")
        self.calls.append(("compare_commits", base, head))
        return self.comparisons[(base, head)]

    def get_content(self, path, ref):
        self._maybe_fail("get_content")
        return self.contents.get(path, "")

    def list_comments(self):
        self._maybe_fail("list_comments")
        return self.comments

    def create_comment(self, body):
        self._maybe_fail("create_comment")
        comment = Comment(id=next(self._ids), body=body, author_login="bot")
        self.comments.append(comment)
        self.calls.append(("create_comment", comment.id, body))
        return comment

    def update_comment(self, comment_id, body):
        self._maybe_fail("update_comment")
        for c in self.comments:
            if c.id == comment_id:
                c.body = body
        self.calls.append(("update_comment", comment_id, body))

    def list_review_comments(self):
        self._maybe_fail("list_review_comments")
        return self.review_comments

    def create_review_comment(self, args: ReviewCommentArgs):
        self._maybe_fail("create_review_comment")
        comment = Comment(
            id=next(self._ids),
            body=args.body,
            author_login="bot",
            path=args.path,
            line=args.line,
            start_line=args.start_line,
            start_side=args.start_side,
        )
        self.review_comments.append(comment)
        self.calls.append(("create_review_comment", args))
        return comment

    def update_review_comment(self, comment_id, body):
        self._maybe_fail("update_review_comment")
        for c in self.review_comments:
            if c.id == comment_id:
                c.body = body
        self.calls.append(("update_review_comment", comment_id, body))

    def create_reply_for_review_comment(self, comment_id, body):
        self._maybe_fail("create_reply_for_review_comment")
        parent = next((c for c in self.review_comments if c.id == comment_id), None)
        comment = Comment(
            id=next(self._ids),
            body=body,
            author_login="bot",
            path=parent.path if parent else None,
            line=parent.line if parent else None,
            in_reply_to_id=comment_id,
        )
        self.review_comments.append(comment)
        self.calls.append(("create_reply", comment_id, body))
        return comment

    def writes(self, action):
        return [c for c in self.calls if c[0] == action]


class ScriptedBot(BaseBot):
    """Bot returning canned replies in order; records every message it was sent."""

    def __init__(self, replies=None, **options):
        super().__init__(**options)
        self.replies = list(replies or [])
        self.messages: list[str] = []

    def _call_api(self, message: str, ids: Ids) -> Reply:
        self.messages.append(message)
        text = self.replies.pop(0) if self.replies else ""
        return Reply(text=text, message_id=f"msg-{len(self.messages)}")


@pytest.fixture
def fake_pr():
    return FakePullRequest()


@pytest.fixture
def make_pr():
    return FakePullRequest


@pytest.fixture
def make_bot():
    return ScriptedBot
