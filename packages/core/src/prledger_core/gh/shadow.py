"""Shadow pull request: reads from GitHub, keeps every write local.

Used by ``prledger review --shadow``. The full reconciliation runs against
the real comment lists, but creates and updates land on local copies and are
recorded in ``writes`` for display instead of being posted.
"""

from __future__ import annotations

import copy
import itertools
from typing import TYPE_CHECKING

from prledger_core.gh.base import BasePullRequest
from prledger_core.gh.models import Comment

if TYPE_CHECKING:
    from prledger_core.gh.models import Comparison, ReviewCommentArgs


class ShadowPullRequest(BasePullRequest):
    """Wraps another BasePullRequest and never forwards a write to it.

    Comments created here get negative ids so they cannot collide with real ones.
    """

    def __init__(self, upstream: BasePullRequest):
        self._upstream = upstream
        self.repo_name = upstream.repo_name
        self.number = upstream.number
        self.title = upstream.title
        self.body = upstream.body
        self.base_sha = upstream.base_sha
        self.head_sha = upstream.head_sha
        self.draft = upstream.draft
        self.writes: list[dict] = []
        self._ids = itertools.count(-1, -1)
        self._description: str | None = None
        self._comments: list[Comment] | None = None
        self._review_comments: list[Comment] | None = None

    def get_description(self) -> str:
        if self._description is None:
            return self._upstream.get_description()
        return self._description

    def update_description(self, description: str) -> None:
        self._description = description
        self.writes.append({"action": "update_description", "body": description})

    def list_commits(self) -> list[str]:
        return self._upstream.list_commits()

    def compare_commits(self, base: str, head: str) -> Comparison:
        return self._upstream.compare_commits(base, head)

    def get_content(self, path: str, ref: str) -> str | None:
        return self._upstream.get_content(path, ref)

    def list_comments(self) -> list[Comment]:
        if self._comments is None:
            self._comments = copy.deepcopy(self._upstream.list_comments())
        return self._comments

    def create_comment(self, body: str) -> Comment:
        comment = Comment(id=next(self._ids), body=body, author_login="prledger")
        self.list_comments().append(comment)
        self.writes.append({"action": "create_comment", "id": comment.id, "body": body})
        return comment

    def update_comment(self, comment_id: int, body: str) -> None:
        _set_body(self.list_comments(), comment_id, body)
        self.writes.append({"action": "update_comment", "id": comment_id, "body": body})

    def list_review_comments(self) -> list[Comment]:
        if self._review_comments is None:
            self._review_comments = copy.deepcopy(self._upstream.list_review_comments())
        return self._review_comments

    def create_review_comment(self, args: ReviewCommentArgs) -> Comment:
        comment = Comment(
            id=next(self._ids),
            body=args.body,
            author_login="prledger",
            path=args.path,
            line=args.line,
            start_line=args.start_line,
            start_side=args.start_side,
        )
        self.list_review_comments().append(comment)
        self.writes.append(
            {
                "action": "create_review_comment",
                "id": comment.id,
                "path": args.path,
                "start_line": args.start_line or args.line,
                "line": args.line,
                "body": args.body,
            }
        )
        return comment

    def update_review_comment(self, comment_id: int, body: str) -> None:
        target = _set_body(self.list_review_comments(), comment_id, body)
        self.writes.append(
            {
                "action": "update_review_comment",
                "id": comment_id,
                "path": target.path if target else None,
                "line": target.line if target else None,
                "body": body,
            }
        )

    def create_reply_for_review_comment(self, comment_id: int, body: str) -> Comment:
        parent = next((c for c in self.list_review_comments() if c.id == comment_id), None)
        comment = Comment(
            id=next(self._ids),
            body=body,
            author_login="prledger",
            path=parent.path if parent else None,
            line=parent.line if parent else None,
            in_reply_to_id=comment_id,
        )
        self.list_review_comments().append(comment)
        self.writes.append({"action": "create_reply", "id": comment.id, "in_reply_to_id": comment_id, "body": body})
        return comment


def _set_body(comments: list[Comment], comment_id: int, body: str) -> Comment | None:
    for comment in comments:
        if comment.id == comment_id:
            comment.body = body
            return comment
    return None
