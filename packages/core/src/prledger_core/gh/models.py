"""Typed records exchanged with the hosting API.

Only the fields the engine reads or writes are carried. PyGithub objects and
webhook payload dicts are converted here, at the boundary, so nothing
downstream deals with loosely-shaped data.
"""

from __future__ import annotations

from dataclasses import dataclass, field


def _require_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Comment {name} must be an integer, got {value!r}")
    return value


def _optional_int(value) -> int | None:
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


@dataclass
class Comment:
    """An issue comment or a line-anchored review comment.

    Issue comments leave the anchor fields (path, line, start_line, ...) as None.
    """

    id: int
    body: str
    author_login: str = ""
    path: str | None = None
    line: int | None = None
    start_line: int | None = None
    start_side: str | None = None
    in_reply_to_id: int | None = None

    @property
    def is_top_level(self) -> bool:
        return self.in_reply_to_id is None

    @classmethod
    def from_github(cls, raw) -> Comment:
        """Build from a PyGithub ``IssueComment`` or ``PullRequestComment``."""
        user = getattr(raw, "user", None)
        return cls(
            id=_require_int(raw.id, "id"),
            body=raw.body or "",
            author_login=(user.login if user is not None else "") or "",
            path=getattr(raw, "path", None),
            line=_optional_int(getattr(raw, "line", None)),
            start_line=_optional_int(getattr(raw, "start_line", None)),
            start_side=getattr(raw, "start_side", None),
            in_reply_to_id=_optional_int(getattr(raw, "in_reply_to_id", None)),
        )

    @classmethod
    def from_payload(cls, data: dict) -> Comment:
        """Build from the ``comment`` object of a webhook event payload."""
        user = data.get("user") or {}
        return cls(
            id=_require_int(data.get("id"), "id"),
            body=data.get("body") or "",
            author_login=user.get("login") or "",
            path=data.get("path"),
            line=_optional_int(data.get("line")),
            start_line=_optional_int(data.get("start_line")),
            start_side=data.get("start_side"),
            in_reply_to_id=_optional_int(data.get("in_reply_to_id")),
        )


@dataclass
class ReviewDraft:
    """A buffered finding that has not been written to the PR yet."""

    path: str
    start_line: int
    end_line: int
    message: str

    @property
    def is_single_line(self) -> bool:
        return self.start_line == self.end_line


@dataclass
class ReviewCommentArgs:
    """Payload for creating a line-anchored review comment.

    ``start_line``/``start_side`` are set only for multi-line anchors.
    """

    commit_id: str
    body: str
    path: str
    line: int
    start_line: int | None = None
    start_side: str | None = None


@dataclass
class FileChange:
    filename: str
    status: str
    patch: str = ""


@dataclass
class Comparison:
    """Result of comparing two refs: commit SHAs in order and the changed files."""

    commits: list[str] = field(default_factory=list)
    files: list[FileChange] = field(default_factory=list)
