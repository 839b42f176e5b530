"""Abstract pull-request interface.

This is the complete set of calls the engine issues against the hosting
system. The engine depends on BasePullRequest rather than on PyGithub, so a
GitHub-backed, shadow (dry-run) or in-memory implementation can be swapped in
without touching it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prledger_core.gh.models import Comment, Comparison, ReviewCommentArgs


class BasePullRequest(ABC):
    """One pull request and the comments attached to it.

    List operations return fully materialised sequences. Implementations may
    cache them for their own lifetime, which is a single run.
    """

    repo_name: str
    number: int
    title: str
    body: str
    base_sha: str
    head_sha: str
    draft: bool = False

    # ------------------------------------------------------------------ #
    # Description                                                          #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def get_description(self) -> str:
        """Fetch the current PR description ("" when unset)."""

    @abstractmethod
    def update_description(self, description: str) -> None:
        """Overwrite the PR description."""

    # ------------------------------------------------------------------ #
    # Commits and content                                                  #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def list_commits(self) -> list[str]:
        """Return the PR commit SHAs, oldest first."""

    @abstractmethod
    def compare_commits(self, base: str, head: str) -> Comparison:
        """Return the commits and changed files between two refs."""

    @abstractmethod
    def get_content(self, path: str, ref: str) -> str | None:
        """Return the decoded file content at ``ref``, or None for non-files."""

    # ------------------------------------------------------------------ #
    # Issue (top-level) comments                                           #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def list_comments(self) -> list[Comment]:
        """Return every issue comment on the PR."""

    @abstractmethod
    def create_comment(self, body: str) -> Comment:
        """Create an issue comment."""

    @abstractmethod
    def update_comment(self, comment_id: int, body: str) -> None:
        """Overwrite the body of an issue comment."""

    # ------------------------------------------------------------------ #
    # Review (line-anchored) comments                                      #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def list_review_comments(self) -> list[Comment]:
        """Return every line-anchored review comment on the PR."""

    @abstractmethod
    def create_review_comment(self, args: ReviewCommentArgs) -> Comment:
        """Create a line-anchored review comment."""

    @abstractmethod
    def update_review_comment(self, comment_id: int, body: str) -> None:
        """Overwrite the body of a review comment."""

    @abstractmethod
    def create_reply_for_review_comment(self, comment_id: int, body: str) -> Comment:
        """Reply in the thread of a top-level review comment."""
