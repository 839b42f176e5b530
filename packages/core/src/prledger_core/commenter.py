"""Idempotent publishing of bot comments onto a pull request.

Comment bodies are the only durable state. Every bot comment ends with a tag
marker so a later run can locate it again and update it in place rather than
posting a duplicate.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from prledger_core.chains import compose_comment_chain, thread_roots, top_level_of
from prledger_core.gh.base import BasePullRequest
from prledger_core.gh.models import Comment, ReviewCommentArgs, ReviewDraft
from prledger_core.markers import (
    COMMENT_GREETING,
    COMMENT_REPLY_TAG,
    COMMENT_TAG,
    DESCRIPTION_END_TAG,
    DESCRIPTION_START_TAG,
    description_without_release_notes,
    remove_content_within,
    wrap_region,
)

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    created: int = 0
    updated: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.created + self.updated + self.failed


def envelope(message: str, tag: str) -> str:
    """Wrap ``message`` with the greeting line and the trailing ownership tag."""
    return f"{COMMENT_GREETING}\n\n{message}\n\n{tag}"


class Commenter:
    """Publishes and reconciles bot comments on one pull request.

    Not safe for concurrent use: drafts are reconciled strictly one at a time
    and the comment lists are read from the adapter's per-run cache.
    """

    def __init__(self, pull_request: BasePullRequest):
        self.pull_request = pull_request
        self._drafts: list[ReviewDraft] = []

    # ------------------------------------------------------------------ #
    # Tag-addressed issue comments                                         #
    # ------------------------------------------------------------------ #

    def create_comment(self, message: str, tag: str = COMMENT_TAG) -> Comment | None:
        """Always post a new issue comment. Returns None if the write failed."""
        return self._create(envelope(message, tag or COMMENT_TAG))

    def replace_comment(self, message: str, tag: str = COMMENT_TAG) -> Comment | None:
        """Overwrite the issue comment carrying ``tag``, or create one if none does.

        Listing failures propagate; a failed write is logged and returns None.
        """
        tag = tag or COMMENT_TAG
        body = envelope(message, tag)
        existing = self.find_comment_with_tag(tag)
        if existing is None:
            return self._create(body)
        try:
            self.pull_request.update_comment(existing.id, body)
        except Exception as e:
            logger.warning("Failed to replace comment %d: %s", existing.id, e)
            return None
        return dataclasses.replace(existing, body=body)

    def find_comment_with_tag(self, tag: str) -> Comment | None:
        for comment in self.pull_request.list_comments():
            if comment.body and tag in comment.body:
                return comment
        return None

    def _create(self, body: str) -> Comment | None:
        try:
            return self.pull_request.create_comment(body)
        except Exception as e:
            logger.warning("Failed to create comment: %s", e)
            return None

    def update_description(self, message: str) -> None:
        """Replace the release-notes region of the PR description with ``message``."""
        try:
            description = description_without_release_notes(self.pull_request.get_description())
            message_clean = remove_content_within(message, DESCRIPTION_START_TAG, DESCRIPTION_END_TAG)
            region = wrap_region(f"\n{message_clean}\n", DESCRIPTION_START_TAG, DESCRIPTION_END_TAG)
            self.pull_request.update_description(f"{description}{region}")
        except Exception as e:
            logger.warning("Failed to update PR description: %s, skipping release notes.", e)

    # ------------------------------------------------------------------ #
    # Line-anchored review comments                                        #
    # ------------------------------------------------------------------ #

    @property
    def drafts(self) -> list[ReviewDraft]:
        return list(self._drafts)

    def buffer_review_comment(self, path: str, start_line: int, end_line: int, message: str) -> None:
        self._drafts.append(ReviewDraft(path, start_line, end_line, envelope(message, COMMENT_TAG)))

    def submit_review(self, commit_id: str) -> ReconcileResult:
        """Reconcile every buffered draft against existing comments, then clear the buffer.

        A draft whose anchor already holds a bot comment updates that
        comment; any other draft creates a new one. Drafts are matched only
        against the comments that existed before the batch started, so two
        drafts at the same anchor both get posted. One failed draft never
        stops the rest of the batch.
        """
        result = ReconcileResult()
        drafts = list(self._drafts)
        logger.info("Submitting review for PR #%d, total comments: %d", self.pull_request.number, len(drafts))
        try:
            if not drafts:
                return result
            try:
                existing = list(self.pull_request.list_review_comments())
            except Exception as e:
                logger.warning("Failed to list review comments, no comments posted: %s", e)
                result.failed = len(drafts)
                return result
            for i, draft in enumerate(drafts, 1):
                try:
                    updated = self._reconcile(draft, commit_id, existing)
                except Exception as e:
                    logger.warning(
                        "Failed to post review comment for %s:%d-%d: %s",
                        draft.path,
                        draft.start_line,
                        draft.end_line,
                        e,
                    )
                    result.failed += 1
                    continue
                if updated:
                    result.updated += 1
                else:
                    result.created += 1
                logger.info("Comment %d/%d posted", i, len(drafts))
        finally:
            self._drafts = []
        return result

    def _reconcile(self, draft: ReviewDraft, commit_id: str, comments: list[Comment]) -> bool:
        """Write one draft. Returns True for an in-place update, False for a create."""
        for existing in self.comments_at_range(draft.path, draft.start_line, draft.end_line, comments):
            if COMMENT_TAG in existing.body:
                logger.info("Updating review comment for %s:%d-%d", draft.path, draft.start_line, draft.end_line)
                self.pull_request.update_review_comment(existing.id, draft.message)
                return True

        logger.info("Creating new review comment for %s:%d-%d", draft.path, draft.start_line, draft.end_line)
        args = ReviewCommentArgs(commit_id=commit_id, body=draft.message, path=draft.path, line=draft.end_line)
        if not draft.is_single_line:
            args.start_line = draft.start_line
            args.start_side = "RIGHT"
        self.pull_request.create_review_comment(args)
        return False

    def comments_at_range(
        self, path: str, start_line: int, end_line: int, comments: list[Comment] | None = None
    ) -> list[Comment]:
        """Comments anchored at ``path:start_line-end_line``.

        A single-line range matches any comment ending on that line. Searches
        ``comments`` when given, the pull request's review comments otherwise.
        """
        if comments is None:
            comments = self.pull_request.list_review_comments()
        matches = []
        for c in comments:
            if c.path != path or c.body == "":
                continue
            multi_line_match = c.start_line is not None and c.start_line == start_line and c.line == end_line
            single_line_match = start_line == end_line and c.line == end_line
            if multi_line_match or single_line_match:
                matches.append(c)
        return matches

    def comments_within_range(self, path: str, start_line: int, end_line: int) -> list[Comment]:
        """Comments whose anchored range overlaps ``[start_line, end_line]``.

        Looser than comments_at_range; used to gather conversation context,
        never to decide where to write.
        """
        matches = []
        for c in self.pull_request.list_review_comments():
            if c.path != path or c.body == "" or c.line is None:
                continue
            anchor_start = c.start_line if c.start_line is not None else c.line
            if anchor_start <= end_line and c.line >= start_line:
                matches.append(c)
        return matches

    # ------------------------------------------------------------------ #
    # Conversation chains                                                  #
    # ------------------------------------------------------------------ #

    def comment_chains_within_range(self, path: str, start_line: int, end_line: int, tag: str = "") -> str:
        """Render every thread touching the range, keeping only those containing ``tag``."""
        in_range = self.comments_within_range(path, start_line, end_line)
        all_comments = self.pull_request.list_review_comments()

        all_chains = ""
        chain_num = 0
        for root in thread_roots(in_range, all_comments):
            chain = compose_comment_chain(all_comments, root)
            if tag in chain:
                chain_num += 1
                all_chains += f"Conversation Chain {chain_num}:\n{chain}\n---\n"
        return all_chains

    def get_comment_chain(self, comment: Comment) -> tuple[str, Comment | None]:
        try:
            all_comments = self.pull_request.list_review_comments()
        except Exception as e:
            logger.warning("Failed to get conversation chain: %s", e)
            return "", None
        top_level = top_level_of(comment, all_comments)
        return compose_comment_chain(all_comments, top_level), top_level

    def review_comment_reply(self, top_level: Comment, message: str) -> bool:
        """Reply in the thread of ``top_level``.

        If the reply fails, a plain-text note with the error is posted
        instead. Only after a successful reply is the root's COMMENT_TAG
        switched to COMMENT_REPLY_TAG, marking the thread as answered.
        """
        reply = f"{envelope(message, COMMENT_REPLY_TAG)}\n"
        try:
            self.pull_request.create_reply_for_review_comment(top_level.id, reply)
        except Exception as e:
            logger.warning("Failed to reply to the top-level comment: %s", e)
            try:
                self.pull_request.create_reply_for_review_comment(
                    top_level.id,
                    f"Could not post the reply to the top-level comment due to the following error: {e}",
                )
            except Exception as fallback_error:
                logger.warning("Failed to report the reply failure: %s", fallback_error)
            return False

        if COMMENT_TAG in top_level.body:
            try:
                self.pull_request.update_review_comment(
                    top_level.id, top_level.body.replace(COMMENT_TAG, COMMENT_REPLY_TAG)
                )
            except Exception as e:
                logger.warning("Failed to update the top-level comment: %s", e)
        return True
