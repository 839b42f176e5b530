"""Rebuild reply threads from the flat review-comment list GitHub returns."""

from __future__ import annotations

from collections.abc import Sequence

from prledger_core.gh.models import Comment

CHAIN_SEPARATOR = "\n---\n"


def top_level_of(comment: Comment, all_comments: Sequence[Comment]) -> Comment:
    """Walk ``in_reply_to_id`` links up to the thread root.

    A parent missing from ``all_comments`` ends the walk at the current comment.
    A comment seen twice ends it too, so a cyclic reply graph cannot loop.
    """
    by_id = {c.id: c for c in all_comments}
    top = comment
    seen = {top.id}
    while not top.is_top_level:
        parent = by_id.get(top.in_reply_to_id)
        if parent is None or parent.id in seen:
            break
        seen.add(parent.id)
        top = parent
    return top


def chain_entries(all_comments: Sequence[Comment], top_level: Comment) -> list[str]:
    """Render the root followed by its direct replies, in store order."""
    entries = [f"{top_level.author_login}: {top_level.body}"]
    entries.extend(f"{c.author_login}: {c.body}" for c in all_comments if c.in_reply_to_id == top_level.id)
    return entries


def compose_comment_chain(all_comments: Sequence[Comment], top_level: Comment) -> str:
    return CHAIN_SEPARATOR.join(chain_entries(all_comments, top_level))


def thread_roots(comments: Sequence[Comment], all_comments: Sequence[Comment]) -> list[Comment]:
    """Distinct thread roots of ``comments``, in first-seen order."""
    roots: list[Comment] = []
    seen: set[int] = set()
    for comment in comments:
        root = top_level_of(comment, all_comments)
        if root.id not in seen:
            seen.add(root.id)
            roots.append(root)
    return roots
