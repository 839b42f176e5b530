"""Reviewed-commit ledger embedded in the summary comment body.

The ledger is a marker-bounded region holding one ``<!-- sha -->`` entry per
reviewed commit, oldest first:

    <!-- commit_ids_reviewed_start -->
    <!-- 1f0c... -->
    <!-- 9ab3... -->
    <!-- commit_ids_reviewed_end -->

Entries are only ever appended. Nothing here rewrites or reorders an
existing entry.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable

from prledger_core.markers import COMMIT_ID_END_TAG, COMMIT_ID_START_TAG


def _region(body: str) -> tuple[int, int] | None:
    """Bounds of the last start marker and the first end marker after it."""
    start = body.rfind(COMMIT_ID_START_TAG)
    if start == -1:
        return None
    end = body.find(COMMIT_ID_END_TAG, start)
    if end == -1:
        return None
    return start, end


def reviewed_commit_ids(body: str) -> list[str]:
    """Return the reviewed SHAs in ledger order, or [] when the region is absent."""
    bounds = _region(body)
    if bounds is None:
        return []
    start, end = bounds
    ids = body[start + len(COMMIT_ID_START_TAG) : end]
    return [entry.replace("-->", "").strip() for entry in ids.split("<!--") if entry.replace("-->", "").strip()]


def reviewed_commit_ids_block(body: str) -> str:
    """Return the ledger region including both markers, or "" when absent."""
    bounds = _region(body)
    if bounds is None:
        return ""
    start, end = bounds
    return body[start : end + len(COMMIT_ID_END_TAG)]


def append_commit_id(body: str, commit_id: str) -> str:
    """Append ``commit_id`` after the last ledger entry, creating the region if needed."""
    bounds = _region(body)
    if bounds is None:
        return f"{body}\n{COMMIT_ID_START_TAG}\n<!-- {commit_id} -->\n{COMMIT_ID_END_TAG}"
    _, end = bounds
    return f"{body[:end]}<!-- {commit_id} -->\n{body[end:]}"


def append_commit_ids(body: str, commit_ids: Iterable[str]) -> str:
    """Append several SHAs in order, skipping any already recorded."""
    seen = set(reviewed_commit_ids(body))
    for commit_id in commit_ids:
        if commit_id in seen:
            continue
        body = append_commit_id(body, commit_id)
        seen.add(commit_id)
    return body


def highest_reviewed_commit_id(commit_ids: Iterable[str], reviewed_ids: Collection[str]) -> str | None:
    """Return the first SHA of ``commit_ids`` (in the given order) already in ``reviewed_ids``.

    Callers that want the most recent reviewed commit pass the PR commits
    newest-first. Iteration is by value so the result is always a SHA.
    """
    for commit_id in commit_ids:
        if commit_id in reviewed_ids:
            return commit_id
    return None
