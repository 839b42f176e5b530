"""Literal markers that bound machine-owned regions inside comment and PR bodies.

Every marker is matched byte-for-byte. Changing any of them orphans the
comments written by earlier runs, which then get duplicated instead of updated.
"""

from __future__ import annotations

import re

COMMENT_GREETING = ":robot: OpenAI"

COMMENT_TAG = "<!-- This is an auto-generated comment by OpenAI -->"

COMMENT_REPLY_TAG = "<!-- This is an auto-generated reply by OpenAI -->"

SUMMARIZE_TAG = "<!-- This is an auto-generated comment: summarize by openai -->"

DESCRIPTION_START_TAG = "\n<!-- This is an auto-generated comment: release notes by openai -->"
DESCRIPTION_END_TAG = "<!-- end of auto-generated comment: release notes by openai -->"

RAW_SUMMARY_START_TAG = "<!-- This is an auto-generated comment: raw summary by openai -->\n<!--\n"
RAW_SUMMARY_END_TAG = "-->\n<!-- end of auto-generated comment: raw summary by openai -->"

SHORT_SUMMARY_START_TAG = "<!-- This is an auto-generated comment: short summary by openai -->\n<!--\n"
SHORT_SUMMARY_END_TAG = "-->\n<!-- end of auto-generated comment: short summary by openai -->"

COMMIT_ID_START_TAG = "<!-- commit_ids_reviewed_start -->"
COMMIT_ID_END_TAG = "<!-- commit_ids_reviewed_end -->"

_QUOTED_LINE_RE = re.compile(r"(^|\n)> .*")


def content_within(content: str, start_tag: str, end_tag: str) -> str:
    """Return the text between ``start_tag`` and ``end_tag``, or "" if either is missing."""
    start = content.find(start_tag)
    end = content.find(end_tag)
    if start >= 0 and end >= 0:
        return content[start + len(start_tag) : end]
    return ""


def remove_content_within(content: str, start_tag: str, end_tag: str) -> str:
    """Drop the region including both markers. No-op when either marker is missing."""
    start = content.find(start_tag)
    end = content.find(end_tag)
    if start >= 0 and end >= 0:
        return content[:start] + content[end + len(end_tag) :]
    return content


def wrap_region(text: str, start_tag: str, end_tag: str) -> str:
    return f"{start_tag}{text}{end_tag}"


def raw_summary(body: str) -> str:
    return content_within(body, RAW_SUMMARY_START_TAG, RAW_SUMMARY_END_TAG)


def short_summary(body: str) -> str:
    return content_within(body, SHORT_SUMMARY_START_TAG, SHORT_SUMMARY_END_TAG)


def description_without_release_notes(description: str) -> str:
    return remove_content_within(description, DESCRIPTION_START_TAG, DESCRIPTION_END_TAG)


def release_notes(description: str) -> str:
    """Release notes from a PR description, minus any quoted (``> ``) lines."""
    notes = content_within(description, DESCRIPTION_START_TAG, DESCRIPTION_END_TAG)
    return _QUOTED_LINE_RE.sub("", notes)
