"""Prompt construction and response parsing for reviews, summaries, release notes and replies."""

from __future__ import annotations

import json
import logging
import re

from prledger_core.utils.patch import Hunk, number_new_lines

logger = logging.getLogger(__name__)


def build_review_prompt(
    title: str,
    description: str,
    file_name: str,
    hunks: list[Hunk],
    file_content: str,
    prior_conversations: str = "",
) -> str:
    numbered = "\n\n".join(f"---new_hunk---\n{number_new_lines(h)}" for h in hunks)
    conversation_section = ""
    if prior_conversations:
        conversation_section = f"""
## Earlier conversations on these lines
{prior_conversations}
"""
    return f"""You are reviewing `{file_name}` in pull request "{title}".

## PR Description
{description}

## Full File Content
{file_content}

## Changes (new-file line numbers on the left)
{numbered}
{conversation_section}
### Output Format:
Respond with **only** a valid JSON list:

[
  {{
    "start_line": <first new-file line the comment applies to (integer)>,
    "end_line": <last new-file line the comment applies to (integer)>,
    "comment": "<concise, actionable comment in GitHub-flavored markdown>"
  }},
  ...
]

Both lines must fall inside a single hunk above. If a change looks fine, say
"LGTM!" for that range or omit it.

If there are no issues, return: []
Do not return any text outside the JSON block."""


def build_file_summary_prompt(title: str, description: str, file_name: str, patch: str) -> str:
    return f"""Summarize the changes to `{file_name}` in pull request "{title}"
in one or two sentences, within 40 words. Describe what changed and why it
matters, not how the diff looks. Reply with the summary only.

## PR Description
{description}

## Diff
{patch}"""


def build_summarize_prompt(title: str, description: str, file_summaries: str) -> str:
    """Prompt for the overall summary, built from the per-file summaries."""
    return f"""Pull request "{title}" changes the files below. Each line is
`<file>: <summary of its changes>`.

## PR Description
{description}

## File summaries
{file_summaries or "(no file summaries available)"}

Provide your final response in the `markdown` format with the following content:
- High-level summary (comment on the overall change instead of specific files
  within 80 words)
- Table of files and their summaries. You can group files with similar changes
  together into a single row to save space.

Avoid additional commentary as this summary will be added as a comment on the
GitHub pull request."""


def build_release_notes_prompt(
    title: str, description: str, file_names: list[str], previous_notes: str = ""
) -> str:
    files = "\n".join(f"- {name}" for name in file_names)
    previous_section = ""
    if previous_notes.strip():
        previous_section = f"""

Release notes written for earlier commits of this pull request (update them
to cover the new changes rather than starting over):
{previous_notes.strip()}"""
    return f"""Create concise release notes in `markdown` format for this pull request,
focusing on its purpose and user story. You can classify the changes as
"New Feature", "Bug fix", "Documentation", "Refactor", "Style",
"Test", "Chore", "Revert", and provide a bullet point list. Keep your
response within 50-100 words. Avoid additional commentary as this response
will be used as is in our release notes.

Title: {title}

Description:
{description}

Files changed:
{files}{previous_section}"""


def build_reply_prompt(
    file_name: str,
    short_summary: str,
    file_diff: str,
    diff_hunk: str,
    chain: str,
    comment_body: str,
) -> str:
    return f"""A reviewer replied to a comment thread on `{file_name}`.

## Pull request summary
{short_summary or "(no summary available)"}

## File diff
{file_diff or "(diff unavailable)"}

## Lines under discussion
{diff_hunk or "(not available)"}

## Conversation so far
{chain}

## Latest comment
{comment_body}

Reply directly to the latest comment. Be concise and concrete; suggest code
where it helps. Do not repeat earlier messages."""


def parse_findings(raw: str) -> list[dict]:
    """Parse the model's JSON response into ``{"start_line", "end_line", "comment"}`` dicts.

    Entries with missing or non-integer lines, or an empty comment, are
    dropped. A single ``line`` key is accepted as a one-line range, and a
    reversed range is swapped into order.
    """
    try:
        # Strip only the outer ```json ... ``` fence, not backticks inside comments.
        cleaned = re.sub(r"^```(?:json)?\s*", "", raw.strip())
        cleaned = re.sub(r"\s*```$", "", cleaned.strip())
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning("Failed to parse review response as JSON: %s", raw[:200])
        return []
    if not isinstance(data, list):
        logger.warning("Review response is not a JSON list: %s", raw[:200])
        return []

    findings = []
    for item in data:
        if not isinstance(item, dict):
            continue
        start = item.get("start_line", item.get("line"))
        end = item.get("end_line", start)
        text = (item.get("comment") or "").strip()
        if not isinstance(start, int) or not isinstance(end, int) or not text:
            continue
        if start > end:
            start, end = end, start
        findings.append({"start_line": start, "end_line": end, "comment": text})
    return findings
