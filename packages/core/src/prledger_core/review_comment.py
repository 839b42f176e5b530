"""Follow-up replies on review-comment threads the bot takes part in."""

from __future__ import annotations

import logging

from github import GithubException

from prledger_core.commenter import Commenter
from prledger_core.gh.base import BasePullRequest
from prledger_core.gh.models import Comment
from prledger_core.markers import COMMENT_REPLY_TAG, COMMENT_TAG, SUMMARIZE_TAG, short_summary
from prledger_core.prompts import build_reply_prompt
from prledger_core.providers.base import BaseBot, Ids
from prledger_core.utils.patch import hunk_for_range, parse_hunks

logger = logging.getLogger(__name__)


def _file_diff(pull_request: BasePullRequest, path: str) -> str:
    try:
        comparison = pull_request.compare_commits(pull_request.base_sha, pull_request.head_sha)
    except GithubException as e:
        logger.warning("Failed to fetch the diff for %s: %s", path, e)
        return ""
    for f in comparison.files:
        if f.filename == path:
            return f.patch or ""
    return ""


def handle_review_comment(pull_request: BasePullRequest, bot: BaseBot, comment: Comment, config: dict) -> bool:
    """Answer a human comment in a review thread. Returns True if a reply was posted.

    The bot only joins threads it already owns, or where it was mentioned.
    """
    if COMMENT_TAG in comment.body or COMMENT_REPLY_TAG in comment.body:
        logger.info("Skipped: comment %d was written by the bot", comment.id)
        return False
    if not comment.path:
        logger.info("Skipped: comment %d is not anchored to a file", comment.id)
        return False

    commenter = Commenter(pull_request)
    chain, top_level = commenter.get_comment_chain(comment)
    if top_level is None:
        logger.warning("No conversation chain found for comment %d", comment.id)
        return False

    mention = config.get("bot_mention") or ""
    owned = COMMENT_TAG in chain or COMMENT_REPLY_TAG in chain
    if not owned and not (mention and mention in comment.body):
        logger.info("Skipped: comment %d is not in a bot thread and does not mention %s", comment.id, mention)
        return False

    summary = commenter.find_comment_with_tag(SUMMARIZE_TAG)
    file_diff = _file_diff(pull_request, comment.path)
    diff_hunk = ""
    if file_diff and comment.line is not None:
        start = comment.start_line if comment.start_line is not None else comment.line
        hunk = hunk_for_range(parse_hunks(file_diff), start, comment.line)
        diff_hunk = hunk.text if hunk else ""

    prompt = build_reply_prompt(
        file_name=comment.path,
        short_summary=short_summary(summary.body) if summary else "",
        file_diff=file_diff,
        diff_hunk=diff_hunk,
        chain=chain,
        comment_body=comment.body,
    )
    text, _ = bot.chat(prompt, Ids())
    if not text:
        logger.warning("No reply generated for comment %d", comment.id)
        return False
    return commenter.review_comment_reply(top_level, text)
