"""Route a GitHub Actions event payload to a review pass or a follow-up reply."""

from __future__ import annotations

import logging

from prledger_core.gh.base import BasePullRequest
from prledger_core.gh.models import Comment
from prledger_core.gh.pull_request import open_pull_request
from prledger_core.providers.base import BaseBot
from prledger_core.review_comment import handle_review_comment
from prledger_core.reviewer import get_bot, run_review

logger = logging.getLogger(__name__)

REVIEW_EVENTS = ("pull_request", "pull_request_target")
REVIEW_COMMENT_EVENT = "pull_request_review_comment"


def _pr_number(payload: dict) -> int:
    if "pull_request" in payload:
        return payload["pull_request"]["number"]
    if "issue" in payload:
        return payload["issue"]["number"]
    raise ValueError("Event payload has neither a pull_request nor an issue.")


def dispatch_event(
    event_name: str,
    payload: dict,
    config: dict,
    pull_request: BasePullRequest | None = None,
    bot: BaseBot | None = None,
    light_bot: BaseBot | None = None,
):
    """Handle one event. Returns the handler's result, or None when skipped."""
    number = _pr_number(payload)

    if event_name in REVIEW_EVENTS:
        handler = "review"
    elif event_name == REVIEW_COMMENT_EVENT and payload.get("action") == "created":
        handler = "reply"
    else:
        logger.warning("Skipped: unsupported event %s (action: %s)", event_name, payload.get("action"))
        return None

    if pull_request is None:
        repo_name = payload["repository"]["full_name"]
        pull_request = open_pull_request(repo_name, number, token=config.get("github_token"))
    if bot is None:
        bot = get_bot(config)
        if handler == "review" and light_bot is None:
            light_bot = get_bot(config, light=True)

    if handler == "review":
        return run_review(pull_request, config, bot=bot, auto_confirm=True, light_bot=light_bot)

    comment = Comment.from_payload(payload["comment"])
    return handle_review_comment(pull_request, bot, comment, config)
