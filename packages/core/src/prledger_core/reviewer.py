"""Core PR review orchestration: one incremental review pass."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

from github import GithubException
from rich.console import Console

from prledger_core.commenter import Commenter, ReconcileResult
from prledger_core.config import load_system_message
from prledger_core.gh.base import BasePullRequest
from prledger_core.gh.models import Comparison, FileChange
from prledger_core.ledger import append_commit_ids, highest_reviewed_commit_id, reviewed_commit_ids, reviewed_commit_ids_block
from prledger_core.markers import (
    COMMENT_REPLY_TAG,
    RAW_SUMMARY_END_TAG,
    RAW_SUMMARY_START_TAG,
    SHORT_SUMMARY_END_TAG,
    SHORT_SUMMARY_START_TAG,
    SUMMARIZE_TAG,
    description_without_release_notes,
    raw_summary,
    release_notes,
    wrap_region,
)
from prledger_core.prompts import (
    build_file_summary_prompt,
    build_release_notes_prompt,
    build_review_prompt,
    build_summarize_prompt,
    parse_findings,
)
from prledger_core.providers.anthropic import AnthropicBot
from prledger_core.providers.base import BaseBot, Ids
from prledger_core.providers.openai import OpenAIBot
from prledger_core.utils.patch import hunk_for_range, parse_hunks
from prledger_core.utils.paths import PathFilter, is_code_file

console = Console()
logger = logging.getLogger(__name__)

_REVIEWABLE_STATUSES = ("added", "modified", "renamed")


@dataclass
class ReviewSummary:
    """Result returned by run_review, for the CLI to report."""

    repo: str
    pr_number: int
    head_sha: str
    base_sha: str | None = None  # anchor of an incremental review; None for a full review
    reviewed_commits: list[str] = field(default_factory=list)
    reviewed_files: list[str] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)
    created: int = 0
    updated: int = 0
    failed: int = 0
    reviewed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def total_comments(self) -> int:
        return self.created + self.updated


def get_bot(config: dict, light: bool = False) -> BaseBot:
    """Build the review bot, or with ``light=True`` the bot used for summaries."""
    model_name = config.get("model_name")
    if light:
        model_name = config.get("light_model_name") or model_name
    options = {
        "system_message": load_system_message(config),
        "model": model_name,
        "temperature": config.get("temperature"),
        "retries": config.get("retries", 3),
        "timeout_ms": config.get("timeout_ms", 120000),
        "debug": config.get("debug", False),
    }
    model = config["model"]
    if model == "anthropic":
        return AnthropicBot(api_key=config["anthropic_api_key"], **options)
    if model == "openai":
        return OpenAIBot(api_key=config["openai_api_key"], base_url=config.get("api_base_url"), **options)
    raise ValueError(f"Unknown model provider: {model!r}. Choose 'anthropic' or 'openai'.")


def _strip_comment_close(text: str) -> str:
    # Region payloads live inside an HTML comment; a stray "-->" would end it early.
    return text.replace("-->", "-- >")


def _one_line(text: str) -> str:
    return " ".join(text.split())


def _merge_raw_summary(previous_raw: str, file_summary: list[dict]) -> str:
    """Carry per-file lines from earlier passes forward, overwriting files reviewed now.

    A file reviewed now gets its model summary, or its finding count when the
    summary came back empty.
    """
    entries: dict[str, str] = {}
    for line in previous_raw.splitlines():
        path, sep, rest = line.partition(": ")
        if sep:
            entries[path] = rest
    for f in file_summary:
        if not f["skipped"] and f["error"] is None:
            entries[f["filename"]] = _one_line(f.get("summary") or "") or f"{f['count']} finding(s)"
    return "\n".join(f"{path}: {rest}" for path, rest in entries.items())


def _verdict(file_summary: list[dict]) -> str:
    flagged = sorted(
        (f for f in file_summary if not f["skipped"] and f["error"] is None and f["count"]),
        key=lambda f: f["count"],
        reverse=True,
    )
    if not flagged:
        return "No issues found. The changes look good."
    total = sum(f["count"] for f in flagged)
    return f"{total} finding(s) across {len(flagged)} file(s). Most flagged: `{flagged[0]['filename']}`."


def _build_summary(
    file_summary: list[dict],
    result: ReconcileResult,
    elapsed_seconds: float,
    incremental_info: dict | None = None,
    overview: str = "",
) -> str:
    """Build the human-readable part of the summary comment."""
    reviewed = [f for f in file_summary if not f["skipped"] and f["error"] is None]
    skipped = [f for f in file_summary if f["skipped"]]
    errors = [f for f in file_summary if f["error"] is not None]

    elapsed_min = elapsed_seconds / 60
    if elapsed_min < 1:
        time_str = f"{int(elapsed_seconds)}s"
    else:
        time_str = f"{elapsed_min:.1f} min"

    lines = ["## Review summary\n"]

    if incremental_info:
        base = incremental_info["base_sha"][:7]
        head = incremental_info["head_sha"][:7]
        lines.append(f"_Incremental review: `{base}` → `{head}`_\n")

    if overview:
        lines.append(f"{overview.strip()}\n")

    lines.append(f"> {_verdict(file_summary)}\n")

    lines.append(
        f"**{len(reviewed)}** file(s) reviewed"
        + (f", **{len(skipped)}** skipped" if skipped else "")
        + (f", **{len(errors)}** error(s)" if errors else "")
        + f" · **{result.created}** new, **{result.updated}** updated comment(s)"
        + (f", **{result.failed}** failed" if result.failed else "")
        + f" · reviewed in {time_str}\n"
    )

    files_with_findings = [f for f in reviewed if f["count"] > 0]
    if files_with_findings:
        lines.append("| File | Findings |")
        lines.append("|------|:--------:|")
        for f in files_with_findings:
            lines.append(f"| `{f['filename']}` | {f['count']} |")

    clean_files = [f for f in reviewed if f["count"] == 0]
    if clean_files:
        lines.append(f"\n_Clean: {len(clean_files)} file(s) with no issues._")

    if errors:
        lines.append("\n**Could not fetch:**")
        for f in errors:
            lines.append(f"- `{f['filename']}`: {f['error']}")

    return "\n".join(lines)


def compose_summary_body(
    summary_markdown: str,
    short_summary: str,
    raw: str,
    previous_body: str,
    reviewed_commits: list[str],
) -> str:
    """Assemble the summary comment, carrying the previous ledger forward and appending to it."""
    short_region = wrap_region(_strip_comment_close(short_summary) + "\n", SHORT_SUMMARY_START_TAG, SHORT_SUMMARY_END_TAG)
    raw_region = wrap_region(_strip_comment_close(raw) + "\n", RAW_SUMMARY_START_TAG, RAW_SUMMARY_END_TAG)
    body = f"{summary_markdown}\n\n{short_region}\n{raw_region}\n"
    previous_block = reviewed_commit_ids_block(previous_body)
    if previous_block:
        body += previous_block
    return append_commit_ids(body, reviewed_commits)


def review_file(
    bot: BaseBot,
    commenter: Commenter,
    pull_request: BasePullRequest,
    file: FileChange,
    patch: str,
    file_content: str,
    config: dict,
) -> int:
    """Ask the bot about one file and buffer its findings. Returns the number buffered."""
    hunks = parse_hunks(patch)
    if not hunks:
        return 0

    prior_conversations = "".join(
        commenter.comment_chains_within_range(file.filename, h.start_line, h.end_line, COMMENT_REPLY_TAG) for h in hunks
    )
    prompt = build_review_prompt(
        title=pull_request.title,
        description=description_without_release_notes(pull_request.body),
        file_name=file.filename,
        hunks=hunks,
        file_content=file_content,
        prior_conversations=prior_conversations,
    )
    text, _ = bot.chat(prompt, Ids())
    if not text:
        logger.warning("No usable review returned for %s", file.filename)
        return 0

    buffered = 0
    for finding in parse_findings(text):
        start, end, comment = finding["start_line"], finding["end_line"], finding["comment"]
        if hunk_for_range(hunks, start, end) is None:
            logger.debug("Skipping finding for %s:%d-%d (outside diff hunks)", file.filename, start, end)
            continue
        if "LGTM" in comment and not config.get("review_comment_lgtm", False):
            continue
        commenter.buffer_review_comment(file.filename, start, end, comment)
        buffered += 1
    return buffered


def summarize_file(bot: BaseBot, pull_request: BasePullRequest, file: FileChange, patch: str) -> str:
    """One-line model summary of a file's changes, or "" when the bot had nothing usable."""
    prompt = build_file_summary_prompt(
        title=pull_request.title,
        description=description_without_release_notes(pull_request.body),
        file_name=file.filename,
        patch=patch,
    )
    text, _ = bot.chat(prompt, Ids())
    if not text:
        logger.warning("No summary returned for %s", file.filename)
    return _one_line(text)


def print_shadow_writes(writes: list[dict]) -> None:
    """Print the writes a shadow run recorded, without posting anything."""
    if not writes:
        console.print("[yellow]Shadow mode: nothing would be written.[/yellow]")
        return
    console.print(f"\n[bold]Shadow review: {len(writes)} write(s) (not posted)[/bold]\n")
    for w in writes:
        action = w["action"]
        if w.get("path"):
            console.print(
                f"[bold cyan]{w['path']}[/bold cyan]  lines [bold]{w.get('start_line') or w.get('line')}"
                f"-{w.get('line')}[/bold]  [magenta]{action}[/magenta]"
            )
        else:
            console.print(f"[magenta]{action}[/magenta]")
        console.print(f"  {w['body']}")
        console.print()


def _compare_range(
    pull_request: BasePullRequest, anchor: str | None, head_sha: str
) -> tuple[Comparison, dict | None]:
    if anchor and anchor != head_sha:
        try:
            comparison = pull_request.compare_commits(anchor, head_sha)
            console.print(
                f"[cyan]Incremental review: {anchor[:7]} → {head_sha[:7]} "
                f"({len(comparison.files)} file(s) changed)[/cyan]"
            )
            return comparison, {"base_sha": anchor, "head_sha": head_sha}
        except GithubException:
            console.print(
                "[yellow]Could not compute incremental diff (force push?). Falling back to full review.[/yellow]"
            )
    return pull_request.compare_commits(pull_request.base_sha, head_sha), None


def run_review(
    pull_request: BasePullRequest,
    config: dict,
    bot: BaseBot | None = None,
    force_full: bool = False,
    auto_confirm: bool = False,
    light_bot: BaseBot | None = None,
) -> ReviewSummary | None:
    """Run one review pass and return a ReviewSummary.

    ``bot`` reviews files and writes release notes; ``light_bot`` writes the
    per-file and overall summaries. When only ``bot`` is given it does both.

    Returns None on early exits (review disabled, draft skip, no new commits,
    user declined). The ledger is advanced only by the final summary write,
    so an aborted pass is simply redone on the next trigger.
    """
    if config.get("disable_review", False):
        console.print("[yellow]Review is disabled (disable_review: true). Nothing to do.[/yellow]")
        return None

    if pull_request.draft and not config.get("review_draft_prs", False):
        console.print(
            "[yellow]Skipping draft PR. Set review_draft_prs: true in .prledger.yml to review drafts.[/yellow]"
        )
        return None

    commenter = Commenter(pull_request)
    head_sha = pull_request.head_sha

    summary_comment = commenter.find_comment_with_tag(SUMMARIZE_TAG)
    previous_body = summary_comment.body if summary_comment else ""
    reviewed = reviewed_commit_ids(previous_body)

    if head_sha in reviewed and not force_full:
        console.print("[yellow]No new commits since the last review. Nothing to do.[/yellow]")
        return None

    anchor = None
    if not force_full and reviewed:
        # Newest first, so the anchor is the most recent commit already reviewed.
        anchor = highest_reviewed_commit_id(list(reversed(pull_request.list_commits())), reviewed)

    comparison, incremental_info = _compare_range(pull_request, anchor, head_sha)

    if light_bot is None:
        light_bot = bot if bot is not None else get_bot(config, light=True)
    bot = bot if bot is not None else get_bot(config)
    path_filter = PathFilter(config.get("path_filters"))
    max_chars = config.get("max_chars_per_file", 20000)
    max_files = config.get("max_files", 150)

    diff_files = sorted(comparison.files, key=lambda f: f.filename)
    total = len(diff_files)
    file_summary: list[dict] = []
    review_start = time.monotonic()
    reviewed_count = 0

    for i, file in enumerate(diff_files, 1):
        if (
            not path_filter.check(file.filename)
            or not is_code_file(file.filename)
            or file.status not in _REVIEWABLE_STATUSES
            or not file.patch
            or (max_files and reviewed_count >= max_files)
        ):
            console.print(f"  Skipping: {file.filename}")
            file_summary.append({"filename": file.filename, "count": 0, "skipped": True, "error": None})
            continue

        console.print(f"\n[[{i}/{total}]] Reviewing: {file.filename}")
        reviewed_count += 1

        try:
            file_content = pull_request.get_content(file.filename, head_sha) or ""
        except Exception as e:
            console.print(f"  [red]Could not fetch file: {e}[/red]")
            file_summary.append({"filename": file.filename, "count": 0, "skipped": False, "error": str(e)})
            continue

        patch = file.patch
        if len(patch) > max_chars:
            patch = patch[:max_chars] + "\n... [diff truncated]"
        if len(file_content) > max_chars:
            file_content = file_content[:max_chars] + "\n... [file truncated]"

        count = review_file(bot, commenter, pull_request, file, patch, file_content, config)
        file_summary.append(
            {
                "filename": file.filename,
                "count": count,
                "skipped": False,
                "error": None,
                "summary": summarize_file(light_bot, pull_request, file, patch),
            }
        )
        console.print(f"  {count} comment(s) found.")

    pending = len(commenter.drafts)
    if not auto_confirm:
        answer = input(f"Post {pending} comment(s) and update the summary? (y/n): ").strip().lower()
        if answer != "y":
            return None

    result = commenter.submit_review(head_sha)

    description = description_without_release_notes(pull_request.body)
    if not config.get("disable_release_notes", False):
        notes, _ = bot.chat(
            build_release_notes_prompt(
                pull_request.title,
                description,
                [f.filename for f in diff_files],
                previous_notes=release_notes(pull_request.body),
            ),
            Ids(),
        )
        if notes:
            commenter.update_description(notes)
        else:
            logger.warning("No release notes generated; leaving the description unchanged.")

    raw = _merge_raw_summary(raw_summary(previous_body), file_summary)
    overview, _ = light_bot.chat(build_summarize_prompt(pull_request.title, description, raw), Ids())
    if not overview:
        logger.warning("No overall summary generated; falling back to the finding counts.")

    elapsed = time.monotonic() - review_start
    reviewed_commits = [*comparison.commits, head_sha]
    body = compose_summary_body(
        _build_summary(file_summary, result, elapsed, incremental_info, overview=overview),
        overview or _verdict(file_summary),
        raw,
        previous_body,
        reviewed_commits,
    )
    if commenter.replace_comment(body, SUMMARIZE_TAG) is None:
        console.print("[red]Could not update the summary comment; reviewed commits were not recorded.[/red]")

    console.print(
        f"\n[green]Review posted: {result.created} new, {result.updated} updated, "
        f"{result.failed} failed comment(s).[/green]"
    )

    return ReviewSummary(
        repo=pull_request.repo_name,
        pr_number=pull_request.number,
        head_sha=head_sha,
        base_sha=incremental_info["base_sha"] if incremental_info else None,
        reviewed_commits=[c for c in dict.fromkeys(reviewed_commits) if c not in reviewed],
        reviewed_files=[f["filename"] for f in file_summary if not f["skipped"] and f["error"] is None],
        skipped_files=[f["filename"] for f in file_summary if f["skipped"]],
        created=result.created,
        updated=result.updated,
        failed=result.failed,
    )
