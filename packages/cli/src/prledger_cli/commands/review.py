"""review command: run one incremental review pass on a pull request."""

from __future__ import annotations

import click
from rich.console import Console

from prledger_core.gh.pull_request import get_pull_requests, get_repo, open_pull_request
from prledger_core.gh.shadow import ShadowPullRequest
from prledger_core.reviewer import print_shadow_writes, run_review

console = Console()


@click.command("review")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Omit to list open PRs interactively.",
)
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompts.")
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: run the full reconciliation but print the writes instead of posting them.",
)
@click.option(
    "--full-review",
    "full_review",
    is_flag=True,
    help="Review every changed file even if the ledger records earlier commits.",
)
@click.pass_context
def review_cmd(
    ctx,
    repo: str,
    pr_number: int | None,
    model: str | None,
    yes: bool,
    shadow: bool,
    full_review: bool,
):
    """Review the commits of a pull request that have not been reviewed yet.

    Posts line comments (updating earlier bot comments in place), refreshes
    the summary comment and records the reviewed commits in its ledger.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub personal access token (or use gh CLI)
      ANTHROPIC_API_KEY    Required when using --model anthropic
      OPENAI_API_KEY       Required when using --model openai
    """
    from prledger_cli.auth import require_github_token, require_model_key

    config = ctx.obj["config"]
    if model:
        config["model"] = model

    token = require_github_token(config)
    require_model_key(config)

    this_repo = get_repo(repo, token=token)

    if pr_number is None:
        prs = list(get_pull_requests(this_repo))
        if not prs:
            console.print("[yellow]No open pull requests found.[/yellow]")
            return
        console.print("\nOpen pull requests:")
        for pr in prs:
            console.print(f"  [bold]#{pr.number}[/bold]  {pr.title}")
        pr_number = click.prompt("\nEnter the pull request number", type=int)

    try:
        pull_request = open_pull_request(repo, pr_number, repo_obj=this_repo)
    except ValueError as e:
        raise click.ClickException(str(e))

    if shadow:
        pull_request = ShadowPullRequest(pull_request)

    try:
        summary = run_review(pull_request, config, force_full=full_review, auto_confirm=yes)
    except Exception as e:
        raise click.ClickException(f"Failed to run: {e}") from e

    if shadow:
        print_shadow_writes(pull_request.writes)

    if summary is not None and summary.reviewed_commits:
        console.print(
            f"Recorded {len(summary.reviewed_commits)} reviewed commit(s) up to {summary.head_sha[:7]}."
        )
