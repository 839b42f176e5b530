"""reply command: answer a human comment in a review thread."""

from __future__ import annotations

import click
from rich.console import Console

from prledger_core.gh.pull_request import open_pull_request
from prledger_core.review_comment import handle_review_comment
from prledger_core.reviewer import get_bot

console = Console()


@click.command("reply")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.option("--comment-id", type=int, required=True, help="ID of the review comment to answer.")
@click.pass_context
def reply_cmd(ctx, repo: str, pr_number: int, comment_id: int):
    """Reply to a review comment in a thread the bot takes part in."""
    from prledger_cli.auth import require_github_token, require_model_key

    config = ctx.obj["config"]
    token = require_github_token(config)
    require_model_key(config)

    try:
        pull_request = open_pull_request(repo, pr_number, token=token)
    except ValueError as e:
        raise click.ClickException(str(e))

    comment = next((c for c in pull_request.list_review_comments() if c.id == comment_id), None)
    if comment is None:
        raise click.ClickException(f"Review comment {comment_id} not found on PR #{pr_number}.")

    try:
        replied = handle_review_comment(pull_request, get_bot(config), comment, config)
    except Exception as e:
        raise click.ClickException(f"Failed to run: {e}") from e

    if replied:
        console.print(f"[green]Replied to comment {comment_id}.[/green]")
    else:
        console.print(f"[yellow]No reply posted for comment {comment_id}.[/yellow]")
