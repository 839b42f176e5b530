"""ledger command: show the reviewed/pending state of every PR commit."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prledger_core.commenter import Commenter
from prledger_core.gh.pull_request import open_pull_request
from prledger_core.ledger import highest_reviewed_commit_id, reviewed_commit_ids
from prledger_core.markers import SUMMARIZE_TAG

console = Console()


@click.command("ledger")
@click.option("--repo", required=True, help="GitHub repository (owner/name).")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.pass_context
def ledger_cmd(ctx, repo: str, pr_number: int):
    """Show which commits of a pull request have been reviewed.

    Reads the ledger stored in the bot's summary comment; nothing is written.
    """
    from prledger_cli.auth import require_github_token

    token = require_github_token(ctx.obj["config"])

    try:
        pull_request = open_pull_request(repo, pr_number, token=token)
    except ValueError as e:
        raise click.ClickException(str(e))

    summary = Commenter(pull_request).find_comment_with_tag(SUMMARIZE_TAG)
    if summary is None:
        console.print("[yellow]No summary comment found. This PR has not been reviewed yet.[/yellow]")
        return

    reviewed = reviewed_commit_ids(summary.body)
    commits = pull_request.list_commits()
    anchor = highest_reviewed_commit_id(list(reversed(commits)), reviewed)

    table = Table(title=f"Review Ledger: {repo}#{pr_number}", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", width=4)
    table.add_column("SHA", width=10)
    table.add_column("State", width=10)
    table.add_column("", width=8)

    for i, sha in enumerate(commits, 1):
        state = "[green]reviewed[/green]" if sha in reviewed else "[yellow]pending[/yellow]"
        table.add_row(str(i), sha[:7], state, "anchor" if sha == anchor else "")

    console.print(table)

    pending = sum(1 for sha in commits if sha not in reviewed)
    console.print(f"{len(commits) - pending} reviewed, {pending} pending.")
