"""action command: entry point inside a GitHub Actions workflow."""

from __future__ import annotations

import json
import os

import click

from prledger_core.events import dispatch_event


@click.command("action")
@click.pass_context
def action_cmd(ctx):
    """Handle the event that triggered the current workflow run.

    \b
    Reads GITHUB_EVENT_NAME, GITHUB_EVENT_PATH and GITHUB_REPOSITORY.
    """
    from prledger_cli.auth import require_github_token, require_model_key

    config = ctx.obj["config"]
    event_name = os.environ.get("GITHUB_EVENT_NAME")
    event_path = os.environ.get("GITHUB_EVENT_PATH")
    if not event_name or not event_path:
        raise click.UsageError("GITHUB_EVENT_NAME and GITHUB_EVENT_PATH must be set (run inside GitHub Actions).")

    require_github_token(config)
    require_model_key(config)

    try:
        with open(event_path) as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Failed to read event payload: {e}")

    if "repository" not in payload and os.environ.get("GITHUB_REPOSITORY"):
        payload["repository"] = {"full_name": os.environ["GITHUB_REPOSITORY"]}

    try:
        dispatch_event(event_name, payload, config)
    except Exception as e:
        raise click.ClickException(f"Failed to run: {e}") from e
