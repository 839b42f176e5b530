"""CLI entry point for prledger.

Commands:
  review  : run one incremental review pass on a pull request
  reply   : answer a human comment in a review thread
  ledger  : show which PR commits the summary comment records as reviewed
  action  : handle the current GitHub Actions event
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.logging import RichHandler

from prledger_cli.commands.action import action_cmd
from prledger_cli.commands.ledger import ledger_cmd
from prledger_cli.commands.reply import reply_cmd
from prledger_cli.commands.review import review_cmd


def _configure_logging(verbose: bool, debug: bool) -> None:
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("prledger"),
    prog_name="prledger",
)
@click.option(
    "--config",
    "config_path",
    default=".prledger.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRLEDGER_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log progress at INFO level.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Incremental AI review bot for GitHub pull requests."""
    from prledger_core.config import load_config
    from prledger_cli.auth import resolve_github_token

    ctx.ensure_object(dict)

    config = load_config(config_path)
    _configure_logging(verbose, bool(config.get("debug")))

    # Resolve the token once so every subcommand sees the same one.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ctx.obj["config"] = config


main.add_command(review_cmd)
main.add_command(reply_cmd)
main.add_command(ledger_cmd)
main.add_command(action_cmd)
