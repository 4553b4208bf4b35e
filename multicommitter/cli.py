#!/usr/bin/env python3
"""multi-committer CLI - sync local changes across sibling repositories."""
from typing import Optional

import typer
from rich.console import Console

from multicommitter.cli_backup_commands import register_backup_commands
from multicommitter.cli_config_commands import register_config_commands
from multicommitter.cli_git_commands import register_git_commands
from multicommitter.cli_sync_commands import register_sync_commands
from multicommitter.core.logger import get_logger

app = typer.Typer(
    name="multi-committer",
    help="""multi-committer - replicate local changes across sibling repos

Copies the files you changed in one working repo into every target repo,
backing each target up first.

Quick start:
  multi-committer config set-source .     # Pick the working repo
  multi-committer targets discover        # Select sibling repos
  multi-committer preview                 # See what will change
  multi-committer apply                   # Make it happen
""",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Profile file (default: ~/.multi-committer.yml)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also log to this file"),
):
    """Global options shared by every command."""
    from multicommitter.cli_support import setup_file_logging

    ctx.obj = {"config": config, "debug": debug}
    if debug or log_file:
        setup_file_logging(log_file=log_file, verbose=debug)


# Attach modular subcommands
register_config_commands(app, console)
register_sync_commands(app, console)
register_git_commands(app, console)
register_backup_commands(app, console)

if __name__ == "__main__":
    app()
