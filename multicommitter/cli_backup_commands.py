"""Backup CLI commands - list snapshots taken before each apply."""
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from multicommitter.core.backup_manager import BackupManager
from multicommitter.core.config import get_config
from multicommitter.models.config import ConfigValidationError
from multicommitter.services.copier import LocalCopier

# Module-level console instance (will be set by register function)
console: Console = Console()


def list_cmd(
    ctx: typer.Context,
    target: Optional[Path] = typer.Argument(None, help="Target repo (default: all configured targets)"),
):
    """List backup snapshots, newest first."""
    from multicommitter.cli_support import get_store, handle_cli_error, print_warning

    try:
        profile = get_store(ctx).load()
    except ConfigValidationError as e:
        handle_cli_error(e, console)

    targets = [target] if target else profile.target_paths
    if not targets:
        print_warning(console, "No target repos selected")
        return

    # Listing never copies; the local backend avoids requiring rsync
    manager = BackupManager(
        copier=LocalCopier(),
        backup_dir_name=profile.backup_dir_name or get_config().backup_dir_name,
    )

    for repo in targets:
        backups = manager.list_backups(repo)
        if not backups:
            print_warning(console, f"No backups found for {repo}")
            continue

        table = Table(title=f"Backups of {repo}")
        table.add_column("Snapshot", style="green")
        table.add_column("Created", style="yellow")
        table.add_column("Files", justify="right", style="magenta")

        for backup in backups:
            table.add_row(
                backup['name'],
                backup['created'].strftime('%Y-%m-%d %H:%M:%S'),
                str(backup['files']),
            )
        console.print(table)


def register_backup_commands(app: typer.Typer, shared_console: Console):
    """Register backup commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    backups_app = typer.Typer(help="Backup snapshots of target repositories")
    backups_app.command("list")(list_cmd)
    app.add_typer(backups_app, name="backups")
