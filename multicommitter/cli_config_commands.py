"""Profile CLI commands - working repo and target selection."""
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from multicommitter.core.config import get_config
from multicommitter.core.errors import SyncError
from multicommitter.models.config import ConfigValidationError
from multicommitter.services.discovery import discover_sibling_repos, repo_suffix

# Module-level console instance (will be set by register function)
console: Console = Console()


def show(ctx: typer.Context):
    """Show the working repo and selected targets."""
    from multicommitter.cli_support import get_store, handle_cli_error, print_info

    store = get_store(ctx)
    try:
        profile = store.load()
    except ConfigValidationError as e:
        handle_cli_error(e, console)

    config = get_config()
    console.print(f"[bold]Profile:[/bold] {store.profile_path}")
    console.print(f"[bold]Working repo:[/bold] {profile.working_repo or '[dim](not set)[/dim]'}")
    console.print(f"[bold]Backup dir:[/bold] {profile.backup_dir_name or config.backup_dir_name}")
    console.print(f"[bold]Copy backend:[/bold] {profile.copy_backend or config.copy_backend}")

    if not profile.target_repos:
        print_info(console, "No target repos selected")
        return

    table = Table(title="Target repositories")
    table.add_column("#", justify="right")
    table.add_column("Path", style="cyan")
    table.add_column("Exists")
    for i, target in enumerate(profile.target_paths, start=1):
        exists = "[green]yes[/green]" if target.is_dir() else "[red]missing[/red]"
        table.add_row(str(i), str(target), exists)
    console.print(table)


def set_source(
    ctx: typer.Context,
    path: Path = typer.Argument(Path("."), help="Working repository (default: current directory)"),
):
    """Set the working repository that changes are synced from."""
    from multicommitter.cli_support import get_store, handle_cli_error, print_success

    try:
        profile = get_store(ctx).set_working_repo(path)
    except (SyncError, ConfigValidationError) as e:
        handle_cli_error(e, console)

    print_success(console, f"Set working repo to: {profile.working_repo}")


def add_target(
    ctx: typer.Context,
    paths: List[Path] = typer.Argument(..., help="Target repositories to add"),
):
    """Add one or more target repositories."""
    from multicommitter.cli_support import get_store, handle_cli_error, print_success, print_warning

    store = get_store(ctx)
    try:
        profile = store.load()
        for path in paths:
            resolved = path.expanduser().resolve()
            if profile.working_repo and str(resolved) == profile.working_repo:
                print_warning(console, f"Skipping {resolved}: it is the working repo")
                continue
            if not resolved.is_dir():
                print_warning(console, f"{resolved} does not exist yet; adding anyway")
            profile = store.add_target(resolved)
            print_success(console, f"Added target {resolved}")
    except ConfigValidationError as e:
        handle_cli_error(e, console)


def remove_target(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Target repository to remove"),
):
    """Remove a target repository."""
    from multicommitter.cli_support import get_store, handle_cli_error, print_success, print_warning

    try:
        removed = get_store(ctx).remove_target(path)
    except ConfigValidationError as e:
        handle_cli_error(e, console)

    if removed:
        print_success(console, f"Removed target {path}")
    else:
        print_warning(console, f"{path} is not a configured target")


def clear_targets(ctx: typer.Context):
    """Remove every target repository."""
    from multicommitter.cli_support import get_store, handle_cli_error, print_success

    try:
        get_store(ctx).clear_targets()
    except ConfigValidationError as e:
        handle_cli_error(e, console)
    print_success(console, "Cleared target repos")


def discover(
    ctx: typer.Context,
    select_all: bool = typer.Option(False, "--all", help="Select every sibling found"),
    selection: Optional[str] = typer.Option(
        None, "--select", "-s", help="Space-separated numbers of repos to select"
    ),
):
    """Scan for sibling repos sharing the working repo's suffix and select targets."""
    from multicommitter.cli_support import (
        get_store,
        handle_cli_error,
        print_info,
        print_success,
        print_warning,
        require_working_repo,
    )

    store = get_store(ctx)
    try:
        profile = store.load()
    except ConfigValidationError as e:
        handle_cli_error(e, console)

    working = require_working_repo(profile, console)
    suffix = repo_suffix(working)
    if suffix is None:
        print_warning(console, f"Working repo name '{working.name}' has no '-<suffix>' part "
                               "to match sibling repositories on.")
        return

    print_info(console, f"Scanning for sibling projects under: {working.parent.parent}")

    repos = discover_sibling_repos(working)
    if not repos:
        print_warning(console, f"No matching sibling repositories found for suffix '-{suffix}'.")
        return

    console.print(f"Found {len(repos)} sibling repositories with suffix '-{suffix}':")
    for i, repo in enumerate(repos, start=1):
        console.print(f"  {i:2d}) {repo}")

    if select_all:
        chosen = list(repos)
    else:
        if selection is None:
            selection = typer.prompt("Enter numbers (space-separated) of target repos")
        chosen = []
        for token in selection.split():
            if token.isdigit() and 1 <= int(token) <= len(repos):
                chosen.append(repos[int(token) - 1])
            else:
                print_warning(console, f"Ignoring invalid selection: {token}")

    if not chosen:
        print_warning(console, "No target repos selected.")
        return

    store.set_targets(chosen)
    print_success(console, "Selected target repos:")
    for repo in chosen:
        console.print(f"  {repo}")


def register_config_commands(app: typer.Typer, shared_console: Console):
    """Register profile commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    config_app = typer.Typer(help="Working repo and target configuration")
    config_app.command()(show)
    config_app.command("set-source")(set_source)
    config_app.command("add-target")(add_target)
    config_app.command("remove-target")(remove_target)
    config_app.command("clear-targets")(clear_targets)
    app.add_typer(config_app, name="config")

    targets_app = typer.Typer(help="Target repository discovery")
    targets_app.command()(discover)
    app.add_typer(targets_app, name="targets")
