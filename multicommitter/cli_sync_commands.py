"""Sync CLI commands - changes, preview, apply."""
import typer
from rich.console import Console
from rich.table import Table

from multicommitter.core.change_set import compute_change_set
from multicommitter.core.errors import SyncError
from multicommitter.core.sync_planner import preview_sync
from multicommitter.core.synchronizer import apply_sync
from multicommitter.models.config import ConfigValidationError
from multicommitter.models.sync import FileAction, TargetStatus

# Module-level console instance (will be set by register function)
console: Console = Console()

STATUS_STYLES = {
    TargetStatus.SYNCED: "green",
    TargetStatus.FAILED: "red",
    TargetStatus.INTERRUPTED: "yellow",
    TargetStatus.SKIPPED: "dim",
}


def _load_change_set(ctx: typer.Context):
    """Load the profile and compute a fresh change set for its working repo."""
    from multicommitter.cli_support import (
        get_store,
        handle_cli_error,
        is_verbose,
        require_working_repo,
        sync_components,
    )

    try:
        profile = get_store(ctx).load()
        source = require_working_repo(profile, console)
        policy, copier, backups = sync_components(profile)
        change_set = compute_change_set(source, policy)
    except (SyncError, ConfigValidationError) as e:
        handle_cli_error(e, console, verbose=is_verbose(ctx))

    return profile, source, change_set, (policy, copier, backups)


def changes(ctx: typer.Context):
    """List locally changed files in the working repo."""
    from multicommitter.cli_support import print_info

    _, source, change_set, _ = _load_change_set(ctx)

    if not change_set:
        print_info(console, "No local changes to sync.")
        return

    console.print(f"[bold]{len(change_set)} changed file(s) in {source}:[/bold]")
    for path in sorted(change_set):
        console.print(f"  {path}")


def preview(ctx: typer.Context):
    """Dry run: show which files would be synced into each target."""
    from multicommitter.cli_support import print_info, print_success, require_targets

    profile, source, change_set, (policy, _, _) = _load_change_set(ctx)
    targets = require_targets(profile, console)

    if not change_set:
        print_info(console, "No local changes to sync.")
        return

    for plan in preview_sync(source, change_set, targets, policy):
        table = Table(title=f"Dry-run for {plan.target}")
        table.add_column("File", style="cyan")
        table.add_column("Action")

        for planned in plan.files:
            style = {
                FileAction.CREATE: "green",
                FileAction.OVERWRITE: "yellow",
            }.get(planned.action, "dim")
            table.add_row(planned.path, f"[{style}]{planned.action.value}[/{style}]")

        console.print(table)
        print_success(
            console,
            f"Dry-run complete for {plan.target}: "
            f"{plan.count(FileAction.CREATE)} new, {plan.count(FileAction.OVERWRITE)} overwritten, "
            f"{len(plan.skipped)} skipped",
        )


def apply(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Back up each target, then copy the changed files into it."""
    from multicommitter.cli_support import (
        confirm_action,
        handle_cli_error,
        is_verbose,
        print_error,
        print_info,
        print_success,
        print_warning,
        require_targets,
    )

    profile, source, change_set, (policy, copier, backups) = _load_change_set(ctx)
    targets = require_targets(profile, console)

    if not change_set:
        print_info(console, "No local changes to sync.")
        return

    console.print(f"[bold]{len(change_set)} file(s) will be synced to {len(targets)} target(s)[/bold]")
    for path in sorted(change_set):
        console.print(f"  {path}")

    if not confirm_action("Apply these changes?", yes_flag=yes):
        print_warning(console, "Cancelled")
        raise typer.Exit(0)

    try:
        report = apply_sync(source, change_set, targets, policy=policy, copier=copier, backups=backups)
    except SyncError as e:
        handle_cli_error(e, console, verbose=is_verbose(ctx))

    table = Table(title="Sync results")
    table.add_column("Target", style="cyan")
    table.add_column("Status")
    table.add_column("Files", justify="right")
    table.add_column("Backup / error")

    for result in report.results:
        style = STATUS_STYLES[result.status]
        if result.ok:
            detail = str(result.backup_path)
        else:
            detail = f"{result.error_kind}: {result.error}" if result.error_kind else (result.error or "")
            if result.backup_path:
                detail += f" (backup: {result.backup_path})"
        table.add_row(
            str(result.target),
            f"[{style}]{result.status.value}[/{style}]",
            str(len(result.files_written)),
            detail,
        )
    console.print(table)

    if report.interrupted:
        print_warning(console, "Aborted by user. The interrupted target may be partially synced; "
                               "its backup is listed above.")
        raise typer.Exit(130)

    if report.failed:
        print_error(console, f"{len(report.failed)} target(s) failed")
        raise typer.Exit(1)

    print_success(console, f"Changes applied to {len(report.results)} target(s)")


def register_sync_commands(app: typer.Typer, shared_console: Console):
    """Register sync commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(changes)
    app.command()(preview)
    app.command()(apply)
