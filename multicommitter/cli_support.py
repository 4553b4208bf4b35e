"""Shared utilities for multi-committer CLI modules."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

import typer
from rich.console import Console

from multicommitter.config.loader import ProfileStore
from multicommitter.core.backup_manager import BackupManager
from multicommitter.core.config import get_config
from multicommitter.core.exclusions import ExclusionPolicy
from multicommitter.models.config import CommitterProfile
from multicommitter.services.copier import Copier, get_copier
from multicommitter.services.git_manager import is_git_repo


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up file logging for CLI commands.

    Args:
        log_file: Path to log file (optional)
        verbose: Enable verbose logging
    """
    from multicommitter.core.logger import setup_file_logging as _setup_file_logging
    _setup_file_logging(log_file=log_file, verbose=verbose)


def get_store(ctx: Optional[typer.Context] = None) -> ProfileStore:
    """Return the profile store selected by the global --config option."""
    profile_path = None
    if ctx is not None and isinstance(ctx.obj, dict):
        profile_path = ctx.obj.get("config")
    return ProfileStore(profile_path)


def require_working_repo(profile: CommitterProfile, console: Console) -> Path:
    """Return the configured working repo or exit with a visible error."""
    if not profile.working_repo:
        print_error(console, "No working repo set. Run 'multi-committer config set-source PATH' first.")
        raise typer.Exit(1)

    repo = Path(profile.working_repo)
    if not is_git_repo(repo):
        print_error(console, f"Working repo is not a valid git repository: {repo}")
        raise typer.Exit(1)
    return repo


def require_targets(profile: CommitterProfile, console: Console) -> list:
    if not profile.target_repos:
        print_warning(console, "No target repos selected. Run 'multi-committer targets discover' "
                               "or 'multi-committer config add-target PATH'.")
        raise typer.Exit(1)
    return profile.target_paths


def sync_components(profile: CommitterProfile) -> Tuple[ExclusionPolicy, Copier, BackupManager]:
    """Build the exclusion policy, copier and backup manager for a profile.

    Profile values win over the environment-derived runtime config.
    """
    config = get_config()
    backup_dir_name = profile.backup_dir_name or config.backup_dir_name
    copier = get_copier(profile.copy_backend or config.copy_backend)
    backups = BackupManager(copier=copier, backup_dir_name=backup_dir_name)
    return ExclusionPolicy.default(backup_dir_name), copier, backups


def confirm_action(message: str, yes_flag: bool = False) -> bool:
    """Prompt user for confirmation unless --yes.

    Args:
        message: Confirmation message to display
        yes_flag: Skip prompt if True (from --yes flag)

    Returns:
        True if confirmed, False otherwise
    """
    if yes_flag:
        return True
    return typer.confirm(message)


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    kind = getattr(e, "kind", None)
    label = f"Error ({kind})" if kind else "Error"
    console.print(f"[red]{label}:[/red] {e}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def is_verbose(ctx: Optional[typer.Context]) -> bool:
    return bool(ctx is not None and isinstance(ctx.obj, dict) and ctx.obj.get("debug"))


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting.

    Args:
        console: Rich console for output
        message: Success message
        prefix: Prefix symbol (default: ✓)
    """
    console.print(f"[green]{prefix}[/green] {message}")


def print_error(console: Console, message: str, prefix: str = "✗") -> None:
    """Print error message with consistent formatting.

    Args:
        console: Rich console for output
        message: Error message
        prefix: Prefix symbol (default: ✗)
    """
    console.print(f"[red]{prefix}[/red] {message}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    """Print warning message with consistent formatting.

    Args:
        console: Rich console for output
        message: Warning message
        prefix: Prefix symbol (default: ⚠)
    """
    console.print(f"[yellow]{prefix}[/yellow] {message}")


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    """Print info message with consistent formatting.

    Args:
        console: Rich console for output
        message: Info message
        prefix: Prefix symbol (default: ℹ)
    """
    console.print(f"[cyan]{prefix}[/cyan] {message}")
