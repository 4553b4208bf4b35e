"""Git CLI commands - commit and push every configured repository."""
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from multicommitter.models.config import ConfigValidationError
from multicommitter.services.git_manager import GitManager
from multicommitter.services.github import TOKEN_FILE, GitHubCli, save_token

# Module-level console instance (will be set by register function)
console: Console = Console()


def _all_repos(ctx: typer.Context) -> List[Path]:
    """Working repo first, then targets."""
    from multicommitter.cli_support import (
        get_store,
        handle_cli_error,
        require_targets,
        require_working_repo,
    )

    try:
        profile = get_store(ctx).load()
    except ConfigValidationError as e:
        handle_cli_error(e, console)

    working = require_working_repo(profile, console)
    return [working] + require_targets(profile, console)


def commit(
    ctx: typer.Context,
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Commit message"),
):
    """Commit all changes locally in the working repo and every target."""
    from multicommitter.cli_support import print_error, print_success, print_warning

    repos = _all_repos(ctx)

    if message is None:
        message = typer.prompt("Enter commit message", default="", show_default=False)
    if not message.strip():
        print_warning(console, "Commit message cannot be empty.")
        raise typer.Exit(1)

    git = GitManager()
    failed = [repo for repo in repos if not git.commit_all(repo, message)]

    if failed:
        for repo in failed:
            print_error(console, f"Commit failed in {repo}")
        raise typer.Exit(1)

    print_success(console, "All repositories committed locally.")


def push(
    ctx: typer.Context,
    branch: str = typer.Option("dev", "--branch", "-b", help="Local branch to push"),
    remote_branch: str = typer.Option("dev", "--remote-branch", help="Remote branch name"),
    base: str = typer.Option("stage", "--base", help="Base branch for pull requests"),
    no_pr: bool = typer.Option(False, "--no-pr", help="Push without opening pull requests"),
    token_file: Path = typer.Option(TOKEN_FILE, "--token-file", help="Stored GitHub token"),
):
    """Push every repository and open pull requests into the base branch."""
    from multicommitter.cli_support import print_error, print_info, print_success, print_warning

    repos = _all_repos(ctx)
    gh = GitHubCli()

    if gh.is_installed():
        if not token_file.exists() and not gh.is_authenticated():
            print_info(console, "GitHub CLI not authenticated. Please provide a token.")
            token = typer.prompt("Enter GitHub Personal Access Token", hide_input=True)
            save_token(token, token_file)
            print_success(console, "Token saved securely for future use.")
        # Also routes git credentials through gh when gh is already logged in
        if not gh.ensure_auth(token_file):
            print_error(console, "GitHub authentication failed")
            raise typer.Exit(1)

    git = GitManager()
    failed = []
    for repo in repos:
        if git.push(repo, branch, remote_branch):
            print_success(console, f"{repo.name} pushed to remote '{remote_branch}'.")
        else:
            failed.append(repo)
            print_error(console, f"Push failed for {repo}")

    if not no_pr:
        if not gh.is_installed():
            print_warning(console, "GitHub CLI not found. Please create PRs manually.")
        else:
            print_info(console, f"Creating PRs from '{branch}' → '{base}'...")
            for repo in repos:
                if repo in failed:
                    continue
                if not gh.create_pr(repo, base=base, head=branch):
                    print_warning(console, f"PR may already exist for {repo.name}")
            print_success(console, "PR creation complete.")

    if failed:
        raise typer.Exit(1)


def register_git_commands(app: typer.Typer, shared_console: Console):
    """Register git commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(commit)
    app.command()(push)
