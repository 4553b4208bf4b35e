"""Git repository operations for the working repo and its targets."""
import subprocess
from pathlib import Path
from typing import List, Optional

from multicommitter.core.config import get_config
from multicommitter.core.errors import NotARepositoryError, VcsQueryError
from multicommitter.core.logger import get_logger

logger = get_logger(__name__)


def is_git_repo(path) -> bool:
    """Return True when path holds git metadata (.git dir or worktree file)."""
    return (Path(path) / ".git").exists()


def _split_nul(output: str) -> List[str]:
    return [entry for entry in output.split("\0") if entry]


class GitManager:
    """Runs git against local repositories."""

    def __init__(self, timeout: Optional[int] = None):
        self.timeout = timeout if timeout is not None else get_config().git_timeout

    def _run(self, repo: Path, args: List[str], check: bool = True,
             timeout: Optional[int] = None) -> subprocess.CompletedProcess:
        cmd = ['git'] + args
        logger.debug(f"Running {' '.join(cmd)} in {repo}")
        return subprocess.run(
            cmd,
            cwd=str(repo),
            capture_output=True,
            text=True,
            check=check,
            timeout=timeout if timeout is not None else self.timeout,
        )

    def _query_paths(self, repo: Path, args: List[str]) -> List[str]:
        """Run a NUL-delimited path listing; any failure is fatal."""
        if not is_git_repo(repo):
            raise NotARepositoryError(repo)

        try:
            result = self._run(repo, args + ['-z'])
        except subprocess.CalledProcessError as e:
            logger.error(f"git {' '.join(args)} failed in {repo}: {e}")
            if e.stderr:
                logger.error(f"Error output: {e.stderr}")
            raise VcsQueryError(f"Unable to read git state of {repo}: {(e.stderr or '').strip()}") from e
        except subprocess.TimeoutExpired as e:
            raise VcsQueryError(f"git {' '.join(args)} timed out after {e.timeout}s in {repo}") from e
        except FileNotFoundError as e:
            raise VcsQueryError("Git not found. Please install git first.") from e

        return _split_nul(result.stdout)

    def list_unstaged(self, repo: Path) -> List[str]:
        """Tracked files with uncommitted edits, ignoring whitespace changes."""
        return self._query_paths(repo, ['diff', '-w', '--name-only'])

    def list_staged(self, repo: Path) -> List[str]:
        """Files staged for commit, ignoring whitespace changes."""
        return self._query_paths(repo, ['diff', '--cached', '-w', '--name-only'])

    def list_untracked(self, repo: Path) -> List[str]:
        """Untracked files not matched by the repository's ignore rules."""
        return self._query_paths(repo, ['ls-files', '--others', '--exclude-standard'])

    def commit_all(self, repo: Path, message: str) -> bool:
        """Stage everything and commit.

        Args:
            repo: Repository root
            message: Commit message

        Returns:
            True if a commit was made or there was nothing to commit,
            False if git failed
        """
        try:
            self._run(repo, ['add', '.'])
        except subprocess.CalledProcessError as e:
            logger.error(f"Failed to stage changes in {repo}: {e}")
            if e.stderr:
                logger.error(f"Error output: {e.stderr}")
            return False
        except subprocess.TimeoutExpired:
            logger.error(f"git add timed out in {repo}")
            return False

        try:
            result = self._run(repo, ['commit', '-m', message], check=False)
        except subprocess.TimeoutExpired:
            logger.error(f"git commit timed out in {repo}")
            return False

        if result.returncode == 0:
            logger.info(f"✓ Committed changes in {repo}")
            return True

        output = f"{result.stdout}\n{result.stderr}"
        if "nothing to commit" in output or "nothing added to commit" in output:
            logger.info(f"Nothing to commit in {repo}")
            return True

        logger.error(f"Commit failed in {repo}")
        if result.stderr:
            logger.error(f"Error output: {result.stderr}")
        return False

    def push(self, repo: Path, local_branch: str = "dev", remote_branch: str = "dev",
             remote: str = "origin") -> bool:
        """Push local_branch to remote_branch on the given remote.

        Returns:
            True if successful, False otherwise
        """
        refspec = f"{local_branch}:{remote_branch}"
        try:
            logger.info(f"Pushing {repo} to {remote}/{remote_branch}")
            self._run(repo, ['push', remote, refspec], timeout=get_config().network_timeout)
            logger.info(f"✓ Pushed {repo} to {remote}/{remote_branch}")
            return True
        except subprocess.CalledProcessError as e:
            logger.error(f"Failed to push {repo}: {e}")
            if e.stderr:
                logger.error(f"Error output: {e.stderr}")
            return False
        except subprocess.TimeoutExpired:
            logger.error(f"Push timed out for {repo}")
            return False

    def get_global_config(self, key: str) -> Optional[str]:
        """Read a global git setting, None when unset."""
        try:
            result = self._run(Path.home(), ['config', '--global', key], check=False)
        except subprocess.TimeoutExpired:
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def set_global_config(self, key: str, value: str) -> bool:
        try:
            self._run(Path.home(), ['config', '--global', key, value])
            return True
        except subprocess.CalledProcessError as e:
            logger.error(f"Failed to set git config {key}: {e}")
            return False
