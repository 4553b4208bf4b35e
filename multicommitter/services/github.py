"""GitHub CLI (gh) integration for authentication and pull requests."""
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from multicommitter.core.config import get_config
from multicommitter.core.logger import get_logger
from multicommitter.services.git_manager import GitManager

logger = get_logger(__name__)

TOKEN_FILE = Path.home() / ".multi-committer.token"
GH_CREDENTIAL_HELPER = "!gh auth git-credential"


class GitHubCli:
    """Thin wrapper over the gh command-line tool."""

    def __init__(self, timeout: Optional[int] = None):
        self.timeout = timeout if timeout is not None else get_config().network_timeout

    @staticmethod
    def is_installed() -> bool:
        return shutil.which("gh") is not None

    def is_authenticated(self) -> bool:
        try:
            result = subprocess.run(
                ['gh', 'auth', 'status'],
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def login_with_token(self, token_file: Path = TOKEN_FILE) -> bool:
        """Log gh in using a token stored on disk.

        Returns:
            True if successful, False otherwise
        """
        token_file = Path(token_file)
        if not token_file.exists():
            logger.error(f"Token file not found: {token_file}")
            return False

        try:
            with open(token_file) as f:
                subprocess.run(
                    ['gh', 'auth', 'login', '--with-token'],
                    stdin=f,
                    capture_output=True,
                    text=True,
                    check=True,
                    timeout=self.timeout,
                )
            logger.info("✓ GitHub CLI authenticated successfully")
            return True
        except subprocess.CalledProcessError as e:
            logger.error(f"gh auth login failed: {e}")
            if e.stderr:
                logger.error(f"Error output: {e.stderr}")
            return False
        except subprocess.TimeoutExpired:
            logger.error("gh auth login timed out")
            return False

    def ensure_auth(self, token_file: Path = TOKEN_FILE, git: Optional[GitManager] = None) -> bool:
        """Authenticate gh if needed and route git credentials through it."""
        if not self.is_authenticated():
            logger.info("GitHub CLI not authenticated, logging in with stored token")
            if not self.login_with_token(token_file):
                return False

        git = git or GitManager()
        if git.get_global_config('credential.helper') != GH_CREDENTIAL_HELPER:
            logger.info("Configuring git to use GitHub CLI credentials")
            if not git.set_global_config('credential.helper', GH_CREDENTIAL_HELPER):
                return False
        return True

    def create_pr(self, repo: Path, base: str = "stage", head: str = "dev",
                  title: str = "Sync changes from multi-committer",
                  body: str = "Automated PR from multi-committer.") -> bool:
        """Open a pull request from head into base.

        Returns:
            True if the PR was created, False otherwise (often because it exists)
        """
        cmd = [
            'gh', 'pr', 'create',
            '--base', base,
            '--head', head,
            '--title', title,
            '--body', body,
        ]

        try:
            result = subprocess.run(
                cmd,
                cwd=str(repo),
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
            if result.stdout:
                logger.info(f"✓ PR created for {Path(repo).name}: {result.stdout.strip()}")
            return True
        except subprocess.CalledProcessError as e:
            logger.warning(f"PR may already exist for {Path(repo).name}")
            if e.stderr:
                logger.debug(f"gh output: {e.stderr}")
            return False
        except subprocess.TimeoutExpired:
            logger.error(f"gh pr create timed out for {repo}")
            return False


def save_token(token: str, token_file: Path = TOKEN_FILE) -> Path:
    """Store a personal access token readable only by the current user."""
    token_file = Path(token_file)
    token_file.parent.mkdir(parents=True, exist_ok=True)
    token_file.write_text(f"{token.strip()}\n")
    token_file.chmod(0o600)
    return token_file
