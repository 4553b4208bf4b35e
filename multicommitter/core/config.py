"""Runtime settings for multi-committer operations."""
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BACKUP_DIR_NAME = ".multi-committer-backup"


@dataclass
class RuntimeConfig:
    """Runtime configuration for sync operations.

    Attributes:
        git_timeout: Timeout in seconds for git queries and commands (default: 60)
        copy_timeout: Timeout in seconds for a single backup or copy run (default: 600)
        network_timeout: Timeout in seconds for push and pull request calls (default: 120)
        backup_dir_name: Directory inside each target holding backup snapshots
        copy_backend: "rsync", "local" or "auto" (rsync when installed)
    """

    git_timeout: int = 60
    copy_timeout: int = 600  # 10 minutes for large targets
    network_timeout: int = 120

    backup_dir_name: str = DEFAULT_BACKUP_DIR_NAME
    copy_backend: str = "auto"

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Create config from environment variables.

        Environment variables:
            MULTI_COMMITTER_GIT_TIMEOUT: Git command timeout in seconds
            MULTI_COMMITTER_COPY_TIMEOUT: Backup/copy timeout in seconds
            MULTI_COMMITTER_NETWORK_TIMEOUT: Push/PR timeout in seconds
            MULTI_COMMITTER_BACKUP_DIR: Backup directory name
            MULTI_COMMITTER_COPY_BACKEND: rsync, local or auto

        Returns:
            RuntimeConfig instance with values from environment or defaults
        """
        return cls(
            git_timeout=int(
                os.getenv("MULTI_COMMITTER_GIT_TIMEOUT", cls.git_timeout)
            ),
            copy_timeout=int(
                os.getenv("MULTI_COMMITTER_COPY_TIMEOUT", cls.copy_timeout)
            ),
            network_timeout=int(
                os.getenv("MULTI_COMMITTER_NETWORK_TIMEOUT", cls.network_timeout)
            ),
            backup_dir_name=os.getenv("MULTI_COMMITTER_BACKUP_DIR", cls.backup_dir_name),
            copy_backend=os.getenv("MULTI_COMMITTER_COPY_BACKEND", cls.copy_backend),
        )


# Global config instance (can be overridden)
_config: Optional[RuntimeConfig] = None


def get_config() -> RuntimeConfig:
    """Get the global runtime configuration.

    Returns:
        RuntimeConfig instance (creates from environment if not set)
    """
    global _config
    if _config is None:
        _config = RuntimeConfig.from_env()
    return _config


def set_config(config: Optional[RuntimeConfig]):
    """Set the global runtime configuration.

    Args:
        config: RuntimeConfig instance to use globally, or None to re-read the environment
    """
    global _config
    _config = config
