"""YAML profile storage for the working repo and its targets."""
import os
from pathlib import Path
from typing import Iterable, Optional

import yaml
from pydantic import ValidationError

from multicommitter.core.errors import NotARepositoryError
from multicommitter.core.logger import get_logger
from multicommitter.models.config import CommitterProfile, ConfigValidationError
from multicommitter.services.git_manager import is_git_repo

logger = get_logger(__name__)

DEFAULT_PROFILE_PATH = Path.home() / ".multi-committer.yml"
PROFILE_ENV_VAR = "MULTI_COMMITTER_CONFIG"


def find_profile(profile_path: Optional[str] = None) -> Path:
    """Locate the active profile file."""
    if profile_path:
        return Path(profile_path)

    if env_path := os.environ.get(PROFILE_ENV_VAR):
        return Path(env_path)

    return DEFAULT_PROFILE_PATH


class ProfileStore:
    """Reads and rewrites the profile file wholesale on each change."""

    def __init__(self, profile_path: Optional[str] = None):
        self.profile_path = find_profile(profile_path)

    def load(self) -> CommitterProfile:
        """Load the profile; a missing file yields an empty profile."""
        if not self.profile_path.exists():
            logger.debug(f"No profile at {self.profile_path}, starting empty")
            return CommitterProfile()

        try:
            with open(self.profile_path) as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in {self.profile_path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigValidationError(f"{self.profile_path} must contain a mapping")

        try:
            return CommitterProfile(**raw)
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid profile {self.profile_path}:\n{e}") from e

    def save(self, profile: CommitterProfile) -> Path:
        """Write the profile atomically (temp file, then rename)."""
        self.profile_path.parent.mkdir(parents=True, exist_ok=True)
        temp_file = self.profile_path.with_suffix('.tmp')
        with open(temp_file, 'w') as f:
            yaml.safe_dump(profile.model_dump(exclude_none=True), f, sort_keys=False)
        temp_file.replace(self.profile_path)
        logger.debug(f"Saved profile to {self.profile_path}")
        return self.profile_path

    def set_working_repo(self, path) -> CommitterProfile:
        """Point the profile at a new working repository.

        Raises:
            NotARepositoryError: path is not a git repository
        """
        repo = Path(path).expanduser().resolve()
        if not is_git_repo(repo):
            raise NotARepositoryError(repo)

        profile = self.load()
        data = profile.model_dump()
        data['working_repo'] = str(repo)
        profile = CommitterProfile(**data)
        self.save(profile)
        return profile

    def set_targets(self, paths: Iterable) -> CommitterProfile:
        profile = self.load()
        data = profile.model_dump()
        data['target_repos'] = [str(Path(p).expanduser().resolve()) for p in paths]
        profile = CommitterProfile(**data)
        self.save(profile)
        return profile

    def add_target(self, path) -> CommitterProfile:
        profile = self.load()
        return self.set_targets(profile.target_repos + [path])

    def remove_target(self, path) -> bool:
        """Drop a target; returns False when it was not configured."""
        profile = self.load()
        repo = str(Path(path).expanduser().resolve())
        if repo not in profile.target_repos:
            return False
        self.set_targets([t for t in profile.target_repos if t != repo])
        return True

    def clear_targets(self) -> CommitterProfile:
        return self.set_targets([])
