"""Persisted profile: the working repository and its sync targets."""
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ConfigValidationError(Exception):
    """Raised when the profile file cannot be parsed or validated."""
    pass


class CommitterProfile(BaseModel):
    """Working repo plus ordered target list, as stored on disk."""

    model_config = ConfigDict(extra='forbid')

    working_repo: Optional[str] = None
    target_repos: List[str] = Field(default_factory=list)
    # None defers to the runtime config (environment)
    backup_dir_name: Optional[str] = None
    copy_backend: Optional[Literal["auto", "rsync", "local"]] = None

    @field_validator('target_repos')
    @classmethod
    def dedupe_targets(cls, v):
        """Drop repeated targets, keeping first-seen order."""
        seen = set()
        unique = []
        for repo in v:
            key = str(Path(repo))
            if key not in seen:
                seen.add(key)
                unique.append(key)
        return unique

    @field_validator('backup_dir_name')
    @classmethod
    def validate_backup_dir_name(cls, v):
        if v is None:
            return v
        if not v or "/" in v or v in {'.', '..'}:
            raise ValueError(f"backup_dir_name must be a plain directory name, got {v!r}")
        return v

    @model_validator(mode='after')
    def working_repo_not_a_target(self) -> 'CommitterProfile':
        if self.working_repo:
            source = str(Path(self.working_repo))
            self.target_repos = [t for t in self.target_repos if t != source]
        return self

    @property
    def working_path(self) -> Optional[Path]:
        return Path(self.working_repo) if self.working_repo else None

    @property
    def target_paths(self) -> List[Path]:
        return [Path(t) for t in self.target_repos]
