"""Compute the set of locally changed files in the working repository."""
from pathlib import Path
from typing import FrozenSet, Optional

from multicommitter.core.config import get_config
from multicommitter.core.errors import NotARepositoryError
from multicommitter.core.exclusions import ExclusionPolicy
from multicommitter.core.logger import get_logger
from multicommitter.services.git_manager import GitManager, is_git_repo

logger = get_logger(__name__)


def compute_change_set(
    source_root,
    policy: Optional[ExclusionPolicy] = None,
    git: Optional[GitManager] = None,
) -> FrozenSet[str]:
    """Return relative paths that differ from the repository baseline.

    Union of unstaged edits, staged edits and untracked non-ignored files,
    with excluded paths removed. Always queried fresh.

    Raises:
        NotARepositoryError: source_root has no git metadata
        VcsQueryError: git could not report the repository state
    """
    source = Path(source_root)
    if not is_git_repo(source):
        raise NotARepositoryError(source)

    policy = policy or ExclusionPolicy.default(get_config().backup_dir_name)
    git = git or GitManager()

    changed = set()
    changed.update(git.list_unstaged(source))
    changed.update(git.list_staged(source))
    changed.update(git.list_untracked(source))

    kept = policy.filter(changed)
    dropped = len(changed) - len(kept)
    if dropped:
        logger.debug(f"Exclusion policy dropped {dropped} path(s)")

    logger.debug(f"Change set for {source}: {len(kept)} file(s)")
    return frozenset(kept)
