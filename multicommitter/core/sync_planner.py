"""Resolve a change set against each target.

Preview and apply both go through plan_target(), so the files a preview
lists are exactly the files an apply writes.
"""
import os
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional

from multicommitter.core.config import get_config
from multicommitter.core.exclusions import ExclusionPolicy
from multicommitter.core.logger import get_logger
from multicommitter.models.sync import FileAction, PlannedFile, TargetPlan

logger = get_logger(__name__)


def is_safe_relative(rel_path: str) -> bool:
    """Reject absolute paths and paths that climb out of the root."""
    path = PurePosixPath(rel_path)
    if not rel_path or path.is_absolute():
        return False
    return ".." not in path.parts


def classify(source: Path, target: Path, rel_path: str,
             policy: ExclusionPolicy) -> FileAction:
    """Decide what a sync does with one path for one target."""
    if not is_safe_relative(rel_path) or policy.is_excluded(rel_path):
        return FileAction.REJECTED

    src = source / rel_path
    if not os.path.lexists(src):
        return FileAction.SKIP_MISSING
    if src.is_dir() and not src.is_symlink():
        return FileAction.REJECTED

    dst = target / rel_path
    if dst.is_dir() and not dst.is_symlink():
        # A file never replaces a directory in the target
        return FileAction.REJECTED
    if os.path.lexists(dst):
        return FileAction.OVERWRITE
    return FileAction.CREATE


def plan_target(source_root, change_set: Iterable[str], target,
                policy: Optional[ExclusionPolicy] = None) -> TargetPlan:
    """Build the plan for a single target without touching the filesystem."""
    policy = policy or ExclusionPolicy.default(get_config().backup_dir_name)
    source = Path(source_root)
    target = Path(target)

    plan = TargetPlan(target=target)
    for rel_path in sorted(change_set):
        action = classify(source, target, rel_path, policy)
        if action is FileAction.REJECTED:
            logger.warning(f"Ignoring {rel_path!r} for {target}: not a path the sync may write")
        plan.files.append(PlannedFile(path=rel_path, action=action))
    return plan


def preview_sync(source_root, change_set: Iterable[str], targets: Iterable,
                 policy: Optional[ExclusionPolicy] = None) -> List[TargetPlan]:
    """Report, per target, which files would be created or overwritten."""
    change_set = frozenset(change_set)
    return [plan_target(source_root, change_set, target, policy) for target in targets]
