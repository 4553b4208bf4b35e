"""Apply a change set to each target, backing the target up first."""
import os
from pathlib import Path
from typing import Iterable, List, Optional

from multicommitter.core.backup_manager import BackupManager, ensure_ignore_entry
from multicommitter.core.config import get_config
from multicommitter.core.errors import (
    CopyFailedError,
    NoTargetsConfiguredError,
    NotARepositoryError,
    PermissionDeniedError,
    TargetError,
)
from multicommitter.core.exclusions import ExclusionPolicy
from multicommitter.core.logger import get_logger
from multicommitter.core.sync_planner import plan_target
from multicommitter.models.sync import SyncReport, TargetResult, TargetStatus
from multicommitter.services.copier import Copier, get_copier
from multicommitter.services.git_manager import is_git_repo

logger = get_logger(__name__)


def _check_target(source: Path, target: Path) -> None:
    if target.resolve() == source.resolve():
        raise CopyFailedError(target, "Target is the working repository itself")
    if not target.is_dir():
        raise CopyFailedError(target, f"Target directory does not exist: {target}")
    if not os.access(target, os.W_OK | os.X_OK):
        raise PermissionDeniedError(target, f"Target is not writable: {target}")
    if not is_git_repo(target):
        logger.warning(f"{target} is not a git repository; syncing anyway")


def _guard_ignore_file(repo: Path, backup_dir_name: str) -> None:
    try:
        ensure_ignore_entry(repo, backup_dir_name)
    except PermissionError as e:
        raise PermissionDeniedError(repo, f"Cannot update .gitignore in {repo}: {e}") from e
    except OSError as e:
        raise CopyFailedError(repo, f"Cannot update .gitignore in {repo}: {e}") from e


def apply_sync(
    source_root,
    change_set: Iterable[str],
    targets: Iterable,
    policy: Optional[ExclusionPolicy] = None,
    copier: Optional[Copier] = None,
    backups: Optional[BackupManager] = None,
) -> SyncReport:
    """Replicate the change set into every target, in order.

    Each target gets its .gitignore checked, a full backup snapshot, then the
    copy. A failure on one target is recorded and the next target is still
    processed. Ctrl+C stops the batch; the in-progress target is reported as
    interrupted and the rest as skipped.

    Raises:
        NotARepositoryError: source_root is not a git repository
        NoTargetsConfiguredError: targets is empty
        CopyFailedError, PermissionDeniedError: the working repo .gitignore
            could not be updated; no target is touched
    """
    config = get_config()
    source = Path(source_root)
    targets: List[Path] = [Path(t) for t in targets]
    change_set = frozenset(change_set)

    if not is_git_repo(source):
        raise NotARepositoryError(source)
    if not targets:
        raise NoTargetsConfiguredError()
    if not change_set:
        logger.info("No local changes to sync.")
        return SyncReport(noop=True)

    copier = copier or get_copier(config.copy_backend)
    backups = backups or BackupManager(copier=copier)
    backup_dir_name = backups.backup_dir_name
    policy = policy or ExclusionPolicy.default(backup_dir_name)

    _guard_ignore_file(source, backup_dir_name)

    report = SyncReport()
    for index, target in enumerate(targets):
        result = TargetResult(target=target, status=TargetStatus.FAILED)
        try:
            logger.info(f"Applying changes to {target}")
            _check_target(source, target)
            plan = plan_target(source, change_set, target, policy)
            _guard_ignore_file(target, backup_dir_name)
            result.backup_path = backups.create_backup(target)
            result.files_written = copier.copy_files(
                source, target, plan.writes, timeout=config.copy_timeout
            )
            result.status = TargetStatus.SYNCED
            logger.info(f"✓ Changes applied to {target} ({len(result.files_written)} file(s))")
        except TargetError as e:
            result.error_kind = e.kind
            result.error = str(e)
            logger.error(f"{e.kind} for {target}: {e}")
        except KeyboardInterrupt:
            result.status = TargetStatus.INTERRUPTED
            result.error = "Interrupted; target may be partially synced"
            report.results.append(result)
            report.interrupted = True
            logger.warning(f"Aborted by user while processing {target}")
            for remaining in targets[index + 1:]:
                report.results.append(TargetResult(target=remaining, status=TargetStatus.SKIPPED))
            break
        report.results.append(result)

    return report
