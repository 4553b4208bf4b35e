"""Timestamped backup snapshots of target repositories."""
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from multicommitter.core.config import DEFAULT_BACKUP_DIR_NAME, get_config
from multicommitter.core.errors import BackupFailedError, PermissionDeniedError
from multicommitter.core.logger import get_logger
from multicommitter.services.copier import Copier, get_copier

logger = get_logger(__name__)

TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'


def ensure_ignore_entry(repo: Path, backup_dir_name: str = DEFAULT_BACKUP_DIR_NAME) -> bool:
    """Make sure repo/.gitignore excludes the backup directory.

    Returns:
        True if .gitignore was created or modified
    """
    entry = f"{backup_dir_name}/"
    ignore_file = Path(repo) / ".gitignore"

    if not ignore_file.exists():
        ignore_file.write_text(f"{entry}\n")
        logger.info(f"Created .gitignore and added {entry} in {repo}")
        return True

    content = ignore_file.read_text()
    accepted = {entry, backup_dir_name, f"/{entry}", f"/{backup_dir_name}"}
    if any(line.strip() in accepted for line in content.splitlines()):
        return False

    separator = "" if not content or content.endswith("\n") else "\n"
    with open(ignore_file, 'a') as f:
        f.write(f"{separator}{entry}\n")
    logger.info(f"Added {entry} to {ignore_file}")
    return True


class BackupManager:
    """Create and list per-target backup snapshots.

    Snapshots live in <target>/<backup_dir_name>/backup_<timestamp>/ and are
    never pruned.
    """

    def __init__(self, copier: Optional[Copier] = None,
                 backup_dir_name: Optional[str] = None,
                 timeout: Optional[int] = None):
        config = get_config()
        self.copier = copier or get_copier(config.copy_backend)
        self.backup_dir_name = backup_dir_name or config.backup_dir_name
        self.timeout = timeout if timeout is not None else config.copy_timeout

    def backup_root(self, target: Path) -> Path:
        return Path(target) / self.backup_dir_name

    def _snapshot_path(self, target: Path, now: Optional[datetime] = None) -> Path:
        timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
        candidate = self.backup_root(target) / f"backup_{timestamp}"
        counter = 1
        # Two applies within the same second
        while candidate.exists():
            candidate = self.backup_root(target) / f"backup_{timestamp}_{counter}"
            counter += 1
        return candidate

    def create_backup(self, target: Path, now: Optional[datetime] = None) -> Path:
        """Copy the target tree (minus the backup dir) into a new snapshot.

        Args:
            target: Target repository root
            now: Timestamp override

        Returns:
            Path of the created snapshot

        Raises:
            BackupFailedError: Snapshot could not be written
            PermissionDeniedError: Backup directory could not be created
        """
        target = Path(target)
        try:
            self.backup_root(target).mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise PermissionDeniedError(target, f"Cannot create backup directory in {target}: {e}") from e
        except OSError as e:
            raise BackupFailedError(target, f"Cannot create backup directory in {target}: {e}") from e

        snapshot = self._snapshot_path(target, now)
        logger.info(f"Backing up {target} to {snapshot}")
        self.copier.snapshot(target, snapshot, self.backup_dir_name, timeout=self.timeout)
        return snapshot

    def list_backups(self, target: Path) -> List[Dict]:
        """List snapshots for a target, newest first.

        Returns:
            List of dicts with name, path, created, sequence and files
        """
        root = self.backup_root(target)
        if not root.is_dir():
            return []

        backups = []
        for entry in root.iterdir():
            if not entry.is_dir() or not entry.name.startswith("backup_"):
                continue

            stem = entry.name[len("backup_"):]
            stamp, suffix = stem[:15], stem[15:]
            try:
                created = datetime.strptime(stamp, TIMESTAMP_FORMAT)
                # Same-second snapshots carry _1, _2, ...
                sequence = int(suffix[1:]) if suffix.startswith("_") else 0
                if suffix and not sequence:
                    raise ValueError(suffix)
            except ValueError:
                logger.debug(f"Skipping unrecognised backup folder {entry}")
                continue

            file_count = sum(len(files) for _, _, files in os.walk(entry))
            backups.append({
                'name': entry.name,
                'path': entry,
                'created': created,
                'sequence': sequence,
                'files': file_count,
            })

        backups.sort(key=lambda b: (b['created'], b['sequence']), reverse=True)
        return backups
