"""File copy backends: rsync and a pure-Python fallback.

Both backends take an explicit list of relative paths and preserve the
relative directory layout under the destination.
"""
import os
import shutil
import subprocess
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional

from multicommitter.core.errors import (
    BackupFailedError,
    CopyFailedError,
    PermissionDeniedError,
    SyncError,
)
from multicommitter.core.logger import get_logger

logger = get_logger(__name__)


class Copier(ABC):
    """Abstract interface for copy backends."""

    name = "abstract"

    @abstractmethod
    def copy_files(self, source: Path, target: Path, paths: Iterable[str],
                   timeout: Optional[int] = None) -> List[str]:
        """Copy relative paths from source into target.

        Args:
            source: Source root
            target: Destination root
            paths: Relative file paths
            timeout: Seconds before the copy is abandoned

        Returns:
            The relative paths written

        Raises:
            CopyFailedError: Copy did not complete
            PermissionDeniedError: Destination not writable
        """
        pass

    @abstractmethod
    def snapshot(self, target: Path, destination: Path, exclude_name: str,
                 timeout: Optional[int] = None) -> Path:
        """Copy the whole target tree into destination, skipping exclude_name.

        Raises:
            BackupFailedError: Snapshot did not complete
        """
        pass


class RsyncCopier(Copier):
    """Copies through rsync with a NUL-delimited file list on stdin."""

    name = "rsync"

    def copy_files(self, source, target, paths, timeout=None):
        paths = list(paths)
        if not paths:
            return []

        cmd = [
            'rsync', '-a',
            '--from0', '--files-from=-',
            '--relative',
            f"{source}/", f"{target}/",
        ]
        file_list = b"".join(os.fsencode(p) + b"\0" for p in paths)

        try:
            logger.debug(f"Running {' '.join(cmd)} with {len(paths)} file(s)")
            subprocess.run(cmd, input=file_list, capture_output=True, check=True, timeout=timeout)
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors='replace') if e.stderr else ""
            logger.error(f"rsync into {target} failed: {e}")
            if stderr:
                logger.error(f"Error output: {stderr}")
            if "Permission denied" in stderr:
                raise PermissionDeniedError(target, f"Permission denied writing to {target}", stderr) from e
            raise CopyFailedError(target, f"rsync exited with status {e.returncode}", stderr) from e
        except subprocess.TimeoutExpired as e:
            raise CopyFailedError(target, f"rsync timed out after {timeout}s") from e

        return paths

    def snapshot(self, target, destination, exclude_name, timeout=None):
        cmd = [
            'rsync', '-a',
            '--exclude', f"/{exclude_name}",
            f"{target}/", f"{destination}/",
        ]

        try:
            logger.debug(f"Running {' '.join(cmd)}")
            subprocess.run(cmd, capture_output=True, check=True, timeout=timeout)
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors='replace') if e.stderr else ""
            logger.error(f"Backup of {target} failed: {e}")
            if stderr:
                logger.error(f"Error output: {stderr}")
            raise BackupFailedError(target, f"rsync exited with status {e.returncode}", stderr) from e
        except subprocess.TimeoutExpired as e:
            raise BackupFailedError(target, f"Backup timed out after {timeout}s") from e

        return destination


class LocalCopier(Copier):
    """shutil-based copy used when rsync is not installed."""

    name = "local"

    def copy_files(self, source, target, paths, timeout=None):
        deadline = time.monotonic() + timeout if timeout else None
        written = []

        for rel_path in paths:
            if deadline is not None and time.monotonic() > deadline:
                raise CopyFailedError(target, f"Copy timed out after {timeout}s "
                                              f"({len(written)} file(s) written)")
            src = Path(source) / rel_path
            dst = Path(target) / rel_path
            if dst.is_dir() and not dst.is_symlink():
                raise CopyFailedError(target, f"Cannot replace directory {rel_path} with a file")
            try:
                dst.parent.mkdir(parents=True, exist_ok=True)
                if dst.is_symlink():
                    dst.unlink()
                shutil.copy2(src, dst, follow_symlinks=False)
            except PermissionError as e:
                raise PermissionDeniedError(target, f"Permission denied writing {rel_path}: {e}") from e
            except OSError as e:
                raise CopyFailedError(target, f"Failed to copy {rel_path}: {e}") from e
            written.append(rel_path)

        return written

    def snapshot(self, target, destination, exclude_name, timeout=None):
        target = Path(target)

        def ignore_backup_dir(directory, names):
            if Path(directory) == target:
                return [n for n in names if n == exclude_name]
            return []

        try:
            shutil.copytree(target, destination, symlinks=True, ignore=ignore_backup_dir)
        except (shutil.Error, OSError) as e:
            logger.error(f"Backup of {target} failed: {e}")
            raise BackupFailedError(target, f"Backup copy failed: {e}") from e

        return destination


def get_copier(backend: str = "auto") -> Copier:
    """Return a copy backend by name ("auto" prefers rsync when installed)."""
    if backend == "auto":
        backend = "rsync" if shutil.which("rsync") else "local"

    if backend == "rsync":
        if not shutil.which("rsync"):
            raise SyncError("rsync backend requested but rsync is not installed")
        return RsyncCopier()
    if backend == "local":
        return LocalCopier()

    raise SyncError(f"Unknown copy backend: {backend}")
