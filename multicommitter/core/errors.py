"""Named error conditions raised by sync operations."""
from typing import Optional


class SyncError(Exception):
    """Base class for sync failures."""

    kind = "SyncError"


class NotARepositoryError(SyncError):
    """Raised when a path has no git metadata."""

    kind = "NotARepository"

    def __init__(self, path):
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class VcsQueryError(SyncError):
    """Raised when the source repository's git state cannot be read."""

    kind = "VcsQueryFailed"


class NoTargetsConfiguredError(SyncError):
    """Raised when a sync is requested without any target repository."""

    kind = "NoTargetsConfigured"

    def __init__(self, message: str = "No target repositories configured"):
        super().__init__(message)


class TargetError(SyncError):
    """Failure confined to a single target; the batch carries on."""

    def __init__(self, target, message: str, stderr: Optional[str] = None):
        self.target = target
        self.stderr = stderr
        super().__init__(message)


class BackupFailedError(TargetError):
    kind = "BackupFailed"


class CopyFailedError(TargetError):
    kind = "CopyFailed"


class PermissionDeniedError(TargetError):
    kind = "PermissionDenied"
