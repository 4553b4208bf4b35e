"""Plan and result types for change-set synchronization."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


class FileAction(Enum):
    CREATE = "create"
    OVERWRITE = "overwrite"
    SKIP_MISSING = "skip-missing"  # gone from source (e.g. deleted)
    REJECTED = "rejected"  # excluded, a directory, or outside the root


class TargetStatus(Enum):
    SYNCED = "synced"
    FAILED = "failed"
    INTERRUPTED = "interrupted"  # partially applied
    SKIPPED = "skipped"  # not reached after an interrupt


@dataclass
class PlannedFile:
    """A single change-set path as it applies to one target."""
    path: str
    action: FileAction

    @property
    def will_write(self) -> bool:
        return self.action in (FileAction.CREATE, FileAction.OVERWRITE)


@dataclass
class TargetPlan:
    """Files that a sync would write into one target."""
    target: Path
    files: List[PlannedFile] = field(default_factory=list)

    @property
    def writes(self) -> List[str]:
        return sorted(f.path for f in self.files if f.will_write)

    @property
    def skipped(self) -> List[str]:
        return sorted(f.path for f in self.files if not f.will_write)

    def count(self, action: FileAction) -> int:
        return sum(1 for f in self.files if f.action is action)


@dataclass
class TargetResult:
    """Outcome of applying a sync to one target."""
    target: Path
    status: TargetStatus
    backup_path: Optional[Path] = None
    files_written: List[str] = field(default_factory=list)
    error_kind: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is TargetStatus.SYNCED


@dataclass
class SyncReport:
    """Per-target results of one apply, in target order."""
    results: List[TargetResult] = field(default_factory=list)
    noop: bool = False
    interrupted: bool = False

    @property
    def failed(self) -> List[TargetResult]:
        return [r for r in self.results if r.status is not TargetStatus.SYNCED]

    @property
    def ok(self) -> bool:
        return not self.interrupted and not self.failed
