"""Data models for multi-committer."""
from multicommitter.models.config import CommitterProfile, ConfigValidationError
from multicommitter.models.sync import (
    FileAction,
    PlannedFile,
    SyncReport,
    TargetPlan,
    TargetResult,
    TargetStatus,
)

__all__ = [
    'CommitterProfile',
    'ConfigValidationError',
    'FileAction',
    'PlannedFile',
    'SyncReport',
    'TargetPlan',
    'TargetResult',
    'TargetStatus',
]
