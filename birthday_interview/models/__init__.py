"""Data models."""

from .records import (
    RecordKind,
    MediaCategory,
    Child,
    Interview,
    BalloonRun,
    BirthdayMedia,
)
from .backup import (
    BackupDocument,
    BackupJob,
    BackupWarning,
    ExportResult,
    ManifestEntry,
    RestoreSummary,
)
from .system import SystemInfo, DirectoryInfo, BackendAvailability

__all__ = [
    "RecordKind",
    "MediaCategory",
    "Child",
    "Interview",
    "BalloonRun",
    "BirthdayMedia",
    "BackupDocument",
    "BackupJob",
    "BackupWarning",
    "ExportResult",
    "ManifestEntry",
    "RestoreSummary",
    "SystemInfo",
    "DirectoryInfo",
    "BackendAvailability",
]
