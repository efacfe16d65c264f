"""Backup, restore and delete result models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
import uuid

from .records import MediaCategory, RecordKind


class BackupWarning(BaseModel):
    """A non-fatal problem encountered while processing one file."""

    stage: str  # "manifest", "pack", "unpack", "delete", "commit"
    path: str = ""
    message: str


class ManifestEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: MediaCategory
    relative_path: str
    absolute_uri: str
    record_id: Optional[str] = None


class BackupDocument(BaseModel):
    """The `metadata.json` document, or a metadata-only export when
    `manifest` is None."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    export_date: str = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc).isoformat()
    )
    children: list[dict[str, Any]] = Field(default_factory=list)
    interviews: list[dict[str, Any]] = Field(default_factory=list)
    balloon_runs: list[dict[str, Any]] = Field(default_factory=list)
    birthday_media: list[dict[str, Any]] = Field(default_factory=list)
    manifest: Optional[list[ManifestEntry]] = None

    @classmethod
    def from_snapshot(
        cls,
        snapshot: dict[RecordKind, list[dict[str, Any]]],
        manifest: Optional[list[ManifestEntry]] = None,
    ) -> "BackupDocument":
        return cls(
            children=snapshot.get(RecordKind.CHILDREN, []),
            interviews=snapshot.get(RecordKind.INTERVIEWS, []),
            balloon_runs=snapshot.get(RecordKind.BALLOON_RUNS, []),
            birthday_media=snapshot.get(RecordKind.BIRTHDAY_MEDIA, []),
            manifest=manifest,
        )

    def collections(self) -> dict[RecordKind, list[dict[str, Any]]]:
        return {
            RecordKind.CHILDREN: self.children,
            RecordKind.INTERVIEWS: self.interviews,
            RecordKind.BALLOON_RUNS: self.balloon_runs,
            RecordKind.BIRTHDAY_MEDIA: self.birthday_media,
        }

    def records_without_id(self) -> list[tuple[RecordKind, int]]:
        """(kind, position) of every record that cannot be merged by id."""
        return [
            (kind, i)
            for kind, records in self.collections().items()
            for i, record in enumerate(records)
            if not record.get("id")
        ]

    def to_json_dict(self) -> dict[str, Any]:
        # Record dicts are dumped as-is; only a missing manifest is dropped
        exclude = {"manifest"} if self.manifest is None else None
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


class ExportResult(BaseModel):
    path: str
    size_bytes: int = 0
    files_packed: int = 0
    files_skipped: int = 0
    manifest: list[ManifestEntry] = Field(default_factory=list)
    warnings: list[BackupWarning] = Field(default_factory=list)


class RestoreSummary(BaseModel):
    children: int = 0
    interviews: int = 0
    balloon_runs: int = 0
    birthday_media: int = 0
    media_files: int = 0
    media_by_category: dict[str, int] = Field(default_factory=dict)
    warnings: list[BackupWarning] = Field(default_factory=list)


class MergeCounts(BaseModel):
    added: int = 0
    replaced: int = 0


class DeleteResult(BaseModel):
    deleted: bool = False
    file_deleted: bool = False
    warnings: list[BackupWarning] = Field(default_factory=list)


class CascadeDeleteResult(BaseModel):
    child_deleted: bool = False
    interviews: int = 0
    balloon_runs: int = 0
    birthday_media: int = 0
    files_attempted: int = 0
    files_deleted: int = 0
    warnings: list[BackupWarning] = Field(default_factory=list)


class BackupJobType(str, Enum):
    EXPORT = "export"
    IMPORT = "import"


class BackupStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class BackupProgress(BaseModel):
    processed: int = 0
    total: int = 0
    current_file: str = ""
    percent: float = 0.0
    message: str = ""


class BackupJob(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])
    type: BackupJobType
    archive_path: str = ""
    status: BackupStatus = BackupStatus.PENDING
    progress: BackupProgress = Field(default_factory=BackupProgress)
    result: Optional[Union[ExportResult, RestoreSummary]] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))
    completed_at: Optional[datetime] = None
    error: Optional[str] = None
