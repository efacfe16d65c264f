"""Metadata-only and full backup / restore operations."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from ..backup.manifest import build_manifest, estimate_backup_size
from ..backup.packer import ArchivePacker
from ..backup.progress import ProgressCallback
from ..backup.unpacker import ArchiveUnpacker
from ..config import settings
from ..errors import BackupParseError
from ..models.backup import BackupDocument, ExportResult, RestoreSummary
from ..models.records import ALL_KINDS, RecordKind
from ..utils.permissions import require_capabilities
from .media_storage import MediaDirectories
from .metadata_store import MetadataStore, get_metadata_store

logger = logging.getLogger(__name__)

_COLLECTION_KEYS = tuple(kind.value for kind in ALL_KINDS)


class BackupService:
    def __init__(
        self,
        store: Optional[MetadataStore] = None,
        dirs: Optional[MediaDirectories] = None,
        backup_dir: Optional[Path] = None,
        staging_dir: Optional[Path] = None,
    ):
        self.store = store or get_metadata_store()
        self.dirs = dirs or MediaDirectories.from_settings()
        self.backup_dir = Path(backup_dir) if backup_dir else settings.backup_dir
        self.staging_dir = Path(staging_dir) if staging_dir else settings.staging_dir

    # Metadata-only

    async def export_all_data(self) -> dict[str, Any]:
        """Every record, no media bytes."""
        snapshot = await self.store.snapshot()
        return BackupDocument.from_snapshot(snapshot).to_json_dict()

    async def import_data(self, data: Any) -> RestoreSummary:
        """Merge a metadata-only document into the store, by record id.

        The whole document is validated before anything is written.
        """
        if not isinstance(data, dict) or not any(key in data for key in _COLLECTION_KEYS):
            raise BackupParseError(
                "The data does not contain children, interviews, balloon runs or birthday media"
            )
        try:
            document = BackupDocument.model_validate(data)
        except ValidationError as e:
            raise BackupParseError(f"Backup data is malformed: {e.error_count()} invalid fields") from e
        missing = document.records_without_id()
        if missing:
            kind, position = missing[0]
            raise BackupParseError(
                f"{len(missing)} records have no id (first: {kind.value}[{position}])"
            )

        summary = RestoreSummary()
        for kind, records in document.collections().items():
            if kind.value not in data:
                continue
            await self.store.merge_collection(kind, records)
            if kind is RecordKind.CHILDREN:
                summary.children = len(records)
            elif kind is RecordKind.INTERVIEWS:
                summary.interviews = len(records)
            elif kind is RecordKind.BALLOON_RUNS:
                summary.balloon_runs = len(records)
            else:
                summary.birthday_media = len(records)

        logger.info(
            f"Imported metadata: {summary.children} children, {summary.interviews} interviews, "
            f"{summary.balloon_runs} balloon runs, {summary.birthday_media} birthday media"
        )
        return summary

    async def import_json_text(self, text: str) -> RestoreSummary:
        trimmed = (text or "").strip()
        if not trimmed:
            raise BackupParseError("No backup data provided")
        try:
            data = json.loads(trimmed)
        except json.JSONDecodeError as e:
            raise BackupParseError(f"Could not parse JSON: {e.msg} (line {e.lineno})") from e
        return await self.import_data(data)

    # Full backup

    def default_backup_path(self) -> Path:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return self.backup_dir / f"birthday-interview-backup_{stamp}.zip"

    async def export_full_backup(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        output_path: Optional[Union[str, Path]] = None,
    ) -> ExportResult:
        output = Path(output_path) if output_path else self.default_backup_path()
        require_capabilities(output.parent, need_zip=True)

        logger.info(f"Starting full backup to {output}")
        snapshot = await self.store.snapshot()
        manifest, manifest_warnings = build_manifest(snapshot)

        result = await ArchivePacker(output).pack(snapshot, manifest, progress_callback)
        result.warnings = manifest_warnings + result.warnings
        return result

    async def import_full_backup(
        self,
        archive_path: Union[str, Path],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> RestoreSummary:
        require_capabilities(*self.dirs.all().values(), self.staging_dir, need_zip=True)
        logger.info(f"Starting full restore from {archive_path}")
        unpacker = ArchiveUnpacker(self.store, self.dirs, self.staging_dir)
        return await unpacker.unpack(archive_path, progress_callback)

    async def get_backup_size_estimate(self) -> int:
        return estimate_backup_size(await self.store.snapshot())
