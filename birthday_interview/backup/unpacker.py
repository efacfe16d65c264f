"""Restore records and media files from a backup archive."""

import json
import logging
import shutil
import uuid
import zipfile
from pathlib import Path, PurePosixPath
from typing import Any, Optional, Union

from pydantic import ValidationError

from ..errors import InvalidBackupError
from ..models.backup import BackupDocument, BackupWarning, ManifestEntry, RestoreSummary
from ..models.records import ALL_KINDS, RecordKind
from ..services.media_storage import MediaDirectories, ensure_canonical_dirs, sha256, unique_path
from ..services.metadata_store import MetadataStore
from .packer import METADATA_NAME
from .progress import ProgressCallback, emit_progress

logger = logging.getLogger(__name__)

Record = dict[str, Any]


def read_backup_document(zf: zipfile.ZipFile) -> BackupDocument:
    """Parse and validate `metadata.json`; every record must carry an id."""
    if METADATA_NAME not in zf.namelist():
        raise InvalidBackupError(f"Invalid backup: archive has no {METADATA_NAME}")
    try:
        data = json.loads(zf.read(METADATA_NAME).decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidBackupError(f"Invalid backup: {METADATA_NAME} is not valid JSON ({e})") from e
    if not isinstance(data, dict):
        raise InvalidBackupError(f"Invalid backup: {METADATA_NAME} is not a JSON object")
    try:
        document = BackupDocument.model_validate(data)
    except ValidationError as e:
        raise InvalidBackupError(f"Invalid backup: {e.error_count()} malformed fields in {METADATA_NAME}") from e
    missing = document.records_without_id()
    if missing:
        kind, position = missing[0]
        raise InvalidBackupError(
            f"Invalid backup: {len(missing)} records have no id (first: {kind.value}[{position}])"
        )
    return document


def remap_records(
    collections: dict[RecordKind, list[Record]], path_map: dict[str, str],
) -> dict[RecordKind, list[Record]]:
    """Point file references at their restored locations.

    References without a mapping are left as they are; they may be
    foreign paths that simply resolve to "file not found" later.
    """
    remapped: dict[RecordKind, list[Record]] = {}
    for kind, records in collections.items():
        out = []
        for record in records:
            record = dict(record)
            source = record.get(kind.file_field)
            if isinstance(source, str) and source in path_map:
                record[kind.file_field] = path_map[source]
            out.append(record)
        remapped[kind] = out
    return remapped


class ArchiveUnpacker:
    def __init__(self, store: MetadataStore, dirs: MediaDirectories, staging_root: Path):
        self.store = store
        self.dirs = dirs
        self.staging_root = Path(staging_root)

    async def unpack(
        self,
        archive_path: Union[str, Path],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> RestoreSummary:
        """Extract media into canonical directories and merge the records.

        Files are first staged, then moved into place, then the records are
        merged. If anything fails before the merge finishes, files moved
        by this call are removed and collections already merged are put
        back, so a failed import leaves no orphans behind.
        """
        archive_path = Path(archive_path)
        if not archive_path.is_file():
            raise InvalidBackupError(f"Backup file not found: {archive_path}")
        try:
            zf = zipfile.ZipFile(archive_path, "r")
        except zipfile.BadZipFile as e:
            raise InvalidBackupError(f"Invalid backup: {archive_path.name} is not a zip archive") from e

        with zf:
            document = read_backup_document(zf)
            manifest = document.manifest or []
            summary = RestoreSummary()

            ensure_canonical_dirs(self.dirs)
            staging = self.staging_root / f"restore_{uuid.uuid4().hex[:8]}"
            staging.mkdir(parents=True, exist_ok=True)
            committed: list[Path] = []

            try:
                staged = await self._stage_files(zf, manifest, staging, summary, progress_callback)
                path_map = self._commit_files(staged, committed, summary)
                remapped = remap_records(document.collections(), path_map)
                await self._merge(remapped, summary)
            except BaseException:
                self._rollback_files(committed)
                raise
            finally:
                shutil.rmtree(staging, ignore_errors=True)

        logger.info(
            f"Restore complete from {archive_path.name}: {summary.children} children, "
            f"{summary.interviews} interviews, {summary.balloon_runs} balloon runs, "
            f"{summary.birthday_media} birthday media, {summary.media_files} files"
        )
        return summary

    async def _stage_files(
        self,
        zf: zipfile.ZipFile,
        manifest: list[ManifestEntry],
        staging: Path,
        summary: RestoreSummary,
        progress_callback: Optional[ProgressCallback],
    ) -> list[tuple[ManifestEntry, Path]]:
        names = set(zf.namelist())
        total = len(manifest)
        staged: list[tuple[ManifestEntry, Path]] = []
        sources: set[str] = set()

        for processed, entry in enumerate(manifest, start=1):
            basename = PurePosixPath(entry.relative_path).name
            try:
                if entry.relative_path not in names:
                    # Trimmed archives are allowed
                    logger.info(f"Archive has no {entry.relative_path}, skipping")
                    summary.warnings.append(BackupWarning(
                        stage="unpack", path=entry.relative_path, message="Missing from archive",
                    ))
                    continue
                if entry.absolute_uri in sources:
                    # Restored once; every record referencing it is remapped
                    continue
                if not basename or basename in (".", ".."):
                    summary.warnings.append(BackupWarning(
                        stage="unpack", path=entry.relative_path, message="Unusable archive path",
                    ))
                    continue

                category_dir = staging / entry.type.value
                category_dir.mkdir(parents=True, exist_ok=True)
                target = unique_path(category_dir / basename)
                with zf.open(entry.relative_path) as src, open(target, "wb") as dest:
                    shutil.copyfileobj(src, dest)
                staged.append((entry, target))
                sources.add(entry.absolute_uri)
            except (OSError, zipfile.BadZipFile) as e:
                logger.warning(f"Could not extract {entry.relative_path}: {e}")
                summary.warnings.append(BackupWarning(
                    stage="unpack", path=entry.relative_path, message=str(e),
                ))
            finally:
                await emit_progress(progress_callback, processed, total, basename)

        return staged

    def _commit_files(
        self,
        staged: list[tuple[ManifestEntry, Path]],
        committed: list[Path],
        summary: RestoreSummary,
    ) -> dict[str, str]:
        """Move staged files into canonical directories.

        An identical file already at the destination is reused; a different
        one is kept and the restored file gets a numbered name.
        """
        path_map: dict[str, str] = {}
        for entry, staged_path in staged:
            dest = self.dirs.for_category(entry.type) / staged_path.name
            if dest.exists():
                if dest.is_file() and sha256(dest) == sha256(staged_path):
                    logger.debug(f"Reusing identical file {dest}")
                else:
                    dest = unique_path(dest)
            if not dest.exists():
                shutil.move(str(staged_path), str(dest))
                committed.append(dest)

            path_map[entry.absolute_uri] = str(dest)
            summary.media_files += 1
            key = entry.type.value
            summary.media_by_category[key] = summary.media_by_category.get(key, 0) + 1
        return path_map

    async def _merge(self, collections: dict[RecordKind, list[Record]], summary: RestoreSummary) -> None:
        previous: dict[RecordKind, list[Record]] = {}
        try:
            for kind in ALL_KINDS:
                records = collections.get(kind) or []
                if not records:
                    continue
                previous[kind] = await self.store.get_collection(kind)
                counts = await self.store.merge_collection(kind, records)
                logger.debug(f"Merged {kind.value}: {counts.added} added, {counts.replaced} replaced")
                if kind is RecordKind.CHILDREN:
                    summary.children = len(records)
                elif kind is RecordKind.INTERVIEWS:
                    summary.interviews = len(records)
                elif kind is RecordKind.BALLOON_RUNS:
                    summary.balloon_runs = len(records)
                else:
                    summary.birthday_media = len(records)
        except BaseException:
            for kind, records in previous.items():
                try:
                    await self.store.save_collection(kind, records)
                except Exception as e:
                    logger.error(f"Could not roll back {kind.value} after failed import: {e}")
            raise

    def _rollback_files(self, committed: list[Path]) -> None:
        for path in committed:
            try:
                path.unlink()
            except OSError as e:
                logger.error(f"Could not remove restored file {path} during rollback: {e}")
        if committed:
            logger.warning(f"Import failed; removed {len(committed)} restored files")
