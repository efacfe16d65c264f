"""Build the list of media files that back the current records."""

import logging
import re
from pathlib import Path, PurePosixPath
from typing import Any, Optional

from ..models.backup import BackupWarning, ManifestEntry
from ..models.records import MANIFEST_ORDER, RecordKind

logger = logging.getLogger(__name__)

MEDIA_PREFIX = "media"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def _archive_name(record: dict[str, Any], source: str) -> str:
    """Record id plus the source extension; falls back to the source basename."""
    suffix = Path(source).suffix
    record_id = record.get("id")
    if record_id:
        stem = _UNSAFE_CHARS.sub("_", str(record_id))
    else:
        stem = _UNSAFE_CHARS.sub("_", Path(source).stem) or "file"
    return f"{stem}{suffix}"


def _claim_relative_path(name: str, used: set[str]) -> str:
    candidate = str(PurePosixPath(MEDIA_PREFIX) / name)
    if candidate not in used:
        used.add(candidate)
        return candidate
    stem = PurePosixPath(name).stem
    suffix = PurePosixPath(name).suffix
    counter = 1
    while True:
        candidate = str(PurePosixPath(MEDIA_PREFIX) / f"{stem}_{counter}{suffix}")
        if candidate not in used:
            used.add(candidate)
            return candidate
        counter += 1


def _check_source(source: Any) -> tuple[bool, Optional[str]]:
    """Returns (exists, error message)."""
    if not isinstance(source, str):
        return False, f"file reference is not a path: {source!r}"
    try:
        return Path(source).is_file(), None
    except (OSError, ValueError) as e:
        return False, str(e)


def build_manifest(
    snapshot: dict[RecordKind, list[dict[str, Any]]],
) -> tuple[list[ManifestEntry], list[BackupWarning]]:
    """Scan all collections for file references that still exist on disk.

    One entry per distinct source file; later records that reference an
    already listed file share its entry. Read-only: records are never
    modified. Problems with one record are recorded as warnings and the
    scan continues.
    """
    entries: list[ManifestEntry] = []
    warnings: list[BackupWarning] = []
    used: set[str] = set()
    listed: set[str] = set()

    for kind in MANIFEST_ORDER:
        for record in snapshot.get(kind, []):
            source = record.get(kind.file_field)
            if not source:
                continue
            if isinstance(source, str) and source in listed:
                continue

            exists, error = _check_source(source)
            if error:
                logger.warning(f"Skipping {kind.value} {record.get('id')}: {error}")
                warnings.append(BackupWarning(stage="manifest", path=str(source), message=error))
                continue
            if not exists:
                logger.info(f"Referenced file missing for {kind.value} {record.get('id')}: {source}")
                warnings.append(BackupWarning(
                    stage="manifest", path=source, message="Referenced file not found",
                ))
                continue

            listed.add(source)
            entries.append(ManifestEntry(
                type=kind.category,
                relative_path=_claim_relative_path(_archive_name(record, source), used),
                absolute_uri=source,
                record_id=record.get("id"),
            ))

    logger.info(f"Manifest built: {len(entries)} files, {len(warnings)} skipped")
    return entries, warnings


def estimate_backup_size(snapshot: dict[RecordKind, list[dict[str, Any]]]) -> int:
    """Total bytes of distinct existing media files referenced by records."""
    seen: set[str] = set()
    total = 0
    for kind in MANIFEST_ORDER:
        for record in snapshot.get(kind, []):
            source = record.get(kind.file_field)
            if not isinstance(source, str) or not source or source in seen:
                continue
            seen.add(source)
            try:
                total += Path(source).stat().st_size
            except OSError:
                continue
    return total
