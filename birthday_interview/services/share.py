"""Temporary, friendly-named copies of media files for the share sheet."""

import logging
import re
import shutil
from pathlib import Path
from typing import Optional

from ..config import settings
from ..errors import CapabilityUnavailableError
from ..models.records import RecordKind
from ..utils.permissions import require_capabilities
from .media_storage import file_exists, unique_path
from .metadata_store import MetadataStore, get_metadata_store

logger = logging.getLogger(__name__)

KIND_LABELS = {
    RecordKind.CHILDREN: "photo",
    RecordKind.INTERVIEWS: "birthday_interview",
    RecordKind.BALLOON_RUNS: "balloon_run",
    RecordKind.BIRTHDAY_MEDIA: "birthday",
}

_UNSAFE = re.compile(r"[^\w-]+")


def friendly_name(child_name: str, kind: RecordKind, year: Optional[int], ext: str) -> str:
    """e.g. `Nina_birthday_interview_2024.mp4`"""
    parts = [_UNSAFE.sub("_", child_name).strip("_") or "child", KIND_LABELS[kind]]
    if year:
        parts.append(str(year))
    return "_".join(parts) + ext


class ShareService:
    def __init__(self, store: Optional[MetadataStore] = None, share_dir: Optional[Path] = None):
        self.store = store or get_metadata_store()
        self.share_dir = Path(share_dir) if share_dir else settings.share_dir

    async def create_share_copy(self, kind: RecordKind, record_id: str) -> Path:
        record = await self.store.get(kind, record_id)
        if record is None:
            raise KeyError(f"No {kind.value} record with id {record_id}")

        source = record.get(kind.file_field)
        if not file_exists(source):
            raise FileNotFoundError(f"Media file for {kind.value} {record_id} is missing")

        require_capabilities(self.share_dir)
        self.share_dir.mkdir(parents=True, exist_ok=True)

        if kind is RecordKind.CHILDREN:
            child = record
        else:
            child = await self.store.get(RecordKind.CHILDREN, record.get("childId", "")) or {}

        name = friendly_name(child.get("name", ""), kind, record.get("year"), Path(source).suffix)
        dest = unique_path(self.share_dir / name)
        try:
            shutil.copy2(source, dest)
        except OSError as e:
            raise CapabilityUnavailableError(f"Could not prepare file for sharing: {e}") from e
        logger.info(f"Prepared share copy {dest.name}")
        return dest

    def cleanup_temp_shares(self) -> int:
        """Delete every transient share copy. Returns how many were removed."""
        if not self.share_dir.exists():
            return 0
        removed = 0
        for path in self.share_dir.iterdir():
            if not path.is_file():
                continue
            try:
                path.unlink()
                removed += 1
            except OSError as e:
                logger.warning(f"Could not remove share copy {path}: {e}")
        if removed:
            logger.info(f"Removed {removed} temporary share copies")
        return removed
