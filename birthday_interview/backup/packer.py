"""Write metadata and media files into a single zip archive."""

import json
import logging
import os
import zipfile
from pathlib import Path
from typing import Any, Optional

from ..models.backup import BackupDocument, BackupWarning, ExportResult, ManifestEntry
from ..models.records import RecordKind
from .progress import ProgressCallback, emit_progress

logger = logging.getLogger(__name__)

METADATA_NAME = "metadata.json"


class ArchivePacker:
    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)

    async def pack(
        self,
        snapshot: dict[RecordKind, list[dict[str, Any]]],
        manifest: list[ManifestEntry],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ExportResult:
        """Pack every manifest file, then `metadata.json`.

        An unreadable media file is skipped with a warning and left out of
        the embedded manifest. Failing to serialize the metadata or to
        write the archive aborts the export; no partial archive is left
        at `output_path`.
        """
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        partial = self.output_path.with_name(f".{self.output_path.name}.partial")

        total = len(manifest)
        packed: list[ManifestEntry] = []
        warnings: list[BackupWarning] = []

        try:
            with zipfile.ZipFile(partial, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for processed, entry in enumerate(manifest, start=1):
                    filename = Path(entry.absolute_uri).name
                    try:
                        zf.write(entry.absolute_uri, arcname=entry.relative_path)
                        packed.append(entry)
                    except OSError as e:
                        logger.warning(f"Skipping unreadable file {entry.absolute_uri}: {e}")
                        warnings.append(BackupWarning(
                            stage="pack", path=entry.absolute_uri, message=str(e),
                        ))
                    await emit_progress(progress_callback, processed, total, filename)

                document = BackupDocument.from_snapshot(snapshot, manifest=packed)
                payload = json.dumps(document.to_json_dict(), indent=2, ensure_ascii=False)
                zf.writestr(METADATA_NAME, payload.encode("utf-8"))

            os.replace(partial, self.output_path)
        except BaseException:
            if partial.exists():
                partial.unlink()
            raise

        size = self.output_path.stat().st_size
        logger.info(
            f"Archive created: {self.output_path} ({size:,} bytes, "
            f"{len(packed)}/{total} files)"
        )
        return ExportResult(
            path=str(self.output_path),
            size_bytes=size,
            files_packed=len(packed),
            files_skipped=total - len(packed),
            manifest=packed,
            warnings=warnings,
        )
