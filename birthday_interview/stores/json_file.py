"""File-per-key backend on local disk."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from ..config import settings
from ..models.system import BackendAvailability
from ..utils.permissions import check_path_writable
from .base import BaseKVBackend
from .registry import register_backend

logger = logging.getLogger(__name__)


class JsonFileBackend(BaseKVBackend):
    backend_id = "json"
    name = "JSON files"
    description = "One JSON file per collection under the data directory"

    def __init__(self, directory: Optional[Path] = None):
        self._directory = Path(directory) if directory else None

    @property
    def directory(self) -> Path:
        # Resolved lazily so settings overrides apply to the registered instance
        return self._directory or settings.store_dir

    def _path_for(self, key: str) -> Path:
        safe = key.lstrip("@").replace("/", "_").replace(os.sep, "_")
        return self.directory / f"{safe}.json"

    async def check_availability(self) -> BackendAvailability:
        writable = check_path_writable(str(self.directory))
        if not writable:
            detail = f"{self.directory} is not writable"
        elif self.directory.exists():
            count = sum(1 for _ in self.directory.glob("*.json"))
            detail = f"{count} collections in {self.directory}"
        else:
            detail = f"{self.directory} will be created on first write"
        return BackendAvailability(
            backend_id=self.backend_id,
            name=self.name,
            available=writable,
            detail=detail,
        )

    async def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    async def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=".tmp_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug(f"Wrote {key} ({len(value)} bytes) to {path}")

    async def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        if path.exists():
            path.unlink()

    async def all_keys(self) -> list[str]:
        if not self.directory.exists():
            return []
        return [f"@{p.stem}" for p in sorted(self.directory.glob("*.json"))]


register_backend(JsonFileBackend())
