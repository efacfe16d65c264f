"""In-process backend, used for tests and throwaway sessions."""

from typing import Optional

from ..models.system import BackendAvailability
from .base import BaseKVBackend
from .registry import register_backend


class MemoryBackend(BaseKVBackend):
    backend_id = "memory"
    name = "Memory"
    description = "Keeps collections in process memory (lost on exit)"

    def __init__(self):
        self._data: dict[str, str] = {}

    async def check_availability(self) -> BackendAvailability:
        return BackendAvailability(
            backend_id=self.backend_id,
            name=self.name,
            available=True,
            detail=f"{len(self._data)} keys in memory",
        )

    async def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    async def all_keys(self) -> list[str]:
        return list(self._data)


register_backend(MemoryBackend())
