"""Abstract key-value backend interface."""

from abc import ABC, abstractmethod
from typing import Optional

from ..models.system import BackendAvailability


class BaseKVBackend(ABC):
    """All metadata store backends implement this interface.

    Values are opaque strings; each `set_item` must replace the value in a
    single step so readers never see a partial write.
    """

    backend_id: str = ""
    name: str = ""
    description: str = ""

    @abstractmethod
    async def check_availability(self) -> BackendAvailability:
        """Check whether this backend is usable on this system."""
        ...

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key was never written."""
        ...

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        ...

    @abstractmethod
    async def all_keys(self) -> list[str]:
        ...
