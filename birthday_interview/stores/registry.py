"""Backend auto-registration."""

from typing import Optional
from .base import BaseKVBackend

_registry: dict[str, BaseKVBackend] = {}


def register_backend(backend: BaseKVBackend) -> None:
    _registry[backend.backend_id] = backend


def get_backend(backend_id: str) -> Optional[BaseKVBackend]:
    return _registry.get(backend_id)


def get_all_backends() -> dict[str, BaseKVBackend]:
    return dict(_registry)
