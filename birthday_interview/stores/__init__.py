"""Metadata store backends."""

from .registry import get_backend, get_all_backends, register_backend
from .base import BaseKVBackend
from .json_file import JsonFileBackend
from .memory import MemoryBackend

__all__ = [
    "get_backend",
    "get_all_backends",
    "register_backend",
    "BaseKVBackend",
    "JsonFileBackend",
    "MemoryBackend",
]
