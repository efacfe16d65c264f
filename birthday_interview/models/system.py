"""System information models."""

from typing import Optional
from pydantic import BaseModel, Field


class DirectoryInfo(BaseModel):
    name: str
    path: str
    exists: bool = False
    writable: bool = False
    file_count: int = 0
    total_size: int = 0


class BackendAvailability(BaseModel):
    backend_id: str
    name: str
    available: bool = False
    detail: str = ""


class SystemInfo(BaseModel):
    data_dir: str = ""
    free_space: int = 0
    store_backend: str = ""
    zip_available: bool = False
    directories: list[DirectoryInfo] = Field(default_factory=list)
    backends: list[BackendAvailability] = Field(default_factory=list)
    record_counts: dict[str, int] = Field(default_factory=dict)
    backup_size_estimate: Optional[int] = None
