"""Shared fixtures: a throwaway data directory and an in-memory store."""

import pytest

from birthday_interview.config import settings
from birthday_interview.services.media_storage import MediaDirectories
from birthday_interview.services.metadata_store import MetadataStore, set_metadata_store
from birthday_interview.stores.memory import MemoryBackend


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point every settings-derived path at a temporary directory."""
    root = tmp_path / "device"
    monkeypatch.setattr(settings, "data_dir", root)
    return root


@pytest.fixture
def store(data_dir):
    store = MetadataStore(MemoryBackend())
    set_metadata_store(store)
    yield store
    set_metadata_store(None)


@pytest.fixture
def dirs(data_dir):
    return MediaDirectories.from_settings()


@pytest.fixture
def make_file(tmp_path):
    """Create a file with the given content under an 'old device' tree."""

    def _make(relative: str, content: bytes = b"video-bytes") -> str:
        path = tmp_path / "old-device" / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return str(path)

    return _make
