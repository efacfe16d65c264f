"""Canonical media directories and file helpers."""

import hashlib
import logging
import re
import shutil
import time
from pathlib import Path
from typing import Optional, Union

from ..config import settings
from ..models.backup import BackupWarning
from ..models.records import MediaCategory

logger = logging.getLogger(__name__)

FILENAME_PREFIXES = {
    MediaCategory.INTERVIEW: "interview",
    MediaCategory.BALLOON: "balloon",
    MediaCategory.PROFILE: "profile",
    MediaCategory.BIRTHDAY_MEDIA: "birthday",
}

DEFAULT_EXTENSIONS = {
    MediaCategory.INTERVIEW: ".mp4",
    MediaCategory.BALLOON: ".mp4",
    MediaCategory.PROFILE: ".jpg",
    MediaCategory.BIRTHDAY_MEDIA: ".jpg",
}

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class MediaDirectories:
    """Where each media category lives on this device."""

    def __init__(
        self,
        video_dir: Path,
        balloon_video_dir: Path,
        profile_photo_dir: Path,
        birthday_media_dir: Path,
    ):
        self._dirs = {
            MediaCategory.INTERVIEW: Path(video_dir),
            MediaCategory.BALLOON: Path(balloon_video_dir),
            MediaCategory.PROFILE: Path(profile_photo_dir),
            MediaCategory.BIRTHDAY_MEDIA: Path(birthday_media_dir),
        }

    @classmethod
    def from_settings(cls) -> "MediaDirectories":
        return cls(
            video_dir=settings.video_dir,
            balloon_video_dir=settings.balloon_video_dir,
            profile_photo_dir=settings.profile_photo_dir,
            birthday_media_dir=settings.birthday_media_dir,
        )

    def for_category(self, category: Union[MediaCategory, str]) -> Path:
        return self._dirs[MediaCategory(category)]

    def all(self) -> dict[MediaCategory, Path]:
        return dict(self._dirs)

    def ensure(self) -> None:
        for directory in self._dirs.values():
            directory.mkdir(parents=True, exist_ok=True)


def ensure_canonical_dirs(dirs: Optional[MediaDirectories] = None) -> MediaDirectories:
    """Create every canonical media directory and return them."""
    dirs = dirs or MediaDirectories.from_settings()
    dirs.ensure()
    return dirs


def file_exists(path: Optional[str]) -> bool:
    """Re-check a record's file on disk; a record alone proves nothing."""
    if not path:
        return False
    try:
        return Path(path).is_file()
    except OSError:
        return False


def delete_file(path: Optional[str], stage: str = "delete") -> tuple[bool, Optional[BackupWarning]]:
    """Best-effort delete. Returns (deleted, warning)."""
    if not path:
        return False, None
    p = Path(path)
    try:
        if not p.exists():
            return False, None
        p.unlink()
        return True, None
    except OSError as e:
        logger.warning(f"Could not delete {path}: {e}")
        return False, BackupWarning(stage=stage, path=str(path), message=f"Could not delete file: {e}")


def unique_path(path: Path) -> Path:
    """If path exists, add a numeric suffix."""
    if not path.exists():
        return path
    stem = path.stem
    suffix = path.suffix
    parent = path.parent
    counter = 1
    while True:
        new_path = parent / f"{stem}_{counter}{suffix}"
        if not new_path.exists():
            return new_path
        counter += 1


def sha256(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        while True:
            chunk = f.read(65536)
            if not chunk:
                break
            h.update(chunk)
    return h.hexdigest()


def store_captured_media(
    dirs: MediaDirectories,
    category: MediaCategory,
    temp_path: Union[str, Path],
    child_id: str,
    extension: Optional[str] = None,
) -> Path:
    """Move a freshly captured file into its canonical directory.

    The stored name is `<prefix>_<childId>_<ms timestamp><ext>`.
    """
    source = Path(temp_path)
    if not source.is_file():
        raise FileNotFoundError(f"Captured file not found: {temp_path}")

    # Both end up in a file name; keep them to a single path component
    safe_child = _UNSAFE_NAME_CHARS.sub("_", child_id) or "unknown"
    ext = re.sub(r"[^A-Za-z0-9]", "", (extension or source.suffix).lstrip("."))
    ext = f".{ext}" if ext else DEFAULT_EXTENSIONS[category]

    directory = dirs.for_category(category)
    directory.mkdir(parents=True, exist_ok=True)
    filename = f"{FILENAME_PREFIXES[category]}_{safe_child}_{int(time.time() * 1000)}{ext}"
    dest = unique_path(directory / filename)
    shutil.move(str(source), str(dest))
    logger.info(f"Stored {category.value} media for child {child_id}: {dest.name}")
    return dest
