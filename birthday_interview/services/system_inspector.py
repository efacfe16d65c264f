"""Report storage locations, free space and backend availability."""

import logging
import shutil
from pathlib import Path
from typing import Optional

from ..config import settings
from ..models.system import DirectoryInfo, SystemInfo
from ..stores.registry import get_all_backends
from ..utils.permissions import check_path_writable, check_zip_available
from .backup_service import BackupService
from .media_storage import MediaDirectories

logger = logging.getLogger(__name__)


def _describe_dir(name: str, path: Path) -> DirectoryInfo:
    info = DirectoryInfo(
        name=name,
        path=str(path),
        exists=path.exists(),
        writable=check_path_writable(str(path)),
    )
    if not info.exists:
        return info
    try:
        children = list(path.iterdir())
    except OSError as e:
        logger.warning(f"Cannot list {name} directory {path}: {e}")
        return info
    for p in children:
        try:
            if p.is_file():
                info.file_count += 1
                info.total_size += p.stat().st_size
        except OSError:
            continue
    return info


def _free_space(path: Path) -> int:
    # Walk up to the nearest existing ancestor
    while not path.exists() and path != path.parent:
        path = path.parent
    try:
        return shutil.disk_usage(str(path)).free
    except OSError:
        return 0


async def inspect_system(
    dirs: Optional[MediaDirectories] = None,
    service: Optional[BackupService] = None,
) -> SystemInfo:
    """Gather storage info for the settings view."""
    dirs = dirs or MediaDirectories.from_settings()
    service = service or BackupService(dirs=dirs)

    directories = [
        _describe_dir(category.value, path) for category, path in dirs.all().items()
    ]
    directories.append(_describe_dir("share", settings.share_dir))
    directories.append(_describe_dir("backups", service.backup_dir))

    backends = []
    for backend in get_all_backends().values():
        backends.append(await backend.check_availability())

    return SystemInfo(
        data_dir=str(settings.data_dir),
        free_space=_free_space(settings.data_dir),
        store_backend=settings.store_backend,
        zip_available=check_zip_available(),
        directories=directories,
        backends=backends,
        record_counts=await service.store.counts(),
        backup_size_estimate=await service.get_backup_size_estimate(),
    )
