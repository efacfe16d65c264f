"""Backup and restore job lifecycle."""

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from ..models.backup import (
    BackupJob,
    BackupJobType,
    BackupProgress,
    BackupStatus,
)
from .backup_service import BackupService

logger = logging.getLogger(__name__)


class BackupManager:
    """Runs one export or import at a time as a background task."""

    def __init__(self, service_factory: Callable[[], BackupService] = BackupService):
        self._service_factory = service_factory
        self._jobs: dict[str, BackupJob] = {}
        self._tasks: dict[str, asyncio.Task] = {}
        self._progress_listeners: dict[str, list[Callable]] = {}
        self._owned_archives: set[str] = set()

    def is_busy(self) -> bool:
        return any(
            job.status in (BackupStatus.PENDING, BackupStatus.RUNNING)
            for job in self._jobs.values()
        )

    def create_job(
        self, job_type: BackupJobType, archive_path: str = "", remove_archive: bool = False,
    ) -> BackupJob:
        """`remove_archive` hands an uploaded import archive to the job, which
        deletes it once the import has finished."""
        # Export and import share the store and media directories
        if self.is_busy():
            raise RuntimeError("Another backup or restore is already in progress")
        job = BackupJob(type=job_type, archive_path=archive_path)
        self._jobs[job.id] = job
        if remove_archive and job_type is BackupJobType.IMPORT:
            self._owned_archives.add(job.id)
        return job

    def get_job(self, job_id: str) -> Optional[BackupJob]:
        return self._jobs.get(job_id)

    def add_progress_listener(self, job_id: str, callback: Callable) -> None:
        self._progress_listeners.setdefault(job_id, []).append(callback)

    def remove_progress_listener(self, job_id: str, callback: Callable) -> None:
        listeners = self._progress_listeners.get(job_id, [])
        if callback in listeners:
            listeners.remove(callback)

    async def start_job(self, job_id: str) -> None:
        job = self._jobs.get(job_id)
        if not job:
            return
        task = asyncio.create_task(self._run_job(job))
        self._tasks[job_id] = task

    async def wait_for_job(self, job_id: str) -> Optional[BackupJob]:
        task = self._tasks.get(job_id)
        if task:
            await task
        return self._jobs.get(job_id)

    async def _run_job(self, job: BackupJob) -> None:
        job.status = BackupStatus.RUNNING
        job.progress = BackupProgress(message="Preparing...")
        await self._notify_progress(job)

        async def on_progress(processed: int, total: int, filename: str) -> None:
            job.progress.processed = processed
            job.progress.total = total
            job.progress.current_file = filename
            job.progress.percent = (processed / total * 100) if total > 0 else 0
            verb = "Packed" if job.type is BackupJobType.EXPORT else "Restored"
            job.progress.message = f"{verb} {processed}/{total}"
            await self._notify_progress(job)

        try:
            service = self._service_factory()
            if job.type is BackupJobType.EXPORT:
                result = await service.export_full_backup(
                    on_progress, output_path=job.archive_path or None,
                )
                job.archive_path = result.path
                job.progress.message = (
                    f"Backup complete. {result.files_packed} files packed, "
                    f"{result.files_skipped} skipped."
                )
            else:
                result = await service.import_full_backup(job.archive_path, on_progress)
                job.progress.message = (
                    f"Restore complete. {result.children} children, {result.interviews} interviews, "
                    f"{result.balloon_runs} balloon runs, {result.media_files} media files."
                )

            job.result = result
            job.status = BackupStatus.COMPLETED
            job.completed_at = datetime.now(tz=timezone.utc)
            job.progress.percent = 100.0
            await self._notify_progress(job)

        except Exception as e:
            logger.error(f"Backup job {job.id} ({job.type.value}) failed: {e}", exc_info=True)
            job.status = BackupStatus.FAILED
            job.error = str(e)
            job.completed_at = datetime.now(tz=timezone.utc)
            await self._notify_progress(job)
        finally:
            if job.id in self._owned_archives:
                self._owned_archives.discard(job.id)
                self._remove_archive(job.archive_path)

    def _remove_archive(self, path: str) -> None:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove uploaded archive {path}: {e}")

    async def _notify_progress(self, job: BackupJob) -> None:
        listeners = self._progress_listeners.get(job.id, [])
        for cb in listeners:
            try:
                await cb(job)
            except Exception as e:
                logger.debug(f"Progress listener for job {job.id} failed: {e}")


# Singleton
backup_manager = BackupManager()
