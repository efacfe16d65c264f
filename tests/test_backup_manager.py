from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from birthday_interview.models.backup import BackupJobType, BackupStatus, ExportResult, RestoreSummary
from birthday_interview.models.records import RecordKind
from birthday_interview.services.backup_manager import BackupManager
from birthday_interview.services.backup_service import BackupService

from .factories import child, interview


@pytest.fixture
def manager(store, dirs, tmp_path):
    return BackupManager(
        service_factory=lambda: BackupService(store=store, dirs=dirs, backup_dir=tmp_path / "backups"),
    )


@pytest.mark.asyncio
async def test_export_job_reports_progress(manager, store, make_file):
    await store.upsert(RecordKind.CHILDREN, child())
    await store.upsert(RecordKind.INTERVIEWS, interview("i1", video_uri=make_file("v/i1.mp4")))
    await store.upsert(RecordKind.INTERVIEWS, interview("i2", video_uri=make_file("v/i2.mp4")))
    seen = []

    async def listener(job):
        seen.append((job.status, job.progress.processed, job.progress.total))

    job = manager.create_job(BackupJobType.EXPORT)
    manager.add_progress_listener(job.id, listener)
    await manager.start_job(job.id)
    job = await manager.wait_for_job(job.id)

    assert job.status is BackupStatus.COMPLETED
    assert isinstance(job.result, ExportResult)
    assert Path(job.archive_path).is_file()
    assert job.progress.percent == 100.0
    assert (BackupStatus.RUNNING, 1, 2) in seen
    assert (BackupStatus.RUNNING, 2, 2) in seen
    assert seen[-1][0] is BackupStatus.COMPLETED


@pytest.mark.asyncio
async def test_import_job_round_trip(manager, store, make_file):
    await store.upsert(RecordKind.CHILDREN, child())
    export = manager.create_job(BackupJobType.EXPORT)
    await manager.start_job(export.id)
    export = await manager.wait_for_job(export.id)

    await store.save_collection(RecordKind.CHILDREN, [])
    restore = manager.create_job(BackupJobType.IMPORT, archive_path=export.archive_path)
    await manager.start_job(restore.id)
    restore = await manager.wait_for_job(restore.id)

    assert restore.status is BackupStatus.COMPLETED
    assert isinstance(restore.result, RestoreSummary)
    assert restore.result.children == 1
    assert await store.get(RecordKind.CHILDREN, "c1") is not None


@pytest.mark.asyncio
async def test_failed_job_records_error(manager, tmp_path):
    job = manager.create_job(BackupJobType.IMPORT, archive_path=str(tmp_path / "missing.zip"))
    await manager.start_job(job.id)
    job = await manager.wait_for_job(job.id)

    assert job.status is BackupStatus.FAILED
    assert "not found" in job.error
    assert job.completed_at is not None
    assert not manager.is_busy()


@pytest.mark.asyncio
async def test_one_job_at_a_time(manager):
    manager.create_job(BackupJobType.EXPORT)
    assert manager.is_busy()
    with pytest.raises(RuntimeError):
        manager.create_job(BackupJobType.IMPORT, archive_path="/x.zip")


@pytest.mark.asyncio
async def test_broken_listener_does_not_fail_job(manager):
    job = manager.create_job(BackupJobType.EXPORT)
    listener = AsyncMock(side_effect=ValueError("socket closed"))
    manager.add_progress_listener(job.id, listener)

    await manager.start_job(job.id)
    job = await manager.wait_for_job(job.id)

    assert job.status is BackupStatus.COMPLETED
    assert listener.await_count >= 2
    manager.remove_progress_listener(job.id, listener)


@pytest.mark.asyncio
async def test_uploaded_archive_removed_after_import(manager, store, tmp_path):
    await store.upsert(RecordKind.CHILDREN, child())
    export = manager.create_job(BackupJobType.EXPORT)
    await manager.start_job(export.id)
    export = await manager.wait_for_job(export.id)
    upload = tmp_path / "upload_1.zip"
    upload.write_bytes(Path(export.archive_path).read_bytes())

    job = manager.create_job(BackupJobType.IMPORT, archive_path=str(upload), remove_archive=True)
    await manager.start_job(job.id)
    job = await manager.wait_for_job(job.id)

    assert job.status is BackupStatus.COMPLETED
    assert not upload.exists()
    assert Path(export.archive_path).is_file()


@pytest.mark.asyncio
async def test_uploaded_archive_removed_after_failed_import(manager, tmp_path):
    upload = tmp_path / "upload_2.zip"
    upload.write_bytes(b"not a zip")

    job = manager.create_job(BackupJobType.IMPORT, archive_path=str(upload), remove_archive=True)
    await manager.start_job(job.id)
    job = await manager.wait_for_job(job.id)

    assert job.status is BackupStatus.FAILED
    assert not upload.exists()


@pytest.mark.asyncio
async def test_archive_kept_unless_handed_over(manager, tmp_path):
    archive = tmp_path / "mine.zip"
    archive.write_bytes(b"not a zip")

    job = manager.create_job(BackupJobType.IMPORT, archive_path=str(archive))
    await manager.start_job(job.id)
    await manager.wait_for_job(job.id)

    assert archive.exists()
