"""Backup and restore endpoints."""

import uuid
from pathlib import Path
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse
from pydantic import BaseModel

from ..config import settings
from ..models.backup import BackupJobType, BackupStatus
from ..services.backup_manager import backup_manager
from ..services.backup_service import BackupService
from ..utils.permissions import require_capabilities

router = APIRouter(prefix="/backup", tags=["backup"])


class ImportTextRequest(BaseModel):
    text: str


@router.get("/export")
async def export_metadata():
    return await BackupService().export_all_data()


@router.post("/import")
async def import_metadata(data: dict[str, Any]):
    return await BackupService().import_data(data)


@router.post("/import-text")
async def import_metadata_text(req: ImportTextRequest):
    return await BackupService().import_json_text(req.text)


@router.get("/estimate")
async def backup_size_estimate():
    return {"size_bytes": await BackupService().get_backup_size_estimate()}


@router.post("/full")
async def start_full_backup():
    try:
        job = backup_manager.create_job(BackupJobType.EXPORT)
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    await backup_manager.start_job(job.id)
    return {"job_id": job.id, "status": job.status}


@router.post("/restore")
async def start_restore(request: Request):
    """Upload a full backup zip as the raw request body."""
    if backup_manager.is_busy():
        raise HTTPException(status_code=409, detail="Another backup or restore is already in progress")

    upload_dir = settings.backup_dir / "uploads"
    require_capabilities(upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    upload_path = upload_dir / f"upload_{uuid.uuid4().hex[:8]}.zip"

    limit = settings.max_upload_size_mb * 1024 * 1024
    received = 0
    try:
        with open(upload_path, "wb") as f:
            async for chunk in request.stream():
                received += len(chunk)
                if received > limit:
                    break
                f.write(chunk)
    except BaseException:
        upload_path.unlink(missing_ok=True)
        raise

    if received > limit:
        upload_path.unlink()
        raise HTTPException(status_code=413, detail="Backup file too large")
    if received == 0:
        upload_path.unlink()
        raise HTTPException(status_code=400, detail="Empty upload")

    try:
        job = backup_manager.create_job(
            BackupJobType.IMPORT, archive_path=str(upload_path), remove_archive=True,
        )
    except RuntimeError as e:
        # Another job started while the upload was streaming
        upload_path.unlink()
        raise HTTPException(status_code=409, detail=str(e))
    await backup_manager.start_job(job.id)
    return {"job_id": job.id, "status": job.status}


@router.get("/jobs/{job_id}")
async def get_backup_job(job_id: str):
    job = backup_manager.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Backup job not found")
    return job


@router.get("/jobs/{job_id}/download")
async def download_backup(job_id: str):
    job = backup_manager.get_job(job_id)
    if not job or job.type is not BackupJobType.EXPORT:
        raise HTTPException(status_code=404, detail="Backup job not found")
    if job.status is not BackupStatus.COMPLETED:
        raise HTTPException(status_code=409, detail=f"Backup is {job.status.value}")
    return FileResponse(
        job.archive_path,
        media_type="application/zip",
        filename=Path(job.archive_path).name,
    )
