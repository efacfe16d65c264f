"""Captured media upload endpoint."""

import tempfile
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, Request

from ..config import settings
from ..models.records import MediaCategory
from ..services.media_storage import ensure_canonical_dirs, store_captured_media

router = APIRouter(prefix="/media", tags=["media"])


@router.post("/{category}")
async def upload_captured_media(
    category: MediaCategory, child_id: str, request: Request, ext: Optional[str] = None,
):
    """Store the raw request body as a new file in the category's directory.

    Returns the stored path, to be used as the record's file reference.
    """
    dirs = ensure_canonical_dirs()
    directory = dirs.for_category(category)

    limit = settings.max_upload_size_mb * 1024 * 1024
    received = 0
    with tempfile.NamedTemporaryFile(dir=str(directory), prefix=".capture_", delete=False) as tmp:
        tmp_path = Path(tmp.name)
        try:
            async for chunk in request.stream():
                received += len(chunk)
                if received > limit:
                    break
                tmp.write(chunk)
        except BaseException:
            tmp.close()
            tmp_path.unlink(missing_ok=True)
            raise

    if received == 0 or received > limit:
        tmp_path.unlink()
        raise HTTPException(
            status_code=413 if received else 400,
            detail="Upload too large" if received else "Empty upload",
        )

    try:
        stored = store_captured_media(dirs, category, tmp_path, child_id, extension=ext)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
    return {"path": str(stored), "filename": stored.name, "size_bytes": received}
