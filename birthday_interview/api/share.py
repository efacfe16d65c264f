"""Share-copy endpoints."""

from fastapi import APIRouter, HTTPException

from ..services.share import ShareService
from .records import kind_from_slug

router = APIRouter(prefix="/share", tags=["share"])


@router.post("/cleanup")
async def cleanup_shares():
    return {"removed": ShareService().cleanup_temp_shares()}


@router.post("/{kind_slug}/{record_id}")
async def create_share_copy(kind_slug: str, record_id: str):
    kind = kind_from_slug(kind_slug)
    try:
        path = await ShareService().create_share_copy(kind, record_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Record not found")
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"path": str(path), "filename": path.name}
