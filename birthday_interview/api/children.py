"""Child endpoints, including cascade delete and the year comparison."""

from typing import Any, Optional

from fastapi import APIRouter, HTTPException

from ..models.records import Child, RecordKind
from ..services.metadata_store import get_metadata_store
from ..services.records import RecordService

router = APIRouter(prefix="/children", tags=["children"])


@router.get("")
async def list_children():
    return await get_metadata_store().get_collection(RecordKind.CHILDREN)


@router.post("")
async def create_child(child: Child):
    record = child.to_record()
    await get_metadata_store().upsert(RecordKind.CHILDREN, record)
    return record


@router.get("/{child_id}")
async def get_child(child_id: str):
    child = await get_metadata_store().get(RecordKind.CHILDREN, child_id)
    if child is None:
        raise HTTPException(status_code=404, detail="Child not found")
    return child


@router.patch("/{child_id}")
async def update_child(child_id: str, patch: dict[str, Any]):
    updated = await get_metadata_store().update(RecordKind.CHILDREN, child_id, patch)
    if updated is None:
        raise HTTPException(status_code=404, detail="Child not found")
    return updated


@router.delete("/{child_id}")
async def delete_child(child_id: str):
    result = await RecordService().delete_child(child_id)
    if not result.child_deleted and not (result.interviews or result.balloon_runs or result.birthday_media):
        raise HTTPException(status_code=404, detail="Child not found")
    return result


@router.get("/{child_id}/interviews")
async def get_child_interviews(child_id: str):
    return await RecordService().get_interviews_for_child(child_id)


@router.get("/{child_id}/balloon-runs")
async def get_child_balloon_runs(child_id: str):
    return await RecordService().get_balloon_runs_for_child(child_id)


@router.get("/{child_id}/birthday-media")
async def get_child_birthday_media(child_id: str):
    return await RecordService().get_birthday_media_for_child(child_id)


@router.get("/{child_id}/compare")
async def compare_years(child_id: str, category: Optional[str] = None):
    try:
        return await RecordService().compare_years(child_id, category)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
