"""CRUD endpoints for interviews, balloon runs and birthday media."""

from typing import Any, Optional

from fastapi import APIRouter, HTTPException

from ..models.records import BalloonRun, BirthdayMedia, Interview, RecordKind, RecordModel
from ..services.metadata_store import get_metadata_store
from ..services.records import RecordService

KIND_SLUGS = {
    "children": RecordKind.CHILDREN,
    "interviews": RecordKind.INTERVIEWS,
    "balloon-runs": RecordKind.BALLOON_RUNS,
    "birthday-media": RecordKind.BIRTHDAY_MEDIA,
}


def kind_from_slug(slug: str) -> RecordKind:
    kind = KIND_SLUGS.get(slug)
    if kind is None:
        raise HTTPException(status_code=404, detail=f"Unknown record type: {slug}")
    return kind


def make_record_router(slug: str, kind: RecordKind, model: type[RecordModel]) -> APIRouter:
    router = APIRouter(prefix=f"/{slug}", tags=[slug])

    @router.get("")
    async def list_records(child_id: Optional[str] = None):
        if child_id:
            return await RecordService().list_for_child(kind, child_id)
        return await get_metadata_store().get_collection(kind)

    @router.get("/{record_id}")
    async def get_record(record_id: str):
        record = await get_metadata_store().get(kind, record_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"{model.__name__} not found")
        return record

    @router.post("")
    async def create_record(body: model):
        record = body.to_record()
        await get_metadata_store().upsert(kind, record)
        return record

    @router.patch("/{record_id}")
    async def update_record(record_id: str, patch: dict[str, Any]):
        updated = await get_metadata_store().update(kind, record_id, patch)
        if updated is None:
            raise HTTPException(status_code=404, detail=f"{model.__name__} not found")
        return updated

    @router.delete("/{record_id}")
    async def delete_record(record_id: str):
        result = await get_metadata_store().delete(kind, record_id)
        if not result.deleted:
            raise HTTPException(status_code=404, detail=f"{model.__name__} not found")
        return result

    return router


interviews_router = make_record_router("interviews", RecordKind.INTERVIEWS, Interview)
balloon_runs_router = make_record_router("balloon-runs", RecordKind.BALLOON_RUNS, BalloonRun)
birthday_media_router = make_record_router("birthday-media", RecordKind.BIRTHDAY_MEDIA, BirthdayMedia)
