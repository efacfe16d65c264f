"""Aggregate all API sub-routers."""

from fastapi import APIRouter

from . import backup, children, media, records, share, system, ws

api_router = APIRouter()

api_router.include_router(system.router)
api_router.include_router(children.router)
api_router.include_router(records.interviews_router)
api_router.include_router(records.balloon_runs_router)
api_router.include_router(records.birthday_media_router)
api_router.include_router(media.router)
api_router.include_router(backup.router)
api_router.include_router(share.router)
api_router.include_router(ws.router)
