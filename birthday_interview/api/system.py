"""System info API endpoints."""

from fastapi import APIRouter

from ..services.system_inspector import inspect_system

router = APIRouter(prefix="/system", tags=["system"])

_cached_info = None


@router.get("/info")
async def get_system_info():
    global _cached_info
    if _cached_info is None:
        _cached_info = await inspect_system()
    return _cached_info


@router.post("/refresh")
async def refresh_system_info():
    global _cached_info
    _cached_info = await inspect_system()
    return _cached_info
