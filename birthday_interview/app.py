"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api.router import api_router
from .errors import (
    BackupParseError,
    CapabilityUnavailableError,
    InvalidBackupError,
    StoreCorruptionError,
)

# Configure logging for our modules
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(name)s: %(message)s")
logging.getLogger("birthday_interview").setLevel(logging.DEBUG)

_ERROR_STATUS = {
    InvalidBackupError: 400,
    BackupParseError: 400,
    CapabilityUnavailableError: 503,
    StoreCorruptionError: 500,
}


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception):
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
    return handler


def create_app() -> FastAPI:
    app = FastAPI(
        title="birthday-interview",
        version="0.1.0",
        description="Local storage and backup service for birthday interviews",
    )

    for exc_type, status_code in _ERROR_STATUS.items():
        app.add_exception_handler(exc_type, _error_handler(status_code))

    app.include_router(api_router, prefix="/api")

    return app
