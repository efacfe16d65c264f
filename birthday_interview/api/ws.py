"""WebSocket endpoint for live backup and restore progress."""

import json
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..services.backup_manager import backup_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


class ConnectionManager:
    def __init__(self):
        self.active: list[WebSocket] = []

    async def connect(self, ws: WebSocket):
        await ws.accept()
        self.active.append(ws)

    def disconnect(self, ws: WebSocket):
        if ws in self.active:
            self.active.remove(ws)

    async def broadcast(self, message: dict):
        for ws in list(self.active):
            try:
                await ws.send_json(message)
            except Exception:
                self.disconnect(ws)


manager = ConnectionManager()


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await manager.connect(ws)

    try:
        while True:
            data = await ws.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                continue

            if msg.get("action") == "subscribe_backup":
                job_id = msg.get("job_id")
                if job_id:
                    async def backup_cb(job):
                        await manager.broadcast({
                            "type": f"{job.type.value}_progress",
                            "job_id": job.id,
                            "status": job.status.value,
                            "progress": job.progress.model_dump(),
                        })
                    backup_manager.add_progress_listener(job_id, backup_cb)

    except WebSocketDisconnect:
        manager.disconnect(ws)
    except Exception as e:
        logger.debug(f"WebSocket closed: {e}")
        manager.disconnect(ws)
