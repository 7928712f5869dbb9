from __future__ import annotations

import json

from fastapi import APIRouter, WebSocket
from pydantic import ValidationError
from starlette.websockets import WebSocketDisconnect

from bodymetrics.api.rest import frame_from_payload
from bodymetrics.exceptions import MalformedStateError
from bodymetrics.logging_config import get_logger
from bodymetrics.models.api import FramePayload

router = APIRouter()
logger = get_logger(__name__)


@router.websocket("/ws/frames")
async def ws_frame_ingest(websocket: WebSocket):
    runtime = websocket.app.state.runtime
    expected = runtime.config_store.config.server.token
    if expected and websocket.query_params.get("token", "") != expected:
        await websocket.close(code=4401, reason="invalid token")
        return

    await websocket.accept()
    processor = runtime.frame_processor
    if not processor.state.running:
        processor.start()
    await websocket.send_json({"type": "ack", "queue_size": runtime.config_store.config.processing.queue_size})

    try:
        while True:
            text = await websocket.receive_text()
            try:
                payload = FramePayload.model_validate(json.loads(text))
                frame = frame_from_payload(payload)
            except (json.JSONDecodeError, ValidationError, MalformedStateError) as exc:
                await websocket.send_json({"type": "warn", "reason": "malformed_frame", "detail": str(exc)})
                continue
            if not processor.submit(frame):
                await websocket.send_json({"type": "warn", "reason": "processor_stopped"})
    except WebSocketDisconnect:
        logger.info("Frame feed disconnected")
