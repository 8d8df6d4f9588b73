from __future__ import annotations

import asyncio
import json
from contextlib import suppress
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from ..auth_utils import bearer_token, verify_token
from ..connection import Connection
from ..errors import AuthFailure
from ..events import handle_ws_message
from ..logging import get_logger
from ..settings import settings
from ..state import engine, hub

logger = get_logger(__name__)

router = APIRouter(prefix="", tags=["ws"])

# Close code sent when the handshake credential is rejected
AUTH_FAILED = 4001


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket, token: Optional[str] = Query(default=None)):
    await ws.accept()
    try:
        user_id = verify_token(token or bearer_token(ws.headers.get("authorization")))
    except AuthFailure as exc:
        logger.info("Socket refused: %s", exc)
        await ws.close(code=AUTH_FAILED)
        return

    connection = Connection(ws, user_id, outbox_size=settings.OUTBOX_SIZE)
    hub.register(connection)
    writer = asyncio.create_task(connection.pump())
    logger.info("User connected: %s", user_id)

    try:
        while True:
            raw = await ws.receive_text()
            try:
                data = json.loads(raw)
            except ValueError:
                logger.debug("Ignoring non-JSON frame from %r", connection)
                continue
            await handle_ws_message(engine, connection, data)
            if connection.closed:
                logger.info("Writer stopped, closing reader | user=%s", user_id)
                break
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WebSocket error | user=%s", user_id)
    finally:
        await engine.sessions.on_disconnect(connection.connection_id)
        writer.cancel()
        with suppress(asyncio.CancelledError):
            await writer
        logger.info("User disconnected: %s", user_id)
