"""One live socket and its ordered outbound queue."""
from __future__ import annotations

import asyncio
import uuid
from typing import Any, Dict, Optional

from fastapi import WebSocket

from .logging import get_logger

logger = get_logger(__name__)


class Connection:
    """An authenticated socket.

    ``send`` only enqueues, so it can be called from inside a room critical
    section. ``pump`` drains the queue onto the socket in FIFO order.
    """

    def __init__(self, websocket: Optional[WebSocket], user_id: str, outbox_size: int = 256):
        self.connection_id: str = uuid.uuid4().hex
        self.user_id = user_id
        self.websocket = websocket
        self._outbox: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue(maxsize=outbox_size)
        self._closed = False

    def send(self, event: str, payload: Dict[str, Any]) -> None:
        if self._closed:
            return
        try:
            self._outbox.put_nowait({"type": event, "data": payload})
        except asyncio.QueueFull:
            logger.warning(
                "Outbox full, dropping %s | conn=%s | user=%s", event, self.connection_id, self.user_id
            )

    async def pump(self) -> None:
        """Write queued events to the socket until it fails or the task is cancelled."""
        if self.websocket is None:
            raise RuntimeError(f"{self!r} has no socket to write to")
        while True:
            frame = await self._outbox.get()
            try:
                await self.websocket.send_json(frame)
            except Exception as exc:
                logger.info("Send failed, stopping writer | conn=%s | %s", self.connection_id, exc)
                self._closed = True
                return

    @property
    def closed(self) -> bool:
        """True once the writer has stopped; later events are discarded."""
        return self._closed

    @property
    def pending(self) -> int:
        return self._outbox.qsize()

    def __repr__(self) -> str:
        return f"Connection(id={self.connection_id!r}, user={self.user_id!r})"


__all__ = ["Connection"]
