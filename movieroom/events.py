"""Routing of client frames onto the room engine.

A frame is a JSON object ``{"type": <event>, ...payload}`` using the camelCase
field names of the wire protocol. Frames with an unknown type or an invalid
payload are ignored.
"""
from __future__ import annotations

from typing import Any, Dict, Type

from pydantic import ValidationError

from .connection import Connection
from .engine import RoomEngine
from .logging import get_logger
from .schemas import (
    CamelModel,
    ChatMessageEvent,
    GiftEvent,
    JoinRoomEvent,
    LeaveRoomEvent,
    PlaybackEvent,
    ReactionEvent,
    RoomEvent,
    WatchStartEvent,
)

logger = get_logger(__name__)

PAYLOADS: Dict[str, Type[CamelModel]] = {
    "join-room": JoinRoomEvent,
    "leave-room": LeaveRoomEvent,
    "play": PlaybackEvent,
    "pause": PlaybackEvent,
    "seek": PlaybackEvent,
    "chat-message": ChatMessageEvent,
    "reaction": ReactionEvent,
    "gift": GiftEvent,
    "close-room": RoomEvent,
    "watch-start": WatchStartEvent,
    "watch-end": RoomEvent,
}


async def handle_ws_message(engine: RoomEngine, connection: Connection, data: Any) -> None:
    if not isinstance(data, dict):
        logger.debug("Ignoring non-object frame from %r", connection)
        return
    msg_type = data.get("type")
    model = PAYLOADS.get(msg_type) if isinstance(msg_type, str) else None
    if model is None:
        logger.debug("Ignoring unknown event %r from %r", msg_type, connection)
        return
    try:
        event: Any = model.model_validate(data)
    except ValidationError as exc:
        logger.debug("Ignoring malformed %s from %r: %s", msg_type, connection, exc.errors())
        return

    user_id = connection.user_id
    conn_id = connection.connection_id

    if msg_type == "join-room":
        await engine.sessions.join(event.room_id, user_id, event.username, conn_id)
    elif msg_type == "leave-room":
        await engine.sessions.leave(event.room_id, user_id, event.username, conn_id)
    elif msg_type == "play":
        await engine.playback.play(event.room_id, user_id, conn_id, event.current_time)
    elif msg_type == "pause":
        await engine.playback.pause(event.room_id, user_id, conn_id, event.current_time)
    elif msg_type == "seek":
        await engine.playback.seek(event.room_id, user_id, conn_id, event.current_time)
    elif msg_type == "watch-start":
        await engine.playback.load_media(event.room_id, user_id, conn_id, event.movie_id, event.video_url)
    elif msg_type == "watch-end":
        await engine.playback.end_media(event.room_id, user_id, conn_id)
    elif msg_type == "close-room":
        await engine.playback.close(event.room_id, user_id)
    elif msg_type == "chat-message":
        await engine.activity.chat(event.room_id, user_id, event.username, event.message)
    elif msg_type == "reaction":
        await engine.activity.react(event.room_id, user_id, event.username, event.emoji)
    elif msg_type == "gift":
        await engine.activity.gift(event.room_id, user_id, event.username, event.gift_type)


__all__ = ["PAYLOADS", "handle_ws_message"]
