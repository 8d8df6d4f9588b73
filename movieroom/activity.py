"""Activity Relay for chat messages, reactions and gifts.

Each event is persisted first and broadcast to the whole room, sender
included, only once the write succeeded. Events for rooms without a durable
record are dropped.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Awaitable, Callable

from .dispatcher import Dispatcher
from .errors import PersistenceFailure
from .logging import get_logger
from .schemas import ActivityBroadcast, ChatBroadcast, GiftBroadcast, ReactionBroadcast
from .store import RoomStore, bounded, utcnow

logger = get_logger(__name__)


class ActivityRelay:
    def __init__(self, dispatcher: Dispatcher, store: RoomStore, timeout: float = 3.0):
        self._dispatcher = dispatcher
        self._store = store
        self._timeout = timeout

    async def _relay(
        self,
        room_id: str,
        event: str,
        persist: Callable[[Any], Awaitable[Any]],
        build: Callable[[datetime], ActivityBroadcast],
    ) -> bool:
        try:
            record = await bounded(
                self._store.resolve_room_by_public_id(room_id), self._timeout, "resolve room"
            )
            if record is None:
                logger.debug("%s dropped: unknown room %s", event, room_id)
                return False
            await bounded(persist(record.id), self._timeout, f"save {event}")
        except PersistenceFailure as exc:
            logger.warning("%s not broadcast | room=%s | %s", event, room_id, exc)
            return False

        self._dispatcher.to_room(room_id, event, build(utcnow()))
        return True

    async def chat(self, room_id: str, user_id: str, username: str, message: str) -> bool:
        return await self._relay(
            room_id,
            "chat-message",
            lambda record_id: self._store.create_message(record_id, user_id, message),
            lambda ts: ChatBroadcast(user_id=user_id, username=username, message=message, timestamp=ts),
        )

    async def react(self, room_id: str, user_id: str, username: str, emoji: str) -> bool:
        return await self._relay(
            room_id,
            "reaction",
            lambda record_id: self._store.create_reaction(record_id, user_id, emoji),
            lambda ts: ReactionBroadcast(user_id=user_id, username=username, emoji=emoji, timestamp=ts),
        )

    async def gift(self, room_id: str, user_id: str, username: str, gift_type: str) -> bool:
        return await self._relay(
            room_id,
            "gift",
            lambda record_id: self._store.create_gift(record_id, user_id, gift_type),
            lambda ts: GiftBroadcast(user_id=user_id, username=username, gift_type=gift_type, timestamp=ts),
        )


__all__ = ["ActivityRelay"]
