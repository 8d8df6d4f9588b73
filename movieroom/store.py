"""Collaborator persistence used from the realtime path.

The engine depends on the narrow :class:`RoomStore` protocol only;
:class:`TortoiseRoomStore` backs it with the ORM models. Every call made from
a socket handler goes through :func:`bounded` so a slow database cannot stall
a room.
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Optional, Protocol, TypeVar

from .errors import PersistenceFailure
from .models import Gift, Message, Reaction, Room, RoomParticipation

T = TypeVar("T")


class RoomRecord(Protocol):
    id: Any
    room_id: str
    host_id: Any
    is_active: bool


class RoomStore(Protocol):
    async def resolve_room_by_public_id(self, room_id: str) -> Optional[RoomRecord]: ...

    async def record_participation_end(self, user_id: str, now: datetime) -> int: ...

    async def create_message(self, room_record_id: Any, user_id: str, content: str) -> None: ...

    async def create_reaction(self, room_record_id: Any, user_id: str, emoji: str) -> None: ...

    async def create_gift(self, room_record_id: Any, user_id: str, gift_type: str) -> None: ...

    async def close_room(self, room_id: str, now: datetime) -> bool: ...


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def bounded(awaitable: Awaitable[T], timeout: float, what: str) -> T:
    """Await a store call with a deadline, folding every failure into :class:`PersistenceFailure`."""
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as exc:
        raise PersistenceFailure(f"{what} timed out after {timeout}s") from exc
    except PersistenceFailure:
        raise
    except Exception as exc:
        raise PersistenceFailure(f"{what} failed: {exc}") from exc


class TortoiseRoomStore:
    async def resolve_room_by_public_id(self, room_id: str) -> Optional[Room]:
        return await Room.get_or_none(room_id=room_id)

    async def record_participation_end(self, user_id: str, now: datetime) -> int:
        """Close every open participation of *user_id*. Returns the number of rows updated."""
        return await RoomParticipation.filter(user_id=user_id, left_at__isnull=True).update(left_at=now)

    async def create_message(self, room_record_id: Any, user_id: str, content: str) -> None:
        await Message.create(room_id=room_record_id, user_id=user_id, content=content)

    async def create_reaction(self, room_record_id: Any, user_id: str, emoji: str) -> None:
        await Reaction.create(room_id=room_record_id, user_id=user_id, emoji=emoji)

    async def create_gift(self, room_record_id: Any, user_id: str, gift_type: str) -> None:
        await Gift.create(room_id=room_record_id, user_id=user_id, gift_type=gift_type)

    async def close_room(self, room_id: str, now: datetime) -> bool:
        """Mark the record inactive. Closing an already closed room is a no-op."""
        updated = await Room.filter(room_id=room_id, is_active=True).update(is_active=False, closed_at=now)
        return updated > 0


__all__ = ["RoomRecord", "RoomStore", "TortoiseRoomStore", "bounded", "utcnow"]
