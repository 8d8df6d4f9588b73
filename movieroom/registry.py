"""Keyed store of live room state with one lock per room."""
from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Set

from .logging import get_logger
from .room import LiveRoom

logger = get_logger(__name__)


class RoomStateStore:
    """Owns every :class:`LiveRoom` of the process.

    Mutations happen inside ``async with store.lock(room_id)``. Locks are
    per room so unrelated rooms never contend.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, LiveRoom] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        # Closed room ids; their live state is never re-opened in this process
        self._closed: Set[str] = set()

    def lock(self, room_id: str) -> asyncio.Lock:
        lock = self._locks.get(room_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[room_id] = lock
        return lock

    def create(self, room_id: str, host_id: str) -> LiveRoom:
        """Open live state for *room_id*. An already open room is returned as is."""
        room = self._rooms.get(room_id)
        if room is not None:
            if room.host_id != host_id:
                logger.warning("Room %s already open with another host; keeping %s", room_id, room.host_id)
            return room
        room = LiveRoom(room_id, host_id)
        self._rooms[room_id] = room
        logger.info("Live state opened | room=%s | host=%s", room_id, host_id)
        return room

    def get(self, room_id: str) -> Optional[LiveRoom]:
        return self._rooms.get(room_id)

    def delete(self, room_id: str) -> bool:
        """Drop the live state of *room_id*. Returns ``False`` if it was already gone."""
        removed = self._rooms.pop(room_id, None) is not None
        lock = self._locks.get(room_id)
        if lock is not None and not lock.locked():
            self._locks.pop(room_id, None)
        if removed:
            logger.info("Live state dropped | room=%s", room_id)
        return removed

    def mark_closed(self, room_id: str) -> None:
        self._closed.add(room_id)

    def is_closed(self, room_id: str) -> bool:
        return room_id in self._closed

    def room_ids(self) -> List[str]:
        return list(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)


__all__ = ["RoomStateStore"]
