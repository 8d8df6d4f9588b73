"""Playback Authority Controller.

Only the room's host may change playback. Calls from anyone else, and calls
for rooms with no live state, are ignored without telling the caller; each
operation returns whether it was applied and logs ignored calls at DEBUG.

Per-room states: no media -> loaded (paused | playing) -> closed.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from .dispatcher import Dispatcher
from .errors import PersistenceFailure
from .logging import get_logger
from .registry import RoomStateStore
from .room import LiveRoom
from .schemas import MediaLoaded, MovieId, PlaybackPosition
from .store import RoomStore, bounded, utcnow

logger = get_logger(__name__)


class PlaybackController:
    def __init__(
        self,
        rooms: RoomStateStore,
        dispatcher: Dispatcher,
        store: Optional[RoomStore] = None,
        timeout: float = 3.0,
    ):
        self._rooms = rooms
        self._dispatcher = dispatcher
        self._store = store
        self._timeout = timeout

    @asynccontextmanager
    async def _host_section(self, room_id: str, user_id: str, action: str) -> AsyncIterator[Optional[LiveRoom]]:
        """Hold the room lock and yield the room if *user_id* hosts it, else ``None``."""
        if room_id not in self._rooms:
            logger.debug("%s ignored: unknown room %s", action, room_id)
            yield None
            return
        async with self._rooms.lock(room_id):
            room = self._rooms.get(room_id)
            if room is None:
                logger.debug("%s ignored: unknown room %s", action, room_id)
                yield None
            elif not room.is_host(user_id):
                logger.debug("%s ignored: %s is not host of %s", action, user_id, room_id)
                yield None
            else:
                yield room

    # -------------------- Transport controls -------------------- #

    async def play(self, room_id: str, user_id: str, connection_id: str, current_time: float) -> bool:
        return await self._set_playing(room_id, user_id, connection_id, True, current_time)

    async def pause(self, room_id: str, user_id: str, connection_id: str, current_time: float) -> bool:
        return await self._set_playing(room_id, user_id, connection_id, False, current_time)

    async def _set_playing(
        self, room_id: str, user_id: str, connection_id: str, playing: bool, current_time: float
    ) -> bool:
        event = "play" if playing else "pause"
        async with self._host_section(room_id, user_id, event) as room:
            if room is None:
                return False
            room.set_playing(playing, current_time)
            self._dispatcher.to_room_except(
                room_id, connection_id, event, PlaybackPosition(current_time=current_time)
            )
            return True

    async def seek(self, room_id: str, user_id: str, connection_id: str, current_time: float) -> bool:
        async with self._host_section(room_id, user_id, "seek") as room:
            if room is None:
                return False
            room.seek(current_time)
            self._dispatcher.to_room_except(
                room_id, connection_id, "seek", PlaybackPosition(current_time=current_time)
            )
            return True

    # -------------------- Media -------------------- #

    async def load_media(
        self, room_id: str, user_id: str, connection_id: str, movie_id: Optional[MovieId], video_url: str
    ) -> bool:
        async with self._host_section(room_id, user_id, "watch-start") as room:
            if room is None:
                return False
            room.load_media(movie_id, video_url)
            self._dispatcher.to_room_except(
                room_id, connection_id, "watch-start", MediaLoaded(movie_id=movie_id, video_url=video_url)
            )
            return True

    async def end_media(self, room_id: str, user_id: str, connection_id: str) -> bool:
        """Relay ``watch-end`` to the other members.

        Not host-gated and does not touch the room state: any member may send
        it and it acts as a hint to clients.
        """
        logger.debug("watch-end from %s in %s", user_id, room_id)
        self._dispatcher.to_room_except(room_id, connection_id, "watch-end")
        return True

    # -------------------- Lifecycle -------------------- #

    async def close(self, room_id: str, user_id: str) -> bool:
        """Announce ``room-closed`` to every member, host included, then tear the room down.

        The room is marked closed before the lock is released, so a join
        racing the record update cannot re-open it.
        """
        async with self._host_section(room_id, user_id, "close-room") as room:
            if room is None:
                return False
            self._rooms.mark_closed(room_id)
            self._dispatcher.to_room(room_id, "room-closed")

        self.teardown(room_id)
        if self._store is not None:
            try:
                await bounded(self._store.close_room(room_id, utcnow()), self._timeout, "close room")
            except PersistenceFailure as exc:
                logger.warning("Room record not closed | room=%s | %s", room_id, exc)
        logger.info("Room %s closed by host %s", room_id, user_id)
        return True

    def teardown(self, room_id: str) -> bool:
        """Drop live state and subscriptions of *room_id*. Safe to call repeatedly."""
        self._dispatcher.clear_room(room_id)
        return self._rooms.delete(room_id)


__all__ = ["PlaybackController"]
