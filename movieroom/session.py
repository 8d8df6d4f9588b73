"""Room Session Manager: join, leave and disconnect handling."""
from __future__ import annotations

from typing import Optional

from .dispatcher import Dispatcher
from .errors import PersistenceFailure
from .logging import get_logger
from .registry import RoomStateStore
from .schemas import RoomState, UserPresence
from .store import RoomStore, bounded, utcnow

logger = get_logger(__name__)


class SessionManager:
    def __init__(self, rooms: RoomStateStore, dispatcher: Dispatcher, store: RoomStore, timeout: float = 3.0):
        self._rooms = rooms
        self._dispatcher = dispatcher
        self._store = store
        self._timeout = timeout

    async def join(self, room_id: str, user_id: str, username: str, connection_id: str) -> Optional[RoomState]:
        """Attach a connection to a room and return the snapshot sent to it.

        Live state lost to a restart is re-opened from the durable room
        record, whose host is authoritative. Rooms with no active record, and
        rooms closed earlier in this process, are ignored and ``None`` is
        returned.
        """
        if self._rooms.is_closed(room_id):
            logger.debug("join ignored: room %s is closed", room_id)
            return None
        if room_id not in self._rooms and not await self._reopen(room_id):
            return None

        async with self._rooms.lock(room_id):
            room = self._rooms.get(room_id)
            if room is None:
                logger.debug("join ignored: room %s closed meanwhile", room_id)
                return None
            room.upsert_participant(user_id, username, connection_id)
            self._dispatcher.subscribe(room_id, connection_id)
            self._dispatcher.to_room_except(
                room_id, connection_id, "user-joined", UserPresence(user_id=user_id, username=username)
            )
            snapshot = room.snapshot()
            self._dispatcher.to_sender(connection_id, "room-state", snapshot)

        logger.info("User %s joined room %s", username, room_id)
        return snapshot

    async def _reopen(self, room_id: str) -> bool:
        try:
            record = await bounded(
                self._store.resolve_room_by_public_id(room_id), self._timeout, "resolve room"
            )
        except PersistenceFailure as exc:
            logger.warning("join ignored: %s | room=%s", exc, room_id)
            return False
        if record is None or not record.is_active:
            logger.debug("join ignored: no open room %s", room_id)
            return False
        if self._rooms.is_closed(room_id):
            # closed while the record was being resolved
            logger.debug("join ignored: room %s closed meanwhile", room_id)
            return False
        self._rooms.create(room_id, str(record.host_id))
        return True

    async def leave(self, room_id: str, user_id: str, username: str, connection_id: str) -> bool:
        """Detach *user_id* from the room, then end its participation records.

        The roster change and ``user-left`` broadcast stand even if the
        participation bookkeeping fails.
        """
        removed = False
        if room_id in self._rooms:
            async with self._rooms.lock(room_id):
                room = self._rooms.get(room_id)
                if room is not None:
                    removed = room.remove_participant(user_id) is not None
                self._leave_channel(room_id, user_id, username, connection_id)
        else:
            self._leave_channel(room_id, user_id, username, connection_id)

        try:
            await bounded(
                self._store.record_participation_end(user_id, utcnow()),
                self._timeout,
                "record participation end",
            )
        except PersistenceFailure as exc:
            logger.warning("Participation end not recorded | user=%s | %s", user_id, exc)

        logger.info("User %s left room %s", username, room_id)
        return removed

    def _leave_channel(self, room_id: str, user_id: str, username: str, connection_id: str) -> None:
        self._dispatcher.unsubscribe(room_id, connection_id)
        self._dispatcher.to_room(room_id, "user-left", UserPresence(user_id=user_id, username=username))

    async def on_disconnect(self, connection_id: str) -> None:
        """Forget a dropped connection.

        Participants still bound to it are removed and announced as left;
        an entry already rebound to a newer connection by a rejoin is kept.
        """
        for room_id in self._dispatcher.drop(connection_id):
            if room_id not in self._rooms:
                continue
            async with self._rooms.lock(room_id):
                room = self._rooms.get(room_id)
                if room is None:
                    continue
                for participant in room.participants_on(connection_id):
                    room.remove_participant(participant.user_id)
                    self._dispatcher.to_room(
                        room_id,
                        "user-left",
                        UserPresence(user_id=participant.user_id, username=participant.username),
                    )


__all__ = ["SessionManager"]
