from __future__ import annotations

from .activity import ActivityRelay
from .dispatcher import Dispatcher
from .playback import PlaybackController
from .registry import RoomStateStore
from .session import SessionManager
from .store import RoomStore


class RoomEngine:
    """Session, playback and activity components sharing one state store and dispatcher."""

    def __init__(self, rooms: RoomStateStore, dispatcher: Dispatcher, store: RoomStore, timeout: float = 3.0):
        self.rooms = rooms
        self.dispatcher = dispatcher
        self.store = store
        self.sessions = SessionManager(rooms, dispatcher, store, timeout=timeout)
        self.playback = PlaybackController(rooms, dispatcher, store, timeout=timeout)
        self.activity = ActivityRelay(dispatcher, store, timeout=timeout)


__all__ = ["RoomEngine"]
