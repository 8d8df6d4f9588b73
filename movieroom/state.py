"""Centralised in-memory runtime state.

This keeps the singletons that are shared across the whole application so
routers can simply import them. Nothing here survives a restart; durable
facts live in the database.
"""
from __future__ import annotations

from .dispatcher import ConnectionHub
from .engine import RoomEngine
from .registry import RoomStateStore
from .settings import settings
from .store import TortoiseRoomStore

room_states = RoomStateStore()

hub = ConnectionHub()

room_store = TortoiseRoomStore()

engine = RoomEngine(room_states, hub, room_store, timeout=settings.PERSISTENCE_TIMEOUT)

__all__ = ["room_states", "hub", "room_store", "engine"]
