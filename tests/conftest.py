"""
Shared pytest fixtures.

Sockets are replaced by :class:`RecordingConnection` and the relational
store by ``AsyncMock`` doubles, so engine tests run without a database.
Store and HTTP tests use Tortoise on an in-memory sqlite database.
"""
from __future__ import annotations

import os
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Tuple
from unittest.mock import AsyncMock, MagicMock

# ── Environment must be set before movieroom.settings is imported ───────
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest
import pytest_asyncio
from tortoise import Tortoise, connections

from movieroom.connection import Connection
from movieroom.dispatcher import ConnectionHub
from movieroom.engine import RoomEngine
from movieroom.registry import RoomStateStore

ROOM_ID = "abc123"
HOST = "U1"


class RecordingConnection(Connection):
    """Connection double that keeps every frame instead of writing to a socket."""

    def __init__(self, user_id: str) -> None:
        super().__init__(None, user_id)
        self.sent: List[Tuple[str, Dict[str, Any]]] = []

    def send(self, event: str, payload: Dict[str, Any]) -> None:
        self.sent.append((event, payload))

    def events(self) -> List[str]:
        return [event for event, _ in self.sent]

    def payloads(self, event: str) -> List[Dict[str, Any]]:
        return [payload for name, payload in self.sent if name == event]


def make_record(room_id: str = ROOM_ID, host_id: str = HOST, is_active: bool = True) -> SimpleNamespace:
    return SimpleNamespace(id=7, room_id=room_id, host_id=host_id, is_active=is_active)


@pytest.fixture()
def store() -> MagicMock:
    """Collaborator store double; every call succeeds and the room resolves."""
    mock = MagicMock()
    mock.resolve_room_by_public_id = AsyncMock(return_value=make_record())
    mock.record_participation_end = AsyncMock(return_value=1)
    mock.create_message = AsyncMock(return_value=None)
    mock.create_reaction = AsyncMock(return_value=None)
    mock.create_gift = AsyncMock(return_value=None)
    mock.close_room = AsyncMock(return_value=True)
    return mock


@pytest.fixture()
def rooms() -> RoomStateStore:
    return RoomStateStore()


@pytest.fixture()
def hub() -> ConnectionHub:
    return ConnectionHub()


@pytest.fixture()
def engine(rooms: RoomStateStore, hub: ConnectionHub, store: MagicMock) -> RoomEngine:
    return RoomEngine(rooms, hub, store, timeout=0.2)


@pytest.fixture()
def connect(hub: ConnectionHub) -> Callable[[str], RecordingConnection]:
    """Factory registering a recording connection for a user on the hub."""

    def _connect(user_id: str) -> RecordingConnection:
        conn = RecordingConnection(user_id)
        hub.register(conn)
        return conn

    return _connect


@pytest_asyncio.fixture()
async def db():
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={"models": ["movieroom.models"]},
        use_tz=True,
    )
    await Tortoise.generate_schemas()
    yield
    await connections.close_all()
