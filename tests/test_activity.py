"""
tests.test_activity
~~~~~~~~~~~~~~~~~~~

Activity Relay: persist first, broadcast to the whole room only on success.
"""
from __future__ import annotations

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from movieroom.engine import RoomEngine
from movieroom.registry import RoomStateStore
from tests.conftest import HOST, ROOM_ID


@pytest.fixture()
def members(engine: RoomEngine, rooms: RoomStateStore, hub, connect):
    rooms.create(ROOM_ID, HOST)
    host, bob = connect(HOST), connect("U2")
    hub.subscribe(ROOM_ID, host.connection_id)
    hub.subscribe(ROOM_ID, bob.connection_id)
    return host, bob


class TestRelay:
    @pytest.mark.asyncio
    async def test_chat_is_saved_then_sent_to_everyone(self, engine: RoomEngine, store, members) -> None:
        host, bob = members

        assert await engine.activity.chat(ROOM_ID, "U2", "bob", "hello") is True

        store.create_message.assert_awaited_once_with(7, "U2", "hello")
        for conn in (host, bob):
            (payload,) = conn.payloads("chat-message")
            assert payload["userId"] == "U2"
            assert payload["username"] == "bob"
            assert payload["message"] == "hello"
            datetime.fromisoformat(payload["timestamp"].replace("Z", "+00:00"))

    @pytest.mark.asyncio
    async def test_reaction(self, engine: RoomEngine, store, members) -> None:
        host, _ = members

        assert await engine.activity.react(ROOM_ID, "U2", "bob", "🔥") is True

        store.create_reaction.assert_awaited_once_with(7, "U2", "🔥")
        assert host.payloads("reaction")[0]["emoji"] == "🔥"

    @pytest.mark.asyncio
    async def test_gift(self, engine: RoomEngine, store, members) -> None:
        host, bob = members

        assert await engine.activity.gift(ROOM_ID, "U2", "bob", "popcorn") is True

        store.create_gift.assert_awaited_once_with(7, "U2", "popcorn")
        assert host.payloads("gift")[0]["giftType"] == "popcorn"
        assert bob.payloads("gift")[0]["giftType"] == "popcorn"


class TestDrops:
    @pytest.mark.asyncio
    async def test_unknown_room_drops_event(self, engine: RoomEngine, store, members) -> None:
        host, bob = members
        store.resolve_room_by_public_id = AsyncMock(return_value=None)

        assert await engine.activity.chat(ROOM_ID, "U2", "bob", "hello") is False

        store.create_message.assert_not_awaited()
        assert host.sent == bob.sent == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, store_call, arg",
        [
            ("chat", "create_message", "hello"),
            ("react", "create_reaction", "👍"),
            ("gift", "create_gift", "rose"),
        ],
    )
    async def test_persistence_failure_blocks_broadcast(
        self, method: str, store_call: str, arg: str, engine: RoomEngine, store, members
    ) -> None:
        host, bob = members
        setattr(store, store_call, AsyncMock(side_effect=RuntimeError("constraint failed")))

        assert await getattr(engine.activity, method)(ROOM_ID, "U2", "bob", arg) is False

        assert host.sent == bob.sent == []

    @pytest.mark.asyncio
    async def test_slow_write_times_out_without_broadcast(self, engine: RoomEngine, store, members) -> None:
        host, _ = members

        async def slow(*args):
            await asyncio.sleep(5)

        store.create_message = AsyncMock(side_effect=slow)

        assert await engine.activity.chat(ROOM_ID, "U2", "bob", "hello") is False
        assert host.sent == []
