"""
tests.test_events
~~~~~~~~~~~~~~~~~

Frame routing from the socket loop onto the engine.
"""
from __future__ import annotations

import pytest

from movieroom.engine import RoomEngine
from movieroom.events import handle_ws_message
from movieroom.registry import RoomStateStore
from tests.conftest import HOST, ROOM_ID


class TestRouting:
    @pytest.mark.asyncio
    async def test_join_then_play(self, engine: RoomEngine, rooms: RoomStateStore, connect) -> None:
        rooms.create(ROOM_ID, HOST)
        host, bob = connect(HOST), connect("U2")

        await handle_ws_message(engine, host, {"type": "join-room", "roomId": ROOM_ID, "username": "alice"})
        await handle_ws_message(engine, bob, {"type": "join-room", "roomId": ROOM_ID, "username": "bob"})
        await handle_ws_message(engine, host, {"type": "play", "roomId": ROOM_ID, "currentTime": 10})

        assert bob.events() == ["room-state", "play"]
        assert bob.payloads("play") == [{"currentTime": 10}]
        assert host.events() == ["room-state", "user-joined"]

    @pytest.mark.asyncio
    async def test_watch_start_and_end(self, engine: RoomEngine, rooms: RoomStateStore, connect) -> None:
        rooms.create(ROOM_ID, HOST)
        host, bob = connect(HOST), connect("U2")
        await handle_ws_message(engine, host, {"type": "join-room", "roomId": ROOM_ID, "username": "alice"})
        await handle_ws_message(engine, bob, {"type": "join-room", "roomId": ROOM_ID, "username": "bob"})

        await handle_ws_message(
            engine, host, {"type": "watch-start", "roomId": ROOM_ID, "movieId": 27205, "videoUrl": "https://v/1"}
        )
        await handle_ws_message(engine, bob, {"type": "watch-end", "roomId": ROOM_ID})

        assert bob.payloads("watch-start") == [{"movieId": 27205, "videoUrl": "https://v/1"}]
        assert host.payloads("watch-end") == [{}]

    @pytest.mark.asyncio
    async def test_activity_frames(self, engine: RoomEngine, rooms: RoomStateStore, store, connect) -> None:
        rooms.create(ROOM_ID, HOST)
        bob = connect("U2")
        await handle_ws_message(engine, bob, {"type": "join-room", "roomId": ROOM_ID, "username": "bob"})

        await handle_ws_message(engine, bob, {"type": "chat-message", "roomId": ROOM_ID, "message": "hi", "username": "bob"})
        await handle_ws_message(engine, bob, {"type": "reaction", "roomId": ROOM_ID, "emoji": "😂", "username": "bob"})
        await handle_ws_message(engine, bob, {"type": "gift", "roomId": ROOM_ID, "giftType": "star", "username": "bob"})

        assert bob.events() == ["room-state", "chat-message", "reaction", "gift"]

    @pytest.mark.asyncio
    async def test_leave_and_close(self, engine: RoomEngine, rooms: RoomStateStore, connect) -> None:
        rooms.create(ROOM_ID, HOST)
        host, bob = connect(HOST), connect("U2")
        await handle_ws_message(engine, host, {"type": "join-room", "roomId": ROOM_ID, "username": "alice"})
        await handle_ws_message(engine, bob, {"type": "join-room", "roomId": ROOM_ID, "username": "bob"})

        await handle_ws_message(engine, bob, {"type": "leave-room", "roomId": ROOM_ID, "username": "bob"})
        await handle_ws_message(engine, host, {"type": "close-room", "roomId": ROOM_ID})

        assert host.events() == ["room-state", "user-joined", "user-left", "room-closed"]
        assert ROOM_ID not in rooms


class TestMalformed:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "frame",
        [
            ["play"],
            {"roomId": ROOM_ID},
            {"type": "dance", "roomId": ROOM_ID},
            {"type": "play", "roomId": ROOM_ID},
            {"type": "play", "roomId": ROOM_ID, "currentTime": "soon"},
            {"type": "play", "roomId": ROOM_ID, "currentTime": -3},
            {"type": "join-room", "roomId": "", "username": "bob"},
            {"type": "chat-message", "roomId": ROOM_ID, "message": "", "username": "bob"},
        ],
    )
    async def test_malformed_frames_are_ignored(self, frame, engine: RoomEngine, rooms: RoomStateStore, connect) -> None:
        rooms.create(ROOM_ID, HOST)
        host, bob = connect(HOST), connect("U2")
        await handle_ws_message(engine, bob, {"type": "join-room", "roomId": ROOM_ID, "username": "bob"})
        bob.sent.clear()
        before = rooms.get(ROOM_ID).snapshot()

        await handle_ws_message(engine, host, frame)

        assert rooms.get(ROOM_ID).snapshot() == before
        assert bob.sent == []
        assert host.sent == []
