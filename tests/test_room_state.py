"""
tests.test_room_state
~~~~~~~~~~~~~~~~~~~~~

LiveRoom roster / playback fields and the keyed RoomStateStore.
"""
from __future__ import annotations

from movieroom.registry import RoomStateStore
from movieroom.room import LiveRoom


class TestLiveRoom:
    def test_new_room_has_no_media(self) -> None:
        room = LiveRoom("abc123", "U1")
        state = room.snapshot()

        assert state.host_id == "U1"
        assert state.is_playing is False
        assert state.current_time == 0
        assert state.video_url is None
        assert state.movie_id is None
        assert state.participants == []

    def test_rejoin_updates_in_place(self) -> None:
        """Joining twice with one identity keeps a single entry with the latest connection."""
        room = LiveRoom("abc123", "U1")
        room.upsert_participant("U2", "bob", "c1")
        room.upsert_participant("U3", "carol", "c2")
        room.upsert_participant("U2", "bobby", "c3")

        state = room.snapshot()
        assert [p.user_id for p in state.participants] == ["U2", "U3"]
        assert state.participants[0].username == "bobby"
        assert state.participants[0].connection_id == "c3"

    def test_remove_missing_participant_is_noop(self) -> None:
        room = LiveRoom("abc123", "U1")
        assert room.remove_participant("ghost") is None

    def test_snapshot_is_detached(self) -> None:
        room = LiveRoom("abc123", "U1")
        room.upsert_participant("U2", "bob", "c1")
        state = room.snapshot()

        room.upsert_participant("U2", "robert", "c9")
        room.set_playing(True, 12)

        assert state.participants[0].username == "bob"
        assert state.is_playing is False

    def test_snapshot_wire_format_is_camel_case(self) -> None:
        room = LiveRoom("abc123", "U1")
        room.load_media(550, "https://cdn.example/v.m3u8")
        room.upsert_participant("U2", "bob", "c1")

        wire = room.snapshot().wire()

        assert wire == {
            "hostId": "U1",
            "isPlaying": False,
            "currentTime": 0,
            "videoUrl": "https://cdn.example/v.m3u8",
            "movieId": 550,
            "participants": [{"userId": "U2", "username": "bob", "connectionId": "c1"}],
        }


class TestRoomStateStore:
    def test_create_get_delete(self) -> None:
        store = RoomStateStore()
        room = store.create("abc123", "U1")

        assert store.get("abc123") is room
        assert "abc123" in store
        assert len(store) == 1

        assert store.delete("abc123") is True
        assert store.get("abc123") is None
        assert store.delete("abc123") is False

    def test_create_never_replaces_host(self) -> None:
        store = RoomStateStore()
        first = store.create("abc123", "U1")
        second = store.create("abc123", "U2")

        assert second is first
        assert second.host_id == "U1"

    def test_locks_are_per_room(self) -> None:
        store = RoomStateStore()

        assert store.lock("a") is store.lock("a")
        assert store.lock("a") is not store.lock("b")

    def test_closed_rooms_are_remembered_after_delete(self) -> None:
        store = RoomStateStore()
        store.create("abc123", "U1")

        store.mark_closed("abc123")
        store.delete("abc123")

        assert store.is_closed("abc123") is True
        assert store.is_closed("other") is False
