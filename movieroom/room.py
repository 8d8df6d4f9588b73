from __future__ import annotations

from typing import Dict, List, Optional

from .schemas import MovieId, Participant, RoomState

# NOTE: ``LiveRoom`` is only ever reached through ``RoomStateStore``; callers
# look it up by room id inside the room's critical section and never keep it.


class LiveRoom:
    """In-memory playback state and roster of one open room."""

    def __init__(self, room_id: str, host_id: str):
        self.room_id = room_id
        self.host_id = host_id
        self.is_playing: bool = False
        self.current_time: float = 0
        self.video_url: Optional[str] = None
        self.movie_id: Optional[MovieId] = None
        # user_id -> Participant, in join order
        self.participants: Dict[str, Participant] = {}

    def is_host(self, user_id: str) -> bool:
        return user_id == self.host_id

    # -------------------- Roster -------------------- #

    def upsert_participant(self, user_id: str, username: str, connection_id: str) -> Participant:
        """Attach *user_id* to the room, rebinding its connection on rejoin."""
        existing = self.participants.get(user_id)
        if existing is not None:
            existing.username = username
            existing.connection_id = connection_id
            return existing
        participant = Participant(user_id=user_id, username=username, connection_id=connection_id)
        self.participants[user_id] = participant
        return participant

    def remove_participant(self, user_id: str) -> Optional[Participant]:
        return self.participants.pop(user_id, None)

    def participants_on(self, connection_id: str) -> List[Participant]:
        return [p for p in self.participants.values() if p.connection_id == connection_id]

    # -------------------- Playback -------------------- #

    def set_playing(self, playing: bool, current_time: float) -> None:
        self.is_playing = playing
        self.current_time = current_time

    def seek(self, current_time: float) -> None:
        self.current_time = current_time

    def load_media(self, movie_id: Optional[MovieId], video_url: str) -> None:
        self.movie_id = movie_id
        self.video_url = video_url

    # -------------------- Snapshot -------------------- #

    def snapshot(self) -> RoomState:
        """Return a detached copy of the state, safe to hand to other tasks."""
        return RoomState(
            host_id=self.host_id,
            is_playing=self.is_playing,
            current_time=self.current_time,
            video_url=self.video_url,
            movie_id=self.movie_id,
            participants=[p.model_copy() for p in self.participants.values()],
        )

__all__ = ["LiveRoom"]
