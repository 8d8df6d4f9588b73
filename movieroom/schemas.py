"""Pydantic data schemas used across the backend service.

Everything that crosses the wire is camelCase on the outside and snake_case in
Python, so every model derives from :class:`CamelModel`.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MovieId = Union[int, str]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def wire(self) -> dict:
        """JSON-ready dict using the camelCase field names."""
        return self.model_dump(by_alias=True, mode="json")

# -----------------------------
# Runtime room state
# -----------------------------

class Participant(CamelModel):
    """A user attached to a live room through one connection."""

    user_id: str
    username: str
    connection_id: str


class RoomState(CamelModel):
    """Snapshot of a live room sent to a joining connection."""

    host_id: str
    is_playing: bool = False
    current_time: float = 0
    video_url: Optional[str] = None
    movie_id: Optional[MovieId] = None
    participants: List[Participant] = []

# -----------------------------
# Client -> server events
# -----------------------------

class RoomEvent(CamelModel):
    """Payload carrying only the target room (``close-room``, ``watch-end``)."""

    room_id: str = Field(min_length=1)


class JoinRoomEvent(RoomEvent):
    username: str


class LeaveRoomEvent(RoomEvent):
    username: str


class PlaybackEvent(RoomEvent):
    """``play`` / ``pause`` / ``seek``."""

    current_time: float = Field(ge=0)


class WatchStartEvent(RoomEvent):
    movie_id: Optional[MovieId] = None
    video_url: str


class ChatMessageEvent(RoomEvent):
    message: str = Field(min_length=1)
    username: str


class ReactionEvent(RoomEvent):
    emoji: str = Field(min_length=1)
    username: str


class GiftEvent(RoomEvent):
    gift_type: str = Field(min_length=1)
    username: str

# -----------------------------
# Server -> client payloads
# -----------------------------

class UserPresence(CamelModel):
    """``user-joined`` / ``user-left``."""

    user_id: str
    username: str


class PlaybackPosition(CamelModel):
    current_time: float


class MediaLoaded(CamelModel):
    movie_id: Optional[MovieId] = None
    video_url: str


class ActivityBroadcast(CamelModel):
    user_id: str
    username: str
    timestamp: datetime


class ChatBroadcast(ActivityBroadcast):
    message: str


class ReactionBroadcast(ActivityBroadcast):
    emoji: str


class GiftBroadcast(ActivityBroadcast):
    gift_type: str

# -----------------------------
# REST request / response models
# -----------------------------

class SignupRequest(CamelModel):
    username: str = Field(min_length=3, max_length=50)
    email: Optional[str] = None
    password: str = Field(min_length=6)


class LoginRequest(CamelModel):
    username: str
    password: str


class UserOut(CamelModel):
    id: str
    username: str


class AuthResponse(CamelModel):
    token: str
    user: UserOut


class CreateRoomRequest(CamelModel):
    password: Optional[str] = None


class JoinRoomRequest(CamelModel):
    room_id: Optional[str] = None
    password: Optional[str] = None


class ParticipantOut(CamelModel):
    user_id: str
    username: str
    joined_at: datetime


class RoomResponse(CamelModel):
    id: int
    room_id: str
    host_id: str
    host_username: str
    is_active: bool
    created_at: datetime
    closed_at: Optional[datetime] = None
    participants: List[ParticipantOut] = []


class RoomAnalytics(CamelModel):
    room_id: str
    total_participants: int
    total_messages: int
    total_reactions: int
    total_gifts: int
    # gift type -> number sent
    gift_breakdown: Dict[str, int] = {}
    created_at: datetime
    closed_at: Optional[datetime] = None


class MessageResponse(CamelModel):
    message: str


__all__ = [
    "CamelModel",
    "MovieId",
    # runtime
    "Participant",
    "RoomState",
    # client events
    "RoomEvent",
    "JoinRoomEvent",
    "LeaveRoomEvent",
    "PlaybackEvent",
    "WatchStartEvent",
    "ChatMessageEvent",
    "ReactionEvent",
    "GiftEvent",
    # server payloads
    "UserPresence",
    "PlaybackPosition",
    "MediaLoaded",
    "ActivityBroadcast",
    "ChatBroadcast",
    "ReactionBroadcast",
    "GiftBroadcast",
    # REST
    "SignupRequest",
    "LoginRequest",
    "UserOut",
    "AuthResponse",
    "CreateRoomRequest",
    "JoinRoomRequest",
    "ParticipantOut",
    "RoomResponse",
    "RoomAnalytics",
    "MessageResponse",
]
