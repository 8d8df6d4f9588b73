from __future__ import annotations

import secrets
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException, status
from tortoise.expressions import Q

from ..auth_utils import get_current_user, hash_password, verify_password
from ..logging import get_logger
from ..models import Room, RoomParticipation, User
from ..schemas import (
    CreateRoomRequest,
    JoinRoomRequest,
    MessageResponse,
    ParticipantOut,
    RoomResponse,
)
from ..state import engine, room_states, room_store
from ..store import utcnow

logger = get_logger(__name__)

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


async def _room_response(room: Room) -> RoomResponse:
    await room.fetch_related("host")
    open_participations = (
        await RoomParticipation.filter(room_id=room.id, left_at__isnull=True)
        .prefetch_related("user")
        .order_by("joined_at")
    )
    return RoomResponse(
        id=room.id,
        room_id=room.room_id,
        host_id=str(room.host_id),
        host_username=room.host.username,
        is_active=room.is_active,
        created_at=room.created_at,
        closed_at=room.closed_at,
        participants=[
            ParticipantOut(user_id=str(p.user_id), username=p.user.username, joined_at=p.joined_at)
            for p in open_participations
        ],
    )


async def _get_room_or_404(room_id: str) -> Room:
    room = await Room.get_or_none(room_id=room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return room


@router.get("/my-rooms", response_model=List[RoomResponse])
async def my_rooms(current_user: User = Depends(get_current_user)):
    joined_ids = await RoomParticipation.filter(
        user_id=current_user.id, left_at__isnull=True
    ).values_list("room_id", flat=True)
    condition = Q(host_id=current_user.id)
    if joined_ids:
        condition = condition | Q(id__in=list(joined_ids))
    rooms = await Room.filter(condition, is_active=True).order_by("-created_at")
    return [await _room_response(room) for room in rooms]


@router.post("/create", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    req: CreateRoomRequest = Body(default=CreateRoomRequest()),
    current_user: User = Depends(get_current_user),
):
    if not req.password:
        raise HTTPException(status_code=400, detail="Password is required")

    room_id = secrets.token_hex(6)
    room = await Room.create(
        room_id=room_id,
        password_hash=hash_password(req.password),
        host=current_user,
    )
    # The creator is the host for the whole lifetime of the live state
    room_states.create(room_id, str(current_user.id))
    logger.info("Room %s created by %s", room_id, current_user.username)
    return await _room_response(room)


@router.post("/join", response_model=RoomResponse)
async def join_room(
    req: JoinRoomRequest = Body(default=JoinRoomRequest()),
    current_user: User = Depends(get_current_user),
):
    if not req.room_id or not req.password:
        raise HTTPException(status_code=400, detail="Room ID and password are required")
    room = await _get_room_or_404(req.room_id)
    if not room.is_active:
        raise HTTPException(status_code=400, detail="Room is closed")
    if not verify_password(req.password, room.password_hash):
        raise HTTPException(status_code=401, detail="Invalid password")

    already_in = await RoomParticipation.filter(
        room_id=room.id, user_id=current_user.id, left_at__isnull=True
    ).exists()
    if not already_in:
        await RoomParticipation.create(room=room, user=current_user)
    return await _room_response(room)


@router.get("/{room_id}", response_model=RoomResponse)
async def get_room_details(room_id: str, current_user: User = Depends(get_current_user)):
    return await _room_response(await _get_room_or_404(room_id))


@router.post("/{room_id}/close", response_model=MessageResponse)
async def close_room(room_id: str, current_user: User = Depends(get_current_user)):
    room = await _get_room_or_404(room_id)
    if str(room.host_id) != str(current_user.id):
        raise HTTPException(status_code=403, detail="Only the host can close the room")

    room_states.mark_closed(room_id)
    await engine.playback.close(room_id, str(current_user.id))
    # The socket path only logs a failed record update; here it must surface as an error
    await room_store.close_room(room_id, utcnow())
    return MessageResponse(message="Room closed successfully")
