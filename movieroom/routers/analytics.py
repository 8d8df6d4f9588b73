from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from tortoise.functions import Count

from ..auth_utils import get_current_user
from ..models import Gift, Message, Reaction, Room, RoomParticipation, User
from ..schemas import RoomAnalytics

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/room/{room_id}", response_model=RoomAnalytics)
async def room_analytics(room_id: str, current_user: User = Depends(get_current_user)):
    """Activity totals of one room, read from the records written while it was live."""
    room = await Room.get_or_none(room_id=room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")

    gift_counts = (
        await Gift.filter(room_id=room.id)
        .annotate(count=Count("id"))
        .group_by("gift_type")
        .values("gift_type", "count")
    )
    breakdown = {row["gift_type"]: row["count"] for row in gift_counts}

    return RoomAnalytics(
        room_id=room.room_id,
        total_participants=await RoomParticipation.filter(room_id=room.id).count(),
        total_messages=await Message.filter(room_id=room.id).count(),
        total_reactions=await Reaction.filter(room_id=room.id).count(),
        total_gifts=sum(breakdown.values()),
        gift_breakdown=breakdown,
        created_at=room.created_at,
        closed_at=room.closed_at,
    )
