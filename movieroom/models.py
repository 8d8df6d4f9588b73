from tortoise import fields
from tortoise.models import Model
import uuid

class User(Model):
    """User account stored in the relational database."""

    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    username = fields.CharField(max_length=50, unique=True, index=True)
    email = fields.CharField(max_length=255, unique=True, null=True)
    password_hash = fields.CharField(max_length=128)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "users"


class Room(Model):
    """Durable record of a watch room. Live playback state is never stored here."""

    id = fields.IntField(pk=True)
    # Public identifier shared with clients (12 hex chars)
    room_id = fields.CharField(max_length=32, unique=True, index=True)
    password_hash = fields.CharField(max_length=128)
    host = fields.ForeignKeyField("models.User", related_name="hosted_rooms")
    is_active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    closed_at = fields.DatetimeField(null=True)

    class Meta:
        table = "rooms"


class RoomParticipation(Model):
    id = fields.IntField(pk=True)
    room = fields.ForeignKeyField("models.Room", related_name="participants")
    user = fields.ForeignKeyField("models.User", related_name="participations")
    joined_at = fields.DatetimeField(auto_now_add=True)
    left_at = fields.DatetimeField(null=True)

    class Meta:
        table = "room_participations"


class Message(Model):
    id = fields.IntField(pk=True)
    room = fields.ForeignKeyField("models.Room", related_name="messages")
    user = fields.ForeignKeyField("models.User", related_name="messages")
    content = fields.TextField()
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "messages"


class Reaction(Model):
    id = fields.IntField(pk=True)
    room = fields.ForeignKeyField("models.Room", related_name="reactions")
    user = fields.ForeignKeyField("models.User", related_name="reactions")
    emoji = fields.CharField(max_length=32)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "reactions"


class Gift(Model):
    id = fields.IntField(pk=True)
    room = fields.ForeignKeyField("models.Room", related_name="gifts")
    user = fields.ForeignKeyField("models.User", related_name="gifts")
    gift_type = fields.CharField(max_length=64)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "gifts"
