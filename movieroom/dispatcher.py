"""Addressing layer between the engine and live sockets.

The engine only talks to the :class:`Dispatcher` protocol so tests can swap
in a recording double. :class:`ConnectionHub` is the production
implementation; it tracks which connection is subscribed to which room and
fans events out by enqueueing them on each connection's outbox.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Set, Union

from .connection import Connection
from .logging import get_logger
from .schemas import CamelModel

logger = get_logger(__name__)

Payload = Union[CamelModel, Dict[str, Any], None]


def _wire(payload: Payload) -> Dict[str, Any]:
    if payload is None:
        return {}
    if isinstance(payload, CamelModel):
        return payload.wire()
    return payload


class Dispatcher(Protocol):
    def subscribe(self, room_id: str, connection_id: str) -> None: ...

    def unsubscribe(self, room_id: str, connection_id: str) -> None: ...

    def clear_room(self, room_id: str) -> None: ...

    def drop(self, connection_id: str) -> List[str]: ...

    def to_room(self, room_id: str, event: str, payload: Payload = None) -> None: ...

    def to_room_except(
        self, room_id: str, sender_connection_id: Optional[str], event: str, payload: Payload = None
    ) -> None: ...

    def to_sender(self, connection_id: str, event: str, payload: Payload = None) -> None: ...


class ConnectionHub:
    """Registry of live connections and their room subscriptions."""

    def __init__(self) -> None:
        self._connections: Dict[str, Connection] = {}
        # room_id -> connection ids, kept in subscription order
        self._rooms: Dict[str, Dict[str, None]] = {}
        self._memberships: Dict[str, Set[str]] = {}

    # -------------------- Registry -------------------- #

    def register(self, connection: Connection) -> None:
        self._connections[connection.connection_id] = connection
        self._memberships.setdefault(connection.connection_id, set())

    def get(self, connection_id: str) -> Optional[Connection]:
        return self._connections.get(connection_id)

    def drop(self, connection_id: str) -> List[str]:
        """Forget *connection_id* and return the rooms it was subscribed to."""
        self._connections.pop(connection_id, None)
        room_ids = sorted(self._memberships.pop(connection_id, set()))
        for room_id in room_ids:
            members = self._rooms.get(room_id)
            if members is not None:
                members.pop(connection_id, None)
                if not members:
                    self._rooms.pop(room_id, None)
        return room_ids

    # -------------------- Subscriptions -------------------- #

    def subscribe(self, room_id: str, connection_id: str) -> None:
        self._rooms.setdefault(room_id, {})[connection_id] = None
        self._memberships.setdefault(connection_id, set()).add(room_id)

    def unsubscribe(self, room_id: str, connection_id: str) -> None:
        members = self._rooms.get(room_id)
        if members is not None:
            members.pop(connection_id, None)
            if not members:
                self._rooms.pop(room_id, None)
        rooms = self._memberships.get(connection_id)
        if rooms is not None:
            rooms.discard(room_id)

    def clear_room(self, room_id: str) -> None:
        for connection_id in self._rooms.pop(room_id, {}):
            rooms = self._memberships.get(connection_id)
            if rooms is not None:
                rooms.discard(room_id)

    def members(self, room_id: str) -> List[str]:
        return list(self._rooms.get(room_id, {}))

    # -------------------- Delivery -------------------- #

    def to_room(self, room_id: str, event: str, payload: Payload = None) -> None:
        self.to_room_except(room_id, None, event, payload)

    def to_room_except(
        self, room_id: str, sender_connection_id: Optional[str], event: str, payload: Payload = None
    ) -> None:
        data = _wire(payload)
        for connection_id in list(self._rooms.get(room_id, {})):
            if connection_id == sender_connection_id:
                continue
            connection = self._connections.get(connection_id)
            if connection is not None:
                connection.send(event, data)

    def to_sender(self, connection_id: str, event: str, payload: Payload = None) -> None:
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.debug("No live connection %s for %s", connection_id, event)
            return
        connection.send(event, _wire(payload))


__all__ = ["Dispatcher", "ConnectionHub", "Payload"]
