"""Error taxonomy of the room synchronisation engine.

Only two conditions are modelled as exceptions. Authority violations, unknown
rooms and malformed events are ignored where they are detected and never
surface to the acting client.
"""
from __future__ import annotations


class AuthFailure(Exception):
    """The presented credential is missing, malformed, expired or wrongly signed."""


class PersistenceFailure(Exception):
    """A collaborator store call failed or did not finish in time."""


__all__ = ["AuthFailure", "PersistenceFailure"]
