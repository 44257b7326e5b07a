"""Errors raised by structural room operations (create, join).

Gameplay operations (vote, reveal, clear) never raise for bad input or
missing permissions; they return a denied ``ActionResult`` instead.
"""


class RoomError(Exception):
    """Base exception for room lifecycle errors."""

    def __init__(self, message, room_id=None):
        super().__init__(message)
        self.message = message
        self.room_id = room_id


class ValidationError(RoomError):
    """Room id or role failed validation."""


class NotFoundError(RoomError):
    """Join attempted against a room that does not exist."""


class AlreadyExistsError(RoomError):
    """Create attempted for a room id that is already taken."""
