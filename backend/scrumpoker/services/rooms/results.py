from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class DenyReason(str, Enum):
    ROOM_NOT_FOUND = 'room_not_found'
    NOT_IN_ROOM = 'not_in_room'
    INVALID_VALUE = 'invalid_value'
    PERMISSION_DENIED = 'permission_denied'
    NO_VOTES = 'no_votes'


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a gameplay operation.

    Gameplay operations stay silent towards clients when rejected; the
    reason is kept here so callers and tests can tell why.
    """
    ok: bool
    reason: Optional[DenyReason] = None
    value: Any = None

    @classmethod
    def success(cls, value=None) -> 'ActionResult':
        return cls(ok=True, value=value)

    @classmethod
    def denied(cls, reason: DenyReason) -> 'ActionResult':
        return cls(ok=False, reason=reason)

    def __bool__(self):
        return self.ok


@dataclass(frozen=True)
class LeaveResult:
    room_deleted: bool
    was_in_room: bool
