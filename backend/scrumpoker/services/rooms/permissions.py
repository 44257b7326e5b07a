"""Role based access control for rooms.

The matrix answers "may this role ever do X"; ``check_action`` adds the
runtime conditions (for example, revealing needs at least one vote).
Everything here is side-effect free.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from scrumpoker.models import Role
from .results import DenyReason


class Permission(str, Enum):
    ROOM_CREATE = 'room:create'
    ROOM_READ = 'room:read'
    ROOM_UPDATE = 'room:update'
    ROOM_DELETE = 'room:delete'
    ROOM_JOIN = 'room:join'
    ROOM_LEAVE = 'room:leave'
    VOTE_CAST = 'vote:cast'
    VOTE_READ = 'vote:read'
    ROUND_REVEAL = 'round:reveal'
    ROUND_CLEAR = 'round:clear'
    ROUND_READ = 'round:read'
    PARTICIPANT_READ = 'participant:read'
    PARTICIPANT_UPDATE = 'participant:update'
    PARTICIPANT_KICK = 'participant:kick'
    SESSION_CONTROL = 'session:control'


PERMISSION_MATRIX: Dict[Role, Dict[Permission, bool]] = {
    Role.PARTICIPANT: {
        Permission.ROOM_CREATE: True,
        Permission.ROOM_READ: True,
        Permission.ROOM_UPDATE: False,
        Permission.ROOM_DELETE: False,
        Permission.ROOM_JOIN: True,
        Permission.ROOM_LEAVE: True,
        Permission.VOTE_CAST: True,
        Permission.VOTE_READ: True,
        Permission.ROUND_REVEAL: True,
        Permission.ROUND_CLEAR: True,
        Permission.ROUND_READ: True,
        Permission.PARTICIPANT_READ: True,
        Permission.PARTICIPANT_UPDATE: True,
        Permission.PARTICIPANT_KICK: False,
        Permission.SESSION_CONTROL: True,
    },
    Role.VISITOR: {
        Permission.ROOM_CREATE: True,
        Permission.ROOM_READ: True,
        Permission.ROOM_UPDATE: False,
        Permission.ROOM_DELETE: False,
        Permission.ROOM_JOIN: True,
        Permission.ROOM_LEAVE: True,
        Permission.VOTE_CAST: False,
        Permission.VOTE_READ: True,
        Permission.ROUND_REVEAL: False,
        Permission.ROUND_CLEAR: False,
        Permission.ROUND_READ: True,
        Permission.PARTICIPANT_READ: True,
        Permission.PARTICIPANT_UPDATE: True,
        Permission.PARTICIPANT_KICK: False,
        Permission.SESSION_CONTROL: False,
    },
}

# Permissions that only make sense once the round has at least one vote
_REQUIRES_VOTES = frozenset({Permission.ROUND_REVEAL, Permission.ROUND_CLEAR})
# No core role may delete a room or kick someone; rooms die when emptied
_NEVER_GRANTED = frozenset({Permission.ROOM_DELETE, Permission.PARTICIPANT_KICK})


@dataclass(frozen=True)
class PermissionContext:
    user_role: Role
    user_id: str
    room_creator_id: Optional[str] = None
    is_round_revealed: Optional[bool] = None
    has_votes: Optional[bool] = None


class PermissionDenied(Exception):
    def __init__(self, permission: Permission, role: Role, message: Optional[str] = None):
        self.permission = permission
        self.role = role
        super().__init__(message or f"Permission '{permission.value}' denied for role '{role.value}'")


def has_permission(role: Role, permission: Permission) -> bool:
    return PERMISSION_MATRIX.get(role, {}).get(permission, False)


def check_action(permission: Permission, context: PermissionContext) -> Optional[DenyReason]:
    """Return why ``permission`` is refused in ``context``, or None if allowed."""
    if not has_permission(context.user_role, permission):
        return DenyReason.PERMISSION_DENIED
    if permission in _NEVER_GRANTED:
        return DenyReason.PERMISSION_DENIED
    if permission in _REQUIRES_VOTES and not context.has_votes:
        return DenyReason.NO_VOTES
    return None


def can_perform_action(permission: Permission, context: PermissionContext) -> bool:
    return check_action(permission, context) is None


def require_permission(permission: Permission, context: PermissionContext) -> None:
    if not can_perform_action(permission, context):
        raise PermissionDenied(
            permission,
            context.user_role,
            f"Action '{permission.value}' not allowed for role '{context.user_role.value}'",
        )


def role_permissions(role: Role) -> List[Permission]:
    return [perm for perm, allowed in PERMISSION_MATRIX.get(role, {}).items() if allowed]


def can_vote(role: Role) -> bool:
    return has_permission(role, Permission.VOTE_CAST)


def can_control_session(role: Role) -> bool:
    return has_permission(role, Permission.SESSION_CONTROL)


def can_view_results(role: Role) -> bool:
    return has_permission(role, Permission.ROUND_READ)
