import logging
import re
import threading
from typing import Dict, List, Optional

from scrumpoker.errors import AlreadyExistsError, NotFoundError, ValidationError
from scrumpoker.models import Participant, Role, User, is_deck_value
from .permissions import Permission
from .results import ActionResult, DenyReason, LeaveResult
from .room import Room

ROOM_ID_MAX_LENGTH = 50
_ROOM_ID_RE = re.compile(r'^[a-z_-]+$')


def normalize_room_id(room_id) -> str:
    return str(room_id or '').strip().lower()


def validate_room_id(room_id) -> str:
    """Normalize ``room_id`` and raise ValidationError if it is unusable."""
    normalized = normalize_room_id(room_id)
    if not normalized:
        raise ValidationError('Room name is required')
    if len(normalized) > ROOM_ID_MAX_LENGTH:
        raise ValidationError(f'Room name must be at most {ROOM_ID_MAX_LENGTH} characters', normalized)
    if not _ROOM_ID_RE.match(normalized):
        raise ValidationError(
            'Room name can only contain lowercase letters, hyphens, and underscores', normalized
        )
    return normalized


class RoomRegistry:
    """Directory of live rooms keyed by normalized room id.

    Every public method holds the registry lock for its whole duration,
    so a handler thread never observes a half-applied vote, clear or
    leave. Rooms are removed as soon as their last participant leaves.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.RLock()
        self.logger.info('[registry-init] room registry initialized')

    # ---- lifecycle ----

    def room_exists(self, room_id) -> bool:
        with self._lock:
            return normalize_room_id(room_id) in self._rooms

    def create_room(self, room_id, creator: User, role=Role.PARTICIPANT) -> Room:
        role = Role.parse(role)
        normalized = validate_room_id(room_id)
        with self._lock:
            if normalized in self._rooms:
                self.logger.warning(f"[room-create-rejected] room={normalized} user={creator.id} reason=exists")
                raise AlreadyExistsError('Room already exists', normalized)
            room = Room(normalized, Participant(id=creator.id, name=creator.name, role=role))
            self._rooms[normalized] = room
            self.logger.info(
                f"[room-create] room={normalized} creator={creator.id} name={creator.name!r} role={role.value}"
            )
            return room

    def join_room(self, room_id, user: User, role=Role.PARTICIPANT) -> Room:
        role = Role.parse(role)
        normalized = validate_room_id(room_id)
        with self._lock:
            room = self._rooms.get(normalized)
            if room is None:
                self.logger.warning(f"[room-join-rejected] room={normalized} user={user.id} reason=not_found")
                raise NotFoundError('Room does not exist anymore, you want to reopen it?', normalized)
            rejoined = room.add_participant(user, role)
            self.logger.info(
                f"[room-join] room={normalized} user={user.id} name={user.name!r} role={role.value} "
                f"rejoined={rejoined} participants={room.participant_count}"
            )
            return room

    def join_or_create_room(self, room_id, user: User, role=Role.PARTICIPANT) -> Room:
        """Join ``room_id``, creating it first if nobody is in it yet."""
        with self._lock:
            if self.room_exists(room_id):
                return self.join_room(room_id, user, role)
            return self.create_room(room_id, user, role)

    def leave_room(self, room_id, user_id: str) -> Optional[LeaveResult]:
        """Remove ``user_id`` from the room. Returns None if the room is unknown."""
        normalized = normalize_room_id(room_id)
        with self._lock:
            room = self._rooms.get(normalized)
            if room is None:
                self.logger.warning(f"[room-leave-rejected] room={normalized} user={user_id} reason=not_found")
                return None
            was_in_room = room.remove_participant(user_id)
            if was_in_room:
                self.logger.info(f"[room-leave] room={normalized} user={user_id}")
            if room.is_empty():
                del self._rooms[normalized]
                self.logger.info(f"[room-delete] room={normalized}")
                return LeaveResult(room_deleted=True, was_in_room=was_in_room)
            self.logger.info(f"[room-count] room={normalized} participants={room.participant_count}")
            return LeaveResult(room_deleted=False, was_in_room=was_in_room)

    def leave_all(self, user_id: str) -> List[str]:
        """Remove ``user_id`` everywhere; returns rooms that survive and need a state push."""
        to_update = []
        with self._lock:
            for room_id in [rid for rid, room in self._rooms.items() if user_id in room.participants]:
                result = self.leave_room(room_id, user_id)
                if result is not None and not result.room_deleted:
                    to_update.append(room_id)
            self.logger.info(f"[room-leave-all] user={user_id} rooms_updated={len(to_update)}")
        return to_update

    # ---- gameplay ----

    def cast_vote(self, room_id, user_id: str, value) -> ActionResult:
        normalized = normalize_room_id(room_id)
        with self._lock:
            room = self._rooms.get(normalized)
            if room is None:
                return self._deny('vote', normalized, user_id, DenyReason.ROOM_NOT_FOUND)
            if not is_deck_value(value):
                return self._deny('vote', normalized, user_id, DenyReason.INVALID_VALUE)
            reason = room.check_permission(user_id, Permission.VOTE_CAST)
            if reason is not None:
                return self._deny('vote', normalized, user_id, reason)
            room.record_vote(user_id, value)
            self.logger.info(
                f"[vote] room={normalized} user={user_id} value={value} "
                f"voted={room.voted_count()}/{room.participant_count}"
            )
            return ActionResult.success()

    def clear_votes(self, room_id, user_id: str) -> ActionResult:
        normalized = normalize_room_id(room_id)
        with self._lock:
            room = self._rooms.get(normalized)
            if room is None:
                return self._deny('clear', normalized, user_id, DenyReason.ROOM_NOT_FOUND)
            reason = room.check_permission(user_id, Permission.ROUND_CLEAR)
            if reason is not None:
                return self._deny('clear', normalized, user_id, reason)
            removed = len(room.current_round_tracker.votes)
            room.reset_for_new_round()
            self.logger.info(
                f"[clear] room={normalized} user={user_id} removed_votes={removed} round={room.current_round}"
            )
            return ActionResult.success(room.current_round)

    def start_reveal(self, room_id, user_id: str, broadcaster) -> ActionResult:
        """Reveal the current round and push the new state to the room.

        The result's ``value`` is the unanimous numeric vote, if any.
        """
        normalized = normalize_room_id(room_id)
        with self._lock:
            room = self._rooms.get(normalized)
            if room is None:
                return self._deny('reveal', normalized, user_id, DenyReason.ROOM_NOT_FOUND)
            reason = room.check_permission(user_id, Permission.ROUND_REVEAL)
            if reason is not None:
                return self._deny('reveal', normalized, user_id, reason)
            unanimous = room.reveal_current_round()
            state = room.to_dict()
            self.logger.info(
                f"[reveal] room={normalized} user={user_id} votes={len(state['currentRoundState']['votes'])} "
                f"unanimous={unanimous if unanimous is not None else 'none'}"
            )
            broadcaster.to(normalized).emit('room:state', state)
            return ActionResult.success(unanimous)

    def update_participant_name(self, room_id, user_id: str, new_name: str) -> bool:
        normalized = normalize_room_id(room_id)
        with self._lock:
            room = self._rooms.get(normalized)
            if room is None:
                self.logger.warning(f"[rename-rejected] room={normalized} user={user_id} reason=room_not_found")
                return False
            participant = room.get_participant(user_id)
            if participant is None:
                self.logger.warning(f"[rename-rejected] room={normalized} user={user_id} reason=not_in_room")
                return False
            old_name = participant.name
            room.update_participant_name(user_id, new_name)
            self.logger.info(f"[rename] room={normalized} user={user_id} old={old_name!r} new={new_name!r}")
            return True

    # ---- queries ----

    def find_user_room(self, user_id: str) -> Optional[str]:
        with self._lock:
            for room_id, room in self._rooms.items():
                if user_id in room.participants:
                    return room_id
            return None

    def has_any_votes(self, room_id) -> bool:
        with self._lock:
            room = self._rooms.get(normalize_room_id(room_id))
            return room is not None and room.has_any_votes()

    def get_state(self, room_id) -> Optional[dict]:
        with self._lock:
            room = self._rooms.get(normalize_room_id(room_id))
            return room.to_dict() if room else None

    def get_progress(self, room_id) -> Optional[Dict[str, bool]]:
        with self._lock:
            room = self._rooms.get(normalize_room_id(room_id))
            return room.progress() if room else None

    def rooms_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def active_users_count(self) -> int:
        with self._lock:
            users = set()
            for room in self._rooms.values():
                users.update(room.participants)
            return len(users)

    def _deny(self, action: str, room_id: str, user_id: str, reason: DenyReason) -> ActionResult:
        self.logger.warning(f"[{action}-rejected] room={room_id} user={user_id} reason={reason.value}")
        return ActionResult.denied(reason)
