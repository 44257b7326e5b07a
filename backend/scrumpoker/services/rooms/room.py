from typing import Dict, Optional

from scrumpoker.models import Participant, Role, User, VoteValue
from . import permissions
from .permissions import Permission, PermissionContext
from .results import DenyReason
from .round import RoundTracker

ROOM_STATUS = 'voting'


class Room:
    """One estimation session: its participants and the round in progress."""

    def __init__(self, room_id: str, creator: Participant):
        self.id = room_id
        # Informational only; the creator has no extra powers
        self.creator_id = creator.id
        self.participants: Dict[str, Participant] = {creator.id: creator}
        self.current_round = 1
        self.current_round_tracker = RoundTracker(self.current_round)

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    def is_empty(self) -> bool:
        return not self.participants

    def get_participant(self, user_id: str) -> Optional[Participant]:
        return self.participants.get(user_id)

    def add_participant(self, user: User, role: Role = Role.PARTICIPANT) -> bool:
        """Add or re-add ``user``; returns True when it was a rejoin.

        A (re)join overwrites name and role and always starts unvoted, so
        any vote this user cast in the current round is dropped from the
        ledger, including one left behind by an earlier leave.
        """
        rejoined = user.id in self.participants
        self.participants[user.id] = Participant(id=user.id, name=user.name, role=role)
        self.current_round_tracker.remove_vote(user.id)
        return rejoined

    def remove_participant(self, user_id: str) -> bool:
        return self.participants.pop(user_id, None) is not None

    def update_participant_name(self, user_id: str, new_name: str) -> bool:
        participant = self.participants.get(user_id)
        if participant is None:
            return False
        participant.name = new_name
        if participant.has_voted:
            self.current_round_tracker.update_participant_name(user_id, new_name)
        return True

    def record_vote(self, user_id: str, value: VoteValue) -> Optional[Participant]:
        participant = self.participants.get(user_id)
        if participant is None:
            return None
        participant.has_voted = True
        self.current_round_tracker.add_or_update_vote(participant.id, participant.name, value)
        return participant

    def reset_for_new_round(self) -> None:
        self.current_round += 1
        self.current_round_tracker = RoundTracker(self.current_round)
        for participant in self.participants.values():
            participant.has_voted = False

    def reveal_current_round(self) -> Optional[int]:
        self.current_round_tracker.mark_revealed()
        return self.current_round_tracker.unanimous_value()

    def has_any_votes(self) -> bool:
        return self.current_round_tracker.has_votes() or any(
            p.has_voted for p in self.participants.values()
        )

    def voted_count(self) -> int:
        return sum(1 for p in self.participants.values() if p.has_voted)

    # ---- ACL ----

    def permission_context(self, user_id: str) -> Optional[PermissionContext]:
        participant = self.participants.get(user_id)
        if participant is None:
            return None
        return PermissionContext(
            user_role=participant.role,
            user_id=user_id,
            room_creator_id=self.creator_id,
            is_round_revealed=self.current_round_tracker.is_revealed,
            has_votes=self.has_any_votes(),
        )

    def check_permission(self, user_id: str, permission: Permission) -> Optional[DenyReason]:
        context = self.permission_context(user_id)
        if context is None:
            return DenyReason.NOT_IN_ROOM
        return permissions.check_action(permission, context)

    def progress(self) -> Dict[str, bool]:
        return {pid: p.has_voted for pid, p in self.participants.items()}

    def to_dict(self):
        return {
            'id': self.id,
            'creatorId': self.creator_id,
            'participants': [p.to_dict() for p in self.participants.values()],
            'status': ROOM_STATUS,
            'currentRound': self.current_round,
            'currentRoundState': self.current_round_tracker.to_dict(),
        }
