from typing import List, Optional

from scrumpoker.models import RoundStatus, RoundVote, VoteValue, is_numeric_vote
from .stats import calculate_round_stats


class RoundTracker:
    """Vote ledger and reveal status for a single round.

    A tracker lives for exactly one round. Clearing votes does not empty
    it; the owning room drops it and allocates a new one with the next
    round number.
    """

    def __init__(self, round_number: int):
        self.round_number = round_number
        self.status = RoundStatus.VOTING
        self._votes: List[RoundVote] = []

    @property
    def votes(self) -> List[RoundVote]:
        return list(self._votes)

    @property
    def is_revealed(self) -> bool:
        return self.status == RoundStatus.REVEALED

    def has_votes(self) -> bool:
        return len(self._votes) > 0

    def add_or_update_vote(self, participant_id: str, name: str, value: VoteValue) -> None:
        record = RoundVote(id=participant_id, name=name, value=value)
        for idx, vote in enumerate(self._votes):
            if vote.id == participant_id:
                self._votes[idx] = record
                break
        else:
            self._votes.append(record)
        # A fresh vote reopens a revealed round
        self.status = RoundStatus.VOTING

    def remove_vote(self, participant_id: str) -> bool:
        before = len(self._votes)
        self._votes = [vote for vote in self._votes if vote.id != participant_id]
        return len(self._votes) != before

    def mark_revealed(self) -> None:
        self.status = RoundStatus.REVEALED

    def update_participant_name(self, participant_id: str, new_name: str) -> bool:
        for vote in self._votes:
            if vote.id == participant_id:
                vote.name = new_name
                return True
        return False

    def unanimous_value(self) -> Optional[int]:
        """The single numeric value everyone picked, ignoring "?" votes."""
        numbers = {vote.value for vote in self._votes if is_numeric_vote(vote.value)}
        if len(numbers) == 1:
            return next(iter(numbers))
        return None

    def to_dict(self):
        return {
            'round': self.round_number,
            'status': self.status.value,
            'votes': [vote.to_dict() for vote in self._votes],
            'stats': calculate_round_stats(self._votes).to_dict(),
        }
