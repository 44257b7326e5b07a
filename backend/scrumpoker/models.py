from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from scrumpoker.errors import ValidationError

VoteValue = Union[int, str]

# Fibonacci estimation deck; "?" means "no idea"
DECK = (0, 1, 2, 3, 5, 8, 13, 21, 34, 55, '?')
NUMERIC_DECK = frozenset(v for v in DECK if isinstance(v, int))


def is_deck_value(value) -> bool:
    if isinstance(value, str):
        return value == '?'
    # bool is an int subclass; True must not count as 1
    return isinstance(value, int) and not isinstance(value, bool) and value in NUMERIC_DECK


def is_numeric_vote(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class Role(str, Enum):
    PARTICIPANT = 'participant'
    VISITOR = 'visitor'

    @classmethod
    def parse(cls, value) -> 'Role':
        """Coerce a client supplied role, defaulting to participant."""
        if value is None or value == '':
            return cls.PARTICIPANT
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown role '{value}'") from None


class RoundStatus(str, Enum):
    VOTING = 'voting'
    REVEALED = 'revealed'


@dataclass
class User:
    id: str
    name: str


@dataclass
class Participant:
    id: str
    name: str
    role: Role = Role.PARTICIPANT
    has_voted: bool = False

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'hasVoted': self.has_voted,
            'role': self.role.value,
        }


@dataclass
class RoundVote:
    id: str
    name: str
    value: Optional[VoteValue] = None

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'value': self.value,
        }
