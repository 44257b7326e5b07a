from collections import Counter
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from scrumpoker.models import RoundVote, VoteValue, is_numeric_vote

NOT_AVAILABLE = 'N/A'


@dataclass(frozen=True)
class RoundStats:
    average: str
    has_consensus: bool
    most_common: Optional[VoteValue]
    show_most_common: bool

    def to_dict(self):
        return {
            'average': self.average,
            'hasConsensus': self.has_consensus,
            'mostCommon': self.most_common,
            'showMostCommon': self.show_most_common,
        }


def format_average(numbers) -> str:
    if not numbers:
        return NOT_AVAILABLE
    # Round the exact value of the float mean; halves only tie when the
    # double is exact (0.25 -> "0.3", but 1.45 is stored below and gives "1.4")
    mean = Decimal(sum(numbers) / len(numbers))
    return str(mean.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def calculate_round_stats(votes: Iterable[RoundVote]) -> RoundStats:
    """Derive average, consensus and plurality from a vote ledger.

    - average covers numeric votes only
    - consensus means every cast value (including "?") is the same
    - the plurality value is hidden on ties and when nobody picked a number
    """
    values = [vote.value for vote in votes if vote.value is not None]
    numbers = [v for v in values if is_numeric_vote(v)]

    has_consensus = len(values) > 0 and len(set(values)) == 1

    frequency = Counter(values)
    max_count = max(frequency.values(), default=0)
    modes = [value for value, count in frequency.items() if count == max_count]
    show_most_common = bool(values) and bool(numbers) and len(modes) == 1

    return RoundStats(
        average=format_average(numbers),
        has_consensus=has_consensus,
        most_common=modes[0] if show_most_common else None,
        show_most_common=show_most_common,
    )
