from scrumpoker.models import RoundVote
from scrumpoker.services.rooms.stats import calculate_round_stats


def _votes(*values):
    return [RoundVote(id=f'u{i}', name=f'User {i}', value=v) for i, v in enumerate(values)]


def test_consensus_on_identical_numbers():
    stats = calculate_round_stats(_votes(5, 5, 5))
    assert stats.has_consensus is True
    assert stats.average == '5.0'
    assert stats.show_most_common is True
    assert stats.most_common == 5


def test_consensus_on_all_question_marks():
    stats = calculate_round_stats(_votes('?', '?'))
    assert stats.has_consensus is True
    assert stats.average == 'N/A'
    # all non-numeric rounds never show a plurality value
    assert stats.show_most_common is False
    assert stats.most_common is None


def test_tie_suppresses_most_common():
    stats = calculate_round_stats(_votes(3, 3, 8, 8))
    assert stats.has_consensus is False
    assert stats.show_most_common is False
    assert stats.most_common is None
    assert stats.average == '5.5'


def test_single_plurality_value_is_shown():
    stats = calculate_round_stats(_votes(3, 3, 8))
    assert stats.show_most_common is True
    assert stats.most_common == 3
    assert stats.average == '4.7'


def test_question_mark_can_be_the_plurality():
    stats = calculate_round_stats(_votes('?', '?', 5))
    assert stats.show_most_common is True
    assert stats.most_common == '?'
    # average ignores "?" votes
    assert stats.average == '5.0'


def test_mixed_values_break_consensus():
    stats = calculate_round_stats(_votes(5, '?'))
    assert stats.has_consensus is False


def test_empty_ledger():
    stats = calculate_round_stats([])
    assert stats.average == 'N/A'
    assert stats.has_consensus is False
    assert stats.most_common is None
    assert stats.show_most_common is False


def test_average_rounds_half_up():
    assert calculate_round_stats(_votes(0, 0, 0, 1)).average == '0.3'
    assert calculate_round_stats(_votes(1, 2)).average == '1.5'


def test_average_rounds_the_stored_float():
    # 29 / 20 is stored as 1.4499999..., so it rounds down
    votes = _votes(*([1] * 17 + [5, 5, 2]))
    assert len(votes) == 20
    assert calculate_round_stats(votes).average == '1.4'


def test_absent_values_are_ignored():
    votes = _votes(8) + [RoundVote(id='ghost', name='Ghost', value=None)]
    stats = calculate_round_stats(votes)
    assert stats.has_consensus is True
    assert stats.average == '8.0'


def test_to_dict_uses_wire_keys():
    assert calculate_round_stats(_votes(2, 2)).to_dict() == {
        'average': '2.0',
        'hasConsensus': True,
        'mostCommon': 2,
        'showMostCommon': True,
    }
