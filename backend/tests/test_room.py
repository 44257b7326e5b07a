from scrumpoker.models import Participant, Role, User
from scrumpoker.services.rooms import DenyReason
from scrumpoker.services.rooms.permissions import Permission
from scrumpoker.services.rooms.room import Room


def _room():
    return Room('planning', Participant(id='u1', name='Alice'))


def test_creator_is_first_participant():
    room = _room()
    assert room.creator_id == 'u1'
    assert room.current_round == 1
    assert list(room.participants) == ['u1']


def test_rejoin_resets_vote_flag_and_overwrites():
    room = _room()
    room.record_vote('u1', 5)
    assert room.participants['u1'].has_voted
    rejoined = room.add_participant(User(id='u1', name='Alice B'), Role.VISITOR)
    assert rejoined is True
    participant = room.participants['u1']
    assert participant.has_voted is False
    assert participant.name == 'Alice B'
    assert participant.role == Role.VISITOR
    assert room.current_round_tracker.votes == []


def test_record_vote_for_stranger_is_ignored():
    room = _room()
    assert room.record_vote('ghost', 5) is None
    assert room.current_round_tracker.votes == []


def test_reset_replaces_tracker():
    room = _room()
    room.record_vote('u1', 5)
    old_tracker = room.current_round_tracker
    room.reset_for_new_round()
    assert room.current_round_tracker is not old_tracker
    assert room.current_round_tracker.round_number == 2
    assert room.current_round == 2
    assert not room.participants['u1'].has_voted
    # the discarded tracker is left untouched
    assert len(old_tracker.votes) == 1


def test_rename_updates_ledger_only_when_voted():
    room = _room()
    room.add_participant(User(id='u2', name='Bob'))
    room.record_vote('u1', 8)
    assert room.update_participant_name('u1', 'Alicia')
    assert room.update_participant_name('u2', 'Robert')
    votes = room.current_round_tracker.votes
    assert [(v.id, v.name) for v in votes] == [('u1', 'Alicia')]
    assert room.participants['u2'].name == 'Robert'
    assert room.update_participant_name('ghost', 'X') is False


def test_permission_checks_delegate_to_policy():
    room = _room()
    room.add_participant(User(id='v1', name='Viv'), Role.VISITOR)
    assert room.check_permission('u1', Permission.VOTE_CAST) is None
    assert room.check_permission('v1', Permission.VOTE_CAST) == DenyReason.PERMISSION_DENIED
    assert room.check_permission('ghost', Permission.VOTE_CAST) == DenyReason.NOT_IN_ROOM
    # nothing to reveal yet
    assert room.check_permission('u1', Permission.ROUND_REVEAL) == DenyReason.NO_VOTES
    room.record_vote('u1', 3)
    assert room.check_permission('u1', Permission.ROUND_REVEAL) is None
    assert room.check_permission('u1', Permission.ROUND_CLEAR) is None
    assert room.check_permission('v1', Permission.ROUND_REVEAL) == DenyReason.PERMISSION_DENIED
    assert room.check_permission('v1', Permission.ROUND_CLEAR) == DenyReason.PERMISSION_DENIED


def test_reveal_returns_unanimous_value():
    room = _room()
    room.add_participant(User(id='u2', name='Bob'))
    room.record_vote('u1', 13)
    room.record_vote('u2', 13)
    assert room.reveal_current_round() == 13
    assert room.current_round_tracker.is_revealed


def test_to_dict_snapshot_shape():
    room = _room()
    room.record_vote('u1', '?')
    state = room.to_dict()
    assert state['id'] == 'planning'
    assert state['creatorId'] == 'u1'
    assert state['status'] == 'voting'
    assert state['currentRound'] == 1
    assert state['participants'] == [
        {'id': 'u1', 'name': 'Alice', 'hasVoted': True, 'role': 'participant'}
    ]
    assert state['currentRoundState']['votes'] == [{'id': 'u1', 'name': 'Alice', 'value': '?'}]
    assert set(state['currentRoundState']['stats']) == {
        'average', 'hasConsensus', 'mostCommon', 'showMostCommon'
    }
