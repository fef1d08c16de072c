from quiz.services.game import Roster


def test_join_creates_connected_participant():
    roster = Roster()
    player = roster.join_as_player('alice', 's1')
    assert player.is_connected and player.sid == 's1' and player.score == 0
    assert roster.identity_for('s1') == 'alice'
    assert roster.is_player_connection('s1')
    assert len(roster) == 1


def test_rejoin_keeps_score_and_moves_connection():
    roster = Roster()
    roster.join_as_player('alice', 's1').score = 7.5
    roster.mark_disconnected('s1')
    player = roster.join_as_player('alice', 's2')
    assert player.score == 7.5
    assert player.is_connected
    assert roster.identity_for('s1') is None
    assert roster.identity_for('s2') == 'alice'
    assert len(roster) == 1


def test_stale_connection_disconnect_is_ignored():
    roster = Roster()
    roster.join_as_player('alice', 's1')
    roster.join_as_player('alice', 's2')
    assert roster.mark_disconnected('s1') is None
    assert roster.get('alice').is_connected


def test_unknown_connection_disconnect_is_noop():
    roster = Roster()
    assert roster.mark_disconnected('nobody') is None


def test_admin_membership_is_dropped_on_disconnect():
    roster = Roster()
    roster.join_as_admin('a1')
    assert roster.is_admin('a1')
    assert len(roster) == 0
    roster.mark_disconnected('a1')
    assert not roster.is_admin('a1')


def test_first_answer_wins():
    roster = Roster()
    roster.join_as_player('alice', 's1')
    assert roster.record_answer('alice', 'one', at=103.456, started_at=100.0)
    assert not roster.record_answer('alice', 'two', at=104.0, started_at=100.0)
    player = roster.get('alice')
    assert player.answer == 'one'
    assert player.answer_time == 3.46


def test_unknown_identity_answer_is_noop():
    roster = Roster()
    assert roster.record_answer('ghost', 'x', at=1.0, started_at=0.0) is False


def test_all_answered_counts_disconnected_players():
    roster = Roster()
    assert roster.all_answered() is False
    roster.join_as_player('alice', 's1')
    roster.join_as_player('bob', 's2')
    roster.mark_disconnected('s2')
    roster.record_answer('alice', 'x', at=1.0, started_at=0.0)
    assert roster.all_answered() is False
    roster.record_answer('bob', 'y', at=1.0, started_at=0.0)
    assert roster.all_answered() is True
    roster.clear_answers()
    assert roster.all_answered() is False


def test_names_and_reset():
    roster = Roster()
    roster.join_as_player('alice', 's1')
    roster.join_as_player('bob', 's2')
    roster.join_as_admin('a')
    roster.mark_disconnected('s2')
    assert roster.names() == ['alice', 'bob']
    assert roster.names(connected_only=True) == ['alice']
    roster.reset_all()
    assert len(roster) == 0
    assert not roster.is_admin('a')
    assert roster.identity_for('s1') is None
