import pytest

from quiz.services.game.roster import Participant
from quiz.services.game.scoring import (
    LeaderboardEntry,
    player_standing,
    question_points,
    rank_entries,
    score_question,
)


@pytest.mark.parametrize('latency,expected', [(0, 10.0), (2.0, 8.0), (9.99, pytest.approx(0.01)),
                                              (10, 0.0), (14.2, 0.0)])
def test_points_drop_with_latency(latency, expected):
    assert question_points('echantons', latency, 'echantons', 10) == expected


def test_wrong_or_missing_answer_earns_nothing():
    assert question_points('Echantons', 1.0, 'echantons', 10) == 0.0
    assert question_points(' echantons', 1.0, 'echantons', 10) == 0.0
    assert question_points(None, None, 'echantons', 10) == 0.0


def test_ties_broken_by_faster_time():
    entries = [LeaderboardEntry('A', 5, 2.0), LeaderboardEntry('B', 5, 1.0), LeaderboardEntry('C', 3, 0.5)]
    assert [e.identity for e in rank_entries(entries)] == ['B', 'A', 'C']


def test_missing_time_keeps_insertion_order():
    entries = [
        LeaderboardEntry('A', 0, None),
        LeaderboardEntry('B', 0, 3.0),
        LeaderboardEntry('C', 0, None),
        LeaderboardEntry('D', 0, 1.0),
    ]
    assert [e.identity for e in rank_entries(entries)] == ['A', 'D', 'C', 'B']


def test_equal_score_and_time_is_stable():
    entries = [LeaderboardEntry('A', 4, 1.0), LeaderboardEntry('B', 4, 1.0)]
    assert [e.identity for e in rank_entries(entries)] == ['A', 'B']


def _player(identity, answer=None, time=None, connected=True, score=0.0):
    return Participant(identity=identity, sid=f"sid-{identity}", score=score, answer=answer,
                       answer_time=time, is_connected=connected)


def test_score_question_builds_board_and_records():
    players = [
        _player('slow', 'echantons', 6.0),
        _player('fast', 'echantons', 1.25),
        _player('wrong', 'nope', 0.5),
        _player('silent'),
        _player('gone', 'echantons', 2.0, connected=False),
    ]
    outcome = score_question(players, 'echantons', 10, started_at=100.0, ended_at=107.0)

    assert [e.to_dict() for e in outcome.leaderboard] == [
        {'name': 'fast', 'score': 8.75, 'answerTime': 1.25},
        {'name': 'slow', 'score': 4.0, 'answerTime': 6.0},
        {'name': 'wrong', 'score': 0.0, 'answerTime': 0.5},
        {'name': 'silent', 'score': 0.0, 'answerTime': 7.0},
    ]
    assert players[4].score == 8.0

    records = {r.identity: r for r in outcome.records}
    assert records['silent'].answer == 'timeout'
    assert records['silent'].answer_time == 7.0
    assert records['silent'].rank == 4
    assert records['gone'].rank == 0
    assert records['gone'].is_correct
    assert records['wrong'].is_correct is False


def test_cumulative_score_is_shown_for_correct_answers():
    players = [_player('a', 'x', 3.0, score=5.0)]
    outcome = score_question(players, 'x', 10, started_at=0.0, ended_at=3.0)
    assert outcome.leaderboard[0].score == 12.0


def test_player_standing():
    board = [LeaderboardEntry('A', 8, 2.0), LeaderboardEntry('B', 0, 4.5)]
    assert player_standing(board, 'B') == {'rank': 2, 'score': 0, 'totalPlayers': 2}
    assert player_standing(board, 'Z') == {'rank': 0, 'score': 0.0, 'totalPlayers': 2}
