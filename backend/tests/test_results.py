from datetime import datetime, timezone

from quiz import db
from quiz.models import GameScore
from quiz.services.game.scoring import ResultRecord
from quiz.services.results import ResultsSink


def _record(identity, rank, score=0.0, answer='timeout', correct=False):
    return ResultRecord(identity=identity, answer=answer, answer_time=3.5, score=score, rank=rank,
                        is_correct=correct, occurred_at=datetime.now(timezone.utc))


def test_append_and_clear(flask_app):
    sink = ResultsSink(flask_app)
    assert sink.append('espresso', [_record('a', 1, 8.0, 'echantons', True), _record('b', 2)])
    assert sink.append('other', [_record('c', 1)])
    rows = GameScore.query.filter_by(game_id='espresso').order_by(GameScore.rank).all()
    assert [r.player_email for r in rows] == ['a', 'b']
    assert rows[0].is_correct is True

    assert sink.clear('espresso')
    assert GameScore.query.filter_by(game_id='espresso').count() == 0
    assert GameScore.query.filter_by(game_id='other').count() == 1


def test_failures_are_swallowed(flask_app):
    sink = ResultsSink(flask_app)
    db.drop_all()
    assert sink.append('espresso', [_record('a', 1)]) is False
    assert sink.clear('espresso') is False
    db.create_all()
