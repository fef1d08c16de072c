import logging
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError

from quiz import db
from quiz.models import GameScore

logger = logging.getLogger(__name__)


class ResultsSink:
    """Writes finished-question results to the ``game_scores`` table.

    Best effort: a failing write is logged and rolled back, never raised,
    so the game loop cannot be held up or broken by the store.
    """

    def __init__(self, app):
        self.app = app

    def append(self, game_id: str, records: Iterable) -> bool:
        records = list(records)
        with self.app.app_context():
            try:
                for r in records:
                    db.session.add(GameScore(
                        game_id=game_id,
                        player_email=r.identity,
                        player_answer=r.answer,
                        answer_time=r.answer_time,
                        score=r.score,
                        rank=r.rank,
                        is_correct=r.is_correct,
                        game_timestamp=r.occurred_at,
                    ))
                db.session.commit()
            except SQLAlchemyError as exc:
                db.session.rollback()
                logger.warning(f"[sink] could not save {len(records)} results for {game_id}: {exc}")
                return False
        logger.info(f"[sink] saved {len(records)} results for {game_id}")
        return True

    def clear(self, game_id: str) -> bool:
        with self.app.app_context():
            try:
                deleted = GameScore.query.filter_by(game_id=game_id).delete()
                db.session.commit()
            except SQLAlchemyError as exc:
                db.session.rollback()
                logger.warning(f"[sink] could not clear results for {game_id}: {exc}")
                return False
        logger.info(f"[sink] cleared {deleted} results for {game_id}")
        return True
