from datetime import datetime, timezone

from quiz import db


def _utcnow():
    return datetime.now(timezone.utc)


class Employee(db.Model):
    __tablename__ = 'employee'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    # Free text such as "janvier 2020", compared case-insensitively
    arrival_month_year = db.Column(db.String(64), nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'arrival_month_year': self.arrival_month_year,
        }


class GameScore(db.Model):
    __tablename__ = 'game_scores'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.String(64), nullable=False, index=True)
    player_email = db.Column(db.String(255), nullable=False)
    player_answer = db.Column(db.Text, nullable=True)
    answer_time = db.Column(db.Float, default=0)
    score = db.Column(db.Float, default=0)
    rank = db.Column(db.Integer, default=0)
    is_correct = db.Column(db.Boolean, default=False, nullable=False)
    game_timestamp = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'player_email': self.player_email,
            'player_answer': self.player_answer,
            'answer_time': self.answer_time,
            'score': self.score,
            'rank': self.rank,
            'is_correct': self.is_correct,
            'game_timestamp': self.game_timestamp.isoformat() if self.game_timestamp else None,
        }
