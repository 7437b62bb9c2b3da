from app import db
from datetime import datetime, timezone


def _utcnow():
    return datetime.now(timezone.utc)


class Score(db.Model):
    """One submitted score, kept for history. Ranking lives in the leaderboard engine."""
    __tablename__ = 'score'
    id = db.Column(db.Integer, primary_key=True)
    player = db.Column(db.String(255), nullable=False, index=True)
    score = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'player': self.player,
            'score': self.score,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
