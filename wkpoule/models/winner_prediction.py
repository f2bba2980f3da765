from datetime import datetime, timezone

from wkpoule import db


class WinnerPrediction(db.Model):
    __tablename__ = "winner_predictions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    poule_id = db.Column(db.Integer, db.ForeignKey("poules.id"), nullable=False)
    country = db.Column(db.String(100), nullable=False)

    points_earned = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint("user_id", "poule_id", name="unique_winner_user_poule"),
    )

    def __repr__(self):
        return f"<WinnerPrediction user_id={self.user_id} country={self.country}>"
