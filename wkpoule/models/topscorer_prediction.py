from datetime import datetime, timezone

from wkpoule import db


class TopscorerPrediction(db.Model):
    __tablename__ = "topscorer_predictions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    poule_id = db.Column(db.Integer, db.ForeignKey("poules.id"), nullable=False)
    player_id = db.Column(db.Integer, db.ForeignKey("players.id"), nullable=False)

    points_earned = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint("user_id", "poule_id", name="unique_topscorer_user_poule"),
    )

    def __repr__(self):
        return f"<TopscorerPrediction user_id={self.user_id} player_id={self.player_id}>"
