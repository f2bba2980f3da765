from datetime import datetime, timezone

from wkpoule import db


class Prediction(db.Model):
    """A user's forecast of one match score within one poule"""

    __tablename__ = "predictions"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    poule_id = db.Column(db.Integer, db.ForeignKey("poules.id"), nullable=False)
    match_id = db.Column(db.Integer, db.ForeignKey("matches.id"), nullable=False)

    predicted_home_score = db.Column(db.Integer, nullable=False)
    predicted_away_score = db.Column(db.Integer, nullable=False)

    # Written by the scoring engine only
    points_earned = db.Column(db.Integer, nullable=True)

    # Provenance only, never used for scoring
    is_ai_generated = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint(
            "user_id", "poule_id", "match_id", name="unique_user_poule_match"
        ),
        db.Index("idx_prediction_match", "match_id"),
        db.Index("idx_prediction_poule_user", "poule_id", "user_id"),
    )

    def __repr__(self):
        return (
            f"<Prediction user_id={self.user_id} match_id={self.match_id} "
            f"{self.predicted_home_score}-{self.predicted_away_score}>"
        )
