from datetime import datetime, timezone

from wkpoule import db


class GroupStandingsPrediction(db.Model):
    __tablename__ = "group_standings_predictions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    poule_id = db.Column(db.Integer, db.ForeignKey("poules.id"), nullable=False)
    group_name = db.Column(db.String(10), nullable=False)

    # Ordered team names, first place first
    predicted_standings = db.Column(db.JSON, nullable=False)

    points_earned = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint(
            "user_id", "poule_id", "group_name", name="unique_group_prediction"
        ),
        db.Index("idx_group_prediction_group", "group_name"),
    )

    def __repr__(self):
        return f"<GroupStandingsPrediction user_id={self.user_id} group={self.group_name}>"
