from datetime import datetime, timezone

from wkpoule import db


class PouleMember(db.Model):
    __tablename__ = "poule_members"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    poule_id = db.Column(db.Integer, db.ForeignKey("poules.id"), nullable=False)

    # Standings (written by the scoring engine only)
    points = db.Column(db.Integer, nullable=False, default=0)
    rank = db.Column(db.Integer, nullable=True)

    # Per-category subtotals making up ``points``
    match_points = db.Column(db.Integer, nullable=False, default=0)
    topscorer_points = db.Column(db.Integer, nullable=False, default=0)
    group_points = db.Column(db.Integer, nullable=False, default=0)
    winner_points = db.Column(db.Integer, nullable=False, default=0)

    # Listing order inside a tie group
    exact_scores = db.Column(db.Integer, nullable=False, default=0)
    correct_results = db.Column(db.Integer, nullable=False, default=0)

    # Generation of the standings recompute that last wrote this row
    scoring_generation = db.Column(db.Integer, nullable=False, default=0)

    joined_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Constraints
    __table_args__ = (
        db.UniqueConstraint("user_id", "poule_id", name="unique_user_poule"),
        db.Index("idx_poule_members_rank", "poule_id", "rank"),
    )

    def __repr__(self):
        return f"<PouleMember user_id={self.user_id} poule_id={self.poule_id} rank={self.rank}>"

    def to_dict(self):
        """Convert membership to a leaderboard entry"""
        return {
            "user_id": self.user_id,
            "poule_id": self.poule_id,
            "user": self.user.to_dict() if self.user else None,
            "username": self.user.username if self.user else None,
            "display_name": self.user.full_name if self.user else None,
            "points": self.points,
            "rank": self.rank,
            "breakdown": {
                "matches": self.match_points,
                "topscorer": self.topscorer_points,
                "groups": self.group_points,
                "winner": self.winner_points,
            },
            "exact_scores": self.exact_scores,
            "correct_results": self.correct_results,
        }
