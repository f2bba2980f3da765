from datetime import datetime, timezone

from wkpoule import db

MATCH_STATUSES = ("pending", "live", "finished")


class Match(db.Model):
    __tablename__ = "matches"

    id = db.Column(db.Integer, primary_key=True)

    # Teams
    home_team = db.Column(db.String(100), nullable=False)
    away_team = db.Column(db.String(100), nullable=False)

    # Match timing
    kickoff_time = db.Column(db.DateTime, nullable=False)
    phase = db.Column(db.String(50))  # "group", "round_of_16", ...

    # Scores (null until played)
    home_score = db.Column(db.Integer)
    away_score = db.Column(db.Integer)

    status = db.Column(db.String(20), nullable=False, default="pending")

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    predictions = db.relationship(
        "Prediction", backref="match", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_match_status", "status"),
        db.Index("idx_match_kickoff", "kickoff_time"),
        db.CheckConstraint(
            "status IN ('pending', 'live', 'finished')", name="valid_match_status"
        ),
    )

    def __repr__(self):
        return f"<Match {self.home_team} vs {self.away_team} ({self.status})>"

    @property
    def is_finished(self):
        return self.status == "finished"

    @property
    def is_scoreable(self):
        """Finished with both scores known"""
        return (
            self.is_finished
            and self.home_score is not None
            and self.away_score is not None
        )

    @staticmethod
    def scoreable_query():
        """Query for matches the scoring engine may use"""
        return Match.query.filter(
            Match.status == "finished",
            Match.home_score.isnot(None),
            Match.away_score.isnot(None),
        )

    def update_score(self, home_score, away_score, is_finished=False):
        """Record a score; points are recomputed by the next scoring pass"""
        if home_score < 0 or away_score < 0:
            raise ValueError("Scores must be non-negative")

        self.home_score = home_score
        self.away_score = away_score
        if is_finished:
            self.status = "finished"
        elif self.status == "pending":
            self.status = "live"
