from datetime import datetime, timezone

from wkpoule import db


class Player(db.Model):
    __tablename__ = "players"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    country = db.Column(db.String(100), nullable=False)
    position = db.Column(db.String(30))

    # Tournament goals, kept up to date externally
    goals = db.Column(db.Integer, nullable=False, default=0)

    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (db.Index("idx_player_goals", "goals"),)

    def __repr__(self):
        return f"<Player {self.name} ({self.country}) {self.goals}>"
