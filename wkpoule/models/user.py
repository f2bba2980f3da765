from datetime import datetime, timezone

from wkpoule import db


class User(db.Model):
    """Owner of predictions and poule memberships.

    Accounts and sessions are managed by the external auth provider; this
    table only mirrors the profile fields the leaderboard displays.
    """

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=True)
    display_name = db.Column(db.String(100))
    avatar_url = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    predictions = db.relationship(
        "Prediction", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )
    poule_memberships = db.relationship(
        "PouleMember", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User {self.username}>"

    @property
    def full_name(self):
        return self.display_name or self.username

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "display_name": self.full_name,
            "avatar_url": self.avatar_url,
        }
