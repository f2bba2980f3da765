import secrets
from datetime import datetime, timezone

from wkpoule import db


class Poule(db.Model):
    __tablename__ = "poules"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)

    # Per-poule point values; missing keys fall back to the global defaults
    scoring_rules = db.Column(db.JSON, nullable=True)

    # Monotonic stamp taken by every standings recompute of this poule
    scoring_generation = db.Column(db.Integer, nullable=False, default=0)

    invite_code = db.Column(db.String(8), unique=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    members = db.relationship(
        "PouleMember", backref="poule", lazy="dynamic", cascade="all, delete-orphan"
    )
    predictions = db.relationship(
        "Prediction", backref="poule", lazy="dynamic", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Poule {self.name}>"

    def __init__(self, **kwargs):
        super(Poule, self).__init__(**kwargs)
        if not self.invite_code:
            self.invite_code = self.generate_invite_code()
        if self.scoring_generation is None:
            self.scoring_generation = 0

    @staticmethod
    def generate_invite_code():
        """Generate a unique 8-character invite code"""
        while True:
            code = secrets.token_urlsafe(6)[:8].upper()
            if not Poule.query.filter_by(invite_code=code).first():
                return code

    def get_scoring_rules(self, defaults=None):
        """Effective ScoringRules for this poule layered over ``defaults``"""
        from wkpoule.utils.scoring_rules import ScoringRules

        base = defaults if defaults is not None else ScoringRules.global_defaults()
        return base.merged(self.scoring_rules)

    def next_scoring_generation(self):
        """Atomically bump and return this poule's scoring generation"""
        db.session.execute(
            db.update(Poule)
            .where(Poule.id == self.id)
            .values(scoring_generation=Poule.scoring_generation + 1)
        )
        db.session.flush()
        return db.session.execute(
            db.select(Poule.scoring_generation).where(Poule.id == self.id)
        ).scalar_one()

    def add_member(self, user):
        """Add a user to the poule"""
        from .poule_member import PouleMember

        existing = self.members.filter_by(user_id=user.id).first()
        if existing:
            return existing, "User is already a member"

        membership = PouleMember(user_id=user.id, poule_id=self.id)
        db.session.add(membership)
        return membership, "User added successfully"

    def get_leaderboard(self):
        """Members ordered by rank, then by display name inside a tie"""
        from .poule_member import PouleMember
        from .user import User

        return (
            PouleMember.query.filter_by(poule_id=self.id)
            .join(User, PouleMember.user_id == User.id)
            .order_by(
                PouleMember.rank.is_(None),
                PouleMember.rank,
                PouleMember.exact_scores.desc(),
                PouleMember.correct_results.desc(),
                db.func.coalesce(User.display_name, User.username),
            )
            .all()
        )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "invite_code": self.invite_code,
            "member_count": self.members.count(),
            "scoring_rules": self.scoring_rules,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
