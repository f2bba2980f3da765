from datetime import datetime, timezone

from wkpoule import db


class ActualGroupStanding(db.Model):
    """Final order of a group, entered by an administrator after group play"""

    __tablename__ = "actual_group_standings"

    id = db.Column(db.Integer, primary_key=True)
    group_name = db.Column(db.String(10), unique=True, nullable=False, index=True)
    standings = db.Column(db.JSON, nullable=False)

    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self):
        return f"<ActualGroupStanding {self.group_name}: {self.standings}>"

    @staticmethod
    def set_standings(group_name, teams):
        """Create or replace the official order of a group"""
        teams = [team.strip() for team in teams if team and team.strip()]
        if not teams:
            raise ValueError("A group standing needs at least one team")
        if len({team.lower() for team in teams}) != len(teams):
            raise ValueError("A team can appear only once in a group standing")

        standing = ActualGroupStanding.query.filter_by(group_name=group_name).first()
        if standing:
            standing.standings = teams
        else:
            standing = ActualGroupStanding(group_name=group_name, standings=teams)
            db.session.add(standing)
        return standing
