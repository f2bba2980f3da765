"""Shared fixtures: an in-memory app plus small factories for scoring data."""

from datetime import datetime, timedelta, timezone

import pytest

from wkpoule import create_app, db
from wkpoule.models import (
    GroupStandingsPrediction,
    Match,
    Player,
    Poule,
    PouleMember,
    Prediction,
    TopscorerPrediction,
    User,
    WinnerPrediction,
)


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def fail_row_updates(app):
    """Make every UPDATE of one row fail inside the database itself."""

    def install(table, row_id):
        db.session.execute(
            db.text(
                f"CREATE TRIGGER fail_{table}_{row_id} BEFORE UPDATE ON {table} "
                f"WHEN NEW.id = {row_id} "
                "BEGIN SELECT RAISE(ABORT, 'disk I/O error'); END"
            )
        )
        db.session.commit()

    return install


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


class Factory:
    """Creates and commits rows with sensible defaults."""

    def __init__(self):
        self._counter = 0

    def _next(self):
        self._counter += 1
        return self._counter

    def user(self, username=None, display_name=None):
        n = self._next()
        user = User(username=username or f"user{n}", display_name=display_name)
        db.session.add(user)
        db.session.commit()
        return user

    def poule(self, name="Poule", scoring_rules=None, members=()):
        poule = Poule(name=name, scoring_rules=scoring_rules)
        db.session.add(poule)
        db.session.commit()
        for user in members:
            poule.add_member(user)
        db.session.commit()
        return poule

    def member(self, poule_id, user_id):
        return PouleMember.query.filter_by(poule_id=poule_id, user_id=user_id).one()

    def match(self, home_score=None, away_score=None, status="pending",
              home_team="Netherlands", away_team="Germany"):
        match = Match(
            home_team=home_team,
            away_team=away_team,
            kickoff_time=datetime.now(timezone.utc) - timedelta(hours=3),
            phase="group",
            home_score=home_score,
            away_score=away_score,
            status=status,
        )
        db.session.add(match)
        db.session.commit()
        return match

    def finished_match(self, home_score, away_score, **kwargs):
        return self.match(home_score, away_score, status="finished", **kwargs)

    def prediction(self, user, poule, match, home, away, points_earned=None):
        prediction = Prediction(
            user_id=user.id,
            poule_id=poule.id,
            match_id=match.id,
            predicted_home_score=home,
            predicted_away_score=away,
            points_earned=points_earned,
        )
        db.session.add(prediction)
        db.session.commit()
        return prediction

    def player(self, name, goals, country="Netherlands"):
        player = Player(name=name, goals=goals, country=country)
        db.session.add(player)
        db.session.commit()
        return player

    def topscorer_prediction(self, user, poule, player):
        prediction = TopscorerPrediction(
            user_id=user.id, poule_id=poule.id, player_id=player.id
        )
        db.session.add(prediction)
        db.session.commit()
        return prediction

    def group_prediction(self, user, poule, group_name, standings):
        prediction = GroupStandingsPrediction(
            user_id=user.id,
            poule_id=poule.id,
            group_name=group_name,
            predicted_standings=standings,
        )
        db.session.add(prediction)
        db.session.commit()
        return prediction

    def winner_prediction(self, user, poule, country):
        prediction = WinnerPrediction(user_id=user.id, poule_id=poule.id, country=country)
        db.session.add(prediction)
        db.session.commit()
        return prediction


@pytest.fixture
def factory(app):
    return Factory()
