"""Tests for the management commands."""

from wkpoule import db
from wkpoule.models import (
    ActualGroupStanding,
    GlobalSetting,
    Match,
    Prediction,
    User,
)
from wkpoule.models.global_setting import DEFAULT_SCORING_RULES_KEY


class TestScoreCommands:
    def test_score_matches_noop(self, runner):
        result = runner.invoke(args=["score", "matches"])
        assert result.exit_code == 0
        assert "No finished matches to process" in result.output

    def test_set_score_then_score(self, runner, factory):
        user = factory.user()
        poule = factory.poule(members=[user])
        match = factory.match()
        factory.prediction(user, poule, match, 1, 0)

        result = runner.invoke(
            args=["results", "set-score", str(match.id), "1", "0", "--finished"]
        )
        assert result.exit_code == 0
        assert db.session.get(Match, match.id).status == "finished"
        assert "Run 'score matches'" in result.output

        result = runner.invoke(args=["score", "matches"])
        assert result.exit_code == 0
        assert "Points calculated successfully" in result.output
        assert factory.member(poule.id, user.id).points == 5

    def test_set_score_of_live_match(self, runner, factory):
        match = factory.match()

        result = runner.invoke(args=["results", "set-score", str(match.id), "1", "1"])

        assert result.exit_code == 0
        assert "(live)" in result.output
        assert "score matches" not in result.output

    def test_set_score_unknown_match(self, runner):
        result = runner.invoke(args=["results", "set-score", "42", "1", "0"])
        assert result.exit_code == 1

    def test_score_all(self, runner):
        result = runner.invoke(args=["score", "all"])
        assert result.exit_code == 0
        assert "[winner]" in result.output

    def test_verify_detects_stale_points(self, runner, factory):
        user = factory.user()
        poule = factory.poule(members=[user])
        match = factory.finished_match(2, 0)
        prediction = factory.prediction(user, poule, match, 2, 0)
        runner.invoke(args=["score", "matches"])

        result = runner.invoke(args=["score", "verify"])
        assert result.exit_code == 0
        assert "up to date" in result.output

        db.session.get(Prediction, prediction.id).points_earned = 1
        db.session.commit()

        result = runner.invoke(args=["score", "verify"])
        assert result.exit_code == 1
        assert "stored 1, expected 5" in result.output

    def test_recalculate(self, runner, factory):
        factory.poule(members=[factory.user(), factory.user()])
        result = runner.invoke(args=["score", "recalculate"])
        assert result.exit_code == 0
        assert "Recalculated 1 poules, 2 members updated" in result.output

    def test_runs(self, runner):
        runner.invoke(args=["score", "winner"])
        result = runner.invoke(args=["score", "runs"])
        assert "winner" in result.output


class TestResultsCommands:
    def test_set_winner(self, runner):
        result = runner.invoke(args=["results", "set-winner", "Argentina", "--finalist", "France"])
        assert result.exit_code == 0
        assert GlobalSetting.get_wk_results() == ("Argentina", "France")

    def test_winner_and_finalist_must_differ(self, runner):
        result = runner.invoke(args=["results", "set-winner", "Spain", "--finalist", "spain"])
        assert result.exit_code == 1

    def test_set_group(self, runner):
        result = runner.invoke(args=["results", "set-group", "A", "NED", "SEN", "ECU", "QAT"])
        assert result.exit_code == 0
        standing = ActualGroupStanding.query.filter_by(group_name="A").one()
        assert standing.standings == ["NED", "SEN", "ECU", "QAT"]

    def test_set_group_rejects_duplicates(self, runner):
        result = runner.invoke(args=["results", "set-group", "A", "NED", "ned"])
        assert result.exit_code == 1

    def test_set_goals(self, runner, factory):
        player = factory.player("Gakpo", 2)
        result = runner.invoke(args=["results", "set-goals", str(player.id), "3"])
        assert result.exit_code == 0
        assert player.goals == 3


class TestRulesCommands:
    def test_set_default_and_show(self, runner):
        result = runner.invoke(args=["rules", "set-default", "correct_score=7"])
        assert result.exit_code == 0
        assert GlobalSetting.get_value(DEFAULT_SCORING_RULES_KEY) == {"correct_score": 7}

        result = runner.invoke(args=["rules", "show"])
        assert "correct_score: 7" in result.output
        assert "wk_winner_correct: 15" in result.output

    def test_set_default_merges_with_existing(self, runner):
        runner.invoke(args=["rules", "set-default", "correct_score=7"])
        runner.invoke(args=["rules", "set-default", "correct_result=3"])

        assert GlobalSetting.get_value(DEFAULT_SCORING_RULES_KEY) == {
            "correct_score": 7,
            "correct_result": 3,
        }

    def test_set_default_rejects_unknown_key(self, runner):
        result = runner.invoke(args=["rules", "set-default", "jackpot=100"])
        assert result.exit_code == 1

    def test_show_poule(self, runner, factory):
        poule = factory.poule(name="Kantoor", scoring_rules={"correct_result": 3})
        result = runner.invoke(args=["rules", "show", "--poule", str(poule.id)])
        assert "Kantoor" in result.output
        assert "correct_result: 3" in result.output


class TestStatus:
    def test_status(self, runner, factory):
        factory.finished_match(1, 1)
        result = runner.invoke(args=["status"])
        assert result.exit_code == 0
        assert "Database: Connected" in result.output
        assert "Matches: 1/1 finished" in result.output


class TestDatabaseCommands:
    def test_init(self, runner):
        result = runner.invoke(args=["db-cmd", "init"])
        assert result.exit_code == 0
        assert "Database tables created" in result.output

    def test_reset(self, runner, factory):
        factory.user()
        result = runner.invoke(args=["db-cmd", "reset", "--yes"])
        assert result.exit_code == 0
        assert User.query.count() == 0
