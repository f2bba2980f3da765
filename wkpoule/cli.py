"""
WK Poule management commands

Registered on the Flask CLI (``flask score matches``) and wrapped by the
root ``manage.py`` script.
"""

import logging

import click
from flask.cli import with_appcontext
from flask_migrate import downgrade, init, migrate, upgrade
from sqlalchemy.exc import SQLAlchemyError

from wkpoule import db
from wkpoule.models import (
    ActualGroupStanding,
    GlobalSetting,
    Match,
    Player,
    Poule,
    PouleMember,
    Prediction,
    ScoringRun,
)
from wkpoule.models.global_setting import DEFAULT_SCORING_RULES_KEY
from wkpoule.services.scoring_service import ScoringService
from wkpoule.services.standings_service import StandingsService
from wkpoule.utils.ranking import rank_entries
from wkpoule.utils.scoring import calculate_match_points
from wkpoule.utils.scoring_rules import ScoringRules, parse_rule_assignments


def _echo_result(result):
    if result.get("success"):
        click.echo(f"✅ {result.get('message')} (updated: {result.get('updated', 0)})")
    else:
        click.echo(f"ℹ️  {result.get('message')}")


def _run_pass(pass_name):
    service = ScoringService(trigger="cli")
    try:
        result = getattr(service, pass_name)()
    except Exception as e:
        click.echo(f"❌ Scoring failed: {str(e)}")
        raise SystemExit(1)
    return result


# Scoring Commands
@click.group()
def score():
    """Scoring commands"""
    pass


@score.command("matches")
@with_appcontext
def score_matches():
    """Score match predictions of all finished matches"""
    result = _run_pass("score_matches")
    _echo_result(result)
    if result.get("success"):
        click.echo(
            f"   Matches processed: {result['matchesProcessed']}, "
            f"poules processed: {result['poulesProcessed']}"
        )


@score.command("topscorers")
@with_appcontext
def score_topscorers():
    """Score topscorer predictions"""
    result = _run_pass("score_topscorers")
    _echo_result(result)
    if result.get("success"):
        click.echo(
            f"   Top scorer(s): {', '.join(result['topScorers'])} "
            f"({result['maxGoals']} goals)"
        )


@score.command("groups")
@with_appcontext
def score_groups():
    """Score group standings predictions"""
    result = _run_pass("score_group_standings")
    _echo_result(result)
    if result.get("success"):
        click.echo(f"   Groups processed: {result['groupsProcessed']}")


@score.command("winner")
@with_appcontext
def score_winner():
    """Score tournament winner predictions"""
    result = _run_pass("score_winner")
    _echo_result(result)
    if result.get("success"):
        click.echo(f"   Winner: {result['winner']}, finalist: {result['finalist'] or '-'}")


@score.command("all")
@with_appcontext
def score_all():
    """Run every scoring pass"""
    result = _run_pass("score_all")
    for kind, kind_result in result["results"].items():
        click.echo(f"[{kind}]")
        _echo_result(kind_result)


@score.command("recalculate")
@click.option("--poule", "poule_id", type=int, help="Only this poule")
@with_appcontext
def score_recalculate(poule_id):
    """Recompute totals and ranks from stored points"""
    standings = StandingsService()
    if poule_id:
        summary = standings.recalculate_poules([poule_id])
    else:
        summary = standings.recalculate_all()
    click.echo(
        f"✅ Recalculated {summary['poules_processed']} poules, "
        f"{summary['members_updated']} members updated"
    )
    if summary["write_failures"]:
        click.echo(f"⚠️  {summary['write_failures']} member writes failed")


@score.command("verify")
@with_appcontext
def score_verify():
    """Report stored points that disagree with a fresh calculation (read-only)"""
    defaults = ScoringRules.global_defaults()
    rules_by_poule = {p.id: p.get_scoring_rules(defaults) for p in Poule.query.all()}

    stale_predictions = 0
    for match in Match.scoreable_query().all():
        for prediction in match.predictions.all():
            expected = calculate_match_points(
                prediction.predicted_home_score,
                prediction.predicted_away_score,
                match.home_score,
                match.away_score,
                rules_by_poule.get(prediction.poule_id, defaults),
            )
            if prediction.points_earned != expected:
                stale_predictions += 1
                click.echo(
                    f"   Prediction {prediction.id} (user {prediction.user_id}, "
                    f"match {match.id}): stored {prediction.points_earned}, "
                    f"expected {expected}"
                )

    stale_members = 0
    standings = StandingsService()
    for poule_id in rules_by_poule:
        entries = rank_entries(standings.build_entries(poule_id))
        for entry in entries:
            member = db.session.get(PouleMember, entry["member_id"])
            if member.points != entry["points"] or member.rank != entry["rank"]:
                stale_members += 1
                click.echo(
                    f"   Member {member.id} in poule {poule_id}: stored "
                    f"{member.points} pts / rank {member.rank}, expected "
                    f"{entry['points']} pts / rank {entry['rank']}"
                )

    if stale_predictions or stale_members:
        click.echo(
            f"⚠️  {stale_predictions} stale predictions, {stale_members} stale members"
        )
        raise SystemExit(1)
    click.echo("✅ All stored points and ranks are up to date")


@score.command("runs")
@click.option("--limit", default=10, help="Number of runs to show")
@with_appcontext
def score_runs(limit):
    """Show recent scoring runs"""
    runs = ScoringRun.get_recent(limit=limit)
    if not runs:
        click.echo("No scoring runs found.")
        return
    for run in runs:
        click.echo(
            f"  #{run.id} {run.kind:<10} {run.status:<8} via {run.trigger:<3} "
            f"updated={run.predictions_updated} failures={run.write_failures} "
            f"at {run.started_at:%Y-%m-%d %H:%M:%S}"
        )


# Ground Truth Commands
@click.group()
def results():
    """Ground truth commands"""
    pass


@results.command("set-score")
@click.argument("match_id", type=int)
@click.argument("home_score", type=click.IntRange(min=0))
@click.argument("away_score", type=click.IntRange(min=0))
@click.option("--finished", is_flag=True, help="Mark the match as finished")
@with_appcontext
def set_score(match_id, home_score, away_score, finished):
    """Record the score of a match"""
    match = db.session.get(Match, match_id)
    if not match:
        click.echo(f"❌ Match {match_id} not found!")
        raise SystemExit(1)

    try:
        match.update_score(home_score, away_score, is_finished=finished)
        db.session.commit()
        click.echo(
            f"✅ {match.home_team} {home_score} - {away_score} {match.away_team} "
            f"({match.status})"
        )
        if match.is_scoreable:
            click.echo("   Run 'score matches' to update points and standings")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error updating match: {str(e)}")
        logging.error(f"Match score update failed - SQL error: {e}")
        raise SystemExit(1)


@results.command("set-winner")
@click.argument("winner")
@click.option("--finalist", help="Runner-up of the final")
@with_appcontext
def set_winner(winner, finalist):
    """Record the tournament winner (and finalist)"""
    if finalist and finalist.strip().lower() == winner.strip().lower():
        click.echo("❌ Winner and finalist must differ")
        raise SystemExit(1)

    GlobalSetting.set_wk_results(winner.strip(), finalist.strip() if finalist else None)
    db.session.commit()
    click.echo(f"✅ Winner: {winner}, finalist: {finalist or '-'}")


@results.command("set-group")
@click.argument("group_name")
@click.argument("teams", nargs=-1, required=True)
@with_appcontext
def set_group(group_name, teams):
    """Record the final order of a group, first place first"""
    try:
        ActualGroupStanding.set_standings(group_name, list(teams))
    except ValueError as e:
        click.echo(f"❌ {str(e)}")
        raise SystemExit(1)
    db.session.commit()
    click.echo(f"✅ Group {group_name}: {', '.join(teams)}")


@results.command("set-goals")
@click.argument("player_id", type=int)
@click.argument("goals", type=click.IntRange(min=0))
@with_appcontext
def set_goals(player_id, goals):
    """Record the tournament goal count of a player"""
    player = db.session.get(Player, player_id)
    if not player:
        click.echo(f"❌ Player {player_id} not found!")
        raise SystemExit(1)
    player.goals = goals
    db.session.commit()
    click.echo(f"✅ {player.name}: {goals} goals")


# Scoring Rules Commands
@click.group()
def rules():
    """Scoring rules commands"""
    pass


@rules.command("show")
@click.option("--poule", "poule_id", type=int, help="Show the rules of one poule")
@with_appcontext
def show_rules(poule_id):
    """Show effective scoring rules"""
    if poule_id:
        poule = db.session.get(Poule, poule_id)
        if not poule:
            click.echo(f"❌ Poule {poule_id} not found!")
            raise SystemExit(1)
        effective = poule.get_scoring_rules()
        click.echo(f"Scoring rules for poule '{poule.name}':")
    else:
        effective = ScoringRules.global_defaults()
        click.echo("Default scoring rules:")

    for key, value in effective.to_dict().items():
        click.echo(f"  {key}: {value}")


@rules.command("set-default")
@click.argument("assignments", nargs=-1, required=True)
@with_appcontext
def set_default_rules(assignments):
    """Override default point values, e.g. wk_winner_correct=25"""
    try:
        overrides = parse_rule_assignments(assignments)
    except ValueError as e:
        click.echo(f"❌ {str(e)}")
        raise SystemExit(1)

    current = dict(GlobalSetting.get_value(DEFAULT_SCORING_RULES_KEY) or {})
    current.update(overrides)
    GlobalSetting.set_value(DEFAULT_SCORING_RULES_KEY, current)
    db.session.commit()
    click.echo(f"✅ Default scoring rules updated: {overrides}")


# Database Commands
@click.group("db-cmd")
def db_cmd():
    """Database management commands"""
    pass


@db_cmd.command("init")
@with_appcontext
def init_db():
    """Initialize database tables"""
    db.create_all()
    click.echo("✅ Database tables created")


@db_cmd.command("reset")
@click.confirmation_option(prompt="This drops every table. Continue?")
@with_appcontext
def reset_db():
    """Drop and recreate all tables"""
    db.drop_all()
    db.create_all()
    click.echo("✅ Database reset")


@click.group("db-migrate")
def db_migrate():
    """Schema migration commands"""
    pass


@db_migrate.command("init")
@with_appcontext
def init_migrations():
    """Initialize the migrations directory"""
    try:
        init()
        click.echo("✅ Migrations directory initialized")
    except Exception as e:
        click.echo(f"❌ Error initializing migrations: {str(e)}")


@db_migrate.command("create")
@click.option("--message", "-m", required=True, help="Migration message")
@with_appcontext
def create_migration(message):
    """Create a new migration"""
    try:
        migrate(message=message)
        click.echo(f"✅ Migration created: {message}")
    except Exception as e:
        click.echo(f"❌ Error creating migration: {str(e)}")


@db_migrate.command("apply")
@click.option("--revision", default="head", help="Revision to upgrade to")
@with_appcontext
def apply_migrations(revision):
    """Apply migrations to database"""
    try:
        upgrade(revision=revision)
        click.echo(f"✅ Migrations applied to {revision}")
    except Exception as e:
        click.echo(f"❌ Error applying migrations: {str(e)}")


@db_migrate.command("rollback")
@click.option("--revision", required=True, help="Revision to downgrade to")
@with_appcontext
def rollback_migration(revision):
    """Rollback migrations to specific revision"""
    try:
        downgrade(revision=revision)
        click.echo(f"✅ Rolled back to {revision}")
    except Exception as e:
        click.echo(f"❌ Error rolling back: {str(e)}")


@click.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("⚽ WK Poule Status")
    click.echo("=" * 40)

    try:
        db.session.execute(db.text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except Exception as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    finished = Match.scoreable_query().count()
    total = Match.query.count()
    click.echo(f"⚽ Matches: {finished}/{total} finished")

    unscored = (
        Prediction.query.join(Match)
        .filter(Match.status == "finished", Prediction.points_earned.is_(None))
        .count()
    )
    click.echo(f"📝 Unscored predictions on finished matches: {unscored}")
    click.echo(f"🏆 Poules: {Poule.query.count()}")

    winner, finalist = GlobalSetting.get_wk_results()
    click.echo(f"🥇 Winner: {winner or 'not set'} (finalist: {finalist or 'not set'})")
    click.echo(f"📋 Groups with final standings: {ActualGroupStanding.query.count()}")

    last_run = ScoringRun.get_recent(limit=1)
    if last_run:
        run = last_run[0]
        click.echo(f"🕒 Last scoring run: {run.kind} ({run.status})")


def register_commands(app):
    """Attach the management command groups to the Flask CLI"""
    for command in (score, results, rules, db_cmd, db_migrate, status):
        app.cli.add_command(command)
