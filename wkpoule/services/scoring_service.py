"""
WK Poule Scoring Service

Runs the four scoring passes (matches, topscorers, group standings and
tournament winner). Each pass reads the ground truth and predictions fresh,
writes changed ``points_earned`` values and then recomputes the standings of
every poule whose predictions changed.

Failure policy:
- nothing to score yet: informational ``{"message": ...}`` result
- a failing read: the pass aborts and the error propagates
- a failing row write: logged and skipped, only lowering ``updated``
"""

from sqlalchemy.exc import SQLAlchemyError

from wkpoule import db
from wkpoule.models import (
    ActualGroupStanding,
    GlobalSetting,
    GroupStandingsPrediction,
    Match,
    Player,
    Poule,
    Prediction,
    ScoringRun,
    TopscorerPrediction,
    WinnerPrediction,
)
from wkpoule.services.standings_service import StandingsService
from wkpoule.utils.cache_utils import invalidate_model_cache
from wkpoule.utils.logging_config import ContextualLogger
from wkpoule.utils.performance import timer
from wkpoule.utils.scoring import (
    TopscorerRanking,
    calculate_group_points,
    calculate_match_points,
    calculate_topscorer_points,
    calculate_winner_points,
)
from wkpoule.utils.scoring_rules import ScoringRules

logger = ContextualLogger(__name__)


class ScoringService:
    """Scores predictions against ground truth and refreshes poule standings"""

    def __init__(self, trigger="api", default_rules=None):
        self.trigger = trigger
        self.default_rules = default_rules
        self.standings = StandingsService()

    # ------------------------------------------------------------------
    # Public passes
    # ------------------------------------------------------------------

    def score_matches(self):
        return self._run("matches", self._score_matches)

    def score_topscorers(self):
        return self._run("topscorers", self._score_topscorers)

    def score_group_standings(self):
        return self._run("groups", self._score_group_standings)

    def score_winner(self):
        return self._run("winner", self._score_winner)

    def score_all(self):
        """Run every pass in order; a failing pass aborts the rest"""
        return {
            "success": True,
            "results": {
                "matches": self.score_matches(),
                "topscorers": self.score_topscorers(),
                "groups": self.score_group_standings(),
                "winner": self.score_winner(),
            },
        }

    # ------------------------------------------------------------------
    # Pass bodies
    # ------------------------------------------------------------------

    def _score_matches(self, log):
        finished_matches = Match.scoreable_query().all()
        log.info(f"Found {len(finished_matches)} finished matches")

        if not finished_matches:
            return {"message": "No finished matches to process", "updated": 0}

        scores = {m.id: (m.home_score, m.away_score) for m in finished_matches}
        predictions = db.session.execute(
            db.select(
                Prediction.id,
                Prediction.match_id,
                Prediction.poule_id,
                Prediction.predicted_home_score,
                Prediction.predicted_away_score,
                Prediction.points_earned,
            ).where(Prediction.match_id.in_(list(scores)))
        ).all()
        log.info(f"Found {len(predictions)} predictions to process")

        if not predictions:
            return {"message": "No predictions to score", "updated": 0}

        rules_by_poule = self._load_poule_rules()

        changes = []
        for prediction in predictions:
            actual_home, actual_away = scores[prediction.match_id]
            points = calculate_match_points(
                prediction.predicted_home_score,
                prediction.predicted_away_score,
                actual_home,
                actual_away,
                self._rules_for(rules_by_poule, prediction.poule_id),
            )
            if prediction.points_earned != points:
                changes.append((prediction.id, prediction.poule_id, points))

        log.info(f"Updating {len(changes)} predictions with new points")
        updated, failures, poule_ids = self._persist_points(Prediction, changes, log)
        standings = self.standings.recalculate_poules(poule_ids)

        return {
            "success": True,
            "message": "Points calculated successfully",
            "updated": updated,
            "matchesProcessed": len(finished_matches),
            "poulesProcessed": standings["poules_processed"],
            "_failures": failures + standings["write_failures"],
        }

    def _score_topscorers(self, log):
        players = Player.query.all()
        if not players:
            return {"message": "No players found"}

        ranking = TopscorerRanking(players)
        topscorer_names = [p.name for p in ranking.topscorers]
        log.info(
            f"Top scorer(s): {', '.join(topscorer_names)} with {ranking.max_goals} goals"
        )
        log.info(f"Top 3 includes {len(ranking.top3_ids)} players")

        predictions = db.session.execute(
            db.select(
                TopscorerPrediction.id,
                TopscorerPrediction.poule_id,
                TopscorerPrediction.player_id,
                TopscorerPrediction.points_earned,
            )
        ).all()
        if not predictions:
            return {"message": "No topscorer predictions found"}

        rules_by_poule = self._load_poule_rules()

        changes = []
        for prediction in predictions:
            points = calculate_topscorer_points(
                prediction.player_id,
                ranking,
                self._rules_for(rules_by_poule, prediction.poule_id),
            )
            if prediction.points_earned != points:
                changes.append((prediction.id, prediction.poule_id, points))

        updated, failures, poule_ids = self._persist_points(
            TopscorerPrediction, changes, log
        )
        standings = self.standings.recalculate_poules(poule_ids)

        return {
            "success": True,
            "message": f"Updated {updated} topscorer predictions",
            "updated": updated,
            "topScorers": topscorer_names,
            "maxGoals": ranking.max_goals,
            "_failures": failures + standings["write_failures"],
        }

    def _score_group_standings(self, log):
        actual_standings = {
            s.group_name: s.standings for s in ActualGroupStanding.query.all()
        }
        if not actual_standings:
            log.info("No actual group standings set yet")
            return {"message": "No actual group standings set yet"}

        group_names = sorted(actual_standings)
        log.info(f"Found actual standings for groups: {', '.join(group_names)}")

        predictions = db.session.execute(
            db.select(
                GroupStandingsPrediction.id,
                GroupStandingsPrediction.poule_id,
                GroupStandingsPrediction.group_name,
                GroupStandingsPrediction.predicted_standings,
                GroupStandingsPrediction.points_earned,
            ).where(GroupStandingsPrediction.group_name.in_(group_names))
        ).all()
        if not predictions:
            return {"message": "No group predictions found"}

        log.info(f"Found {len(predictions)} group predictions to process")
        rules_by_poule = self._load_poule_rules()

        changes = []
        for prediction in predictions:
            points = calculate_group_points(
                actual_standings[prediction.group_name],
                prediction.predicted_standings or [],
                self._rules_for(rules_by_poule, prediction.poule_id),
            )
            if prediction.points_earned != points:
                changes.append((prediction.id, prediction.poule_id, points))

        updated, failures, poule_ids = self._persist_points(
            GroupStandingsPrediction, changes, log
        )
        standings = self.standings.recalculate_poules(poule_ids)

        return {
            "success": True,
            "message": f"Updated {updated} group predictions",
            "updated": updated,
            "groupsProcessed": len(group_names),
            "_failures": failures + standings["write_failures"],
        }

    def _score_winner(self, log):
        winner, finalist = GlobalSetting.get_wk_results()
        if not winner and not finalist:
            log.info("No WK results set yet")
            return {"message": "No WK results set yet. Set the winner and finalist first."}
        if not winner:
            return {"message": "No WK winner set yet"}

        log.info(f"WK Winner: {winner}, Finalist: {finalist or 'not set'}")

        predictions = db.session.execute(
            db.select(
                WinnerPrediction.id,
                WinnerPrediction.poule_id,
                WinnerPrediction.country,
                WinnerPrediction.points_earned,
            )
        ).all()
        if not predictions:
            return {"message": "No winner predictions found"}

        rules_by_poule = self._load_poule_rules()

        changes = []
        for prediction in predictions:
            points = calculate_winner_points(
                prediction.country,
                winner,
                finalist,
                self._rules_for(rules_by_poule, prediction.poule_id),
            )
            if prediction.points_earned != points:
                changes.append((prediction.id, prediction.poule_id, points))

        updated, failures, poule_ids = self._persist_points(
            WinnerPrediction, changes, log
        )
        standings = self.standings.recalculate_poules(poule_ids)

        return {
            "success": True,
            "message": f"Updated {updated} winner predictions",
            "updated": updated,
            "winner": winner,
            "finalist": finalist,
            "_failures": failures + standings["write_failures"],
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @timer
    def _run(self, kind, body):
        """Run one pass with an audit row, logging and cache invalidation"""
        log = logger.bind(kind=kind, trigger=self.trigger)
        log.info(f"Starting {kind} points calculation")

        run = ScoringRun.start(kind, trigger=self.trigger)
        try:
            result = body(log)
        except Exception as e:
            db.session.rollback()
            log.error(f"Scoring pass failed: {e}", exc_info=True)
            run.finish("failed", error_message=str(e))
            raise

        failures = result.pop("_failures", 0)
        status = "success" if result.get("success") else "noop"
        run.finish(
            status,
            result=result,
            predictions_updated=result.get("updated", 0),
            write_failures=failures,
            poules_processed=result.get("poulesProcessed", 0),
        )

        if result.get("updated"):
            invalidate_model_cache("PouleMember")

        log.info(f"Finished {kind} points calculation: {result.get('message')}")
        return result

    def _load_poule_rules(self):
        """Effective scoring rules keyed by poule id"""
        defaults = self._defaults()
        return {
            poule.id: poule.get_scoring_rules(defaults) for poule in Poule.query.all()
        }

    def _defaults(self):
        if self.default_rules is None:
            self.default_rules = ScoringRules.global_defaults()
        return self.default_rules

    def _rules_for(self, rules_by_poule, poule_id):
        return rules_by_poule.get(poule_id) or self._defaults()

    def _persist_points(self, model, changes, log):
        """Write ``(row_id, poule_id, points)`` changes and commit

        Returns:
            tuple: (updated count, failure count, ids of poules with a change)
        """
        updated = 0
        failures = 0
        poule_ids = set()

        for row_id, poule_id, points in changes:
            try:
                self._write_points(model, row_id, points)
                updated += 1
                poule_ids.add(poule_id)
            except SQLAlchemyError as e:
                failures += 1
                log.error(f"Error updating {model.__tablename__} row {row_id}: {e}")

        db.session.commit()
        if changes:
            log.info(f"Successfully updated {updated}/{len(changes)} {model.__tablename__}")
        return updated, failures, poule_ids

    def _write_points(self, model, row_id, points):
        with db.session.begin_nested():
            db.session.execute(
                db.update(model)
                .where(model.id == row_id)
                .values(points_earned=points)
                .execution_options(synchronize_session=False)
            )
