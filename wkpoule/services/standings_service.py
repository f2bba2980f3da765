"""
WK Poule Standings Service

Recomputes the leaderboard of a poule from the points already stored on its
prediction rows: per-category subtotals, total points and competition ranks
on every PouleMember.

Each recompute is one read-modify-write per poule. It first bumps the poule's
``scoring_generation``; member rows are only written when they carry an older
generation, so an overlapping older run can never overwrite newer totals.
"""

from sqlalchemy.exc import SQLAlchemyError

from wkpoule import db
from wkpoule.models import (
    GroupStandingsPrediction,
    Match,
    Poule,
    PouleMember,
    Prediction,
    TopscorerPrediction,
    User,
    WinnerPrediction,
)
from wkpoule.utils.logging_config import ContextualLogger
from wkpoule.utils.performance import PerformanceMonitor
from wkpoule.utils.ranking import rank_entries
from wkpoule.utils.scoring import get_match_result

logger = ContextualLogger(__name__)


class StandingsService:
    """Aggregates prediction points into poule member totals and ranks"""

    def recalculate_poules(self, poule_ids):
        """Recompute every poule in ``poule_ids``

        Returns:
            dict: poules_processed, members_updated, write_failures
        """
        summary = {"poules_processed": 0, "members_updated": 0, "write_failures": 0}

        for poule_id in sorted(set(poule_ids)):
            result = self.recalculate_poule(poule_id)
            if result is None:
                continue
            summary["poules_processed"] += 1
            summary["members_updated"] += result["members_updated"]
            summary["write_failures"] += result["write_failures"]

        return summary

    def recalculate_all(self):
        poule_ids = [row.id for row in db.session.execute(db.select(Poule.id)).all()]
        return self.recalculate_poules(poule_ids)

    def recalculate_poule(self, poule_id):
        """Recompute totals and ranks of one poule and commit them

        Read errors propagate. A failing member write is logged and skipped.
        """
        log = logger.bind(poule=poule_id)

        poule = db.session.get(Poule, poule_id)
        if poule is None:
            log.warning("Poule not found, skipping standings recompute")
            return None

        with PerformanceMonitor(f"standings recompute poule {poule_id}"):
            generation = poule.next_scoring_generation()
            entries = self.build_entries(poule_id)
            rank_entries(entries)

            members_updated = 0
            write_failures = 0
            for entry in entries:
                try:
                    if self._write_member(entry, generation):
                        members_updated += 1
                    else:
                        log.warning(
                            f"Member {entry['member_id']} already written by a newer "
                            f"run, keeping its standings (generation {generation})"
                        )
                except SQLAlchemyError as e:
                    write_failures += 1
                    log.error(f"Error updating member {entry['member_id']}: {e}")

            db.session.commit()

        log.info(
            f"Standings updated: {members_updated}/{len(entries)} members "
            f"(generation {generation})"
        )
        return {
            "poule_id": poule_id,
            "generation": generation,
            "members_updated": members_updated,
            "write_failures": write_failures,
        }

    def build_entries(self, poule_id):
        """Leaderboard dicts for every member of a poule, not yet ranked"""
        members = db.session.execute(
            db.select(
                PouleMember.id,
                PouleMember.user_id,
                User.display_name,
                User.username,
            )
            .join(User, PouleMember.user_id == User.id)
            .where(PouleMember.poule_id == poule_id)
        ).all()

        match_stats = self._match_stats(poule_id)
        topscorer = self._points_by_user(TopscorerPrediction, poule_id)
        groups = self._points_by_user(GroupStandingsPrediction, poule_id)
        winner = self._points_by_user(WinnerPrediction, poule_id)

        entries = []
        for member in members:
            stats = match_stats.get(member.user_id, {})
            entry = {
                "member_id": member.id,
                "user_id": member.user_id,
                "display_name": member.display_name or member.username,
                "match_points": stats.get("points", 0),
                "exact_scores": stats.get("exact_scores", 0),
                "correct_results": stats.get("correct_results", 0),
                "topscorer_points": topscorer.get(member.user_id, 0),
                "group_points": groups.get(member.user_id, 0),
                "winner_points": winner.get(member.user_id, 0),
            }
            entry["points"] = (
                entry["match_points"]
                + entry["topscorer_points"]
                + entry["group_points"]
                + entry["winner_points"]
            )
            entries.append(entry)

        return entries

    def _match_stats(self, poule_id):
        """Match points plus exact/correct-result counts per user"""
        rows = db.session.execute(
            db.select(
                Prediction.user_id,
                Prediction.points_earned,
                Prediction.predicted_home_score,
                Prediction.predicted_away_score,
                Match.home_score,
                Match.away_score,
            )
            .join(Match, Prediction.match_id == Match.id)
            .where(
                Prediction.poule_id == poule_id,
                Prediction.points_earned.isnot(None),
            )
        ).all()

        stats = {}
        for row in rows:
            user_stats = stats.setdefault(
                row.user_id, {"points": 0, "exact_scores": 0, "correct_results": 0}
            )
            user_stats["points"] += row.points_earned or 0

            if row.home_score is None or row.away_score is None:
                continue
            if (
                row.predicted_home_score == row.home_score
                and row.predicted_away_score == row.away_score
            ):
                user_stats["exact_scores"] += 1
            elif get_match_result(
                row.predicted_home_score, row.predicted_away_score
            ) == get_match_result(row.home_score, row.away_score):
                user_stats["correct_results"] += 1

        return stats

    def _points_by_user(self, model, poule_id):
        rows = db.session.execute(
            db.select(model.user_id, db.func.sum(model.points_earned))
            .where(model.poule_id == poule_id, model.points_earned.isnot(None))
            .group_by(model.user_id)
        ).all()
        return {user_id: int(total or 0) for user_id, total in rows}

    def _write_member(self, entry, generation):
        """Write one member's standings inside a savepoint

        Returns False when a newer generation already owns the row.
        """
        with db.session.begin_nested():
            result = db.session.execute(
                db.update(PouleMember)
                .where(
                    PouleMember.id == entry["member_id"],
                    PouleMember.scoring_generation < generation,
                )
                .values(
                    points=entry["points"],
                    rank=entry["rank"],
                    match_points=entry["match_points"],
                    topscorer_points=entry["topscorer_points"],
                    group_points=entry["group_points"],
                    winner_points=entry["winner_points"],
                    exact_scores=entry["exact_scores"],
                    correct_results=entry["correct_results"],
                    scoring_generation=generation,
                )
                .execution_options(synchronize_session=False)
            )
        return result.rowcount > 0
