import hmac
import logging
from functools import wraps

from flask import current_app, jsonify, request

from wkpoule import db, limiter
from wkpoule.models import Poule, ScoringRun
from wkpoule.routes.api import bp
from wkpoule.services.scoring_service import ScoringService
from wkpoule.utils.cache_utils import cached_query

logger = logging.getLogger(__name__)


def scoring_token_required(f):
    """Require X-Scoring-Token when SCORING_API_TOKEN is configured"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get("SCORING_API_TOKEN")
        if expected:
            provided = request.headers.get("X-Scoring-Token", "")
            if not hmac.compare_digest(provided.encode(), expected.encode()):
                logger.warning(
                    f"Rejected scoring call without valid token - Path: {request.path}"
                )
                return jsonify({"error": "Invalid or missing scoring token"}), 401
        return f(*args, **kwargs)

    return decorated_function


def scoring_rate_limit():
    return current_app.config.get("SCORING_RATE_LIMIT", "30 per minute")


def _run_pass(pass_name):
    """Run a ScoringService pass and turn a failure into a 500 response"""
    service = ScoringService(trigger="api")
    try:
        result = getattr(service, pass_name)()
    except Exception as e:
        logger.error(f"Error in {pass_name}: {e}", exc_info=True)
        return jsonify({"error": str(e) or "Unknown error"}), 500
    return jsonify(result)


@bp.route("/scoring/matches", methods=["POST"])
@limiter.limit(scoring_rate_limit)
@scoring_token_required
def score_matches():
    """Score match predictions and refresh the affected leaderboards"""
    return _run_pass("score_matches")


@bp.route("/scoring/topscorers", methods=["POST"])
@limiter.limit(scoring_rate_limit)
@scoring_token_required
def score_topscorers():
    """Score topscorer predictions"""
    return _run_pass("score_topscorers")


@bp.route("/scoring/groups", methods=["POST"])
@limiter.limit(scoring_rate_limit)
@scoring_token_required
def score_groups():
    """Score group standings predictions"""
    return _run_pass("score_group_standings")


@bp.route("/scoring/winner", methods=["POST"])
@limiter.limit(scoring_rate_limit)
@scoring_token_required
def score_winner():
    """Score tournament winner predictions"""
    return _run_pass("score_winner")


@bp.route("/scoring/all", methods=["POST"])
@limiter.limit(scoring_rate_limit)
@scoring_token_required
def score_all():
    """Run every scoring pass"""
    return _run_pass("score_all")


@bp.route("/scoring/runs")
@scoring_token_required
def scoring_runs():
    """Most recent scoring runs, newest first"""
    limit = request.args.get(
        "limit", current_app.config.get("SCORING_RUNS_LIMIT", 20), type=int
    )
    kind = request.args.get("kind")
    runs = ScoringRun.get_recent(limit=max(1, min(limit, 200)), kind=kind)
    return jsonify({"runs": [run.to_dict() for run in runs]})


@cached_query("PouleMember")
def get_leaderboard_data(poule_id):
    poule = db.session.get(Poule, poule_id)
    if poule is None:
        return None

    return {
        "poule": poule.to_dict(),
        "leaderboard": [member.to_dict() for member in poule.get_leaderboard()],
    }


@bp.route("/poules/<int:poule_id>/leaderboard")
def poule_leaderboard(poule_id):
    """Leaderboard of a poule as last written by the scoring engine"""
    data = get_leaderboard_data(poule_id)
    if data is None:
        return jsonify({"error": "Poule not found"}), 404
    return jsonify(data)


@bp.route("/poules/<int:poule_id>/scoring-rules")
def poule_scoring_rules(poule_id):
    """Effective point values of a poule"""
    poule = db.session.get(Poule, poule_id)
    if poule is None:
        return jsonify({"error": "Poule not found"}), 404
    return jsonify({"poule_id": poule.id, "scoring_rules": poule.get_scoring_rules().to_dict()})
