"""
Scoring Engine for WK Poule

Pure point calculations for each prediction category. Reading ground truth
and persisting points happens in wkpoule.services.scoring_service, and
per-poule totals and ranks in wkpoule.services.standings_service.
"""

RESULT_HOME = "home"
RESULT_AWAY = "away"
RESULT_DRAW = "draw"


def get_match_result(home_score, away_score):
    """Three-way result label of a scoreline"""
    if home_score > away_score:
        return RESULT_HOME
    if away_score > home_score:
        return RESULT_AWAY
    return RESULT_DRAW


def calculate_match_points(predicted_home, predicted_away, actual_home, actual_away, rules):
    """
    Calculate points for a single match prediction.

    Returns:
        rules.correct_score for the exact scoreline
        rules.correct_result for the right winner (or a draw)
        0 otherwise
    """
    if predicted_home == actual_home and predicted_away == actual_away:
        return rules.correct_score

    if get_match_result(predicted_home, predicted_away) == get_match_result(
        actual_home, actual_away
    ):
        return rules.correct_result

    return 0


class TopscorerRanking:
    """Who leads the scoring charts

    Attributes:
        max_goals: highest goal count, None without players
        topscorer_ids: players tied at ``max_goals``
        top3_ids: players whose goal count is one of the three highest
            distinct goal values (may hold more than three players)
    """

    def __init__(self, players):
        self.players = sorted(players, key=lambda p: p.goals, reverse=True)

        if not self.players:
            self.max_goals = None
            self.topscorer_ids = set()
            self.top3_ids = set()
            return

        self.max_goals = self.players[0].goals
        self.topscorer_ids = {p.id for p in self.players if p.goals == self.max_goals}

        top_goal_values = sorted({p.goals for p in self.players}, reverse=True)[:3]
        self.top3_ids = {p.id for p in self.players if p.goals in top_goal_values}

    @property
    def topscorers(self):
        return [p for p in self.players if p.id in self.topscorer_ids]


def calculate_topscorer_points(player_id, ranking, rules):
    """Points for a topscorer pick; a tie at the top counts as exact for every tied player"""
    if player_id in ranking.topscorer_ids:
        return rules.topscorer_correct
    if player_id in ranking.top3_ids:
        return rules.topscorer_in_top3
    return 0


def _team_key(team):
    """Comparable form of a team entry; empty entries never match"""
    if team is None:
        return None
    key = str(team).strip().lower()
    return key or None


def count_correct_positions(actual, predicted):
    """Positions where the predicted team equals the official one, ignoring case

    Malformed entries (numbers, blanks) in a stored prediction count as misses.
    """
    correct = 0
    for actual_team, predicted_team in zip(actual, predicted):
        key = _team_key(predicted_team)
        if key is not None and key == _team_key(actual_team):
            correct += 1
    return correct


def calculate_group_points(actual, predicted, rules, min_group_size=4):
    """
    Calculate points for a group standings prediction.

    Every correct position earns ``group_position_correct`` on its own. When
    all positions of a group of at least ``min_group_size`` teams are right,
    ``group_all_correct`` is added on top.
    """
    correct = count_correct_positions(actual, predicted)
    points = correct * rules.group_position_correct

    if correct == len(actual) and correct >= min_group_size:
        points += rules.group_all_correct

    return points


def calculate_winner_points(predicted_country, winner, finalist, rules):
    """Points for a tournament winner pick (case-insensitive)"""
    predicted = (predicted_country or "").strip().lower()
    if not predicted or not winner:
        return 0

    if predicted == winner.strip().lower():
        return rules.wk_winner_correct

    if finalist and predicted == finalist.strip().lower():
        return rules.wk_winner_finalist

    return 0
