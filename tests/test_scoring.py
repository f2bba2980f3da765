"""
Tests for the pure point calculators in wkpoule.utils.scoring.

Validates:
1. Match points: exact score, correct result, miss
2. Topscorer points with ties at the top and inside the top three
3. Group points per position plus the all-correct bonus
4. Winner points, case-insensitive
"""

from types import SimpleNamespace

import pytest

from wkpoule.utils.scoring import (
    TopscorerRanking,
    calculate_group_points,
    calculate_match_points,
    calculate_topscorer_points,
    calculate_winner_points,
    count_correct_positions,
    get_match_result,
)
from wkpoule.utils.scoring_rules import ScoringRules


@pytest.fixture
def rules():
    return ScoringRules()


def player(player_id, name, goals):
    return SimpleNamespace(id=player_id, name=name, goals=goals)


class TestMatchResult:
    def test_home_win(self):
        assert get_match_result(2, 1) == "home"

    def test_away_win(self):
        assert get_match_result(0, 3) == "away"

    def test_draw(self):
        assert get_match_result(1, 1) == "draw"
        assert get_match_result(0, 0) == "draw"


class TestMatchPoints:
    """A finished 2-1 match against a handful of forecasts."""

    def test_exact_score(self, rules):
        assert calculate_match_points(2, 1, 2, 1, rules) == 5

    def test_correct_winner_wrong_score(self, rules):
        assert calculate_match_points(3, 0, 2, 1, rules) == 2

    def test_predicted_draw_on_home_win(self, rules):
        assert calculate_match_points(1, 1, 2, 1, rules) == 0

    def test_wrong_winner(self, rules):
        assert calculate_match_points(0, 2, 2, 1, rules) == 0

    def test_draw_with_other_score_is_correct_result(self, rules):
        assert calculate_match_points(0, 0, 2, 2, rules) == 2

    def test_exact_score_is_not_added_to_result(self, rules):
        """An exact score earns correct_score only, never both values."""
        assert calculate_match_points(1, 0, 1, 0, rules) == rules.correct_score

    def test_custom_rules(self):
        custom = ScoringRules(correct_score=10, correct_result=4)
        assert calculate_match_points(2, 1, 2, 1, custom) == 10
        assert calculate_match_points(1, 0, 2, 1, custom) == 4

    def test_result_is_always_one_of_three_values(self, rules):
        allowed = {0, rules.correct_result, rules.correct_score}
        for ph in range(4):
            for pa in range(4):
                assert calculate_match_points(ph, pa, 2, 1, rules) in allowed


class TestTopscorerRanking:
    def test_single_topscorer(self):
        ranking = TopscorerRanking(
            [player(1, "Mbappé", 8), player(2, "Haaland", 6), player(3, "Messi", 5)]
        )
        assert ranking.max_goals == 8
        assert ranking.topscorer_ids == {1}
        assert [p.name for p in ranking.topscorers] == ["Mbappé"]

    def test_tied_topscorers(self):
        ranking = TopscorerRanking(
            [player(1, "Mbappé", 8), player(2, "Haaland", 8), player(3, "Messi", 5)]
        )
        assert ranking.topscorer_ids == {1, 2}

    def test_top3_uses_distinct_goal_values(self):
        """Players sharing one of the three highest goal counts all count as top 3."""
        ranking = TopscorerRanking(
            [
                player(1, "A", 8),
                player(2, "B", 6),
                player(3, "C", 6),
                player(4, "D", 5),
                player(5, "E", 4),
            ]
        )
        assert ranking.top3_ids == {1, 2, 3, 4}

    def test_no_players(self):
        ranking = TopscorerRanking([])
        assert ranking.max_goals is None
        assert ranking.topscorers == []


class TestTopscorerPoints:
    """Mbappé 8, Haaland 6, Messi 5, Kane 3."""

    @pytest.fixture
    def ranking(self):
        return TopscorerRanking(
            [
                player(1, "Mbappé", 8),
                player(2, "Haaland", 6),
                player(3, "Messi", 5),
                player(4, "Kane", 3),
            ]
        )

    def test_exact_topscorer(self, ranking, rules):
        assert calculate_topscorer_points(1, ranking, rules) == 10

    def test_second_place_in_top3(self, ranking, rules):
        assert calculate_topscorer_points(2, ranking, rules) == 3

    def test_third_place_in_top3(self, ranking, rules):
        assert calculate_topscorer_points(3, ranking, rules) == 3

    def test_outside_top3(self, ranking, rules):
        assert calculate_topscorer_points(4, ranking, rules) == 0

    def test_unknown_player(self, ranking, rules):
        assert calculate_topscorer_points(99, ranking, rules) == 0

    def test_tie_at_top_counts_as_exact_for_both(self, rules):
        ranking = TopscorerRanking([player(1, "Mbappé", 8), player(2, "Haaland", 8)])
        assert calculate_topscorer_points(1, ranking, rules) == 10
        assert calculate_topscorer_points(2, ranking, rules) == 10


class TestGroupPoints:
    def test_two_swapped_teams(self, rules):
        """[A,B,C,D] against [A,C,B,D]: two positions right, no bonus."""
        points = calculate_group_points(
            ["A", "B", "C", "D"], ["A", "C", "B", "D"], rules
        )
        assert points == 2 * 3

    def test_all_four_correct_adds_bonus(self, rules):
        points = calculate_group_points(
            ["A", "B", "C", "D"], ["A", "B", "C", "D"], rules
        )
        assert points == 4 * 3 + 10

    def test_three_of_four_has_no_bonus(self, rules):
        points = calculate_group_points(
            ["A", "B", "C", "D"], ["A", "B", "C", "E"], rules
        )
        assert points == 3 * 3

    def test_case_insensitive(self, rules):
        points = calculate_group_points(
            ["Netherlands", "Senegal", "Ecuador", "Qatar"],
            ["netherlands", "SENEGAL", "ecuador", "qatar"],
            rules,
        )
        assert points == 4 * 3 + 10

    def test_short_prediction_only_scores_given_positions(self, rules):
        assert calculate_group_points(["A", "B", "C", "D"], ["A", "B"], rules) == 6

    def test_empty_prediction(self, rules):
        assert calculate_group_points(["A", "B", "C", "D"], [], rules) == 0

    def test_small_group_gets_no_bonus(self, rules):
        assert calculate_group_points(["A", "B", "C"], ["A", "B", "C"], rules) == 9

    def test_count_correct_positions_ignores_missing_entries(self):
        assert count_correct_positions(["A", "B"], [None, "b"]) == 1

    def test_non_string_entries_count_as_misses(self, rules):
        points = calculate_group_points(
            ["A", "B", "C", "D"], ["A", 2, "C", "D"], rules
        )
        assert points == 3 * 3

    def test_blank_entries_never_match(self):
        assert count_correct_positions(["", "B"], ["  ", "B"]) == 1


class TestWinnerPoints:
    def test_correct_winner(self, rules):
        assert calculate_winner_points("Argentina", "Argentina", "France", rules) == 15

    def test_finalist(self, rules):
        assert calculate_winner_points("France", "Argentina", "France", rules) == 5

    def test_case_and_whitespace_insensitive(self, rules):
        assert calculate_winner_points(" argentina ", "ARGENTINA", None, rules) == 15

    def test_other_country(self, rules):
        assert calculate_winner_points("Brazil", "Argentina", "France", rules) == 0

    def test_no_finalist_known(self, rules):
        assert calculate_winner_points("France", "Argentina", None, rules) == 0

    def test_no_winner_known(self, rules):
        assert calculate_winner_points("France", None, "France", rules) == 0

    def test_configured_winner_value(self):
        custom = ScoringRules(wk_winner_correct=25)
        assert calculate_winner_points("Spain", "Spain", None, custom) == 25
