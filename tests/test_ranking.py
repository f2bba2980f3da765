"""
Tests for leaderboard ranking.

Validates standard competition ranking (1, 1, 3, 4, 4, 6) and that the
tie-break fields only order members inside a tie group.
"""

from wkpoule.utils.ranking import assign_competition_ranks, rank_entries


def entry(name, points, exact_scores=0, correct_results=0):
    return {
        "display_name": name,
        "points": points,
        "exact_scores": exact_scores,
        "correct_results": correct_results,
    }


class TestCompetitionRanks:
    def test_reference_sequence(self):
        entries = [{"points": p} for p in (10, 10, 8, 7, 7, 5)]
        assert assign_competition_ranks(entries) == [1, 1, 3, 4, 4, 6]

    def test_all_equal(self):
        entries = [{"points": 0} for _ in range(4)]
        assert assign_competition_ranks(entries) == [1, 1, 1, 1]

    def test_all_distinct(self):
        entries = [{"points": p} for p in (9, 6, 3)]
        assert assign_competition_ranks(entries) == [1, 2, 3]

    def test_empty(self):
        assert assign_competition_ranks([]) == []

    def test_attribute_entries(self):
        class Row:
            def __init__(self, points):
                self.points = points

        assert assign_competition_ranks([Row(4), Row(4), Row(1)]) == [1, 1, 3]

    def test_ranks_are_one_based_positions(self):
        """Every rank equals the position of the first entry with that value."""
        points = [12, 12, 12, 9, 8, 8, 2]
        ranks = assign_competition_ranks([{"points": p} for p in points])
        for rank, value in zip(ranks, points):
            assert points.index(value) + 1 == rank


class TestRankEntries:
    def test_sorts_by_points(self):
        entries = rank_entries([entry("a", 3), entry("b", 9), entry("c", 5)])
        assert [e["display_name"] for e in entries] == ["b", "c", "a"]
        assert [e["rank"] for e in entries] == [1, 2, 3]

    def test_tie_breakers_do_not_split_ranks(self):
        """More exact scores lists first but shares the rank."""
        entries = rank_entries(
            [entry("anna", 10, exact_scores=1), entry("bert", 10, exact_scores=2)]
        )
        assert [e["display_name"] for e in entries] == ["bert", "anna"]
        assert [e["rank"] for e in entries] == [1, 1]

    def test_correct_results_then_name_order_a_tie(self):
        entries = rank_entries(
            [
                entry("Zoe", 7, exact_scores=1, correct_results=1),
                entry("adam", 7, exact_scores=1, correct_results=1),
                entry("Eva", 7, exact_scores=1, correct_results=3),
                entry("Bob", 2),
            ]
        )
        assert [e["display_name"] for e in entries] == ["Eva", "adam", "Zoe", "Bob"]
        assert [e["rank"] for e in entries] == [1, 1, 1, 4]

    def test_higher_points_never_rank_worse(self):
        entries = rank_entries(
            [entry(str(i), p) for i, p in enumerate((4, 10, 7, 10, 0, 7, 3))]
        )
        for better in entries:
            for worse in entries:
                if better["points"] > worse["points"]:
                    assert better["rank"] < worse["rank"]
                if better["points"] == worse["points"]:
                    assert better["rank"] == worse["rank"]
