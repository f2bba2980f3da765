"""
Leaderboard ranking helpers
"""


def assign_competition_ranks(entries, points_key="points"):
    """
    Assign standard competition ranks ("1224" ranking).

    ``entries`` must already be sorted by points descending. Equal points share
    a rank and the next distinct value resumes at its 1-based position, so
    points 10, 10, 8, 7, 7, 5 rank as 1, 1, 3, 4, 4, 6.

    Returns:
        list of ranks, parallel to ``entries``
    """
    ranks = []
    previous_points = None
    current_rank = 0

    for position, entry in enumerate(entries, start=1):
        points = entry[points_key] if isinstance(entry, dict) else getattr(entry, points_key)
        if position == 1 or points != previous_points:
            current_rank = position
        ranks.append(current_rank)
        previous_points = points

    return ranks


def leaderboard_sort_key(entry):
    """Points first; exact scores, correct results and name only order a tie group"""
    return (
        -entry["points"],
        -entry.get("exact_scores", 0),
        -entry.get("correct_results", 0),
        (entry.get("display_name") or "").lower(),
    )


def rank_entries(entries):
    """Sort leaderboard dicts and set their ``rank`` in place"""
    entries.sort(key=leaderboard_sort_key)
    for entry, rank in zip(entries, assign_competition_ranks(entries)):
        entry["rank"] = rank
    return entries
