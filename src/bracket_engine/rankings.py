"""
Seeding rankings.

Algorithm: average of the top 2 of up to 3 seeding scores, with a tiebreaker.
- 2+ scores: average of the best two; tiebreaker is the 3rd best score if
  there is one, else the sum of the scores
- 1 score: average and tiebreaker are that score
- 0 scores: the team is unranked

Teams sort by average, then tiebreaker, both descending with missing values
last. The raw seed score weighs rank at 75% and the average relative to the
best average at 25%.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .models import SeedingRanking

logger = logging.getLogger(__name__)

RANK_WEIGHT = 0.75
SCORE_WEIGHT = 0.25


def seed_average_and_tiebreaker(scores: Iterable) -> Tuple[Optional[float], Optional[float]]:
    recorded = sorted((s for s in scores if s is not None), reverse=True)
    if len(recorded) >= 2:
        seed_average = (recorded[0] + recorded[1]) / 2
        tiebreaker = recorded[2] if len(recorded) >= 3 else sum(recorded)
        return seed_average, tiebreaker
    if len(recorded) == 1:
        return recorded[0], recorded[0]
    return None, None


def _sort_key(ranking: SeedingRanking):
    average = ranking.seed_average
    tiebreaker = ranking.tiebreaker_value
    return (
        average is None,
        -average if average is not None else 0,
        tiebreaker is None,
        -tiebreaker if tiebreaker is not None else 0,
    )


def calculate_rankings(team_scores: Dict[object, List]) -> List[SeedingRanking]:
    """
    Rank every team from its seeding scores.

    Args:
        team_scores: Dict of team_id -> list of scores (None entries are ignored)

    Returns:
        One SeedingRanking per team, ranked teams first in seed order, then
        unranked teams in input order
    """
    rankings = []
    for team_id, scores in team_scores.items():
        seed_average, tiebreaker = seed_average_and_tiebreaker(scores or [])
        rankings.append(SeedingRanking(team_id, seed_average=seed_average, tiebreaker_value=tiebreaker))

    rankings.sort(key=_sort_key)

    ranked = [r for r in rankings if r.seed_average is not None]
    n = len(ranked)
    max_average = (ranked[0].seed_average if ranked else None) or 1

    for rank, ranking in enumerate(ranked, start=1):
        ranking.seed_rank = rank
        rank_component = RANK_WEIGHT * ((n - rank + 1) / n)
        score_component = SCORE_WEIGHT * (ranking.seed_average / max_average)
        ranking.raw_seed_score = rank_component + score_component

    logger.info(f"Calculated seeding rankings: {n} ranked, {len(rankings) - n} unranked")
    return rankings


def summarize_rankings(rankings: List[SeedingRanking]) -> Dict[str, int]:
    ranked = sum(1 for r in rankings if r.is_ranked)
    return {'teams_ranked': ranked, 'teams_unranked': len(rankings) - ranked}


def ranked_team_ids(rankings: List[SeedingRanking]) -> List:
    """Team ids of ranked teams, best seed first."""
    return [r.team_id for r in sorted((r for r in rankings if r.is_ranked), key=lambda r: r.seed_rank)]
