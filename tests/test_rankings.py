"""
Tests for seeding rankings.
"""
import pytest
from bracket_engine.rankings import (
    calculate_rankings,
    ranked_team_ids,
    seed_average_and_tiebreaker,
    summarize_rankings,
)


def by_team(rankings):
    return {r.team_id: r for r in rankings}


class TestSeedAverage:
    """Tests for seed_average_and_tiebreaker."""

    def test_three_scores(self):
        """Top two are averaged; the third is the tiebreaker."""
        assert seed_average_and_tiebreaker([80, 100, 90]) == (95, 80)

    def test_two_scores(self):
        """Without a third score the tiebreaker is the sum."""
        assert seed_average_and_tiebreaker([100, 90]) == (95, 190)

    def test_one_score(self):
        assert seed_average_and_tiebreaker([70]) == (70, 70)

    def test_no_scores(self):
        assert seed_average_and_tiebreaker([]) == (None, None)

    def test_none_scores_ignored(self):
        assert seed_average_and_tiebreaker([None, 60, None]) == (60, 60)
        assert seed_average_and_tiebreaker([None]) == (None, None)

    def test_more_than_three_scores(self):
        """Only the third best counts as the tiebreaker."""
        assert seed_average_and_tiebreaker([10, 50, 40, 30]) == (45, 30)


class TestCalculateRankings:
    """Tests for calculate_rankings."""

    def test_two_score_team_against_three_score_team(self):
        """
        A (100, 90) and B (100, 90, 80) both average 95.

        A has no third score so its tiebreaker is the sum, 190. B's is its
        third score, 80. Higher tiebreaker ranks first.
        """
        rankings = by_team(calculate_rankings({'A': [100, 90], 'B': [100, 90, 80]}))
        assert rankings['A'].seed_average == 95
        assert rankings['B'].seed_average == 95
        assert rankings['A'].tiebreaker_value == 190
        assert rankings['B'].tiebreaker_value == 80
        assert rankings['A'].seed_rank == 1
        assert rankings['B'].seed_rank == 2

    def test_sorted_by_average(self):
        rankings = calculate_rankings({'low': [10, 20], 'high': [90, 95], 'mid': [50, 60]})
        assert [r.team_id for r in rankings] == ['high', 'mid', 'low']
        assert [r.seed_rank for r in rankings] == [1, 2, 3]

    def test_tiebreaker_decides_equal_averages(self):
        rankings = by_team(calculate_rankings({'x': [50, 50, 10], 'y': [50, 50, 40]}))
        assert rankings['y'].seed_rank == 1
        assert rankings['x'].seed_rank == 2

    def test_unranked_team(self):
        rankings = by_team(calculate_rankings({'scored': [10], 'none': []}))
        assert rankings['none'].seed_rank is None
        assert rankings['none'].seed_average is None
        assert rankings['none'].tiebreaker_value is None
        assert rankings['none'].raw_seed_score is None
        assert not rankings['none'].is_ranked

    def test_unranked_sort_last(self):
        rankings = calculate_rankings({'none': [], 'a': [1, 1], 'also_none': None})
        assert [r.team_id for r in rankings] == ['a', 'none', 'also_none']

    def test_raw_seed_score(self):
        """0.75 for rank share plus 0.25 for the share of the best average."""
        rankings = by_team(calculate_rankings({'A': [100, 90], 'B': [100, 90, 80], 'C': [50, 45]}))
        assert rankings['A'].raw_seed_score == pytest.approx(0.75 * 3 / 3 + 0.25 * 95 / 95)
        assert rankings['B'].raw_seed_score == pytest.approx(0.75 * 2 / 3 + 0.25 * 95 / 95)
        assert rankings['C'].raw_seed_score == pytest.approx(0.75 * 1 / 3 + 0.25 * 47.5 / 95)

    def test_raw_seed_score_with_zero_best_average(self):
        """A best average of zero falls back to dividing by 1."""
        rankings = by_team(calculate_rankings({'A': [0, 0], 'B': [0]}))
        assert rankings['A'].raw_seed_score == pytest.approx(0.75)
        assert rankings['B'].raw_seed_score == pytest.approx(0.375)

    def test_recalculation_replaces_everything(self):
        first = calculate_rankings({'A': [10, 10], 'B': [20, 20]})
        second = calculate_rankings({'A': [30, 30], 'B': [20, 20]})
        assert by_team(first)['A'].seed_rank == 2
        assert by_team(second)['A'].seed_rank == 1

    def test_no_teams(self):
        assert calculate_rankings({}) == []


class TestSummaries:
    """Tests for summarize_rankings and ranked_team_ids."""

    def test_counts_add_up(self):
        scores = {'a': [1, 2, 3], 'b': [], 'c': [5], 'd': [None], 'e': [4, 4]}
        rankings = calculate_rankings(scores)
        summary = summarize_rankings(rankings)
        assert summary == {'teams_ranked': 3, 'teams_unranked': 2}
        assert summary['teams_ranked'] + summary['teams_unranked'] == len(scores)

    def test_ranked_team_ids(self):
        rankings = calculate_rankings({'b': [1], 'a': [9, 9], 'z': []})
        assert ranked_team_ids(rankings) == ['a', 'b']

    def test_to_dict(self):
        ranking = calculate_rankings({'solo': [42]})[0]
        assert ranking.to_dict() == {
            'team_id': 'solo',
            'seed_average': 42,
            'seed_rank': 1,
            'tiebreaker_value': 42,
            'raw_seed_score': 1.0,
        }
