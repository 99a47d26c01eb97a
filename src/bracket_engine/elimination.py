"""
Bracket sizing and standard seeding order.
"""
import math
from typing import List, Tuple

from .errors import UnsupportedSizeError

SUPPORTED_BRACKET_SIZES = (4, 8, 16, 32, 64)


def is_power_of_two(value: int) -> bool:
    return isinstance(value, int) and value > 0 and (value & (value - 1)) == 0


def validate_bracket_size(bracket_size: int) -> int:
    """Return bracket_size if supported, raise UnsupportedSizeError otherwise."""
    if bracket_size not in SUPPORTED_BRACKET_SIZES or isinstance(bracket_size, bool):
        raise UnsupportedSizeError(bracket_size, SUPPORTED_BRACKET_SIZES)
    return bracket_size


def calculate_bracket_size(num_teams: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_teams <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_teams))


def calculate_byes(num_teams: int) -> int:
    """Calculate number of byes needed."""
    bracket_size = calculate_bracket_size(num_teams)
    return bracket_size - num_teams


def choose_bracket_size(num_teams: int) -> int:
    """Smallest supported bracket size that fits num_teams."""
    for size in SUPPORTED_BRACKET_SIZES:
        if num_teams <= size:
            return size
    raise UnsupportedSizeError(calculate_bracket_size(num_teams), SUPPORTED_BRACKET_SIZES)


def generate_seed_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order.
    This ensures that if all higher seeds win, they meet in the proper rounds.

    For 8 teams: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Winners: 1v4 side, 2v3 side
    Final: 1v2 (if chalk)
    """
    if not is_power_of_two(bracket_size) or bracket_size < 2:
        raise UnsupportedSizeError(bracket_size)
    if bracket_size == 2:
        return [1, 2]

    result = []
    for seed in generate_seed_order(bracket_size // 2):
        result.extend([seed, bracket_size + 1 - seed])

    return result


def first_round_pairs(bracket_size: int) -> List[Tuple[int, int]]:
    """Seed pairs for the first round, in bracket order: (order[2i], order[2i+1])."""
    order = generate_seed_order(bracket_size)
    return [(order[i], order[i + 1]) for i in range(0, len(order), 2)]


def get_winners_round_name(teams_in_round: int) -> str:
    """Get the name for a winners bracket round."""
    if teams_in_round == 2:
        return "Winners Final"
    elif teams_in_round == 4:
        return "Winners Semifinal"
    elif teams_in_round == 8:
        return "Winners Quarterfinal"
    else:
        return f"Winners Round of {teams_in_round}"


def get_losers_round_name(round_num: int, total_losers_rounds: int) -> str:
    """Get the name for a losers bracket round (0-indexed)."""
    rounds_from_end = total_losers_rounds - round_num - 1
    if rounds_from_end == 0:
        return "Losers Final"
    elif rounds_from_end == 1:
        return "Losers Semifinal"
    else:
        return f"Losers Round {round_num + 1}"


def calculate_losers_bracket_rounds(bracket_size: int) -> int:
    """
    Calculate number of rounds in losers bracket.
    For N teams in winners bracket (power of 2):
    - Winners bracket has log2(N) rounds
    - Losers bracket has 2 * (log2(N) - 1) rounds

    Pattern: one opening round of winners round 1 losers, then alternating
    drop-in and consolidation rounds, ending with a drop-in round.
    """
    if bracket_size < 2:
        return 0
    winners_rounds = int(math.log2(bracket_size))
    return 2 * (winners_rounds - 1)
