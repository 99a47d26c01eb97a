"""
Bracket entries: which team (or bye) occupies each seed position.
"""
import logging
from typing import Dict, Iterable, List, Optional

from .elimination import choose_bracket_size, first_round_pairs, validate_bracket_size
from .errors import InvalidEntryError
from .models import Entry

logger = logging.getLogger(__name__)


def generate_entries(team_ids: Iterable, bracket_size: Optional[int] = None) -> List[Entry]:
    """
    Place teams on seeds in the given order and fill the remaining seeds with byes.

    Args:
        team_ids: Team ids in seed order (best first)
        bracket_size: Supported bracket size, or None to pick the smallest that fits

    Returns:
        One Entry per seed position, 1..bracket_size
    """
    team_ids = list(team_ids)
    if len(team_ids) < 2:
        raise InvalidEntryError(f"At least 2 teams are needed to build a bracket, got {len(team_ids)}")
    if bracket_size is None:
        bracket_size = choose_bracket_size(len(team_ids))
    validate_bracket_size(bracket_size)
    if len(team_ids) > bracket_size:
        raise InvalidEntryError(f"{len(team_ids)} teams do not fit in a bracket of {bracket_size}")

    entries = [Entry(seed, team_id) for seed, team_id in enumerate(team_ids, start=1)]
    entries += [Entry(seed) for seed in range(len(team_ids) + 1, bracket_size + 1)]
    validate_entries(entries, bracket_size)

    logger.info(f"Generated {bracket_size} entries: {len(team_ids)} teams, {bracket_size - len(team_ids)} byes")
    return entries


def entries_from_rankings(rankings, bracket_size: Optional[int] = None) -> List[Entry]:
    """Generate entries from seeding rankings; unranked teams are left out."""
    ranked = sorted((r for r in rankings if r.seed_rank is not None), key=lambda r: r.seed_rank)
    if not ranked:
        raise InvalidEntryError("No ranked teams to seed the bracket with")
    return generate_entries([r.team_id for r in ranked], bracket_size)


def validate_entries(entries: Iterable[Entry], bracket_size: int) -> Dict[int, Entry]:
    """
    Check an entry set against the seeding invariants.

    Seed positions missing from the set are treated as byes.

    Returns:
        Dict of seed_position -> Entry covering every seed 1..bracket_size

    Raises:
        InvalidEntryError: seed out of range or duplicated, team duplicated,
            is_bye inconsistent with the team, or a first-round game between two byes
    """
    validate_bracket_size(bracket_size)
    by_seed = {}
    seen_teams = set()

    for entry in entries:
        seed = entry.seed_position
        if not isinstance(seed, int) or seed < 1 or seed > bracket_size:
            raise InvalidEntryError(f"Seed position {seed} is outside 1..{bracket_size}")
        if seed in by_seed:
            raise InvalidEntryError(f"Duplicate seed position {seed}")
        if entry.is_bye != (entry.team_id is None):
            if entry.is_bye:
                raise InvalidEntryError(f"Seed {seed} is a bye but has team {entry.team_id}")
            raise InvalidEntryError(f"Seed {seed} is not a bye but has no team")
        if entry.team_id is not None:
            if entry.team_id in seen_teams:
                raise InvalidEntryError(f"Team {entry.team_id} appears on more than one seed")
            seen_teams.add(entry.team_id)
        by_seed[seed] = entry

    for seed in range(1, bracket_size + 1):
        if seed not in by_seed:
            logger.debug(f"Seed {seed} has no entry, treating it as a bye")
            by_seed[seed] = Entry(seed)

    for seed1, seed2 in first_round_pairs(bracket_size):
        if by_seed[seed1].is_bye and by_seed[seed2].is_bye:
            raise InvalidEntryError(f"Seeds {seed1} and {seed2} are both byes in the same first-round game")

    return by_seed
