"""
Turn a bracket template and a seeded entry list into concrete games.
"""
import logging
from typing import Iterable, List, Optional

from .byes import resolve_byes
from .double_elimination import build_template
from .entries import validate_entries
from .models import BYE, PENDING, READY, SLOTS, Entry, Game, GameTemplate

logger = logging.getLogger(__name__)


def instantiate(templates: List[GameTemplate], entries: Iterable[Entry]) -> List[Game]:
    """
    Create one game per template, filling seed slots from the entries.

    Only seed sources are resolved here. A first-round game against a bye is
    created as a bye won by the present team; nothing is propagated forward
    until resolve_byes runs.

    Raises:
        InvalidEntryError: if the entries break the seeding invariants
    """
    if not templates:
        return []
    bracket_size = templates[0].bracket_size
    entries_by_seed = validate_entries(entries, bracket_size)

    games = []
    for template in sorted(templates, key=lambda t: t.game_number):
        game = Game.from_template(template)
        bye_slots = []
        for slot in SLOTS:
            source = game.source_of(slot)
            if not source.is_seed:
                continue
            entry = entries_by_seed[source.value]
            if entry.is_bye:
                bye_slots.append(slot)
            else:
                game.set_team(slot, entry.team_id)

        if game.has_both_teams:
            game.status = READY
        elif bye_slots and (game.team1_id is not None or game.team2_id is not None):
            game.status = BYE
            game.winner_id = game.team1_id if game.team1_id is not None else game.team2_id
        else:
            game.status = PENDING
        games.append(game)

    ready = sum(1 for g in games if g.status == READY)
    byes = sum(1 for g in games if g.status == BYE)
    logger.info(f"Instantiated {len(games)} games for bracket of {bracket_size}: {ready} ready, {byes} byes")
    return games


def create_bracket(entries: Iterable[Entry], bracket_size: Optional[int] = None) -> List[Game]:
    """Build the template, instantiate it and run the first bye resolution pass."""
    entries = list(entries)
    if bracket_size is None:
        bracket_size = len(entries)
    templates = build_template(bracket_size)
    return resolve_byes(instantiate(templates, entries))
