"""
Bye resolution for double elimination brackets.

Resolution fills any team slot whose source is already decided, detects
implicit byes (a game where one side can never be filled), awards those games
to the team that is present, and moves pending games to ready once both teams
are known. It loops until a full pass changes nothing.

A side can never be filled when its source is:
- a seed entry that is a bye
- the winner of a void game (a game where neither side can be filled)
- the loser of a bye game (byes have no loser)
- the loser of the grand final, for the championship reset, when the winners
  bracket champion won the grand final
"""
import logging
from typing import Dict, List, Optional, Tuple

from .errors import CycleDetectedError
from .models import BYE, PENDING, READY, SLOTS, Game, SlotSource

logger = logging.getLogger(__name__)

# (resolved, team_id): resolved with team_id None means the slot stays empty for good
UNRESOLVED = (False, None)


class ByeResolutionResult:
    def __init__(self):
        self.bye_games_resolved = 0
        self.slots_filled = 0
        self.ready_games_updated = 0
        self.passes = 0

    @property
    def changed(self):
        return bool(self.bye_games_resolved or self.slots_filled or self.ready_games_updated)

    def __repr__(self):
        return (f"ByeResolutionResult(bye_games_resolved={self.bye_games_resolved}, "
                f"slots_filled={self.slots_filled}, ready_games_updated={self.ready_games_updated}, "
                f"passes={self.passes})")


def winners_bracket_won_grand_final(grand_final: Game) -> bool:
    """The winners bracket champion always enters the grand final in team1."""
    return grand_final.winner_id is not None and grand_final.winner_id == grand_final.team1_id


def resolve_source(game: Game, slot: str, games_by_number: Dict[int, Game]) -> Tuple[bool, Optional[object]]:
    """
    Resolve the source feeding one slot of a game.

    Returns:
        (False, None) while the source is undecided,
        (True, team_id) once decided, team_id None meaning the slot can never be filled
    """
    source = game.source_of(slot)
    if source is None:
        return UNRESOLVED

    if source.is_seed:
        # Seed slots are filled at instantiation; an empty one is a bye entry
        return (True, game.team_in(slot))

    feeder = games_by_number.get(source.game_number)
    if feeder is None:
        return (True, None)
    if not feeder.is_decided:
        return UNRESOLVED

    if source.kind == SlotSource.WINNER:
        return (True, feeder.winner_id)

    if feeder.status == BYE:
        return (True, None)
    if game.is_reset_game and feeder.is_grand_final and winners_bracket_won_grand_final(feeder):
        return (True, None)
    return (True, feeder.loser_id)


def _propagate_winner(game: Game, games_by_number: Dict[int, Game], result: ByeResolutionResult) -> bool:
    """Write a decided game's winner into its destination slot if that slot is still empty."""
    if game.winner_id is None or game.winner_advances_to is None:
        return False
    destination = games_by_number.get(game.winner_advances_to)
    if destination is None or destination.status not in (PENDING, READY):
        return False
    current = destination.team_in(game.winner_slot)
    if current is not None:
        if current != game.winner_id:
            logger.warning(
                f"Game {destination.game_number} {game.winner_slot} holds {current}, "
                f"expected winner {game.winner_id} of game {game.game_number}"
            )
        return False
    destination.set_team(game.winner_slot, game.winner_id)
    result.slots_filled += 1
    return True


def _mark_bye(game: Game, winner_id, games_by_number: Dict[int, Game], result: ByeResolutionResult) -> None:
    game.status = BYE
    game.winner_id = winner_id
    game.loser_id = None
    result.bye_games_resolved += 1
    _propagate_winner(game, games_by_number, result)


def _resolve_game(game: Game, games_by_number: Dict[int, Game], result: ByeResolutionResult) -> bool:
    """Run one resolution step on a single game. Returns True if anything changed."""
    if game.status == BYE:
        return _propagate_winner(game, games_by_number, result)
    if game.status not in (PENDING, READY):
        return False

    changed = False
    resolutions = {}
    for slot in SLOTS:
        resolved, team_id = resolve_source(game, slot, games_by_number)
        resolutions[slot] = (resolved, team_id)
        if resolved and team_id is not None and game.team_in(slot) is None:
            game.set_team(slot, team_id)
            result.slots_filled += 1
            changed = True

    present = {slot: game.team_in(slot) is not None for slot in SLOTS}
    impossible = {
        slot: resolutions[slot][0] and resolutions[slot][1] is None and not present[slot]
        for slot in SLOTS
    }
    team1_slot, team2_slot = SLOTS

    if present[team1_slot] and impossible[team2_slot]:
        _mark_bye(game, game.team1_id, games_by_number, result)
        return True
    if present[team2_slot] and impossible[team1_slot]:
        _mark_bye(game, game.team2_id, games_by_number, result)
        return True
    if impossible[team1_slot] and impossible[team2_slot]:
        # Void game: no winner, so whatever it feeds is impossible too
        _mark_bye(game, None, games_by_number, result)
        return True

    if game.status == PENDING and game.has_both_teams:
        game.status = READY
        result.ready_games_updated += 1
        return True

    return changed


def apply_bye_resolution(games: List[Game]) -> ByeResolutionResult:
    """
    Resolve byes in place until nothing changes.

    Games are visited in game number order, which is topological, so one pass
    normally settles everything and the second pass confirms it.

    Raises:
        CycleDetectedError: if the games have not settled after len(games) + 1 passes
    """
    result = ByeResolutionResult()
    games_by_number = {g.game_number: g for g in games}
    ordered = sorted(games, key=lambda g: g.game_number)
    max_passes = len(games) + 1

    while True:
        if result.passes >= max_passes:
            raise CycleDetectedError(f"Bye resolution did not settle after {max_passes} passes")
        result.passes += 1
        changes = 0
        for game in ordered:
            if _resolve_game(game, games_by_number, result):
                changes += 1
        if changes == 0:
            break

    logger.debug(f"Bye resolution finished: {result}")
    return result


def resolve_byes(games: List[Game]) -> List[Game]:
    """Return resolved copies of games; the input list is left untouched."""
    resolved = [g.copy() for g in games]
    apply_bye_resolution(resolved)
    return sorted(resolved, key=lambda g: g.game_number)
