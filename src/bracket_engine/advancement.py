"""
Recording results and moving teams through the bracket.

Every function here works on copies of the games it is given and returns the
updated copies, so a failed call leaves the caller's snapshot untouched.
"""
import logging
from collections import deque
from typing import Dict, List, Optional

from .byes import apply_bye_resolution
from .errors import (
    AlreadyCompletedError,
    GameNotFoundError,
    GameNotReadyError,
    InvalidWinnerError,
)
from .models import BYE, COMPLETED, PENDING, READY, Game

logger = logging.getLogger(__name__)


def _copy_games(games: List[Game]) -> Dict[int, Game]:
    return {g.game_number: g.copy() for g in games}


def _get_game(games_by_number: Dict[int, Game], game_number: int) -> Game:
    game = games_by_number.get(game_number)
    if game is None:
        raise GameNotFoundError(game_number)
    return game


def _sorted(games_by_number: Dict[int, Game]) -> List[Game]:
    return [games_by_number[n] for n in sorted(games_by_number)]


def _write_slot(games_by_number: Dict[int, Game], game_number: Optional[int], slot: Optional[str], team_id) -> None:
    if game_number is None:
        return
    destination = games_by_number.get(game_number)
    if destination is None:
        logger.warning(f"Advancement target game {game_number} does not exist")
        return
    current = destination.team_in(slot)
    if current is not None and current != team_id:
        logger.warning(f"Game {game_number} {slot} already holds {current}, replacing with {team_id}")
    destination.set_team(slot, team_id)
    if destination.status == PENDING and destination.has_both_teams:
        destination.status = READY


def _find_affected(games_by_number: Dict[int, Game], game_number: int) -> List[Dict]:
    """Breadth-first walk over winner and loser edges, starting below game_number."""
    affected = {}
    queue = deque([game_number])
    visited = {game_number}

    while queue:
        current = games_by_number[queue.popleft()]
        edges = ((current.winner_advances_to, current.winner_slot),
                 (current.loser_advances_to, current.loser_slot))
        for target, slot in edges:
            if target is None or target not in games_by_number:
                continue
            entry = affected.setdefault(target, {
                'game_number': target,
                'round_name': games_by_number[target].round_name,
                'affected_slots': [],
                'had_result': games_by_number[target].is_decided,
            })
            if slot not in entry['affected_slots']:
                entry['affected_slots'].append(slot)
            # An undecided game has not passed anything on yet
            if target not in visited and games_by_number[target].is_decided:
                visited.add(target)
                queue.append(target)

    return [affected[n] for n in sorted(affected)]


def find_affected_games(games: List[Game], game_number: int) -> List[Dict]:
    """
    List the downstream games whose participants depend on a game's result.

    Returns:
        One dict per affected game, ordered by game number, with keys
        game_number, round_name, affected_slots and had_result
    """
    games_by_number = {g.game_number: g for g in games}
    _get_game(games_by_number, game_number)
    return _find_affected(games_by_number, game_number)


def _clear_result(game: Game) -> None:
    game.winner_id = None
    game.loser_id = None
    game.team1_score = None
    game.team2_score = None


def _revert_in_place(games_by_number: Dict[int, Game], game_number: int) -> List[Dict]:
    game = games_by_number[game_number]
    affected = _find_affected(games_by_number, game_number)

    for info in affected:
        downstream = games_by_number[info['game_number']]
        for slot in info['affected_slots']:
            downstream.set_team(slot, None)
        _clear_result(downstream)
        downstream.status = PENDING

    _clear_result(game)
    game.status = READY if game.has_both_teams else PENDING
    apply_bye_resolution(list(games_by_number.values()))
    return affected


def revert(games: List[Game], game_number: int) -> List[Game]:
    """
    Undo a recorded result and everything that followed from it.

    The game goes back to ready, every downstream slot fed by it (directly or
    through later results) is emptied, and byes are resolved again.
    """
    games_by_number = _copy_games(games)
    game = _get_game(games_by_number, game_number)
    if game.status != COMPLETED:
        logger.info(f"Game {game_number} has no recorded result to revert (status: {game.status})")
        return _sorted(games_by_number)

    affected = _revert_in_place(games_by_number, game_number)
    logger.info(f"Reverted game {game_number}; cleared {len(affected)} downstream games")
    return _sorted(games_by_number)


def advance(games: List[Game], game_number: int, winner_id, loser_id=None,
            team1_score=None, team2_score=None, override: bool = False) -> List[Game]:
    """
    Record the result of a game and push both teams to their next games.

    Args:
        games: Current bracket snapshot
        game_number: Game to record
        winner_id: Winning team, must be one of the two participants
        loser_id: Losing team; defaults to the other participant
        team1_score: Optional score for team1
        team2_score: Optional score for team2
        override: Revert an existing result before recording this one

    Returns:
        Updated copies of all games, ordered by game number

    Raises:
        GameNotFoundError, AlreadyCompletedError, GameNotReadyError, InvalidWinnerError
    """
    games_by_number = _copy_games(games)
    game = _get_game(games_by_number, game_number)

    if game.status == BYE:
        raise AlreadyCompletedError(game_number, game.winner_id)
    if game.status == COMPLETED:
        if not override:
            raise AlreadyCompletedError(game_number, game.winner_id)
        logger.info(f"Overriding result of game {game_number} (was won by {game.winner_id})")
        _revert_in_place(games_by_number, game_number)

    if not game.has_both_teams:
        raise GameNotReadyError(game_number)
    if winner_id not in game.teams:
        raise InvalidWinnerError(
            f"Team {winner_id} is not playing in game {game_number} ({game.team1_id} vs {game.team2_id})"
        )
    expected_loser = game.team2_id if winner_id == game.team1_id else game.team1_id
    if loser_id is not None and loser_id != expected_loser:
        raise InvalidWinnerError(f"Loser of game {game_number} must be {expected_loser}, got {loser_id}")

    game.status = COMPLETED
    game.winner_id = winner_id
    game.loser_id = expected_loser
    game.team1_score = team1_score
    game.team2_score = team2_score

    _write_slot(games_by_number, game.winner_advances_to, game.winner_slot, winner_id)
    if game.is_grand_final:
        # The reset is only played when the losers bracket champion (team2) takes the grand final
        if winner_id == game.team2_id:
            _write_slot(games_by_number, game.loser_advances_to, game.loser_slot, expected_loser)
    else:
        _write_slot(games_by_number, game.loser_advances_to, game.loser_slot, expected_loser)

    result = apply_bye_resolution(list(games_by_number.values()))
    logger.info(
        f"Game {game_number} ({game.round_name}): {winner_id} beat {expected_loser}; "
        f"{result.bye_games_resolved} byes resolved downstream"
    )
    return _sorted(games_by_number)


def record_result(games: List[Game], game_number: int, winner_id, loser_id=None,
                  team1_score=None, team2_score=None) -> List[Game]:
    """Idempotent advance: replaying a result that is already recorded changes nothing."""
    games_by_number = _copy_games(games)
    game = _get_game(games_by_number, game_number)
    if game.status == COMPLETED and game.winner_id == winner_id:
        if loser_id is not None and loser_id != game.loser_id:
            raise InvalidWinnerError(f"Loser of game {game_number} is {game.loser_id}, got {loser_id}")
        logger.debug(f"Game {game_number} already won by {winner_id}, nothing to do")
        return _sorted(games_by_number)
    return advance(games, game_number, winner_id, loser_id, team1_score, team2_score)


def champion(games: List[Game]):
    """Winner of the bracket, or None while the finals are still open."""
    for game in games:
        if game.is_reset_game and game.is_decided:
            return game.winner_id
    return None


def playable_games(games: List[Game]) -> List[Game]:
    return sorted((g for g in games if g.status == READY), key=lambda g: g.game_number)
