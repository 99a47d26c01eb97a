"""
Double elimination bracket template generation.

In double elimination:
- Teams must lose twice to be eliminated
- Winners Bracket: Teams that haven't lost yet
- Losers Bracket: Teams that have lost once
- Grand Final: Winners bracket champion vs Losers bracket champion
- Championship Reset: If losers bracket winner wins Grand Final, a final match decides the champion

The template is a pure function of the bracket size. Every game lists where
its two teams come from (a seed, or the winner/loser of an earlier game) and
where its winner and loser go next.
"""
import logging
import math
from typing import Dict, List, Tuple

from .elimination import (
    calculate_losers_bracket_rounds,
    first_round_pairs,
    get_losers_round_name,
    get_winners_round_name,
    validate_bracket_size,
)
from .errors import CycleDetectedError
from .models import FINALS, LOSERS, TEAM1, TEAM2, WINNERS, GameTemplate, SlotSource

logger = logging.getLogger(__name__)

SIDE_ORDER = {WINNERS: 0, LOSERS: 1, FINALS: 2}


def _node(code: str, side: str, side_round: int, index: int, round_name: str,
          team1: Tuple[str, object], team2: Tuple[str, object], **flags) -> Dict:
    return {
        'code': code,
        'side': side,
        'side_round': side_round,
        'index': index,
        'round_name': round_name,
        'team1': team1,
        'team2': team2,
        'is_grand_final': flags.get('is_grand_final', False),
        'is_reset_game': flags.get('is_reset_game', False),
    }


def _dropdown_index(winners_round: int, index: int, count: int) -> int:
    """
    Index of the winners game whose loser drops into losers game `index`.

    Even winners rounds drop in reverse order and odd rounds swap halves, so a
    dropped team lands away from the teams it met on its way down.
    """
    if count <= 1:
        return index
    if winners_round % 2 == 0:
        return count - 1 - index
    return (index + count // 2) % count


def _generate_winners_bracket(bracket_size: int, total_rounds: int) -> List[List[Dict]]:
    """Generate winners bracket rounds, seeded in standard bracket order."""
    rounds = []
    pairs = first_round_pairs(bracket_size)
    teams_in_round = bracket_size

    for round_num in range(1, total_rounds + 1):
        round_name = get_winners_round_name(teams_in_round)
        round_matches = []
        for i in range(teams_in_round // 2):
            if round_num == 1:
                seed1, seed2 = pairs[i]
                team1 = (SlotSource.SEED, seed1)
                team2 = (SlotSource.SEED, seed2)
            else:
                prev_round = rounds[-1]
                team1 = (SlotSource.WINNER, prev_round[i * 2]['code'])
                team2 = (SlotSource.WINNER, prev_round[i * 2 + 1]['code'])
            round_matches.append(_node(f"W{round_num}-M{i + 1}", WINNERS, round_num, i, round_name, team1, team2))
        rounds.append(round_matches)
        teams_in_round //= 2

    return rounds


def _generate_losers_bracket(winners_rounds: List[List[Dict]], total_losers_rounds: int) -> List[List[Dict]]:
    """
    Generate losers bracket rounds following standard double elimination format.

    - Round 1: losers of winners round 1 pair off
    - Drop-in rounds: losers bracket survivors (team1) meet the teams dropping
      from the next winners round (team2)
    - Consolidation rounds: losers bracket survivors pair off

    For 8-team bracket:
    - L Round 1: 4 W-QF losers pair off -> 2 matches
    - L Round 2 (drop-in): 2 W-SF losers + 2 L-R1 winners -> 2 matches
    - L Round 3 (consolidation): 2 L-R2 winners pair off -> 1 match
    - L Round 4 (drop-in): 1 W-F loser + 1 L-R3 winner -> 1 match (L champion)
    """
    rounds = []
    if total_losers_rounds <= 0:
        return rounds

    def add_round(builder):
        side_round = len(rounds) + 1
        round_name = get_losers_round_name(len(rounds), total_losers_rounds)
        rounds.append([
            _node(f"L{side_round}-M{i + 1}", LOSERS, side_round, i, round_name, team1, team2)
            for i, (team1, team2) in enumerate(builder)
        ])

    first_round = winners_rounds[0]
    add_round(
        ((SlotSource.LOSER, first_round[i * 2]['code']), (SlotSource.LOSER, first_round[i * 2 + 1]['code']))
        for i in range(len(first_round) // 2)
    )

    total_winners_rounds = len(winners_rounds)
    for winners_round in range(2, total_winners_rounds + 1):
        dropping = winners_rounds[winners_round - 1]
        survivors = rounds[-1]
        count = len(survivors)
        add_round(
            ((SlotSource.WINNER, survivors[i]['code']),
             (SlotSource.LOSER, dropping[_dropdown_index(winners_round, i, count)]['code']))
            for i in range(count)
        )

        if winners_round < total_winners_rounds:
            survivors = rounds[-1]
            add_round(
                ((SlotSource.WINNER, survivors[i * 2]['code']), (SlotSource.WINNER, survivors[i * 2 + 1]['code']))
                for i in range(len(survivors) // 2)
            )

    return rounds


def build_template(bracket_size: int) -> List[GameTemplate]:
    """
    Build the double elimination game graph for a bracket of bracket_size slots.

    Games are numbered topologically: first by dependency depth (round_number),
    then winners before losers before finals. Winners round 1 is always games
    1..bracket_size/2.

    Raises:
        UnsupportedSizeError: if bracket_size is not 4, 8, 16, 32 or 64
    """
    validate_bracket_size(bracket_size)
    total_winners_rounds = int(math.log2(bracket_size))
    total_losers_rounds = calculate_losers_bracket_rounds(bracket_size)

    winners_rounds = _generate_winners_bracket(bracket_size, total_winners_rounds)
    losers_rounds = _generate_losers_bracket(winners_rounds, total_losers_rounds)

    grand_final = _node(
        'GF', FINALS, 1, 0, 'Grand Final',
        (SlotSource.WINNER, winners_rounds[-1][0]['code']),
        (SlotSource.WINNER, losers_rounds[-1][0]['code']),
        is_grand_final=True,
    )
    # Only played when the losers bracket champion takes the grand final
    championship_reset = _node(
        'BR', FINALS, 2, 0, 'Championship Reset',
        (SlotSource.LOSER, 'GF'),
        (SlotSource.WINNER, 'GF'),
        is_reset_game=True,
    )

    nodes = [node for round_matches in winners_rounds for node in round_matches]
    nodes += [node for round_matches in losers_rounds for node in round_matches]
    nodes += [grand_final, championship_reset]

    depth = _calculate_depths(nodes)
    nodes.sort(key=lambda n: (depth[n['code']], SIDE_ORDER[n['side']], n['side_round'], n['index']))
    numbers = {node['code']: game_number for game_number, node in enumerate(nodes, start=1)}

    def to_source(team):
        kind, ref = team
        if kind == SlotSource.SEED:
            return SlotSource.seed(ref)
        return SlotSource(kind, numbers[ref])

    templates = [
        GameTemplate(
            bracket_size=bracket_size,
            game_number=numbers[node['code']],
            round_name=node['round_name'],
            round_number=depth[node['code']],
            side=node['side'],
            side_round=node['side_round'],
            team1_source=to_source(node['team1']),
            team2_source=to_source(node['team2']),
            is_grand_final=node['is_grand_final'],
            is_reset_game=node['is_reset_game'],
        )
        for node in nodes
    ]
    _link_advancement(templates)
    _check_topological_order(templates)

    logger.info(f"Built double elimination template for {bracket_size} slots: {len(templates)} games")
    return templates


def _calculate_depths(nodes: List[Dict]) -> Dict[str, int]:
    """Dependency depth of every node: seeds are 0, a game is one deeper than its deepest source."""
    depth = {}
    for node in nodes:
        source_depths = []
        for kind, ref in (node['team1'], node['team2']):
            if kind == SlotSource.SEED:
                source_depths.append(0)
            elif ref in depth:
                source_depths.append(depth[ref])
            else:
                raise CycleDetectedError(f"{node['code']} references {ref} before it is defined")
        depth[node['code']] = 1 + max(source_depths)
    return depth


def _link_advancement(templates: List[GameTemplate]) -> None:
    """Derive forward winner/loser edges from the team sources."""
    by_number = {t.game_number: t for t in templates}
    for template in templates:
        for slot, source in ((TEAM1, template.team1_source), (TEAM2, template.team2_source)):
            if source.is_seed:
                continue
            feeder = by_number[source.game_number]
            if source.kind == SlotSource.WINNER:
                feeder.winner_advances_to = template.game_number
                feeder.winner_slot = slot
            else:
                feeder.loser_advances_to = template.game_number
                feeder.loser_slot = slot


def _check_topological_order(templates: List[GameTemplate]) -> None:
    by_number = {t.game_number: t for t in templates}
    for template in templates:
        for source in template.sources():
            if source.is_seed:
                continue
            feeder = by_number.get(source.game_number)
            if feeder is None:
                raise CycleDetectedError(f"Game {template.game_number} references missing game {source.game_number}")
            if feeder.game_number >= template.game_number or feeder.round_number >= template.round_number:
                raise CycleDetectedError(
                    f"Game {template.game_number} references game {feeder.game_number}, which is not earlier"
                )


def templates_by_number(templates: List[GameTemplate]) -> Dict[int, GameTemplate]:
    return {t.game_number: t for t in templates}


def get_grand_final(templates):
    return next(t for t in templates if t.is_grand_final)


def get_reset_game(templates):
    return next(t for t in templates if t.is_reset_game)
