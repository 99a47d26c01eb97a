# Command-line entry point for the double elimination bracket engine

import argparse
import logging
import sys

from filelock import Timeout

import bracket_store
from bracket_engine.advancement import advance, champion, playable_games, revert
from bracket_engine.double_elimination import build_template
from bracket_engine.entries import entries_from_rankings
from bracket_engine.errors import BracketError
from bracket_engine.instantiation import create_bracket
from bracket_engine.rankings import calculate_rankings, summarize_rankings

logger = logging.getLogger(__name__)


def _format_source(source):
    if source is None:
        return '-'
    if source.is_seed:
        return f"Seed {source.value}"
    return f"{source.kind.capitalize()} of {source.game_number}"


def _format_team(team_id):
    return '-' if team_id is None else str(team_id)


def find_team_id(games, game_number, text):
    """Map a team id typed on the command line to the id stored in the game."""
    for game in games:
        if game.game_number == game_number:
            for team_id in game.teams:
                if team_id is not None and str(team_id) == str(text):
                    return team_id
    return text


def cmd_rank(args):
    rankings = calculate_rankings(bracket_store.load_scores(args.scores))
    for r in rankings:
        rank = r.seed_rank if r.seed_rank is not None else '-'
        average = f"{r.seed_average:g}" if r.seed_average is not None else '-'
        tiebreaker = f"{r.tiebreaker_value:g}" if r.tiebreaker_value is not None else '-'
        raw = f"{r.raw_seed_score:.4f}" if r.raw_seed_score is not None else '-'
        print(f"{rank:>3}  {r.team_id}  avg={average}  tb={tiebreaker}  score={raw}")
    summary = summarize_rankings(rankings)
    print(f"\n{summary['teams_ranked']} ranked, {summary['teams_unranked']} unranked")
    return 0


def cmd_template(args):
    for t in build_template(args.size):
        line = (f"{t.game_number:>3}  {t.round_name:<22} {_format_source(t.team1_source):<14} "
                f"vs {_format_source(t.team2_source):<14}")
        if t.winner_advances_to is not None:
            line += f"  W->{t.winner_advances_to}:{t.winner_slot}"
        if t.loser_advances_to is not None:
            line += f"  L->{t.loser_advances_to}:{t.loser_slot}"
        print(line)
    return 0


def cmd_create(args):
    settings = bracket_store.load_settings()
    bracket_size = args.size or settings.get('bracket_size')
    rankings = calculate_rankings(bracket_store.load_scores(args.scores))
    entries = entries_from_rankings(rankings, bracket_size)
    games = create_bracket(entries, len(entries))
    bracket_store.save_bracket(args.output, games, entries, len(entries))
    print(f"Created bracket of {len(entries)} with {len(games)} games: {args.output}")
    return 0


def cmd_advance(args):
    def operation(games):
        winner_id = find_team_id(games, args.game, args.winner)
        loser_id = find_team_id(games, args.game, args.loser) if args.loser is not None else None
        return advance(games, args.game, winner_id, loser_id,
                       team1_score=args.score1, team2_score=args.score2,
                       override=args.override)

    games = bracket_store.update_bracket(args.bracket, operation)
    print(f"Recorded game {args.game}: winner {args.winner}")
    winner = champion(games)
    if winner is not None:
        print(f"Champion: {winner}")
    return 0


def cmd_revert(args):
    bracket_store.update_bracket(args.bracket, lambda games: revert(games, args.game))
    print(f"Reverted game {args.game}")
    return 0


def cmd_show(args):
    games = bracket_store.load_bracket(args.bracket)['games']
    for g in games:
        line = (f"{g.game_number:>3}  {g.round_name or '':<22} {_format_team(g.team1_id):>10} vs "
                f"{_format_team(g.team2_id):<10} [{g.status}]")
        if g.winner_id is not None:
            line += f" winner: {g.winner_id}"
        if g.team1_score is not None or g.team2_score is not None:
            line += f" ({_format_team(g.team1_score)}-{_format_team(g.team2_score)})"
        print(line)

    ready = playable_games(games)
    if ready:
        print(f"\nReady to play: {', '.join(str(g.game_number) for g in ready)}")
    winner = champion(games)
    if winner is not None:
        print(f"Champion: {winner}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        description='Double elimination bracket engine'
    )
    parser.add_argument(
        '--log-level',
        help='Logging level (default: from settings.yaml, else INFO)'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    rank = subparsers.add_parser('rank', help='Rank teams from seeding scores')
    rank.add_argument('scores', help='YAML file mapping team id to a list of scores')
    rank.set_defaults(func=cmd_rank)

    template = subparsers.add_parser('template', help='Print the game graph for a bracket size')
    template.add_argument('size', type=int, help='Bracket size (4, 8, 16, 32 or 64)')
    template.set_defaults(func=cmd_template)

    create = subparsers.add_parser('create', help='Create a bracket from seeding scores')
    create.add_argument('scores', help='YAML file mapping team id to a list of scores')
    create.add_argument('output', help='Bracket YAML file to write')
    create.add_argument('--size', type=int, help='Bracket size (default: smallest that fits)')
    create.set_defaults(func=cmd_create)

    advance_parser = subparsers.add_parser('advance', help='Record the result of a game')
    advance_parser.add_argument('bracket', help='Bracket YAML file')
    advance_parser.add_argument('game', type=int, help='Game number')
    advance_parser.add_argument('winner', help='Winning team id')
    advance_parser.add_argument('--loser', help='Losing team id (default: the other team)')
    advance_parser.add_argument('--score1', type=int, help='Team 1 score')
    advance_parser.add_argument('--score2', type=int, help='Team 2 score')
    advance_parser.add_argument('--override', action='store_true',
                                help='Replace an existing result and clear everything after it')
    advance_parser.set_defaults(func=cmd_advance)

    revert_parser = subparsers.add_parser('revert', help='Undo the result of a game')
    revert_parser.add_argument('bracket', help='Bracket YAML file')
    revert_parser.add_argument('game', type=int, help='Game number')
    revert_parser.set_defaults(func=cmd_revert)

    show = subparsers.add_parser('show', help='Print the games of a bracket')
    show.add_argument('bracket', help='Bracket YAML file')
    show.set_defaults(func=cmd_show)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    log_level = args.log_level or bracket_store.load_settings().get('log_level') or 'INFO'
    logging.basicConfig(level=str(log_level).upper(), format='%(levelname)s %(name)s: %(message)s', force=True)

    try:
        return args.func(args)
    except (BracketError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Timeout:
        print("Error: bracket is locked by another update, try again", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
