"""
Tests for the command-line interface.
"""
import pytest

import bracket_store
from main import build_parser, find_team_id, main

from conftest import game_by_number


@pytest.fixture
def created_bracket(tmp_path, scores_file, temp_data_dir):
    path = str(tmp_path / "bracket.yaml")
    assert main(['create', scores_file, path]) == 0
    return path


class TestParser:
    """Tests for argument parsing."""

    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_advance_arguments(self):
        args = build_parser().parse_args(['advance', 'b.yaml', '3', 'Alpha', '--score1', '21', '--score2', '19'])
        assert args.game == 3
        assert args.winner == 'Alpha'
        assert (args.score1, args.score2) == (21, 19)
        assert args.override is False


class TestRank:
    """Tests for the rank command."""

    def test_prints_rankings(self, scores_file, temp_data_dir, capsys):
        assert main(['rank', scores_file]) == 0
        out = capsys.readouterr().out
        lines = out.splitlines()
        assert 'Charlie' in lines[0]
        assert 'Alpha' in lines[1]
        assert '6 ranked, 1 unranked' in out


class TestTemplate:
    """Tests for the template command."""

    def test_prints_all_games(self, temp_data_dir, capsys):
        assert main(['template', '4']) == 0
        out = capsys.readouterr().out
        assert len(out.strip().splitlines()) == 7
        assert 'Championship Reset' in out

    def test_unsupported_size(self, temp_data_dir, capsys):
        assert main(['template', '6']) == 1
        assert 'Unsupported bracket size' in capsys.readouterr().err


class TestCreate:
    """Tests for the create command."""

    def test_creates_bracket(self, created_bracket):
        snapshot = bracket_store.load_bracket(created_bracket)
        assert snapshot['bracket_size'] == 8
        assert len(snapshot['games']) == 15
        # Seed 1 is the best average, seeds 7 and 8 are byes
        assert snapshot['entries'][0].team_id == 'Charlie'
        assert snapshot['entries'][6].is_bye

    def test_explicit_size(self, tmp_path, scores_file, temp_data_dir):
        path = str(tmp_path / "big.yaml")
        assert main(['create', scores_file, path, '--size', '16']) == 0
        assert len(bracket_store.load_bracket(path)['games']) == 31

    def test_size_from_settings(self, tmp_path, scores_file, temp_data_dir):
        bracket_store.save_settings({'bracket_size': 16})
        path = str(tmp_path / "settings.yaml.out")
        assert main(['create', scores_file, path]) == 0
        assert bracket_store.load_bracket(path)['bracket_size'] == 16

    def test_too_small(self, tmp_path, scores_file, temp_data_dir, capsys):
        assert main(['create', scores_file, str(tmp_path / "x.yaml"), '--size', '4']) == 1
        assert 'do not fit' in capsys.readouterr().err


class TestAdvanceAndRevert:
    """Tests for the advance, revert and show commands."""

    def test_advance(self, created_bracket, capsys):
        # Game 2 is seed 4 (Delta) against seed 5 (Echo)
        assert main(['advance', created_bracket, '2', 'Delta', '--score1', '21', '--score2', '10']) == 0
        games = bracket_store.load_bracket(created_bracket)['games']
        game = game_by_number(games, 2)
        assert game.winner_id == 'Delta'
        assert game.team1_score == 21
        assert 'Recorded game 2' in capsys.readouterr().out

    def test_advance_twice_rejected(self, created_bracket, capsys):
        assert main(['advance', created_bracket, '2', 'Delta']) == 0
        assert main(['advance', created_bracket, '2', 'Echo']) == 1
        assert 'already has a result' in capsys.readouterr().err

    def test_override(self, created_bracket):
        assert main(['advance', created_bracket, '2', 'Delta']) == 0
        assert main(['advance', created_bracket, '2', 'Echo', '--override']) == 0
        games = bracket_store.load_bracket(created_bracket)['games']
        assert game_by_number(games, 2).winner_id == 'Echo'

    def test_invalid_winner(self, created_bracket, capsys):
        assert main(['advance', created_bracket, '2', 'Golf']) == 1
        assert 'not playing' in capsys.readouterr().err

    def test_revert(self, created_bracket):
        assert main(['advance', created_bracket, '2', 'Delta']) == 0
        assert main(['revert', created_bracket, '2']) == 0
        games = bracket_store.load_bracket(created_bracket)['games']
        assert game_by_number(games, 2).status == 'ready'

    def test_show(self, created_bracket, capsys):
        assert main(['show', created_bracket]) == 0
        out = capsys.readouterr().out
        assert 'Ready to play: 2, 4' in out

    def test_missing_bracket(self, tmp_path, temp_data_dir, capsys):
        assert main(['show', str(tmp_path / "missing.yaml")]) == 1
        assert 'not found' in capsys.readouterr().err


class TestFindTeamId:
    """Tests for find_team_id."""

    def test_matches_numeric_ids(self, four_team_bracket):
        games = [g.copy() for g in four_team_bracket]
        game = game_by_number(games, 1)
        game.team1_id, game.team2_id = 101, 104
        assert find_team_id(games, 1, '104') == 104

    def test_unknown_text_returned(self, four_team_bracket):
        assert find_team_id(four_team_bracket, 1, 'Nobody') == 'Nobody'
