"""
Shared pytest fixtures for bracket engine tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os
import yaml

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket_engine.entries import generate_entries
from bracket_engine.instantiation import create_bracket


def game_by_number(games, game_number):
    return next(g for g in games if g.game_number == game_number)


def first_ready_winning_team1(games):
    """Play the lowest numbered ready game with team1 winning."""
    from bracket_engine.advancement import advance, playable_games
    game = playable_games(games)[0]
    return advance(games, game.game_number, game.team1_id)


@pytest.fixture
def four_teams():
    return ['Alpha', 'Bravo', 'Charlie', 'Delta']


@pytest.fixture
def eight_teams():
    return [f"Team {i}" for i in range(1, 9)]


@pytest.fixture
def four_team_bracket(four_teams):
    """Full 4-team bracket, no byes."""
    return create_bracket(generate_entries(four_teams, 4), 4)


@pytest.fixture
def eight_team_bracket(eight_teams):
    """Full 8-team bracket, no byes."""
    return create_bracket(generate_entries(eight_teams, 8), 8)


@pytest.fixture
def six_team_bracket():
    """8-team bracket with seeds 7 and 8 as byes."""
    return create_bracket(generate_entries([f"T{i}" for i in range(1, 7)], 8), 8)


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the store's data directory at a temporary folder."""
    import bracket_store

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(bracket_store, 'DATA_DIR', str(data_dir))
    return str(data_dir)


@pytest.fixture
def scores_file(tmp_path):
    """Seeding scores for six teams; Golf has no scores."""
    path = tmp_path / "scores.yaml"
    path.write_text(yaml.dump({
        'Alpha': [120, 110, 90],
        'Bravo': [100, 95],
        'Charlie': [130],
        'Delta': [80, 80, 80],
        'Echo': [60, 70],
        'Foxtrot': [40, None, 50],
        'Golf': [],
    }, default_flow_style=False))
    return str(path)
