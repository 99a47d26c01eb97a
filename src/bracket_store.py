"""
YAML persistence for bracket snapshots, seeding scores and settings.

The engine never touches files; this module loads a snapshot, hands the games
to an engine operation and writes the result back. Writes to one bracket are
serialized with a file lock next to the bracket file.
"""
import os
import logging
import tempfile
from typing import Callable, Dict, List, Optional

import yaml
from filelock import FileLock

from bracket_engine.models import Entry, Game

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('BRACKET_DATA_DIR', os.path.join(BASE_DIR, 'data'))
SETTINGS_FILE_NAME = 'settings.yaml'


def get_default_settings():
    """Return default settings."""
    return {
        'bracket_size': None,  # smallest supported size that fits the teams
        'lock_timeout_seconds': 10,
        'log_level': 'INFO',
    }


def settings_path(data_dir: Optional[str] = None) -> str:
    return os.path.join(data_dir or DATA_DIR, SETTINGS_FILE_NAME)


def load_settings(data_dir: Optional[str] = None) -> dict:
    """Load settings from YAML file, merging with defaults."""
    defaults = get_default_settings()
    path = settings_path(data_dir)
    if not os.path.exists(path):
        return defaults
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if not data:
        return defaults
    if not isinstance(data, dict):
        logger.warning(f'Ignoring malformed settings file {path}')
        return defaults
    # Merge with defaults to ensure all keys exist
    for key, value in defaults.items():
        if key not in data:
            data[key] = value
    return data


def save_settings(settings: dict, data_dir: Optional[str] = None):
    """Save settings to YAML file."""
    path = settings_path(data_dir)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(settings, f, default_flow_style=False)


def load_scores(path: str) -> Dict[object, List]:
    """
    Load seeding scores from a YAML mapping of team id -> list of scores.

    A single number is accepted in place of a one-item list.
    """
    if not os.path.exists(path):
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if not data:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f'{path} must map team ids to lists of scores')

    scores = {}
    for team_id, values in data.items():
        if values is None:
            scores[team_id] = []
        elif isinstance(values, (list, tuple)):
            scores[team_id] = list(values)
        else:
            scores[team_id] = [values]
    return scores


def bracket_to_dict(games: List[Game], entries: Optional[List[Entry]] = None,
                    bracket_size: Optional[int] = None) -> dict:
    if bracket_size is None and entries:
        bracket_size = len(entries)
    return {
        'bracket_size': bracket_size,
        'entries': [e.to_dict() for e in entries or []],
        'games': [g.to_dict() for g in sorted(games, key=lambda g: g.game_number)],
    }


def bracket_from_dict(data: dict) -> dict:
    """Return a dict with bracket_size, entries (Entry list) and games (Game list)."""
    data = data or {}
    return {
        'bracket_size': data.get('bracket_size'),
        'entries': [Entry.from_dict(e) for e in data.get('entries') or []],
        'games': [Game.from_dict(g) for g in data.get('games') or []],
    }


def load_bracket(path: str) -> dict:
    """Load a bracket snapshot from YAML file."""
    if not os.path.exists(path):
        raise FileNotFoundError(f'Bracket file not found: {path}')
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    return bracket_from_dict(data)


def save_bracket(path: str, games: List[Game], entries: Optional[List[Entry]] = None,
                 bracket_size: Optional[int] = None):
    """
    Save a bracket snapshot to YAML file.

    The snapshot is written to a temporary file in the same directory and
    moved into place, so readers never see a half-written bracket.
    """
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    data = bracket_to_dict(games, entries, bracket_size)

    fd, tmp_path = tempfile.mkstemp(prefix='.bracket-', suffix='.yaml', dir=directory)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        os.replace(tmp_path, path)
    except Exception:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def bracket_lock(path: str, timeout: Optional[float] = None) -> FileLock:
    if timeout is None:
        timeout = load_settings()['lock_timeout_seconds']
    return FileLock(f'{path}.lock', timeout=timeout)


def update_bracket(path: str, operation: Callable[[List[Game]], List[Game]],
                   timeout: Optional[float] = None) -> List[Game]:
    """
    Apply an engine operation to a stored bracket under its file lock.

    Args:
        path: Bracket YAML file
        operation: Callable taking the current games and returning the new games
        timeout: Seconds to wait for the lock (default from settings)

    Returns:
        The games as written

    Raises:
        filelock.Timeout: if the lock could not be acquired in time
        BracketError: from the operation; nothing is written in that case
    """
    with bracket_lock(path, timeout):
        snapshot = load_bracket(path)
        games = operation(snapshot['games'])
        save_bracket(path, games, snapshot['entries'], snapshot['bracket_size'])
    logger.info(f'Updated bracket {path}')
    return games
