"""
Exceptions raised by the bracket engine.

Every error is raised before any game is touched, so a caller that catches one
can discard the operation without rolling anything back.
"""


class BracketError(Exception):
    """Base class for all bracket engine errors."""


class UnsupportedSizeError(BracketError, ValueError):
    """Bracket size is not one of the supported powers of two."""

    def __init__(self, bracket_size, supported=None):
        self.bracket_size = bracket_size
        self.supported = supported
        if supported:
            message = f"Unsupported bracket size: {bracket_size} (supported: {', '.join(str(s) for s in supported)})"
        else:
            message = f"Unsupported bracket size: {bracket_size}"
        super().__init__(message)


class InvalidEntryError(BracketError, ValueError):
    """Entry set violates seeding invariants."""


class GameNotFoundError(BracketError, LookupError):
    """No game with the requested game number."""

    def __init__(self, game_number):
        self.game_number = game_number
        super().__init__(f"Game {game_number} not found")


class InvalidWinnerError(BracketError, ValueError):
    """Winner (or loser) is not a participant of the game."""


class GameNotReadyError(BracketError):
    """Game does not have both participants yet."""

    def __init__(self, game_number):
        self.game_number = game_number
        super().__init__(f"Game {game_number} is not ready to be played")


class AlreadyCompletedError(BracketError):
    """Game already has a result."""

    def __init__(self, game_number, winner_id=None):
        self.game_number = game_number
        self.winner_id = winner_id
        super().__init__(f"Game {game_number} already has a result (winner: {winner_id})")


class CycleDetectedError(BracketError):
    """Game graph is not acyclic; indicates a template construction bug."""
