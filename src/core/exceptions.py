"""
Custom exceptions raised by the domain, persistence and service layers.

Every error derives from `GameError`, so a caller can catch a single type at a layer boundary.
Illegal move attempts are routine (they come straight from user input): the engine raises them
as ordinary exceptions and leaves its own state untouched.
"""


class GameError(Exception):
    """Top-level exception for anything that went wrong while handling a game."""


class IllegalMoveError(GameError):
    """The requested move is not in the legal move set, or the game has already ended."""


class NoHistoryError(GameError):
    """Undo requested while no move has been played."""


class NoRedoError(GameError):
    """Redo requested while the redo buffer is empty."""


class MalformedNotationError(GameError):
    """A FEN, SAN, PGN or UCI string could not be parsed. The message states the reason."""


class GameStateError(GameError):
    """The game (or a stored snapshot of it) violates the rules of a playable chess position."""


class RepositoryError(GameError):
    """Persistence layer could not find or store the requested record."""


class InvalidRequestError(GameError):
    """A request coming from the presentation layer is structurally invalid."""
