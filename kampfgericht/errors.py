"""
Exception types for the Kampfgericht scorer application.

Ordinary scoring rejections are not exceptions; they are reported through
ScoringOutcome. These types cover bad data, persistence failures and misuse.
"""


class KampfgerichtError(Exception):
    """Base class for all application errors."""
    pass


class GameDataError(KampfgerichtError, ValueError):
    """Raised when a game record or update payload is malformed or incomplete."""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = list(errors or [message])


class PersistenceError(KampfgerichtError):
    """Raised when the game repository cannot be read or written."""
    pass


class GameNotFoundError(PersistenceError):
    """Raised when the requested game does not exist."""

    def __init__(self, game_id: str):
        super().__init__(f"Game not found: {game_id}")
        self.game_id = game_id


class SessionLoadError(KampfgerichtError):
    """Raised when a scorer session cannot initialize its ledgers."""
    pass


class LedgerStateError(KampfgerichtError):
    """Raised when the scoring ledger is used out of order."""
    pass
