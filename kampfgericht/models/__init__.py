"""
Models package for the Kampfgericht scorer application.

This package contains the core data models used throughout the application.
"""
from .game_record import (
    GameRecord, GameStatus, GameUpdate, PlayerStatLine, RosterPlayer,
    RosterTeam, is_valid_game_id
)
from .ledger import PlayerScoreEntry, TeamLedger, ScoringAction

__all__ = [
    "GameRecord", "GameStatus", "GameUpdate", "PlayerStatLine", "RosterPlayer",
    "RosterTeam", "is_valid_game_id", "PlayerScoreEntry", "TeamLedger",
    "ScoringAction"
]
