"""
Services package for the Kampfgericht scorer application.

This package contains service classes that handle business logic.
Includes factory for proper dependency injection.
"""
from .clock_service import (
    ClockEvent, GameClock, current_half, remaining_time, is_finished,
    is_halftime_break, display_half, scoring_allowed, scoring_block_reason,
    format_clock
)
from .scoring_service import ScoringLedger, ScoringOutcome, ScoringRejection
from .scheduler import CooperativeScheduler
from .notifications import Notification, NotificationCenter, NotificationLevel, Notifier
from .persistence_service import GameRepository, HttpGameClient, JsonGameStore
from .session_service import ScorerSession
from .service_factory import ServiceFactory

__all__ = [
    "ClockEvent", "GameClock", "current_half", "remaining_time", "is_finished",
    "is_halftime_break", "display_half", "scoring_allowed", "scoring_block_reason",
    "format_clock", "ScoringLedger", "ScoringOutcome", "ScoringRejection",
    "CooperativeScheduler", "Notification", "NotificationCenter",
    "NotificationLevel", "Notifier", "GameRepository", "HttpGameClient",
    "JsonGameStore", "ScorerSession", "ServiceFactory"
]
