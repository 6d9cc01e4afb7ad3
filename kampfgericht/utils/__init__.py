"""
Utilities package for the Kampfgericht scorer application.

This package contains utility functions used throughout the application.
"""
from .time_utils import fmt_mmss, now_ts
from .logging_utils import setup_logging
from .constants import (
    APP_TITLE, HALF_TIME_DURATION_SECONDS, TOTAL_GAME_TIME_SECONDS,
    TICK_INTERVAL_SECONDS, AUTOSAVE_DELAY_SECONDS, POINT_VALUES
)

__all__ = [
    "fmt_mmss", "now_ts", "setup_logging", "APP_TITLE",
    "HALF_TIME_DURATION_SECONDS", "TOTAL_GAME_TIME_SECONDS",
    "TICK_INTERVAL_SECONDS", "AUTOSAVE_DELAY_SECONDS", "POINT_VALUES"
]
