"""
Constants for the Kampfgericht scorer application.

This module contains configuration defaults used throughout the application.
"""

# Application metadata
APP_TITLE = "Kampfgericht"

# Game timing defaults
HALF_TIME_DURATION_SECONDS = 300
TOTAL_GAME_TIME_SECONDS = 2 * HALF_TIME_DURATION_SECONDS

# Scorer screen loop
TICK_INTERVAL_SECONDS = 0.1
AUTOSAVE_DELAY_SECONDS = 0.5

# Valid point values for a made shot
POINT_VALUES = (1, 2, 3)

# Game record persistence
DEFAULT_DATA_DIR = "data/games"
GAME_API_TIMEOUT_SECONDS = 5

# Where callers land when a scorer session cannot be opened
FALLBACK_VIEW = "/admin"
LOGIN_VIEW = "/login"
