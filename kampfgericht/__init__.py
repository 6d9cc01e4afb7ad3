"""
Kampfgericht

Live scorekeeping for basketball tournament games: a two-half game clock,
an undoable per-player points ledger and the reconciliation of both into the
persisted game record.

This package provides the scorer services and a Flask web API for the
scorer screen.
"""
from .models import GameRecord, GameStatus, GameUpdate
from .services import GameClock, ScoringLedger, ScorerSession, JsonGameStore, HttpGameClient
from .ui import create_app, run_web_app
from .utils import fmt_mmss, now_ts, APP_TITLE

__version__ = "1.0.0"

__all__ = [
    "GameRecord", "GameStatus", "GameUpdate", "GameClock", "ScoringLedger",
    "ScorerSession", "JsonGameStore", "HttpGameClient", "create_app",
    "run_web_app", "fmt_mmss", "now_ts", "APP_TITLE"
]
