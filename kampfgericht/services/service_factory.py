"""
Service Factory for dependency injection.

This module builds the game repository and scorer sessions from a
configuration mapping, so the web layer never wires services by hand.
"""
from typing import Any, Callable, Mapping, Optional

from ..utils import constants
from .notifications import NotificationCenter
from .persistence_service import GameRepository, HttpGameClient, JsonGameStore
from .scheduler import CooperativeScheduler
from .session_service import ScorerSession


class ServiceFactory:
    """
    Factory for creating service instances with their dependencies injected.

    Args:
        config: Mapping with the keys of kampfgericht.config.Config
        time_fn: Optional time source handed to every scheduler
    """

    def __init__(self, config: Mapping[str, Any], time_fn: Optional[Callable[[], float]] = None):
        self.config = config
        self.time_fn = time_fn
        self._repository: Optional[GameRepository] = None

    def create_repository(self) -> GameRepository:
        """Get the shared game repository (HTTP when GAME_API_URL is set)."""
        if self._repository is None:
            api_url = self.config.get("GAME_API_URL")
            if api_url:
                self._repository = HttpGameClient(
                    api_url,
                    timeout=float(self.config.get("GAME_API_TIMEOUT", constants.GAME_API_TIMEOUT_SECONDS)),
                )
            else:
                self._repository = JsonGameStore(
                    self.config.get("DATA_DIR", constants.DEFAULT_DATA_DIR)
                )
        return self._repository

    def create_session(self, game_id: str) -> ScorerSession:
        """Create an unloaded scorer session with its own clock, ledger and scheduler."""
        return ScorerSession(
            game_id,
            repository=self.create_repository(),
            notifier=NotificationCenter(),
            scheduler=CooperativeScheduler(self.time_fn),
            half_duration_seconds=int(
                self.config.get("HALF_TIME_DURATION_SECONDS", constants.HALF_TIME_DURATION_SECONDS)
            ),
            tick_interval_seconds=float(
                self.config.get("TICK_INTERVAL_SECONDS", constants.TICK_INTERVAL_SECONDS)
            ),
            autosave_delay_seconds=float(
                self.config.get("AUTOSAVE_DELAY_SECONDS", constants.AUTOSAVE_DELAY_SECONDS)
            ),
        )
