"""
Scorer session service for the Kampfgericht scorer application.

A ScorerSession is the live scorekeeping screen of one game: it owns the game
clock, the scoring ledger and its undo history, drives clock ticks through a
cooperative scheduler, and reconciles the ledger into the persisted game
record on save. Nothing here is shared between sessions.
"""
import logging
from typing import Any, Dict, Optional

from ..errors import GameDataError, GameNotFoundError, PersistenceError, SessionLoadError
from ..models import GameRecord, GameStatus, GameUpdate, ScoringAction
from ..utils import (
    HALF_TIME_DURATION_SECONDS, TICK_INTERVAL_SECONDS, AUTOSAVE_DELAY_SECONDS
)
from .clock_service import ClockEvent, GameClock
from .notifications import NotificationLevel, Notifier
from .persistence_service import GameRepository
from .scheduler import CooperativeScheduler
from .scoring_service import ScoringLedger, ScoringOutcome, ScoringRejection

logger = logging.getLogger(__name__)

_REJECTION_TITLES = {
    ScoringRejection.NOT_INITIALIZED: "Error",
    ScoringRejection.SCORING_GATED: "Scoring not allowed",
    ScoringRejection.INVALID_POINTS: "Invalid points",
    ScoringRejection.PLAYER_NOT_FOUND: "Error",
    ScoringRejection.PLAYER_IN_BOTH_ROSTERS: "Error",
}


class ScorerSession:
    """
    Live scorer for one game.

    Args:
        game_id: Id of the game being scored
        repository: Where the game record is read from and saved to
        notifier: Sink for user-facing messages
        scheduler: Drives clock ticks and the delayed auto-save
        half_duration_seconds: Length of each half
        tick_interval_seconds: Delay between clock ticks while running
        autosave_delay_seconds: Delay between game end and the automatic save
    """

    def __init__(
        self,
        game_id: str,
        repository: GameRepository,
        notifier: Notifier,
        scheduler: Optional[CooperativeScheduler] = None,
        *,
        half_duration_seconds: int = HALF_TIME_DURATION_SECONDS,
        tick_interval_seconds: float = TICK_INTERVAL_SECONDS,
        autosave_delay_seconds: float = AUTOSAVE_DELAY_SECONDS,
    ):
        self.game_id = game_id
        self.repository = repository
        self.notifier = notifier
        self.scheduler = scheduler or CooperativeScheduler()
        self.tick_interval_seconds = tick_interval_seconds
        self.autosave_delay_seconds = autosave_delay_seconds

        self.clock = GameClock(half_duration_seconds)
        self.ledger = ScoringLedger(gate=self._scoring_block_reason)
        self.record: Optional[GameRecord] = None

        self._tick_handle: Optional[int] = None
        self._autosave_handle: Optional[int] = None
        self._ticking = False
        self._saving = False
        self._status_in_flight = False
        self._autosave_scheduled = False
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def status(self) -> Optional[GameStatus]:
        return self.record.status if self.record is not None else None

    @property
    def is_loaded(self) -> bool:
        return self.record is not None and self.ledger.is_initialized

    @property
    def is_saving(self) -> bool:
        return self._saving

    def load(self) -> GameRecord:
        """
        Fetch the game and seed both team ledgers.

        Raises:
            SessionLoadError: If the game is missing or its roster data is incomplete
        """
        try:
            record = self.repository.fetch_game(self.game_id)
            self.ledger.initialize_from_record(record)
        except GameNotFoundError as exc:
            self._notify(NotificationLevel.ERROR, "Error loading game", str(exc))
            raise SessionLoadError(str(exc)) from exc
        except (PersistenceError, GameDataError) as exc:
            self._notify(NotificationLevel.ERROR, "Error loading game", str(exc))
            raise SessionLoadError(f"Game data could not be loaded: {exc}") from exc

        self.record = record
        logger.info("Scorer session opened for game %s (%s)", self.game_id, record.status.value)
        return record

    def close(self) -> None:
        """Tear the session down; no tick fires after this returns."""
        if self._closed:
            return
        self._cancel_tick()
        if self._autosave_handle is not None:
            # the game already ended; do not drop its automatic save
            self.scheduler.cancel(self._autosave_handle)
            self._autosave_handle = None
            self.save(auto=True)
        self.clock.pause()
        self._closed = True
        logger.info("Scorer session closed for game %s", self.game_id)

    def pump(self, now: Optional[float] = None) -> int:
        """Run due ticks and delayed saves."""
        if self._closed:
            return 0
        return self.scheduler.run_pending(now)

    # ------------------------------------------------------------------
    # Clock controls
    # ------------------------------------------------------------------
    def start_clock(self) -> bool:
        """Start or resume the clock; the first start marks a pending game live."""
        if not self.is_loaded or self._closed:
            return False

        was_idle = self.clock.is_idle
        if not self.clock.start(self._now()):
            return False

        self._schedule_tick()
        if was_idle and self.status == GameStatus.PENDING:
            self._update_status(GameStatus.LIVE)
        return True

    def pause_clock(self) -> None:
        self.clock.pause()
        self._cancel_tick()

    def reset_clock(self) -> None:
        self.clock.reset()
        self._cancel_tick()

    def _schedule_tick(self) -> None:
        self._cancel_tick()
        self._tick_handle = self.scheduler.call_later(self.tick_interval_seconds, self._on_tick)

    def _cancel_tick(self) -> None:
        self.scheduler.cancel(self._tick_handle)
        self._tick_handle = None

    def _on_tick(self) -> None:
        self._tick_handle = None
        if self._closed or self._ticking or not self.clock.is_running:
            return

        self._ticking = True
        try:
            event = self.clock.tick(self._now())
            if event is ClockEvent.HALF_ENDED:
                self._notify(
                    NotificationLevel.SUCCESS, "First half ended",
                    "Start the second half manually",
                )
            elif event is ClockEvent.GAME_ENDED:
                self._on_game_end()
            elif self.clock.is_running:
                self._schedule_tick()
        finally:
            self._ticking = False

    def _on_game_end(self) -> None:
        self._update_status(GameStatus.FINISHED)
        if not self._autosave_scheduled:
            self._autosave_scheduled = True
            self._autosave_handle = self.scheduler.call_later(
                self.autosave_delay_seconds, self._run_autosave
            )
        self._notify(
            NotificationLevel.SUCCESS, "Game ended",
            "Game time expired - saving automatically",
        )

    def _run_autosave(self) -> None:
        self._autosave_handle = None
        self.save(auto=True)

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------
    def _scoring_block_reason(self) -> Optional[str]:
        return self.clock.scoring_block_reason(self.status)

    def scoring_allowed(self) -> bool:
        return self.is_loaded and self._scoring_block_reason() is None

    def add_points(self, player_id: str, points: int) -> ScoringOutcome:
        outcome = self.ledger.add_points(player_id, points, now=self._now())
        if outcome.accepted:
            self._notify(NotificationLevel.SUCCESS, outcome.message)
        else:
            self._notify(NotificationLevel.ERROR, _REJECTION_TITLES[outcome.reason], outcome.message)
        return outcome

    def undo_last(self) -> Optional[ScoringAction]:
        action = self.ledger.undo_last()
        if action is not None:
            self._notify(NotificationLevel.INFO, f"Undone: {action.description}")
        return action

    # ------------------------------------------------------------------
    # Save / reconciliation
    # ------------------------------------------------------------------
    def final_score_text(self) -> str:
        team_a, team_b = self.ledger.team_a, self.ledger.team_b
        return f"{team_a.team_name} {team_a.total_score} : {team_b.total_score} {team_b.team_name}"

    def save(self, auto: bool = False) -> bool:
        """
        Write the ledger into the game record and mark the game finished.

        Returns:
            True if the record was written; on failure the in-memory state is
            kept so the save can be retried
        """
        if not self.ledger.is_initialized:
            self._notify(NotificationLevel.ERROR, "Error", "Player data is incomplete")
            return False
        if self._saving:
            logger.info("Save for game %s already in progress", self.game_id)
            return False

        self._saving = True
        try:
            score_a, score_b = self.ledger.score_line()
            update = GameUpdate(
                status=GameStatus.FINISHED,
                score_a=score_a,
                score_b=score_b,
                player_stats=self.ledger.to_player_stats(),
            )
            try:
                self.record = self.repository.update_game(self.game_id, update)
            except PersistenceError as exc:
                logger.error("Saving game %s failed: %s", self.game_id, exc)
                self._notify(NotificationLevel.ERROR, "Error saving the game", str(exc))
                return False

            self.pause_clock()
            logger.info("Game %s saved (%s): %s", self.game_id, "auto" if auto else "manual", self.final_score_text())
            self._notify(NotificationLevel.SUCCESS, "Game saved", f"Final score: {self.final_score_text()}")
            return True
        finally:
            self._saving = False

    def _update_status(self, status: GameStatus) -> bool:
        if self._status_in_flight:
            return False
        self._status_in_flight = True
        try:
            self.record = self.repository.update_game(self.game_id, GameUpdate(status=status))
            logger.info("Game %s is now %s", self.game_id, status.value)
            return True
        except PersistenceError as exc:
            logger.error("Status update of game %s to %s failed: %s", self.game_id, status.value, exc)
            self._notify(NotificationLevel.ERROR, "Error updating the game status", str(exc))
            return False
        finally:
            self._status_in_flight = False

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def snapshot(self) -> Dict[str, Any]:
        """Return the scorer screen state."""
        last = self.ledger.last_action()
        return {
            "game_id": self.game_id,
            "status": self.status.value if self.status is not None else None,
            "clock": self.clock.to_dict(),
            "team_a": self.ledger.team_a.to_dict() if self.ledger.team_a else None,
            "team_b": self.ledger.team_b.to_dict() if self.ledger.team_b else None,
            "scoring_allowed": self.scoring_allowed(),
            "can_undo": self.ledger.can_undo(),
            "last_action": last.to_dict() if last else None,
            "saving": self._saving,
        }

    def _now(self) -> float:
        return self.scheduler.time()

    def _notify(self, level: NotificationLevel, title: str, detail: Optional[str] = None) -> None:
        self.notifier.notify(level, title, detail)
