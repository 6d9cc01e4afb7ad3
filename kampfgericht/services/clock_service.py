"""Game clock service for the Kampfgericht scorer application."""

import logging
import math
from enum import Enum
from typing import Dict, Optional, Union

from ..models import GameStatus
from ..utils import fmt_mmss, now_ts, HALF_TIME_DURATION_SECONDS

logger = logging.getLogger(__name__)

StatusLike = Union[GameStatus, str]


class ClockEvent(Enum):
    """Result of a single clock tick."""
    IDLE = "idle"
    ADVANCED = "advanced"
    HALF_ENDED = "half_ended"
    GAME_ENDED = "game_ended"


# ----------------------------------------------------------------------
# Pure queries over elapsed seconds
# ----------------------------------------------------------------------
def _total(half_duration: int) -> int:
    return 2 * half_duration


def _clamp(seconds: Union[int, float], half_duration: int) -> int:
    return max(0, min(int(seconds), _total(half_duration)))


def current_half(seconds: int, half_duration: int = HALF_TIME_DURATION_SECONDS) -> int:
    """Return 1 before the half boundary, 2 from it on."""
    return 1 if _clamp(seconds, half_duration) < half_duration else 2


def remaining_time(seconds: int, half_duration: int = HALF_TIME_DURATION_SECONDS) -> int:
    """Seconds left in the active half; 0 once the game is over."""
    seconds = _clamp(seconds, half_duration)
    total = _total(half_duration)
    if seconds >= total:
        return 0
    if seconds < half_duration:
        return half_duration - seconds
    return total - seconds


def is_finished(seconds: int, half_duration: int = HALF_TIME_DURATION_SECONDS) -> bool:
    return seconds >= _total(half_duration)


def is_halftime_break(
    seconds: int, is_running: bool, half_duration: int = HALF_TIME_DURATION_SECONDS
) -> bool:
    """True exactly during the manual gap between the two halves."""
    return half_duration <= seconds < _total(half_duration) and not is_running


def display_half(
    seconds: int, is_running: bool, half_duration: int = HALF_TIME_DURATION_SECONDS
) -> int:
    """Half shown on the scorer screen; the first half stays up during the break."""
    if is_halftime_break(seconds, is_running, half_duration):
        return 1
    return current_half(seconds, half_duration)


def scoring_block_reason(
    status: Optional[StatusLike],
    seconds: int,
    is_running: bool,
    half_duration: int = HALF_TIME_DURATION_SECONDS,
) -> Optional[str]:
    """Return why scoring is not allowed right now, or None when it is."""
    if status == GameStatus.FINISHED:
        return "Game is finished"
    if is_finished(seconds, half_duration):
        return "Game time has expired"
    if is_halftime_break(seconds, is_running, half_duration):
        return "Halftime break"
    return None


def scoring_allowed(
    status: Optional[StatusLike],
    seconds: int,
    is_running: bool,
    half_duration: int = HALF_TIME_DURATION_SECONDS,
) -> bool:
    """The single gate consulted before any ledger mutation."""
    return scoring_block_reason(status, seconds, is_running, half_duration) is None


def format_clock(seconds: int, half_duration: int = HALF_TIME_DURATION_SECONDS) -> str:
    """Countdown text for the active half, e.g. '04:59'."""
    return fmt_mmss(remaining_time(seconds, half_duration))


class GameClock:
    """Two-half countdown clock with automatic half and game end."""

    def __init__(self, half_duration_seconds: int = HALF_TIME_DURATION_SECONDS):
        if int(half_duration_seconds) < 1:
            raise ValueError("Half duration must be at least one second")
        self.half_duration_seconds = int(half_duration_seconds)
        self.is_running = False
        self.time_elapsed = 0
        self.start_time: Optional[float] = None

    @property
    def total_duration_seconds(self) -> int:
        return _total(self.half_duration_seconds)

    @property
    def is_idle(self) -> bool:
        return self.time_elapsed == 0 and not self.is_running

    # ------------------------------------------------------------------
    # Core clock controls
    # ------------------------------------------------------------------
    def start(self, now: Optional[float] = None) -> bool:
        """
        Start or resume the clock.

        Returns:
            True if the clock went from stopped to running
        """
        if self.time_elapsed >= self.total_duration_seconds or self.is_running:
            return False

        now = now_ts() if now is None else now
        self.is_running = True
        self.start_time = now - self.time_elapsed
        logger.info("Clock started at %ss (half %s)", self.time_elapsed, self.current_half())
        return True

    def pause(self) -> None:
        """Stop the clock and keep the elapsed time."""
        if self.is_running:
            logger.info("Clock paused at %ss", self.time_elapsed)
        self.is_running = False
        self.start_time = None

    def reset(self) -> None:
        """Return the clock to zero, stopped."""
        self.time_elapsed = 0
        self.is_running = False
        self.start_time = None
        logger.info("Clock reset")

    def tick(self, now: Optional[float] = None) -> ClockEvent:
        """Advance elapsed time from the wall clock and apply boundary rules."""
        if not self.is_running or self.start_time is None:
            return ClockEvent.IDLE

        now = now_ts() if now is None else now
        candidate = max(self.time_elapsed, int(math.floor(now - self.start_time)))
        half = self.half_duration_seconds
        total = self.total_duration_seconds

        if candidate >= half and self.time_elapsed < half:
            self.time_elapsed = half
            self.pause()
            logger.info("First half ended")
            return ClockEvent.HALF_ENDED

        if candidate >= total:
            self.time_elapsed = total
            self.pause()
            logger.info("Game time expired")
            return ClockEvent.GAME_ENDED

        self.time_elapsed = candidate
        return ClockEvent.ADVANCED

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def current_half(self) -> int:
        return current_half(self.time_elapsed, self.half_duration_seconds)

    def display_half(self) -> int:
        return display_half(self.time_elapsed, self.is_running, self.half_duration_seconds)

    def remaining_time(self) -> int:
        return remaining_time(self.time_elapsed, self.half_duration_seconds)

    def is_finished(self) -> bool:
        return is_finished(self.time_elapsed, self.half_duration_seconds)

    def is_halftime_break(self) -> bool:
        return is_halftime_break(self.time_elapsed, self.is_running, self.half_duration_seconds)

    def scoring_block_reason(self, status: Optional[StatusLike]) -> Optional[str]:
        return scoring_block_reason(
            status, self.time_elapsed, self.is_running, self.half_duration_seconds
        )

    def scoring_allowed(self, status: Optional[StatusLike]) -> bool:
        return self.scoring_block_reason(status) is None

    def to_dict(self) -> Dict[str, object]:
        """Return the clock state for display purposes."""
        return {
            "is_running": self.is_running,
            "time_elapsed": self.time_elapsed,
            "remaining_seconds": self.remaining_time(),
            "display": format_clock(self.time_elapsed, self.half_duration_seconds),
            "current_half": self.current_half(),
            "display_half": self.display_half(),
            "is_halftime_break": self.is_halftime_break(),
            "is_finished": self.is_finished(),
            "half_duration_seconds": self.half_duration_seconds,
            "total_duration_seconds": self.total_duration_seconds,
        }
