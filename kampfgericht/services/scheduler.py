"""
Cooperative scheduler for the Kampfgericht scorer application.

Callbacks never run on their own thread: the owner pumps the scheduler with
run_pending(), typically at the top of every scorer screen request, and due
callbacks run there in due-time order.
"""
import heapq
import itertools
import logging
from typing import Callable, Dict, List, Optional, Tuple

from ..utils import now_ts

logger = logging.getLogger(__name__)


class CooperativeScheduler:
    """Single-threaded delayed-call queue driven by an injectable time source."""

    def __init__(self, time_fn: Optional[Callable[[], float]] = None):
        self._time_fn = time_fn or now_ts
        self._queue: List[Tuple[float, int]] = []
        self._callbacks: Dict[int, Callable[[], None]] = {}
        self._counter = itertools.count(1)

    def time(self) -> float:
        return self._time_fn()

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> int:
        """
        Schedule a callback.

        Returns:
            Handle that can be passed to cancel()
        """
        handle = next(self._counter)
        heapq.heappush(self._queue, (self.time() + max(0.0, delay_seconds), handle))
        self._callbacks[handle] = callback
        return handle

    def cancel(self, handle: Optional[int]) -> None:
        if handle is not None:
            self._callbacks.pop(handle, None)

    def pending_count(self) -> int:
        return len(self._callbacks)

    def run_pending(self, now: Optional[float] = None) -> int:
        """
        Run every callback that is due.

        Returns:
            Number of callbacks that ran
        """
        now = self.time() if now is None else now
        ran = 0
        while self._queue and self._queue[0][0] <= now:
            _, handle = heapq.heappop(self._queue)
            callback = self._callbacks.pop(handle, None)
            if callback is None:
                continue
            callback()
            ran += 1
        return ran

    def clear(self) -> None:
        self._queue.clear()
        self._callbacks.clear()
