"""
Notification channel for the Kampfgericht scorer application.

Scorer events (half ended, points added, save failed ...) are written to a
Notifier; the scorer screen drains them and shows them as toasts.
"""
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Protocol

from ..utils import now_ts

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    title: str
    detail: Optional[str] = None
    timestamp: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "title": self.title,
            "detail": self.detail,
            "timestamp": self.timestamp,
        }


class Notifier(Protocol):
    """Write-only sink for user-facing messages."""

    def notify(self, level: NotificationLevel, title: str, detail: Optional[str] = None) -> None:
        ...


class NotificationCenter:
    """Logs every notification and buffers it until the screen drains it."""

    _LOG_LEVELS = {
        NotificationLevel.SUCCESS: logging.INFO,
        NotificationLevel.INFO: logging.INFO,
        NotificationLevel.ERROR: logging.WARNING,
    }

    def __init__(self, max_buffered: int = 100):
        self._buffer: Deque[Notification] = deque(maxlen=max_buffered)

    def notify(self, level: NotificationLevel, title: str, detail: Optional[str] = None) -> None:
        level = NotificationLevel(level)
        logger.log(self._LOG_LEVELS[level], "%s: %s%s", level.value, title, f" ({detail})" if detail else "")
        self._buffer.append(Notification(level, title, detail, now_ts()))

    def success(self, title: str, detail: Optional[str] = None) -> None:
        self.notify(NotificationLevel.SUCCESS, title, detail)

    def error(self, title: str, detail: Optional[str] = None) -> None:
        self.notify(NotificationLevel.ERROR, title, detail)

    def info(self, title: str, detail: Optional[str] = None) -> None:
        self.notify(NotificationLevel.INFO, title, detail)

    def peek(self) -> List[Notification]:
        return list(self._buffer)

    def drain(self) -> List[Notification]:
        items = list(self._buffer)
        self._buffer.clear()
        return items
