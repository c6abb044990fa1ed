"""Transient user notifications (toasts) for classification outcomes."""
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

import structlog

logger = structlog.get_logger()


class Severity(str, Enum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A message shown to the user until it auto-dismisses."""
    message: str
    severity: Severity
    auto_close_ms: int
    created_at: float = field(default_factory=time.time)

    @property
    def expires_at(self) -> float:
        return self.created_at + self.auto_close_ms / 1000

    def expired(self, now: float | None = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "severity": self.severity.value,
            "auto_close_ms": self.auto_close_ms,
            "created_at": self.created_at,
        }


class Notifier(Protocol):
    def notify(self, message: str, severity: Severity, auto_close_ms: int) -> None: ...


class NotificationCenter:
    """In-memory notifier that a presentation layer can poll.

    Expired notifications are dropped whenever the list is read.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._notifications: list[Notification] = []

    def notify(self, message: str, severity: Severity, auto_close_ms: int) -> None:
        notification = Notification(
            message=message,
            severity=severity,
            auto_close_ms=auto_close_ms,
            created_at=self._clock(),
        )
        self._notifications.append(notification)
        logger.info(
            "notification_posted",
            severity=severity.value,
            message=message,
            auto_close_ms=auto_close_ms,
        )

    def active(self) -> list[Notification]:
        """Get notifications that have not auto-dismissed yet."""
        now = self._clock()
        self._notifications = [n for n in self._notifications if not n.expired(now)]
        return list(self._notifications)

    def dismiss_all(self) -> None:
        self._notifications.clear()

    def __len__(self) -> int:
        return len(self._notifications)
