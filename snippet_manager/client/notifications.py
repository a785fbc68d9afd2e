"""Transient user notifications (toasts) raised by the client store."""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass
class Notification:
    level: NotificationLevel
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """Collects notifications and forwards each one to an optional sink (the UI)."""

    def __init__(self, sink: Callable[[Notification], None] | None = None) -> None:
        self._sink = sink
        self.history: list[Notification] = []

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self.history.append(notification)
        if level is NotificationLevel.ERROR:
            logger.warning("Notify error: %s", message)
        else:
            logger.debug("Notify %s: %s", level.value, message)
        if self._sink is not None:
            self._sink(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.notify(NotificationLevel.ERROR, message)

    def info(self, message: str) -> Notification:
        return self.notify(NotificationLevel.INFO, message)

    @property
    def last(self) -> Notification | None:
        return self.history[-1] if self.history else None
