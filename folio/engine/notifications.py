"""
Folio Notifications — success/failure events for the notification surface.

Operations never render anything themselves: they hand a Notification to a
Notifier and move on. How (or whether) it is shown belongs to the caller.

Provides:
    - Notification / NotificationKind: the event payload
    - Notifier: sink interface
    - LoggingNotifier: writes events to the stdlib logger
    - RecordingNotifier: keeps events in memory (tests, CLI summaries)
    - ConsoleNotifier: prints events to a stream
    - FanOutNotifier: forwards to several sinks
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, TextIO

logger = logging.getLogger("folio.engine.notifications")


class NotificationKind(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class Notification:
    """A single transient, dismissible event."""
    kind: NotificationKind
    title: str
    description: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def success(cls, title: str, description: str) -> "Notification":
        return cls(NotificationKind.SUCCESS, title, description)

    @classmethod
    def failure(cls, title: str, description: str) -> "Notification":
        return cls(NotificationKind.FAILURE, title, description)

    @property
    def is_failure(self) -> bool:
        return self.kind is NotificationKind.FAILURE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "title": self.title,
            "description": self.description,
            "created_at": self.created_at.isoformat(),
        }


class Notifier(ABC):
    """Receives notifications. Implementations must not raise."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        ...

    def success(self, title: str, description: str) -> None:
        self.notify(Notification.success(title, description))

    def failure(self, title: str, description: str) -> None:
        self.notify(Notification.failure(title, description))


class LoggingNotifier(Notifier):
    """Default sink: forwards every event to the stdlib logger."""

    def notify(self, notification: Notification) -> None:
        level = logging.WARNING if notification.is_failure else logging.INFO
        logger.log(level, "%s: %s", notification.title, notification.description)


class RecordingNotifier(Notifier):
    """Keeps every event in order of arrival."""

    def __init__(self) -> None:
        self.notifications: List[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def successes(self) -> List[Notification]:
        return [n for n in self.notifications if not n.is_failure]

    @property
    def failures(self) -> List[Notification]:
        return [n for n in self.notifications if n.is_failure]

    @property
    def last(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None

    def clear(self) -> None:
        self.notifications.clear()


class ConsoleNotifier(Notifier):
    """Prints events, failures to stderr."""

    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self._out = out
        self._err = err

    def notify(self, notification: Notification) -> None:
        if notification.is_failure:
            stream = self._err or sys.stderr
            print(f"[ERROR] {notification.title}: {notification.description}", file=stream)
        else:
            stream = self._out or sys.stdout
            print(f"[OK] {notification.title}: {notification.description}", file=stream)


class FanOutNotifier(Notifier):
    """Forwards every event to each sink, in order."""

    def __init__(self, *sinks: Notifier):
        self._sinks = sinks

    def notify(self, notification: Notification) -> None:
        for sink in self._sinks:
            sink.notify(notification)
