"""Contract for player-facing notification sinks."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from typing import Protocol

from chimera_progression.events import GameEvent, event_name, event_payload


class NotificationSink(Protocol):
    """Receives game events after a state transition has been applied."""

    def emit(self, event: GameEvent) -> None:
        """Publish one event to the configured sink."""


class QueueNotificationSink:
    """Bounded display queue; the oldest notification is dropped when full."""

    def __init__(self, max_size: int = 50) -> None:
        self._events: deque[GameEvent] = deque(maxlen=max_size)

    def emit(self, event: GameEvent) -> None:
        self._events.append(event)

    def pending(self) -> list[GameEvent]:
        return list(self._events)

    def drain(self) -> list[GameEvent]:
        events = list(self._events)
        self._events.clear()
        return events

    def __len__(self) -> int:
        return len(self._events)


class LoggingNotificationSink:
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger if logger is not None else logging.getLogger("chimera_progression.notifications")

    def emit(self, event: GameEvent) -> None:
        self._logger.info(event_name(event), extra={"payload": event_payload(event)})


class NullNotificationSink:
    def emit(self, event: GameEvent) -> None:
        return None


def dispatch(events: Iterable[GameEvent], sink: NotificationSink) -> None:
    for event in events:
        sink.emit(event)
