"""CLI-side handler that runs one operation per invocation against the saved player."""

from __future__ import annotations

import random
from collections.abc import Callable
from typing import TypeVar

from chimera_progression.config import Settings
from chimera_progression.notifications import LoggingNotificationSink, NotificationSink, NullNotificationSink
from chimera_progression.session import GameSession
from chimera_progression.state import PlayerState, new_player
from chimera_progression.storage import StateStore

T = TypeVar("T")


class CliSessionHandler:
    """Load, run, save: a sync facade over :class:`GameSession` for short-lived commands."""

    def __init__(self, store: StateStore, settings: Settings, *, sink: NotificationSink | None = None) -> None:
        self._store = store
        self._settings = settings
        if sink is None:
            sink = LoggingNotificationSink() if settings.notifications_enabled else NullNotificationSink()
        self._sink = sink

    def load_state(self) -> PlayerState:
        state = self._store.load()
        if state is None:
            state = new_player(self._settings.player_name)
        return state

    def open_session(self, state: PlayerState | None = None) -> GameSession:
        seed = self._settings.rng_seed
        rng = random.Random(seed) if seed is not None else None
        if state is None:
            state = self.load_state()
        return GameSession(state, sink=self._sink, rng=rng)

    def run(self, operation: Callable[[GameSession], T]) -> T:
        session = self.open_session()
        result = operation(session)
        self._store.save(session.state)
        return result

    def replace_state(self, state: PlayerState) -> None:
        self._store.save(state)
