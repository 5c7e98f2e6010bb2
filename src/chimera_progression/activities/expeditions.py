"""Timed expeditions: cost to start, wait out the duration, collect a payout."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING

from chimera_progression.events import ExpeditionCompleted, GameEvent
from chimera_progression.ledger import ResourceLedger
from chimera_progression.models import ResourceKind, new_id, utcnow

if TYPE_CHECKING:
    from chimera_progression.rewards import RewardResolver
    from chimera_progression.state import PlayerState

logger = logging.getLogger("chimera_progression.activities.expeditions")


@dataclass(frozen=True, slots=True)
class ExpeditionSpec:
    description: str
    duration_seconds: int
    required_resources: dict[ResourceKind, int]
    rewards: dict[ResourceKind, int]


class ExpeditionType(str, Enum):
    FOREST_SCOUT = "Forest Scout"
    MOUNTAIN_SURVEY = "Mountain Survey"
    RIVER_RUN = "River Run"
    DESERT_CARAVAN = "Desert Caravan"

    @property
    def spec(self) -> ExpeditionSpec:
        return EXPEDITION_TABLE[self]

    @property
    def duration(self) -> timedelta:
        return timedelta(seconds=self.spec.duration_seconds)


EXPEDITION_TABLE: dict[ExpeditionType, ExpeditionSpec] = {
    ExpeditionType.FOREST_SCOUT: ExpeditionSpec(
        description="Scout the nearby forest and gather intel.",
        duration_seconds=15 * 60,
        required_resources={ResourceKind.RATIONS: 2, ResourceKind.TOOLS: 1},
        rewards={ResourceKind.INTEL: 5, ResourceKind.RATIONS: 2},
    ),
    ExpeditionType.MOUNTAIN_SURVEY: ExpeditionSpec(
        description="Survey the mountains for rare materials.",
        duration_seconds=30 * 60,
        required_resources={ResourceKind.RATIONS: 3, ResourceKind.TOOLS: 2},
        rewards={ResourceKind.MATERIALS: 6, ResourceKind.TOOLS: 2},
    ),
    ExpeditionType.RIVER_RUN: ExpeditionSpec(
        description="Run supplies along the river and trade.",
        duration_seconds=45 * 60,
        required_resources={ResourceKind.RATIONS: 4, ResourceKind.MATERIALS: 2},
        rewards={ResourceKind.CURRENCY: 40, ResourceKind.RATIONS: 3},
    ),
    ExpeditionType.DESERT_CARAVAN: ExpeditionSpec(
        description="Escort a caravan across the desert sands.",
        duration_seconds=60 * 60,
        required_resources={ResourceKind.RATIONS: 5, ResourceKind.MATERIALS: 3, ResourceKind.TOOLS: 2},
        rewards={ResourceKind.CURRENCY: 80, ResourceKind.MATERIALS: 4},
    ),
}


class ActivityStatus(str, Enum):
    """Lifecycle states for a timed activity."""

    IDLE = "idle"
    ACTIVE = "active"
    READY = "ready"
    COMPLETED = "completed"


@dataclass(slots=True)
class Expedition:
    """One expedition slot and its countdown.

    ``READY`` is never stored: it is ``ACTIVE`` observed at or after ``end_time``.
    """

    type: ExpeditionType
    start_time: datetime | None = None
    end_time: datetime | None = None
    is_active: bool = False
    is_completed: bool = False
    id: str = field(default_factory=new_id)

    @property
    def duration(self) -> timedelta:
        return self.type.duration

    def status(self, now: datetime | None = None) -> ActivityStatus:
        if self.is_completed:
            return ActivityStatus.COMPLETED
        if not self.is_active:
            return ActivityStatus.IDLE
        if self.is_ready_to_complete(now):
            return ActivityStatus.READY
        return ActivityStatus.ACTIVE

    def start(self, now: datetime | None = None) -> bool:
        if self.is_active or self.is_completed:
            return False
        self.start_time = now if now is not None else utcnow()
        self.end_time = self.start_time + self.duration
        self.is_active = True
        return True

    def is_ready_to_complete(self, now: datetime | None = None) -> bool:
        if not self.is_active or self.end_time is None:
            return False
        return (now or utcnow()) >= self.end_time

    def remaining(self, now: datetime | None = None) -> float:
        """Seconds left on the countdown, never negative."""
        if not self.is_active or self.end_time is None:
            return 0.0
        return max(0.0, (self.end_time - (now or utcnow())).total_seconds())

    def progress(self, now: datetime | None = None) -> float:
        if self.start_time is None:
            return 0.0
        elapsed = ((now or utcnow()) - self.start_time).total_seconds()
        return min(1.0, max(0.0, elapsed / self.duration.total_seconds()))

    def complete(self, now: datetime | None = None) -> bool:
        if not self.is_ready_to_complete(now):
            return False
        self.is_active = False
        self.is_completed = True
        return True


@dataclass(slots=True)
class ExpeditionReport:
    expedition_id: str
    expedition_type: ExpeditionType
    rewards: dict[ResourceKind, int]
    completed_at: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=new_id)


class ExpeditionService:
    """Pays for, starts, and settles expeditions against the player's ledger."""

    def __init__(self, resolver: RewardResolver) -> None:
        self._resolver = resolver

    @staticmethod
    def can_start(expedition: Expedition, ledger: ResourceLedger) -> bool:
        return expedition.status() == ActivityStatus.IDLE and ledger.has_all(expedition.type.spec.required_resources)

    def start(self, expedition: Expedition, state: PlayerState, *, now: datetime | None = None) -> bool:
        if expedition.is_active or expedition.is_completed:
            return False
        if not state.ledger.remove_all(expedition.type.spec.required_resources):
            logger.info(
                "expedition_start_skipped",
                extra={"expedition_id": expedition.id, "type": expedition.type.value, "reason": "insufficient_resources"},
            )
            return False
        expedition.start(now)
        logger.info(
            "expedition_started",
            extra={"expedition_id": expedition.id, "type": expedition.type.value, "end_time": expedition.end_time},
        )
        return True

    def collect_rewards(
        self,
        expedition: Expedition,
        state: PlayerState,
        *,
        now: datetime | None = None,
    ) -> tuple[ExpeditionReport | None, list[GameEvent]]:
        now = now if now is not None else utcnow()
        if not expedition.is_ready_to_complete(now):
            return None, []

        rewards = dict(expedition.type.spec.rewards)
        events = self._resolver.grant_resources(rewards, state)
        expedition.complete(now)
        report = ExpeditionReport(
            expedition_id=expedition.id,
            expedition_type=expedition.type,
            rewards=rewards,
            completed_at=now,
        )
        state.expedition_reports.append(report)
        events.append(ExpeditionCompleted(expedition_id=expedition.id, expedition_type=expedition.type.value))
        logger.info("expedition_collected", extra={"expedition_id": expedition.id, "type": expedition.type.value})
        return report, events
