"""Homestead buildings that produce resources over time and can be upgraded."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from .events import GameEvent, ResourceGained
from .models import ResourceKind, new_id, utcnow

if TYPE_CHECKING:
    from .state import PlayerState

logger = logging.getLogger("chimera_progression.homestead")


class BuildingType(str, Enum):
    FARM = "Farm"
    WORKSHOP = "Workshop"
    STUDY = "Study"

    @property
    def resource_type(self) -> ResourceKind:
        return _BUILDING_RESOURCES[self]

    @property
    def base_production_per_minute(self) -> int:
        return _BASE_PRODUCTION[self]

    @property
    def base_upgrade_cost(self) -> int:
        return _UPGRADE_COSTS[self]


_BUILDING_RESOURCES = {
    BuildingType.FARM: ResourceKind.RATIONS,
    BuildingType.WORKSHOP: ResourceKind.TOOLS,
    BuildingType.STUDY: ResourceKind.INTEL,
}
_BASE_PRODUCTION = {BuildingType.FARM: 2, BuildingType.WORKSHOP: 1, BuildingType.STUDY: 1}
_UPGRADE_COSTS = {BuildingType.FARM: 10, BuildingType.WORKSHOP: 15, BuildingType.STUDY: 20}


@dataclass(slots=True)
class Building:
    type: BuildingType
    level: int = 1
    last_production_time: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=new_id)

    @property
    def production_per_minute(self) -> int:
        return self.type.base_production_per_minute * self.level

    @property
    def upgrade_cost(self) -> int:
        return self.type.base_upgrade_cost * self.level

    def tick_production(self, now: datetime | None = None) -> int:
        """Whole units produced since the last collection.

        The production clock only advances once a full unit has accrued, so
        fractional progress carries over to the next tick.
        """
        now = now if now is not None else utcnow()
        minutes = (now - self.last_production_time).total_seconds() / 60.0
        amount = int(self.production_per_minute * minutes)
        if amount > 0:
            self.last_production_time = now
        return amount


def default_buildings(now: datetime | None = None) -> list[Building]:
    now = now if now is not None else utcnow()
    return [Building(type=building_type, last_production_time=now) for building_type in BuildingType]


class HomesteadService:
    @staticmethod
    def tick(state: PlayerState, *, now: datetime | None = None) -> list[GameEvent]:
        now = now if now is not None else utcnow()
        events: list[GameEvent] = []
        for building in state.buildings:
            amount = building.tick_production(now)
            if amount <= 0:
                continue
            kind = building.type.resource_type
            state.ledger.add(kind, amount)
            events.append(ResourceGained(kind=kind, amount=amount))
        if events:
            logger.debug("homestead_produced", extra={"events": len(events)})
        return events

    @staticmethod
    def can_upgrade(state: PlayerState, building: Building) -> bool:
        return state.ledger.has(building.type.resource_type, building.upgrade_cost)

    @staticmethod
    def upgrade(state: PlayerState, building: Building) -> bool:
        cost = building.upgrade_cost
        if not state.ledger.remove(building.type.resource_type, cost):
            return False
        building.level += 1
        logger.info(
            "building_upgraded",
            extra={"building": building.type.value, "level": building.level, "cost": cost},
        )
        return True

    @staticmethod
    def get_building(state: PlayerState, building_type: BuildingType) -> Building | None:
        return next((building for building in state.buildings if building.type == building_type), None)

    @staticmethod
    def total_production_per_minute(state: PlayerState, kind: ResourceKind) -> int:
        return sum(b.production_per_minute for b in state.buildings if b.type.resource_type == kind)
