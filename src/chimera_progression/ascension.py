"""Prestige meta-progression: trade a run's power for permanent multipliers."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .state import PlayerState

logger = logging.getLogger("chimera_progression.ascension")

ASCENSION_THRESHOLD = 1_000


@dataclass(frozen=True, slots=True)
class PrestigePerk:
    id: str
    name: str
    description: str
    cost: int
    multipliers: dict[str, float]


PRESTIGE_CATALOG: tuple[PrestigePerk, ...] = (
    PrestigePerk("idle_1", "Early Riser", "+10% idle yield", 3, {"idleYield": 1.10}),
    PrestigePerk("tasks_1", "Taskmaster", "+10% task gold", 3, {"taskGold": 1.10}),
    PrestigePerk("craft_1", "Greased Gears", "+10% crafting speed", 3, {"craftSpeed": 1.10}),
)


@dataclass(slots=True)
class AscensionState:
    """The part of the player that survives an ascension."""

    prestige_currency: int = 0
    owned_perk_ids: set[str] = field(default_factory=set)
    ascensions: int = 0


def can_ascend(total_power: int) -> bool:
    return total_power >= ASCENSION_THRESHOLD


def projected_gain(total_power: int) -> int:
    return max(1, int(math.sqrt(max(total_power, 0)) / 10.0))


class AscensionService:
    def __init__(self, catalog: tuple[PrestigePerk, ...] = PRESTIGE_CATALOG) -> None:
        self._catalog = {perk.id: perk for perk in catalog}

    @property
    def catalog(self) -> list[PrestigePerk]:
        return list(self._catalog.values())

    @staticmethod
    def ascend(state: PlayerState, *, now: datetime | None = None) -> int:
        """Bank prestige currency and soft-reset the run. Returns the gain, 0 if not allowed."""
        power = state.total_power_earned
        if not can_ascend(power):
            return 0
        gain = projected_gain(power)
        state.ascension.prestige_currency += gain
        state.ascension.ascensions += 1
        state.reset_run(now)
        logger.info("ascended", extra={"power": power, "gain": gain, "ascensions": state.ascension.ascensions})
        return gain

    def purchase(self, state: PlayerState, perk_id: str) -> bool:
        perk = self._catalog.get(perk_id)
        meta = state.ascension
        if perk is None or perk.id in meta.owned_perk_ids or meta.prestige_currency < perk.cost:
            return False
        meta.prestige_currency -= perk.cost
        meta.owned_perk_ids.add(perk.id)
        logger.info("prestige_perk_purchased", extra={"perk_id": perk.id, "cost": perk.cost})
        return True

    def multiplier(self, state: PlayerState, key: str) -> float:
        result = 1.0
        for perk_id in state.ascension.owned_perk_ids:
            perk = self._catalog.get(perk_id)
            if perk is not None:
                result *= perk.multipliers.get(key, 1.0)
        return result
