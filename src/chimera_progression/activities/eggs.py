"""Step-gated eggs.

Eggs accumulate walked steps. Reaching ``required_steps`` makes an egg ready,
but it never hatches by itself: the player has to call :meth:`EggService.hatch`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chimera_progression.events import GameEvent
from chimera_progression.models import Reward, new_id

if TYPE_CHECKING:
    from chimera_progression.rewards import RewardResolver
    from chimera_progression.state import PlayerState

logger = logging.getLogger("chimera_progression.activities.eggs")


@dataclass(slots=True)
class HatchableEgg:
    egg_type: str
    required_steps: int
    rewards: list[Reward] = field(default_factory=list)
    current_steps: int = 0
    hatched: bool = False
    id: str = field(default_factory=new_id)

    @property
    def is_ready_to_hatch(self) -> bool:
        return self.current_steps >= self.required_steps

    def add_steps(self, steps: int) -> None:
        if self.hatched:
            return
        self.current_steps += steps


class EggService:
    def __init__(self, resolver: RewardResolver) -> None:
        self._resolver = resolver

    @staticmethod
    def update_progress(state: PlayerState, steps: int) -> list[HatchableEgg]:
        """Credit ``steps`` to every unhatched egg; return the eggs now ready."""
        ready: list[HatchableEgg] = []
        for egg in state.eggs:
            if egg.hatched:
                continue
            egg.add_steps(steps)
            if egg.is_ready_to_hatch:
                ready.append(egg)
        return ready

    def hatch(self, egg: HatchableEgg, state: PlayerState) -> list[GameEvent]:
        if egg.hatched or not egg.is_ready_to_hatch:
            return []

        egg.hatched = True
        events: list[GameEvent] = []
        for reward in egg.rewards:
            events.extend(self._resolver.grant(reward, state))
        state.eggs = [candidate for candidate in state.eggs if candidate.id != egg.id]
        logger.info("egg_hatched", extra={"egg_id": egg.id, "egg_type": egg.egg_type, "rewards": len(egg.rewards)})
        return events
