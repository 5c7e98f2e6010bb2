"""Applies abstract rewards to the player aggregate."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING

from .events import GameEvent, ItemGained, LevelUp, PerkUnlocked, ResourceGained, SpecialCurrencyGained, XpGained
from .leveling import add_xp
from .models import (
    CurrencyReward,
    ExperienceBurst,
    ItemReward,
    ResourceKind,
    Reward,
    SkillName,
    SpecialCurrencyReward,
    utcnow,
)
from .perks import PerkUnlockEngine

if TYPE_CHECKING:
    from .state import PlayerState

logger = logging.getLogger("chimera_progression.rewards")


class RewardResolver:
    """Turns :data:`~chimera_progression.models.Reward` values into ledger mutations.

    Every call applies its reward exactly once; retrying a call grants again.
    """

    def __init__(
        self,
        perk_engine: PerkUnlockEngine | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._perk_engine = perk_engine if perk_engine is not None else PerkUnlockEngine()
        self._clock = clock

    def grant(self, reward: Reward, state: PlayerState) -> list[GameEvent]:
        if isinstance(reward, CurrencyReward):
            state.ledger.add(ResourceKind.CURRENCY, reward.amount)
            events: list[GameEvent] = [ResourceGained(kind=ResourceKind.CURRENCY, amount=reward.amount)]
        elif isinstance(reward, ItemReward):
            state.inventory.add(reward.item_id, reward.quantity)
            events = [ItemGained(item_id=reward.item_id, quantity=reward.quantity)]
        elif isinstance(reward, ExperienceBurst):
            events = self.apply_xp(state, reward.skill, reward.amount)
        elif isinstance(reward, SpecialCurrencyReward):
            current = state.special_currency(reward.currency)
            state.special_currencies[reward.currency] = current + reward.amount
            events = [SpecialCurrencyGained(currency=reward.currency, amount=reward.amount)]
        else:
            raise TypeError(f"Unsupported reward: {reward!r}")

        logger.debug("reward_granted", extra={"reward": repr(reward), "player_id": state.id})
        return events

    def grant_all(self, rewards: list[Reward], state: PlayerState) -> list[GameEvent]:
        events: list[GameEvent] = []
        for reward in rewards:
            events.extend(self.grant(reward, state))
        return events

    def grant_resources(self, bundle: Mapping[ResourceKind, int], state: PlayerState) -> list[GameEvent]:
        events: list[GameEvent] = []
        for kind, amount in bundle.items():
            state.ledger.add(kind, amount)
            events.append(ResourceGained(kind=kind, amount=amount))
        return events

    def apply_xp(self, state: PlayerState, skill_name: SkillName, amount: int) -> list[GameEvent]:
        """Level a skill, unlock any perks it now qualifies for, and report what happened."""
        skill = state.ensure_skill(skill_name)
        levels_gained = add_xp(skill, amount)
        state.total_power_earned += amount

        if not levels_gained:
            return [XpGained(skill=skill_name, amount=amount, level=skill.level)]

        logger.info(
            "skill_level_up",
            extra={"skill": skill_name.value, "level": skill.level, "levels_gained": levels_gained},
        )
        events: list[GameEvent] = [LevelUp(skill=skill_name, new_level=skill.level)]
        for perk in self._perk_engine.check_for_new_perks(skill, state.perks, now=self._clock()):
            events.append(PerkUnlocked(perk_type=perk.type, value=perk.value))
        return events
