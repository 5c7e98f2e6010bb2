"""Perk unlocks driven by skill levels."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from .models import Perk, PerkType, Skill, SkillName

logger = logging.getLogger("chimera_progression.perks")


@dataclass(frozen=True, slots=True)
class PerkThreshold:
    skill: SkillName
    level: int
    perk_type: PerkType
    value: float


PERK_TABLE: tuple[PerkThreshold, ...] = (
    PerkThreshold(SkillName.STRENGTH, 5, PerkType.EXPEDITION_SUCCESS_RATE, 0.05),
    PerkThreshold(SkillName.STRENGTH, 10, PerkType.RESOURCE_GATHERING, 0.10),
    PerkThreshold(SkillName.MIND, 5, PerkType.STUDY_PRODUCTION, 0.10),
    PerkThreshold(SkillName.MIND, 10, PerkType.SKILL_XP_BONUS, 0.15),
    PerkThreshold(SkillName.JOY, 3, PerkType.DAILY_FOCUS_SLOTS, 1.0),
    PerkThreshold(SkillName.JOY, 8, PerkType.BUILDING_EFFICIENCY, 0.20),
    PerkThreshold(SkillName.VITALITY, 5, PerkType.HOMESTEAD_CAPACITY, 0.25),
    PerkThreshold(SkillName.AWARENESS, 5, PerkType.EXPEDITION_SUCCESS_RATE, 0.03),
    PerkThreshold(SkillName.FLOW, 5, PerkType.SKILL_XP_BONUS, 0.10),
    PerkThreshold(SkillName.FINANCE, 5, PerkType.RESOURCE_GATHERING, 0.05),
)


def perks_for_level(skill: Skill, table: Iterable[PerkThreshold] = PERK_TABLE) -> list[Perk]:
    """Fresh, inactive perks for every threshold the skill's current level meets."""
    return [
        Perk(type=entry.perk_type, value=entry.value)
        for entry in table
        if entry.skill == skill.name and skill.level >= entry.level
    ]


class PerkUnlockEngine:
    """Activates perks the first time a qualifying skill level is seen.

    Perks are deduplicated by type alone: once any skill has unlocked, say,
    ``SKILL_XP_BONUS``, a second skill reaching its own ``SKILL_XP_BONUS``
    threshold adds nothing.
    """

    def __init__(self, table: Iterable[PerkThreshold] = PERK_TABLE) -> None:
        self._table = tuple(table)

    def check_for_new_perks(
        self,
        skill: Skill,
        active_perks: list[Perk],
        *,
        now: datetime | None = None,
    ) -> list[Perk]:
        """Append newly qualified perks to ``active_perks`` and return them."""
        unlocked: list[Perk] = []
        for perk in perks_for_level(skill, self._table):
            if any(existing.type == perk.type for existing in active_perks):
                continue
            perk.activate(now)
            active_perks.append(perk)
            unlocked.append(perk)
            logger.info(
                "perk_unlocked",
                extra={"skill": skill.name.value, "level": skill.level, "perk_type": perk.type.value},
            )
        return unlocked


def bonus(active_perks: Iterable[Perk], perk_type: PerkType) -> float:
    return sum(perk.value for perk in active_perks if perk.is_active and perk.type == perk_type)


def daily_focus_slot_bonus(active_perks: Iterable[Perk]) -> int:
    return int(bonus(active_perks, PerkType.DAILY_FOCUS_SLOTS))
