from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Union
from uuid import uuid4


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


class ResourceKind(str, Enum):
    RATIONS = "Rations"
    TOOLS = "Tools"
    INTEL = "Intel"
    MATERIALS = "Materials"
    CURRENCY = "Currency"
    ESSENCE = "Essence"


class SkillName(str, Enum):
    STRENGTH = "Strength"
    MIND = "Mind"
    JOY = "Joy"
    VITALITY = "Vitality"
    AWARENESS = "Awareness"
    FLOW = "Flow"
    FINANCE = "Finance"
    OTHER = "Other"
    RUNECRAFTING = "Runecrafting"


class PerkType(str, Enum):
    EXPEDITION_SUCCESS_RATE = "Expedition Success Rate"
    STUDY_PRODUCTION = "Study Production"
    DAILY_FOCUS_SLOTS = "Daily Focus Slots"
    RESOURCE_GATHERING = "Resource Gathering"
    SKILL_XP_BONUS = "Skill XP Bonus"
    BUILDING_EFFICIENCY = "Building Efficiency"
    HOMESTEAD_CAPACITY = "Homestead Capacity"


class SpecialCurrency(str, Enum):
    RUNES = "runes"
    ECHOES = "echoes"


class TaskDifficulty(str, Enum):
    TRIVIAL = "trivial"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EPIC = "epic"


class Rarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


@dataclass(slots=True)
class Skill:
    name: SkillName
    level: int = 1
    xp: int = 0
    id: str = field(default_factory=new_id)


@dataclass(slots=True)
class Perk:
    type: PerkType
    value: float
    is_active: bool = False
    unlocked_at: datetime | None = None
    id: str = field(default_factory=new_id)

    def activate(self, now: datetime | None = None) -> None:
        self.is_active = True
        self.unlocked_at = now if now is not None else utcnow()


@dataclass(slots=True)
class InventoryItem:
    item_id: str
    quantity: int


@dataclass(slots=True)
class TaskRecord:
    skill: SkillName
    amount_xp: int
    difficulty: TaskDifficulty
    date: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=new_id)


@dataclass(slots=True)
class Achievement:
    title: str
    description: str
    earned_at: datetime = field(default_factory=utcnow)


# Rewards are a closed union; every consumer matches on these four classes.


@dataclass(frozen=True, slots=True)
class CurrencyReward:
    amount: int


@dataclass(frozen=True, slots=True)
class ItemReward:
    item_id: str
    quantity: int


@dataclass(frozen=True, slots=True)
class ExperienceBurst:
    skill: SkillName
    amount: int


@dataclass(frozen=True, slots=True)
class SpecialCurrencyReward:
    currency: SpecialCurrency
    amount: int


Reward = Union[CurrencyReward, ItemReward, ExperienceBurst, SpecialCurrencyReward]


def describe_reward(reward: Reward) -> str:
    if isinstance(reward, CurrencyReward):
        return f"{reward.amount} currency"
    if isinstance(reward, ItemReward):
        return f"{reward.quantity}x {reward.item_id}"
    if isinstance(reward, ExperienceBurst):
        return f"{reward.amount} {reward.skill.value} XP"
    return f"{reward.amount} {reward.currency.value}"
