"""Domain events emitted by state transitions.

Operations return these instead of notifying anyone directly; a
:class:`~chimera_progression.notifications.NotificationSink` decides what the
player actually sees.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Union

from .models import PerkType, ResourceKind, SkillName, SpecialCurrency


@dataclass(frozen=True, slots=True)
class XpGained:
    skill: SkillName
    amount: int
    level: int


@dataclass(frozen=True, slots=True)
class LevelUp:
    skill: SkillName
    new_level: int


@dataclass(frozen=True, slots=True)
class PerkUnlocked:
    perk_type: PerkType
    value: float


@dataclass(frozen=True, slots=True)
class ResourceGained:
    kind: ResourceKind
    amount: int


@dataclass(frozen=True, slots=True)
class ItemGained:
    item_id: str
    quantity: int


@dataclass(frozen=True, slots=True)
class SpecialCurrencyGained:
    currency: SpecialCurrency
    amount: int


@dataclass(frozen=True, slots=True)
class QuestCompleted:
    quest_id: str
    title: str


@dataclass(frozen=True, slots=True)
class AchievementEarned:
    title: str
    description: str


@dataclass(frozen=True, slots=True)
class ExpeditionCompleted:
    expedition_id: str
    expedition_type: str


@dataclass(frozen=True, slots=True)
class ChallengeCompleted:
    challenge_id: str
    kind: str


GameEvent = Union[
    XpGained,
    LevelUp,
    PerkUnlocked,
    ResourceGained,
    ItemGained,
    SpecialCurrencyGained,
    QuestCompleted,
    AchievementEarned,
    ExpeditionCompleted,
    ChallengeCompleted,
]

_EVENT_NAMES: dict[type, str] = {
    XpGained: "xp_gained",
    LevelUp: "level_up",
    PerkUnlocked: "perk_unlocked",
    ResourceGained: "resource_gained",
    ItemGained: "item_gained",
    SpecialCurrencyGained: "special_currency_gained",
    QuestCompleted: "quest_completed",
    AchievementEarned: "achievement_earned",
    ExpeditionCompleted: "expedition_completed",
    ChallengeCompleted: "challenge_completed",
}


def event_name(event: GameEvent) -> str:
    return _EVENT_NAMES[type(event)]


def event_payload(event: GameEvent) -> dict[str, Any]:
    """Flatten an event into JSON-friendly primitives."""
    payload = asdict(event)
    for key, value in payload.items():
        if isinstance(value, Enum):
            payload[key] = value.value
    return payload
