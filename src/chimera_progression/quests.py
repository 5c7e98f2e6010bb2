"""Quest definitions and progress tracking from completed tasks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Union

from .events import GameEvent, QuestCompleted
from .models import CurrencyReward, ExperienceBurst, ItemReward, Reward, SkillName, SpecialCurrency, SpecialCurrencyReward, new_id

if TYPE_CHECKING:
    from .rewards import RewardResolver
    from .state import PlayerState

logger = logging.getLogger("chimera_progression.quests")


@dataclass(frozen=True, slots=True)
class Milestone:
    category: SkillName
    count: int


@dataclass(frozen=True, slots=True)
class Streak:
    category: SkillName
    days: int


@dataclass(frozen=True, slots=True)
class Exploration:
    categories: tuple[SkillName, ...]


QuestType = Union[Milestone, Streak, Exploration]


class QuestStatus(str, Enum):
    AVAILABLE = "available"
    ACTIVE = "active"
    COMPLETED = "completed"
    CLAIMED = "claimed"


@dataclass(slots=True)
class Quest:
    title: str
    description: str
    type: QuestType
    rewards: list[Reward] = field(default_factory=list)
    progress: int = 0
    status: QuestStatus = QuestStatus.AVAILABLE
    id: str = field(default_factory=new_id)


def objective_description(quest: Quest) -> str:
    quest_type = quest.type
    if isinstance(quest_type, Milestone):
        return f"Complete {quest_type.count} {quest_type.category.value} tasks."
    if isinstance(quest_type, Streak):
        return f"Complete a {quest_type.category.value} task for {quest_type.days} days in a row."
    names = ", ".join(category.value for category in quest_type.categories)
    return f"Complete a task from each of these categories: {names}."


def default_quests() -> list[Quest]:
    return [
        Quest(
            title="The First Step",
            description="Begin your journey by completing a single Strength task.",
            type=Milestone(SkillName.STRENGTH, 1),
            rewards=[CurrencyReward(50), ExperienceBurst(SkillName.STRENGTH, 25)],
        ),
        Quest(
            title="A Studious Mind",
            description="Knowledge is power. Complete 3 Mind tasks.",
            type=Milestone(SkillName.MIND, 3),
            rewards=[CurrencyReward(100), ExperienceBurst(SkillName.MIND, 75)],
        ),
        Quest(
            title="Joyful Beginnings",
            description="Spread a little happiness by completing 3 Joy tasks.",
            type=Milestone(SkillName.JOY, 3),
            rewards=[ItemReward("seed_serenity", 2)],
        ),
        Quest(
            title="The Consistent Hero",
            description="Form a habit by completing a Strength task for 3 days in a row.",
            type=Streak(SkillName.STRENGTH, 3),
            rewards=[ItemReward("seed_discipline", 1), SpecialCurrencyReward(SpecialCurrency.RUNES, 1)],
        ),
        Quest(
            title="Holistic Development",
            description="Show your versatility by completing one task from Strength, Mind, and Joy.",
            type=Exploration((SkillName.STRENGTH, SkillName.MIND, SkillName.JOY)),
            rewards=[ExperienceBurst(SkillName.VITALITY, 300), ItemReward("item_ancient_key", 1)],
        ),
    ]


def _target(quest_type: QuestType) -> int:
    if isinstance(quest_type, Milestone):
        return quest_type.count
    if isinstance(quest_type, Streak):
        return quest_type.days
    return len(quest_type.categories)


def _matches(quest_type: QuestType, category: SkillName) -> bool:
    if isinstance(quest_type, Exploration):
        return category in quest_type.categories
    return quest_type.category == category


class QuestTracker:
    """Advances active quests and pays out completed ones.

    Streaks count matching tasks without checking that they fell on
    consecutive days, and exploration quests count every matching task rather
    than distinct categories.
    """

    def __init__(self, resolver: RewardResolver) -> None:
        self._resolver = resolver

    @staticmethod
    def accept(quest: Quest) -> bool:
        if quest.status != QuestStatus.AVAILABLE:
            return False
        quest.status = QuestStatus.ACTIVE
        logger.info("quest_accepted", extra={"quest_id": quest.id, "title": quest.title})
        return True

    @staticmethod
    def record_task_completion(quests: list[Quest], category: SkillName) -> list[GameEvent]:
        events: list[GameEvent] = []
        for quest in quests:
            if quest.status != QuestStatus.ACTIVE or not _matches(quest.type, category):
                continue
            quest.progress += 1
            if quest.progress >= _target(quest.type):
                quest.status = QuestStatus.COMPLETED
                events.append(QuestCompleted(quest_id=quest.id, title=quest.title))
                logger.info("quest_completed", extra={"quest_id": quest.id, "title": quest.title})
        return events

    def claim_reward(self, quest: Quest, state: PlayerState) -> list[GameEvent]:
        if quest.status != QuestStatus.COMPLETED:
            return []
        quest.status = QuestStatus.CLAIMED
        events: list[GameEvent] = []
        for reward in quest.rewards:
            events.extend(self._resolver.grant(reward, state))
        logger.info("quest_claimed", extra={"quest_id": quest.id, "rewards": len(quest.rewards)})
        return events
