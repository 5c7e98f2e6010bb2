"""Game facade that wires the progression services around one player."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from datetime import datetime

from chimera_progression.activities import (
    Expedition,
    ExpeditionReport,
    ExpeditionService,
    ExpeditionType,
    EggService,
    HatchableEgg,
)
from chimera_progression.ascension import AscensionService
from chimera_progression.challenges import ChallengeKind, ChallengeTracker
from chimera_progression.chests import ChestResolver, TreasureChest
from chimera_progression.errors import UnknownQuestError
from chimera_progression.events import AchievementEarned, GameEvent
from chimera_progression.homestead import BuildingType, HomesteadService
from chimera_progression.leveling import xp_for_difficulty
from chimera_progression.models import Achievement, Reward, SkillName, TaskDifficulty, TaskRecord, utcnow
from chimera_progression.notifications import NotificationSink, NullNotificationSink, dispatch
from chimera_progression.perks import PerkUnlockEngine
from chimera_progression.quests import Quest, QuestTracker
from chimera_progression.rewards import RewardResolver
from chimera_progression.state import PlayerState


class GameSession:
    """Runs gameplay operations against ``state`` and forwards their events to ``sink``.

    Every operation returns the events it produced, so callers that do not
    care about the sink can still inspect what happened.
    """

    def __init__(
        self,
        state: PlayerState,
        *,
        sink: NotificationSink | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utcnow,
        logger: logging.Logger | None = None,
    ) -> None:
        self._state = state
        self._sink = sink if sink is not None else NullNotificationSink()
        self._clock = clock
        self._logger = logger if logger is not None else logging.getLogger("chimera_progression.session")

        self._perks = PerkUnlockEngine()
        self._resolver = RewardResolver(self._perks, clock=clock)
        self._expeditions = ExpeditionService(self._resolver)
        self._eggs = EggService(self._resolver)
        self._chests = ChestResolver(self._resolver, rng=rng)
        self._quests = QuestTracker(self._resolver)
        self._challenges = ChallengeTracker(self._resolver)
        self._homestead = HomesteadService()
        self._ascension = AscensionService()

    @property
    def state(self) -> PlayerState:
        return self._state

    @property
    def ascension(self) -> AscensionService:
        return self._ascension

    def _publish(self, events: list[GameEvent]) -> list[GameEvent]:
        dispatch(events, self._sink)
        return events

    def award_xp(
        self,
        skill: SkillName,
        amount: int,
        difficulty: TaskDifficulty = TaskDifficulty.EASY,
    ) -> list[GameEvent]:
        events = self._resolver.apply_xp(self._state, skill, amount)
        self._state.task_records.append(
            TaskRecord(skill=skill, amount_xp=amount, difficulty=difficulty, date=self._clock())
        )
        self._logger.info("xp_awarded", extra={"skill": skill.value, "amount": amount})
        return self._publish(events)

    def complete_task(self, skill: SkillName, difficulty: TaskDifficulty) -> list[GameEvent]:
        events = self.award_xp(skill, xp_for_difficulty(difficulty), difficulty)
        # award_xp already published its own events
        follow_up = QuestTracker.record_task_completion(self._state.quests, skill)
        follow_up += self._advance_challenges(ChallengeKind.TASKS_COMPLETED, 1)
        return events + self._publish(follow_up)

    def grant(self, rewards: list[Reward]) -> list[GameEvent]:
        return self._publish(self._resolver.grant_all(rewards, self._state))

    # chests

    def open_chest(self, chest: TreasureChest) -> tuple[list[Reward], list[GameEvent]]:
        rewards, events = self._chests.open_chest(chest, self._state)
        return rewards, self._publish(events)

    # expeditions

    def _expedition_slot(self, expedition_type: ExpeditionType) -> Expedition:
        expedition = self._state.get_expedition(expedition_type)
        if expedition is None:
            expedition = Expedition(type=expedition_type)
            self._state.expeditions.append(expedition)
        return expedition

    def start_expedition(self, expedition_type: ExpeditionType) -> bool:
        expedition = self._expedition_slot(expedition_type)
        return self._expeditions.start(expedition, self._state, now=self._clock())

    def collect_expedition(self, expedition_type: ExpeditionType) -> tuple[ExpeditionReport | None, list[GameEvent]]:
        expedition = self._state.get_expedition(expedition_type)
        if expedition is None:
            return None, []
        report, events = self._expeditions.collect_rewards(expedition, self._state, now=self._clock())
        return report, self._publish(events)

    # eggs

    def add_egg(self, egg: HatchableEgg) -> None:
        self._state.eggs.append(egg)

    def update_eggs(self, steps: int) -> list[HatchableEgg]:
        """Credit walked steps to eggs and the steps challenge; return the eggs now ready."""
        self.progress_challenge(ChallengeKind.STEPS, steps)
        return EggService.update_progress(self._state, steps)

    def hatch_egg(self, egg: HatchableEgg) -> list[GameEvent]:
        return self._publish(self._eggs.hatch(egg, self._state))

    # quests

    def get_quest(self, quest_id: str) -> Quest:
        quest = self._state.get_quest(quest_id)
        if quest is None:
            raise UnknownQuestError(f"Unknown quest id: {quest_id}")
        return quest

    def accept_quest(self, quest_id: str) -> bool:
        return QuestTracker.accept(self.get_quest(quest_id))

    def claim_quest(self, quest_id: str) -> list[GameEvent]:
        return self._publish(self._quests.claim_reward(self.get_quest(quest_id), self._state))

    # daily challenges

    def _advance_challenges(self, kind: ChallengeKind, delta: int) -> list[GameEvent]:
        board = self._state.challenges
        ChallengeTracker.roll_if_stale(board, now=self._clock())
        return ChallengeTracker.apply_progress(board, kind, delta)

    def progress_challenge(self, kind: ChallengeKind, delta: int = 1) -> list[GameEvent]:
        return self._publish(self._advance_challenges(kind, delta))

    def redeem_challenges(self) -> list[GameEvent]:
        return self._publish(self._challenges.redeem_completed(self._state.challenges, self._state))

    # homestead

    def tick_homestead(self) -> list[GameEvent]:
        return self._publish(self._homestead.tick(self._state, now=self._clock()))

    def upgrade_building(self, building_type: BuildingType) -> bool:
        building = self._homestead.get_building(self._state, building_type)
        if building is None:
            return False
        return self._homestead.upgrade(self._state, building)

    # ascension

    def ascend(self) -> int:
        return self._ascension.ascend(self._state, now=self._clock())

    def purchase_prestige_perk(self, perk_id: str) -> bool:
        return self._ascension.purchase(self._state, perk_id)

    def record_achievement(self, title: str, description: str) -> list[GameEvent]:
        if any(existing.title == title for existing in self._state.achievements):
            return []
        self._state.achievements.append(Achievement(title=title, description=description, earned_at=self._clock()))
        self._logger.info("achievement_earned", extra={"title": title})
        return self._publish([AchievementEarned(title=title, description=description)])
