"""Daily challenges: a small set of targets rolled each day, redeemed for rewards.

Progress is clamped to the target. Redeeming pays every finished, unredeemed
challenge once and bumps the streak when at least one was paid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from .events import ChallengeCompleted, GameEvent
from .models import CurrencyReward, ItemReward, Reward, new_id, utcnow

if TYPE_CHECKING:
    from .rewards import RewardResolver
    from .state import PlayerState

logger = logging.getLogger("chimera_progression.challenges")


class ChallengeKind(str, Enum):
    TASKS_COMPLETED = "tasksCompleted"
    STEPS = "steps"
    CRAFTING = "crafting"
    QUEST_BOSS = "questBoss"


@dataclass(slots=True)
class DailyChallenge:
    kind: ChallengeKind
    target: int
    rewards: list[Reward] = field(default_factory=list)
    progress: int = 0
    redeemed: bool = False
    id: str = field(default_factory=new_id)

    @property
    def is_done(self) -> bool:
        return self.progress >= self.target


@dataclass(slots=True)
class ChallengeBoard:
    challenges: list[DailyChallenge] = field(default_factory=list)
    streak: int = 0
    last_rolled: datetime | None = None


def default_daily_challenges() -> list[DailyChallenge]:
    return [
        DailyChallenge(ChallengeKind.TASKS_COMPLETED, 5, [CurrencyReward(50)]),
        DailyChallenge(ChallengeKind.STEPS, 4_000, [ItemReward("streak_token", 1)]),
        DailyChallenge(ChallengeKind.CRAFTING, 10, [CurrencyReward(75)]),
    ]


class ChallengeTracker:
    def __init__(self, resolver: RewardResolver) -> None:
        self._resolver = resolver

    @staticmethod
    def roll_new_set(board: ChallengeBoard, *, now: datetime | None = None) -> None:
        board.challenges = default_daily_challenges()
        board.last_rolled = now if now is not None else utcnow()
        logger.info("challenges_rolled", extra={"count": len(board.challenges)})

    @staticmethod
    def roll_if_stale(board: ChallengeBoard, *, now: datetime | None = None) -> bool:
        """Roll a fresh set when the board was last rolled on an earlier day."""
        now = now if now is not None else utcnow()
        if board.last_rolled is not None and board.last_rolled.date() >= now.date():
            return False
        ChallengeTracker.roll_new_set(board, now=now)
        return True

    @staticmethod
    def apply_progress(board: ChallengeBoard, kind: ChallengeKind, delta: int = 1) -> list[GameEvent]:
        events: list[GameEvent] = []
        for challenge in board.challenges:
            if challenge.kind != kind or challenge.is_done:
                continue
            challenge.progress = min(challenge.progress + delta, challenge.target)
            if challenge.is_done:
                events.append(ChallengeCompleted(challenge_id=challenge.id, kind=kind.value))
        return events

    def redeem_completed(self, board: ChallengeBoard, state: PlayerState) -> list[GameEvent]:
        events: list[GameEvent] = []
        redeemed = 0
        for challenge in board.challenges:
            if not challenge.is_done or challenge.redeemed:
                continue
            challenge.redeemed = True
            events.extend(self._resolver.grant_all(challenge.rewards, state))
            redeemed += 1
        if redeemed:
            board.streak += 1
            logger.info("challenges_redeemed", extra={"redeemed": redeemed, "streak": board.streak})
        return events
