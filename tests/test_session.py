from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from chimera_progression.activities import ExpeditionType, HatchableEgg
from chimera_progression.challenges import ChallengeKind
from chimera_progression.chests import get_chest
from chimera_progression.errors import UnknownQuestError
from chimera_progression.events import (
    AchievementEarned,
    ChallengeCompleted,
    ExpeditionCompleted,
    LevelUp,
    QuestCompleted,
    XpGained,
)
from chimera_progression.homestead import BuildingType
from chimera_progression.models import ItemReward, ResourceKind, SkillName, TaskDifficulty
from chimera_progression.notifications import QueueNotificationSink
from chimera_progression.session import GameSession
from chimera_progression.state import new_player


class StubClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def _session(clock: StubClock | None = None) -> tuple[GameSession, QueueNotificationSink, StubClock]:
    clock = clock if clock is not None else StubClock(datetime(2024, 1, 1, tzinfo=timezone.utc))
    sink = QueueNotificationSink()
    session = GameSession(new_player("Tester", now=clock()), sink=sink, rng=random.Random(3), clock=clock)
    return session, sink, clock


def test_new_player_seed_state() -> None:
    state = new_player("Tester")

    assert {skill.name for skill in state.skills} == set(SkillName)
    assert all(skill.level == 1 and skill.xp == 0 for skill in state.skills)
    assert state.ledger.as_dict() == {
        ResourceKind.RATIONS: 10,
        ResourceKind.TOOLS: 5,
        ResourceKind.INTEL: 0,
        ResourceKind.MATERIALS: 0,
        ResourceKind.CURRENCY: 100,
        ResourceKind.ESSENCE: 0,
    }
    assert sorted(exp.type for exp in state.expeditions) == sorted(ExpeditionType)
    assert [b.type for b in state.buildings] == list(BuildingType)
    assert len(state.quests) == 5


def test_award_xp_emits_events_and_records_task() -> None:
    session, sink, _ = _session()

    small = session.award_xp(SkillName.MIND, 30)
    big = session.award_xp(SkillName.MIND, 220)

    assert small == [XpGained(skill=SkillName.MIND, amount=30, level=1)]
    assert big == [LevelUp(skill=SkillName.MIND, new_level=2)]
    assert sink.pending() == small + big
    assert [record.amount_xp for record in session.state.task_records] == [30, 220]
    assert session.state.total_power_earned == 250


def test_complete_task_advances_accepted_quest() -> None:
    session, sink, _ = _session()
    first_step = session.state.quests[0]
    session.accept_quest(first_step.id)

    events = session.complete_task(SkillName.STRENGTH, TaskDifficulty.HARD)

    assert events[0] == XpGained(skill=SkillName.STRENGTH, amount=60, level=1)
    assert events[-1] == QuestCompleted(quest_id=first_step.id, title="The First Step")
    assert sink.pending() == events

    claimed = session.claim_quest(first_step.id)
    assert len(claimed) == 2
    assert session.state.currency == 150


def test_unknown_quest_id_raises() -> None:
    session, _, _ = _session()

    with pytest.raises(UnknownQuestError):
        session.accept_quest("nope")


def test_expedition_lifecycle_uses_session_clock() -> None:
    session, sink, clock = _session()

    assert session.start_expedition(ExpeditionType.FOREST_SCOUT) is True
    assert session.start_expedition(ExpeditionType.FOREST_SCOUT) is False

    clock.advance(seconds=899)
    assert session.collect_expedition(ExpeditionType.FOREST_SCOUT) == (None, [])

    clock.advance(seconds=1)
    report, events = session.collect_expedition(ExpeditionType.FOREST_SCOUT)
    assert report is not None
    assert isinstance(events[-1], ExpeditionCompleted)
    assert sink.pending()[-1] == events[-1]

    assert session.start_expedition(ExpeditionType.FOREST_SCOUT) is True


def test_open_chest_without_funds_emits_nothing() -> None:
    session, sink, _ = _session()

    rewards, events = session.open_chest(get_chest("chest_common"))

    assert rewards == [] and events == []
    assert len(sink) == 0
    assert session.state.currency == 100


def test_eggs_and_homestead_pass_through() -> None:
    session, _, clock = _session()
    egg = HatchableEgg(egg_type="ember", required_steps=100, rewards=[ItemReward("pet_ember", 1)])
    session.add_egg(egg)

    assert session.update_eggs(100) == [egg]
    assert len(session.hatch_egg(egg)) == 1

    clock.advance(minutes=5)
    assert session.tick_homestead()
    assert session.upgrade_building(BuildingType.FARM) is True


def test_ascend_and_prestige_purchase() -> None:
    session, _, _ = _session()
    session.award_xp(SkillName.FLOW, 10_000)

    assert session.ascend() == 10
    assert session.purchase_prestige_perk("craft_1") is True
    assert session.ascension.multiplier(session.state, "craftSpeed") == 1.10


def test_achievements_are_recorded_once() -> None:
    session, _, _ = _session()

    assert session.record_achievement("Explorer", "Visit every region") == [
        AchievementEarned(title="Explorer", description="Visit every region")
    ]
    assert session.record_achievement("Explorer", "Visit every region") == []
    assert len(session.state.achievements) == 1


def test_empty_queue_sink_still_receives_events() -> None:
    sink = QueueNotificationSink()
    session = GameSession(new_player("Tester"), sink=sink)

    events = session.award_xp(SkillName.MIND, 30)

    assert sink.pending() == events


def test_tasks_and_steps_drive_daily_challenges() -> None:
    session, sink, _ = _session()

    for _ in range(5):
        events = session.complete_task(SkillName.JOY, TaskDifficulty.TRIVIAL)
    assert isinstance(events[-1], ChallengeCompleted)
    assert events[-1].kind == "tasksCompleted"

    session.update_eggs(4_000)
    assert isinstance(sink.pending()[-1], ChallengeCompleted)
    assert sink.pending()[-1].kind == "steps"

    redeemed = session.redeem_challenges()
    assert len(redeemed) == 2
    assert session.state.challenges.streak == 1
    assert session.state.inventory.quantity("streak_token") == 1


def test_challenges_roll_over_on_a_new_day() -> None:
    session, _, clock = _session()
    session.complete_task(SkillName.JOY, TaskDifficulty.TRIVIAL)

    clock.advance(days=1)
    session.progress_challenge(ChallengeKind.CRAFTING)

    board = session.state.challenges
    assert board.last_rolled == clock()
    assert [c.progress for c in board.challenges] == [0, 0, 1]
