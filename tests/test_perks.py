from datetime import datetime, timezone

from chimera_progression.models import Perk, PerkType, Skill, SkillName
from chimera_progression.perks import PerkUnlockEngine, bonus, daily_focus_slot_bonus, perks_for_level

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_unlocks_every_threshold_the_level_meets() -> None:
    engine = PerkUnlockEngine()
    active: list[Perk] = []

    unlocked = engine.check_for_new_perks(Skill(name=SkillName.STRENGTH, level=10), active, now=NOW)

    assert {perk.type for perk in unlocked} == {PerkType.EXPEDITION_SUCCESS_RATE, PerkType.RESOURCE_GATHERING}
    assert active == unlocked
    assert all(perk.is_active and perk.unlocked_at == NOW for perk in unlocked)


def test_below_threshold_unlocks_nothing() -> None:
    active: list[Perk] = []

    assert PerkUnlockEngine().check_for_new_perks(Skill(name=SkillName.MIND, level=4), active) == []
    assert active == []


def test_same_perk_type_is_never_unlocked_twice_even_from_another_skill() -> None:
    engine = PerkUnlockEngine()
    active: list[Perk] = []

    engine.check_for_new_perks(Skill(name=SkillName.STRENGTH, level=5), active)
    engine.check_for_new_perks(Skill(name=SkillName.STRENGTH, level=6), active)
    second = engine.check_for_new_perks(Skill(name=SkillName.AWARENESS, level=5), active)

    assert second == []
    types = [perk.type for perk in active]
    assert types.count(PerkType.EXPEDITION_SUCCESS_RATE) == 1
    assert active[0].value == 0.05


def test_perks_for_level_builds_inactive_candidates() -> None:
    candidates = perks_for_level(Skill(name=SkillName.JOY, level=8))

    assert [perk.type for perk in candidates] == [PerkType.DAILY_FOCUS_SLOTS, PerkType.BUILDING_EFFICIENCY]
    assert not any(perk.is_active for perk in candidates)


def test_bonus_counts_only_active_perks() -> None:
    active = Perk(type=PerkType.DAILY_FOCUS_SLOTS, value=1.0, is_active=True)
    inactive = Perk(type=PerkType.DAILY_FOCUS_SLOTS, value=1.0)

    assert bonus([active, inactive], PerkType.DAILY_FOCUS_SLOTS) == 1.0
    assert daily_focus_slot_bonus([active, inactive]) == 1
