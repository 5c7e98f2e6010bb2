from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from chimera_progression.activities import ExpeditionService, ExpeditionType, HatchableEgg
from chimera_progression.errors import CorruptStateError, IncompatibleBackupVersionError, UnknownVariantError
from chimera_progression.models import ExperienceBurst, ResourceKind, SkillName, SpecialCurrency, SpecialCurrencyReward
from chimera_progression.quests import QuestTracker
from chimera_progression.rewards import RewardResolver
from chimera_progression.state import new_player
from chimera_progression.storage import (
    InMemoryStateStore,
    JsonStateStore,
    backup_info,
    decode_state,
    encode_state,
    export_backup,
    import_backup,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _played_state():
    state = new_player("Saver", now=T0)
    resolver = RewardResolver()
    resolver.apply_xp(state, SkillName.STRENGTH, 1_000)
    resolver.grant(SpecialCurrencyReward(SpecialCurrency.RUNES, 2), state)
    ExpeditionService(resolver).start(state.get_expedition(ExpeditionType.FOREST_SCOUT), state, now=T0)
    QuestTracker.accept(state.quests[0])
    state.eggs.append(HatchableEgg(egg_type="ember", required_steps=50, rewards=[ExperienceBurst(SkillName.JOY, 5)]))
    state.ascension.owned_perk_ids.add("idle_1")
    return state


def test_json_store_persists_full_aggregate(tmp_path: Path) -> None:
    store = JsonStateStore(tmp_path / "nested" / "state.json")
    assert store.load() is None

    state = _played_state()
    store.save(state)
    loaded = store.load()

    assert loaded is not None
    assert encode_state(loaded) == encode_state(state)
    assert loaded.get_skill(SkillName.STRENGTH).level == 5
    assert loaded.get_expedition(ExpeditionType.FOREST_SCOUT).end_time == T0 + timedelta(minutes=15)
    assert loaded.ascension.owned_perk_ids == {"idle_1"}


def test_in_memory_store_returns_independent_copies() -> None:
    store = InMemoryStateStore()
    assert store.load() is None

    state = new_player("Saver", now=T0)
    store.save(state)
    state.ledger.add(ResourceKind.CURRENCY, 50)

    assert store.load().ledger.as_dict() != state.ledger.as_dict()


def test_unknown_enum_value_raises_instead_of_defaulting() -> None:
    payload = encode_state(new_player("Saver", now=T0))
    payload["skills"][0]["name"] = "Necromancy"

    with pytest.raises(UnknownVariantError) as excinfo:
        decode_state(payload)

    assert excinfo.value.type_name == "SkillName"
    assert excinfo.value.raw == "Necromancy"


def test_unknown_reward_tag_raises() -> None:
    payload = encode_state(new_player("Saver", now=T0))
    payload["quests"][0]["rewards"][0]["kind"] = "mystery"

    with pytest.raises(UnknownVariantError):
        decode_state(payload)


def test_json_store_reraises_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError):
        JsonStateStore(path).load()


def test_backup_round_trip_and_info() -> None:
    state = _played_state()
    payload = export_backup(state, now=T0)

    restored = import_backup(payload)
    info = backup_info(payload)

    assert encode_state(restored) == encode_state(state)
    assert info.version == "1.0"
    assert info.timestamp == T0
    expected = 1 + len(state.skills) + len(state.ledger.as_dict()) + len(state.buildings) + len(state.expeditions)
    assert info.record_count == expected


def test_import_rejects_other_versions() -> None:
    envelope = json.loads(export_backup(new_player("Saver", now=T0), now=T0))
    envelope["version"] = "2.0"

    with pytest.raises(IncompatibleBackupVersionError):
        import_backup(json.dumps(envelope))


def test_wrong_shape_raises_corrupt_state_error() -> None:
    with pytest.raises(CorruptStateError):
        decode_state([])  # type: ignore[arg-type]

    payload = encode_state(new_player("Saver", now=T0))
    del payload["id"]
    with pytest.raises(CorruptStateError):
        decode_state(payload)


def test_json_store_reraises_wrong_shape(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(CorruptStateError):
        JsonStateStore(path).load()


def test_import_of_empty_state_is_reported_as_corrupt() -> None:
    envelope = {"version": "1.0", "timestamp": "2024-01-01T00:00:00+00:00", "state": {}}

    with pytest.raises(CorruptStateError):
        import_backup(json.dumps(envelope))


def test_challenge_board_survives_round_trip() -> None:
    state = new_player("Saver", now=T0)
    state.challenges.challenges[0].progress = 3
    state.challenges.streak = 4

    loaded = decode_state(encode_state(state))

    assert loaded.challenges.streak == 4
    assert loaded.challenges.challenges[0].progress == 3
    assert loaded.challenges.last_rolled == T0
