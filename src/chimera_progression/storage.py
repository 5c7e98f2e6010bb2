"""Persistence for the player aggregate and the backup envelope format."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel

from chimera_progression.activities import Expedition, ExpeditionReport, ExpeditionType, HatchableEgg
from chimera_progression.ascension import AscensionState
from chimera_progression.challenges import ChallengeBoard, ChallengeKind, DailyChallenge
from chimera_progression.errors import ChimeraError, CorruptStateError, IncompatibleBackupVersionError, UnknownVariantError
from chimera_progression.homestead import Building, BuildingType
from chimera_progression.ledger import Inventory, ResourceLedger
from chimera_progression.models import (
    Achievement,
    CurrencyReward,
    ExperienceBurst,
    ItemReward,
    Perk,
    PerkType,
    ResourceKind,
    Reward,
    Skill,
    SkillName,
    SpecialCurrency,
    SpecialCurrencyReward,
    TaskDifficulty,
    TaskRecord,
    utcnow,
)
from chimera_progression.quests import Exploration, Milestone, Quest, QuestStatus, QuestType, Streak
from chimera_progression.state import PlayerState

BACKUP_VERSION = "1.0"

_E = TypeVar("_E", bound=Enum)


class StateStore(Protocol):
    """Persistence contract for the player aggregate."""

    def load(self) -> PlayerState | None:
        """Return the saved player, or ``None`` when nothing was saved yet."""

    def save(self, state: PlayerState) -> None:
        """Persist the whole aggregate."""


class InMemoryStateStore:
    def __init__(self, state: PlayerState | None = None) -> None:
        self._payload = encode_state(state) if state is not None else None

    def load(self) -> PlayerState | None:
        if self._payload is None:
            return None
        return decode_state(self._payload)

    def save(self, state: PlayerState) -> None:
        self._payload = encode_state(state)


class JsonStateStore:
    """Single-file JSON persistence."""

    def __init__(self, file_path: str | Path, *, logger: logging.Logger | None = None) -> None:
        self._path = Path(file_path)
        self._logger = logger if logger is not None else logging.getLogger("chimera_progression.storage")

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> PlayerState | None:
        if not self._path.exists():
            return None
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
            return decode_state(payload)
        except (OSError, ValueError, ChimeraError) as exc:
            self._logger.error("state_load_failed", extra={"path": str(self._path), "error": str(exc)})
            raise

    def save(self, state: PlayerState) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", encoding="utf-8") as handle:
                json.dump(encode_state(state), handle, indent=2)
        except OSError as exc:
            self._logger.error("state_save_failed", extra={"path": str(self._path), "error": str(exc)})
            raise
        self._logger.debug("state_saved", extra={"path": str(self._path), "player_id": state.id})


# Codec


def _decode_enum(enum_cls: type[_E], raw: Any) -> _E:
    try:
        return enum_cls(raw)
    except ValueError:
        raise UnknownVariantError(enum_cls.__name__, raw) from None


def _encode_time(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _decode_time(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw is not None else None


def encode_reward(reward: Reward) -> dict[str, Any]:
    if isinstance(reward, CurrencyReward):
        return {"kind": "currency", "amount": reward.amount}
    if isinstance(reward, ItemReward):
        return {"kind": "item", "item_id": reward.item_id, "quantity": reward.quantity}
    if isinstance(reward, ExperienceBurst):
        return {"kind": "experience", "skill": reward.skill.value, "amount": reward.amount}
    if isinstance(reward, SpecialCurrencyReward):
        return {"kind": "special_currency", "currency": reward.currency.value, "amount": reward.amount}
    raise TypeError(f"Unsupported reward: {reward!r}")


def decode_reward(payload: dict[str, Any]) -> Reward:
    kind = payload.get("kind")
    if kind == "currency":
        return CurrencyReward(payload["amount"])
    if kind == "item":
        return ItemReward(payload["item_id"], payload["quantity"])
    if kind == "experience":
        return ExperienceBurst(_decode_enum(SkillName, payload["skill"]), payload["amount"])
    if kind == "special_currency":
        return SpecialCurrencyReward(_decode_enum(SpecialCurrency, payload["currency"]), payload["amount"])
    raise UnknownVariantError("Reward", kind)


def _encode_quest_type(quest_type: QuestType) -> dict[str, Any]:
    if isinstance(quest_type, Milestone):
        return {"kind": "milestone", "category": quest_type.category.value, "count": quest_type.count}
    if isinstance(quest_type, Streak):
        return {"kind": "streak", "category": quest_type.category.value, "days": quest_type.days}
    return {"kind": "exploration", "categories": [category.value for category in quest_type.categories]}


def _decode_quest_type(payload: dict[str, Any]) -> QuestType:
    kind = payload.get("kind")
    if kind == "milestone":
        return Milestone(_decode_enum(SkillName, payload["category"]), payload["count"])
    if kind == "streak":
        return Streak(_decode_enum(SkillName, payload["category"]), payload["days"])
    if kind == "exploration":
        return Exploration(tuple(_decode_enum(SkillName, raw) for raw in payload["categories"]))
    raise UnknownVariantError("QuestType", kind)


def _resource_map(raw: dict[str, int]) -> dict[ResourceKind, int]:
    return {_decode_enum(ResourceKind, kind): amount for kind, amount in raw.items()}


def encode_state(state: PlayerState) -> dict[str, Any]:
    return {
        "id": state.id,
        "name": state.name,
        "total_power_earned": state.total_power_earned,
        "resources": {kind.value: amount for kind, amount in state.ledger},
        "inventory": state.inventory.as_dict(),
        "special_currencies": {currency.value: amount for currency, amount in state.special_currencies.items()},
        "skills": [{"id": s.id, "name": s.name.value, "level": s.level, "xp": s.xp} for s in state.skills],
        "perks": [
            {
                "id": perk.id,
                "type": perk.type.value,
                "value": perk.value,
                "is_active": perk.is_active,
                "unlocked_at": _encode_time(perk.unlocked_at),
            }
            for perk in state.perks
        ],
        "expeditions": [
            {
                "id": exp.id,
                "type": exp.type.value,
                "start_time": _encode_time(exp.start_time),
                "end_time": _encode_time(exp.end_time),
                "is_active": exp.is_active,
                "is_completed": exp.is_completed,
            }
            for exp in state.expeditions
        ],
        "expedition_reports": [
            {
                "id": report.id,
                "expedition_id": report.expedition_id,
                "expedition_type": report.expedition_type.value,
                "rewards": {kind.value: amount for kind, amount in report.rewards.items()},
                "completed_at": _encode_time(report.completed_at),
            }
            for report in state.expedition_reports
        ],
        "eggs": [
            {
                "id": egg.id,
                "egg_type": egg.egg_type,
                "required_steps": egg.required_steps,
                "current_steps": egg.current_steps,
                "hatched": egg.hatched,
                "rewards": [encode_reward(reward) for reward in egg.rewards],
            }
            for egg in state.eggs
        ],
        "quests": [
            {
                "id": quest.id,
                "title": quest.title,
                "description": quest.description,
                "type": _encode_quest_type(quest.type),
                "rewards": [encode_reward(reward) for reward in quest.rewards],
                "progress": quest.progress,
                "status": quest.status.value,
            }
            for quest in state.quests
        ],
        "buildings": [
            {
                "id": building.id,
                "type": building.type.value,
                "level": building.level,
                "last_production_time": _encode_time(building.last_production_time),
            }
            for building in state.buildings
        ],
        "task_records": [
            {
                "id": record.id,
                "skill": record.skill.value,
                "amount_xp": record.amount_xp,
                "difficulty": record.difficulty.value,
                "date": _encode_time(record.date),
            }
            for record in state.task_records
        ],
        "achievements": [
            {"title": a.title, "description": a.description, "earned_at": _encode_time(a.earned_at)}
            for a in state.achievements
        ],
        "ascension": {
            "prestige_currency": state.ascension.prestige_currency,
            "owned_perk_ids": sorted(state.ascension.owned_perk_ids),
            "ascensions": state.ascension.ascensions,
        },
        "challenges": _encode_challenges(state.challenges),
    }


def _encode_challenges(board: ChallengeBoard) -> dict[str, Any]:
    return {
        "streak": board.streak,
        "last_rolled": _encode_time(board.last_rolled),
        "challenges": [
            {
                "id": challenge.id,
                "kind": challenge.kind.value,
                "target": challenge.target,
                "progress": challenge.progress,
                "redeemed": challenge.redeemed,
                "rewards": [encode_reward(reward) for reward in challenge.rewards],
            }
            for challenge in board.challenges
        ],
    }


def _decode_challenges(payload: dict[str, Any]) -> ChallengeBoard:
    return ChallengeBoard(
        streak=payload.get("streak", 0),
        last_rolled=_decode_time(payload.get("last_rolled")),
        challenges=[
            DailyChallenge(
                kind=_decode_enum(ChallengeKind, raw["kind"]),
                target=raw["target"],
                rewards=[decode_reward(reward) for reward in raw.get("rewards", [])],
                progress=raw["progress"],
                redeemed=raw.get("redeemed", False),
                id=raw["id"],
            )
            for raw in payload.get("challenges", [])
        ],
    )


def decode_state(payload: dict[str, Any]) -> PlayerState:
    """Rebuild a :class:`PlayerState` from :func:`encode_state` output.

    Unknown enum values raise :class:`UnknownVariantError`; a payload with the
    wrong shape raises :class:`CorruptStateError`.
    """
    try:
        return _decode_state(payload)
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        raise CorruptStateError(f"Stored state is malformed: {exc!r}") from exc


def _decode_state(payload: dict[str, Any]) -> PlayerState:
    ascension = payload.get("ascension") or {}
    return PlayerState(
        id=payload["id"],
        name=payload["name"],
        total_power_earned=payload.get("total_power_earned", 0),
        ledger=ResourceLedger(_resource_map(payload.get("resources", {}))),
        inventory=Inventory(payload.get("inventory", {})),
        special_currencies={
            _decode_enum(SpecialCurrency, raw): amount for raw, amount in payload.get("special_currencies", {}).items()
        },
        skills=[
            Skill(name=_decode_enum(SkillName, raw["name"]), level=raw["level"], xp=raw["xp"], id=raw["id"])
            for raw in payload.get("skills", [])
        ],
        perks=[
            Perk(
                type=_decode_enum(PerkType, raw["type"]),
                value=raw["value"],
                is_active=raw["is_active"],
                unlocked_at=_decode_time(raw.get("unlocked_at")),
                id=raw["id"],
            )
            for raw in payload.get("perks", [])
        ],
        expeditions=[
            Expedition(
                type=_decode_enum(ExpeditionType, raw["type"]),
                start_time=_decode_time(raw.get("start_time")),
                end_time=_decode_time(raw.get("end_time")),
                is_active=raw["is_active"],
                is_completed=raw["is_completed"],
                id=raw["id"],
            )
            for raw in payload.get("expeditions", [])
        ],
        expedition_reports=[
            ExpeditionReport(
                expedition_id=raw["expedition_id"],
                expedition_type=_decode_enum(ExpeditionType, raw["expedition_type"]),
                rewards=_resource_map(raw["rewards"]),
                completed_at=_decode_time(raw["completed_at"]),
                id=raw["id"],
            )
            for raw in payload.get("expedition_reports", [])
        ],
        eggs=[
            HatchableEgg(
                egg_type=raw["egg_type"],
                required_steps=raw["required_steps"],
                rewards=[decode_reward(reward) for reward in raw.get("rewards", [])],
                current_steps=raw["current_steps"],
                hatched=raw["hatched"],
                id=raw["id"],
            )
            for raw in payload.get("eggs", [])
        ],
        quests=[
            Quest(
                title=raw["title"],
                description=raw["description"],
                type=_decode_quest_type(raw["type"]),
                rewards=[decode_reward(reward) for reward in raw.get("rewards", [])],
                progress=raw["progress"],
                status=_decode_enum(QuestStatus, raw["status"]),
                id=raw["id"],
            )
            for raw in payload.get("quests", [])
        ],
        buildings=[
            Building(
                type=_decode_enum(BuildingType, raw["type"]),
                level=raw["level"],
                last_production_time=_decode_time(raw["last_production_time"]),
                id=raw["id"],
            )
            for raw in payload.get("buildings", [])
        ],
        task_records=[
            TaskRecord(
                skill=_decode_enum(SkillName, raw["skill"]),
                amount_xp=raw["amount_xp"],
                difficulty=_decode_enum(TaskDifficulty, raw["difficulty"]),
                date=_decode_time(raw["date"]),
                id=raw["id"],
            )
            for raw in payload.get("task_records", [])
        ],
        achievements=[
            Achievement(title=raw["title"], description=raw["description"], earned_at=_decode_time(raw["earned_at"]))
            for raw in payload.get("achievements", [])
        ],
        ascension=AscensionState(
            prestige_currency=ascension.get("prestige_currency", 0),
            owned_perk_ids=set(ascension.get("owned_perk_ids", [])),
            ascensions=ascension.get("ascensions", 0),
        ),
        challenges=_decode_challenges(payload.get("challenges") or {}),
    )


# Backups


class BackupEnvelope(BaseModel):
    version: str
    timestamp: datetime
    state: dict[str, Any]


class BackupInfo(BaseModel):
    version: str
    timestamp: datetime
    record_count: int


def export_backup(state: PlayerState, *, now: datetime | None = None) -> str:
    envelope = BackupEnvelope(version=BACKUP_VERSION, timestamp=now or utcnow(), state=encode_state(state))
    return envelope.model_dump_json(indent=2)


def import_backup(payload: str | bytes) -> PlayerState:
    envelope = BackupEnvelope.model_validate_json(payload)
    if envelope.version != BACKUP_VERSION:
        raise IncompatibleBackupVersionError(envelope.version)
    return decode_state(envelope.state)


def backup_info(payload: str | bytes) -> BackupInfo:
    """Version, timestamp and record count of a backup without restoring it.

    The count covers skills, resources, task records, buildings, expeditions,
    expedition reports, plus one for the player itself.
    """
    envelope = BackupEnvelope.model_validate_json(payload)
    state = envelope.state
    record_count = 1 + sum(
        len(state.get(key, ()))
        for key in ("skills", "resources", "task_records", "buildings", "expeditions", "expedition_reports")
    )
    return BackupInfo(version=envelope.version, timestamp=envelope.timestamp, record_count=record_count)
