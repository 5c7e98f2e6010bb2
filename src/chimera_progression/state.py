"""The single in-memory player aggregate that every service mutates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .activities import Expedition, ExpeditionReport, ExpeditionType, HatchableEgg
from .ascension import AscensionState
from .challenges import ChallengeBoard, ChallengeTracker
from .homestead import Building, default_buildings
from .ledger import Inventory, ResourceLedger
from .models import Achievement, Perk, ResourceKind, Skill, SkillName, SpecialCurrency, TaskRecord, new_id
from .quests import Quest, default_quests

STARTING_RESOURCES: dict[ResourceKind, int] = {
    ResourceKind.RATIONS: 10,
    ResourceKind.TOOLS: 5,
    ResourceKind.INTEL: 0,
    ResourceKind.MATERIALS: 0,
    ResourceKind.CURRENCY: 100,
    ResourceKind.ESSENCE: 0,
}


@dataclass(slots=True)
class PlayerState:
    name: str
    ledger: ResourceLedger = field(default_factory=ResourceLedger)
    inventory: Inventory = field(default_factory=Inventory)
    special_currencies: dict[SpecialCurrency, int] = field(default_factory=dict)
    skills: list[Skill] = field(default_factory=list)
    perks: list[Perk] = field(default_factory=list)
    expeditions: list[Expedition] = field(default_factory=list)
    expedition_reports: list[ExpeditionReport] = field(default_factory=list)
    eggs: list[HatchableEgg] = field(default_factory=list)
    quests: list[Quest] = field(default_factory=list)
    buildings: list[Building] = field(default_factory=list)
    task_records: list[TaskRecord] = field(default_factory=list)
    achievements: list[Achievement] = field(default_factory=list)
    ascension: AscensionState = field(default_factory=AscensionState)
    challenges: ChallengeBoard = field(default_factory=ChallengeBoard)
    total_power_earned: int = 0
    id: str = field(default_factory=new_id)

    def get_skill(self, name: SkillName) -> Skill | None:
        return next((skill for skill in self.skills if skill.name == name), None)

    def ensure_skill(self, name: SkillName) -> Skill:
        skill = self.get_skill(name)
        if skill is None:
            skill = Skill(name=name)
            self.skills.append(skill)
        return skill

    def get_quest(self, quest_id: str) -> Quest | None:
        return next((quest for quest in self.quests if quest.id == quest_id), None)

    def get_expedition(self, expedition_type: ExpeditionType) -> Expedition | None:
        """The open (not completed) slot for ``expedition_type``, if any."""
        return next(
            (exp for exp in self.expeditions if exp.type == expedition_type and not exp.is_completed),
            None,
        )

    def special_currency(self, currency: SpecialCurrency) -> int:
        return self.special_currencies.get(currency, 0)

    @property
    def currency(self) -> int:
        return self.ledger.quantity(ResourceKind.CURRENCY)

    @property
    def total_level(self) -> int:
        return sum(skill.level for skill in self.skills)

    def reset_run(self, now: datetime | None = None) -> None:
        """Wipe per-run progress; keep identity, achievements, ascension meta and the challenge streak."""
        self.ledger = ResourceLedger(STARTING_RESOURCES)
        self.inventory = Inventory()
        self.special_currencies = {}
        self.skills = [Skill(name=name) for name in SkillName]
        self.perks = []
        self.expeditions = [Expedition(type=expedition_type) for expedition_type in ExpeditionType]
        self.expedition_reports = []
        self.eggs = []
        self.quests = default_quests()
        self.buildings = default_buildings(now)
        self.task_records = []
        self.total_power_earned = 0
        ChallengeTracker.roll_new_set(self.challenges, now=now)


def new_player(name: str, *, now: datetime | None = None) -> PlayerState:
    state = PlayerState(name=name)
    state.reset_run(now)
    return state
