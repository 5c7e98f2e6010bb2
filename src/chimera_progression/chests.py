"""Treasure chests: pay with currency or a key, roll a handful of rewards."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .errors import UnknownChestError
from .events import GameEvent
from .models import CurrencyReward, ItemReward, Rarity, ResourceKind, Reward, SpecialCurrency, SpecialCurrencyReward

if TYPE_CHECKING:
    from .rewards import RewardResolver
    from .state import PlayerState

logger = logging.getLogger("chimera_progression.chests")


@dataclass(frozen=True, slots=True)
class TreasureChest:
    id: str
    name: str
    description: str
    cost: int
    rarity: Rarity
    loot_table: tuple[Reward, ...]
    reward_count: tuple[int, int]
    key_item_id: str | None = None


CHEST_CATALOG: tuple[TreasureChest, ...] = (
    TreasureChest(
        id="chest_common",
        name="Common Chest",
        description="Contains a few simple rewards.",
        cost=250,
        rarity=Rarity.COMMON,
        loot_table=(
            CurrencyReward(100),
            ItemReward("seed_vigor", 1),
            ItemReward("material_joyful_ember", 2),
        ),
        reward_count=(1, 2),
    ),
    TreasureChest(
        id="chest_rare",
        name="Rare Chest",
        description="Contains valuable materials and a chance for rare seeds.",
        cost=1000,
        rarity=Rarity.RARE,
        loot_table=(
            CurrencyReward(500),
            ItemReward("seed_clarity", 1),
            ItemReward("material_sunstone_shard", 1),
            SpecialCurrencyReward(SpecialCurrency.RUNES, 1),
        ),
        reward_count=(2, 3),
    ),
    TreasureChest(
        id="chest_ancient",
        name="Ancient Chest",
        description="A locked chest from a forgotten era. Requires a special key.",
        cost=0,
        rarity=Rarity.EPIC,
        loot_table=(
            CurrencyReward(2000),
            ItemReward("seed_inspiration", 1),
            ItemReward("tree_ironwood", 1),
            SpecialCurrencyReward(SpecialCurrency.RUNES, 5),
        ),
        reward_count=(3, 4),
        key_item_id="item_ancient_key",
    ),
)


def get_chest(chest_id: str) -> TreasureChest:
    for chest in CHEST_CATALOG:
        if chest.id == chest_id:
            return chest
    raise UnknownChestError(f"Unknown chest id: {chest_id}")


def can_open_chest(chest: TreasureChest, state: PlayerState) -> bool:
    if chest.key_item_id:
        return state.inventory.quantity(chest.key_item_id) > 0
    return state.currency >= chest.cost


class ChestResolver:
    """Opens chests against a player's ledger using an injectable RNG."""

    def __init__(self, resolver: RewardResolver, rng: random.Random | None = None) -> None:
        self._resolver = resolver
        self._rng = rng if rng is not None else random.Random()

    def draw(self, chest: TreasureChest, rng: random.Random | None = None) -> list[Reward]:
        """Shuffle the loot table and keep the first ``k`` entries, ``k`` uniform in the count range."""
        if rng is None:
            rng = self._rng
        low, high = chest.reward_count
        count = rng.randint(low, high)
        table = list(chest.loot_table)
        rng.shuffle(table)
        return table[:count]

    def open_chest(
        self,
        chest: TreasureChest,
        state: PlayerState,
        rng: random.Random | None = None,
    ) -> tuple[list[Reward], list[GameEvent]]:
        if not can_open_chest(chest, state):
            logger.info("chest_open_skipped", extra={"chest_id": chest.id, "reason": "cannot_afford"})
            return [], []

        if chest.key_item_id:
            state.inventory.remove(chest.key_item_id, 1)
        else:
            state.ledger.remove(ResourceKind.CURRENCY, chest.cost)

        rewards = self.draw(chest, rng)
        events = self._resolver.grant_all(rewards, state)
        logger.info("chest_opened", extra={"chest_id": chest.id, "rewards": len(rewards)})
        return rewards, events
