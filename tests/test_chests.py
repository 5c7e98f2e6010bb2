import random

import pytest

from chimera_progression.chests import CHEST_CATALOG, ChestResolver, TreasureChest, can_open_chest, get_chest
from chimera_progression.errors import UnknownChestError
from chimera_progression.models import CurrencyReward, ItemReward, Rarity, ResourceKind
from chimera_progression.rewards import RewardResolver
from chimera_progression.state import new_player


class FixedRandom(random.Random):
    """Always draws the upper bound and leaves the table order alone."""

    def randint(self, a: int, b: int) -> int:
        return b

    def shuffle(self, x) -> None:
        return None


def _cheap_chest(cost: int) -> TreasureChest:
    return TreasureChest(
        id="chest_test",
        name="Test Chest",
        description="",
        cost=cost,
        rarity=Rarity.COMMON,
        loot_table=(CurrencyReward(10), ItemReward("seed_vigor", 1), ItemReward("seed_clarity", 1)),
        reward_count=(1, 2),
    )


def test_cannot_open_chest_without_enough_currency() -> None:
    state = new_player("Looter")
    state.ledger.add(ResourceKind.CURRENCY, 30 - state.currency)
    chest = _cheap_chest(50)

    rewards, events = ChestResolver(RewardResolver()).open_chest(chest, state)

    assert rewards == []
    assert events == []
    assert state.currency == 30


def test_open_chest_deducts_cost_and_takes_first_k_of_table() -> None:
    state = new_player("Looter")
    chest = _cheap_chest(50)

    rewards, events = ChestResolver(RewardResolver(), rng=FixedRandom()).open_chest(chest, state)

    assert rewards == [CurrencyReward(10), ItemReward("seed_vigor", 1)]
    assert state.currency == 100 - 50 + 10
    assert state.inventory.quantity("seed_vigor") == 1
    assert len(events) == 2


def test_reward_count_stays_within_range_and_draws_are_distinct() -> None:
    rng = random.Random(7)
    resolver = ChestResolver(RewardResolver(), rng=rng)
    chest = get_chest("chest_rare")

    for _ in range(50):
        drawn = resolver.draw(chest)
        assert 2 <= len(drawn) <= 3
        assert len(set(drawn)) == len(drawn)
        assert all(reward in chest.loot_table for reward in drawn)


def test_seeded_rng_gives_repeatable_loot() -> None:
    chest = get_chest("chest_common")

    first = ChestResolver(RewardResolver(), rng=random.Random(42)).draw(chest)
    second = ChestResolver(RewardResolver(), rng=random.Random(42)).draw(chest)

    assert first == second


def test_key_chest_consumes_one_key_and_ignores_currency() -> None:
    state = new_player("Looter")
    chest = get_chest("chest_ancient")
    assert can_open_chest(chest, state) is False

    state.inventory.add("item_ancient_key", 1)
    rewards, _ = ChestResolver(RewardResolver(), rng=random.Random(1)).open_chest(chest, state)

    assert 3 <= len(rewards) <= 4
    assert "item_ancient_key" not in state.inventory
    assert can_open_chest(chest, state) is False


def test_catalog_lookup() -> None:
    assert [chest.id for chest in CHEST_CATALOG] == ["chest_common", "chest_rare", "chest_ancient"]
    with pytest.raises(UnknownChestError):
        get_chest("chest_missing")
