"""Non-negative counters for resources and inventory stacks."""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from .models import InventoryItem, ResourceKind


class ResourceLedger:
    """Per-kind resource quantities that never drop below zero."""

    def __init__(self, quantities: Mapping[ResourceKind, int] | None = None) -> None:
        self._quantities: dict[ResourceKind, int] = {}
        for kind, amount in (quantities or {}).items():
            self._quantities[kind] = max(0, amount)

    def quantity(self, kind: ResourceKind) -> int:
        return self._quantities.get(kind, 0)

    def add(self, kind: ResourceKind, amount: int) -> None:
        """Add ``amount`` (may be negative); the result is clamped at zero."""
        self._quantities[kind] = max(0, self.quantity(kind) + amount)

    def remove(self, kind: ResourceKind, amount: int) -> bool:
        """Subtract ``amount`` if available; otherwise leave the quantity untouched."""
        current = self.quantity(kind)
        if current < amount:
            return False
        self._quantities[kind] = current - amount
        return True

    def has(self, kind: ResourceKind, amount: int) -> bool:
        return self.quantity(kind) >= amount

    def has_all(self, costs: Mapping[ResourceKind, int]) -> bool:
        return all(self.has(kind, amount) for kind, amount in costs.items())

    def remove_all(self, costs: Mapping[ResourceKind, int]) -> bool:
        """Deduct every cost, or nothing at all if any one is short."""
        if not self.has_all(costs):
            return False
        for kind, amount in costs.items():
            self._quantities[kind] = self.quantity(kind) - amount
        return True

    def as_dict(self) -> dict[ResourceKind, int]:
        return dict(self._quantities)

    def __iter__(self) -> Iterator[tuple[ResourceKind, int]]:
        return iter(self._quantities.items())


class Inventory:
    """Item stacks keyed by item id."""

    def __init__(self, stacks: Mapping[str, int] | None = None) -> None:
        self._stacks: dict[str, int] = {item_id: qty for item_id, qty in (stacks or {}).items() if qty > 0}

    def quantity(self, item_id: str) -> int:
        return self._stacks.get(item_id, 0)

    def add(self, item_id: str, quantity: int) -> None:
        self._stacks[item_id] = self.quantity(item_id) + quantity
        if self._stacks[item_id] <= 0:
            del self._stacks[item_id]

    def remove(self, item_id: str, quantity: int = 1) -> bool:
        current = self.quantity(item_id)
        if current < quantity:
            return False
        remaining = current - quantity
        if remaining <= 0:
            self._stacks.pop(item_id, None)
        else:
            self._stacks[item_id] = remaining
        return True

    def items(self) -> list[InventoryItem]:
        return [InventoryItem(item_id=item_id, quantity=qty) for item_id, qty in self._stacks.items()]

    def clear(self) -> None:
        self._stacks.clear()

    def as_dict(self) -> dict[str, int]:
        return dict(self._stacks)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._stacks

    def __len__(self) -> int:
        return len(self._stacks)
