"""Agent state: health, position and inventory."""

from __future__ import annotations

import logging

from breachsim.sim.world import Item

logger = logging.getLogger(__name__)

DEFAULT_MAX_HEALTH = 100


class Agent:
    """The infiltrating agent.

    Health is clamped to ``[0, max_health]``. The inventory is a stack:
    recovery kits are used most-recent first.
    """

    def __init__(
        self,
        name: str,
        *,
        health: int = DEFAULT_MAX_HEALTH,
        max_health: int = DEFAULT_MAX_HEALTH,
    ) -> None:
        if max_health <= 0:
            raise ValueError("max_health must be positive.")
        self.name = name
        self.max_health = max_health
        self._health = _clamp(health, max_health)
        self.division: str | None = None
        self.objective_completed = False
        self._inventory: list[Item] = []

    @property
    def health(self) -> int:
        return self._health

    @property
    def is_alive(self) -> bool:
        return self._health > 0

    @property
    def inventory(self) -> tuple[Item, ...]:
        return tuple(self._inventory)

    def move_to(self, division: str) -> None:
        self.division = division

    def take_damage(self, amount: int) -> int:
        """Apply damage and return the health actually lost."""
        if amount < 0:
            raise ValueError("Damage must not be negative.")
        before = self._health
        self._health = _clamp(self._health - amount, self.max_health)
        return before - self._health

    def heal(self, amount: int) -> int:
        """Restore health and return the amount actually gained."""
        if amount < 0:
            raise ValueError("Healing must not be negative.")
        before = self._health
        self._health = _clamp(self._health + amount, self.max_health)
        return self._health - before

    def add_to_inventory(self, item: Item) -> None:
        """Store an item. A vest is worn at once and heals instead."""
        if item.is_vest:
            gained = self.heal(item.points)
            logger.debug("%s wore a vest (+%d)", self.name, gained)
            return
        self._inventory.append(item)

    def has_recovery_kit(self) -> bool:
        return any(item.is_recovery_kit for item in self._inventory)

    def use_recovery_kit(self) -> Item | None:
        for index in range(len(self._inventory) - 1, -1, -1):
            item = self._inventory[index]
            if item.is_recovery_kit:
                del self._inventory[index]
                gained = self.heal(item.points)
                logger.debug("%s used a recovery kit (+%d)", self.name, gained)
                return item
        return None


def _clamp(value: int, max_health: int) -> int:
    return max(0, min(value, max_health))
