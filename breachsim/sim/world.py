"""Building map and the mutable contents of its divisions."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import NewType

from breachsim.config import RECOVERY_KIT, VEST
from breachsim.sim.errors import (
    DivisionNotFoundError,
    IsolatedDivisionError,
    MissionConfigError,
)
from breachsim.sim.graph import Graph

logger = logging.getLogger(__name__)

DivisionKey = NewType("DivisionKey", str)


def division_key(name: str) -> DivisionKey:
    return DivisionKey(name.strip().casefold())


@dataclass(eq=False)
class Enemy:
    name: str
    power: int

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Enemy name must not be empty.")
        if self.power < 0:
            raise ValueError("Enemy power must not be negative.")

    @property
    def defeated(self) -> bool:
        return self.power == 0

    def take_damage(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("Damage must not be negative.")
        self.power = max(self.power - amount, 0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Enemy):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)


@dataclass(frozen=True, eq=False)
class Item:
    """A pickup. Items of the same type are interchangeable."""

    type: str
    points: int = 0

    def __post_init__(self) -> None:
        if not self.type or not self.type.strip():
            raise ValueError("Item type must not be empty.")
        if self.points < 0:
            raise ValueError("Item points must not be negative.")
        object.__setattr__(self, "type", self.type.strip())

    @property
    def is_recovery_kit(self) -> bool:
        return self.type.casefold() == RECOVERY_KIT

    @property
    def is_vest(self) -> bool:
        return self.type.casefold() == VEST

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        return self.type.casefold() == other.type.casefold()

    def __hash__(self) -> int:
        return hash(self.type.casefold())


@dataclass(frozen=True)
class Target:
    division: str
    type: str


@dataclass(frozen=True)
class EnemyMove:
    enemy: Enemy
    origin: str
    destination: str


@dataclass(eq=False)
class Division:
    name: str
    entry_exit: bool = False
    _enemies: list[Enemy] = field(default_factory=list, repr=False)
    _items: list[Item] = field(default_factory=list, repr=False)

    @property
    def key(self) -> DivisionKey:
        return division_key(self.name)

    @property
    def enemies(self) -> tuple[Enemy, ...]:
        return tuple(self._enemies)

    @property
    def items(self) -> tuple[Item, ...]:
        return tuple(self._items)

    @property
    def has_enemies(self) -> bool:
        return bool(self._enemies)

    def live_enemies(self) -> list[Enemy]:
        return [enemy for enemy in self._enemies if enemy.power > 0]

    def add_enemy(self, enemy: Enemy) -> None:
        self._enemies.append(enemy)

    def remove_enemy(self, enemy: Enemy) -> None:
        for index, present in enumerate(self._enemies):
            if present is enemy:
                del self._enemies[index]
                return
        raise ValueError(f"Enemy {enemy.name} is not in {self.name}.")

    def purge_defeated(self) -> list[Enemy]:
        defeated = [enemy for enemy in self._enemies if enemy.defeated]
        self._enemies = [enemy for enemy in self._enemies if not enemy.defeated]
        return defeated

    def add_item(self, item: Item) -> None:
        self._items.append(item)

    def remove_item(self, item: Item) -> None:
        self._items.remove(item)

    def take_items(self) -> list[Item]:
        taken = list(self._items)
        self._items.clear()
        return taken

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Division):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)


class BuildingMap:
    """The building graph plus everything placed in it."""

    def __init__(self) -> None:
        self._graph: Graph[DivisionKey] = Graph()
        self._divisions: dict[DivisionKey, Division] = {}
        self._entry_order: list[DivisionKey] = []
        self._target: Target | None = None

    # Construction ---------------------------------------------------------

    def add_division(self, name: str) -> Division:
        if not name or not name.strip():
            raise MissionConfigError("Division name must not be empty.")
        key = division_key(name)
        if key in self._divisions:
            raise MissionConfigError(f"Division '{name.strip()}' already exists.")
        division = Division(name=name.strip())
        self._divisions[key] = division
        self._graph.add_vertex(key)
        return division

    def add_link(self, name_a: str, name_b: str) -> None:
        a = self.division_by_name(name_a)
        b = self.division_by_name(name_b)
        if a.key == b.key:
            raise MissionConfigError(f"Division '{a.name}' cannot link to itself.")
        if self._graph.is_adjacent(a.key, b.key):
            logger.debug("Link %s <-> %s already exists", a.name, b.name)
            return
        self._graph.add_edge(a.key, b.key)

    def mark_entry_exit(self, name: str) -> None:
        division = self.division_by_name(name)
        division.entry_exit = True
        if division.key not in self._entry_order:
            self._entry_order.append(division.key)

    def set_target(self, name: str, type: str) -> Target:
        if not type or not type.strip():
            raise MissionConfigError("Target type must not be empty.")
        division = self.division_by_name(name)
        self._target = Target(division=division.name, type=type.strip())
        logger.debug("Target %s set in %s", self._target.type, division.name)
        return self._target

    def clear_target(self) -> None:
        self._target = None

    def add_enemy(self, name: str, enemy: Enemy) -> None:
        self.division_by_name(name).add_enemy(enemy)

    def add_item(self, name: str, item: Item) -> None:
        self.division_by_name(name).add_item(item)

    # Queries --------------------------------------------------------------

    @property
    def target(self) -> Target | None:
        return self._target

    def division_by_name(self, name: str) -> Division:
        division = self._divisions.get(division_key(name))
        if division is None:
            raise DivisionNotFoundError(name)
        return division

    def divisions(self) -> list[Division]:
        return [self._divisions[key] for key in self._graph.vertices]

    def division_names(self) -> set[str]:
        return {division.name for division in self.divisions()}

    def entry_exits(self) -> list[Division]:
        """Entry/exit divisions in the order they were declared."""
        return [self._divisions[key] for key in self._entry_order]

    def neighbors(self, name: str) -> list[Division]:
        division = self.division_by_name(name)
        return [self._divisions[key] for key in self._graph.neighbors(division.key)]

    def connections(self, name: str) -> list[Division]:
        """Every division reachable from *name*, excluding *name* itself."""
        division = self.division_by_name(name)
        return [
            self._divisions[key]
            for key in self._graph.iter_bfs(division.key)
            if key != division.key
        ]

    def can_move(self, name_a: str, name_b: str) -> bool:
        a = self.division_by_name(name_a)
        b = self.division_by_name(name_b)
        return self._graph.is_adjacent(a.key, b.key)

    def shortest_path(self, start: str, target: str) -> list[Division]:
        a = self.division_by_name(start)
        b = self.division_by_name(target)
        return [self._divisions[key] for key in self._graph.shortest_path(a.key, b.key)]

    def hop_distance(self, start: str, target: str) -> int | None:
        if division_key(start) == division_key(target):
            self.division_by_name(start)
            return 0
        path = self.shortest_path(start, target)
        if not path:
            return None
        return len(path) - 1

    def items_of_type(self, type: str) -> list[tuple[Division, Item]]:
        wanted = type.strip().casefold()
        return [
            (division, item)
            for division in self.divisions()
            for item in division.items
            if item.type.casefold() == wanted
        ]

    def nearest_item_of_type(
        self, origin: str, type: str
    ) -> tuple[Division, Item] | None:
        best: tuple[Division, Item] | None = None
        best_distance: int | None = None
        for division, item in self.items_of_type(type):
            distance = self.hop_distance(origin, division.name)
            if distance is None:
                continue
            if best_distance is None or distance < best_distance:
                best = (division, item)
                best_distance = distance
        return best

    def nearest_entry_exit(self, origin: str) -> list[Division]:
        """Path from *origin* to the closest entry/exit (``[origin]`` if it is one)."""
        start = self.division_by_name(origin)
        if start.entry_exit:
            return [start]
        for key in self._graph.iter_bfs(start.key):
            division = self._divisions[key]
            if division.entry_exit:
                return self.shortest_path(start.name, division.name)
        return []

    def require_reachable(self, target: str) -> Division:
        """Return the target division if some entry/exit can reach it."""
        entries = self.entry_exits()
        if not entries:
            raise MissionConfigError("The building has no entry/exit division.")
        division = self.division_by_name(target)
        if division.entry_exit:
            return division
        if not any(self.shortest_path(entry.name, division.name) for entry in entries):
            raise MissionConfigError(
                f"Target division '{division.name}' is unreachable "
                "from every entry/exit."
            )
        return division

    def total_enemy_power(self, name: str) -> int:
        return sum(enemy.power for enemy in self.division_by_name(name).enemies)

    def recovery_points(self, name: str) -> int:
        return sum(
            item.points
            for item in self.division_by_name(name).items
            if item.is_recovery_kit
        )

    # Enemy turn -----------------------------------------------------------

    def relocate_enemies(self, rng: random.Random) -> list[EnemyMove]:
        """Move every enemy to a random adjacent division.

        Moves are planned from a snapshot, so an enemy that arrives in a
        division is not picked up again while that division is processed.
        """
        snapshot = [
            (division, enemy)
            for division in self.divisions()
            for enemy in division.enemies
        ]
        choices: dict[DivisionKey, list[DivisionKey]] = {}
        for division, _ in snapshot:
            if division.key in choices:
                continue
            neighbors = self._graph.neighbors(division.key)
            if not neighbors:
                raise IsolatedDivisionError(
                    f"Division '{division.name}' holds enemies "
                    "but has no adjacent division."
                )
            choices[division.key] = neighbors

        moves: list[EnemyMove] = []
        for division, enemy in snapshot:
            destination = self._divisions[rng.choice(choices[division.key])]
            division.remove_enemy(enemy)
            destination.add_enemy(enemy)
            moves.append(
                EnemyMove(
                    enemy=enemy, origin=division.name, destination=destination.name
                )
            )
            logger.debug(
                "Enemy %s moved %s -> %s", enemy.name, division.name, destination.name
            )
        return moves
