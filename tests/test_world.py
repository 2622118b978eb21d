import random

import pytest

from breachsim.sim.errors import (
    DivisionNotFoundError,
    IsolatedDivisionError,
    MissionConfigError,
)
from breachsim.sim.world import BuildingMap, Enemy, Item


def build_map() -> BuildingMap:
    world = BuildingMap()
    for name in ["Entrance", "Hall", "Vault", "Garden", "Annex"]:
        world.add_division(name)
    world.add_link("Entrance", "Hall")
    world.add_link("Hall", "Vault")
    world.add_link("Entrance", "Garden")
    world.mark_entry_exit("Entrance")
    world.set_target("Vault", "chemical")
    return world


def test_division_lookup_is_trimmed_and_case_insensitive() -> None:
    world = build_map()
    assert world.division_by_name("  hall ").name == "Hall"
    with pytest.raises(DivisionNotFoundError):
        world.division_by_name("Kitchen")


def test_duplicate_division_and_unknown_link_are_config_errors() -> None:
    world = build_map()
    with pytest.raises(MissionConfigError):
        world.add_division("HALL")
    with pytest.raises(DivisionNotFoundError):
        world.add_link("Hall", "Kitchen")


def test_mark_entry_exit_is_idempotent() -> None:
    world = build_map()
    world.mark_entry_exit("Entrance")
    world.mark_entry_exit("entrance")

    assert [division.name for division in world.entry_exits()] == ["Entrance"]


def test_connections_are_reachability_without_self() -> None:
    world = build_map()
    names = [division.name for division in world.connections("Entrance")]

    assert names == ["Hall", "Garden", "Vault"]
    assert "Entrance" not in names
    assert "Annex" not in names


def test_can_move_is_strict_adjacency() -> None:
    world = build_map()
    assert world.can_move("Entrance", "Hall")
    assert not world.can_move("Entrance", "Vault")


def test_contents_are_copies() -> None:
    world = build_map()
    world.add_item("Hall", Item("kit de vida", 20))
    items = world.division_by_name("Hall").items

    assert isinstance(items, tuple)
    assert world.division_by_name("Hall").items == items


def test_items_compare_by_type() -> None:
    assert Item("Kit de Vida", 10) == Item("kit de vida", 30)
    assert Item("kit de vida").is_recovery_kit
    assert Item("Colete", 5).is_vest
    with pytest.raises(ValueError):
        Item("colete", -1)


def test_nearest_item_of_type() -> None:
    world = build_map()
    world.add_item("Vault", Item("kit de vida", 10))
    world.add_item("Hall", Item("kit de vida", 20))
    world.add_item("Annex", Item("kit de vida", 50))

    division, item = world.nearest_item_of_type("Entrance", "kit de vida")
    assert division.name == "Hall"
    assert item.points == 20

    division, _ = world.nearest_item_of_type("Vault", "kit de vida")
    assert division.name == "Vault"

    assert world.nearest_item_of_type("Entrance", "colete") is None


def test_nearest_entry_exit() -> None:
    world = build_map()
    assert [d.name for d in world.nearest_entry_exit("Vault")] == [
        "Vault",
        "Hall",
        "Entrance",
    ]
    assert [d.name for d in world.nearest_entry_exit("Entrance")] == ["Entrance"]
    assert world.nearest_entry_exit("Annex") == []


def test_dry_run_helpers() -> None:
    world = build_map()
    world.add_enemy("Hall", Enemy("guard", 20))
    world.add_enemy("Hall", Enemy("sentry", 15))
    world.add_item("Hall", Item("kit de vida", 20))
    world.add_item("Hall", Item("colete", 10))

    assert world.total_enemy_power("Hall") == 35
    assert world.recovery_points("Hall") == 20


def test_require_reachable() -> None:
    world = build_map()
    assert world.require_reachable("Vault").name == "Vault"
    with pytest.raises(MissionConfigError):
        world.require_reachable("Annex")

    empty = BuildingMap()
    empty.add_division("Solo")
    with pytest.raises(MissionConfigError):
        empty.require_reachable("Solo")


def test_relocate_enemies_moves_each_enemy_once() -> None:
    world = build_map()
    world.add_enemy("Vault", Enemy("guard", 20))

    moves = world.relocate_enemies(random.Random(3))

    assert len(moves) == 1
    assert moves[0].origin == "Vault"
    assert moves[0].destination == "Hall"
    assert [enemy.name for enemy in world.division_by_name("Hall").enemies] == [
        "guard"
    ]
    assert not world.division_by_name("Vault").has_enemies


def test_relocate_enemies_uses_a_snapshot() -> None:
    world = BuildingMap()
    for name in ["A", "B"]:
        world.add_division(name)
    world.add_link("A", "B")
    world.add_enemy("A", Enemy("one", 10))
    world.add_enemy("B", Enemy("two", 10))

    moves = world.relocate_enemies(random.Random(0))

    assert [(move.enemy.name, move.destination) for move in moves] == [
        ("one", "B"),
        ("two", "A"),
    ]


def test_relocate_enemies_fails_on_isolated_division() -> None:
    world = build_map()
    world.add_enemy("Hall", Enemy("guard", 10))
    world.add_enemy("Annex", Enemy("lost", 10))

    with pytest.raises(IsolatedDivisionError):
        world.relocate_enemies(random.Random(0))

    assert world.division_by_name("Hall").has_enemies


def test_remove_enemy_matches_identity_only() -> None:
    division = build_map().division_by_name("Hall")
    present = Enemy("guard", 20)
    division.add_enemy(present)

    with pytest.raises(ValueError):
        division.remove_enemy(Enemy("guard", 20))
    assert division.enemies == (present,)

    division.remove_enemy(present)
    assert not division.has_enemies
