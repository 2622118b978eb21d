import pytest

from breachsim.config import SimulationConfig
from breachsim.sim.agent import Agent
from breachsim.sim.automatic import (
    DISQUALIFIED,
    AutomaticMission,
    plan_round_trip,
    project_health,
)
from breachsim.sim.contracts import MissionInfo, SimulationMode, SimulationStatus
from breachsim.sim.errors import MissionConfigError
from breachsim.sim.world import BuildingMap, Enemy, Item

MISSION = MissionInfo(code="test", version=1)


def build_line(*names: str) -> BuildingMap:
    world = BuildingMap()
    for name in names:
        world.add_division(name)
    for name_a, name_b in zip(names, names[1:]):
        world.add_link(name_a, name_b)
    return world


def run(world: BuildingMap, agent: Agent | None = None) -> AutomaticMission:
    mission = AutomaticMission(
        world, agent or Agent("To Cruz"), mission=MISSION, result_id="run-1"
    )
    mission.run()
    return mission


def test_end_to_end_round_trip() -> None:
    world = build_line("Entrance", "Hall", "Vault")
    world.mark_entry_exit("Entrance")
    world.set_target("Vault", "chemical")

    mission = AutomaticMission(
        world, Agent("To Cruz"), mission=MISSION, result_id="run-1"
    )
    result = mission.run("Vault")

    assert result.status == SimulationStatus.SUCCESS
    assert result.path == ["Entrance", "Hall", "Vault", "Hall", "Entrance"]
    assert result.remaining_health == 100
    assert result.mode == SimulationMode.AUTOMATIC
    assert result.start_division == "Entrance"
    assert result.end_division == "Entrance"
    assert result.entry_exits == ["Entrance"]
    assert mission.agent.objective_completed
    assert world.target is None


def test_kit_on_the_way_is_collected_once() -> None:
    world = build_line("A", "B", "C")
    world.mark_entry_exit("A")
    world.set_target("C", "documents")
    world.add_item("B", Item("kit de vida", 15))

    mission = run(world)

    assert mission.path_names == ["A", "B", "C", "B", "A"]
    assert [item.type for item in mission.collected_items] == ["kit de vida"]
    assert mission.status == SimulationStatus.SUCCESS
    assert mission.plan is not None
    assert mission.plan.path_to == ["A", "B", "C"]


def test_project_health_counts_every_leg_division() -> None:
    world = BuildingMap()
    for name in ["Entry", "Goal", "Exit"]:
        world.add_division(name)
    world.add_enemy("Goal", Enemy("guard", 30))
    world.add_item("Goal", Item("kit de vida", 20))

    projected = project_health(world, [["Entry", "Goal"], ["Goal", "Exit"]], 100)

    assert projected == 80
    assert project_health(world, [["Goal"]], 30) == DISQUALIFIED
    assert world.division_by_name("Goal").has_enemies


def test_plan_prefers_the_healthiest_entry() -> None:
    world = build_line("West", "Guarded", "Target", "Quiet", "East")
    world.mark_entry_exit("West")
    world.mark_entry_exit("East")
    world.add_enemy("Guarded", Enemy("guard", 40))

    plan = plan_round_trip(world, "Target", 100)

    assert plan.entry == "East"
    assert plan.projected_health == 100
    assert plan.divisions == ["East", "Quiet", "Target", "Quiet", "East"]


def test_plan_falls_back_to_first_reachable_entry() -> None:
    world = build_line("Entry", "Lair", "Target")
    world.mark_entry_exit("Entry")
    world.add_enemy("Lair", Enemy("boss", 500))

    plan = plan_round_trip(world, "Target", 100)

    assert plan.entry == "Entry"
    assert plan.projected_health == DISQUALIFIED
    assert not plan.forced


def test_plan_force_starts_when_target_is_the_only_entry() -> None:
    world = build_line("Lobby", "Office")
    world.mark_entry_exit("Lobby")
    world.set_target("Lobby", "safe")

    mission = run(world)

    assert mission.plan is not None
    assert mission.plan.forced
    assert mission.path_names == ["Lobby"]
    assert mission.status == SimulationStatus.SUCCESS


def test_defeat_keeps_partial_path() -> None:
    world = build_line("Entry", "Lair", "Target")
    world.mark_entry_exit("Entry")
    world.set_target("Target", "chip")
    world.add_enemy("Lair", Enemy("boss", 500))

    mission = run(world)
    result = mission.result()

    assert result.status == SimulationStatus.FAILURE
    assert result.path == ["Entry", "Lair"]
    assert result.remaining_health == 0
    assert mission.defeated_enemies == []


def test_combat_and_kits_during_execution() -> None:
    world = build_line("Entry", "Hall", "Target")
    world.mark_entry_exit("Entry")
    world.set_target("Target", "chip")
    world.add_enemy("Hall", Enemy("guard", 100))
    world.add_item("Hall", Item("kit de vida", 30))

    mission = AutomaticMission(
        world,
        Agent("To Cruz"),
        mission=MISSION,
        config=SimulationConfig(auto_kit_threshold=80),
    )
    steps = list(mission.iter_steps())
    kinds = [event.kind for event in steps[1].events]

    # guard: 100 -> 90, then 9 melee rounds with 8 replies = 40 damage.
    assert kinds == ["MOVE", "COMBAT", "COLLECT", "USE_KIT"]
    assert steps[1].health == 90
    assert [enemy.name for enemy in mission.defeated_enemies] == ["guard"]
    assert mission.status == SimulationStatus.SUCCESS


def test_configuration_errors_before_any_step() -> None:
    world = build_line("Entry", "Target")
    world.set_target("Target", "chip")
    mission = AutomaticMission(world, Agent("To Cruz"), mission=MISSION)
    with pytest.raises(MissionConfigError):
        mission.run()
    assert mission.path_names == []

    island = build_line("Entry", "Hall")
    island.add_division("Island")
    island.mark_entry_exit("Entry")
    island.set_target("Island", "chip")
    with pytest.raises(MissionConfigError):
        AutomaticMission(island, Agent("To Cruz"), mission=MISSION).run()

    no_target = build_line("Entry", "Hall")
    no_target.mark_entry_exit("Entry")
    with pytest.raises(MissionConfigError):
        AutomaticMission(no_target, Agent("To Cruz"), mission=MISSION).run()


def test_prepare_plans_before_any_step() -> None:
    world = build_line("Entrance", "Hall", "Vault")
    world.mark_entry_exit("Entrance")
    world.set_target("Vault", "chemical")
    mission = AutomaticMission(world, Agent("To Cruz"), mission=MISSION)

    plan = mission.prepare()

    assert plan.entry == "Entrance"
    assert mission.path_names == []
    steps = list(mission.iter_steps())
    assert mission.plan is plan
    assert [step.division for step in steps] == plan.divisions


def test_powerless_enemy_counts_as_defeated() -> None:
    world = build_line("Entrance", "Vault")
    world.mark_entry_exit("Entrance")
    world.set_target("Vault", "chemical")
    world.add_enemy("Vault", Enemy("decoy", 0))

    mission = run(world)

    assert [enemy.name for enemy in mission.defeated_enemies] == ["decoy"]
    assert mission.status == SimulationStatus.SUCCESS
