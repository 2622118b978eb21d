from breachsim.config import CombatRules
from breachsim.sim.agent import Agent
from breachsim.sim.combat import (
    CombatOutcome,
    CombatPhase,
    Initiative,
    resolve_combat,
)
from breachsim.sim.world import Division, Enemy


def build_division(*enemies: Enemy) -> Division:
    division = Division(name="Hall")
    for enemy in enemies:
        division.add_enemy(enemy)
    return division


def test_no_enemies_is_no_combat() -> None:
    agent = Agent("To Cruz")
    report = resolve_combat(agent, build_division(), initiative=Initiative.AGENT)

    assert report.outcome == CombatOutcome.NO_COMBAT
    assert report.phases == [CombatPhase.NO_COMBAT]
    assert not report.fought
    assert agent.health == 100


def test_agent_first_defeats_weak_enemy_without_melee() -> None:
    agent = Agent("To Cruz", health=60)
    division = build_division(Enemy("guard", 10))

    report = resolve_combat(agent, division, initiative=Initiative.AGENT)

    assert report.outcome == CombatOutcome.AGENT_WINS
    assert CombatPhase.MELEE_EXCHANGE not in report.phases
    assert agent.health == 60
    assert [enemy.name for enemy in report.defeated] == ["guard"]
    assert not division.has_enemies


def test_agent_first_hits_every_enemy() -> None:
    agent = Agent("To Cruz")
    division = build_division(Enemy("a", 5), Enemy("b", 8), Enemy("c", 30))

    report = resolve_combat(agent, division, initiative=Initiative.AGENT)

    assert report.phases[:2] == [CombatPhase.AGENT_FIRST, CombatPhase.MELEE_EXCHANGE]
    assert [enemy.name for enemy in report.defeated] == ["a", "b", "c"]
    # c: 30 -> 20 in the volley, then two melee rounds with one reply between.
    assert report.damage_taken == 5
    assert agent.health == 95
    assert report.outcome == CombatOutcome.AGENT_WINS


def test_enemy_first_defeats_weak_agent_before_reply() -> None:
    agent = Agent("To Cruz", health=5)
    enemy = Enemy("brute", 20)
    division = build_division(enemy)

    report = resolve_combat(agent, division, initiative=Initiative.ENEMIES)

    assert report.outcome == CombatOutcome.AGENT_DEFEATED
    assert agent.health == 0
    assert enemy.power == 20
    assert report.damage_dealt == 0
    assert report.phases == [CombatPhase.ENEMY_FIRST, CombatPhase.RESOLVED]


def test_enemy_first_volley_is_summed() -> None:
    agent = Agent("To Cruz")
    division = build_division(Enemy("a", 10), Enemy("b", 10))

    report = resolve_combat(agent, division, initiative=Initiative.ENEMIES)

    # volley 10, then a falls, b replies once, b falls.
    assert report.damage_taken == 15
    assert report.outcome == CombatOutcome.AGENT_WINS


def test_custom_rules() -> None:
    agent = Agent("To Cruz")
    division = build_division(Enemy("guard", 25))

    report = resolve_combat(
        agent,
        division,
        initiative=Initiative.AGENT,
        rules=CombatRules(agent_damage=25, enemy_damage=1),
    )

    assert report.outcome == CombatOutcome.AGENT_WINS
    assert report.damage_dealt == 25


def test_powerless_enemies_are_reported_as_defeated() -> None:
    agent = Agent("To Cruz")
    division = build_division(Enemy("decoy", 0))

    report = resolve_combat(agent, division, initiative=Initiative.ENEMIES)

    assert report.outcome == CombatOutcome.NO_COMBAT
    assert [enemy.name for enemy in report.defeated] == ["decoy"]
    assert not division.has_enemies
    assert agent.health == 100
