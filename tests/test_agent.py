from breachsim.sim.agent import Agent
from breachsim.sim.world import Item


def test_health_is_clamped() -> None:
    agent = Agent("To Cruz")
    assert agent.take_damage(30) == 30
    assert agent.heal(50) == 30
    assert agent.health == 100
    assert agent.take_damage(500) == 100
    assert agent.health == 0
    assert not agent.is_alive


def test_recovery_kits_are_used_last_in_first_out() -> None:
    agent = Agent("To Cruz", health=40)
    agent.add_to_inventory(Item("kit de vida", 10))
    agent.add_to_inventory(Item("map", 0))
    agent.add_to_inventory(Item("kit de vida", 25))

    used = agent.use_recovery_kit()

    assert used is not None
    assert used.points == 25
    assert agent.health == 65
    assert [item.type for item in agent.inventory] == ["kit de vida", "map"]
    assert agent.use_recovery_kit().points == 10
    assert agent.use_recovery_kit() is None
    assert not agent.has_recovery_kit()


def test_vest_is_worn_on_pickup() -> None:
    agent = Agent("To Cruz", health=80)
    agent.add_to_inventory(Item("colete", 30))

    assert agent.health == 100
    assert agent.inventory == ()
