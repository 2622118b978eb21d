"""Simulation rules and run configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

RECOVERY_KIT = "kit de vida"
VEST = "colete"


@dataclass(frozen=True)
class CombatRules:
    """Fixed damage values applied by the combat resolver."""

    agent_damage: int = 10
    enemy_damage: int = 5

    def __post_init__(self) -> None:
        if self.agent_damage <= 0 or self.enemy_damage <= 0:
            raise ValueError("Combat damage values must be positive.")


@dataclass(frozen=True)
class SimulationConfig:
    """Immutable configuration for one simulation run."""

    # Agent
    agent_name: str = "To Cruz"
    starting_health: int = 100
    max_health: int = 100

    # Combat
    combat: CombatRules = field(default_factory=CombatRules)

    # Automatic mode uses carried recovery kits when health drops below this.
    auto_kit_threshold: int = 50

    # Enemy relocation; None means an unseeded source.
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.max_health <= 0:
            raise ValueError("max_health must be positive.")
        if not 0 < self.starting_health <= self.max_health:
            raise ValueError("starting_health must be within (0, max_health].")
