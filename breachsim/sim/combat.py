"""Turn-based combat between the agent and the enemies of one division."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from breachsim.config import CombatRules
from breachsim.sim.agent import Agent
from breachsim.sim.world import Division, Enemy

logger = logging.getLogger(__name__)


class CombatPhase(str, Enum):
    NO_COMBAT = "NO_COMBAT"
    AGENT_FIRST = "AGENT_FIRST"
    ENEMY_FIRST = "ENEMY_FIRST"
    MELEE_EXCHANGE = "MELEE_EXCHANGE"
    RESOLVED = "RESOLVED"


class CombatOutcome(str, Enum):
    NO_COMBAT = "NO_COMBAT"
    AGENT_WINS = "AGENT_WINS"
    AGENT_DEFEATED = "AGENT_DEFEATED"


class Initiative(str, Enum):
    AGENT = "AGENT"
    ENEMIES = "ENEMIES"


@dataclass
class CombatReport:
    division: str
    initiative: Initiative
    phases: list[CombatPhase] = field(default_factory=list)
    defeated: list[Enemy] = field(default_factory=list)
    damage_dealt: int = 0
    damage_taken: int = 0
    outcome: CombatOutcome = CombatOutcome.NO_COMBAT

    @property
    def fought(self) -> bool:
        return self.outcome != CombatOutcome.NO_COMBAT


def resolve_combat(
    agent: Agent,
    division: Division,
    *,
    initiative: Initiative,
    rules: CombatRules | None = None,
) -> CombatReport:
    """Fight until the division is cleared or the agent falls."""
    rules = rules or CombatRules()
    report = CombatReport(division=division.name, initiative=initiative)
    _purge(division, report)

    if not division.has_enemies:
        report.phases.append(CombatPhase.NO_COMBAT)
        return report

    if initiative == Initiative.AGENT:
        report.phases.append(CombatPhase.AGENT_FIRST)
        for enemy in division.live_enemies():
            report.damage_dealt += _strike(enemy, rules.agent_damage)
        _purge(division, report)
    else:
        report.phases.append(CombatPhase.ENEMY_FIRST)
        volley = rules.enemy_damage * len(division.live_enemies())
        report.damage_taken += agent.take_damage(volley)

    if agent.is_alive and division.has_enemies:
        report.phases.append(CombatPhase.MELEE_EXCHANGE)
        while agent.is_alive and division.has_enemies:
            report.damage_dealt += _strike(
                division.live_enemies()[0], rules.agent_damage
            )
            _purge(division, report)
            if agent.is_alive and division.has_enemies:
                report.damage_taken += agent.take_damage(rules.enemy_damage)
                _purge(division, report)

    report.phases.append(CombatPhase.RESOLVED)
    report.outcome = (
        CombatOutcome.AGENT_WINS if agent.is_alive else CombatOutcome.AGENT_DEFEATED
    )
    logger.info(
        "Combat in %s: %s (dealt %d, took %d, defeated %d)",
        division.name,
        report.outcome.value,
        report.damage_dealt,
        report.damage_taken,
        len(report.defeated),
    )
    return report


def _strike(enemy: Enemy, damage: int) -> int:
    before = enemy.power
    enemy.take_damage(damage)
    return before - enemy.power


def _purge(division: Division, report: CombatReport) -> None:
    for enemy in division.purge_defeated():
        logger.debug("Enemy %s defeated in %s", enemy.name, division.name)
        report.defeated.append(enemy)
