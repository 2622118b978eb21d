"""Automatic mode: pick the safest entry, then walk the round trip for real."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Iterable, Iterator
from uuid import uuid4

from breachsim.config import SimulationConfig
from breachsim.sim.agent import Agent
from breachsim.sim.combat import CombatOutcome, Initiative, resolve_combat
from breachsim.sim.contracts import (
    Event,
    MissionInfo,
    SimulationMode,
    SimulationResult,
    SimulationStatus,
    StepPayload,
)
from breachsim.sim.errors import MissionConfigError
from breachsim.sim.world import BuildingMap, Division, Enemy, Item

logger = logging.getLogger(__name__)

DISQUALIFIED = -sys.maxsize - 1


@dataclass(frozen=True)
class RoutePlan:
    entry: str
    path_to: list[str]
    path_back: list[str]
    projected_health: int
    forced: bool = False

    @property
    def divisions(self) -> list[str]:
        """Every division in visiting order; the target is not repeated."""
        return self.path_to + self.path_back[1:]


def project_health(world: BuildingMap, legs: list[list[str]], health: int) -> int:
    """Dry-run the legs without touching the world.

    Enemy power is subtracted and recovery kit points added for every
    division of every leg. Dropping to zero or below disqualifies the route.
    """
    projected = health
    for leg in legs:
        for name in leg:
            projected -= world.total_enemy_power(name)
            if projected <= 0:
                return DISQUALIFIED
            projected += world.recovery_points(name)
    return projected


def plan_round_trip(world: BuildingMap, target: str, health: int) -> RoutePlan:
    target_division = world.require_reachable(target)
    entries = world.entry_exits()

    best: RoutePlan | None = None
    fallback: RoutePlan | None = None
    for entry in entries:
        path_to = _names(world.shortest_path(entry.name, target_division.name))
        path_back = _names(world.shortest_path(target_division.name, entry.name))
        if not path_to or not path_back:
            continue
        projected = project_health(world, [path_to, path_back], health)
        candidate = RoutePlan(
            entry=entry.name,
            path_to=path_to,
            path_back=path_back,
            projected_health=projected,
        )
        if fallback is None:
            fallback = candidate
        if projected == DISQUALIFIED:
            logger.debug("Entry %s disqualified by dry run", entry.name)
            continue
        if best is None or projected > best.projected_health:
            best = candidate

    if best is not None:
        return best
    if fallback is not None:
        logger.warning("No entry survives the dry run; using %s", fallback.entry)
        return fallback
    first = entries[0].name
    logger.warning("No round trip found; force-starting at %s", first)
    return RoutePlan(
        entry=first,
        path_to=[first],
        path_back=[first],
        projected_health=DISQUALIFIED,
        forced=True,
    )


class AutomaticMission:
    """Plans and executes a full round trip without user input."""

    def __init__(
        self,
        world: BuildingMap,
        agent: Agent,
        *,
        mission: MissionInfo,
        config: SimulationConfig | None = None,
        result_id: str | None = None,
    ) -> None:
        self.world = world
        self.agent = agent
        self.mission = mission
        self.config = config or SimulationConfig()
        self.result_id = result_id or uuid4().hex
        self.plan: RoutePlan | None = None
        self.status: SimulationStatus | None = None
        self._path: list[str] = []
        self._entry_exits: list[str] = []
        self._collected: list[Item] = []
        self._defeated: list[Enemy] = []
        self._step = 0

    @property
    def path_names(self) -> list[str]:
        return list(self._path)

    @property
    def collected_items(self) -> list[Item]:
        return list(self._collected)

    @property
    def defeated_enemies(self) -> list[Enemy]:
        return list(self._defeated)

    @property
    def remaining_health(self) -> int:
        return self.agent.health

    def run(self, target: str | None = None) -> SimulationResult:
        for _ in self.iter_steps(target):
            pass
        return self.result()

    def prepare(self, target: str | None = None) -> RoutePlan:
        """Plan the round trip; configuration errors surface here."""
        target_name = self._resolve_target(target)
        self.plan = plan_round_trip(self.world, target_name, self.agent.health)
        logger.info(
            "Automatic run via %s (projected health %s)",
            self.plan.entry,
            self.plan.projected_health,
        )
        return self.plan

    def iter_steps(self, target: str | None = None) -> Iterator[StepPayload]:
        """Yield one payload per visited division until the trip ends.

        A plan made by :meth:`prepare` is reused unless *target* is given.
        """
        if self.plan is not None and target is None:
            plan = self.plan
        else:
            plan = self.prepare(target)

        for name in plan.divisions:
            payload = self._visit(name)
            yield payload
            if not self.agent.is_alive:
                self.status = SimulationStatus.FAILURE
                logger.info("Agent defeated in %s", name)
                return

        self.status = SimulationStatus.SUCCESS

    def result(self) -> SimulationResult:
        if self.status is None:
            raise RuntimeError("The mission has not finished yet.")
        return SimulationResult(
            id=self.result_id,
            mode=SimulationMode.AUTOMATIC,
            start_division=self._path[0] if self._path else None,
            end_division=self._path[-1] if self._path else None,
            status=self.status,
            remaining_health=self.agent.health,
            path=self.path_names,
            entry_exits=list(self._entry_exits),
            mission_code=self.mission.code,
            mission_version=self.mission.version,
        )

    def _resolve_target(self, target: str | None) -> str:
        if target is not None:
            return target
        if self.world.target is None:
            raise MissionConfigError("The mission has no target.")
        return self.world.target.division

    def _visit(self, name: str) -> StepPayload:
        division = self.world.division_by_name(name)
        origin = self.agent.division
        self.agent.move_to(division.name)
        self._path.append(division.name)
        if division.entry_exit and division.name not in self._entry_exits:
            self._entry_exits.append(division.name)
        self._step += 1
        events = [
            Event(kind="MOVE", payload={"from": origin, "to": division.name})
        ]

        report = resolve_combat(
            self.agent,
            division,
            initiative=Initiative.AGENT,
            rules=self.config.combat,
        )
        self._defeated.extend(report.defeated)
        if report.fought:
            events.append(
                Event(
                    kind="COMBAT",
                    payload={
                        "division": division.name,
                        "outcome": report.outcome.value,
                        "defeated": [enemy.name for enemy in report.defeated],
                        "damage_dealt": report.damage_dealt,
                        "damage_taken": report.damage_taken,
                    },
                )
            )
        if report.outcome == CombatOutcome.AGENT_DEFEATED:
            return self._payload(division.name, events)

        for item in division.take_items():
            self.agent.add_to_inventory(item)
            self._collected.append(item)
            logger.debug("Collected %s in %s", item.type, division.name)
            events.append(
                Event(
                    kind="COLLECT",
                    payload={"item": item.type, "points": item.points},
                )
            )

        while self.agent.health < self.config.auto_kit_threshold:
            kit = self.agent.use_recovery_kit()
            if kit is None:
                break
            events.append(
                Event(
                    kind="USE_KIT",
                    payload={"points": kit.points, "health": self.agent.health},
                )
            )

        target = self.world.target
        if (
            target is not None
            and target.division == division.name
            and not division.has_enemies
        ):
            self.world.clear_target()
            self.agent.objective_completed = True
            logger.info("Target %s captured in %s", target.type, division.name)
            events.append(
                Event(
                    kind="CAPTURE",
                    payload={"division": division.name, "type": target.type},
                )
            )

        return self._payload(division.name, events)

    def _payload(self, division: str, events: list[Event]) -> StepPayload:
        return StepPayload(
            step=self._step,
            division=division,
            health=self.agent.health,
            events=events,
        )


def _names(divisions: Iterable[Division]) -> list[str]:
    return [division.name for division in divisions]
