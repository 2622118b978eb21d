"""Manual mode: a turn-based state machine fed by a command source."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Protocol
from uuid import uuid4

from breachsim.config import RECOVERY_KIT, SimulationConfig
from breachsim.sim.agent import Agent
from breachsim.sim.combat import (
    CombatOutcome,
    CombatReport,
    Initiative,
    resolve_combat,
)
from breachsim.sim.contracts import (
    Command,
    CommandKind,
    Event,
    MissionInfo,
    SimulationMode,
    SimulationResult,
    SimulationStatus,
    StepPayload,
    parse_command,
)
from breachsim.sim.errors import (
    BreachsimError,
    DivisionNotFoundError,
    MissionConfigError,
)
from breachsim.sim.world import BuildingMap, Division, Enemy, Item

logger = logging.getLogger(__name__)


class ManualPhase(str, Enum):
    AWAITING_ENTRY = "AWAITING_ENTRY"
    AWAITING_COMMAND = "AWAITING_COMMAND"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    DEFEATED = "DEFEATED"
    QUIT = "QUIT"
    ABORTED = "ABORTED"


TERMINAL_PHASES = {
    ManualPhase.SUCCEEDED,
    ManualPhase.FAILED,
    ManualPhase.DEFEATED,
    ManualPhase.QUIT,
    ManualPhase.ABORTED,
}


@dataclass
class TurnReport:
    """What a front end needs to show after a turn."""

    phase: ManualPhase
    payload: StepPayload
    path_to_goal: list[str] = field(default_factory=list)
    path_to_kit: list[str] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)


class CommandSource(Protocol):
    def choose_entry(self, entries: list[str]) -> str:
        """Return the entry/exit division the agent starts from."""

    def next_command(self, report: TurnReport) -> Command:
        """Return the next command given the latest turn report."""


class ScriptedCommands:
    """Replays a fixed entry and command list; quits once exhausted."""

    def __init__(self, entry: str, commands: Iterable[Command | str]) -> None:
        self.entry = entry
        self._commands = list(commands)
        self.reports: list[TurnReport] = []

    def choose_entry(self, entries: list[str]) -> str:
        return self.entry

    def next_command(self, report: TurnReport) -> Command:
        self.reports.append(report)
        if not self._commands:
            return Command(kind=CommandKind.QUIT)
        raw = self._commands.pop(0)
        if isinstance(raw, Command):
            return raw
        command = parse_command(raw)
        if command is None:
            raise ValueError(f"Unrecognized scripted command: {raw!r}")
        return command


class ManualMission:
    def __init__(
        self,
        world: BuildingMap,
        agent: Agent,
        *,
        mission: MissionInfo,
        config: SimulationConfig | None = None,
        rng: random.Random | None = None,
        collect_items: bool = True,
        result_id: str | None = None,
    ) -> None:
        self.world = world
        self.agent = agent
        self.mission = mission
        self.config = config or SimulationConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.collect_items = collect_items
        self.result_id = result_id or uuid4().hex
        self.phase = ManualPhase.AWAITING_ENTRY
        self.last_report: TurnReport | None = None
        self._path: list[str] = []
        self._entry_exits: list[str] = []
        self._collected: list[Item] = []
        self._defeated: list[Enemy] = []
        self._step = 0

    @property
    def finished(self) -> bool:
        return self.phase in TERMINAL_PHASES

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

    @property
    def status(self) -> SimulationStatus | None:
        if not self.finished:
            return None
        if self.phase == ManualPhase.SUCCEEDED:
            return SimulationStatus.SUCCESS
        return SimulationStatus.FAILURE

    def run(self, source: CommandSource) -> SimulationResult:
        self.validate()
        entries = [division.name for division in self.world.entry_exits()]
        report = self.start(source.choose_entry(entries))
        while not self.finished:
            report = self.step(source.next_command(report))
        return self.result()

    def validate(self) -> None:
        """Raise MissionConfigError unless the target can be reached from an entry."""
        if self.world.target is None:
            raise MissionConfigError("The mission has no target.")
        self.world.require_reachable(self.world.target.division)

    def start(self, entry: str) -> TurnReport:
        if self.phase != ManualPhase.AWAITING_ENTRY:
            raise RuntimeError("The mission has already started.")
        self.validate()
        division = self.world.division_by_name(entry)
        if not division.entry_exit:
            raise MissionConfigError(
                f"Division '{division.name}' is not an entry/exit."
            )

        self.phase = ManualPhase.AWAITING_COMMAND
        events: list[Event] = []
        messages = [f"{self.agent.name} enters the building at {division.name}."]
        self._enter(division, events, messages)
        if self.phase == ManualPhase.AWAITING_COMMAND:
            self._check_target(entered_exit=False, events=events, messages=messages)
        logger.info("Manual run started at %s", division.name)
        return self._report(events, messages)

    def step(self, command: Command) -> TurnReport:
        if self.phase != ManualPhase.AWAITING_COMMAND:
            raise RuntimeError(f"Cannot take a turn in phase {self.phase.value}.")

        events: list[Event] = []
        messages: list[str] = []
        if command.kind == CommandKind.QUIT:
            self.phase = ManualPhase.QUIT
            events.append(Event(kind="QUIT"))
            messages.append("Mission abandoned.")
            logger.info("Manual run quit by the player")
            return self._report(events, messages)

        try:
            self._take_turn(command, events, messages)
        except MissionConfigError:
            raise
        except BreachsimError as exc:
            self.phase = ManualPhase.ABORTED
            events.append(Event(kind="ABORT", payload={"reason": str(exc)}))
            messages.append(f"Mission aborted: {exc}")
            logger.error("Manual run aborted: %s", exc)
        return self._report(events, messages)

    def guidance(self) -> tuple[list[str], list[str]]:
        """Paths to the current goal and to the nearest recovery kit."""
        current = self.agent.division
        if current is None:
            return [], []
        target = self.world.target
        if target is not None and not self.agent.objective_completed:
            goal = _names(self.world.shortest_path(current, target.division))
        else:
            goal = _names(self.world.nearest_entry_exit(current))
        kit: list[str] = []
        nearest = self.world.nearest_item_of_type(current, RECOVERY_KIT)
        if nearest is not None:
            kit_division, _ = nearest
            if kit_division.name == current:
                kit = [current]
            else:
                kit = _names(self.world.shortest_path(current, kit_division.name))
        return goal, kit

    def result(self) -> SimulationResult:
        status = self.status
        if status is None:
            raise RuntimeError("The mission has not finished yet.")
        return SimulationResult(
            id=self.result_id,
            mode=SimulationMode.MANUAL,
            start_division=self._path[0] if self._path else None,
            end_division=self.agent.division,
            status=status,
            remaining_health=self.agent.health,
            path=self.path_names,
            entry_exits=list(self._entry_exits),
            mission_code=self.mission.code,
            mission_version=self.mission.version,
        )

    def _take_turn(
        self, command: Command, events: list[Event], messages: list[str]
    ) -> None:
        entered_exit = False
        if command.kind == CommandKind.MOVE and command.move is not None:
            entered_exit = self._move(command.move.to_division, events, messages)
        elif command.kind == CommandKind.USE_KIT:
            self._use_kit(events, messages)
        elif command.kind == CommandKind.ATTACK:
            division = self._current_division()
            if division.has_enemies:
                self._fight(division, Initiative.AGENT, events, messages)
            else:
                messages.append(f"There is nobody to attack in {division.name}.")

        if self.agent.is_alive and self.phase == ManualPhase.AWAITING_COMMAND:
            self._enemy_turn(events, messages)
        if self.phase == ManualPhase.AWAITING_COMMAND:
            self._check_target(
                entered_exit=entered_exit, events=events, messages=messages
            )

    def _current_division(self) -> Division:
        if self.agent.division is None:
            raise RuntimeError("The agent has not entered the building.")
        return self.world.division_by_name(self.agent.division)

    def _move(self, name: str, events: list[Event], messages: list[str]) -> bool:
        origin = self._current_division()
        try:
            destination = self.world.division_by_name(name)
        except DivisionNotFoundError:
            destination = None
        if destination is None or not self.world.can_move(
            origin.name, destination.name
        ):
            messages.append(f"Cannot move from {origin.name} to {name.strip()}.")
            events.append(
                Event(kind="INVALID_MOVE", payload={"from": origin.name, "to": name})
            )
            logger.debug("Invalid move %s -> %s", origin.name, name)
            return False

        events.append(
            Event(kind="MOVE", payload={"from": origin.name, "to": destination.name})
        )
        self._enter(destination, events, messages)
        return destination.entry_exit and self.agent.is_alive

    def _enter(
        self, division: Division, events: list[Event], messages: list[str]
    ) -> None:
        self.agent.move_to(division.name)
        self._path.append(division.name)
        if division.entry_exit and division.name not in self._entry_exits:
            self._entry_exits.append(division.name)
        if division.has_enemies:
            self._fight(division, Initiative.AGENT, events, messages)
        if self.agent.is_alive and self.collect_items:
            for item in division.take_items():
                self.agent.add_to_inventory(item)
                self._collected.append(item)
                events.append(
                    Event(
                        kind="COLLECT",
                        payload={"item": item.type, "points": item.points},
                    )
                )
                messages.append(f"Picked up {item.type} ({item.points}).")

    def _use_kit(self, events: list[Event], messages: list[str]) -> None:
        kit = self.agent.use_recovery_kit()
        if kit is None:
            messages.append("No recovery kit in the inventory.")
            return
        events.append(
            Event(
                kind="USE_KIT",
                payload={"points": kit.points, "health": self.agent.health},
            )
        )
        messages.append(f"Used a recovery kit, health is now {self.agent.health}.")

    def _fight(
        self,
        division: Division,
        initiative: Initiative,
        events: list[Event],
        messages: list[str],
    ) -> CombatReport:
        report = resolve_combat(
            self.agent, division, initiative=initiative, rules=self.config.combat
        )
        self._defeated.extend(report.defeated)
        events.append(
            Event(
                kind="COMBAT",
                payload={
                    "division": division.name,
                    "initiative": initiative.value,
                    "outcome": report.outcome.value,
                    "defeated": [enemy.name for enemy in report.defeated],
                    "damage_dealt": report.damage_dealt,
                    "damage_taken": report.damage_taken,
                },
            )
        )
        if report.outcome == CombatOutcome.AGENT_DEFEATED:
            self.phase = ManualPhase.DEFEATED
            messages.append(f"{self.agent.name} was defeated in {division.name}.")
            logger.info("Agent defeated in %s", division.name)
        else:
            messages.append(
                f"Combat in {division.name}: took {report.damage_taken} damage, "
                f"defeated {len(report.defeated)}."
            )
        return report

    def _enemy_turn(self, events: list[Event], messages: list[str]) -> None:
        moves = self.world.relocate_enemies(self.rng)
        for move in moves:
            events.append(
                Event(
                    kind="ENEMY_MOVE",
                    payload={
                        "enemy": move.enemy.name,
                        "from": move.origin,
                        "to": move.destination,
                    },
                )
            )
        here = self._current_division()
        if any(move.destination == here.name for move in moves) and here.has_enemies:
            messages.append(f"Enemies burst into {here.name}!")
            self._fight(here, Initiative.ENEMIES, events, messages)

    def _check_target(
        self, *, entered_exit: bool, events: list[Event], messages: list[str]
    ) -> None:
        division = self._current_division()
        target = self.world.target
        if (
            target is not None
            and target.division == division.name
            and not division.has_enemies
        ):
            self.world.clear_target()
            self.agent.objective_completed = True
            events.append(
                Event(
                    kind="CAPTURE",
                    payload={"division": division.name, "type": target.type},
                )
            )
            messages.append(f"Target {target.type} secured. Head for an exit.")
            logger.info("Target %s captured in %s", target.type, division.name)

        if entered_exit and division.entry_exit:
            if self.agent.objective_completed:
                self.phase = ManualPhase.SUCCEEDED
                messages.append("Extraction complete. Mission accomplished.")
            else:
                self.phase = ManualPhase.FAILED
                messages.append("Left the building without the target. Mission failed.")
            events.append(Event(kind="EXIT", payload={"division": division.name}))

    def _report(self, events: list[Event], messages: list[str]) -> TurnReport:
        self._step += 1
        goal, kit = self.guidance()
        payload = StepPayload(
            step=self._step,
            division=self.agent.division,
            health=self.agent.health,
            events=events,
        )
        self.last_report = TurnReport(
            phase=self.phase,
            payload=payload,
            path_to_goal=goal,
            path_to_kit=kit,
            messages=messages,
        )
        return self.last_report


def _names(divisions: Iterable[Division]) -> list[str]:
    return [division.name for division in divisions]
