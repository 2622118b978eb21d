"""Rich rendering for the building, turns and results."""

from __future__ import annotations

from typing import Iterable

from rich.columns import Columns
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from breachsim.sim.agent import Agent
from breachsim.sim.contracts import SimulationResult, SimulationStatus, StepPayload
from breachsim.sim.manual import TurnReport
from breachsim.sim.world import BuildingMap


def render_map(world: BuildingMap, *, agent: Agent | None = None) -> RenderableType:
    table = Table(title="Building", show_header=True, header_style="bold")
    table.add_column("Division")
    table.add_column("Links")
    table.add_column("Enemies")
    table.add_column("Items")

    target = world.target
    for division in world.divisions():
        label = Text(division.name)
        if division.entry_exit:
            label.append(" [E/S]", style="cyan")
        if target is not None and target.division == division.name:
            label.append(" [target]", style="bold magenta")
        if agent is not None and agent.division == division.name:
            label.append(" @", style="bold green")
        table.add_row(
            label,
            ", ".join(neighbor.name for neighbor in world.neighbors(division.name))
            or "-",
            ", ".join(f"{enemy.name} ({enemy.power})" for enemy in division.enemies)
            or "-",
            ", ".join(f"{item.type} ({item.points})" for item in division.items)
            or "-",
        )
    return table


def render_agent(agent: Agent) -> RenderableType:
    table = Table(show_header=False)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Agent", agent.name)
    table.add_row("Health", f"{agent.health}/{agent.max_health}")
    table.add_row("Division", agent.division or "-")
    table.add_row(
        "Inventory", ", ".join(item.type for item in agent.inventory) or "None"
    )
    table.add_row("Target secured", "yes" if agent.objective_completed else "no")
    return Panel(table, title="Agent")


def render_step(payload: StepPayload, *, max_events: int = 8) -> RenderableType:
    header = Text(
        f"Step {payload.step}: {payload.division or '-'} (health {payload.health})",
        style="bold",
    )
    return Group(header, _render_events(payload, max_events=max_events))


def render_turn(report: TurnReport, *, agent: Agent | None = None) -> RenderableType:
    guidance = Table(show_header=False)
    guidance.add_column("Field")
    guidance.add_column("Value")
    guidance.add_row("Phase", report.phase.value)
    guidance.add_row("To goal", " -> ".join(report.path_to_goal) or "-")
    guidance.add_row("To kit", " -> ".join(report.path_to_kit) or "-")
    messages = Text("\n".join(report.messages) or "...")

    left = Group(render_step(report.payload), messages)
    right: list[RenderableType] = [Panel(guidance, title="Guidance")]
    if agent is not None:
        right.append(render_agent(agent))
    return Columns([Panel(left, title="Turn"), Group(*right)])


def render_result(result: SimulationResult) -> RenderableType:
    style = "bold green" if result.status == SimulationStatus.SUCCESS else "bold red"
    table = Table(show_header=False)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Mission", f"{result.mission_code} v{result.mission_version}")
    table.add_row("Mode", result.mode.value)
    table.add_row("Status", Text(result.status.value, style=style))
    table.add_row("Health", str(result.remaining_health))
    table.add_row("Start", result.start_division or "-")
    table.add_row("End", result.end_division or "-")
    table.add_row("Path", " -> ".join(result.path) or "-")
    table.add_row("Entry/exits", ", ".join(result.entry_exits) or "-")
    return Panel(table, title=f"Result {result.id[:8]}")


def render_results_table(results: Iterable[SimulationResult]) -> RenderableType:
    table = Table(title="Results", show_header=True, header_style="bold")
    table.add_column("Id")
    table.add_column("Mission")
    table.add_column("Mode")
    table.add_column("Status")
    table.add_column("Health", justify="right")
    table.add_column("Path")

    rows = sorted(results, key=lambda result: result.remaining_health, reverse=True)
    for result in rows:
        table.add_row(
            result.id[:8],
            f"{result.mission_code} v{result.mission_version}",
            result.mode.value,
            result.status.value,
            str(result.remaining_health),
            " -> ".join(result.path),
        )
    if not rows:
        table.add_row("-", "-", "-", "-", "-", "No results")
    return table


def _render_events(payload: StepPayload, *, max_events: int) -> RenderableType:
    table = Table(title="Events", show_header=True, header_style="bold")
    table.add_column("Kind")
    table.add_column("Detail")

    for event in payload.events[-max_events:]:
        table.add_row(event.kind, _format_payload(event.payload))
    if not payload.events:
        table.add_row("-", "None")
    return table


def _format_payload(payload: dict) -> str:
    if not payload:
        return "-"
    return ", ".join(f"{key}={value}" for key, value in payload.items())
