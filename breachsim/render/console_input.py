"""Console command source for manual mode."""

from __future__ import annotations

from rich.console import Console
from rich.prompt import Prompt

from breachsim.render.viewer import render_map, render_turn
from breachsim.sim.agent import Agent
from breachsim.sim.contracts import Command, coerce_command, parse_command
from breachsim.sim.manual import TurnReport
from breachsim.sim.world import BuildingMap

HELP_TEXT = "move <division> | use | attack | quit"


class ConsoleCommandSource:
    """Prompts for commands and prints every turn with rich."""

    def __init__(
        self,
        world: BuildingMap,
        agent: Agent,
        *,
        console: Console | None = None,
    ) -> None:
        self.world = world
        self.agent = agent
        self.console = console or Console()

    def choose_entry(self, entries: list[str]) -> str:
        self.console.print(render_map(self.world, agent=self.agent))
        return Prompt.ask(
            "Entry division",
            choices=entries,
            default=entries[0] if entries else None,
            console=self.console,
            case_sensitive=False,
        )

    def next_command(self, report: TurnReport) -> Command:
        self.console.print(render_turn(report, agent=self.agent))
        while True:
            text = Prompt.ask(f"Command ({HELP_TEXT})", console=self.console)
            command = parse_command(text)
            if command is not None:
                command = coerce_command(command, self.world.division_names())
            if command is not None:
                return command
            self.console.print(f"[red]Unknown command or division:[/red] {text}")
