"""Textual screen that drives a manual mission from typed commands."""

from __future__ import annotations

import logging
from typing import Callable

from rich.console import Group
from rich.panel import Panel
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Footer, Input, Static

from breachsim.render.viewer import render_agent, render_map, render_turn
from breachsim.sim.contracts import (
    Command,
    CommandKind,
    MissionInfo,
    SimulationResult,
    coerce_command,
    parse_command,
)
from breachsim.sim.errors import MissionConfigError
from breachsim.sim.manual import ManualMission, ManualPhase, TurnReport

logger = logging.getLogger(__name__)

HELP_TEXT = "Commands: move <division>, use, attack, quit."


class ManualScreen(Screen):
    CSS = """
    Screen {
        layout: vertical;
    }
    #panels {
        height: 1fr;
    }
    #map-view {
        width: 1fr;
    }
    #turn-view {
        width: 1fr;
    }
    """

    BINDINGS = [("escape", "quit_mission", "Quit mission")]

    def __init__(
        self,
        mission: ManualMission,
        *,
        on_turn: Callable[[TurnReport], None] | None = None,
        on_finish: Callable[[SimulationResult], None] | None = None,
    ) -> None:
        super().__init__()
        self.mission = mission
        self._on_turn = on_turn
        self._on_finish = on_finish
        self.result: SimulationResult | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="root"):
            with Horizontal(id="panels"):
                yield Static(id="map-view")
                yield Static(id="turn-view")
            yield Input(placeholder="Entry division", id="command")
        yield Footer()

    def on_mount(self) -> None:
        entries = ", ".join(d.name for d in self.mission.world.entry_exits())
        self._refresh_map()
        self.query_one("#turn-view", Static).update(
            Panel(Text(f"Choose an entry: {entries}"), title="Turn")
        )
        self.query_one("#command", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        text = event.value.strip()
        event.input.value = ""
        if not text or self.mission.finished:
            return
        if self.mission.phase == ManualPhase.AWAITING_ENTRY:
            try:
                report = self.mission.start(text)
            except MissionConfigError as exc:
                self._show_message(str(exc))
                return
            event.input.placeholder = HELP_TEXT
        else:
            command = parse_command(text)
            if command is not None:
                command = coerce_command(command, self.mission.world.division_names())
            if command is None:
                self._show_message(f"Unknown command '{text}'. {HELP_TEXT}")
                return
            report = self.mission.step(command)
        self._show_report(report)

    def action_quit_mission(self) -> None:
        if self.mission.phase == ManualPhase.AWAITING_COMMAND:
            report = self.mission.step(Command(kind=CommandKind.QUIT))
            self._show_report(report)
        else:
            self.app.exit()

    def _show_report(self, report: TurnReport) -> None:
        if self._on_turn:
            self._on_turn(report)
        self._refresh_map()
        self.query_one("#turn-view", Static).update(
            render_turn(report, agent=self.mission.agent)
        )
        if self.mission.finished and self.result is None:
            self.result = self.mission.result()
            logger.info("Manual run finished: %s", self.result.status.value)
            if self._on_finish:
                self._on_finish(self.result)
            self.query_one("#command", Input).placeholder = "Press escape to leave."

    def _show_message(self, message: str) -> None:
        self.query_one("#turn-view", Static).update(
            Panel(Group(Text(message), render_agent(self.mission.agent)), title="Turn")
        )

    def _refresh_map(self) -> None:
        self.query_one("#map-view", Static).update(
            render_map(self.mission.world, agent=self.mission.agent)
        )


class ManualApp(App):
    """Hosts a manual mission screen, titled after the mission."""

    BINDINGS = [("f1", "show_help", "Help")]

    def __init__(self, screen: ManualScreen, *, mission: MissionInfo) -> None:
        super().__init__()
        self._mission_screen = screen
        self.title = "Breachsim"
        self.sub_title = f"{mission.code} v{mission.version}"

    def on_mount(self) -> None:
        self.push_screen(self._mission_screen)

    def action_show_help(self) -> None:
        self.notify(HELP_TEXT, title="Commands")
