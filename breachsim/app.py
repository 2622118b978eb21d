"""Application entry for running missions and recording their results."""

from __future__ import annotations

import logging
import os
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.console import Console

from breachsim.config import SimulationConfig
from breachsim.db.run_log import (
    RESULTS_NAME,
    RUN_LOG_NAME,
    append_result,
    append_step,
    create_run_folder,
    record_result,
    write_header,
)
from breachsim.render.console_input import ConsoleCommandSource
from breachsim.render.run_reader import read_step_payloads
from breachsim.render.viewer import render_map, render_result, render_step
from breachsim.sim.agent import Agent
from breachsim.sim.automatic import AutomaticMission
from breachsim.sim.contracts import Command, SimulationMode, SimulationResult
from breachsim.sim.manual import CommandSource, ManualMission, TurnReport
from breachsim.sim.mission_loader import Mission, load_mission

logger = logging.getLogger(__name__)

DEFAULT_RESULTS_DIR = Path("results")
DEFAULT_LOG_LEVEL = "WARNING"


def run_automatic(
    mission_path: Path,
    *,
    results_dir: Path | None = None,
    seed: int | None = None,
    console: Console | None = None,
) -> tuple[SimulationResult, Path]:
    config = build_config(seed)
    mission = load_mission(mission_path)
    agent = _new_agent(config)
    driver = AutomaticMission(mission.world, agent, mission=mission.info, config=config)
    driver.prepare()
    base_dir = resolve_results_dir(results_dir)
    run_dir, log_path = _start_run(
        base_dir, mission, SimulationMode.AUTOMATIC, config, driver.result_id
    )
    if console:
        console.print(render_map(mission.world))
    for payload in driver.iter_steps():
        append_step(log_path, payload)
        if console:
            console.print(render_step(payload))
    result = driver.result()
    _finish_run(base_dir, log_path, result)
    if console:
        console.print(render_result(result))
    return result, run_dir


def run_manual(
    mission_path: Path,
    *,
    results_dir: Path | None = None,
    seed: int | None = None,
    source: CommandSource | None = None,
    console: Console | None = None,
) -> tuple[SimulationResult, Path]:
    config = build_config(seed)
    mission = load_mission(mission_path)
    agent = _new_agent(config)
    driver = ManualMission(
        mission.world,
        agent,
        mission=mission.info,
        config=config,
        rng=random.Random(config.seed),
    )
    driver.validate()
    base_dir = resolve_results_dir(results_dir)
    run_dir, log_path = _start_run(
        base_dir, mission, SimulationMode.MANUAL, config, driver.result_id
    )
    source = source or ConsoleCommandSource(
        mission.world, agent, console=console or Console()
    )
    result = driver.run(_LoggingSource(source, log_path))
    if driver.last_report is not None:
        append_step(log_path, driver.last_report.payload)
    _finish_run(base_dir, log_path, result)
    if console:
        console.print(render_result(result))
    return result, run_dir


def run_manual_tui(
    mission_path: Path,
    *,
    results_dir: Path | None = None,
    seed: int | None = None,
) -> tuple[SimulationResult | None, Path]:
    from breachsim.render.manual_screen import ManualApp, ManualScreen

    config = build_config(seed)
    mission = load_mission(mission_path)
    agent = _new_agent(config)
    driver = ManualMission(
        mission.world,
        agent,
        mission=mission.info,
        config=config,
        rng=random.Random(config.seed),
    )
    driver.validate()
    base_dir = resolve_results_dir(results_dir)
    run_dir, log_path = _start_run(
        base_dir, mission, SimulationMode.MANUAL, config, driver.result_id
    )

    def _on_turn(report: TurnReport) -> None:
        append_step(log_path, report.payload)

    def _on_finish(result: SimulationResult) -> None:
        _finish_run(base_dir, log_path, result)

    screen = ManualScreen(driver, on_turn=_on_turn, on_finish=_on_finish)
    ManualApp(screen, mission=mission.info).run()
    return screen.result, run_dir


def replay_run(run_folder: Path, console: Console) -> int:
    """Print every recorded step of a run; returns how many were shown."""
    log_path = run_folder / RUN_LOG_NAME
    if not log_path.exists():
        raise FileNotFoundError(f"No run log at {log_path}.")
    count = 0
    for payload in read_step_payloads(log_path):
        console.print(render_step(payload))
        count += 1
    return count


def build_config(seed: int | None = None) -> SimulationConfig:
    return SimulationConfig(seed=resolve_seed(seed))


def resolve_seed(seed: int | None) -> int | None:
    if seed is not None:
        return seed
    raw = os.getenv("BREACHSIM_SEED")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer BREACHSIM_SEED=%r", raw)
        return None


def resolve_results_dir(results_dir: Path | None) -> Path:
    if results_dir is not None:
        return results_dir
    raw = os.getenv("BREACHSIM_RESULTS_DIR")
    return Path(raw) if raw else DEFAULT_RESULTS_DIR


def resolve_log_level(level: str | None) -> str:
    return (level or os.getenv("BREACHSIM_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()


class _LoggingSource:
    """Wraps a command source and logs every report it is shown."""

    def __init__(self, source: CommandSource, log_path: Path) -> None:
        self._source = source
        self._log_path = log_path

    def choose_entry(self, entries: list[str]) -> str:
        return self._source.choose_entry(entries)

    def next_command(self, report: TurnReport) -> Command:
        append_step(self._log_path, report.payload)
        return self._source.next_command(report)


def _new_agent(config: SimulationConfig) -> Agent:
    return Agent(
        config.agent_name,
        health=config.starting_health,
        max_health=config.max_health,
    )


def _start_run(
    base_dir: Path,
    mission: Mission,
    mode: SimulationMode,
    config: SimulationConfig,
    result_id: str,
) -> tuple[Path, Path]:
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%SZ")
    run_dir, log_path = create_run_folder(
        base_dir, timestamp=f"{stamp}-{result_id[:8]}"
    )
    metadata: dict[str, Any] = {
        "run_id": run_dir.name,
        "result_id": result_id,
        "mission_code": mission.info.code,
        "mission_version": mission.info.version,
        "mode": mode.value,
        "seed": config.seed,
    }
    write_header(log_path, metadata=metadata)
    logger.info("Recording run to %s", run_dir)
    return run_dir, log_path


def _finish_run(base_dir: Path, log_path: Path, result: SimulationResult) -> None:
    append_result(log_path, result)
    record_result(base_dir / RESULTS_NAME, result)
