"""Module entry point for `python -m breachsim`."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console

from breachsim.app import (
    replay_run,
    resolve_log_level,
    resolve_results_dir,
    run_automatic,
    run_manual,
    run_manual_tui,
)
from breachsim.logs import setup_logging
from breachsim.render.run_reader import read_results
from breachsim.render.viewer import render_results_table
from breachsim.sim.errors import BreachsimError, MissionConfigError

logger = logging.getLogger("breachsim")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run a building infiltration mission."
    )
    parser.add_argument(
        "mission",
        type=Path,
        nargs="?",
        default=None,
        help="Mission JSON file to simulate.",
    )
    parser.add_argument(
        "--mode",
        choices=("auto", "manual"),
        default="auto",
        help="Plan the round trip automatically or play it turn by turn.",
    )
    parser.add_argument(
        "--tui",
        action="store_true",
        help="Play manual mode in the Textual interface.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for enemy movement (overrides BREACHSIM_SEED).",
    )
    parser.add_argument(
        "--results-dir",
        type=Path,
        default=None,
        help="Base directory for run logs and results.json.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (overrides BREACHSIM_LOG_LEVEL).",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Render exported results from a results.json file or directory.",
    )
    parser.add_argument(
        "--replay",
        type=Path,
        default=None,
        help="Run folder whose recorded steps should be printed.",
    )
    args = parser.parse_args()

    console = Console()
    setup_logging(resolve_log_level(args.log_level))

    if args.report is not None:
        if not args.report.exists():
            raise SystemExit(f"No results found at {args.report}.")
        console.print(render_results_table(read_results(args.report)))
        return

    if args.replay is not None:
        try:
            replay_run(args.replay, console)
        except FileNotFoundError as exc:
            raise SystemExit(str(exc)) from exc
        return

    if args.mission is None:
        parser.error("a mission file is required without --report or --replay")

    try:
        if args.mode == "manual" and args.tui:
            result, run_dir = run_manual_tui(
                args.mission, results_dir=args.results_dir, seed=args.seed
            )
        elif args.mode == "manual":
            result, run_dir = run_manual(
                args.mission,
                results_dir=args.results_dir,
                seed=args.seed,
                console=console,
            )
        else:
            result, run_dir = run_automatic(
                args.mission,
                results_dir=args.results_dir,
                seed=args.seed,
                console=console,
            )
    except MissionConfigError as exc:
        logger.error("Mission configuration error: %s", exc)
        raise SystemExit(2) from exc
    except BreachsimError as exc:
        logger.error("Simulation aborted: %s", exc)
        raise SystemExit(1) from exc

    if result is not None:
        console.print(f"Result {result.status.value}, health {result.remaining_health}")
    console.print(
        f"Run saved to {run_dir} (results in {resolve_results_dir(args.results_dir)})"
    )


if __name__ == "__main__":
    main()
