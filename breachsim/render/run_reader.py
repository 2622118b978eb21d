"""Read run logs and exported results back into contracts."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator

from breachsim.db.run_log import RESULTS_NAME, load_results
from breachsim.sim.contracts import SimulationResult, StepPayload


def read_step_payloads(path: Path) -> Iterator[StepPayload]:
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            record = _parse_record(line)
            if not record:
                continue
            if record.get("type") != "step":
                continue
            payload = record.get("payload")
            if payload is None:
                continue
            yield StepPayload.model_validate(payload)


def read_results(path: Path) -> list[SimulationResult]:
    """Load every result under *path*.

    *path* may be a ``results.json`` export or a directory; directories are
    searched recursively for exports. The list is sorted by remaining health,
    highest first.
    """
    files = sorted(path.rglob(RESULTS_NAME)) if path.is_dir() else [path]
    results: list[SimulationResult] = []
    for file in files:
        results.extend(load_results(file))
    return sorted(results, key=lambda result: result.remaining_health, reverse=True)


def _parse_record(line: str) -> dict | None:
    try:
        return json.loads(line)
    except json.JSONDecodeError:
        return None
