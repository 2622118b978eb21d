"""Run logging (JSONL) and the sorted results export (JSON)."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from breachsim.sim.contracts import SimulationResult, StepPayload

SCHEMA_VERSION = 1
RUN_LOG_NAME = "run.jsonl"
RESULTS_NAME = "results.json"


def create_run_folder(
    base_dir: Path, *, timestamp: str | None = None
) -> tuple[Path, Path]:
    run_id = timestamp or _format_timestamp(datetime.now(timezone.utc))
    run_dir = base_dir / run_id
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir, run_dir / RUN_LOG_NAME


def write_header(path: Path, metadata: dict[str, Any]) -> None:
    record: dict[str, Any] = {
        "type": "header",
        "schema_version": SCHEMA_VERSION,
        "metadata": metadata,
    }
    _append_record(path, record)


def append_step(path: Path, payload: StepPayload) -> None:
    record: dict[str, Any] = {
        "type": "step",
        "schema_version": SCHEMA_VERSION,
        "payload": payload.model_dump(mode="json"),
    }
    _append_record(path, record)


def append_result(path: Path, result: SimulationResult) -> None:
    record: dict[str, Any] = {
        "type": "result",
        "schema_version": SCHEMA_VERSION,
        "payload": result.model_dump(mode="json"),
    }
    _append_record(path, record)


def export_results(path: Path, results: Iterable[SimulationResult]) -> Path:
    """Write results as a JSON array, healthiest run first."""
    ordered = sorted(results, key=lambda result: result.remaining_health, reverse=True)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps([result.model_dump(mode="json") for result in ordered], indent=2),
        encoding="utf-8",
    )
    return path


def load_results(path: Path) -> list[SimulationResult]:
    if not path.exists():
        return []
    data = json.loads(path.read_text(encoding="utf-8"))
    return [SimulationResult.model_validate(item) for item in data]


def record_result(path: Path, result: SimulationResult) -> Path:
    """Merge one result into an existing export, keeping the health order."""
    return export_results(path, [*load_results(path), result])


def _append_record(path: Path, record: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(record))
        handle.write("\n")


def _format_timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H-%M-%SZ")
