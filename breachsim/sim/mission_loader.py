"""Load a mission JSON file into a populated building map."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from breachsim.sim.contracts import MissionInfo
from breachsim.sim.errors import MissionConfigError
from breachsim.sim.world import BuildingMap, Enemy, Item

logger = logging.getLogger(__name__)

T = TypeVar("T", Enemy, Item)


class TargetDef(BaseModel):
    model_config = ConfigDict(extra="forbid")

    division: str = Field(alias="divisao")
    type: str = Field(alias="tipo")


class EnemyDef(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(alias="nome")
    power: int = Field(alias="poder", ge=0)
    division: str = Field(alias="divisao")


class ItemDef(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: str = Field(alias="tipo")
    points: int = Field(default=0, alias="pontos", ge=0)
    division: str = Field(alias="divisao")


class MissionFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str = Field(alias="cod-missao")
    version: int = Field(alias="versao")
    building: list[str] = Field(alias="edificio")
    links: list[list[str]] = Field(default_factory=list, alias="ligacoes")
    entry_exits: list[str] = Field(default_factory=list, alias="entradas-saidas")
    target: TargetDef = Field(alias="alvo")
    enemies: list[EnemyDef] = Field(default_factory=list, alias="inimigos")
    items: list[ItemDef] = Field(default_factory=list, alias="itens")

    @field_validator("links")
    @classmethod
    def validate_links(cls, value: list[list[str]]) -> list[list[str]]:
        for link in value:
            if len(link) != 2:
                raise ValueError(f"link must name exactly two divisions: {link}")
        return value


@dataclass
class Mission:
    info: MissionInfo
    world: BuildingMap


def load_mission(path: Path) -> Mission:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise MissionConfigError(f"Cannot read mission file {path}: {exc}") from exc
    mission = parse_mission(raw)
    logger.info(
        "Loaded mission %s v%d from %s (%d divisions)",
        mission.info.code,
        mission.info.version,
        path,
        len(mission.world.divisions()),
    )
    return mission


def parse_mission(raw: Any) -> Mission:
    """Validate raw mission data and build the map through its public API."""
    try:
        data = MissionFile.model_validate(raw)
    except ValidationError as exc:
        raise MissionConfigError(f"Invalid mission data: {exc}") from exc

    world = BuildingMap()
    for name in data.building:
        world.add_division(name)
    for name_a, name_b in data.links:
        world.add_link(name_a, name_b)
    for name in data.entry_exits:
        world.mark_entry_exit(name)
    world.set_target(data.target.division, data.target.type)
    for enemy in data.enemies:
        world.add_enemy(
            enemy.division, _build(Enemy, name=enemy.name, power=enemy.power)
        )
    for item in data.items:
        world.add_item(item.division, _build(Item, type=item.type, points=item.points))

    return Mission(
        info=MissionInfo(code=data.code, version=data.version),
        world=world,
    )


def _build(cls: type[T], **fields: Any) -> T:
    try:
        return cls(**fields)
    except ValueError as exc:
        raise MissionConfigError(str(exc)) from exc
