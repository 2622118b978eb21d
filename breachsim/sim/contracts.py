"""Data contracts shared by the orchestrators, the run log and the viewers."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)


class MissionInfo(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    code: str
    version: int


class Event(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: str
    payload: dict[str, Any] = Field(default_factory=dict)


class StepPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    step: int
    division: str | None
    health: int
    events: list[Event] = Field(default_factory=list)


class SimulationStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class SimulationMode(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"


class SimulationResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    mode: SimulationMode
    start_division: str | None
    end_division: str | None
    status: SimulationStatus
    remaining_health: int
    path: list[str] = Field(default_factory=list)
    entry_exits: list[str] = Field(default_factory=list)
    mission_code: str
    mission_version: int


class CommandKind(str, Enum):
    MOVE = "MOVE"
    USE_KIT = "USE_KIT"
    ATTACK = "ATTACK"
    QUIT = "QUIT"


class MoveArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    to_division: str


class Command(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: CommandKind
    move: MoveArgs | None = None

    @model_validator(mode="after")
    def validate_command(self) -> "Command":
        if self.kind == CommandKind.MOVE:
            if self.move is None:
                raise ValueError("MOVE requires move args")
        elif self.move is not None:
            raise ValueError(f"{self.kind.value} cannot include args")
        return self


_VERBS = {
    "move": CommandKind.MOVE,
    "mover": CommandKind.MOVE,
    "go": CommandKind.MOVE,
    "use": CommandKind.USE_KIT,
    "usar": CommandKind.USE_KIT,
    "kit": CommandKind.USE_KIT,
    "attack": CommandKind.ATTACK,
    "atacar": CommandKind.ATTACK,
    "quit": CommandKind.QUIT,
    "sair": CommandKind.QUIT,
    "exit": CommandKind.QUIT,
}


def coerce_command(raw: Any, valid_divisions: set[str] | None = None) -> Command | None:
    """Validate a command; return None when it is malformed or targets nowhere."""
    try:
        command = Command.model_validate(raw)
    except ValidationError:
        return None

    if valid_divisions is None or command.move is None:
        return command

    wanted = command.move.to_division.strip().casefold()
    if wanted not in {name.strip().casefold() for name in valid_divisions}:
        return None
    return command


def parse_command(text: str) -> Command | None:
    """Parse a typed command such as ``move Hall``, ``use`` or ``sair``."""
    verb, _, rest = text.strip().partition(" ")
    kind = _VERBS.get(verb.casefold())
    if kind is None:
        return None
    rest = rest.strip()
    if kind == CommandKind.MOVE:
        if not rest:
            return None
        return Command(kind=kind, move=MoveArgs(to_division=rest))
    if rest:
        return None
    return Command(kind=kind)
