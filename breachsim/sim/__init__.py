"""Simulation core: building graph, world state, combat and mission drivers."""

from breachsim.sim.agent import Agent
from breachsim.sim.automatic import (
    DISQUALIFIED,
    AutomaticMission,
    RoutePlan,
    plan_round_trip,
    project_health,
)
from breachsim.sim.combat import (
    CombatOutcome,
    CombatPhase,
    CombatReport,
    Initiative,
    resolve_combat,
)
from breachsim.sim.contracts import (
    Command,
    CommandKind,
    Event,
    MissionInfo,
    MoveArgs,
    SimulationMode,
    SimulationResult,
    SimulationStatus,
    StepPayload,
    coerce_command,
    parse_command,
)
from breachsim.sim.errors import (
    BreachsimError,
    DivisionNotFoundError,
    IsolatedDivisionError,
    MissionConfigError,
    VertexNotFoundError,
)
from breachsim.sim.graph import Graph
from breachsim.sim.manual import (
    CommandSource,
    ManualMission,
    ManualPhase,
    ScriptedCommands,
    TurnReport,
)
from breachsim.sim.mission_loader import Mission, load_mission, parse_mission
from breachsim.sim.world import (
    BuildingMap,
    Division,
    DivisionKey,
    Enemy,
    EnemyMove,
    Item,
    Target,
    division_key,
)

__all__ = [
    "Agent",
    "AutomaticMission",
    "BreachsimError",
    "BuildingMap",
    "CombatOutcome",
    "CombatPhase",
    "CombatReport",
    "Command",
    "CommandKind",
    "CommandSource",
    "DISQUALIFIED",
    "Division",
    "DivisionKey",
    "DivisionNotFoundError",
    "Enemy",
    "EnemyMove",
    "Event",
    "Graph",
    "Initiative",
    "IsolatedDivisionError",
    "Item",
    "ManualMission",
    "ManualPhase",
    "Mission",
    "MissionConfigError",
    "MissionInfo",
    "MoveArgs",
    "RoutePlan",
    "ScriptedCommands",
    "SimulationMode",
    "SimulationResult",
    "SimulationStatus",
    "StepPayload",
    "Target",
    "TurnReport",
    "VertexNotFoundError",
    "coerce_command",
    "division_key",
    "load_mission",
    "parse_command",
    "plan_round_trip",
    "project_health",
    "resolve_combat",
]
