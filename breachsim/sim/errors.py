"""Error taxonomy for the simulation core.

Configuration errors are raised before a run simulates its first step.
State errors signal invariant violations and are fatal to the run. Game
outcomes (defeat, mission failure) are never exceptions.
"""

from __future__ import annotations


class BreachsimError(Exception):
    """Base class for every error raised by the simulation core."""


class MissionConfigError(BreachsimError, ValueError):
    """The mission or map cannot be simulated as configured."""


class DivisionNotFoundError(MissionConfigError, KeyError):
    """A division name does not match any division on the map."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Division '{name}' not found.")
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class VertexNotFoundError(BreachsimError, KeyError):
    """A graph query referenced a vertex that is not in the graph."""

    def __init__(self, vertex: object) -> None:
        super().__init__(f"Vertex {vertex!r} not found.")
        self.vertex = vertex

    def __str__(self) -> str:
        return self.args[0]


class IsolatedDivisionError(BreachsimError, RuntimeError):
    """Enemies sit in a division that has no adjacent division to move to."""
