"""Undirected, unweighted graph with BFS reachability and shortest paths."""

from __future__ import annotations

from collections import deque
from typing import Generic, Hashable, Iterator, TypeVar

from breachsim.sim.errors import VertexNotFoundError

V = TypeVar("V", bound=Hashable)


class Graph(Generic[V]):
    """Index-based vertex store with symmetric adjacency.

    Vertices keep their insertion index; neighbor iteration and BFS discovery
    follow that index order so traversals are deterministic.
    """

    def __init__(self) -> None:
        self._vertices: list[V] = []
        self._index: dict[V, int] = {}
        self._adjacency: list[set[int]] = []

    def __len__(self) -> int:
        return len(self._vertices)

    def __contains__(self, vertex: object) -> bool:
        return vertex in self._index

    def __iter__(self) -> Iterator[V]:
        return iter(list(self._vertices))

    @property
    def vertices(self) -> list[V]:
        return list(self._vertices)

    def add_vertex(self, vertex: V | None) -> bool:
        if vertex is None or vertex in self._index:
            return False
        self._index[vertex] = len(self._vertices)
        self._vertices.append(vertex)
        self._adjacency.append(set())
        return True

    def remove_vertex(self, vertex: V) -> None:
        removed = self._require(vertex)
        del self._vertices[removed]
        del self._adjacency[removed]
        self._adjacency = [
            {
                index - 1 if index > removed else index
                for index in links
                if index != removed
            }
            for links in self._adjacency
        ]
        self._index = {value: index for index, value in enumerate(self._vertices)}

    def add_edge(self, a: V, b: V) -> None:
        index_a = self._require(a)
        index_b = self._require(b)
        if index_a == index_b:
            raise ValueError(f"Self-loop on {a!r} is not allowed.")
        self._adjacency[index_a].add(index_b)
        self._adjacency[index_b].add(index_a)

    def remove_edge(self, a: V, b: V) -> None:
        index_a = self._require(a)
        index_b = self._require(b)
        self._adjacency[index_a].discard(index_b)
        self._adjacency[index_b].discard(index_a)

    def is_adjacent(self, a: V, b: V) -> bool:
        index_a = self._index.get(a)
        index_b = self._index.get(b)
        if index_a is None or index_b is None:
            return False
        return index_b in self._adjacency[index_a]

    def neighbors(self, vertex: V) -> list[V]:
        index = self._require(vertex)
        return [self._vertices[i] for i in sorted(self._adjacency[index])]

    def edges(self) -> list[tuple[V, V]]:
        pairs: list[tuple[V, V]] = []
        for index, links in enumerate(self._adjacency):
            for other in sorted(links):
                if other > index:
                    pairs.append((self._vertices[index], self._vertices[other]))
        return pairs

    def iter_bfs(self, start: V) -> Iterator[V]:
        """Yield every vertex reachable from *start* once, in discovery order.

        The start vertex is validated eagerly; the traversal itself is lazy
        and the returned iterator cannot be restarted.
        """
        start_index = self._require(start)
        return self._bfs(start_index)

    def _bfs(self, start_index: int) -> Iterator[V]:
        visited = {start_index}
        queue: deque[int] = deque([start_index])
        while queue:
            current = queue.popleft()
            yield self._vertices[current]
            for neighbor in sorted(self._adjacency[current]):
                if neighbor in visited:
                    continue
                visited.add(neighbor)
                queue.append(neighbor)

    def shortest_path(self, start: V, target: V) -> list[V]:
        """Return the fewest-hop path ``[start, ..., target]``.

        An empty list means there is no path. ``start == target`` also
        returns an empty list, never a one-vertex path.
        """
        start_index = self._require(start)
        target_index = self._require(target)
        if start_index == target_index:
            return []

        queue: deque[int] = deque([start_index])
        came_from: dict[int, int | None] = {start_index: None}

        while queue:
            current = queue.popleft()
            if current == target_index:
                break
            for neighbor in sorted(self._adjacency[current]):
                if neighbor in came_from:
                    continue
                came_from[neighbor] = current
                queue.append(neighbor)

        if target_index not in came_from:
            return []
        return self._reconstruct_path(came_from, target_index)

    def _reconstruct_path(
        self, came_from: dict[int, int | None], current: int
    ) -> list[V]:
        path: list[V] = []
        step: int | None = current
        while step is not None:
            path.append(self._vertices[step])
            step = came_from[step]
        path.reverse()
        return path

    def _require(self, vertex: V) -> int:
        index = self._index.get(vertex)
        if index is None:
            raise VertexNotFoundError(vertex)
        return index
