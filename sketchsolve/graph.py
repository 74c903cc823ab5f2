"""Undirected graph linking elements that share requirements."""

from __future__ import annotations

from collections import deque

from .model import RequirementData


class ConstraintGraph:
    """Elements as vertices, requirements between them as edges."""

    def __init__(self) -> None:
        self._adjacency: dict[int, dict[int, list[RequirementData]]] = {}

    def __contains__(self, vertex: object) -> bool:
        return vertex in self._adjacency

    def __len__(self) -> int:
        return len(self._adjacency)

    def add_vertex(self, vertex: int) -> None:
        self._adjacency.setdefault(vertex, {})

    def add_edge(self, requirement: RequirementData, first: int, second: int) -> None:
        """Join two vertices, adding them if needed, and remember the requirement."""
        self.add_vertex(first)
        self.add_vertex(second)
        self._adjacency[first].setdefault(second, []).append(requirement)
        if first != second:
            self._adjacency[second].setdefault(first, []).append(requirement)

    def neighbours(self, vertex: int) -> list[int]:
        return list(self._adjacency.get(vertex, {}))

    def connected_component(self, start: int) -> list[int]:
        """Vertices reachable from ``start``, in breadth-first order, ``start`` first."""
        seen = {start}
        order = [start]
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for neighbour in self._adjacency.get(current, {}):
                if neighbour not in seen:
                    seen.add(neighbour)
                    order.append(neighbour)
                    queue.append(neighbour)
        return order

    def clear(self) -> None:
        self._adjacency.clear()