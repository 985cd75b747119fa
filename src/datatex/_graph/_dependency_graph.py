"""Dependency graph over expression nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping


@dataclass(frozen=True, slots=True)
class DependencyGraph[T]:
    """A directed graph of "reads" relationships between nodes.

    ``predecessors(b) == (a,)`` means that ``b`` reads ``a``, so ``a`` has to
    be evaluated first. Predecessors keep the order in which a node first
    mentions them, and nodes keep the order they were given in, so walking
    the graph is deterministic.

    Attributes:
        _predecessors: Node to the nodes it reads.
        _successors: Node to the nodes that read it.

    """

    _predecessors: dict[T, tuple[T, ...]] = field(default_factory=dict)
    _successors: dict[T, tuple[T, ...]] = field(default_factory=dict)

    @classmethod
    def from_dependencies(cls, dependencies: Mapping[T, Iterable[T]]) -> DependencyGraph[T]:
        """Build a graph whose nodes are exactly the keys of ``dependencies``.

        Dependencies that are not themselves keys are not nodes; their
        edges are dropped. Repeated dependencies count once.

        Example:
            >>> graph = DependencyGraph.from_dependencies({"b": ["x", "a", "a"], "a": []})
            >>> graph.nodes
            ('b', 'a')
            >>> graph.predecessors("b")
            ('a',)

        """
        predecessors: dict[T, dict[T, None]] = {node: {} for node in dependencies}
        successors: dict[T, dict[T, None]] = {node: {} for node in dependencies}

        for node, deps in dependencies.items():
            for dep in deps:
                if dep in predecessors:
                    predecessors[node][dep] = None
                    successors[dep][node] = None

        return cls(
            _predecessors={k: tuple(v) for k, v in predecessors.items()},
            _successors={k: tuple(v) for k, v in successors.items()},
        )

    @property
    def nodes(self) -> tuple[T, ...]:
        """All nodes, in construction order."""
        return tuple(self._predecessors)

    def predecessors(self, node: T) -> tuple[T, ...]:
        """Nodes that ``node`` reads directly."""
        return self._predecessors.get(node, ())

    def successors(self, node: T) -> tuple[T, ...]:
        """Nodes that read ``node`` directly."""
        return self._successors.get(node, ())

    def ancestors(self, node: T) -> frozenset[T]:
        """Everything ``node`` reads, directly or through other nodes."""
        return _reachable(node, self.predecessors)

    def descendants(self, node: T) -> frozenset[T]:
        """Everything that reads ``node``, directly or through other nodes."""
        return _reachable(node, self.successors)

    def __len__(self) -> int:
        return len(self._predecessors)

    def __contains__(self, node: object) -> bool:
        return node in self._predecessors


def _reachable[T](start: T, step: Callable[[T], tuple[T, ...]]) -> frozenset[T]:
    seen: set[T] = set()
    frontier = list(step(start))
    while frontier:
        current = frontier.pop()
        if current in seen:
            continue
        seen.add(current)
        frontier.extend(step(current))
    return frozenset(seen)
