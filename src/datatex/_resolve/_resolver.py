"""Three-colour dependency resolution of expression nodes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from datatex._errors import (
    CircularDependencyError,
    DatatexError,
    EvaluationError,
    TypeMismatchError,
    UnknownReferenceError,
)
from datatex._expr import evaluate
from datatex._graph import DependencyGraph
from datatex._value import is_number, value_kind

from ._nodes import ExpressionNode, ResolutionState

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from datatex._value import KeyPath, Number, ValueTree

logger = logging.getLogger(__name__)


def build_dependency_graph(nodes: Mapping[KeyPath, ExpressionNode]) -> DependencyGraph[KeyPath]:
    """Build the graph over expression nodes.

    Plain scalars that expressions read are not nodes of the graph.
    """
    return DependencyGraph.from_dependencies({path: node.dependencies for path, node in nodes.items()})


@dataclass(frozen=True, slots=True)
class TreeEnvironment:
    """Look up referenced numbers in a partially resolved tree.

    Resolved expression nodes answer with their computed value. Anything else
    is read from the tree and must already be a number.
    """

    tree: ValueTree
    nodes: Mapping[KeyPath, ExpressionNode] = field(default_factory=dict)

    def __call__(self, path: KeyPath) -> Number:
        node = self.nodes.get(path)
        if node is not None and node.state is ResolutionState.RESOLVED and node.value is not None:
            return node.value

        value = self.tree.get(path)
        if not is_number(value):
            raise TypeMismatchError(path, value_kind(value))
        return value


@dataclass(slots=True)
class Resolver:
    """Resolve every expression node of a tree to a number, in place.

    The nodes are walked depth first over their dependency graph with an
    explicit stack, so arbitrarily long dependency chains never hit the
    interpreter's recursion limit. A node is written back into the tree only
    after all of its dependencies.

    A resolver is single use: after a failure every node that was not
    resolved is left ``failed`` and the tree must be discarded.

    Attributes:
        tree: The tree being resolved. It is mutated.
        nodes: Expression nodes found in ``tree``, keyed by key path.
        graph: The dependency graph over ``nodes``.
        order: Key paths in the order they were resolved.

    """

    tree: ValueTree
    nodes: Mapping[KeyPath, ExpressionNode]
    graph: DependencyGraph[KeyPath] = field(init=False)
    order: list[KeyPath] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        self.graph = build_dependency_graph(self.nodes)

    def resolve(self) -> list[KeyPath]:
        """Resolve all unresolved nodes.

        Returns:
            Key paths of the nodes resolved by this call, in resolution order.

        Raises:
            UnknownReferenceError: If an expression reads a key that does not exist.
            CircularDependencyError: If expressions depend on each other in a cycle.
            EvaluationError: If an expression cannot be evaluated. ``path`` is set
                to the failing expression.

        """
        if any(node.state is ResolutionState.FAILED for node in self.nodes.values()):
            msg = "Cannot resolve: a previous resolution of this tree failed"
            raise RuntimeError(msg)

        start = len(self.order)
        try:
            for path in self.graph.nodes:
                if self.nodes[path].state is ResolutionState.UNRESOLVED:
                    self._resolve_from(path)
        except DatatexError:
            failed = [node for node in self.nodes.values() if node.state is not ResolutionState.RESOLVED]
            for node in failed:
                node.state = ResolutionState.FAILED
            logger.debug("Resolution failed, marked %d expression(s) as failed", len(failed))
            raise

        resolved = self.order[start:]
        logger.debug("Resolved %d expression(s)", len(resolved))
        return resolved

    def _enter(self, path: KeyPath) -> Iterator[KeyPath]:
        node = self.nodes[path]
        for dep in node.dependencies:
            if dep not in self.graph and not self.tree.contains(dep):
                raise UnknownReferenceError(path, dep)
        node.state = ResolutionState.RESOLVING
        return iter(self.graph.predecessors(path))

    def _resolve_from(self, start: KeyPath) -> None:
        chain: list[KeyPath] = [start]
        on_chain: dict[KeyPath, int] = {start: 0}
        pending: list[Iterator[KeyPath]] = [self._enter(start)]

        while pending:
            path = chain[-1]
            dep = next(pending[-1], None)

            if dep is None:
                self._evaluate(self.nodes[path])
                pending.pop()
                chain.pop()
                del on_chain[path]
                continue

            match self.nodes[dep].state:
                case ResolutionState.RESOLVED:
                    continue
                case ResolutionState.RESOLVING:
                    raise CircularDependencyError(chain[on_chain[dep] :])
                case _:
                    logger.debug("Resolving %s first (needed by %s)", dep, path)
                    pending.append(self._enter(dep))
                    on_chain[dep] = len(chain)
                    chain.append(dep)

    def _evaluate(self, node: ExpressionNode) -> None:
        env = TreeEnvironment(self.tree, self.nodes)
        try:
            value = evaluate(node.ast, env)
        except EvaluationError as e:
            raise e.with_path(node.path) from None

        self.tree.set(node.path, value)
        node.value = value
        node.state = ResolutionState.RESOLVED
        self.order.append(node.path)
        logger.debug("Evaluated %s = %r (from %r)", node.path, value, node.text)
