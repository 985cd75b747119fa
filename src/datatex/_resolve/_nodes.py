"""Expression nodes: tree locations whose value is computed from other values."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datatex._expr import Expression, Node
    from datatex._value import KeyPath, Number


class ResolutionState(StrEnum):
    """Resolution progress of an expression node (white, gray, black, failed)."""

    UNRESOLVED = auto()
    RESOLVING = auto()
    RESOLVED = auto()
    FAILED = auto()


@dataclass(slots=True, eq=False)
class ExpressionNode:
    """A parsed expression found in the value tree.

    Created once by the extractor. Only the resolver changes ``state`` and
    ``value``; nodes are never recreated during a run.

    Attributes:
        path: Key path of the expression in the tree.
        raw: The original string, marker included.
        expression: Parsed expression (text, AST and references).
        state: Current resolution state.
        value: The computed number once resolved.

    """

    path: KeyPath
    raw: str
    expression: Expression
    state: ResolutionState = field(default=ResolutionState.UNRESOLVED)
    value: Number | None = None

    @property
    def text(self) -> str:
        return self.expression.text

    @property
    def ast(self) -> Node:
        return self.expression.ast

    @property
    def dependencies(self) -> tuple[KeyPath, ...]:
        """Key paths the expression reads, in order of first appearance."""
        return self.expression.references

    @property
    def is_terminal(self) -> bool:
        return self.state in (ResolutionState.RESOLVED, ResolutionState.FAILED)
