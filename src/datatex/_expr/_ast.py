"""Expression AST node types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

    from datatex._value import KeyPath, Number


class BinaryOperator(StrEnum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


@dataclass(frozen=True, slots=True)
class NumberLiteral:
    value: Number


@dataclass(frozen=True, slots=True)
class Reference:
    """A dotted identifier, i.e. a dependency on another key path."""

    path: KeyPath


@dataclass(frozen=True, slots=True)
class Negate:
    operand: Node


@dataclass(frozen=True, slots=True)
class BinaryOp:
    op: BinaryOperator
    left: Node
    right: Node


@dataclass(frozen=True, slots=True)
class Call:
    name: str
    args: tuple[Node, ...]


type Node = NumberLiteral | Reference | Negate | BinaryOp | Call


def iter_references(node: Node) -> Generator[KeyPath]:
    """Yield every referenced key path, left to right, duplicates included."""
    match node:
        case Reference(path):
            yield path
        case Negate(operand):
            yield from iter_references(operand)
        case BinaryOp(_, left, right):
            yield from iter_references(left)
            yield from iter_references(right)
        case Call(_, args):
            for arg in args:
                yield from iter_references(arg)
        case NumberLiteral():
            return
        case _:
            msg = f"Unknown node type: {type(node)}"
            raise TypeError(msg)


@dataclass(frozen=True, slots=True)
class Expression:
    """A parsed expression together with the key paths it reads.

    Attributes:
        text: The expression text, without the ``expr:`` marker.
        ast: The root node.
        references: Referenced key paths in order of first appearance.

    """

    text: str
    ast: Node
    references: tuple[KeyPath, ...]

    @classmethod
    def from_ast(cls, text: str, ast: Node) -> Expression:
        return cls(text=text, ast=ast, references=tuple(dict.fromkeys(iter_references(ast))))
