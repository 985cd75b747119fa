"""Evaluation of expression ASTs against an environment of numbers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from datatex._errors import DivisionByZeroError, NumericOverflowError

from ._ast import BinaryOp, BinaryOperator, Call, Negate, NumberLiteral, Reference
from ._functions import BUILTIN_FUNCTIONS, check_finite

if TYPE_CHECKING:
    from collections.abc import Callable

    from datatex._value import KeyPath, Number

    from ._ast import Node

logger = logging.getLogger(__name__)

type Environment = Callable[[KeyPath], Number]


def _apply(op: BinaryOperator, left: Number, right: Number) -> Number:
    try:
        match op:
            case BinaryOperator.ADD:
                result = left + right
            case BinaryOperator.SUBTRACT:
                result = left - right
            case BinaryOperator.MULTIPLY:
                result = left * right
            case BinaryOperator.DIVIDE:
                if right == 0:
                    raise DivisionByZeroError
                result = left / right
    except OverflowError as e:
        msg = f"{left} {op} {right} overflowed"
        raise NumericOverflowError(msg) from e
    return check_finite(result, f"{left} {op} {right}")


def evaluate(node: Node, env: Environment) -> Number:
    """Evaluate an expression AST.

    Args:
        node: The root of the AST.
        env: Maps a referenced key path to its number. It raises for unknown
            keys or keys that do not hold numbers.

    Returns:
        The resulting number. Integer arithmetic stays ``int`` except for
        division, which always yields a ``float``.

    Raises:
        DivisionByZeroError: On division by zero.
        NumericOverflowError: When a result is not finite.
        InvalidArgumentError: When a function argument is unusable.

    """
    match node:
        case NumberLiteral(value):
            return value
        case Reference(path):
            return env(path)
        case Negate(operand):
            return -evaluate(operand, env)
        case BinaryOp(op, left, right):
            # Left-to-right so errors surface in reading order
            left_value = evaluate(left, env)
            right_value = evaluate(right, env)
            return _apply(op, left_value, right_value)
        case Call(name, args):
            function = BUILTIN_FUNCTIONS[name]
            arg_values = [evaluate(arg, env) for arg in args]
            result = function.func(*arg_values)
            logger.debug("%s(%s) = %r", name, ", ".join(map(str, arg_values)), result)
            return result
        case _:
            msg = f"Unknown node type: {type(node)}"
            raise TypeError(msg)
