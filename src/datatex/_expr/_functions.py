"""Numeric functions shared by expressions and render helpers.

``round_value`` and ``power`` are the single implementation of rounding and
exponentiation; the expression evaluator and the render helpers both call
them so a value rounds the same way in a data file and in a document.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import TYPE_CHECKING

from datatex._errors import InvalidArgumentError, NumericOverflowError

if TYPE_CHECKING:
    from collections.abc import Callable

    from datatex._value import Number

# Enough digits for any finite double written out in full
_DECIMAL_PRECISION = 400
# Above this, integral floats are not exact integers
_EXACT_INTEGER_LIMIT = 2**53


def normalize_number(value: Number) -> Number:
    """Return an ``int`` for exactly representable integral floats.

    Larger integral floats stay floats, so ``pow(10, 23)`` keeps its shortest
    decimal form instead of the digits of its binary value.
    """
    if isinstance(value, float) and abs(value) < _EXACT_INTEGER_LIMIT and value.is_integer():
        return int(value)
    return value


def check_finite(value: Number, operation: str) -> Number:
    """Reject results that a double cannot hold, including oversized ints."""
    if isinstance(value, float) and not math.isfinite(value):
        msg = f"{operation} produced a non-finite result ({value})"
        raise NumericOverflowError(msg)
    if isinstance(value, int) and abs(value) > sys.float_info.max:
        msg = f"{operation} produced a result outside the range of a double"
        raise NumericOverflowError(msg)
    return value


def as_integer(value: Number, name: str) -> int:
    """Interpret a number as an integer, rejecting fractional values."""
    if isinstance(value, int):
        return value
    if not value.is_integer():
        msg = f"{name} must be an integer. Given value: {value}"
        raise InvalidArgumentError(msg)
    return int(value)


def round_value(value: Number, decimals: int = 0) -> Number:
    """Round to a number of fractional digits, half away from zero.

    A negative ``decimals`` rounds to the nearest power of ten, so
    ``round_value(58.242, -1) == 60``. Rounding is done on the shortest
    decimal representation of ``value``, so ``round_value(1.005, 2) == 1.01``.

    Returns:
        An ``int`` when the result has no fractional part, else a ``float``.

    Example:
        >>> round_value(1883.8090928305920395, 2)
        1883.81
        >>> round_value(-2.5)
        -3

    """
    check_finite(value, "round")
    quantum = Decimal(1).scaleb(-decimals)
    try:
        with localcontext(prec=_DECIMAL_PRECISION):
            rounded = Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        msg = f"Cannot round {value} to {decimals} decimals"
        raise InvalidArgumentError(msg) from e
    if rounded == rounded.to_integral_value():
        return int(rounded)
    return float(rounded)


def power(value: Number, exponent: Number) -> Number:
    """Raise ``value`` to ``exponent``, failing on non-finite results."""
    try:
        result = math.pow(value, exponent)
    except OverflowError as e:
        msg = f"pow({value}, {exponent}) overflowed"
        raise NumericOverflowError(msg) from e
    except ValueError as e:
        msg = f"pow({value}, {exponent}) is undefined"
        raise NumericOverflowError(msg) from e
    return normalize_number(check_finite(result, f"pow({value}, {exponent})"))


def _round(value: Number, decimals: Number = 0) -> Number:
    return round_value(value, as_integer(decimals, "Second rounding argument"))


def _exp10(exponent: Number) -> Number:
    return power(10, exponent)


@dataclass(frozen=True, slots=True)
class BuiltinFunction:
    name: str
    func: Callable[..., Number]
    min_args: int
    max_args: int

    def accepts(self, n_args: int) -> bool:
        return self.min_args <= n_args <= self.max_args

    @property
    def arity(self) -> str:
        if self.min_args == self.max_args:
            return str(self.min_args)
        return f"{self.min_args}-{self.max_args}"


BUILTIN_FUNCTIONS: dict[str, BuiltinFunction] = {
    fn.name: fn
    for fn in (
        BuiltinFunction("round", _round, 1, 2),
        BuiltinFunction("pow", power, 2, 2),
        BuiltinFunction("E", _exp10, 1, 1),
    )
}
