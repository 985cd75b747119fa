"""Render-time helper library.

Helpers are pure functions over the resolved data and the literal arguments
written at a call site. A document renderer parses its own placeholder syntax
and calls helpers by name through ``HelperLibrary``::

    library = HelperLibrary(HelperContext(resolve_file("data.toml")))
    library.render("sep", HelperCall("pow", 10, 8))  # "100,000,000"

Arguments may be numbers, strings, ``Ref`` (a key path into the data) or a
nested ``HelperCall``. Nested calls are evaluated innermost first.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from ._errors import (
    HelperArgumentError,
    MissingConfigKeyError,
    MissingPairedKeyError,
    TypeMismatchError,
    UnknownHelperError,
)
from ._expr import power, round_value
from ._value import KeyPath, ResolvedData, ValueKind, format_number, is_number, value_kind

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._value import Number

logger = logging.getLogger(__name__)

DEFAULT_PAIR_SEPARATOR = "$\\pm$"
SEPARATOR_KEY = "separator"
PAIRED_KEY_SUFFIX = "_pm"

_NUMBER_ADAPTER: TypeAdapter[int | float] = TypeAdapter(int | float)
_INTEGER_ADAPTER: TypeAdapter[int] = TypeAdapter(int)

# A digit run with an optional fractional part, e.g. "12345" or "1.4858"
_NUMBER_IN_TEXT = re.compile(r"(\d+)(\.\d+)?")
_THOUSANDS_BOUNDARY = re.compile(r"(\d)(?=(?:\d{3})+$)")


@dataclass(frozen=True, slots=True, init=False)
class Ref:
    """A reference to a key in the resolved data, e.g. ``Ref("section.value")``."""

    key: KeyPath

    def __init__(self, key: KeyPath | str) -> None:
        object.__setattr__(self, "key", KeyPath.coerce(key))

    def __str__(self) -> str:
        return str(self.key)


@dataclass(frozen=True, slots=True, init=False)
class HelperCall:
    """A nested helper invocation used as an argument, e.g. ``sep(pow(10, 8))``."""

    name: str
    args: tuple[Any, ...] = ()

    def __init__(self, name: str, *args: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "args", args)


@dataclass(frozen=True, slots=True)
class HelperContext:
    """Everything a helper may read besides its arguments.

    Attributes:
        data: The resolved data set. Read only.
        pair_separator: Text placed between a value and its error by ``pm``.

    """

    data: ResolvedData
    pair_separator: str = DEFAULT_PAIR_SEPARATOR


def _kind_name(value: Any) -> str:
    try:
        return value_kind(value)
    except TypeError:
        return type(value).__name__


def _as_number(helper: str, value: Any) -> Number:
    """Coerce an argument to a number, accepting numeric strings."""
    if isinstance(value, bool):
        raise TypeMismatchError(f"{helper} argument {value!r}", ValueKind.BOOL)
    try:
        return _NUMBER_ADAPTER.validate_python(value)
    except ValidationError:
        raise TypeMismatchError(f"{helper} argument {value!r}", _kind_name(value)) from None


def _as_integer(helper: str, value: Any) -> int:
    """Coerce an argument to an integer, rejecting fractional values."""
    if isinstance(value, bool):
        raise TypeMismatchError(f"{helper} argument {value!r}", ValueKind.BOOL, "integer")
    try:
        return _INTEGER_ADAPTER.validate_python(value)
    except ValidationError:
        raise TypeMismatchError(f"{helper} argument {value!r}", _kind_name(value), "integer") from None


def _as_string(helper: str, value: Any) -> str:
    if not isinstance(value, str):
        raise TypeMismatchError(f"{helper} argument {value!r}", _kind_name(value), "string")
    return value


def _lookup(data: ResolvedData, helper: str, key: KeyPath) -> Any:
    try:
        return data[key]
    except KeyError:
        msg = f"Unknown key '{key}'. Perhaps a key is misspelled?"
        raise HelperArgumentError(helper, msg) from None


def _split_optional_first(args: tuple[Any, ...]) -> tuple[Any | None, Any]:
    """Split ``([first], last)`` argument lists."""
    if len(args) == 1:
        return None, args[0]
    return args[0], args[1]


def pm(context: HelperContext, *args: Any) -> str:
    """Format a value and its error: ``pm([decimals], key)``.

    The error is read from the sibling key named ``<key>_pm``. Both numbers are
    rounded to ``decimals`` when it is given.

    Raises:
        MissingPairedKeyError: If ``<key>_pm`` does not exist.

    """
    decimals_arg, key_arg = _split_optional_first(args)
    if isinstance(key_arg, Ref):
        key = key_arg.key
    elif isinstance(key_arg, str):
        key = KeyPath.coerce(key_arg)
    else:
        msg = f"argument {key_arg!r} is not a key reference"
        raise HelperArgumentError("pm", msg)

    value = _as_number("pm", _lookup(context.data, "pm", key))
    paired_key = key.with_name(key.name + PAIRED_KEY_SUFFIX)
    if paired_key not in context.data:
        raise MissingPairedKeyError(key)
    error = _as_number("pm", context.data[paired_key])

    if decimals_arg is not None:
        decimals = _as_integer("pm", decimals_arg)
        value = round_value(value, decimals)
        error = round_value(error, decimals)

    return f"{format_number(value)}{context.pair_separator}{format_number(error)}"


def round_(context: HelperContext, *args: Any) -> Number:  # noqa: ARG001
    """Round half away from zero: ``round([decimals], value)``."""
    decimals_arg, value_arg = _split_optional_first(args)
    decimals = 0 if decimals_arg is None else _as_integer("round", decimals_arg)
    return round_value(_as_number("round", value_arg), decimals)


def roundup(context: HelperContext, *args: Any) -> Number:  # noqa: ARG001
    """Round to a power of ten: ``roundup([power], value)`` is ``round(-power, value)``.

    Example:
        >>> roundup(None, 1, 58.242)
        60

    """
    power_arg, value_arg = _split_optional_first(args)
    exponent = 0 if power_arg is None else _as_integer("roundup", power_arg)
    return round_value(_as_number("roundup", value_arg), -exponent)


def _group_thousands(match: re.Match[str], separator: str) -> str:
    integer_part, fraction = match.group(1), match.group(2) or ""
    grouped = _THOUSANDS_BOUNDARY.sub(lambda m: m.group(1) + separator, integer_part)
    return grouped + fraction


def sep(context: HelperContext, value: Any) -> str:
    """Insert the data set's ``separator`` every three integer digits.

    Every number written in ``value`` is grouped, so both a plain number and a
    sentence or a ``pm`` pair can be passed.

    Raises:
        MissingConfigKeyError: If the data has no top-level ``separator`` key.

    """
    if SEPARATOR_KEY not in context.data.root:
        raise MissingConfigKeyError(SEPARATOR_KEY)
    separator = context.data.root[SEPARATOR_KEY]
    if not isinstance(separator, str):
        raise TypeMismatchError(SEPARATOR_KEY, _kind_name(separator), "string")

    if is_number(value):
        text = format_number(value)
    else:
        text = _as_string("sep", value)

    return _NUMBER_IN_TEXT.sub(lambda m: _group_thousands(m, separator), text)


def upper(context: HelperContext, value: Any) -> str:  # noqa: ARG001
    return _as_string("upper", value).upper()


def lower(context: HelperContext, value: Any) -> str:  # noqa: ARG001
    return _as_string("lower", value).lower()


def pow_(context: HelperContext, value: Any, exponent: Any) -> Number:  # noqa: ARG001
    """Raise ``value`` to ``exponent``; ``pow(10, 8) == 100000000``."""
    return power(_as_number("pow", value), _as_number("pow", exponent))


@dataclass(frozen=True, slots=True)
class Helper:
    """A named helper and the number of arguments it accepts."""

    name: str
    func: Callable[..., Any]
    min_args: int
    max_args: int
    # Index of an argument that is a key and must not be dereferenced
    key_argument: int | None = field(default=None)

    def accepts(self, n_args: int) -> bool:
        return self.min_args <= n_args <= self.max_args

    @property
    def arity(self) -> str:
        if self.min_args == self.max_args:
            return str(self.min_args)
        return f"{self.min_args}-{self.max_args}"


HELPERS: dict[str, Helper] = {
    helper.name: helper
    for helper in (
        Helper("pm", pm, 1, 2, key_argument=-1),
        Helper("round", round_, 1, 2),
        Helper("roundup", roundup, 1, 2),
        Helper("sep", sep, 1, 1),
        Helper("upper", upper, 1, 1),
        Helper("lower", lower, 1, 1),
        Helper("pow", pow_, 2, 2),
    )
}


def render_value(value: Any) -> str:
    """Turn a helper result or data value into substitution text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if is_number(value):
        return format_number(value)
    if isinstance(value, str):
        return value
    raise TypeMismatchError(repr(value), _kind_name(value), "scalar")


class HelperLibrary:
    """The named set of helpers bound to one resolved data set.

    The library holds no mutable state; one instance can serve any number of
    render passes, concurrently.
    """

    __slots__ = ("_context",)

    def __init__(self, context: HelperContext) -> None:
        self._context = context

    @property
    def context(self) -> HelperContext:
        return self._context

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(HELPERS)

    def __contains__(self, name: object) -> bool:
        return name in HELPERS

    def get(self, name: str) -> Helper:
        """Look up a helper by name.

        Raises:
            UnknownHelperError: If there is no helper with that name.

        """
        try:
            return HELPERS[name]
        except KeyError:
            raise UnknownHelperError(name) from None

    def call(self, name: str, *args: Any) -> Any:
        """Invoke a helper.

        Nested ``HelperCall`` arguments are evaluated first, then ``Ref``
        arguments are replaced by the values they point to (except the key
        argument of ``pm``).

        Raises:
            UnknownHelperError: If ``name`` (or a nested name) is unknown.
            HelperArgumentError: On a wrong number of arguments or an unknown key.

        """
        helper = self.get(name)
        if not helper.accepts(len(args)):
            msg = f"takes {helper.arity} argument(s), {len(args)} given"
            raise HelperArgumentError(name, msg)

        key_index = None
        if helper.key_argument is not None:
            key_index = helper.key_argument % len(args)

        values = [self._argument(helper, arg, keep_ref=index == key_index) for index, arg in enumerate(args)]
        result = helper.func(self._context, *values)
        logger.debug(f"{name}({', '.join(map(repr, values))}) = {result!r}")
        return result

    def render(self, name: str, *args: Any) -> str:
        """Invoke a helper and format its result as substitution text."""
        return render_value(self.call(name, *args))

    def _argument(self, helper: Helper, arg: Any, *, keep_ref: bool) -> Any:
        match arg:
            case HelperCall(name=name, args=nested):
                return self.call(name, *nested)
            case Ref(key=key) if not keep_ref:
                return _lookup(self._context.data, helper.name, key)
            case _:
                return arg
