"""Error taxonomy for loading, resolving and rendering data sets.

Every error is fatal to the run that raised it. Each one keeps the key
path(s) involved as attributes so callers can build their own diagnostics,
and formats a specific message for the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ._value import KeyPath, ValueKind


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Where in a source text something went wrong.

    Attributes:
        source: A file path, ``<stdin>``, ``<string>`` or a key path for expressions.
        line: 1-based line number, if known.
        column: 1-based column number, if known.

    """

    source: str
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        result = self.source
        if self.line is not None:
            result += f":{self.line}"
        if self.column is not None:
            result += f":{self.column}"
        return result


class DatatexError(Exception):
    """Base class for all datatex errors."""


# Load time


class ParseError(DatatexError):
    """Raised when a data file has malformed syntax."""

    def __init__(self, location: SourceLocation, message: str) -> None:
        self.location = location
        self.message = message
        super().__init__(f"{location}: {message}")


class UnsupportedFormatError(DatatexError):
    """Raised when data is declared in a format other than TOML or JSON."""

    def __init__(self, data_format: str) -> None:
        self.data_format = data_format
        super().__init__(f"Unsupported data format: '{data_format}'. Expected one of: toml, json")


# Resolution time


class ExpressionSyntaxError(DatatexError):
    """Raised when expression text cannot be parsed."""

    def __init__(self, location: SourceLocation, message: str) -> None:
        self.location = location
        self.message = message
        super().__init__(f"Invalid expression at {location}: {message}")


class UnknownReferenceError(DatatexError):
    """Raised when an expression references a key that is not in the data."""

    def __init__(self, referrer: KeyPath, missing: KeyPath) -> None:
        self.referrer = referrer
        self.missing = missing
        super().__init__(f"Expression '{referrer}' references unknown key '{missing}'. Perhaps a key is misspelled?")


class CircularDependencyError(DatatexError):
    """Raised when expressions depend on each other in a cycle.

    ``cycle`` starts at the node that was re-entered and lists each node once,
    in dependency order.
    """

    def __init__(self, cycle: Sequence[KeyPath]) -> None:
        self.cycle = list(cycle)
        chain = " -> ".join(str(path) for path in [*self.cycle, self.cycle[0]])
        super().__init__(f"Circular dependency between expressions: {chain}")


class EvaluationError(DatatexError):
    """Base class for errors raised while evaluating an expression.

    ``path`` is the key path of the expression being evaluated. It is filled
    in by the resolver, so it is ``None`` when evaluating a bare AST.
    """

    def __init__(self, message: str, path: KeyPath | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(self._format())

    def _format(self) -> str:
        if self.path is None:
            return self.message
        return f"Error in expression '{self.path}': {self.message}"

    def with_path(self, path: KeyPath) -> EvaluationError:
        """Attach the key path of the failing expression."""
        self.path = path
        self.args = (self._format(),)
        return self


class DivisionByZeroError(EvaluationError):
    """Raised on division by zero."""

    def __init__(self, path: KeyPath | None = None) -> None:
        super().__init__("Division by zero", path)


class NumericOverflowError(EvaluationError):
    """Raised when a computation produces a non-finite number."""


class InvalidArgumentError(EvaluationError):
    """Raised when a function argument has an unusable value, e.g. fractional decimals."""


def _article(word: str) -> str:
    return "an" if word[:1].lower() in "aeiou" else "a"


class TypeMismatchError(EvaluationError):
    """Raised when a key holds a value of the wrong kind for where it is used."""

    def __init__(self, key: KeyPath | str, actual_kind: ValueKind | str, expected: str = "number") -> None:
        self.key = key
        self.actual_kind = actual_kind
        self.expected = expected
        super().__init__(f"'{key}' is {_article(actual_kind)} {actual_kind}, expected {_article(expected)} {expected}")


# Render time


class MissingPairedKeyError(DatatexError):
    """Raised by ``pm`` when the ``<key>_pm`` companion key is absent."""

    def __init__(self, key: KeyPath) -> None:
        self.key = key
        super().__init__(f"'{key}_pm' key not found (required by pm {key})")


class MissingConfigKeyError(DatatexError):
    """Raised when a helper needs a top-level configuration key that the data lacks."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Could not find the \"{key}\" key in the data file. Please add it.")


class UnknownHelperError(DatatexError):
    """Raised when a helper name is not part of the library."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown helper: '{name}'")


class HelperArgumentError(DatatexError):
    """Raised when a helper is called with the wrong number or kind of arguments."""

    def __init__(self, helper: str, message: str) -> None:
        self.helper = helper
        self.message = message
        super().__init__(f"{helper}: {message}")
