"""In-memory value tree and key paths.

Values are plain Python objects: ``None``, ``bool``, ``int``/``float``
(numbers), ``str``, ``list`` (arrays) and ``dict`` (tables). A ``KeyPath``
addresses one location in the tree; array elements are addressed by their
decimal index (``items.0``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum, auto
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar, Self

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Generator, Iterator, Mapping

logger = logging.getLogger(__name__)

type Number = int | float


class ValueKind(StrEnum):
    """The kind of a value in the tree."""

    NULL = auto()
    BOOL = auto()
    NUMBER = auto()
    STRING = auto()
    ARRAY = auto()
    TABLE = auto()


def value_kind(value: Any) -> ValueKind:  # noqa: PLR0911
    # bool before int: bool is an int subclass but never a number here
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if isinstance(value, (dict, MappingProxyType)):
        return ValueKind.TABLE
    msg = f"Unsupported value type: {type(value).__name__}"
    raise TypeError(msg)


def is_number(value: Any) -> bool:
    """Check if a value is a Number (``int`` or ``float`` but not ``bool``)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_number(value: Number) -> str:
    """Format a number for substitution into a document.

    Integral values are written without a fractional part and nothing is ever
    written in scientific notation. Floats use their shortest round-trip
    digits, so large integral floats are not padded with binary noise.

    Example:
        >>> format_number(1884.0)
        '1884'
        >>> format_number(58.24)
        '58.24'
        >>> format_number(1e-7)
        '0.0000001'
        >>> format_number(1e23)
        '100000000000000000000000'

    """
    if isinstance(value, int):
        return str(value)
    return np.format_float_positional(value, trim="-")


@dataclass(slots=True, frozen=True)
class KeyPath:
    """A dotted sequence of names identifying a location in the tree."""

    parts: tuple[str, ...]

    SEPARATOR: ClassVar[str] = "."

    def __str__(self) -> str:
        return self.SEPARATOR.join(self.parts)

    @classmethod
    def parse(cls, path_str: str) -> Self:
        s = path_str.strip()
        if not s:
            msg = "Key path must not be empty"
            raise ValueError(msg)
        parts = tuple(part.strip() for part in s.split(cls.SEPARATOR))
        if any(not part for part in parts):
            msg = f"Key path has an empty segment: '{path_str}'"
            raise ValueError(msg)
        return cls(parts=parts)

    @classmethod
    def coerce(cls, path: KeyPath | str) -> KeyPath:
        if isinstance(path, KeyPath):
            return path
        return cls.parse(path)

    @property
    def name(self) -> str:
        return self.parts[-1]

    @property
    def parent(self) -> KeyPath | None:
        if len(self.parts) <= 1:
            return None
        return KeyPath(self.parts[:-1])

    def child(self, name: str | int) -> KeyPath:
        return KeyPath((*self.parts, str(name)))

    def with_name(self, name: str) -> KeyPath:
        """Return a sibling path with the last segment replaced."""
        return KeyPath((*self.parts[:-1], name))


_MISSING = object()


def _step(container: Any, part: str) -> Any:
    """Descend one level, returning ``_MISSING`` when the part does not exist."""
    if isinstance(container, (dict, MappingProxyType)):
        return container.get(part, _MISSING)
    if isinstance(container, (list, tuple)):
        if not part.isdigit():
            return _MISSING
        index = int(part)
        if index >= len(container):
            return _MISSING
        return container[index]
    return _MISSING


def _lookup(root: Any, path: KeyPath) -> Any:
    current = root
    for part in path.parts:
        current = _step(current, part)
        if current is _MISSING:
            return _MISSING
    return current


def _iter_leaves(value: Any, path_parts: tuple[str, ...]) -> Generator[tuple[KeyPath, Any]]:
    if isinstance(value, (dict, MappingProxyType)):
        for key, child in value.items():
            yield from _iter_leaves(child, (*path_parts, key))
    elif isinstance(value, (list, tuple)):
        for index, child in enumerate(value):
            yield from _iter_leaves(child, (*path_parts, str(index)))
    else:
        yield KeyPath(path_parts), value


class ValueTree:
    """Mutable hierarchical data set, exclusively owned by the resolution pipeline.

    Once resolution has finished the tree is frozen into a ``ResolvedData``
    which is the only form handed to renderers.
    """

    __slots__ = ("_root",)

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            msg = f"The root of a value tree must be a table, got: {type(data).__name__}"
            raise TypeError(msg)
        self._root = data

    @property
    def root(self) -> dict[str, Any]:
        return self._root

    def contains(self, path: KeyPath | str) -> bool:
        return _lookup(self._root, KeyPath.coerce(path)) is not _MISSING

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (KeyPath, str)):
            return False
        return self.contains(path)

    def get(self, path: KeyPath | str) -> Any:
        """Get the value at a key path.

        Raises:
            KeyError: If nothing exists at the path.

        """
        path = KeyPath.coerce(path)
        value = _lookup(self._root, path)
        if value is _MISSING:
            raise KeyError(str(path))
        return value

    def set(self, path: KeyPath | str, value: Any) -> None:
        """Replace the value at an existing key path.

        New keys are never created; the location must already exist.

        Raises:
            KeyError: If nothing exists at the path.

        """
        path = KeyPath.coerce(path)
        parent_path = path.parent
        container = self._root if parent_path is None else _lookup(self._root, parent_path)
        if container is _MISSING or _step(container, path.name) is _MISSING:
            raise KeyError(str(path))
        if isinstance(container, list):
            container[int(path.name)] = value
        else:
            container[path.name] = value
        logger.debug("Set %s = %r", path, value)

    def iter_leaves(self) -> Generator[tuple[KeyPath, Any]]:
        """Iterate over every scalar in document order."""
        yield from _iter_leaves(self._root, ())

    def to_dict(self) -> dict[str, Any]:
        return _thaw(self._root)

    def freeze(self) -> ResolvedData:
        return ResolvedData(self._root)

    def __repr__(self) -> str:
        return f"ValueTree({self._root!r})"


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({key: _freeze(child) for key, child in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(child) for child in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, (dict, MappingProxyType)):
        return {key: _thaw(child) for key, child in value.items()}
    if isinstance(value, (list, tuple)):
        return [_thaw(child) for child in value]
    return value


class ResolvedData:
    """Read-only, key-path addressable view of a fully resolved data set.

    The structure is deep-frozen on construction: tables become
    ``MappingProxyType`` and arrays become tuples. Sharing an instance across
    threads or render passes needs no synchronization.

    Example:
        >>> data = ResolvedData({"section": {"value": 1.5}})
        >>> data["section.value"]
        1.5

    """

    __slots__ = ("_root",)

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._root: Mapping[str, Any] = _freeze(_thaw(data))

    @property
    def root(self) -> Mapping[str, Any]:
        return self._root

    def __getitem__(self, path: KeyPath | str) -> Any:
        path = KeyPath.coerce(path)
        value = _lookup(self._root, path)
        if value is _MISSING:
            raise KeyError(str(path))
        return value

    def get(self, path: KeyPath | str, default: Any = None) -> Any:
        value = _lookup(self._root, KeyPath.coerce(path))
        return default if value is _MISSING else value

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (KeyPath, str)):
            return False
        return _lookup(self._root, KeyPath.coerce(path)) is not _MISSING

    def __iter__(self) -> Iterator[str]:
        return iter(self._root)

    def __len__(self) -> int:
        return len(self._root)

    def iter_leaves(self) -> Generator[tuple[KeyPath, Any]]:
        yield from _iter_leaves(self._root, ())

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable deep copy of the data."""
        return _thaw(self._root)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResolvedData):
            return self.to_dict() == other.to_dict()
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ResolvedData({self.to_dict()!r})"
