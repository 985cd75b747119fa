"""Loading data sets from TOML or JSON, and exporting resolved data."""

from __future__ import annotations

import json
import logging
import re
import sys
import tomllib
from datetime import date, datetime, time
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO, Self

import tomli_w

from ._errors import ParseError, SourceLocation, UnsupportedFormatError
from ._value import ResolvedData, ValueTree

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

STDIN_SOURCE = "-"


class DataFormat(StrEnum):
    """Serialization formats a data set can be written in."""

    TOML = "toml"
    JSON = "json"

    @classmethod
    def parse(cls, value: str) -> Self:
        try:
            return cls(value.lower())
        except ValueError:
            raise UnsupportedFormatError(value) from None

    @classmethod
    def from_path(cls, path: Path | str) -> Self:
        """Infer the format from a file extension.

        Raises:
            UnsupportedFormatError: If the extension is not ``.toml`` or ``.json``.

        """
        suffix = Path(path).suffix.lstrip(".")
        if not suffix:
            raise UnsupportedFormatError(str(path))
        return cls.parse(suffix)


# tomllib only exposes the position inside the message on older Pythons
_TOML_POSITION = re.compile(r"\(at line (\d+), column (\d+)\)")


def _normalize_toml(value: Any) -> Any:
    """Turn TOML date and time values into ISO-8601 strings."""
    if isinstance(value, dict):
        return {key: _normalize_toml(child) for key, child in value.items()}
    if isinstance(value, list):
        return [_normalize_toml(child) for child in value]
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


def _load_toml(text: str, source: str) -> dict[str, Any]:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        line = getattr(e, "lineno", None)
        column = getattr(e, "colno", None)
        message = getattr(e, "msg", None) or str(e)
        if line is None and (match := _TOML_POSITION.search(message)):
            line, column = int(match.group(1)), int(match.group(2))
            message = message[: match.start()].rstrip()
        raise ParseError(SourceLocation(source, line, column), message) from e
    return _normalize_toml(data)


def _load_json(text: str, source: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(SourceLocation(source, e.lineno, e.colno), e.msg) from e
    if not isinstance(data, dict):
        msg = f"The top level of a data set must be an object, got: {type(data).__name__}"
        raise ParseError(SourceLocation(source), msg)
    return data


def load_data(content: bytes | str, data_format: DataFormat | str, *, source: str = "<string>") -> ValueTree:
    """Deserialize a data set into a value tree.

    Args:
        content: The serialized data. Bytes are decoded as UTF-8.
        data_format: ``toml`` or ``json``.
        source: Name used in error locations.

    Raises:
        ParseError: If the content is malformed.
        UnsupportedFormatError: If the format is neither TOML nor JSON.

    """
    if not isinstance(data_format, DataFormat):
        data_format = DataFormat.parse(data_format)

    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(SourceLocation(source), f"Data is not valid UTF-8: {e}") from e

    match data_format:
        case DataFormat.TOML:
            data = _load_toml(content, source)
        case DataFormat.JSON:
            data = _load_json(content, source)

    logger.debug(f"Loaded {data_format} data from {source}")
    return ValueTree(data)


def load_data_from_path(path: Path | str) -> ValueTree:
    """Load a data set from a file, inferring the format from its extension."""
    path = Path(path)
    data_format = DataFormat.from_path(path)
    return load_data(path.read_bytes(), data_format, source=str(path))


def load_data_from_stream(stream: BinaryIO) -> ValueTree:
    """Load a JSON data set from a byte stream such as piped input.

    A stream has no file name to infer a format from, so only JSON is accepted.
    """
    return load_data(stream.read(), DataFormat.JSON, source="<stdin>")


def load_data_source(source: Path | str) -> ValueTree:
    """Load from a path, or from stdin when ``source`` is ``-``."""
    if str(source) == STDIN_SOURCE:
        return load_data_from_stream(sys.stdin.buffer)
    return load_data_from_path(source)


def _to_toml_compatible(value: Any) -> Any:
    # TOML has no null
    if isinstance(value, dict):
        return {k: _to_toml_compatible(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_to_toml_compatible(item) for item in value if item is not None]
    return value


def dump_data(data: ResolvedData | Mapping[str, Any], data_format: DataFormat | str) -> str:
    """Serialize resolved data to TOML or JSON text."""
    if not isinstance(data_format, DataFormat):
        data_format = DataFormat.parse(data_format)
    plain = data.to_dict() if isinstance(data, ResolvedData) else dict(data)

    match data_format:
        case DataFormat.TOML:
            return tomli_w.dumps(_to_toml_compatible(plain))
        case DataFormat.JSON:
            return json.dumps(plain, indent=2, ensure_ascii=False) + "\n"


def export_data(data: ResolvedData | Mapping[str, Any], output_path: Path | str) -> None:
    """Write resolved data to a file, choosing the format from its extension."""
    output_path = Path(output_path)
    text = dump_data(data, DataFormat.from_path(output_path))
    output_path.write_text(text, encoding="utf-8")
    logger.debug(f"Exported resolved data to {output_path}")
