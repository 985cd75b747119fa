"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from datatex._helpers import DEFAULT_PAIR_SEPARATOR


class ConfigError(Exception):
    """Error in datatex configuration."""


@dataclass(slots=True, frozen=True)
class DatatexConfig:
    """Configuration loaded from the ``[tool.datatex]`` table of pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    data: Path | None = None
    output: Path | None = None
    pair_separator: str = DEFAULT_PAIR_SEPARATOR
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _parse_path(section: dict[str, Any], key: str, project_root: Path) -> Path | None:
    if key not in section:
        return None
    value = section[key]
    if not isinstance(value, str):
        msg = f"Invalid [tool.datatex].{key}: expected string path"
        raise ConfigError(msg)
    path = Path(value)
    if not path.is_absolute():
        path = project_root / path
    return path


def load_config(pyproject_path: Path) -> DatatexConfig:
    """Load and validate [tool.datatex] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed DatatexConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    tool_section = data.get("tool", {})
    datatex_section = tool_section.get("datatex", {})

    if not datatex_section:
        # No [tool.datatex] section - return empty config
        return DatatexConfig(project_root=project_root)

    if not isinstance(datatex_section, dict):
        msg = "Invalid [tool.datatex]: expected a table"
        raise ConfigError(msg)

    pair_separator = datatex_section.get("pair-separator", DEFAULT_PAIR_SEPARATOR)
    if not isinstance(pair_separator, str):
        msg = "Invalid [tool.datatex].pair-separator: expected string"
        raise ConfigError(msg)

    return DatatexConfig(
        data=_parse_path(datatex_section, "data", project_root),
        output=_parse_path(datatex_section, "output", project_root),
        pair_separator=pair_separator,
        project_root=project_root,
    )


def get_config() -> DatatexConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        DatatexConfig (may be empty if no pyproject.toml or no [tool.datatex] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return DatatexConfig()
    return load_config(pyproject_path)
