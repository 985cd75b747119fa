"""Tests for the configuration module."""

from pathlib import Path

import pytest

from datatex._cli.config import (
    ConfigError,
    DatatexConfig,
    find_pyproject_toml,
    load_config,
)


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml function."""

    def test_finds_in_current_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in current directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        result = find_pyproject_toml(tmp_path)

        assert result == pyproject

    def test_finds_in_parent_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in parent directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        subdir = tmp_path / "paper" / "figures"
        subdir.mkdir(parents=True)

        result = find_pyproject_toml(subdir)

        assert result == pyproject

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        """Should return None when no pyproject.toml is found."""
        result = find_pyproject_toml(tmp_path)

        assert result is None


class TestLoadConfigPaths:
    """Tests for the data and output paths."""

    def test_relative_paths_resolved_from_project_root(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.datatex]
data = "data/results.toml"
output = "build/resolved.json"
""",
        )

        config = load_config(pyproject)

        assert config.data == tmp_path / "data" / "results.toml"
        assert config.output == tmp_path / "build" / "resolved.json"
        assert config.project_root == tmp_path

    def test_absolute_path_kept(self, tmp_path: Path) -> None:
        absolute = tmp_path / "elsewhere" / "data.json"
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(f'[tool.datatex]\ndata = "{absolute.as_posix()}"\n')

        config = load_config(pyproject)

        assert config.data == absolute

    def test_invalid_data_type_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError for a non-string path."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.datatex]\ndata = 123\n")

        with pytest.raises(ConfigError, match=r"\[tool.datatex\].data: expected string path"):
            load_config(pyproject)


class TestLoadConfigPairSeparator:
    """Tests for the pair-separator setting."""

    def test_default(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[tool.datatex]\ndata = "data.toml"\n')

        assert load_config(pyproject).pair_separator == "$\\pm$"

    def test_custom(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[tool.datatex]\npair-separator = " +/- "\n')

        assert load_config(pyproject).pair_separator == " +/- "

    def test_invalid_type_raises_error(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.datatex]\npair-separator = false\n")

        with pytest.raises(ConfigError, match="pair-separator"):
            load_config(pyproject)


class TestLoadConfigEmptySection:
    """Tests for configuration without a [tool.datatex] section."""

    def test_no_tool_datatex_section(self, tmp_path: Path) -> None:
        """Should return empty config when no [tool.datatex] section."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'paper'\n")

        config = load_config(pyproject)

        assert config.data is None
        assert config.output is None
        assert config.project_root == tmp_path


class TestLoadConfigErrors:
    """Tests for configuration error handling."""

    def test_invalid_toml_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError for invalid TOML."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("invalid toml [[[")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(pyproject)


class TestDatatexConfigDataclass:
    """Tests for the DatatexConfig dataclass."""

    def test_default_values(self) -> None:
        config = DatatexConfig()

        assert config.data is None
        assert config.output is None
        assert config.pair_separator == "$\\pm$"
        assert config.project_root is None

    def test_frozen(self) -> None:
        config = DatatexConfig()

        with pytest.raises(AttributeError):
            config.data = Path("data.toml")  # type: ignore[misc]
