"""Tests for key paths, the value tree and resolved data."""

from types import MappingProxyType

import pytest

from datatex._value import KeyPath, ResolvedData, ValueKind, ValueTree, format_number, is_number, value_kind


class TestKeyPath:
    def test_parse_and_str(self) -> None:
        path = KeyPath.parse("section.resultant_value")
        assert path.parts == ("section", "resultant_value")
        assert str(path) == "section.resultant_value"

    def test_parse_strips_whitespace(self) -> None:
        assert KeyPath.parse(" a . b ") == KeyPath(("a", "b"))

    @pytest.mark.parametrize("text", ["", "  ", "a..b", ".a", "a."])
    def test_parse_rejects_empty_segments(self, text: str) -> None:
        with pytest.raises(ValueError, match="empty"):
            KeyPath.parse(text)

    def test_parent_child_name(self) -> None:
        path = KeyPath.parse("a.b.c")
        assert path.name == "c"
        assert path.parent == KeyPath.parse("a.b")
        assert KeyPath.parse("a").parent is None
        assert KeyPath.parse("items").child(0) == KeyPath.parse("items.0")

    def test_with_name(self) -> None:
        assert KeyPath.parse("data.value").with_name("value_pm") == KeyPath.parse("data.value_pm")

    def test_hashable(self) -> None:
        assert {KeyPath.parse("a.b"): 1}[KeyPath(("a", "b"))] == 1


class TestValueKind:
    @pytest.mark.parametrize(
        ("value", "kind"),
        [
            (None, ValueKind.NULL),
            (True, ValueKind.BOOL),
            (1, ValueKind.NUMBER),
            (1.5, ValueKind.NUMBER),
            ("x", ValueKind.STRING),
            ([1], ValueKind.ARRAY),
            ({"a": 1}, ValueKind.TABLE),
        ],
    )
    def test_value_kind(self, value: object, kind: ValueKind) -> None:
        assert value_kind(value) is kind

    def test_bool_is_not_a_number(self) -> None:
        assert is_number(3)
        assert not is_number(True)

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError, match="Unsupported value type"):
            value_kind(object())


class TestFormatNumber:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (1884, "1884"),
            (1884.0, "1884"),
            (58.24, "58.24"),
            (100000000, "100000000"),
            (1e-7, "0.0000001"),
            (-2.5, "-2.5"),
            (1e23, "100000000000000000000000"),
            (6.022e23, "602200000000000000000000"),
            (-1e20, "-100000000000000000000"),
        ],
    )
    def test_format(self, value: float, expected: str) -> None:
        assert format_number(value) == expected


class TestValueTree:
    def test_get_nested_and_array(self) -> None:
        tree = ValueTree({"a": {"b": 1}, "items": [10, {"x": 2}]})
        assert tree.get("a.b") == 1
        assert tree.get("items.0") == 10
        assert tree.get("items.1.x") == 2

    def test_get_missing_raises_key_error(self) -> None:
        tree = ValueTree({"a": {"b": 1}})
        with pytest.raises(KeyError):
            tree.get("a.c")
        with pytest.raises(KeyError):
            tree.get("a.b.c")

    def test_contains(self) -> None:
        tree = ValueTree({"a": {"b": None}, "items": [1]})
        assert "a.b" in tree
        assert "items.0" in tree
        assert "items.1" not in tree
        assert "items.x" not in tree
        assert 42 not in tree

    def test_set_replaces_existing(self) -> None:
        tree = ValueTree({"a": {"b": "expr: 1 + 1"}, "items": ["expr: 2"]})
        tree.set("a.b", 2)
        tree.set("items.0", 2)
        assert tree.to_dict() == {"a": {"b": 2}, "items": [2]}

    def test_set_never_creates_keys(self) -> None:
        tree = ValueTree({"a": {}})
        with pytest.raises(KeyError):
            tree.set("a.new", 1)

    def test_root_must_be_table(self) -> None:
        with pytest.raises(TypeError, match="must be a table"):
            ValueTree([1, 2])  # type: ignore[arg-type]

    def test_iter_leaves_document_order(self) -> None:
        tree = ValueTree({"z": 1, "a": {"y": [True, "s"]}, "b": None})
        leaves = [(str(path), value) for path, value in tree.iter_leaves()]
        assert leaves == [("z", 1), ("a.y.0", True), ("a.y.1", "s"), ("b", None)]

    def test_to_dict_is_a_copy(self) -> None:
        tree = ValueTree({"a": {"b": 1}})
        copy = tree.to_dict()
        copy["a"]["b"] = 99
        assert tree.get("a.b") == 1


class TestResolvedData:
    def test_key_path_access(self) -> None:
        data = ResolvedData({"section": {"value": 1.5}, "items": [1, 2]})
        assert data["section.value"] == 1.5
        assert data[KeyPath.parse("items.1")] == 2
        assert data.get("missing", "default") == "default"
        assert "section.value" in data
        assert "section.other" not in data

    def test_missing_key_raises(self) -> None:
        data = ResolvedData({"a": 1})
        with pytest.raises(KeyError):
            data["b"]

    def test_deep_frozen(self) -> None:
        data = ResolvedData({"a": {"b": [1, 2]}})
        assert isinstance(data.root["a"], MappingProxyType)
        assert isinstance(data["a.b"], tuple)
        with pytest.raises(TypeError):
            data.root["a"]["b"] = 3  # type: ignore[index]

    def test_independent_of_source(self) -> None:
        source = {"a": {"b": 1}}
        data = ResolvedData(source)
        source["a"]["b"] = 2
        assert data["a.b"] == 1

    def test_to_dict_and_equality(self) -> None:
        data = ResolvedData({"a": {"b": [1, {"c": 2}]}})
        assert data.to_dict() == {"a": {"b": [1, {"c": 2}]}}
        assert data == ResolvedData({"a": {"b": [1, {"c": 2}]}})
        assert len(data) == 1
        assert list(data) == ["a"]

    def test_freeze_from_tree(self) -> None:
        tree = ValueTree({"a": 1})
        frozen = tree.freeze()
        tree.set("a", 2)
        assert frozen["a"] == 1
