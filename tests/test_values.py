"""
Tests for configuration tree nodes and safe navigation.
"""

import pytest

from jsonconfig import EMPTY, KeyNotFoundError, ListNode, Mapping, Scalar, ScalarKind, TypeMismatchError, from_python


class TestSafeNavigation:
    """Reading paths that do not exist never raises."""

    def test_missing_deep_path_yields_empty(self):
        cfg = from_python({"x": {"present": 1}})

        node = cfg.x.not_.exist.at.all
        assert node is EMPTY
        assert not node
        assert node.as_string() == ""
        assert node.as_int() == 0
        assert node.as_float() == 0.0
        assert node.as_bool() is False
        assert node.as_list() == []
        assert list(node) == []
        assert len(node) == 0
        assert str(node) == ""
        assert int(node) == 0

    def test_get_and_lookup_are_safe(self):
        cfg = from_python({"ui": {"window": {"width": 800}}})

        assert cfg.lookup("ui.window.width") == 800
        assert cfg.lookup("ui.window.height") is EMPTY
        assert cfg.lookup("nope.nothing.here") is EMPTY
        assert cfg.get("missing") is EMPTY
        assert cfg.get("missing", "fallback") == "fallback"
        assert cfg["ui"]["window"].get("depth").get("more") is EMPTY

    def test_indexing_empty_is_safe(self):
        assert EMPTY["anything"]["at"][0] is EMPTY

    def test_indexed_lookup_raises_key_not_found(self):
        cfg = from_python({"present": 1})

        with pytest.raises(KeyNotFoundError) as exc_info:
            cfg["absent"]
        assert exc_info.value.key == "absent"
        # also catchable as a plain KeyError
        with pytest.raises(KeyError):
            cfg["absent"]

    def test_field_access_on_scalar_is_safe(self):
        cfg = from_python({"name": "value"})
        assert cfg.name.sub.field is EMPTY

    def test_presence_checks_by_truthiness(self):
        cfg = from_python({
            "EnabledModules": {"Module1": True, "Module2": False},
            "Populated": {"a": 1},
            "Hollow": {},
        })
        modules = cfg.EnabledModules

        assert modules.Module1
        assert not modules.Module2
        assert not modules.NonExistantModule
        assert not modules.NonExistantModule.Nested.Field.That.Doesnt.Exist
        assert cfg.Populated
        assert not cfg.Hollow

    def test_empty_equals_none(self):
        assert EMPTY == None  # noqa: E711
        assert EMPTY != 0


class TestTypedAccessors:
    """Explicit typed accessors on populated nodes."""

    def test_accessors_return_values(self):
        cfg = from_python({"s": "text", "i": 3, "f": 1.5, "b": True, "l": [1, 2], "m": {"k": "v"}})

        assert cfg.s.as_string() == "text"
        assert cfg.i.as_int() == 3
        assert cfg.i.as_float() == 3.0
        assert cfg.f.as_float() == 1.5
        assert cfg.b.as_bool() is True
        assert cfg.l.as_list() == [1, 2]
        assert cfg.m.as_dict() == {"k": "v"}

    @pytest.mark.parametrize("key, accessor", [
        ("s", "as_int"),
        ("i", "as_string"),
        ("f", "as_int"),
        ("b", "as_int"),
        ("l", "as_dict"),
        ("m", "as_list"),
    ])
    def test_mismatched_accessor_raises(self, key, accessor):
        cfg = from_python({"s": "text", "i": 3, "f": 1.5, "b": True, "l": [1], "m": {"k": "v"}})

        with pytest.raises(TypeMismatchError):
            getattr(cfg.get(key), accessor)()

    def test_null_reads_as_zero_values(self):
        cfg = from_python({"nothing": None})

        assert cfg.nothing.is_null
        assert cfg.nothing.as_string() == ""
        assert cfg.nothing.as_int() == 0
        assert cfg.nothing.as_bool() is False
        assert cfg.nothing.to_python() is None


class TestScalarAndList:
    """Scalar kinds and list behaviour."""

    def test_scalar_kinds(self):
        assert Scalar(True).scalar_kind is ScalarKind.BOOLEAN
        assert Scalar(1).scalar_kind is ScalarKind.INTEGER
        assert Scalar(1.0).scalar_kind is ScalarKind.FLOAT
        assert Scalar("1").scalar_kind is ScalarKind.STRING
        assert Scalar(None).scalar_kind is ScalarKind.NULL

    def test_scalar_compares_with_raw_value(self):
        assert Scalar(129) == 129
        assert Scalar("dark") == "dark"
        assert Scalar(1) != Scalar(1.5)
        assert hash(Scalar("dark")) == hash("dark")

    def test_unsupported_type_raises(self):
        with pytest.raises(TypeError):
            from_python({"when": object()})

    def test_list_protocol(self):
        fruits = from_python(["apple", "banana"])

        assert isinstance(fruits, ListNode)
        assert len(fruits) == 2
        assert fruits[0] == "apple"
        assert "banana" in fruits
        assert "melon" not in fruits
        assert fruits == ["apple", "banana"]
        assert fruits[1:] == ["banana"]

        fruits.append("melon")
        assert fruits.to_python() == ["apple", "banana", "melon"]


class TestMappingProvenance:
    """Per-entry provenance flags."""

    def test_from_python_tags_every_entry(self):
        tree = from_python({"a": 1, "b": {"c": [1, {"d": 2}]}}, is_default=True)

        assert tree.is_default
        assert tree.is_entry_default("a")
        assert tree.b.is_default
        assert tree.b.is_entry_default("c")
        assert tree.b.c.is_default
        assert tree.b.c[1].is_entry_default("d")

    def test_assignment_uses_container_flag(self):
        user = Mapping()
        user.Name = "yqy"
        user["Age"] = 20

        assert user.Name == "yqy"
        assert user.Age == 20
        assert not user.is_entry_default("Name")

        default = Mapping(is_default=True)
        default.Name = "x"
        assert default.is_entry_default("Name")

    def test_reassignment_replaces_value_and_flag(self):
        tree = Mapping()
        tree.set("key", "from default", is_default=True)
        tree.set("other", 1, is_default=True)

        tree.set("key", "from user", is_default=False)

        assert tree.key == "from user"
        assert not tree.is_entry_default("key")
        assert tree.is_entry_default("other")

    def test_remove_and_exists(self):
        tree = from_python({"a": 1, "b": 2})

        assert tree.exists("a")
        del tree["a"]
        assert not tree.exists("a")
        assert "a" not in tree
        with pytest.raises(KeyNotFoundError):
            del tree["a"]
        assert tree.remove("b")
        assert len(tree) == 0

    def test_copy_is_deep_and_keeps_flags(self):
        tree = Mapping()
        tree.set("nested", {"x": 1}, is_default=True)
        clone = tree.copy()

        clone.nested.x = 2

        assert tree.nested.x == 1
        assert clone.is_entry_default("nested")
        assert clone == {"nested": {"x": 2}}

    def test_non_default_filters_default_entries(self):
        tree = Mapping()
        tree.set("user_value", 1)
        tree.set("default_value", 2, is_default=True)
        tree.set("default_section", Mapping({"x": 1}, is_default=True), is_default=False)
        tree.set("user_section", {"kept": True, "inner": {"k": "v"}})
        tree.user_section.set("dropped", "d", is_default=True)
        tree.set("mixed_list", ListNode([Scalar("mine"), Scalar("theirs", is_default=True)]))

        assert tree.non_default() == {
            "user_value": 1,
            "user_section": {"kept": True, "inner": {"k": "v"}},
            "mixed_list": ["mine"],
        }

    def test_apply_json_merges_in_place(self):
        scope = Mapping()
        scope.Bar = "old"
        scope.Keep = True

        scope.apply_json('{ "Foo": 1, "Bar": "blubb" }')

        assert scope.Foo == 1
        assert scope.Bar == "blubb"
        assert scope.Keep

    def test_str_is_json(self):
        assert str(from_python({"a": [1, "b"]})) == '{"a": [1, "b"]}'
