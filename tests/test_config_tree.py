"""
Unit tests for ConfigTree lookups and typed coercion.
"""

import pytest

from watfPRM.errors import CoercionError, MissingKeyError, StructuralError
from watfPRM.io.reader import parse
from watfPRM.tree.config_tree import ConfigTree, normalize_path
from watfPRM.tree import coercion


@pytest.fixture
def tree():
    text = """
set Dimension = 2
set End time  = 1.5e7
set Use years = true
set Resume    = off
set Name      = inflow
subsection Box
  set X extent    = 2e3
  set Repetitions = 2, 3
  set Flags       = yes, no, on
  set Extents     = 1e3, 2.5e3
  set Indicators  = left: function, right : 0.5
  set Empty       =
  set Bad list    = 1,,2
end
"""
    return parse(text)


class TestCoercion:
    """Tests for the coercion functions."""

    @pytest.mark.parametrize("text, expected", [
        ("5", 5), ("-12", -12), ("+3", 3), ("  7 ", 7),
    ])
    def test_int(self, text, expected):
        assert coercion.to_int(text) == expected

    @pytest.mark.parametrize("text", ["1e3", "2.0", "two", "", "0x10", "1_000"])
    def test_int_rejects(self, text):
        with pytest.raises(CoercionError):
            coercion.to_int(text)

    @pytest.mark.parametrize("text, expected", [
        ("0.5", 0.5), ("1e21", 1e21), ("-2.5E-3", -2.5e-3), (".5", 0.5),
        ("2.", 2.0), ("0e3", 0.0), ("42", 42.0),
    ])
    def test_real(self, text, expected):
        assert coercion.to_real(text) == expected

    @pytest.mark.parametrize("text", ["abc", "1e", "inf", "nan", "1.2.3", "", "true"])
    def test_real_rejects(self, text):
        with pytest.raises(CoercionError):
            coercion.to_real(text)

    @pytest.mark.parametrize("text, expected", [
        ("true", True), ("True", True), ("yes", True), ("on", True),
        ("false", False), ("FALSE", False), ("no", False), ("off", False),
    ])
    def test_bool(self, text, expected):
        assert coercion.to_bool(text) is expected

    @pytest.mark.parametrize("text", ["1", "0", "2.5", "maybe", ""])
    def test_bool_rejects_numbers_and_words(self, text):
        with pytest.raises(CoercionError):
            coercion.to_bool(text)

    def test_list_of_reals(self):
        assert coercion.to_list("1, 2.5 ,3e2", "real") == [1.0, 2.5, 300.0]
        assert coercion.to_list("1, 2", float) == [1.0, 2.0]

    def test_list_empty_items(self):
        assert coercion.to_list("a, b,") == ["a", "b", ""]
        assert coercion.to_list("a,,b", str) == ["a", "", "b"]
        with pytest.raises(CoercionError, match="empty list item"):
            coercion.to_list("1, 2,", "real")

    def test_list_bad_item(self):
        with pytest.raises(CoercionError, match="bad item 'x'"):
            coercion.to_list("1, x", "integer")

    def test_unknown_item_type(self):
        with pytest.raises(ValueError, match="Unknown value type"):
            coercion.to_list("1", "complex")

    def test_map(self):
        assert coercion.to_map("a: 1, b:2", "integer") == {"a": 1, "b": 2}

    def test_map_missing_colon(self):
        with pytest.raises(CoercionError, match="expected 'key: value'"):
            coercion.to_map("a 1")

    def test_selection(self):
        assert coercion.to_selection(" box ", ["box", "sphere"]) == "box"
        with pytest.raises(CoercionError, match="box|sphere"):
            coercion.to_selection("chunk", ["box", "sphere"])

    def test_split_pairs(self):
        assert coercion.split_pairs("cm=0.01, year = 1") == [("cm", "0.01"), ("year", "1")]
        with pytest.raises(ValueError):
            coercion.split_pairs("cm")


class TestLookups:
    """Tests for typed ConfigTree lookups."""

    def test_scalar_lookups(self, tree):
        assert tree.get_int((), "Dimension") == 2
        assert tree.get_real((), "End time") == 1.5e7
        assert tree.get_bool((), "Use years") is True
        assert tree.get_bool((), "Resume") is False
        assert tree.get_string((), "Name") == "inflow"
        assert tree.get_real("Box", "X extent") == 2000.0

    def test_integer_read_as_real(self, tree):
        assert tree.get_real((), "Dimension") == 2.0

    def test_list_lookups(self, tree):
        assert tree.get_list("Box", "Repetitions", "integer") == [2, 3]
        assert tree.get_list("Box", "Flags", bool) == [True, False, True]
        assert tree.get_list("Box", "Extents", "real") == [1000.0, 2500.0]
        assert tree.get_list("Box", "Empty", "real") == []
        assert tree.get_list((), "Name") == ["inflow"]

    def test_map_lookup(self, tree):
        assert tree.get_map("Box", "Indicators") == {"left": "function", "right": "0.5"}

    def test_selection_lookup(self, tree):
        assert tree.get_selection((), "Name", ["inflow", "outflow"]) == "inflow"
        with pytest.raises(CoercionError):
            tree.get_selection((), "Name", ["box"])

    def test_path_forms_are_equivalent(self, tree):
        assert tree.get_real("Box", "X extent") == tree.get_real(["Box"], "X extent")
        assert tree.get_real(("Box",), "X   extent") == 2000.0

    def test_numeric_as_bool_fails(self, tree):
        with pytest.raises(TypeError) as excinfo:
            tree.get_bool((), "Dimension")
        error = excinfo.value
        assert isinstance(error, CoercionError)
        assert error.expected == "boolean"
        assert error.key == "Dimension"
        assert error.text == "2"

    def test_text_as_real_fails(self, tree):
        with pytest.raises(TypeError) as excinfo:
            tree.get_real((), "Name")
        message = str(excinfo.value)
        assert "real" in message
        assert "Name" in message
        assert "inflow" in message

    def test_error_names_section_path(self, tree):
        with pytest.raises(CoercionError) as excinfo:
            tree.get_int("Box", "X extent")
        assert excinfo.value.path == ("Box",)
        assert "Box / X extent" in str(excinfo.value)

    def test_bad_list_item_fails(self, tree):
        with pytest.raises(CoercionError, match="empty list item"):
            tree.get_list("Box", "Bad list", "integer")
        assert tree.get_list("Box", "Bad list") == ["1", "", "2"]

    def test_missing_key(self, tree):
        with pytest.raises(MissingKeyError) as excinfo:
            tree.get_real("Box", "Y extent")
        assert excinfo.value.path == ("Box",)
        assert excinfo.value.key == "Y extent"
        assert isinstance(excinfo.value, KeyError)
        assert "Y extent" in str(excinfo.value)

    def test_missing_section(self, tree):
        with pytest.raises(MissingKeyError):
            tree.get_real("Nowhere", "X extent")
        with pytest.raises(MissingKeyError):
            tree.section("Nowhere")

    def test_section_is_not_a_parameter(self, tree):
        with pytest.raises(MissingKeyError):
            tree.get_string((), "Box")

    def test_default_for_missing_key(self, tree):
        assert tree.get_real("Box", "Y extent", default=1.0) == 1.0
        assert tree.get_list("Box", "Missing", default=None) is None
        assert tree.get_int("Nowhere", "Dimension", default=3) == 3

    def test_default_does_not_hide_bad_value(self, tree):
        with pytest.raises(CoercionError):
            tree.get_int((), "Name", default=0)

    def test_has(self, tree):
        assert tree.has("Box", "X extent")
        assert not tree.has("Box", "Y extent")
        assert not tree.has((), "Box")
        assert tree.has_section("Box")


class TestTreeStructure:
    """Tests for building and walking trees programmatically."""

    def test_normalize_path(self):
        assert normalize_path("Geometry model/Box") == ("Geometry model", "Box")
        assert normalize_path(["Geometry  model", " Box "]) == ("Geometry model", "Box")
        assert normalize_path("") == ()
        assert normalize_path(None) == ()

    def test_set_creates_sections(self):
        tree = ConfigTree()
        assert tree.set("a/b", "k", "1") is None
        assert tree.get_int(["a", "b"], "k") == 1

    def test_set_returns_previous(self):
        tree = ConfigTree()
        tree.set((), "k", "1")
        previous = tree.set((), "k", "2")
        assert previous.raw == "1"
        assert tree.get_int((), "k") == 2

    def test_set_on_section_name_fails(self):
        tree = ConfigTree()
        tree.ensure_section("a")
        with pytest.raises(StructuralError):
            tree.set((), "a", "1")

    def test_walk_order(self, tree):
        keys = [(path, leaf.key) for path, leaf in tree.walk()]
        assert keys[0] == ((), "Dimension")
        assert keys[5] == (("Box",), "X extent")
        assert tree.n_parameters == len(keys) == 12

    def test_to_dict(self):
        tree = parse("set a = 1\nsubsection s\n  set b = x\nend\n")
        assert tree.to_dict() == {"a": "1", "s": {"b": "x"}}

    def test_equality(self):
        assert parse("set a = 1") == parse("set   a =   1  # same")
        assert parse("set a = 1") != parse("set a = 2")
