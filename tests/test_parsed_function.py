"""
Unit tests for functions declared in parameter-file sections.
"""

import math

import pytest
import numpy as np
from numpy.testing import assert_array_almost_equal

from watfPRM.errors import CompileError, MissingKeyError, UnboundIdentifierError
from watfPRM.expression.parsed_function import (
    ParsedFunction, default_variable_names, iter_function_sections, parse_constants,
)
from watfPRM.io.reader import parse, parse_file


class TestParseConstants:
    """Tests for the 'Function constants' value."""

    def test_pairs(self):
        assert parse_constants("cm=0.01, year=1, vel=-0.20") == \
            {"cm": 0.01, "year": 1.0, "vel": -0.2}

    def test_empty(self):
        assert parse_constants("") == {}

    def test_missing_equals(self):
        with pytest.raises(CompileError, match="bad function constants"):
            parse_constants("cm 0.01")

    def test_non_numeric(self):
        with pytest.raises(CompileError, match="non-numeric"):
            parse_constants("cm=abc")


class TestDefaults:
    """Tests for absent parameters."""

    def test_default_variable_names(self):
        assert default_variable_names(1) == "x,t"
        assert default_variable_names(2) == "x,y,t"
        assert default_variable_names(3) == "x,y,z,t"
        with pytest.raises(ValueError):
            default_variable_names(4)

    def test_empty_section_is_zero(self):
        tree = parse("subsection Function\nend\n")
        f = ParsedFunction.from_section(tree, "Function")
        assert f.function.variable_names == ("x", "y", "t")
        assert f.has_time
        assert f.vector_value([1.0, 2.0], time=3.0) == [0.0]

    def test_three_dimensional_defaults(self):
        tree = parse("subsection Function\n  set Function expression = x + y + z + t\nend\n")
        f = ParsedFunction.from_section(tree, "Function", dim=3)
        assert f.value([1.0, 2.0, 3.0], time=4.0) == 10.0

    def test_missing_section(self):
        with pytest.raises(MissingKeyError):
            ParsedFunction.from_section(parse("set a = 1"), "Function")


class TestFromSection:
    """Tests against the sample parameter files."""

    def test_inflow_velocity(self, inflow_box_file):
        tree = parse_file(inflow_box_file)
        f = ParsedFunction.from_section(tree, "Boundary velocity model/Function",
                                        n_components=2)
        assert not f.has_time
        assert f.vector_value([0.0, 750.0]) == pytest.approx([-0.002, 0.0])
        assert f.vector_value([0.0, 250.0]) == pytest.approx([0.002, 0.0])
        assert f.vector_value([2000.0, 250.0]) == [0.0, 0.0]
        assert f.value([0.0, 750.0], component=1) == 0.0

    def test_initial_temperature_block(self, sinking_block_file):
        tree = parse_file(sinking_block_file)
        f = ParsedFunction.from_section(tree, "Initial temperature model/Function")
        assert f.value([250e3, 400e3]) == 393.0
        assert f.value([0.0, 0.0]) == 293.0

    def test_time_dependent_velocity(self, sinking_block_file, tolerance):
        tree = parse_file(sinking_block_file)
        f = ParsedFunction.from_section(tree, "Boundary velocity model/Function")
        assert f.has_time
        vx, vy = f.vector_value([250e3, 500e3], time=0.0)
        assert vx == 0.0
        assert vy == pytest.approx(-0.01)
        _, vy_later = f.vector_value([250e3, 500e3], time=1e6)
        assert vy_later == pytest.approx(-0.01 * math.exp(-1.0), rel=tolerance)

    def test_component_count_mismatch(self, inflow_box_file):
        tree = parse_file(inflow_box_file)
        with pytest.raises(CompileError, match="expected 3 component"):
            ParsedFunction.from_section(tree, "Boundary velocity model/Function",
                                        n_components=3)

    def test_unknown_identifier_in_section(self):
        text = """
subsection Function
  set Variable names      = x,y
  set Function expression = x + year
end
"""
        with pytest.raises(UnboundIdentifierError) as excinfo:
            ParsedFunction.from_section(parse(text), "Function")
        assert excinfo.value.identifier == "year"

    def test_wrong_number_of_variables(self):
        with pytest.raises(CompileError, match="2 or 3 variable"):
            ParsedFunction.from_strings("x", "x", dim=2)
        with pytest.raises(CompileError):
            ParsedFunction.from_strings("x", "x,y,z,t", dim=2)

    def test_iter_function_sections(self, inflow_box_file, sinking_block_file):
        assert list(iter_function_sections(parse_file(inflow_box_file))) == [
            ("Boundary velocity model", "Function"),
            ("Initial temperature model", "Function"),
        ]
        assert len(list(iter_function_sections(parse_file(sinking_block_file)))) == 2


class TestVectorized:
    """Tests for many-point evaluation."""

    def test_vector_values_shape(self):
        f = ParsedFunction.from_strings("x + y; x - y", "x,y")
        points = np.array([[0.0, 1.0], [2.0, 3.0], [5.0, 1.0]])
        values = f.vector_values(points)
        assert values.shape == (3, 2)
        assert_array_almost_equal(values[:, 0], [1.0, 5.0, 6.0])
        assert_array_almost_equal(values[:, 1], [-1.0, -1.0, 4.0])

    def test_vector_values_with_time(self):
        f = ParsedFunction.from_strings("x * t", "x,y,t")
        values = f.vector_values(np.array([[1.0, 0.0], [2.0, 0.0]]), time=10.0)
        assert_array_almost_equal(values[:, 0], [10.0, 20.0])

    def test_vector_values_matches_pointwise(self):
        f = ParsedFunction.from_strings("sin(x) * cos(y); max(x, y)", "x,y")
        points = np.random.default_rng(0).uniform(-2, 2, size=(10, 2))
        values = f.vector_values(points)
        for p, v in zip(points, values):
            assert_array_almost_equal(v, f.vector_value(p))

    def test_bad_point_shape(self):
        f = ParsedFunction.from_strings("x", "x,y")
        with pytest.raises(ValueError):
            f.vector_values(np.zeros((4, 3)))
        with pytest.raises(ValueError):
            f.vector_value([1.0])

    def test_evaluate_grid(self):
        f = ParsedFunction.from_strings("x * y", "x,y")
        X, Y = np.meshgrid([1.0, 2.0], [3.0, 4.0, 5.0], indexing="ij")
        values = f.evaluate_grid(X, Y)
        assert values.shape == (1, 2, 3)
        assert_array_almost_equal(values[0], X * Y)
