"""
Functions declared in a parameter-file section.

Boundary and initial conditions are usually given as a section of the
form

    subsection Function
      set Variable names      = x,y,t
      set Function constants  = cm=0.01, year=1
      set Function expression = if (x==0e3 && y>0.5e3, 2*cm/year, 0); 0
    end

ParsedFunction reads such a section, compiles it once and offers
point/time evaluation. Absent parameters take the usual defaults:
variable names 'x,y,t' (2D) or 'x,y,z,t' (3D), no constants and the
expression '0'. With dim + 1 variable names the last one is time.

Whether a function section is actually referenced by the boundary
indicators of the model is left to the consuming solver.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Sequence, Tuple

import numpy as np

from ..errors import CompileError, CoercionError
from ..tree.coercion import split_pairs, to_real
from ..tree.config_tree import ConfigTree, SectionPath, normalize_path
from .function import CompiledFunction, compile_function, split_names

VARIABLE_NAMES_KEY = "Variable names"
CONSTANTS_KEY = "Function constants"
EXPRESSION_KEY = "Function expression"

_COORDINATES = ("x", "y", "z")


def default_variable_names(dim: int) -> str:
    """'x,t' / 'x,y,t' / 'x,y,z,t'."""
    if dim not in (1, 2, 3):
        raise ValueError(f"Unsupported dimension: {dim}")
    return ",".join(_COORDINATES[:dim] + ("t",))


def parse_constants(text: str) -> Dict[str, float]:
    """
    Parse 'name=value, name=value' into a dict of floats.

    Raises:
        CompileError: on an entry without '=' or a non-numeric value
    """
    try:
        pairs = split_pairs(text, "=")
    except ValueError as exc:
        raise CompileError(f"bad function constants {text!r}: {exc}") from None
    constants = {}
    for name, value in pairs:
        try:
            constants[name] = to_real(value)
        except CoercionError:
            raise CompileError(
                f"function constant {name!r} has non-numeric value {value!r}") from None
    return constants


@dataclass(frozen=True)
class ParsedFunction:
    """
    A compiled function of space (and optionally time).

    Attributes:
        function: The compiled expression
        dim: Spatial dimension
    """
    function: CompiledFunction
    dim: int

    def __post_init__(self):
        n_vars = self.function.n_variables
        if n_vars not in (self.dim, self.dim + 1):
            raise CompileError(
                f"{self.dim}D function needs {self.dim} or {self.dim + 1} variable "
                f"names, got {n_vars} ({', '.join(self.function.variable_names)})",
                self.function.expression)

    @property
    def has_time(self) -> bool:
        return self.function.n_variables == self.dim + 1

    @property
    def n_components(self) -> int:
        return self.function.n_components

    def _arguments(self, coordinates: Sequence, time):
        if len(coordinates) != self.dim:
            raise ValueError(f"Expected {self.dim} coordinates, got {len(coordinates)}")
        args = list(coordinates)
        if self.has_time:
            args.append(time)
        return args

    def vector_value(self, point: Sequence[float], time: float = 0.0) -> list:
        """All components at one point."""
        return self.function.evaluate(self._arguments(point, time))

    def value(self, point: Sequence[float], time: float = 0.0,
              component: int = 0) -> float:
        """One component at one point."""
        return self.vector_value(point, time)[component]

    def vector_values(self, points: np.ndarray, time: float = 0.0) -> np.ndarray:
        """
        All components at many points.

        Parameters:
            points: Array of shape (n_points, dim)
            time: Time value (ignored if the function has no time variable)

        Returns:
            Array of shape (n_points, n_components)
        """
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != self.dim:
            raise ValueError(f"Points must have shape (n_points, {self.dim}), got {points.shape}")
        coordinates = [points[:, i] for i in range(self.dim)]
        values = self.function.evaluate_array(*self._arguments(coordinates, time))
        return values.T

    def evaluate_grid(self, *coordinates: np.ndarray, time: float = 0.0) -> np.ndarray:
        """Evaluate on broadcastable coordinate arrays; shape (n_components, ...)."""
        return self.function.evaluate_array(*self._arguments(coordinates, time))

    @classmethod
    def from_strings(cls, expression: str, variable_names: Optional[str] = None,
                     constants: str = "", dim: int = 2) -> 'ParsedFunction':
        """Build from the three parameter strings of a function section."""
        if variable_names is None:
            variable_names = default_variable_names(dim)
        compiled = compile_function(expression, split_names(variable_names),
                                    parse_constants(constants))
        return cls(compiled, dim)

    @classmethod
    def from_section(cls, tree: ConfigTree, path: SectionPath, dim: int = 2,
                     n_components: Optional[int] = None) -> 'ParsedFunction':
        """
        Build from a function section of a parameter tree.

        Parameters:
            tree: Parsed parameter file
            path: Path of the section holding the function parameters
            dim: Spatial dimension
            n_components: If given, the expression must have exactly this
                          many ';'-separated components

        Raises:
            MissingKeyError: if the section does not exist
            CompileError: (or a subclass) if the function is invalid
        """
        names = normalize_path(path)
        tree.section(names)
        parsed = cls.from_strings(
            tree.get_string(names, EXPRESSION_KEY, default="0"),
            tree.get_string(names, VARIABLE_NAMES_KEY, default=default_variable_names(dim)),
            tree.get_string(names, CONSTANTS_KEY, default=""),
            dim=dim)
        if n_components is not None and parsed.n_components != n_components:
            raise CompileError(
                f"expected {n_components} component(s), got {parsed.n_components}",
                parsed.function.expression)
        return parsed


def iter_function_sections(tree: ConfigTree) -> Iterator[Tuple[str, ...]]:
    """Yield the path of every section that sets 'Function expression'."""
    for path in tree.sections():
        if tree.has(path, EXPRESSION_KEY):
            yield path
