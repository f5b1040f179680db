"""
Compiled function expressions.

A CompiledFunction is built once from expression text, the ordered
variable names and a set of named constants, and is then evaluated many
times (once per quadrature point and time step in a typical solver):

    f = compile_function("vel*cm/year; 0", ["x", "y"],
                         {"cm": 0.01, "year": 1, "vel": -0.20})
    f.evaluate([0.0, 0.0])          # [-0.002, 0.0]

    X, Y = np.meshgrid(np.linspace(0, 1, 5), np.linspace(0, 1, 5))
    f.evaluate_array(X, Y)          # shape (2, 5, 5)

Semantics:
- Comparisons and '&&', '||' yield 1.0 (true) or 0.0 (false); any
  non-zero value counts as true in a condition.
- Arithmetic follows IEEE-754: division by zero gives inf or nan and
  overflow gives inf. Nothing raises at evaluation time.
- Evaluation touches no shared mutable state, so a CompiledFunction may
  be used from several threads at once.
"""

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from ..errors import CompileError
from .builtins import DEFAULT_CONSTANTS, FUNCTIONS
from .nodes import ExprNode, NodeKind
from .parser import parse_expression

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_RESERVED = frozenset({"if"})


def _as_real(value) -> np.ndarray:
    return np.asarray(value, dtype=np.float64)


def _truth(value) -> np.ndarray:
    return np.not_equal(value, 0.0)


_BINARY = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.divide,
    "^": np.power,
    "==": lambda a, b: _as_real(np.equal(a, b)),
    "!=": lambda a, b: _as_real(np.not_equal(a, b)),
    "<": lambda a, b: _as_real(np.less(a, b)),
    "<=": lambda a, b: _as_real(np.less_equal(a, b)),
    ">": lambda a, b: _as_real(np.greater(a, b)),
    ">=": lambda a, b: _as_real(np.greater_equal(a, b)),
    "&&": lambda a, b: _as_real(np.logical_and(_truth(a), _truth(b))),
    "||": lambda a, b: _as_real(np.logical_or(_truth(a), _truth(b))),
}


def evaluate_node(node: ExprNode, args: Sequence[np.ndarray]):
    """
    Evaluate one syntax tree.

    Parameters:
        node: Root of the tree
        args: Variable values in declaration order (floats or arrays)

    Returns:
        float64 scalar or array (broadcast over the arguments)
    """
    kind = node.kind
    if kind is NodeKind.NUMBER or kind is NodeKind.CONSTANT:
        return node.value
    if kind is NodeKind.VARIABLE:
        return args[node.value]
    if kind is NodeKind.BINARY:
        lhs = evaluate_node(node.operands[0], args)
        rhs = evaluate_node(node.operands[1], args)
        return _BINARY[node.name](lhs, rhs)
    if kind is NodeKind.UNARY:
        operand = evaluate_node(node.operands[0], args)
        return np.negative(operand) if node.name == "-" else operand
    if kind is NodeKind.CONDITIONAL:
        cond, then, otherwise = node.operands
        return np.where(_truth(evaluate_node(cond, args)),
                        evaluate_node(then, args),
                        evaluate_node(otherwise, args))
    if kind is NodeKind.CALL:
        func, _ = FUNCTIONS[node.name]
        return func(*(evaluate_node(op, args) for op in node.operands))
    raise ValueError(f"Unknown node kind: {kind}")


@dataclass(frozen=True)
class CompiledFunction:
    """
    Immutable evaluator for one or more ';'-separated scalar expressions.

    Attributes:
        expression: Source text
        variable_names: Ordered names bound to evaluate() arguments
        constants: Read-only mapping of named constants (including pi/Pi)
        components: One syntax tree per component
    """
    expression: str
    variable_names: Tuple[str, ...]
    constants: Mapping[str, float]
    components: Tuple[ExprNode, ...]

    @property
    def n_components(self) -> int:
        return len(self.components)

    @property
    def n_variables(self) -> int:
        return len(self.variable_names)

    def _check_args(self, args) -> List[np.ndarray]:
        args = list(args)
        if len(args) != self.n_variables:
            raise ValueError(
                f"Expected {self.n_variables} argument(s) "
                f"({', '.join(self.variable_names)}), got {len(args)}")
        return [_as_real(a) for a in args]

    def evaluate_array(self, *args) -> np.ndarray:
        """
        Evaluate all components for (broadcastable) arrays of arguments.

        Parameters:
            *args: One scalar or array per variable, in declaration order

        Returns:
            Array of shape (n_components, *broadcast_shape)
        """
        values = self._check_args(args)
        shape = np.broadcast_shapes(*(v.shape for v in values)) if values else ()
        with np.errstate(all="ignore"):
            results = [evaluate_node(node, values) for node in self.components]
        return np.stack([np.broadcast_to(_as_real(r), shape) for r in results])

    def evaluate(self, args: Iterable[float]) -> List[float]:
        """
        Evaluate all components at one point.

        Parameters:
            args: Variable values in declaration order

        Returns:
            List of n_components floats
        """
        return [float(v) for v in self.evaluate_array(*args)]

    def __call__(self, *args) -> Union[float, List[float]]:
        """f(x, y) -> float for scalar functions, list for vector-valued ones."""
        values = self.evaluate(args)
        return values[0] if self.n_components == 1 else values


def _check_name(name: str, what: str, expression: str) -> str:
    if not isinstance(name, str) or not _NAME_RE.fullmatch(name):
        raise CompileError(f"invalid {what} name {name!r}", expression)
    if name in _RESERVED:
        raise CompileError(f"{what} name {name!r} is reserved", expression)
    return name


def split_names(names: Union[str, Iterable[str]]) -> List[str]:
    """Accept 'x,y,t' or ['x', 'y', 't']."""
    if isinstance(names, str):
        return [n.strip() for n in names.split(",")] if names.strip() else []
    return list(names)


def compile_function(expression: str,
                     variable_names: Union[str, Iterable[str]],
                     constants: Optional[Mapping[str, float]] = None) -> CompiledFunction:
    """
    Compile expression text into a CompiledFunction.

    Parameters:
        expression: Expression text, components separated by ';'
        variable_names: Ordered variable names (list or comma-separated string)
        constants: Named constants, e.g. {"cm": 0.01, "year": 1}

    Returns:
        CompiledFunction

    Raises:
        UnboundIdentifierError: expression uses an undeclared name
        ExpressionSyntaxError: expression text is malformed
        CompileError: invalid, duplicate or clashing variable/constant names
    """
    variables = [_check_name(n, "variable", expression) for n in split_names(variable_names)]
    seen = set()
    for name in variables:
        if name in seen:
            raise CompileError(f"duplicate variable name {name!r}", expression)
        seen.add(name)

    bound = dict(DEFAULT_CONSTANTS)
    for name, value in (constants or {}).items():
        _check_name(name, "constant", expression)
        if name in seen:
            raise CompileError(f"constant {name!r} clashes with a variable name", expression)
        try:
            bound[name] = float(value)
        except (TypeError, ValueError):
            raise CompileError(f"constant {name!r} has non-numeric value {value!r}",
                               expression) from None
    # Variables shadow default constants such as 'pi'
    for name in variables:
        bound.pop(name, None)

    components = parse_expression(expression,
                                  {name: i for i, name in enumerate(variables)},
                                  bound)
    logger.debug("Compiled %r: %d component(s) of (%s)",
                 expression, len(components), ", ".join(variables))
    return CompiledFunction(expression=expression,
                            variable_names=tuple(variables),
                            constants=MappingProxyType(bound),
                            components=components)
