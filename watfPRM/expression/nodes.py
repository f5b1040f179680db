"""
Expression syntax tree.

The tree is a tagged variant: every node is one frozen ExprNode whose
`kind` says which fields are meaningful.

    kind          value            name        operands
    ----------    -------------    --------    -------------------------
    NUMBER        literal value    -           ()
    VARIABLE      argument index   var name    ()
    CONSTANT      bound value      const name  ()
    UNARY         -                "-" / "+"   (operand,)
    BINARY        -                operator    (lhs, rhs)
    CONDITIONAL   -                "if"        (cond, then, else)
    CALL          -                func name   (arg, ...)

Nodes hold no mutable state, so one tree can be evaluated from any number
of threads at once.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class NodeKind(Enum):
    NUMBER = "number"
    VARIABLE = "variable"
    CONSTANT = "constant"
    UNARY = "unary"
    BINARY = "binary"
    CONDITIONAL = "if"
    CALL = "call"


BINARY_OPERATORS = ("+", "-", "*", "/", "^",
                    "==", "!=", "<", "<=", ">", ">=",
                    "&&", "||")


@dataclass(frozen=True)
class ExprNode:
    kind: NodeKind
    value: Optional[float] = None
    name: Optional[str] = None
    operands: Tuple['ExprNode', ...] = ()
    position: int = 0
    # Height of the subtree rooted here (a leaf has depth 1)
    depth: int = field(default=1, compare=False, repr=False)

    def __post_init__(self):
        if self.operands:
            object.__setattr__(self, "depth", 1 + max(op.depth for op in self.operands))

    def to_tuple(self) -> tuple:
        """
        Nested-tuple form, e.g. ('+', ('var', 'x'), ('num', 1.0)).

        Positions are left out so that trees compare by structure.
        """
        kind = self.kind
        if kind is NodeKind.NUMBER:
            return ("num", self.value)
        if kind is NodeKind.VARIABLE:
            return ("var", self.name)
        if kind is NodeKind.CONSTANT:
            return ("const", self.name, self.value)
        if kind is NodeKind.UNARY:
            return ("neg" if self.name == "-" else "pos",
                    self.operands[0].to_tuple())
        if kind is NodeKind.CONDITIONAL:
            return ("if",) + tuple(op.to_tuple() for op in self.operands)
        # BINARY and CALL carry their operator / function name
        return (self.name,) + tuple(op.to_tuple() for op in self.operands)


def number(value: float, position: int = 0) -> ExprNode:
    return ExprNode(NodeKind.NUMBER, value=float(value), position=position)


def variable(name: str, index: int, position: int = 0) -> ExprNode:
    return ExprNode(NodeKind.VARIABLE, value=index, name=name, position=position)


def constant(name: str, value: float, position: int = 0) -> ExprNode:
    return ExprNode(NodeKind.CONSTANT, value=float(value), name=name, position=position)


def unary(op: str, operand: ExprNode, position: int = 0) -> ExprNode:
    return ExprNode(NodeKind.UNARY, name=op, operands=(operand,), position=position)


def binary(op: str, lhs: ExprNode, rhs: ExprNode, position: int = 0) -> ExprNode:
    return ExprNode(NodeKind.BINARY, name=op, operands=(lhs, rhs), position=position)


def conditional(cond: ExprNode, then: ExprNode, otherwise: ExprNode,
                position: int = 0) -> ExprNode:
    return ExprNode(NodeKind.CONDITIONAL, name="if",
                    operands=(cond, then, otherwise), position=position)


def call(name: str, args: Tuple[ExprNode, ...], position: int = 0) -> ExprNode:
    return ExprNode(NodeKind.CALL, name=name, operands=tuple(args), position=position)
