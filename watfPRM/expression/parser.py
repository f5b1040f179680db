"""
Recursive-descent parser for function expressions.

Grammar (lowest to highest precedence):

    components  := expr (';' expr)* END
    expr        := or
    or          := and ('||' and)*
    and         := equality ('&&' equality)*
    equality    := relational (('==' | '!=') relational)*
    relational  := additive (('<' | '<=' | '>' | '>=') additive)*
    additive    := multiplicative (('+' | '-') multiplicative)*
    multiplicative := unary (('*' | '/') unary)*
    unary       := ('-' | '+') unary | power
    power       := primary ('^' unary)?
    primary     := NUMBER
                 | IDENT                          variable or constant
                 | 'if' '(' expr ',' expr ',' expr ')'
                 | IDENT '(' expr (',' expr)* ')'   built-in function
                 | '(' expr ')'

Binary operators are left-associative except '^'. Identifiers are bound
while parsing: a variable becomes its argument index, a constant its
value, and anything else fails with UnboundIdentifierError.

Expressions nested more than MAX_NESTING levels, or whose tree is deeper
than MAX_DEPTH, fail with ExpressionSyntaxError.
"""

from typing import List, Mapping, Tuple

from ..errors import ExpressionSyntaxError, UnboundIdentifierError
from . import nodes
from .builtins import FUNCTIONS
from .lexer import Token, tokenize
from .nodes import ExprNode

# Binary precedence levels, lowest first
_LEVELS: Tuple[Tuple[str, ...], ...] = (
    ("||",),
    ("&&",),
    ("==", "!="),
    ("<", "<=", ">", ">="),
    ("+", "-"),
    ("*", "/"),
)

# Bounds on parser recursion (nesting) and on syntax tree height (evaluation)
MAX_NESTING = 32
MAX_DEPTH = 200


class ExpressionParser:
    """
    Parses one expression string against fixed variable and constant names.

    Parameters:
        expression: Expression text (may contain ';'-separated components)
        variables: Mapping of variable name -> argument index
        constants: Mapping of constant name -> value
    """

    def __init__(self, expression: str, variables: Mapping[str, int],
                 constants: Mapping[str, float]):
        self.expression = expression
        self.variables = variables
        self.constants = constants
        self.tokens: List[Token] = tokenize(expression)
        self.index = 0
        self.nesting = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind != "END":
            self.index += 1
        return token

    def _error(self, message: str, token: Token = None) -> ExpressionSyntaxError:
        token = token or self.current
        return ExpressionSyntaxError(message, self.expression, token.position)

    def _describe(self, token: Token) -> str:
        return "end of expression" if token.kind == "END" else repr(token.text)

    def _expect(self, kind: str, text: str) -> Token:
        token = self.current
        if token.kind != kind:
            raise self._error(f"expected {text!r}, found {self._describe(token)}")
        return self._advance()

    def parse(self) -> Tuple[ExprNode, ...]:
        """Parse all ';'-separated components."""
        components = [self._expr()]
        while self.current.kind == "SEMI":
            self._advance()
            components.append(self._expr())
        if self.current.kind != "END":
            raise self._error(f"unexpected {self._describe(self.current)}")
        for node in components:
            if node.depth > MAX_DEPTH:
                raise ExpressionSyntaxError(
                    f"expression tree deeper than {MAX_DEPTH} levels",
                    self.expression, node.position)
        return tuple(components)

    def _expr(self) -> ExprNode:
        return self._binary(0)

    def _binary(self, level: int) -> ExprNode:
        if level == len(_LEVELS):
            return self._unary()
        operators = _LEVELS[level]
        node = self._binary(level + 1)
        while self.current.kind == "OP" and self.current.text in operators:
            op = self._advance()
            rhs = self._binary(level + 1)
            node = nodes.binary(op.text, node, rhs, op.position)
        return node

    def _unary(self) -> ExprNode:
        token = self.current
        self.nesting += 1
        if self.nesting > MAX_NESTING:
            raise self._error(f"expression nested more than {MAX_NESTING} levels deep")
        try:
            if token.kind == "OP" and token.text in ("-", "+"):
                self._advance()
                return nodes.unary(token.text, self._unary(), token.position)
            return self._power()
        finally:
            self.nesting -= 1

    def _power(self) -> ExprNode:
        base = self._primary()
        if self.current.kind == "OP" and self.current.text == "^":
            op = self._advance()
            # Right-associative; allows 2^-1
            exponent = self._unary()
            return nodes.binary("^", base, exponent, op.position)
        return base

    def _primary(self) -> ExprNode:
        token = self.current

        if token.kind == "NUMBER":
            self._advance()
            return nodes.number(float(token.text), token.position)

        if token.kind == "LPAREN":
            self._advance()
            node = self._expr()
            self._expect("RPAREN", ")")
            return node

        if token.kind == "IDENT":
            self._advance()
            if self.current.kind == "LPAREN":
                return self._call(token)
            return self._identifier(token)

        raise self._error(f"expected a value, found {self._describe(token)}")

    def _identifier(self, token: Token) -> ExprNode:
        name = token.text
        if name in self.variables:
            return nodes.variable(name, self.variables[name], token.position)
        if name in self.constants:
            return nodes.constant(name, self.constants[name], token.position)
        if name == "if":
            raise self._error("expected '(' after 'if'")
        raise UnboundIdentifierError(name, self.expression, token.position)

    def _call(self, token: Token) -> ExprNode:
        name = token.text
        self._expect("LPAREN", "(")
        args = [self._expr()]
        while self.current.kind == "COMMA":
            self._advance()
            args.append(self._expr())
        self._expect("RPAREN", ")")

        if name == "if":
            if len(args) != 3:
                raise self._error(
                    f"'if' takes 3 arguments (condition, then, else), got {len(args)}", token)
            return nodes.conditional(*args, position=token.position)

        if name not in FUNCTIONS:
            raise UnboundIdentifierError(name, self.expression, token.position,
                                         kind="function")
        _, arity = FUNCTIONS[name]
        if len(args) != arity:
            raise self._error(f"'{name}' takes {arity} argument(s), got {len(args)}", token)
        return nodes.call(name, tuple(args), token.position)


def parse_expression(expression: str, variables: Mapping[str, int],
                     constants: Mapping[str, float]) -> Tuple[ExprNode, ...]:
    """Parse expression text into one syntax tree per ';'-separated component."""
    return ExpressionParser(expression, variables, constants).parse()
