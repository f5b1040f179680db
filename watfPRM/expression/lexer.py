"""
Tokenizer for function expressions.

Token kinds:
    NUMBER   1, 0.5, .5, 2., 1e-3, 0e3
    IDENT    x, vel, Function_1
    OP       + - * / ^ == != < <= > >= && ||
    LPAREN   (
    RPAREN   )
    COMMA    ,
    SEMI     ;
    END      end of input (always the last token)

Whitespace (including newlines from joined continuation lines) separates
tokens and is otherwise ignored.
"""

import re
from dataclasses import dataclass
from typing import List

from ..errors import ExpressionSyntaxError

_TOKEN_RE = re.compile(r"""
    (?P<ws>\s+)
  | (?P<NUMBER>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<IDENT>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<OP>&&|\|\||==|!=|<=|>=|[-+*/^<>])
  | (?P<LPAREN>\()
  | (?P<RPAREN>\))
  | (?P<COMMA>,)
  | (?P<SEMI>;)
""", re.VERBOSE)


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    position: int


def tokenize(expression: str) -> List[Token]:
    """
    Split an expression into tokens.

    Raises:
        ExpressionSyntaxError: on a character that starts no token
    """
    tokens: List[Token] = []
    position = 0
    while position < len(expression):
        match = _TOKEN_RE.match(expression, position)
        if match is None:
            raise ExpressionSyntaxError(
                f"unexpected character {expression[position]!r}",
                expression, position)
        kind = match.lastgroup
        if kind != "ws":
            tokens.append(Token(kind, match.group(), position))
        position = match.end()
    tokens.append(Token("END", "", len(expression)))
    return tokens
