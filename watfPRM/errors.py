"""
Exception hierarchy for parameter files and function expressions.

All errors derive from PRMError so callers can catch everything raised by
this package in one place, while the builtin bases (ValueError, TypeError,
KeyError) keep them usable with generic handlers:

    PRMError
    ├── ParseError (ValueError)            malformed parameter-file text
    │   └── StructuralError                subsection/end mismatch, name clashes
    ├── CoercionError (TypeError)          value cannot be read as requested type
    ├── MissingKeyError (KeyError)         absent parameter, no default given
    └── CompileError (ValueError)          expression cannot be compiled
        ├── ExpressionSyntaxError          malformed expression text
        └── UnboundIdentifierError         undeclared variable/constant/function
"""

from typing import Optional, Sequence, Tuple


def format_path(path: Sequence[str]) -> str:
    """Human readable section path, e.g. 'Geometry model / Box'."""
    if not path:
        return "<root>"
    return " / ".join(path)


class PRMError(Exception):
    """Base class for all watfPRM errors."""


class ParseError(PRMError, ValueError):
    """
    Raised when parameter-file text cannot be parsed.

    Attributes:
        line: 1-based line number of the offending logical line (or None)
        source: Name of the file or string being parsed
        scope: Names of the subsections open at the point of failure
    """

    def __init__(self, message: str, line: Optional[int] = None,
                 source: Optional[str] = None,
                 scope: Sequence[str] = ()):
        self.message = message
        self.line = line
        self.source = source
        self.scope: Tuple[str, ...] = tuple(scope)
        super().__init__(self._render())

    def _render(self) -> str:
        where = self.source or "<string>"
        if self.line is not None:
            where = f"{where}:{self.line}"
        return f"{where}: {self.message} (open sections: {format_path(self.scope)})"


class StructuralError(ParseError):
    """Unmatched 'subsection'/'end', or a name used both as section and parameter."""


class CoercionError(PRMError, TypeError):
    """
    Raised when a parameter value cannot be converted to the requested type.

    Attributes:
        expected: Name of the requested type ("integer", "real", ...)
        path: Section path of the parameter
        key: Parameter name
        text: The offending text
    """

    def __init__(self, expected: str, text: str, path: Sequence[str] = (),
                 key: Optional[str] = None, detail: Optional[str] = None):
        self.expected = expected
        self.text = text
        self.path: Tuple[str, ...] = tuple(path)
        self.key = key
        message = f"expected {expected}, got {text!r}"
        if key is not None:
            message = f"{format_path(self.path)} / {key}: {message}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class MissingKeyError(PRMError, KeyError):
    """Raised when a parameter (or section) is looked up but does not exist."""

    def __init__(self, path: Sequence[str], key: Optional[str] = None):
        self.path: Tuple[str, ...] = tuple(path)
        self.key = key
        super().__init__(path, key)

    def __str__(self) -> str:
        if self.key is None:
            return f"no section {format_path(self.path)!r}"
        return f"no parameter {self.key!r} in section {format_path(self.path)!r}"


class CompileError(PRMError, ValueError):
    """
    Raised when a function expression cannot be compiled.

    Attributes:
        expression: The expression text being compiled (if known)
        position: 0-based character offset into the expression (if known)
    """

    def __init__(self, message: str, expression: Optional[str] = None,
                 position: Optional[int] = None):
        self.message = message
        self.expression = expression
        self.position = position
        if position is not None:
            message = f"{message} at offset {position}"
        if expression is not None:
            message = f"{message} in {expression!r}"
        super().__init__(message)


class ExpressionSyntaxError(CompileError):
    """Malformed expression text."""


class UnboundIdentifierError(CompileError):
    """An identifier that is neither a declared variable nor a constant."""

    def __init__(self, identifier: str, expression: Optional[str] = None,
                 position: Optional[int] = None, kind: str = "identifier"):
        self.identifier = identifier
        super().__init__(f"unknown {kind} {identifier!r}", expression, position)
