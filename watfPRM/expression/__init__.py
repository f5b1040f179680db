"""
Function expression module.

Provides:
- compile_function: Compile expression text into a CompiledFunction
- CompiledFunction: Immutable, thread-safe evaluator (scalar and array)
- ParsedFunction: Function read from a parameter-file section
- ExprNode / NodeKind: Tagged-variant syntax tree
"""

from .nodes import ExprNode, NodeKind
from .lexer import Token, tokenize
from .parser import parse_expression
from .function import CompiledFunction, compile_function, evaluate_node
from .parsed_function import (
    ParsedFunction,
    parse_constants,
    default_variable_names,
    iter_function_sections,
)
