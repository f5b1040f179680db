"""
PRM - Parameter file library

Reads the nested 'subsection ... end' / 'set key = value' parameter files
used by geodynamics codes, and compiles the function expressions they
embed into fast, immutable evaluators.

Key modules:
- io: Parameter file reader and writer
- tree: ConfigTree with typed lookups (int, real, bool, list, map, selection)
- expression: Function expression compiler and evaluator
- postprocess: Grid sampling and VTK export of parsed functions
- visualization: Contour plots of parsed functions

Quick start:
    from watfPRM.io import parse_file
    from watfPRM.expression import ParsedFunction, compile_function

    tree = parse_file("examples/prm/inflow_box.prm")
    x_extent = tree.get_real("Geometry model/Box", "X extent")
    postprocessors = tree.get_list("Postprocess", "List of postprocessors")

    velocity = ParsedFunction.from_section(tree, "Boundary velocity model/Function")
    velocity.vector_value([0.0, 750.0])

    f = compile_function("if(x>0, 1, -1)", ["x"])
    f.evaluate([5.0])     # [1.0]
"""

__version__ = "0.1.0"
__author__ = "Wataru Fukuda"

# Core imports for convenience
from .errors import (
    PRMError,
    ParseError,
    StructuralError,
    CoercionError,
    MissingKeyError,
    CompileError,
    ExpressionSyntaxError,
    UnboundIdentifierError,
)
from .tree.config_tree import ConfigTree
from .io.reader import parse, parse_file
from .io.writer import format_tree, write_file
from .expression.function import CompiledFunction, compile_function
from .expression.parsed_function import ParsedFunction
