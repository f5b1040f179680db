"""
Built-in functions and constants available in every expression.

Functions are numpy ufuncs so that one evaluation handles scalars and
whole arrays of points alike.
"""

import numpy as np

# name -> (implementation, number of arguments)
FUNCTIONS = {
    "sin": (np.sin, 1),
    "cos": (np.cos, 1),
    "tan": (np.tan, 1),
    "asin": (np.arcsin, 1),
    "acos": (np.arccos, 1),
    "atan": (np.arctan, 1),
    "atan2": (np.arctan2, 2),
    "sinh": (np.sinh, 1),
    "cosh": (np.cosh, 1),
    "tanh": (np.tanh, 1),
    "exp": (np.exp, 1),
    "log": (np.log, 1),
    "log10": (np.log10, 1),
    "sqrt": (np.sqrt, 1),
    "abs": (np.abs, 1),
    "floor": (np.floor, 1),
    "ceil": (np.ceil, 1),
    "min": (np.minimum, 2),
    "max": (np.maximum, 2),
    "pow": (np.power, 2),
}

# Bound unless the caller declares a constant of the same name
DEFAULT_CONSTANTS = {
    "pi": float(np.pi),
    "Pi": float(np.pi),
}
