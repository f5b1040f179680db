"""
Visualization module for parsed functions.

Key functions:
- plot_function_2d: Filled contour plot of one function component

matplotlib is imported lazily, so importing this module does not require
a display backend.
"""

from .plot import plot_function_2d

__all__ = [
    'plot_function_2d',
]
