"""
Function sampling for visualization and post-processing.

This module evaluates parsed functions (boundary/initial conditions) on
regular grids or point clouds, e.g. to inspect a prescribed velocity
field before a simulation is started.

Key functions:
- sample_function_2d: Evaluate a 2D function on a uniform grid
- evaluate_at_points: Evaluate a function at arbitrary points

Evaluation is vectorized through CompiledFunction.evaluate_array, so a
whole grid is one pass over the expression tree.
"""

import numpy as np
from typing import Tuple

from ..expression.parsed_function import ParsedFunction


def sample_function_2d(func: ParsedFunction,
                       x_range: Tuple[float, float],
                       y_range: Tuple[float, float],
                       n_x: int = 50,
                       n_y: int = 50,
                       time: float = 0.0) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Sample a 2D function on a uniform grid.

    Parameters:
        func: 2D parsed function
        x_range: (x_min, x_max)
        y_range: (y_min, y_max)
        n_x: Number of sample points in x direction
        n_y: Number of sample points in y direction
        time: Time value (ignored if the function has no time variable)

    Returns:
        (X, Y, V) where:
        - X: x-coordinates, shape (n_x, n_y)
        - Y: y-coordinates, shape (n_x, n_y)
        - V: Function values, shape (n_components, n_x, n_y)
    """
    if func.dim != 2:
        raise ValueError(f"sample_function_2d needs a 2D function, got dim={func.dim}")
    if n_x < 2 or n_y < 2:
        raise ValueError("Need at least 2 sample points per direction")

    x_vals = np.linspace(x_range[0], x_range[1], n_x)
    y_vals = np.linspace(y_range[0], y_range[1], n_y)
    X, Y = np.meshgrid(x_vals, y_vals, indexing="ij")

    V = func.evaluate_grid(X, Y, time=time)
    return X, Y, V


def evaluate_at_points(func: ParsedFunction,
                       points: np.ndarray,
                       time: float = 0.0) -> np.ndarray:
    """
    Evaluate a function at a set of points.

    Parameters:
        func: Parsed function
        points: Array of shape (n_points, dim)
        time: Time value

    Returns:
        Array of shape (n_points, n_components)
    """
    return func.vector_values(points, time=time)


def component_range(V: np.ndarray) -> np.ndarray:
    """
    Min/max of each sampled component, ignoring nan.

    Returns:
        Array of shape (n_components, 2)
    """
    flat = V.reshape(V.shape[0], -1)
    return np.stack([np.nanmin(flat, axis=1), np.nanmax(flat, axis=1)], axis=1)
