"""
VTK export for visualization.

This module exports sampled functions to VTK format for visualization
in ParaView, VisIt, or other VTK-compatible viewers.

Supported formats:
- VTK Legacy (.vtk) - ASCII, widely compatible

Each component becomes a SCALARS field; a two-component function is also
written as a VECTORS field (with zero z-component) so that prescribed
velocities can be drawn as glyphs directly.
"""

import logging
import numpy as np
from typing import Tuple
from pathlib import Path

from .sampling import sample_function_2d
from ..expression.parsed_function import ParsedFunction

logger = logging.getLogger(__name__)


def export_function_vtk_2d(filename: str,
                           func: ParsedFunction,
                           x_range: Tuple[float, float],
                           y_range: Tuple[float, float],
                           n_x: int = 50,
                           n_y: int = 50,
                           time: float = 0.0,
                           field_name: str = "function") -> Path:
    """
    Export a sampled 2D function to VTK StructuredGrid format.

    Parameters:
        filename: Output filename (will add .vtk extension if missing)
        func: 2D parsed function
        x_range, y_range: Sampling box
        n_x, n_y: Number of sample points
        time: Time value passed to the function
        field_name: Base name for the fields in VTK

    Returns:
        Path of the written file
    """
    # Ensure .vtk extension
    path = Path(filename)
    if path.suffix != '.vtk':
        path = path.with_suffix('.vtk')

    X, Y, V = sample_function_2d(func, x_range, y_range, n_x, n_y, time=time)
    n_components = V.shape[0]

    with open(path, 'w') as f:
        # Header
        f.write("# vtk DataFile Version 3.0\n")
        f.write(f"{field_name} at t={time}\n")
        f.write("ASCII\n")
        f.write("DATASET STRUCTURED_GRID\n")
        f.write(f"DIMENSIONS {n_x} {n_y} 1\n")

        # Points (x fastest)
        n_points = n_x * n_y
        f.write(f"POINTS {n_points} double\n")
        for j in range(n_y):
            for i in range(n_x):
                f.write(f"{X[i, j]} {Y[i, j]} 0.0\n")

        f.write(f"\nPOINT_DATA {n_points}\n")

        for c in range(n_components):
            name = field_name if n_components == 1 else f"{field_name}_{c}"
            _write_scalars(f, name, V[c], n_x, n_y)

        if n_components == 2:
            f.write(f"\nVECTORS {field_name} double\n")
            for j in range(n_y):
                for i in range(n_x):
                    f.write(f"{V[0, i, j]} {V[1, i, j]} 0.0\n")

    logger.info("Exported VTK file: %s", path)
    return path


def _write_scalars(f, name: str, values: np.ndarray, n_x: int, n_y: int):
    f.write(f"\nSCALARS {name} double 1\n")
    f.write("LOOKUP_TABLE default\n")
    for j in range(n_y):
        for i in range(n_x):
            f.write(f"{values[i, j]}\n")
