"""
Post-processing of parsed functions: grid sampling and VTK export.
"""

from .sampling import sample_function_2d, evaluate_at_points, component_range
from .vtk import export_function_vtk_2d
