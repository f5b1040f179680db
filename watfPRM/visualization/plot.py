"""
Plotting of parsed functions.

Example:
    from watfPRM.io import parse_file
    from watfPRM.expression import ParsedFunction
    from watfPRM.visualization import plot_function_2d

    tree = parse_file("examples/prm/inflow_box.prm")
    f = ParsedFunction.from_section(tree, "Boundary velocity model/Function")
    plot_function_2d(f, (0, 2e3), (0, 1e3), component=0,
                     save_path="inflow_vx.png", show=False)
"""

from typing import Optional, Tuple

from ..expression.parsed_function import ParsedFunction
from ..postprocess.sampling import sample_function_2d

__all__ = ['plot_function_2d']


def plot_function_2d(
    func: ParsedFunction,
    x_range: Tuple[float, float],
    y_range: Tuple[float, float],
    component: int = 0,
    n_points: int = 100,
    time: float = 0.0,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    show: bool = True
):
    """
    Plot one component of a 2D function as a filled contour map.

    Parameters:
        func: 2D parsed function
        x_range, y_range: Plotting box
        component: Component index to plot
        n_points: Sample points per direction
        time: Time value passed to the function
        title: Axes title (defaults to the expression component text)
        save_path: If provided, save figure to this path
        show: Whether to call plt.show()

    Returns:
        matplotlib Figure object
    """
    import matplotlib.pyplot as plt

    if not 0 <= component < func.n_components:
        raise ValueError(
            f"Component {component} out of range for {func.n_components}-component function")

    X, Y, V = sample_function_2d(func, x_range, y_range, n_points, n_points, time=time)

    fig, ax = plt.subplots(figsize=(6, 5))
    contour = ax.contourf(X, Y, V[component], levels=20, cmap='viridis')
    plt.colorbar(contour, ax=ax, shrink=0.8)
    ax.set_xlabel(func.function.variable_names[0])
    ax.set_ylabel(func.function.variable_names[1])
    ax.set_aspect('equal')

    if title is None:
        parts = func.function.expression.split(";")
        title = parts[component].strip() if len(parts) == func.n_components else \
            f"component {component}"
    ax.set_title(title, fontsize=9)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    if show:
        plt.show()

    return fig
