#!/usr/bin/env python3
"""
Example: inspect a parameter file and its function expressions.

This example demonstrates the complete pipeline:
1. Parse a parameter file (with includes) into a ConfigTree
2. Look up typed values
3. Compile every 'Function expression' section
4. Evaluate the functions at a point and optionally export them to VTK

Usage:
    ./examples/src/inspect_prm.py examples/prm/inflow_box.prm
    ./examples/src/inspect_prm.py examples/prm/sinking_block.prm --point 250e3 400e3 --vtk
"""

import logging
import sys
from pathlib import Path

# Add project root to path (two levels up from examples/src/)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from watfPRM.errors import PRMError
from watfPRM.io.reader import parse_file
from watfPRM.expression.parsed_function import ParsedFunction, iter_function_sections
from watfPRM.postprocess.vtk import export_function_vtk_2d

log = logging.getLogger("inspect_prm")


def run(filename: str,
        point=None,
        time: float = 0.0,
        export_vtk: bool = False,
        verbose: bool = True):
    """
    Inspect a parameter file.

    Parameters:
        filename: Parameter file to read
        point: Evaluation point (defaults to the box center if the file has one)
        time: Evaluation time
        export_vtk: Write each 2D function to '<section>.vtk'
        verbose: Print the parameter listing

    Returns:
        Dictionary with the tree and {section path: values at point}
    """
    tree = parse_file(filename)
    dim = tree.get_int((), "Dimension", default=2)

    box = ("Geometry model", "Box")
    extents = [tree.get_real(box, f"{axis} extent", default=1.0) for axis in "XYZ"[:dim]]
    if point is None:
        point = [0.5 * e for e in extents]

    if verbose:
        print("=" * 60)
        print(f"Parameter file: {filename}")
        print("=" * 60)
        for path, leaf in tree.walk():
            print(f"{' / '.join(path + (leaf.key,))} = {leaf.raw}")
        print()

    values = {}
    for path in iter_function_sections(tree):
        func = ParsedFunction.from_section(tree, path, dim=dim)
        values[path] = func.vector_value(point, time)
        if verbose:
            print(f"{' / '.join(path)}: f{tuple(point)} = {values[path]}")

        if export_vtk and dim == 2:
            name = "_".join(path).replace(" ", "_").lower()
            export_function_vtk_2d(name, func, (0.0, extents[0]), (0.0, extents[1]),
                                   time=time, field_name=path[0].replace(" ", "_"))

    return {"tree": tree, "values": values}


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Inspect a parameter file")
    parser.add_argument("filename", help="Parameter file (.prm)")
    parser.add_argument("--point", "-p", type=float, nargs="+", default=None,
                        help="Evaluation point (default: box center)")
    parser.add_argument("--time", "-t", type=float, default=0.0,
                        help="Evaluation time (default: 0)")
    parser.add_argument("--vtk", action="store_true",
                        help="Export 2D functions to VTK")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only report errors")

    args = parser.parse_args()
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO,
                        format="%(levelname)s:%(name)s:%(message)s")

    try:
        run(args.filename, point=args.point, time=args.time,
            export_vtk=args.vtk, verbose=not args.quiet)
    except (OSError, PRMError) as exc:
        log.error("%s", exc)
        sys.exit(1)
