"""
Parameter file writer.

Serializes a ConfigTree back into the 'subsection'/'set'/'end' format,
so that parse(format_tree(tree)) reproduces the same values at the same
paths. Children are written in insertion order, '=' signs are aligned
within each section and '#' in names and values is escaped as '\\#'.

A JSON view of the raw values is provided for tools that prefer it.
"""

import json
import logging
from pathlib import Path
from typing import List, Union

from ..tree.config_tree import ConfigTree
from ..tree.node import Leaf, Section

logger = logging.getLogger(__name__)


def escape_value(value: str) -> str:
    """Escape characters that the reader would otherwise treat as comments."""
    return value.replace("#", "\\#")


def _terminate(line: str) -> str:
    # A trailing backslash would join the next line; an empty comment stops it
    return line + " #" if line.endswith("\\") else line


def format_tree(tree: ConfigTree, indent: int = 2) -> str:
    """
    Render a ConfigTree as parameter-file text.

    Parameters:
        tree: Tree to render
        indent: Spaces per nesting level

    Returns:
        Text ending in a newline (empty string for an empty tree)
    """
    lines: List[str] = []
    _format_section(tree.root, 0, indent, lines)
    return "\n".join(lines) + "\n" if lines else ""


def _format_section(section: Section, depth: int, indent: int, lines: List[str]):
    pad = " " * (indent * depth)
    width = max((len(escape_value(leaf.key)) for leaf in section.leaves()), default=0)
    previous_was_section = False

    for child in section.children.values():
        if isinstance(child, Leaf):
            if previous_was_section:
                lines.append("")
            value = escape_value(child.raw)
            line = f"{pad}set {escape_value(child.key).ljust(width)} ="
            lines.append(_terminate(f"{line} {value}" if value else line))
            previous_was_section = False
        else:
            if lines and lines[-1] != "" and depth == 0:
                lines.append("")
            lines.append(_terminate(f"{pad}subsection {escape_value(child.name)}"))
            _format_section(child, depth + 1, indent, lines)
            lines.append(f"{pad}end")
            previous_was_section = True


def write_file(tree: ConfigTree, filename: Union[str, Path], indent: int = 2) -> Path:
    """Write a ConfigTree as a UTF-8 parameter file."""
    path = Path(filename)
    with open(path, "w", encoding="utf-8") as f:
        f.write(format_tree(tree, indent=indent))
    logger.info("Wrote parameter file: %s", path)
    return path


def format_json(tree: ConfigTree) -> str:
    """Nested JSON of raw string values."""
    return json.dumps(tree.to_dict(), indent=2)


def write_json(tree: ConfigTree, filename: Union[str, Path]) -> Path:
    path = Path(filename)
    with open(path, "w", encoding="utf-8") as f:
        f.write(format_json(tree))
        f.write("\n")
    logger.info("Wrote JSON parameters: %s", path)
    return path
