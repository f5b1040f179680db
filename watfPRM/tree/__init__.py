"""
Configuration tree module.

Provides:
- ConfigTree: Parsed parameter file with typed lookups
- Section, Leaf: Tree nodes
- Typed coercion of raw parameter text
"""

from .node import Leaf, Section, normalize_name
from .config_tree import ConfigTree, SectionPath, normalize_path
from .coercion import (
    to_int,
    to_real,
    to_bool,
    to_list,
    to_map,
    to_selection,
    split_list,
)
