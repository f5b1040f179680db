"""
Reading and writing parameter files.
"""

from .reader import parse, parse_file, logical_lines
from .writer import format_tree, write_file, format_json, write_json
