"""
Nodes of a configuration tree.

A parameter file is a tree of named sections. Interior nodes (Section)
own their children in insertion order; leaves (Leaf) hold one raw text
value exactly as it appeared after the '=' of a 'set' statement.

Typed interpretation of a leaf is not stored here; see
watfPRM.tree.coercion, which converts on every lookup.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Union


def normalize_name(name: str) -> str:
    """Collapse runs of whitespace so 'X   extent' and 'X extent' are one key."""
    return " ".join(name.split())


@dataclass
class Leaf:
    """
    A single parameter value.

    Attributes:
        key: Parameter name (normalized)
        raw: Raw text value (trimmed, comments removed)
        line: Line number of the most recent 'set' of this key
        source: File (or string label) the value was read from
    """
    key: str
    raw: str
    line: Optional[int] = None
    source: Optional[str] = None


class Section:
    """
    Interior node: an ordered mapping from child name to Section or Leaf.

    Each child name is unique within a section. Re-assigning an existing
    leaf keeps its position in the enumeration order.
    """

    def __init__(self, name: str):
        self.name = name
        self.children: Dict[str, Union['Section', Leaf]] = {}

    def __repr__(self) -> str:
        return f"Section({self.name!r}, n_children={len(self.children)})"

    def __contains__(self, name: str) -> bool:
        return normalize_name(name) in self.children

    def get(self, name: str) -> Optional[Union['Section', Leaf]]:
        return self.children.get(normalize_name(name))

    def subsections(self) -> Iterator['Section']:
        """Child sections in insertion order."""
        for child in self.children.values():
            if isinstance(child, Section):
                yield child

    def leaves(self) -> Iterator[Leaf]:
        """Child parameters in insertion order."""
        for child in self.children.values():
            if isinstance(child, Leaf):
                yield child

    @property
    def n_leaves(self) -> int:
        return sum(1 for _ in self.leaves())

    def is_empty(self) -> bool:
        return not self.children
