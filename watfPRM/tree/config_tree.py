"""
ConfigTree: the parsed contents of a parameter file.

The tree is a root Section plus a typed lookup API. A lookup names the
section path and the parameter key:

    tree.get_real("Geometry model/Box", "X extent")
    tree.get_real(["Geometry model", "Box"], "X extent")   # same thing
    tree.get_int((), "Dimension")                          # root parameter

Section paths are either a sequence of names or one '/'-separated string.
All getters accept a default which is returned (as given, without
conversion) when the parameter is absent; without a default an absent
parameter raises MissingKeyError. A parameter that is present but
malformed always raises CoercionError, even if a default was given.

The tree is built by watfPRM.io.reader and is not modified afterwards by
this package, so a parsed tree can be shared between threads.
"""

import logging
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple, Union

from ..errors import MissingKeyError, StructuralError, format_path
from .node import Leaf, Section, normalize_name
from . import coercion

logger = logging.getLogger(__name__)

SectionPath = Union[str, Sequence[str]]

_NO_DEFAULT = object()


def normalize_path(path: Optional[SectionPath]) -> Tuple[str, ...]:
    """Convert a section path to a tuple of normalized names."""
    if path is None:
        return ()
    if isinstance(path, str):
        parts = path.split("/")
    else:
        parts = list(path)
    names = tuple(normalize_name(part) for part in parts)
    return tuple(name for name in names if name)


class ConfigTree:
    """
    A hierarchical parameter store with lazy typed lookups.

    Attributes:
        root: Root section (holds global parameters and top-level sections)
        source: Name of the file the tree was read from, if any
    """

    def __init__(self, source: Optional[str] = None):
        self.root = Section("")
        self.source = source

    def __repr__(self) -> str:
        return f"ConfigTree(source={self.source!r}, n_parameters={self.n_parameters})"

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def find_section(self, path: SectionPath) -> Optional[Section]:
        """Return the section at path, or None if it does not exist."""
        node = self.root
        for name in normalize_path(path):
            child = node.children.get(name)
            if not isinstance(child, Section):
                return None
            node = child
        return node

    def section(self, path: SectionPath) -> Section:
        """Return the section at path, raising MissingKeyError if absent."""
        node = self.find_section(path)
        if node is None:
            raise MissingKeyError(normalize_path(path))
        return node

    def has_section(self, path: SectionPath) -> bool:
        return self.find_section(path) is not None

    def ensure_section(self, path: SectionPath) -> Section:
        """
        Return the section at path, creating missing sections on the way.

        Raises:
            StructuralError: if a name on the path is already a parameter
        """
        names = normalize_path(path)
        node = self.root
        for depth, name in enumerate(names):
            child = node.children.get(name)
            if child is None:
                child = Section(name)
                node.children[name] = child
            elif isinstance(child, Leaf):
                raise StructuralError(
                    f"'{name}' is already a parameter, cannot open it as a subsection",
                    line=child.line, source=child.source, scope=names[:depth])
            node = child
        return node

    def set(self, path: SectionPath, key: str, value: str,
            line: Optional[int] = None, source: Optional[str] = None) -> Optional[Leaf]:
        """
        Store a raw value, overwriting any previous value of the same key.

        Returns:
            The Leaf that was replaced, or None if the key was new
        """
        names = normalize_path(path)
        section = self.ensure_section(names)
        key = normalize_name(key)
        previous = section.children.get(key)
        if isinstance(previous, Section):
            raise StructuralError(
                f"'{key}' is already a subsection, cannot set it as a parameter",
                line=line, source=source, scope=names)
        section.children[key] = Leaf(key, value, line, source)
        if previous is not None:
            logger.debug("%s: overwriting '%s' (%r -> %r)",
                         format_path(names), key, previous.raw, value)
        return previous

    def walk(self) -> Iterator[Tuple[Tuple[str, ...], Leaf]]:
        """Yield (section_path, leaf) for every parameter, depth first, in file order."""
        yield from _walk(self.root, ())

    def sections(self) -> Iterator[Tuple[str, ...]]:
        """Yield the path of every section (excluding the root), depth first."""
        yield from _walk_sections(self.root, ())

    @property
    def n_parameters(self) -> int:
        return sum(1 for _ in self.walk())

    @property
    def n_sections(self) -> int:
        return sum(1 for _ in self.sections())

    def to_dict(self) -> Dict[str, Any]:
        """Nested dict of raw string values; sections become dicts."""
        return _to_dict(self.root)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ConfigTree):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def has(self, path: SectionPath, key: str) -> bool:
        """True if the parameter exists."""
        section = self.find_section(path)
        return section is not None and isinstance(section.get(key), Leaf)

    def get_leaf(self, path: SectionPath, key: str) -> Leaf:
        """Return the Leaf for a parameter, raising MissingKeyError if absent."""
        names = normalize_path(path)
        section = self.find_section(names)
        leaf = section.get(key) if section is not None else None
        if not isinstance(leaf, Leaf):
            raise MissingKeyError(names, normalize_name(key))
        return leaf

    def get_string(self, path: SectionPath, key: str, default=_NO_DEFAULT) -> str:
        return self._lookup(path, key, default, coercion.to_string)

    def get_int(self, path: SectionPath, key: str, default=_NO_DEFAULT) -> int:
        return self._lookup(path, key, default, coercion.to_int)

    def get_real(self, path: SectionPath, key: str, default=_NO_DEFAULT) -> float:
        return self._lookup(path, key, default, coercion.to_real)

    def get_bool(self, path: SectionPath, key: str, default=_NO_DEFAULT) -> bool:
        return self._lookup(path, key, default, coercion.to_bool)

    def get_list(self, path: SectionPath, key: str, item_type="string",
                 default=_NO_DEFAULT) -> list:
        """
        Comma-separated list lookup.

        Parameters:
            path: Section path
            key: Parameter name
            item_type: "string", "integer", "real", "boolean" (or str/int/float/bool)
            default: Returned if the parameter is absent

        Empty items are kept as '' in a list of strings; for any other
        item_type they raise CoercionError.
        """
        def convert(text, names, name):
            return coercion.to_list(text, item_type, names, name)
        return self._lookup(path, key, default, convert)

    def get_map(self, path: SectionPath, key: str, value_type="string",
                default=_NO_DEFAULT) -> Dict[str, Any]:
        """Lookup of 'name: value, name: value' pairs."""
        def convert(text, names, name):
            return coercion.to_map(text, value_type, names, name)
        return self._lookup(path, key, default, convert)

    def get_selection(self, path: SectionPath, key: str, choices: Sequence[str],
                      default=_NO_DEFAULT) -> str:
        """Lookup of an enumerated string that must be one of choices."""
        def convert(text, names, name):
            return coercion.to_selection(text, choices, names, name)
        return self._lookup(path, key, default, convert)

    def _lookup(self, path, key, default, convert):
        names = normalize_path(path)
        try:
            leaf = self.get_leaf(names, key)
        except MissingKeyError:
            if default is _NO_DEFAULT:
                raise
            return default
        return convert(leaf.raw, names, leaf.key)


def _walk(section: Section, path: Tuple[str, ...]):
    for child in section.children.values():
        if isinstance(child, Leaf):
            yield path, child
        else:
            yield from _walk(child, path + (child.name,))


def _walk_sections(section: Section, path: Tuple[str, ...]):
    for child in section.subsections():
        child_path = path + (child.name,)
        yield child_path
        yield from _walk_sections(child, child_path)


def _to_dict(section: Section) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for name, child in section.children.items():
        if isinstance(child, Leaf):
            result[name] = child.raw
        else:
            result[name] = _to_dict(child)
    return result
