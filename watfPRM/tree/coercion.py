"""
Typed views of raw parameter text.

Every converter takes the raw text plus the (path, key) it came from, so
that a failure can name exactly which parameter was malformed. Nothing
here falls back to a default: unparseable text always raises
CoercionError.

Accepted forms:
    integer:   [+-]digits                      "5", "-12"
    real:      decimal or scientific notation   "0.5", "1e21", "-2.5E-3", ".5"
    boolean:   true/false, yes/no, on/off       (case-insensitive)
    list:      comma-separated items            "a, b, c"   ("" is an empty list)
    map:       comma-separated key: value pairs "left: function, right: function"
    selection: one of a fixed set of choices
"""

import re
from typing import Callable, Dict, List, Sequence, Tuple

from ..errors import CoercionError

_INTEGER_RE = re.compile(r"[+-]?\d+")
_REAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

TRUE_TOKENS = frozenset({"true", "yes", "on"})
FALSE_TOKENS = frozenset({"false", "no", "off"})


def to_string(text: str, path: Sequence[str] = (), key: str = None) -> str:
    return text


def to_int(text: str, path: Sequence[str] = (), key: str = None) -> int:
    """Parse an integer; reals such as '1e3' or '2.0' are rejected."""
    stripped = text.strip()
    if not _INTEGER_RE.fullmatch(stripped):
        raise CoercionError("integer", text, path, key)
    return int(stripped)


def to_real(text: str, path: Sequence[str] = (), key: str = None) -> float:
    """Parse a real number, including scientific notation."""
    stripped = text.strip()
    if not _REAL_RE.fullmatch(stripped):
        raise CoercionError("real", text, path, key)
    return float(stripped)


def to_bool(text: str, path: Sequence[str] = (), key: str = None) -> bool:
    """Parse a boolean from the fixed token set; numbers are not booleans."""
    token = text.strip().lower()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    raise CoercionError("boolean", text, path, key,
                        detail="one of true/false, yes/no, on/off")


CONVERTERS: Dict[str, Callable] = {
    "string": to_string,
    "integer": to_int,
    "real": to_real,
    "boolean": to_bool,
}

# Python type objects are accepted wherever a converter name is
_TYPE_ALIASES = {str: "string", int: "integer", float: "real", bool: "boolean"}


def resolve_converter(item_type) -> Callable:
    """Look up a converter by name ("real") or by Python type (float)."""
    name = _TYPE_ALIASES.get(item_type, item_type)
    try:
        return CONVERTERS[name]
    except (KeyError, TypeError):
        raise ValueError(f"Unknown value type: {item_type!r}") from None


def split_list(text: str) -> List[str]:
    """Split on commas and trim; an empty (or blank) value is an empty list."""
    if not text.strip():
        return []
    return [item.strip() for item in text.split(",")]


def to_list(text: str, item_type="string", path: Sequence[str] = (),
            key: str = None) -> list:
    """
    Parse a comma-separated list, converting every item.

    Empty items (as in 'a,,b' or 'a, b,') are kept as '' in a list of
    strings and rejected for every other item type.
    """
    convert = resolve_converter(item_type)
    items = split_list(text)
    result = []
    for item in items:
        if not item and convert is not to_string:
            raise CoercionError(f"list of {_type_name(item_type)}", text, path, key,
                                detail="empty list item")
        try:
            result.append(convert(item))
        except CoercionError as exc:
            raise CoercionError(f"list of {_type_name(item_type)}", text, path, key,
                                detail=f"bad item {item!r}") from exc
    return result


def to_map(text: str, value_type="string", path: Sequence[str] = (),
           key: str = None) -> Dict[str, object]:
    """
    Parse 'key: value, key: value' pairs into an ordered dict.

    Keys are trimmed strings; values are converted with value_type. A key
    given twice keeps the last value, as with 'set'.
    """
    convert = resolve_converter(value_type)
    expected = f"map of {_type_name(value_type)}"
    result: Dict[str, object] = {}
    for item in split_list(text):
        name, sep, value = item.partition(":")
        name = name.strip()
        if not sep or not name:
            raise CoercionError(expected, text, path, key,
                                detail=f"bad entry {item!r}, expected 'key: value'")
        try:
            result[name] = convert(value.strip())
        except CoercionError as exc:
            raise CoercionError(expected, text, path, key,
                                detail=f"bad value for {name!r}") from exc
    return result


def to_selection(text: str, choices: Sequence[str], path: Sequence[str] = (),
                 key: str = None) -> str:
    """Return the value if it is one of choices (exact match after trimming)."""
    value = text.strip()
    if value not in choices:
        raise CoercionError("one of " + "|".join(choices), text, path, key)
    return value


def _type_name(item_type) -> str:
    return _TYPE_ALIASES.get(item_type, item_type)


def split_pairs(text: str, separator: str = "=") -> List[Tuple[str, str]]:
    """Split 'a=1, b=2' into [('a', '1'), ('b', '2')] without converting."""
    pairs = []
    for item in split_list(text):
        name, sep, value = item.partition(separator)
        if not sep:
            raise ValueError(f"Missing {separator!r} in {item!r}")
        pairs.append((name.strip(), value.strip()))
    return pairs
