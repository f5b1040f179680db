"""
Parameter file reader.

Parses the section-based parameter format used by geodynamics codes:

    # comment
    set Dimension = 2

    subsection Geometry model
      set Model name = box
      subsection Box
        set X extent = 2e3     # trailing comments are stripped
      end
    end

    subsection Boundary velocity model
      subsection Function
        set Function expression = if (x==0e3 && y>0.5e3, 1, \
                                      -1); 0
      end
    end

Rules:
- A physical line ending in '\\' continues on the next line. Continuations
  are joined (with a single space) before comments are stripped.
- '#' starts a comment; '\\#' is a literal '#'.
- 'set <key> = <value>': the value is everything after the first '=',
  trimmed. Setting an existing key again overwrites it (last write wins).
- 'subsection <name>' ... 'end' nest to any depth. Opening a section that
  already exists in the current scope re-enters it.
- 'include <file>' reads another parameter file into the current scope.

Usage:
    from watfPRM.io.reader import parse, parse_file

    tree = parse_file("examples/prm/inflow_box.prm")
    tree.get_real("Geometry model/Box", "X extent")
"""

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from ..errors import ParseError, StructuralError, format_path
from ..tree.config_tree import ConfigTree
from ..tree.node import normalize_name

logger = logging.getLogger(__name__)


def logical_lines(text: str) -> Iterator[Tuple[int, str]]:
    """
    Split text into logical lines.

    Yields:
        (line_number, content) where line_number is the 1-based number of
        the first physical line and content has continuations joined,
        comments removed and surrounding whitespace trimmed. Blank logical
        lines are skipped.
    """
    pending: List[str] = []
    start = 0
    for number, physical in enumerate(text.splitlines(), start=1):
        if not pending:
            start = number
        stripped = physical.rstrip()
        if stripped.endswith("\\"):
            pending.append(stripped[:-1].strip() if pending else stripped[:-1].rstrip())
            continue
        pending.append(stripped.strip() if pending else stripped)
        content = strip_comment(" ".join(part for part in pending if part)).strip()
        pending = []
        if content:
            yield start, content

    # Trailing continuation at end of input
    if pending:
        content = strip_comment(" ".join(part for part in pending if part)).strip()
        if content:
            yield start, content


def strip_comment(line: str) -> str:
    """Remove everything from the first unescaped '#' and unescape '\\#'."""
    out = []
    i = 0
    while i < len(line):
        char = line[i]
        if char == "\\" and i + 1 < len(line) and line[i + 1] == "#":
            out.append("#")
            i += 2
            continue
        if char == "#":
            break
        out.append(char)
        i += 1
    return "".join(out)


class _Parser:
    """Single-pass parser feeding statements into one ConfigTree."""

    def __init__(self, tree: ConfigTree):
        self.tree = tree
        # Open sections as (name, line, source)
        self.stack: List[Tuple[str, int, str]] = []
        self._include_chain: List[Path] = []

    @property
    def scope(self) -> Tuple[str, ...]:
        return tuple(name for name, _, _ in self.stack)

    def feed(self, text: str, source: str, base_dir: Optional[Path] = None):
        """Parse one file (or string); sections opened in it must close in it."""
        depth = len(self.stack)
        for line, content in logical_lines(text):
            self._statement(content, line, source, base_dir, depth)

        if len(self.stack) > depth:
            name, line, where = self.stack[-1]
            raise StructuralError(
                f"missing 'end' for 'subsection {name}' opened on line {line}",
                line=line, source=where, scope=self.scope)

    def _statement(self, content: str, line: int, source: str,
                   base_dir: Optional[Path], depth: int = 0):
        parts = content.split(None, 1)
        keyword = parts[0]
        rest = parts[1].strip() if len(parts) > 1 else ""

        if keyword == "set":
            self._set(rest, line, source)
        elif keyword == "subsection":
            self._subsection(rest, line, source)
        elif keyword == "end":
            if rest:
                raise ParseError(f"unexpected text after 'end': {rest!r}",
                                 line=line, source=source, scope=self.scope)
            if len(self.stack) <= depth:
                # Sections opened by an including file cannot be closed here
                raise StructuralError("'end' without matching 'subsection'",
                                      line=line, source=source, scope=self.scope)
            self.stack.pop()
        elif keyword == "include":
            self._include(rest, line, source, base_dir)
        else:
            raise ParseError(f"unrecognized statement {content!r}",
                             line=line, source=source, scope=self.scope)

    def _set(self, rest: str, line: int, source: str):
        key, sep, value = rest.partition("=")
        key = normalize_name(key)
        if not sep:
            raise ParseError(f"missing '=' in 'set {rest}'",
                             line=line, source=source, scope=self.scope)
        if not key:
            raise ParseError("missing parameter name in 'set' statement",
                             line=line, source=source, scope=self.scope)
        try:
            self.tree.set(self.scope, key, value.strip(), line=line, source=source)
        except StructuralError as exc:
            raise StructuralError(exc.message, line=line, source=source,
                                  scope=self.scope) from None

    def _subsection(self, rest: str, line: int, source: str):
        name = normalize_name(rest)
        if not name:
            raise ParseError("missing section name after 'subsection'",
                             line=line, source=source, scope=self.scope)
        path = self.scope + (name,)
        if self.tree.has_section(path):
            logger.debug("%s:%d: re-entering section %s", source, line, format_path(path))
        try:
            self.tree.ensure_section(path)
        except StructuralError as exc:
            raise StructuralError(exc.message, line=line, source=source,
                                  scope=self.scope) from None
        self.stack.append((name, line, source))

    def _include(self, rest: str, line: int, source: str, base_dir: Optional[Path]):
        if not rest:
            raise ParseError("missing file name after 'include'",
                             line=line, source=source, scope=self.scope)
        path = Path(rest)
        if not path.is_absolute():
            path = (base_dir or Path.cwd()) / path
        path = path.resolve()

        if path in self._include_chain:
            raise ParseError(f"recursive include of {path}",
                             line=line, source=source, scope=self.scope)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ParseError(f"cannot include {rest!r}: {exc.strerror or exc}",
                             line=line, source=source, scope=self.scope) from exc

        logger.debug("%s:%d: including %s", source, line, path)
        self.feed_file_text(text, path)

    def feed_file_text(self, text: str, path: Path):
        """Parse the contents of a file, tracking it for include-cycle detection."""
        self._include_chain.append(path)
        try:
            self.feed(text, str(path), path.parent)
        finally:
            self._include_chain.pop()


def parse(text: str, source: str = "<string>",
          base_dir: Optional[Union[str, Path]] = None) -> ConfigTree:
    """
    Parse parameter-file text into a ConfigTree.

    Parameters:
        text: Parameter file contents
        source: Name used in error messages and recorded on every leaf
        base_dir: Directory that relative 'include' paths resolve against
                  (defaults to the current working directory)

    Returns:
        ConfigTree

    Raises:
        StructuralError: unmatched 'subsection'/'end', or section/parameter name clash
        ParseError: any other malformed statement
    """
    tree = ConfigTree(source=source)
    _Parser(tree).feed(text, source, Path(base_dir) if base_dir is not None else None)
    return tree


def parse_file(filename: Union[str, Path]) -> ConfigTree:
    """
    Read and parse a UTF-8 parameter file.

    Relative 'include' statements are resolved against the file's directory.
    """
    path = Path(filename)
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()

    tree = ConfigTree(source=str(path))
    _Parser(tree).feed_file_text(text, path.resolve())

    logger.info("Read %d parameters in %d sections from %s",
                tree.n_parameters, tree.n_sections, path)
    return tree
