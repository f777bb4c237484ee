"""
Marker locator for tsxlint.

Finds template literals flagged by a leading marker comment, e.g.

    const view = /*tsx*/ `<App title="x"/>`;

and reports the inner span of each literal (backticks excluded) as a Region.
Parsing is delegated to tree-sitter grammars from tree-sitter-language-pack.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from tree_sitter import Node, Parser, Tree
from tree_sitter_language_pack import get_parser

from tsxlint.errors import ParseError
from tsxlint.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MARKER = "tsx"
DEFAULT_NODE_TYPES = ("template_string",)

_SUFFIX_LANGUAGES = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
}


@dataclass(frozen=True)
class Region:
    """Half-open character span [start, end) of one marked literal's content."""

    index: int
    start: int
    end: int

    def slice(self, text: str) -> str:
        return text[self.start : self.end]

    @property
    def length(self) -> int:
        return self.end - self.start


def language_for_path(path: str | Path, default: str = "typescript") -> str:
    """Pick a tree-sitter grammar name from a file suffix."""
    return _SUFFIX_LANGUAGES.get(Path(path).suffix.lower(), default)


@lru_cache(maxsize=8)
def _get_parser(language: str) -> Parser:
    return get_parser(language)


def _walk(root: Node) -> Iterator[Node]:
    """Pre-order walk in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _first_error(root: Node) -> Node | None:
    for node in _walk(root):
        if node.type == "ERROR" or node.is_missing:
            return node
    return None


def parse_source(text: str, language: str = "typescript") -> Tree:
    """Parse source text into a syntax tree.

    Args:
        text: Source code.
        language: tree-sitter grammar name (typescript, tsx, javascript).

    Returns:
        Parsed tree.

    Raises:
        ParseError: Unknown grammar, or the source contains syntax errors.
    """
    try:
        parser = _get_parser(language)
    except (LookupError, ValueError) as e:
        raise ParseError(f"Unsupported language: {language}", language=language) from e
    except (OSError, RuntimeError) as e:
        # Grammar could not be loaded, e.g. a pack build that fetches it at runtime
        raise ParseError(
            f"Cannot load grammar for {language}: {e}", language=language
        ) from e

    tree = parser.parse(text.encode("utf-8"))

    if tree.root_node.has_error:
        bad = _first_error(tree.root_node) or tree.root_node
        line, column = bad.start_point[0] + 1, bad.start_point[1] + 1
        kind = f"missing {bad.type}" if bad.is_missing else "unexpected token"
        raise ParseError(
            f"Syntax error ({kind}) at line {line}, column {column}",
            line=line,
            column=column,
            language=language,
        )

    return tree


def _comment_body(raw: str) -> str:
    if raw.startswith("/*"):
        return raw[2:-2] if raw.endswith("*/") else raw[2:]
    if raw.startswith("//"):
        return raw[2:]
    return raw


class _CommentIndex:
    """Comment spans of a tree, for looking up the comments leading a node.

    tree-sitter attaches comments at whatever tree level they occur, so
    leading comments are found by position: the run of comments separated
    from the node (and from each other) by whitespace only.
    """

    def __init__(self, root: Node, source: bytes):
        self._source = source
        self._spans = [
            (node.start_byte, node.end_byte) for node in _walk(root) if node.type == "comment"
        ]
        self._ends = [end for _, end in self._spans]

    def leading(self, node: Node) -> list[str]:
        bodies = []
        cursor = node.start_byte
        i = bisect_right(self._ends, cursor) - 1
        while i >= 0:
            start, end = self._spans[i]
            if self._source[end:cursor].strip():
                break
            bodies.append(_comment_body(self._source[start:end].decode("utf-8")))
            cursor = start
            i -= 1
        return bodies


class _CharOffsets:
    """Converts ascending UTF-8 byte offsets to str offsets incrementally."""

    def __init__(self, data: bytes):
        self._data = data
        self._byte = 0
        self._char = 0

    def __call__(self, byte_offset: int) -> int:
        if byte_offset < self._byte:
            self._byte = self._char = 0
        self._char += len(self._data[self._byte : byte_offset].decode("utf-8"))
        self._byte = byte_offset
        return self._char


def locate(
    text: str,
    tree: Tree,
    *,
    marker: str = DEFAULT_MARKER,
    node_types: Iterable[str] = DEFAULT_NODE_TYPES,
) -> list[Region]:
    """Find marked template literals.

    A literal is selected when one of its immediately preceding comments
    contains ``marker``. Literals nested inside a selected literal are not
    considered, so regions never overlap.

    Args:
        text: Source text the tree was parsed from.
        tree: Syntax tree from parse_source().
        marker: Token searched for in leading comments.
        node_types: Node types eligible for selection.

    Returns:
        Regions in ascending document order, indexed from 0.
    """
    wanted = frozenset(node_types)
    source = text.encode("utf-8")
    to_char = _CharOffsets(source)
    comments = _CommentIndex(tree.root_node, source)
    regions: list[Region] = []

    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if (
            node.type in wanted
            and node.end_byte - node.start_byte >= 2
            and any(marker in body for body in comments.leading(node))
        ):
            # Drop the surrounding backticks
            start = to_char(node.start_byte + 1)
            end = to_char(node.end_byte - 1)
            regions.append(Region(index=len(regions), start=start, end=end))
            continue
        stack.extend(reversed(node.children))

    logger.debug("Traversal done", regions=len(regions), marker=marker)
    return regions
