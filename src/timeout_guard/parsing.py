"""PHP source parsing on top of tree-sitter.

The rest of the package only sees ``ParseResult`` and plain
``tree_sitter.Node`` objects. Parse failures are returned, never raised,
so callers decide explicitly whether to skip a unit.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import tree_sitter as ts
import tree_sitter_php as ts_php

PHP_LANGUAGE = ts.Language(ts_php.language_php())


@dataclass(frozen=True)
class ParseResult:
    tree: ts.Tree | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.tree is not None and self.error is None


def parse_source(source: str | bytes) -> ParseResult:
    """Parse PHP source text.

    tree-sitter recovers from syntax errors instead of failing, so a tree
    holding ``ERROR`` or ``MISSING`` nodes is reported as a failure with the
    line of the first broken node.
    """
    data = source.encode("utf-8") if isinstance(source, str) else source
    parser = ts.Parser(language=PHP_LANGUAGE)
    tree = parser.parse(data)

    root = tree.root_node
    if root.has_error:
        broken = _first_error_node(root)
        line = broken.start_point.row + 1 if broken is not None else 1
        return ParseResult(error=f"syntax error near line {line}")

    return ParseResult(tree=tree)


def walk(node: ts.Node) -> Iterator[ts.Node]:
    """Yield ``node`` and all of its descendants in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def node_text(node: ts.Node) -> str:
    raw = node.text
    if raw is None:
        return ""
    return raw.decode("utf-8", errors="replace")


def node_line(node: ts.Node) -> int:
    return node.start_point.row + 1


def _first_error_node(root: ts.Node) -> ts.Node | None:
    for node in walk(root):
        if node.is_error or node.is_missing:
            return node
    return None
