"""Call-site classification helpers shared by every detector.

These work on the tree-sitter PHP grammar:

    curl_exec($ch)                    function_call_expression
    $client->get($url)                member_call_expression
    $client?->get($url)               nullsafe_member_call_expression
    HttpClient::create()              scoped_call_expression

Nothing here tries to resolve types. A receiver is only ever described by
its syntactic shape.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

import tree_sitter as ts

from timeout_guard.parsing import node_line, node_text

HTTP_VERBS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"})

_METHOD_CALL_TYPES = {"member_call_expression", "nullsafe_member_call_expression"}
_NAME_TYPES = {"name", "qualified_name"}
_PLAIN_STRING_PARTS = {"string_content", "string_value", "escape_sequence"}
_DOUBLE_QUOTED_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "\\": "\\",
    "$": "$",
    '"': '"',
}
_DOUBLE_QUOTED_ESCAPE_RE = re.compile(
    r"\\(u\{[0-9A-Fa-f]+\}|x[0-9A-Fa-f]{1,2}|[0-7]{1,3}|.)",
    re.DOTALL,
)


class CallKind(str, Enum):
    FUNCTION = "function"
    METHOD = "method"
    STATIC = "static"


@dataclass(frozen=True)
class Argument:
    value: ts.Node
    name: str | None = None
    unpacked: bool = False

    @property
    def positional(self) -> bool:
        return self.name is None and not self.unpacked


@dataclass(frozen=True)
class CallSite:
    node: ts.Node
    kind: CallKind
    name: str | None
    receiver: ts.Node | None
    arguments: tuple[Argument, ...]

    @property
    def line(self) -> int:
        return node_line(self.node)


def as_call_site(node: ts.Node) -> CallSite | None:
    if node.type == "function_call_expression":
        return CallSite(
            node=node,
            kind=CallKind.FUNCTION,
            name=_identifier(node.child_by_field_name("function"), allow_qualified=True),
            receiver=None,
            arguments=_arguments(node),
        )

    if node.type in _METHOD_CALL_TYPES:
        return CallSite(
            node=node,
            kind=CallKind.METHOD,
            name=_identifier(node.child_by_field_name("name")),
            receiver=node.child_by_field_name("object"),
            arguments=_arguments(node),
        )

    if node.type == "scoped_call_expression":
        return CallSite(
            node=node,
            kind=CallKind.STATIC,
            name=_identifier(node.child_by_field_name("name")),
            receiver=node.child_by_field_name("scope"),
            arguments=_arguments(node),
        )

    return None


def is_function_call(call: CallSite, names: set[str] | frozenset[str]) -> bool:
    return call.kind is CallKind.FUNCTION and call.name in names


def is_method_call(call: CallSite, names: set[str] | frozenset[str]) -> bool:
    return call.kind is CallKind.METHOD and call.name in names


def variable_name(node: ts.Node | None) -> str | None:
    """Return ``client`` for a bare ``$client`` and None for any other shape."""
    if node is None or node.type != "variable_name":
        return None
    for child in node.named_children:
        if child.type == "name":
            return node_text(child)
    return None


def static_call_class_name(node: ts.Node | None) -> str | None:
    """Return the class name of ``Foo\\Bar::method()`` when written literally."""
    if node is None or node.type != "scoped_call_expression":
        return None
    return _identifier(node.child_by_field_name("scope"), allow_qualified=True)


def string_literal_value(node: ts.Node | None) -> str | None:
    if node is None:
        return None

    if node.type == "string":
        text = node_text(node)
        if text[:1] in {"b", "B"}:
            text = text[1:]
        if len(text) >= 2 and text[0] == text[-1] == "'":
            return text[1:-1].replace("\\\\", "\\").replace("\\'", "'")
        return None

    if node.type == "encapsed_string":
        if any(child.type not in _PLAIN_STRING_PARTS for child in node.named_children):
            return None
        text = node_text(node)
        if text[:1] in {"b", "B"}:
            text = text[1:]
        if len(text) >= 2 and text[0] == text[-1] == '"':
            return _DOUBLE_QUOTED_ESCAPE_RE.sub(_unescape_double_quoted, text[1:-1])
        return None

    return None


def verb_argument(call: CallSite) -> ts.Node | None:
    """Return the node passed as the ``$method`` parameter of ``request()``.

    Named arguments cannot precede positional ones, so a named first
    argument means the verb, if any, is the one named ``method``.
    """
    if not call.arguments:
        return None
    first = call.arguments[0]
    if first.positional:
        return first.value
    for argument in call.arguments:
        if argument.name == "method" and not argument.unpacked:
            return argument.value
    return None


def has_http_verb_argument(call: CallSite) -> bool:
    value = string_literal_value(verb_argument(call))
    return value is not None and value.upper() in HTTP_VERBS


def option_map_keys(call: CallSite) -> Iterator[str]:
    """Yield the literal string keys of every array literal passed to ``call``."""
    for argument in call.arguments:
        if argument.unpacked or argument.value.type != "array_creation_expression":
            continue
        for element in argument.value.named_children:
            if element.type != "array_element_initializer":
                continue
            key = string_literal_value(_array_element_key(element))
            if key is not None:
                yield key


def has_option(call: CallSite, key: str) -> bool:
    return any(found == key for found in option_map_keys(call))


def _identifier(node: ts.Node | None, *, allow_qualified: bool = False) -> str | None:
    if node is None:
        return None
    if node.type == "name" or (allow_qualified and node.type in _NAME_TYPES):
        return node_text(node).lstrip("\\")
    return None


def _arguments(call_node: ts.Node) -> tuple[Argument, ...]:
    args_node = call_node.child_by_field_name("arguments")
    if args_node is None:
        return ()

    arguments: list[Argument] = []
    for child in args_node.named_children:
        if child.type != "argument":
            continue
        parts = [part for part in child.named_children if part.type != "reference_modifier"]
        if not parts:
            continue
        value = parts[-1]
        name_node = child.child_by_field_name("name")
        arguments.append(
            Argument(
                value=value,
                name=node_text(name_node) if name_node is not None else None,
                unpacked=value.type == "variadic_unpacking",
            )
        )
    return tuple(arguments)


def _array_element_key(element: ts.Node) -> ts.Node | None:
    key: ts.Node | None = None
    for child in element.children:
        if child.type == "=>":
            return key
        if child.is_named:
            key = child
    return None


def _unescape_double_quoted(match: re.Match[str]) -> str:
    escape = match.group(1)
    if escape.startswith("u{"):
        codepoint = int(escape[2:-1], 16)
        return chr(codepoint) if codepoint <= 0x10FFFF else match.group(0)
    if escape[0] == "x" and len(escape) > 1:
        return chr(int(escape[1:], 16))
    if escape[0] in "01234567":
        # PHP keeps only the low byte of octal escapes above \377.
        return chr(int(escape, 8) & 0xFF)
    return _DOUBLE_QUOTED_ESCAPES.get(escape, match.group(0))
