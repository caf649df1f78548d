"""Tree-sitter access and node helpers for Go sources."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from tree_sitter import Language, Node, Parser, Tree
from tree_sitter_go import language as get_go_language

if TYPE_CHECKING:
    from collections.abc import Iterator

_LANGUAGE: Language | None = None
_LANGUAGE_LOCK = threading.Lock()
_LOCAL = threading.local()

IDENTIFIER_TYPES = frozenset(
    {"identifier", "type_identifier", "field_identifier", "package_identifier"}
)

FUNCTION_TYPES = frozenset({"function_declaration", "method_declaration"})


def _get_language() -> Language:
    global _LANGUAGE
    if _LANGUAGE is None:
        with _LANGUAGE_LOCK:
            if _LANGUAGE is None:
                _LANGUAGE = Language(get_go_language())
    return _LANGUAGE


def _get_parser() -> Parser:
    """Return this thread's tree-sitter parser for Go.

    Parsers hold mutable state, so each worker thread gets its own.
    """
    parser: Parser | None = getattr(_LOCAL, "parser", None)
    if parser is None:
        parser = Parser(_get_language())
        _LOCAL.parser = parser
    return parser


def parse_source(source: bytes) -> Tree:
    return _get_parser().parse(source)


def first_syntax_error(node: Node) -> Node | None:
    """Return the first ``ERROR`` or missing node in document order."""
    if not node.has_error:
        return None
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        found = first_syntax_error(child)
        if found is not None:
            return found
    return node


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal of ``node`` and all of its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def node_text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf8", errors="replace")


def string_literal_value(node: Node) -> str:
    """Strip the quotes from an interpreted or raw string literal."""
    text = node_text(node)
    if len(text) >= 2 and text[0] in "\"`" and text[-1] == text[0]:
        return text[1:-1]
    return text


def block_statements(block: Node | None) -> list[Node]:
    """Return the statements of a ``block`` (or case clause body).

    Newer grammar versions wrap statements in a ``statement_list`` node;
    both shapes are flattened here.
    """
    if block is None:
        return []
    statements: list[Node] = []
    for child in block.named_children:
        if child.type == "statement_list":
            statements.extend(c for c in child.named_children if c.type != "comment")
        elif child.type != "comment":
            statements.append(child)
    return statements


def case_statements(case: Node) -> list[Node]:
    """Return the body statements of a switch/select case clause."""
    header_fields = {"value", "type", "communication"}
    statements: list[Node] = []
    for index, child in enumerate(case.children):
        if not child.is_named or child.type == "comment":
            continue
        if case.field_name_for_child(index) in header_fields:
            continue
        if child.type == "statement_list":
            statements.extend(c for c in child.named_children if c.type != "comment")
        else:
            statements.append(child)
    return statements


def expression_list(node: Node | None) -> list[Node]:
    """Flatten an ``expression_list`` into its expressions."""
    if node is None:
        return []
    if node.type == "expression_list":
        return [c for c in node.named_children if c.type != "comment"]
    return [node]


def iter_specs(declaration: Node, spec_type: str) -> Iterator[Node]:
    """Yield ``spec_type`` nodes of a declaration, through any spec list."""
    for child in declaration.named_children:
        if child.type == spec_type:
            yield child
        elif child.type.endswith("_spec_list"):
            yield from (c for c in child.named_children if c.type == spec_type)


def function_name(node: Node) -> str:
    return node_text(node.child_by_field_name("name"))


def receiver_type_name(method: Node) -> str:
    """Receiver type name of a method declaration, without ``*`` or type args."""
    receiver = method.child_by_field_name("receiver")
    if receiver is None:
        return ""
    for param in receiver.named_children:
        if param.type != "parameter_declaration":
            continue
        type_node = param.child_by_field_name("type")
        while type_node is not None and type_node.type in (
            "pointer_type",
            "generic_type",
            "parenthesized_type",
        ):
            if type_node.type == "generic_type":
                type_node = type_node.child_by_field_name("type")
            else:
                type_node = next(iter(type_node.named_children), None)
        return node_text(type_node)
    return ""


def unwrap_parens(node: Node | None) -> Node | None:
    while node is not None and node.type == "parenthesized_expression":
        node = next(iter(node.named_children), None)
    return node


__all__ = [
    "FUNCTION_TYPES",
    "IDENTIFIER_TYPES",
    "block_statements",
    "case_statements",
    "expression_list",
    "first_syntax_error",
    "function_name",
    "iter_specs",
    "node_text",
    "parse_source",
    "receiver_type_name",
    "string_literal_value",
    "unwrap_parens",
    "walk",
]
