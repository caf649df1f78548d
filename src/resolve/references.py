"""Name-keyed index of every identifier occurrence in a workspace."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from parse.treesitter_go import IDENTIFIER_TYPES, node_text, walk

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tree_sitter import Node

    from artifacts.models.artifacts.symbols import RefContext
    from workspace.model import File, Workspace

logger = logging.getLogger(__name__)

# Parent node types whose "name" field declares the identifier
_NAMED_DECLARATIONS = frozenset(
    {
        "function_declaration",
        "method_declaration",
        "type_spec",
        "type_alias",
        "var_spec",
        "const_spec",
        "method_elem",
        "method_spec",
        "field_declaration",
        "parameter_declaration",
        "variadic_parameter_declaration",
        "type_parameter_declaration",
        "import_spec",
        "package_clause",
    }
)

_BINDING_STATEMENTS = frozenset(
    {"short_var_declaration", "range_clause", "receive_statement"}
)


@dataclass(frozen=True)
class IndexEntry:
    """One occurrence of a name."""

    file: str
    offset: int
    line: int
    column: int
    context: RefContext
    is_declaration: bool
    qualifier: str | None = None


def _same(a: Node | None, b: Node) -> bool:
    return a is not None and a.id == b.id


def _is_declaration(node: Node, parent: Node) -> bool:
    if parent.type == "package_clause":
        return True
    if parent.type in _NAMED_DECLARATIONS:
        return any(_same(n, node) for n in parent.children_by_field_name("name"))
    if parent.type == "expression_list":
        statement = parent.parent
        if statement is None or statement.type not in _BINDING_STATEMENTS:
            return False
        if not _same(statement.child_by_field_name("left"), parent):
            return False
        return any(
            not child.is_named and child.type == ":=" for child in statement.children
        )
    if parent.type in _BINDING_STATEMENTS:
        return _same(parent.child_by_field_name("left"), node) and any(
            not child.is_named and child.type == ":=" for child in parent.children
        )
    return False


def _is_call_target(node: Node) -> bool:
    parent = node.parent
    return (
        parent is not None
        and parent.type == "call_expression"
        and _same(parent.child_by_field_name("function"), node)
    )


def classify_occurrence(node: Node) -> tuple[RefContext, str | None]:
    """Return the reference context and selector qualifier of an identifier."""
    parent = node.parent
    if parent is None:
        return "generic", None

    if node.type == "type_identifier":
        qualifier = None
        if parent.type == "qualified_type":
            qualifier = node_text(parent.child_by_field_name("package"))
        return "type-use", qualifier

    if parent.type == "selector_expression":
        operand = parent.child_by_field_name("operand")
        if _same(operand, node):
            return "selector", None
        qualifier = node_text(operand) if operand is not None else None
        if operand is not None and operand.type != "identifier":
            qualifier = None
        if _is_call_target(parent):
            return "call", qualifier
        return "field", qualifier

    if parent.type == "qualified_type":
        return "selector", None

    if node.type == "field_identifier":
        return "field", None

    if _is_call_target(node):
        return "call", None

    return "generic", None


def _iter_identifiers(file: File) -> Iterator[Node]:
    for node in walk(file.root):
        if node.type in IDENTIFIER_TYPES:
            yield node


class ReferenceIndex:
    """Occurrences of every identifier spelling, in workspace walk order."""

    def __init__(self) -> None:
        self._entries: dict[str, list[IndexEntry]] = defaultdict(list)

    def add(self, name: str, entry: IndexEntry) -> None:
        self._entries[name].append(entry)

    def occurrences(self, name: str) -> list[IndexEntry]:
        return list(self._entries.get(name, ()))

    def uses(self, name: str) -> list[IndexEntry]:
        """Occurrences of ``name`` that are not declaration sites."""
        return [e for e in self._entries.get(name, ()) if not e.is_declaration]

    def referenced_names(self) -> set[str]:
        return {
            name
            for name, entries in self._entries.items()
            if any(not e.is_declaration for e in entries)
        }

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def index_file(file: File, index: ReferenceIndex) -> None:
    for node in _iter_identifiers(file):
        parent = node.parent
        if parent is None:
            continue
        context, qualifier = classify_occurrence(node)
        position = file.position(node.start_byte)
        index.add(
            node_text(node),
            IndexEntry(
                file=file.path,
                offset=node.start_byte,
                line=position.line,
                column=position.column,
                context=context,
                is_declaration=_is_declaration(node, parent),
                qualifier=qualifier,
            ),
        )


def build_reference_index(ws: Workspace) -> ReferenceIndex:
    """Index every identifier of every file (test files included) in ``ws``."""
    index = ReferenceIndex()
    file_count = 0
    for file in ws.iter_files(include_tests=True):
        index_file(file, index)
        file_count += 1
    logger.info("reference index built: %d names across %d files", len(index), file_count)
    return index


__all__ = [
    "IndexEntry",
    "ReferenceIndex",
    "build_reference_index",
    "classify_occurrence",
    "index_file",
]
