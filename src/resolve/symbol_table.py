"""Per-package symbol table construction from Go syntax trees."""

from __future__ import annotations

from typing import TYPE_CHECKING

from artifacts.models.artifacts.symbols import Symbol, SymbolKind
from parse.treesitter_go import (
    iter_specs,
    node_text,
    receiver_type_name,
)
from utils import is_exported
from workspace.model import SymbolTable

if TYPE_CHECKING:
    from tree_sitter import Node

    from workspace.model import File, Package

_INTERFACE_METHOD_TYPES = ("method_elem", "method_spec")


def build_signature(name: str, declaration: Node) -> str:
    """Render ``name(arg1, arg2)`` from a callable's named parameters.

    Types, receivers and results are left out; unnamed parameters are
    skipped, so a callable with no named parameters renders as ``name()``.
    """
    params = declaration.child_by_field_name("parameters")
    names: list[str] = []
    if params is not None:
        for param in params.named_children:
            if param.type not in (
                "parameter_declaration",
                "variadic_parameter_declaration",
            ):
                continue
            names.extend(node_text(n) for n in param.children_by_field_name("name"))
    return f"{name}({', '.join(names)})"


def _make_symbol(
    file: File,
    package: Package,
    name_node: Node,
    declaration: Node,
    kind: SymbolKind,
    *,
    signature: str | None = None,
    receiver: str | None = None,
) -> Symbol:
    name = node_text(name_node)
    position = file.position(name_node.start_byte)
    return Symbol(
        name=name,
        kind=kind,
        package=package.key,
        file=file.path,
        position=file.pos(name_node.start_byte),
        end=file.pos(declaration.end_byte),
        line=position.line,
        column=position.column,
        exported=is_exported(name),
        signature=signature,
        receiver=receiver,
    )


def _add_unique(bucket: dict[str, Symbol], symbol: Symbol) -> None:
    # first declaration wins; non-test files are walked before test files
    if symbol.name != "_" and symbol.name not in bucket:
        bucket[symbol.name] = symbol


def function_symbol(file: File, package: Package, node: Node) -> Symbol | None:
    """Symbol for a function or method declaration node, or None if unnamed."""
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None
    name = node_text(name_node)
    if node.type == "method_declaration":
        return _make_symbol(
            file,
            package,
            name_node,
            node,
            "method",
            signature=build_signature(name, node),
            receiver=receiver_type_name(node) or None,
        )
    return _make_symbol(
        file, package, name_node, node, "function", signature=build_signature(name, node)
    )


def _handle_function(file: File, package: Package, node: Node, table: SymbolTable) -> None:
    symbol = function_symbol(file, package, node)
    if symbol is not None:
        _add_unique(table.functions, symbol)


def _handle_method(file: File, package: Package, node: Node, table: SymbolTable) -> None:
    symbol = function_symbol(file, package, node)
    if symbol is not None and symbol.receiver:
        table.add_method(symbol.receiver, symbol)


def _handle_type_spec(file: File, package: Package, spec: Node, table: SymbolTable) -> None:
    name_node = spec.child_by_field_name("name")
    if name_node is None:
        return
    type_node = spec.child_by_field_name("type")
    is_interface = type_node is not None and type_node.type == "interface_type"
    symbol = _make_symbol(
        file, package, name_node, spec, "interface" if is_interface else "type"
    )
    if symbol.name in table.types:
        return
    _add_unique(table.types, symbol)

    if not is_interface or type_node is None:
        return
    elements: list[Node] = []
    for child in type_node.named_children:
        if child.type.endswith("_list"):
            elements.extend(child.named_children)
        else:
            elements.append(child)
    for element in elements:
        if element.type not in _INTERFACE_METHOD_TYPES:
            continue
        method_name = element.child_by_field_name("name")
        if method_name is None:
            continue
        table.add_method(
            symbol.name,
            _make_symbol(
                file,
                package,
                method_name,
                element,
                "method",
                signature=build_signature(node_text(method_name), element),
                receiver=symbol.name,
            ),
        )


def _handle_value_declaration(
    file: File, package: Package, node: Node, table: SymbolTable
) -> None:
    if node.type == "var_declaration":
        kind: SymbolKind = "variable"
        bucket = table.variables
        spec_type = "var_spec"
    else:
        kind = "constant"
        bucket = table.constants
        spec_type = "const_spec"
    for spec in iter_specs(node, spec_type):
        for name_node in spec.children_by_field_name("name"):
            _add_unique(bucket, _make_symbol(file, package, name_node, spec, kind))


def _collect_file(file: File, package: Package, table: SymbolTable) -> None:
    for declaration in file.root.named_children:
        if declaration.type == "function_declaration":
            _handle_function(file, package, declaration, table)
        elif declaration.type == "method_declaration":
            _handle_method(file, package, declaration, table)
        elif declaration.type == "type_declaration":
            for child in declaration.named_children:
                if child.type in ("type_spec", "type_alias"):
                    _handle_type_spec(file, package, child, table)
                elif child.type.endswith("_list"):
                    for spec in child.named_children:
                        if spec.type in ("type_spec", "type_alias"):
                            _handle_type_spec(file, package, spec, table)
        elif declaration.type in ("var_declaration", "const_declaration"):
            _handle_value_declaration(file, package, declaration, table)


def build_symbol_table(package: Package, *, include_tests: bool = False) -> SymbolTable:
    """Build the symbol table of ``package`` from its top-level declarations.

    Only non-test files are walked unless ``include_tests`` is set; test
    files come last so a test declaration never replaces a non-test one.
    """
    table = SymbolTable()
    for file in package.iter_files(include_tests=include_tests):
        _collect_file(file, package, table)
    return table


__all__ = ["build_signature", "build_symbol_table", "function_symbol"]
