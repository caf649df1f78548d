"""Detects functions that create a root context instead of taking one."""

from __future__ import annotations

from typing import TYPE_CHECKING

from artifacts.models.artifacts.diagnostics import MissingContextViolation
from parse.treesitter_go import FUNCTION_TYPES, function_name, node_text, walk

if TYPE_CHECKING:
    from tree_sitter import Node

    from workspace.model import File, Package, Workspace

_ENTRY_POINTS = frozenset({"main", "init"})
_ROOT_CONTEXT_FUNCS = frozenset({"TODO", "Background"})
_PARAMETER_TYPES = frozenset(
    {"parameter_declaration", "variadic_parameter_declaration"}
)


def has_context_param(declaration: Node) -> bool:
    params = declaration.child_by_field_name("parameters")
    if params is None:
        return False
    return any(
        node_text(param.child_by_field_name("type")) == "context.Context"
        for param in params.named_children
        if param.type in _PARAMETER_TYPES
    )


def context_creation_calls(body: Node) -> list[str]:
    """``context.TODO()``/``context.Background()`` calls in source order."""
    calls: list[str] = []
    for node in walk(body):
        if node.type != "call_expression":
            continue
        function = node.child_by_field_name("function")
        if function is None or function.type != "selector_expression":
            continue
        operand = function.child_by_field_name("operand")
        field = node_text(function.child_by_field_name("field"))
        if (
            operand is not None
            and operand.type == "identifier"
            and node_text(operand) == "context"
            and field in _ROOT_CONTEXT_FUNCS
        ):
            calls.append(f"context.{field}()")
    return calls


class MissingContextAnalyzer:
    """Flags functions calling ``context.TODO``/``Background`` without a ctx param.

    ``main`` and ``init`` are where root contexts belong and are skipped.
    """

    def analyze_file(self, file: File) -> list[MissingContextViolation]:
        violations: list[MissingContextViolation] = []
        for declaration in file.root.named_children:
            if declaration.type not in FUNCTION_TYPES:
                continue
            name = function_name(declaration)
            body = declaration.child_by_field_name("body")
            if name in _ENTRY_POINTS or body is None or has_context_param(declaration):
                continue
            calls = context_creation_calls(body)
            if not calls:
                continue

            position = file.position(declaration.start_byte)
            signature = file.content[declaration.start_byte : body.start_byte]
            violations.append(
                MissingContextViolation(
                    file=file.path,
                    line=position.line,
                    column=position.column,
                    function=name,
                    signature=signature.decode("utf8", errors="replace").strip(),
                    context_calls=calls,
                )
            )
        return violations

    def analyze_package(self, pkg: Package) -> list[MissingContextViolation]:
        violations: list[MissingContextViolation] = []
        for file in pkg.files.values():
            violations.extend(self.analyze_file(file))
        return violations

    def analyze_workspace(self, ws: Workspace) -> list[MissingContextViolation]:
        violations: list[MissingContextViolation] = []
        for pkg in ws.packages.values():
            violations.extend(self.analyze_package(pkg))
        return violations


__all__ = ["MissingContextAnalyzer", "context_creation_calls", "has_context_param"]
