"""Detects ``if`` statements that declare variables in their initializer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from artifacts.models.artifacts.diagnostics import IfInitViolation
from parse.treesitter_go import FUNCTION_TYPES, expression_list, function_name, walk

if TYPE_CHECKING:
    from tree_sitter import Node

    from workspace.model import File, Package, Workspace


def _violation(file: File, function: str, node: Node) -> IfInitViolation | None:
    initializer = node.child_by_field_name("initializer")
    if initializer is None or initializer.type != "short_var_declaration":
        return None

    variables = [
        file.text(target)
        for target in expression_list(initializer.child_by_field_name("left"))
    ]
    right = initializer.child_by_field_name("right")
    position = file.position(node.start_byte)
    return IfInitViolation(
        file=file.path,
        line=position.line,
        column=position.column,
        function=function,
        variables=variables,
        expression=file.text(right) if right is not None else "",
        snippet=file.line_text(position.line),
    )


class IfInitAnalyzer:
    """Flags ``if x := f(); cond`` style initializers.

    Plain assignments in the initializer are not flagged; only short
    variable declarations introduce new bindings.
    """

    def analyze_file(self, file: File) -> list[IfInitViolation]:
        violations: list[IfInitViolation] = []
        for declaration in file.root.named_children:
            if declaration.type not in FUNCTION_TYPES:
                continue
            body = declaration.child_by_field_name("body")
            if body is None:
                continue
            name = function_name(declaration)
            for node in walk(body):
                if node.type != "if_statement":
                    continue
                violation = _violation(file, name, node)
                if violation is not None:
                    violations.append(violation)
        return violations

    def analyze_package(self, pkg: Package) -> list[IfInitViolation]:
        violations: list[IfInitViolation] = []
        for file in pkg.files.values():
            violations.extend(self.analyze_file(file))
        return violations

    def analyze_workspace(self, ws: Workspace) -> list[IfInitViolation]:
        violations: list[IfInitViolation] = []
        for pkg in ws.packages.values():
            violations.extend(self.analyze_package(pkg))
        return violations


__all__ = ["IfInitAnalyzer"]
