"""Detects if/else chains nested deeply enough to want guard clauses.

Depth follows ``if`` statements that carry an ``else``: an if/else inside the
``then`` block, inside a plain ``else`` block, or as an ``else if`` each adds
one level. A chain is reported when it is deeper than ``max_nesting`` and its
``else`` branches together span at least ``min_else_lines`` lines. Reported
chains are not searched again for inner violations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from artifacts.models.artifacts.diagnostics import DeepIfElseViolation
from parse.treesitter_go import FUNCTION_TYPES, block_statements, function_name

if TYPE_CHECKING:
    from tree_sitter import Node

    from workspace.model import File, Package, Workspace

DEFAULT_MAX_NESTING = 2
DEFAULT_MIN_ELSE_LINES = 3


def _has_else(node: Node) -> bool:
    return (
        node.type == "if_statement"
        and node.child_by_field_name("alternative") is not None
    )


def _then_statements(node: Node) -> list[Node]:
    return block_statements(node.child_by_field_name("consequence"))


def _block_lines(block: Node | None) -> int:
    if block is None:
        return 0
    return block.end_point[0] - block.start_point[0] + 1


def measure_if_else_depth(node: Node, depth: int = 1) -> int:
    deepest = depth
    for stmt in _then_statements(node):
        if _has_else(stmt):
            deepest = max(deepest, measure_if_else_depth(stmt, depth + 1))

    alternative = node.child_by_field_name("alternative")
    if alternative is None:
        return deepest
    if alternative.type == "if_statement":
        if _has_else(alternative):
            deepest = max(deepest, measure_if_else_depth(alternative, depth + 1))
    else:
        for stmt in block_statements(alternative):
            if _has_else(stmt):
                deepest = max(deepest, measure_if_else_depth(stmt, depth + 1))
    return deepest


def count_else_lines(node: Node) -> int:
    """Lines spanned by every ``else`` branch of the chain rooted at ``node``."""
    alternative = node.child_by_field_name("alternative")
    if alternative is None:
        return 0

    total = 0
    if alternative.type == "if_statement":
        total += _block_lines(alternative.child_by_field_name("consequence"))
        total += count_else_lines(alternative)
    else:
        total += _block_lines(alternative)

    for stmt in _then_statements(node):
        if stmt.type == "if_statement":
            total += count_else_lines(stmt)
    return total


def count_error_branches(node: Node) -> int:
    """Count ``else`` blocks that return, i.e. candidates for early returns."""
    count = 0
    alternative = node.child_by_field_name("alternative")
    if alternative is not None:
        if alternative.type == "if_statement":
            count += count_error_branches(alternative)
        elif any(s.type == "return_statement" for s in block_statements(alternative)):
            count += 1

    for stmt in _then_statements(node):
        if stmt.type == "if_statement":
            count += count_error_branches(stmt)
    return count


def measure_happy_path_depth(node: Node, depth: int = 1) -> int:
    deepest = depth
    for stmt in _then_statements(node):
        if _has_else(stmt):
            deepest = max(deepest, measure_happy_path_depth(stmt, depth + 1))
    return deepest


class DeepIfElseAnalyzer:
    """Reports if/else chains that read better inverted into early returns."""

    def __init__(
        self,
        max_nesting: int = DEFAULT_MAX_NESTING,
        min_else_lines: int = DEFAULT_MIN_ELSE_LINES,
    ) -> None:
        self.max_nesting = max_nesting if max_nesting >= 0 else DEFAULT_MAX_NESTING
        self.min_else_lines = (
            min_else_lines if min_else_lines > 0 else DEFAULT_MIN_ELSE_LINES
        )

    def _check(self, file: File, function: str, node: Node) -> DeepIfElseViolation | None:
        depth = measure_if_else_depth(node)
        if depth <= self.max_nesting:
            return None
        if count_else_lines(node) < self.min_else_lines:
            return None

        position = file.position(node.start_byte)
        return DeepIfElseViolation(
            file=file.path,
            line=position.line,
            column=position.column,
            function=function,
            nesting_depth=depth,
            happy_path_depth=measure_happy_path_depth(node),
            error_branches=count_error_branches(node),
            complexity_reduction_percent=(depth - 1) * 100 // depth,
            suggestion=(
                "Invert conditions and use early returns for error cases "
                f"(depth {depth} -> 0)"
            ),
        )

    def _scan(
        self,
        file: File,
        function: str,
        node: Node,
        violations: list[DeepIfElseViolation],
    ) -> None:
        if _has_else(node):
            violation = self._check(file, function, node)
            if violation is not None:
                violations.append(violation)
                return
        for child in node.named_children:
            self._scan(file, function, child, violations)

    def analyze_file(self, file: File) -> list[DeepIfElseViolation]:
        violations: list[DeepIfElseViolation] = []
        for declaration in file.root.named_children:
            if declaration.type not in FUNCTION_TYPES:
                continue
            body = declaration.child_by_field_name("body")
            if body is None:
                continue
            self._scan(file, function_name(declaration), body, violations)
        return violations

    def analyze_package(self, pkg: Package) -> list[DeepIfElseViolation]:
        violations: list[DeepIfElseViolation] = []
        for file in pkg.files.values():
            violations.extend(self.analyze_file(file))
        return violations

    def analyze_workspace(self, ws: Workspace) -> list[DeepIfElseViolation]:
        violations: list[DeepIfElseViolation] = []
        for pkg in ws.packages.values():
            violations.extend(self.analyze_package(pkg))
        return violations


__all__ = [
    "DEFAULT_MAX_NESTING",
    "DEFAULT_MIN_ELSE_LINES",
    "DeepIfElseAnalyzer",
    "count_else_lines",
    "count_error_branches",
    "measure_happy_path_depth",
    "measure_if_else_depth",
]
