"""Per-function complexity metrics for Go code."""

from __future__ import annotations

from typing import TYPE_CHECKING

from artifacts.models.artifacts.diagnostics import (
    ComplexityLevel,
    ComplexityMetrics,
    ComplexityResult,
)
from parse.treesitter_go import (
    FUNCTION_TYPES,
    block_statements,
    case_statements,
    expression_list,
    iter_specs,
    node_text,
)
from resolve.symbol_table import function_symbol

if TYPE_CHECKING:
    from tree_sitter import Node

    from workspace.model import File, Package, Workspace

DEFAULT_MIN_COMPLEXITY = 10

# Lower bounds, checked from the top.
COMPLEXITY_THRESHOLDS: tuple[tuple[int, ComplexityLevel], ...] = (
    (20, "extreme"),
    (15, "very_high"),
    (10, "high"),
    (5, "moderate"),
)

_SWITCH_TYPES = frozenset({"expression_switch_statement", "type_switch_statement"})
_CASE_TYPES = frozenset(
    {"expression_case", "type_case", "default_case", "communication_case"}
)


def classify_complexity(cyclomatic: int) -> ComplexityLevel:
    """Map a cyclomatic complexity to its band.

    Examples:
        >>> classify_complexity(25)
        'extreme'
        >>> classify_complexity(10)
        'high'
        >>> classify_complexity(4)
        'low'
    """
    for bound, level in COMPLEXITY_THRESHOLDS:
        if cyclomatic >= bound:
            return level
    return "low"


class _MetricsWalker:
    """Accumulates metrics over one function body."""

    def __init__(self) -> None:
        self.metrics = ComplexityMetrics()

    def _enter(self, depth: int) -> None:
        self.metrics.max_nesting_depth = max(self.metrics.max_nesting_depth, depth)

    def _decision(self, depth: int) -> None:
        self.metrics.cognitive_complexity += 1 + depth

    def count_func_literals(self, node: Node | None, depth: int) -> None:
        """Weigh every function literal inside ``node`` without entering it."""
        if node is None:
            return
        if node.type == "func_literal":
            self._decision(depth)
            return
        for child in node.named_children:
            self.count_func_literals(child, depth)

    def walk_statements(self, statements: list[Node], depth: int) -> None:
        for statement in statements:
            self.walk_statement(statement, depth)

    def walk_statement(self, node: Node, depth: int) -> None:
        kind = node.type
        if kind == "if_statement":
            self._walk_if(node, depth)
        elif kind == "for_statement":
            self._walk_for(node, depth)
        elif kind in _SWITCH_TYPES:
            self._walk_switch(node, depth, implicit_default=True)
        elif kind == "select_statement":
            self._walk_switch(node, depth, implicit_default=False)
        elif kind == "block":
            if depth > 0:
                self.metrics.nested_blocks += 1
            self._enter(depth)
            self.walk_statements(block_statements(node), depth)
        elif kind == "labeled_statement":
            inner = node.child_by_field_name("statement")
            if inner is None:
                inner = next(
                    (c for c in node.named_children if c.type != "label_name"), None
                )
            if inner is not None:
                self.walk_statement(inner, depth)
        elif kind in ("go_statement", "defer_statement"):
            self._decision(depth)
            self.count_func_literals(node, depth)
        elif kind == "short_var_declaration":
            for target in expression_list(node.child_by_field_name("left")):
                if target.type == "identifier" and node_text(target) != "_":
                    self.metrics.local_variables += 1
            self.count_func_literals(node, depth)
        elif kind == "var_declaration":
            for spec in iter_specs(node, "var_spec"):
                self.metrics.local_variables += len(spec.children_by_field_name("name"))
            self.count_func_literals(node, depth)
        else:
            self.count_func_literals(node, depth)

    def _walk_if(self, node: Node, depth: int) -> None:
        self.metrics.cyclomatic_complexity += 1
        self._decision(depth)
        self._enter(depth + 1)

        initializer = node.child_by_field_name("initializer")
        if initializer is not None:
            self.walk_statement(initializer, depth + 1)
        self.count_func_literals(node.child_by_field_name("condition"), depth)

        consequence = node.child_by_field_name("consequence")
        if consequence is not None:
            self.walk_statement(consequence, depth + 1)

        alternative = node.child_by_field_name("alternative")
        if alternative is None:
            return
        if alternative.type == "if_statement":
            self._walk_if(alternative, depth)
        else:
            self.metrics.cyclomatic_complexity += 1
            self.walk_statement(alternative, depth + 1)

    def _walk_for(self, node: Node, depth: int) -> None:
        self.metrics.cyclomatic_complexity += 1
        self._decision(depth)
        self._enter(depth + 1)
        body = node.child_by_field_name("body")
        if body is not None:
            self.walk_statement(body, depth + 1)

    def _walk_switch(self, node: Node, depth: int, *, implicit_default: bool) -> None:
        cases = [c for c in node.named_children if c.type in _CASE_TYPES]
        if implicit_default:
            # a written default adds no path
            written = [c for c in cases if c.type != "default_case"]
            self.metrics.cyclomatic_complexity += len(written)
            if len(written) == len(cases):
                self.metrics.cyclomatic_complexity += 1
        else:
            self.metrics.cyclomatic_complexity += len(cases)
        self._decision(depth)
        self._enter(depth + 1)
        for case in cases:
            self.walk_statements(case_statements(case), depth + 1)


def compute_metrics(node: Node) -> ComplexityMetrics | None:
    """Compute metrics for a function or method declaration; None without body."""
    body = node.child_by_field_name("body")
    if body is None:
        return None

    walker = _MetricsWalker()
    metrics = walker.metrics
    metrics.lines_of_code = body.end_point[0] - body.start_point[0] + 1

    params = node.child_by_field_name("parameters")
    if params is not None:
        for param in params.named_children:
            metrics.parameters += len(param.children_by_field_name("name"))

    walker.walk_statements(block_statements(body), 0)
    return metrics


class ComplexityAnalyzer:
    """Reports functions whose cyclomatic complexity reaches a threshold."""

    def __init__(self, min_complexity: int = DEFAULT_MIN_COMPLEXITY) -> None:
        self.min_complexity = min_complexity if min_complexity > 0 else DEFAULT_MIN_COMPLEXITY

    def analyze_file(self, file: File) -> list[ComplexityResult]:
        if file.package is None:
            return []
        results: list[ComplexityResult] = []
        for node in file.root.named_children:
            if node.type not in FUNCTION_TYPES:
                continue
            metrics = compute_metrics(node)
            if metrics is None or metrics.cyclomatic_complexity < self.min_complexity:
                continue
            symbol = function_symbol(file, file.package, node)
            if symbol is None:
                continue
            results.append(
                ComplexityResult(
                    function=symbol,
                    metrics=metrics,
                    file=file.path,
                    line=symbol.line,
                    column=symbol.column,
                    level=classify_complexity(metrics.cyclomatic_complexity),
                )
            )
        return results

    def analyze_package(self, pkg: Package) -> list[ComplexityResult]:
        results: list[ComplexityResult] = []
        for file in pkg.files.values():
            results.extend(self.analyze_file(file))
        return _sorted(results)

    def analyze_workspace(self, ws: Workspace) -> list[ComplexityResult]:
        results: list[ComplexityResult] = []
        for pkg in ws.packages.values():
            results.extend(self.analyze_package(pkg))
        return _sorted(results)


def _sorted(results: list[ComplexityResult]) -> list[ComplexityResult]:
    # stable: ties keep walk order
    return sorted(results, key=lambda r: r.metrics.cyclomatic_complexity, reverse=True)


__all__ = [
    "COMPLEXITY_THRESHOLDS",
    "DEFAULT_MIN_COMPLEXITY",
    "ComplexityAnalyzer",
    "classify_complexity",
    "compute_metrics",
]
