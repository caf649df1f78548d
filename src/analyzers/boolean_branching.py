"""Detects boolean locals fanned out from one value into an if/else-if chain.

A function like::

    wantShapefile := accept == "x-shapefile"
    wantGeoJSON := accept == "geojson"
    if wantShapefile {
        ...
    } else if wantGeoJSON {
        ...
    }

reads better as ``switch accept { ... }``. ``switch`` statements are never
reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from artifacts.models.artifacts.diagnostics import BooleanBranchingViolation
from parse.treesitter_go import (
    FUNCTION_TYPES,
    expression_list,
    function_name,
    node_text,
    unwrap_parens,
    walk,
)

if TYPE_CHECKING:
    from tree_sitter import Node

    from workspace.model import File, Package, Workspace

DEFAULT_MIN_BRANCHES = 2

_EQUALITY_OPERATORS = frozenset({"==", "!="})


@dataclass(frozen=True)
class BooleanIntroduction:
    """``name := source op value``"""

    name: str
    source: str
    operator: str
    value: str


def _introduction(target: Node, expr: Node) -> BooleanIntroduction | None:
    if target.type != "identifier" or node_text(target) == "_":
        return None
    expr = unwrap_parens(expr)
    if expr is None or expr.type != "binary_expression":
        return None
    operator = node_text(expr.child_by_field_name("operator"))
    if operator not in _EQUALITY_OPERATORS:
        return None
    left = unwrap_parens(expr.child_by_field_name("left"))
    if left is None or left.type != "identifier":
        return None
    return BooleanIntroduction(
        name=node_text(target),
        source=node_text(left),
        operator=operator,
        value=node_text(expr.child_by_field_name("right")),
    )


def collect_introductions(body: Node) -> list[BooleanIntroduction]:
    """Boolean short declarations in ``body``, in walk order."""
    found: list[BooleanIntroduction] = []
    for node in walk(body):
        if node.type != "short_var_declaration":
            continue
        left = expression_list(node.child_by_field_name("left"))
        right = expression_list(node.child_by_field_name("right"))
        if len(left) != len(right):
            continue
        for target, expr in zip(left, right):
            intro = _introduction(target, expr)
            if intro is not None:
                found.append(intro)
    return found


def collect_chain_conditions(body: Node) -> dict[str, Node]:
    """Identifiers used as whole ``if``/``else if`` conditions.

    Maps each name to the first ``if`` statement testing it.
    """
    conditions: dict[str, Node] = {}
    for node in walk(body):
        if node.type != "if_statement":
            continue
        condition = unwrap_parens(node.child_by_field_name("condition"))
        if condition is not None and condition.type == "identifier":
            conditions.setdefault(node_text(condition), node)
    return conditions


def _group_by_source(
    intros: list[BooleanIntroduction],
) -> dict[str, list[BooleanIntroduction]]:
    groups: dict[str, list[BooleanIntroduction]] = {}
    for intro in intros:
        group = groups.setdefault(intro.source, [])
        if all(existing.name != intro.name for existing in group):
            group.append(intro)
    return groups


def _suggestion(source: str, group: list[BooleanIntroduction]) -> str:
    cases = " ".join(f"case {intro.value}: ..." for intro in group)
    return f"switch {source} {{ {cases} }}"


class BooleanBranchingAnalyzer:
    """Reports families of boolean locals that should be a ``switch``."""

    def __init__(self, min_branches: int = DEFAULT_MIN_BRANCHES) -> None:
        self.min_branches = max(min_branches, DEFAULT_MIN_BRANCHES)

    def _analyze_function(
        self, file: File, declaration: Node
    ) -> list[BooleanBranchingViolation]:
        body = declaration.child_by_field_name("body")
        if body is None:
            return []

        groups = _group_by_source(collect_introductions(body))
        if not groups:
            return []
        conditions = collect_chain_conditions(body)

        violations: list[BooleanBranchingViolation] = []
        for source, group in groups.items():
            if len(group) < self.min_branches:
                continue
            used = [intro.name for intro in group if intro.name in conditions]
            if len(used) < self.min_branches:
                continue
            first_if = min((conditions[name] for name in used), key=lambda n: n.start_byte)
            position = file.position(first_if.start_byte)
            violations.append(
                BooleanBranchingViolation(
                    file=file.path,
                    line=position.line,
                    column=position.column,
                    function=function_name(declaration),
                    source_variable=source,
                    boolean_variables=[intro.name for intro in group],
                    branch_count=len(used),
                    suggestion=_suggestion(source, group),
                )
            )
        return violations

    def analyze_file(self, file: File) -> list[BooleanBranchingViolation]:
        violations: list[BooleanBranchingViolation] = []
        for declaration in file.root.named_children:
            if declaration.type in FUNCTION_TYPES:
                violations.extend(self._analyze_function(file, declaration))
        return violations

    def analyze_package(self, pkg: Package) -> list[BooleanBranchingViolation]:
        violations: list[BooleanBranchingViolation] = []
        for file in pkg.files.values():
            violations.extend(self.analyze_file(file))
        return violations

    def analyze_workspace(self, ws: Workspace) -> list[BooleanBranchingViolation]:
        violations: list[BooleanBranchingViolation] = []
        for pkg in ws.packages.values():
            violations.extend(self.analyze_package(pkg))
        return violations


__all__ = [
    "DEFAULT_MIN_BRANCHES",
    "BooleanBranchingAnalyzer",
    "BooleanIntroduction",
    "collect_chain_conditions",
    "collect_introductions",
]
