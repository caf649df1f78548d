from __future__ import annotations

from pathlib import Path

import pytest

from analyzers.deep_if_else import DeepIfElseAnalyzer
from artifacts.models.artifacts.diagnostics import DeepIfElseViolation
from parse.workspace_parser import parse_workspace

NESTED_SOURCE = """package svc

func process(a, b, c bool) error {
\tif a {
\t\tif b {
\t\t\tif c {
\t\t\t\treturn nil
\t\t\t} else {
\t\t\t\treturn errC
\t\t\t}
\t\t} else {
\t\t\treturn errB
\t\t}
\t} else {
\t\treturn errA
\t}
}

var errA, errB, errC error
"""

SHALLOW_SOURCE = """package svc

func shallow(a, b bool) int {
\tif a {
\t\tif b {
\t\t\treturn 1
\t\t} else {
\t\t\treturn 2
\t\t}
\t} else {
\t\treturn 3
\t}
}
"""

ELSE_IF_SOURCE = """package svc

func grade(n int) string {
\tif n > 90 {
\t\treturn "a"
\t} else if n > 80 {
\t\treturn "b"
\t} else if n > 70 {
\t\treturn "c"
\t} else {
\t\treturn "d"
\t}
}
"""


def _write_go_file(root: Path, rel_path: str, content: str) -> Path:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _analyze(
    tmp_path: Path, source: str, analyzer: DeepIfElseAnalyzer | None = None
) -> list[DeepIfElseViolation]:
    _write_go_file(tmp_path, "svc.go", source)
    ws = parse_workspace(tmp_path)
    (pkg,) = ws.packages.values()
    return (analyzer or DeepIfElseAnalyzer()).analyze_package(pkg)


def test_nested_if_else_chain_is_reported(tmp_path: Path) -> None:
    (violation,) = _analyze(tmp_path, NESTED_SOURCE)

    assert violation.function == "process"
    assert (violation.line, violation.column) == (4, 2)
    assert violation.nesting_depth == 3
    assert violation.happy_path_depth == 3
    assert violation.error_branches == 3
    assert violation.complexity_reduction_percent == 66
    assert violation.suggestion.endswith("(depth 3 -> 0)")


def test_chain_at_max_nesting_is_not_reported(tmp_path: Path) -> None:
    assert _analyze(tmp_path, SHALLOW_SOURCE) == []

    (violation,) = _analyze(tmp_path, SHALLOW_SOURCE, DeepIfElseAnalyzer(max_nesting=1))
    assert violation.nesting_depth == 2


@pytest.mark.parametrize(("min_else_lines", "reported"), [(9, True), (10, False)])
def test_min_else_lines_filters_short_chains(
    tmp_path: Path, min_else_lines: int, reported: bool
) -> None:
    analyzer = DeepIfElseAnalyzer(min_else_lines=min_else_lines)

    violations = _analyze(tmp_path, NESTED_SOURCE, analyzer)

    assert bool(violations) is reported


def test_else_if_chain_counts_as_depth(tmp_path: Path) -> None:
    (violation,) = _analyze(tmp_path, ELSE_IF_SOURCE)

    assert violation.function == "grade"
    assert violation.nesting_depth == 3
    assert violation.happy_path_depth == 1
    assert violation.error_branches == 1


def test_reported_chain_is_not_searched_again(tmp_path: Path) -> None:
    violations = _analyze(tmp_path, NESTED_SOURCE, DeepIfElseAnalyzer(max_nesting=0))

    assert [v.line for v in violations] == [4]


def test_out_of_range_options_fall_back_to_defaults() -> None:
    analyzer = DeepIfElseAnalyzer(max_nesting=-1, min_else_lines=0)

    assert (analyzer.max_nesting, analyzer.min_else_lines) == (2, 3)
