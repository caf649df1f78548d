from __future__ import annotations

from pathlib import Path

import pytest

from analyzers.error_wrapping import ErrorWrappingAnalyzer, returns_error
from artifacts.models.artifacts.diagnostics import ErrorWrappingViolation
from parse.treesitter_go import parse_source
from parse.workspace_parser import parse_workspace

SOURCE = """package svc

import (
\t"errors"
\t"fmt"
)

var errNotFound = errors.New("not found")

func LoadUser(id int) (string, error) {
\tif id < 0 {
\t\treturn "", errNotFound
\t}
\tname, err := lookup(id)
\tif err != nil {
\t\treturn "", fmt.Errorf("load user %d: %v", id, err)
\t}
\tif name == "" {
\t\treturn "", fmt.Errorf("failed: %w", err)
\t}
\treturn name, fmt.Errorf("lookup %d: %w", id, err)
}

func lookup(id int) (string, error) {
\treturn "", nil
}

func count() int {
\terr := 0
\treturn err
}
"""


def _write_go_file(root: Path, rel_path: str, content: str) -> Path:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _analyze(tmp_path: Path, severity: str = "critical") -> list[ErrorWrappingViolation]:
    _write_go_file(tmp_path, "svc.go", SOURCE)
    ws = parse_workspace(tmp_path)
    (pkg,) = ws.packages.values()
    return ErrorWrappingAnalyzer(severity).analyze_package(pkg)


def test_critical_violations_by_default(tmp_path: Path) -> None:
    violations = _analyze(tmp_path)

    assert [(v.line, v.violation_type) for v in violations] == [
        (12, "bare_return"),
        (16, "format_verb_v_instead_of_w"),
    ]
    bare = violations[0]
    assert bare.function == "LoadUser"
    assert bare.column == 3
    assert bare.current_code == 'return "", errNotFound'
    assert bare.context_suggestion == "load user"
    assert bare.severity == "critical"


@pytest.mark.parametrize("severity", ["warning", "info"])
def test_lower_severities_add_missing_context(tmp_path: Path, severity: str) -> None:
    violations = _analyze(tmp_path, severity)

    assert [(v.line, v.violation_type, v.severity) for v in violations] == [
        (12, "bare_return", "critical"),
        (16, "format_verb_v_instead_of_w", "critical"),
        (19, "no_context", "warning"),
    ]


def test_functions_without_error_result_are_skipped(tmp_path: Path) -> None:
    violations = _analyze(tmp_path, "info")

    assert all(v.function == "LoadUser" for v in violations)


def test_unknown_severity_falls_back_to_critical() -> None:
    assert ErrorWrappingAnalyzer("bogus").severity == "critical"


@pytest.mark.parametrize(
    ("declaration", "expected"),
    [
        ("func f() error { return nil }", True),
        ("func f() (int, error) { return 0, nil }", True),
        ("func f() (n int, err error) { return }", True),
        ("func f() int { return 0 }", False),
        ("func f() {}", False),
    ],
)
def test_returns_error(declaration: str, expected: bool) -> None:
    root = parse_source(f"package p\n\n{declaration}\n".encode()).root_node
    (function,) = [n for n in root.named_children if n.type == "function_declaration"]

    assert returns_error(function) is expected
