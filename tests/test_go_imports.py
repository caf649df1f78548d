from __future__ import annotations

import pytest

from parse.go_imports import default_package_name, extract_imports, package_clause_name
from parse.treesitter_go import first_syntax_error, parse_source


@pytest.mark.parametrize(
    ("import_path", "expected"),
    [
        ("fmt", "fmt"),
        ("net/http", "http"),
        ("example.com/mod/v2", "mod"),
        ("gopkg.in/yaml.v3", "yaml"),
        ("github.com/mattn/go-sqlite3", "sqlite3"),
        ("github.com/foo/bar-baz", "bar_baz"),
    ],
)
def test_default_package_name(import_path: str, expected: str) -> None:
    assert default_package_name(import_path) == expected


def test_extract_imports_single_grouped_and_aliased() -> None:
    source = b"""package main

import "fmt"

import (
\tstr "strings"
\t. "math"
\t_ "embed"
\t`os`
)
"""
    root = parse_source(source).root_node

    specs = extract_imports(root)

    assert [(s.path, s.alias) for s in specs] == [
        ("fmt", None),
        ("strings", "str"),
        ("math", "."),
        ("embed", "_"),
        ("os", None),
    ]
    assert specs[0].line == 3
    assert specs[1].local_name == "str"
    assert package_clause_name(root) == "main"


def test_first_syntax_error_is_none_for_valid_source() -> None:
    tree = parse_source(b"package ok\n\nfunc f() {}\n")

    assert first_syntax_error(tree.root_node) is None


def test_first_syntax_error_finds_broken_node() -> None:
    tree = parse_source(b"package bad\n\nfunc f( {\n")

    assert first_syntax_error(tree.root_node) is not None
