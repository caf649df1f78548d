"""Parsing utilities for goscope-core."""

from parse.go_imports import (
    ImportSpec,
    default_package_name,
    extract_imports,
    package_clause_name,
)
from parse.treesitter_go import first_syntax_error, parse_source, walk
from parse.workspace_parser import (
    parse_file,
    parse_package,
    parse_workspace,
    read_go_mod,
)

__all__ = [
    "ImportSpec",
    "default_package_name",
    "extract_imports",
    "first_syntax_error",
    "package_clause_name",
    "parse_file",
    "parse_package",
    "parse_source",
    "parse_workspace",
    "read_go_mod",
    "walk",
]
