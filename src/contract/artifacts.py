"""Report contract definitions.

This module defines the stable filenames and identifier formats of the
reports written by goscope-core.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Report schema version (bump on any breaking record change).
ARTIFACT_SCHEMA_VERSION = 1

# Report filename constants (stable contract identifiers).
SYMBOLS_JSONL = "symbols.jsonl"
UNUSED_JSONL = "unused.jsonl"
COMPLEXITY_JSONL = "complexity.jsonl"
IF_INIT_JSONL = "if_init.jsonl"
BOOLEAN_BRANCHING_JSONL = "boolean_branching.jsonl"
DEEP_IF_ELSE_JSONL = "deep_if_else.jsonl"
ERROR_WRAPPING_JSONL = "error_wrapping.jsonl"
MISSING_CONTEXT_JSONL = "missing_context.jsonl"
ENV_BOOLEANS_JSONL = "env_booleans.jsonl"
DEPENDENCIES_JSON = "dependencies.json"


@dataclass
class ReportSpec:
    """Specification for a written report file."""

    filename: str
    format: str
    required_fields_note: str


# ---------------------------------------------------------------------------
# Deterministic identifiers
# ---------------------------------------------------------------------------
# symbol_id:     sym:{path}::{package}.{qualified}@L{line}:C{col}
# diagnostic_id: diag:{kind}:{path}@L{line}:C{col}:{subject}
# - path: POSIX path relative to the workspace root
# - line/col: 1-based integers

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_expr(raw_expr: str) -> str:
    """Collapse whitespace runs so rendered expressions are single-line."""
    return _WHITESPACE_RUN.sub(" ", raw_expr.strip())


def build_symbol_id(
    path: str,
    package: str,
    qualified_name: str,
    line: int,
    column: int,
) -> str:
    """Build a deterministic symbol id.

    Format: ``sym:{path}::{package}.{qualified_name}@L{line}:C{column}``
    """
    return f"sym:{path}::{package}.{qualified_name}@L{line}:C{column}"


def build_diagnostic_id(
    kind: str,
    path: str,
    line: int,
    column: int,
    subject: str,
) -> str:
    """Build a deterministic diagnostic id.

    Format: ``diag:{kind}:{path}@L{line}:C{column}:{normalized_subject}``
    """
    return f"diag:{kind}:{path}@L{line}:C{column}:{normalize_expr(subject)}"


REPORT_SPECS: dict[str, ReportSpec] = {
    "symbols": ReportSpec(
        filename=SYMBOLS_JSONL,
        format="jsonl",
        required_fields_note="Symbol fields required by contract.",
    ),
    "unused": ReportSpec(
        filename=UNUSED_JSONL,
        format="jsonl",
        required_fields_note="UnusedSymbol fields required by contract.",
    ),
    "complexity": ReportSpec(
        filename=COMPLEXITY_JSONL,
        format="jsonl",
        required_fields_note="ComplexityResult fields required by contract.",
    ),
    "if_init": ReportSpec(
        filename=IF_INIT_JSONL,
        format="jsonl",
        required_fields_note="IfInitViolation fields required by contract.",
    ),
    "boolean_branching": ReportSpec(
        filename=BOOLEAN_BRANCHING_JSONL,
        format="jsonl",
        required_fields_note="BooleanBranchingViolation fields required by contract.",
    ),
    "deep_if_else": ReportSpec(
        filename=DEEP_IF_ELSE_JSONL,
        format="jsonl",
        required_fields_note="DeepIfElseViolation fields required by contract.",
    ),
    "error_wrapping": ReportSpec(
        filename=ERROR_WRAPPING_JSONL,
        format="jsonl",
        required_fields_note="ErrorWrappingViolation fields required by contract.",
    ),
    "missing_context": ReportSpec(
        filename=MISSING_CONTEXT_JSONL,
        format="jsonl",
        required_fields_note="MissingContextViolation fields required by contract.",
    ),
    "env_booleans": ReportSpec(
        filename=ENV_BOOLEANS_JSONL,
        format="jsonl",
        required_fields_note="EnvBooleanViolation fields required by contract.",
    ),
    "dependencies": ReportSpec(
        filename=DEPENDENCIES_JSON,
        format="json",
        required_fields_note="DependencyReport fields required by contract.",
    ),
}
