"""Stable report contract surface for goscope-core.

Treat these exports as the authoritative boundary for consumers of the
written reports.
"""

from contract.artifacts import (
    ARTIFACT_SCHEMA_VERSION,
    BOOLEAN_BRANCHING_JSONL,
    COMPLEXITY_JSONL,
    DEEP_IF_ELSE_JSONL,
    DEPENDENCIES_JSON,
    ENV_BOOLEANS_JSONL,
    ERROR_WRAPPING_JSONL,
    IF_INIT_JSONL,
    MISSING_CONTEXT_JSONL,
    REPORT_SPECS,
    SYMBOLS_JSONL,
    UNUSED_JSONL,
    ReportSpec,
    build_diagnostic_id,
    build_symbol_id,
)

__all__ = [
    "ARTIFACT_SCHEMA_VERSION",
    "BOOLEAN_BRANCHING_JSONL",
    "COMPLEXITY_JSONL",
    "DEEP_IF_ELSE_JSONL",
    "DEPENDENCIES_JSON",
    "ENV_BOOLEANS_JSONL",
    "ERROR_WRAPPING_JSONL",
    "IF_INIT_JSONL",
    "MISSING_CONTEXT_JSONL",
    "REPORT_SPECS",
    "SYMBOLS_JSONL",
    "UNUSED_JSONL",
    "ReportSpec",
    "build_diagnostic_id",
    "build_symbol_id",
]
