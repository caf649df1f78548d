"""Diagnostic records produced by the analyzers."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from artifacts.models.artifacts.symbols import Symbol  # noqa: TC001
from contract.artifacts import ARTIFACT_SCHEMA_VERSION

ComplexityLevel = Literal["low", "moderate", "high", "very_high", "extreme"]
ErrorWrappingSeverity = Literal["critical", "warning", "info"]
ErrorWrappingViolationType = Literal[
    "bare_return", "format_verb_v_instead_of_w", "no_context"
]
EnvPattern = Literal["interface_implementation", "concrete_value"]


class UnusedSymbol(BaseModel):
    """A declared symbol with no reference anywhere in the workspace."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    symbol: Symbol
    reason: str
    safe_to_delete: bool


class ComplexityMetrics(BaseModel):
    """Per-function complexity metrics."""

    cyclomatic_complexity: int = 1
    cognitive_complexity: int = 0
    lines_of_code: int = 0
    parameters: int = 0
    local_variables: int = 0
    nested_blocks: int = 0
    max_nesting_depth: int = 0


class ComplexityResult(BaseModel):
    """Complexity analysis for one function or method."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    function: Symbol
    metrics: ComplexityMetrics
    file: str
    line: int
    column: int
    level: ComplexityLevel


class IfInitViolation(BaseModel):
    """An ``if`` statement whose initializer introduces new bindings."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    file: str
    line: int
    column: int
    function: str
    variables: list[str]
    expression: str
    snippet: str = ""


class BooleanBranchingViolation(BaseModel):
    """Boolean locals derived from one scalar that drive an if/else-if chain."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    file: str
    line: int
    column: int
    function: str
    source_variable: str
    boolean_variables: list[str]
    branch_count: int
    suggestion: str = ""


class DeepIfElseViolation(BaseModel):
    """An if/else chain nested deeper than guard clauses would need."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    file: str
    line: int
    column: int
    function: str
    nesting_depth: int
    happy_path_depth: int
    error_branches: int
    complexity_reduction_percent: int
    suggestion: str = ""


class ErrorWrappingViolation(BaseModel):
    """A returned error that loses or hides its cause."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    file: str
    line: int
    column: int
    function: str
    violation_type: ErrorWrappingViolationType
    current_code: str
    context_suggestion: str
    severity: ErrorWrappingSeverity


class MissingContextViolation(BaseModel):
    """A function that creates a root context instead of accepting one."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    file: str
    line: int
    column: int
    function: str
    signature: str
    context_calls: list[str]


class EnvBooleanViolation(BaseModel):
    """An environment flag parameter threaded through calls."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    file: str
    line: int
    column: int
    function: str
    parameter_name: str
    parameter_type: str = "bool"
    propagation_depth: int
    call_chain: list[str]
    suggested_pattern: EnvPattern
    suggestion: str


__all__ = [
    "BooleanBranchingViolation",
    "ComplexityLevel",
    "ComplexityMetrics",
    "ComplexityResult",
    "DeepIfElseViolation",
    "EnvBooleanViolation",
    "EnvPattern",
    "ErrorWrappingSeverity",
    "ErrorWrappingViolation",
    "ErrorWrappingViolationType",
    "IfInitViolation",
    "MissingContextViolation",
    "UnusedSymbol",
]
