"""Analyzers over a parsed and resolved workspace."""

from analyzers.boolean_branching import BooleanBranchingAnalyzer
from analyzers.complexity import (
    COMPLEXITY_THRESHOLDS,
    ComplexityAnalyzer,
    classify_complexity,
)
from analyzers.deep_if_else import DeepIfElseAnalyzer
from analyzers.dependencies import analyze_dependencies
from analyzers.env_booleans import EnvBooleanAnalyzer
from analyzers.error_wrapping import ErrorWrappingAnalyzer
from analyzers.if_init import IfInitAnalyzer
from analyzers.missing_context import MissingContextAnalyzer
from analyzers.unused import UnusedAnalyzer

__all__ = [
    "COMPLEXITY_THRESHOLDS",
    "BooleanBranchingAnalyzer",
    "ComplexityAnalyzer",
    "DeepIfElseAnalyzer",
    "EnvBooleanAnalyzer",
    "ErrorWrappingAnalyzer",
    "IfInitAnalyzer",
    "MissingContextAnalyzer",
    "UnusedAnalyzer",
    "analyze_dependencies",
    "classify_complexity",
]
