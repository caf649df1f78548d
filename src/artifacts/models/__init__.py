"""Model namespace for goscope-core record schemas."""

from artifacts.models.artifacts.dependencies import DependencyReport
from artifacts.models.artifacts.diagnostics import (
    BooleanBranchingViolation,
    ComplexityLevel,
    ComplexityMetrics,
    ComplexityResult,
    DeepIfElseViolation,
    EnvBooleanViolation,
    ErrorWrappingViolation,
    IfInitViolation,
    MissingContextViolation,
    UnusedSymbol,
)
from artifacts.models.artifacts.symbols import (
    RefContext,
    Reference,
    Symbol,
    SymbolKind,
)

__all__ = [
    "BooleanBranchingViolation",
    "ComplexityLevel",
    "ComplexityMetrics",
    "ComplexityResult",
    "DeepIfElseViolation",
    "DependencyReport",
    "EnvBooleanViolation",
    "ErrorWrappingViolation",
    "IfInitViolation",
    "MissingContextViolation",
    "RefContext",
    "Reference",
    "Symbol",
    "SymbolKind",
    "UnusedSymbol",
]
