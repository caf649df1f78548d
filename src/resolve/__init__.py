"""Symbol tables, reference indexing and symbol resolution."""

from resolve.references import (
    IndexEntry,
    ReferenceIndex,
    build_reference_index,
    classify_occurrence,
)
from resolve.resolver import SymbolResolver
from resolve.symbol_table import build_signature, build_symbol_table

__all__ = [
    "IndexEntry",
    "ReferenceIndex",
    "SymbolResolver",
    "build_reference_index",
    "build_signature",
    "build_symbol_table",
    "classify_occurrence",
]
