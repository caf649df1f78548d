"""Finds declared symbols that are never referenced in the workspace."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from artifacts.models.artifacts.diagnostics import UnusedSymbol
from resolve.references import ReferenceIndex, build_reference_index, index_file
from resolve.symbol_table import build_symbol_table
from workspace.model import TEST_SUFFIX

if TYPE_CHECKING:
    from collections.abc import Iterable

    from artifacts.models.artifacts.symbols import Symbol
    from workspace.model import File, Package, Workspace

logger = logging.getLogger(__name__)

ENTRY_POINTS = frozenset({"init", "main"})
TEST_FUNCTION_PREFIXES = ("Test", "Benchmark", "Example", "Fuzz")

NO_REFERENCES = "No references found"


def is_entry_point(symbol: Symbol) -> bool:
    """True for symbols the Go toolchain calls on its own."""
    if symbol.name in ENTRY_POINTS:
        return True
    return symbol.file.endswith(TEST_SUFFIX) and symbol.name.startswith(
        TEST_FUNCTION_PREFIXES
    )


class UnusedAnalyzer:
    """Reports symbols whose name is never used anywhere.

    Matching is by name only: a symbol counts as used as soon as any
    identifier with the same spelling appears outside a declaration.
    """

    def __init__(self, *, include_exported: bool = False, include_tests: bool = False) -> None:
        self.include_exported = include_exported
        self.include_tests = include_tests

    def _symbols(self, pkg: Package) -> Iterable[Symbol]:
        if pkg.symbols is None:
            pkg.symbols = build_symbol_table(pkg, include_tests=self.include_tests)
        return pkg.symbols.iter_symbols()

    def _skip(self, symbol: Symbol) -> bool:
        if is_entry_point(symbol):
            return True
        return symbol.exported and not self.include_exported

    def analyze_package(
        self, pkg: Package, referenced: set[str] | None = None
    ) -> list[UnusedSymbol]:
        """Report unused symbols of ``pkg``.

        ``referenced`` is the set of used names; without it only the
        package's own files are searched.
        """
        if referenced is None:
            index = ReferenceIndex()
            for file in pkg.iter_files(include_tests=True):
                index_file(file, index)
            referenced = index.referenced_names()

        unused = [
            UnusedSymbol(
                symbol=symbol,
                reason=NO_REFERENCES,
                safe_to_delete=not symbol.exported,
            )
            for symbol in self._symbols(pkg)
            if not self._skip(symbol) and symbol.name not in referenced
        ]
        return sorted(unused, key=lambda u: (u.symbol.file, u.symbol.line, u.symbol.column))

    def analyze_file(
        self, file: File, referenced: set[str] | None = None
    ) -> list[UnusedSymbol]:
        if file.package is None:
            return []
        return [
            u
            for u in self.analyze_package(file.package, referenced)
            if u.symbol.file == file.path
        ]

    def analyze_workspace(
        self, ws: Workspace, index: ReferenceIndex | None = None
    ) -> list[UnusedSymbol]:
        if index is None:
            index = build_reference_index(ws)
        referenced = index.referenced_names()

        unused: list[UnusedSymbol] = []
        for pkg in ws.packages.values():
            unused.extend(self.analyze_package(pkg, referenced))
        logger.debug("unused analysis: %d symbols reported", len(unused))
        return unused


__all__ = [
    "ENTRY_POINTS",
    "NO_REFERENCES",
    "TEST_FUNCTION_PREFIXES",
    "UnusedAnalyzer",
    "is_entry_point",
]
