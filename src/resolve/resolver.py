"""Symbol lookup, reference search and definition lookup over a workspace."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from artifacts.models.artifacts.symbols import Reference, Symbol
from parse.go_imports import extract_imports
from parse.treesitter_go import IDENTIFIER_TYPES, node_text, walk
from resolve.references import ReferenceIndex, build_reference_index, classify_occurrence
from resolve.symbol_table import build_symbol_table
from typecheck.importer import ensure_type_checked
from workspace.errors import SymbolNotFound

if TYPE_CHECKING:
    from tree_sitter import Node

    from typecheck.objects import Object
    from workspace.model import File, Package, SymbolTable, Workspace


class SymbolResolver:
    """Builds symbol tables and answers symbol queries for one workspace.

    Reference search matches identifiers by name. When a package has type
    information, its use-map decides for the identifiers it covers;
    everything else falls back to name matching, which ignores shadowing.
    """

    def __init__(self, ws: Workspace, *, use_types: bool = True) -> None:
        self.ws = ws
        self.use_types = use_types
        self._index: ReferenceIndex | None = None

    # -- symbol tables -------------------------------------------------------

    def build_symbol_table(self, pkg: Package, *, include_tests: bool = False) -> SymbolTable:
        table = build_symbol_table(pkg, include_tests=include_tests)
        pkg.symbols = table
        return table

    def build_all(self, *, include_tests: bool = False) -> None:
        for pkg in self.ws.packages.values():
            self.build_symbol_table(pkg, include_tests=include_tests)

    def _table(self, pkg: Package) -> SymbolTable:
        if pkg.symbols is None:
            return self.build_symbol_table(pkg)
        return pkg.symbols

    # -- lookup --------------------------------------------------------------

    def resolve(self, pkg: Package, name: str) -> Symbol:
        """Resolve ``Name`` or ``Type.Method`` inside ``pkg``.

        Raises:
            SymbolNotFound: If nothing matches, or a bare method name is
                defined on several receivers.
        """
        table = self._table(pkg)

        if "." in name:
            type_name, _, method_name = name.partition(".")
            for method in table.methods.get(type_name, []):
                if method.name == method_name:
                    return method
            msg = f"method {name} not found in package {pkg.name}"
            raise SymbolNotFound(msg, file=pkg.path)

        symbol = table.find(name)
        if symbol is not None:
            return symbol

        candidates = [
            method
            for methods in table.methods.values()
            for method in methods
            if method.name == name
        ]
        if len(candidates) == 1:
            return candidates[0]
        if candidates:
            suggestions = ", ".join(sorted(m.qualified_name for m in candidates))
            msg = f"method name {name} is ambiguous in package {pkg.name}; use one of: {suggestions}"
            raise SymbolNotFound(msg, file=pkg.path)

        msg = f"symbol {name} not found in package {pkg.name}"
        raise SymbolNotFound(msg, file=pkg.path)

    # -- references ----------------------------------------------------------

    def build_reference_index(self) -> ReferenceIndex:
        self._index = build_reference_index(self.ws)
        return self._index

    @property
    def index(self) -> ReferenceIndex:
        if self._index is None:
            return self.build_reference_index()
        return self._index

    def _symbol_offset(self, symbol: Symbol) -> int:
        registered = self.ws.positions.file(symbol.position)
        if registered is None:
            return -1
        return registered.offset(symbol.position)

    def _file_package(self, path: str) -> Package | None:
        file = self.ws.find_file(path)
        return file.package if file is not None else None

    def find_references(self, symbol: Symbol) -> list[Reference]:
        """Return every use-site of ``symbol`` in the workspace.

        Declaration sites are not references. Results follow the workspace
        walk order (packages in discovery order, files by name).
        """
        target_offset = self._symbol_offset(symbol)
        references: list[Reference] = []
        packages: dict[str, Package | None] = {}

        for entry in self.index.uses(symbol.name):
            if entry.file not in packages:
                packages[entry.file] = self._file_package(entry.file)
            pkg = packages[entry.file]

            info = None
            if pkg is not None and self.use_types:
                ensure_type_checked(self.ws, pkg)
                info = pkg.type_info

            obj = info.uses.get((entry.file, entry.offset)) if info is not None else None
            if obj is not None and not (
                obj.file == symbol.file and obj.offset == target_offset
            ):
                continue

            references.append(
                Reference(
                    symbol=symbol,
                    file=entry.file,
                    line=entry.line,
                    column=entry.column,
                    offset=entry.offset,
                    context=entry.context,
                )
            )
        return references

    # -- definitions ---------------------------------------------------------

    def find_definition(self, path: str, offset: int) -> Symbol:
        """Resolve the identifier at byte ``offset`` of ``path`` to its symbol.

        Raises:
            SymbolNotFound: If the file is unknown, no identifier covers the
                offset, or the name does not resolve.
        """
        file = self.ws.find_file(path) or self.ws.find_file(str(Path(path).resolve()))
        if file is None or file.package is None:
            msg = "file not found in workspace"
            raise SymbolNotFound(msg, file=path)

        ident = _identifier_at(file, offset)
        if ident is None:
            msg = f"no identifier at offset {offset}"
            raise SymbolNotFound(msg, file=path)

        if self.use_types:
            symbol = self._definition_from_types(file, ident)
            if symbol is not None:
                return symbol

        name = node_text(ident)
        _context, qualifier = classify_occurrence(ident)
        if qualifier:
            imported = self._imported_package(file, qualifier)
            if imported is not None:
                return self.resolve(imported, name)
        return self.resolve(file.package, name)

    def _definition_from_types(self, file: File, ident: Node) -> Symbol | None:
        assert file.package is not None
        ensure_type_checked(self.ws, file.package)
        info = file.package.type_info
        if info is None:
            return None
        key = (file.path, ident.start_byte)
        obj = info.uses.get(key) or info.defs.get(key)
        if obj is None or not obj.is_declared:
            return None
        return self._symbol_for_object(obj)

    def _symbol_for_object(self, obj: Object) -> Symbol | None:
        for pkg in self.ws.packages.values():
            if pkg.key != obj.package:
                continue
            for symbol in self._table(pkg).iter_symbols():
                if symbol.file == obj.file and self._symbol_offset(symbol) == obj.offset:
                    return symbol
        return None

    def _imported_package(self, file: File, qualifier: str) -> Package | None:
        for spec in extract_imports(file.root):
            if spec.local_name == qualifier:
                return self.ws.package_for_import(spec.path)
        return None


def _identifier_at(file: File, offset: int) -> Node | None:
    found: Node | None = None
    for node in walk(file.root):
        if node.start_byte > offset:
            break
        if node.type in IDENTIFIER_TYPES and node.start_byte <= offset < node.end_byte:
            found = node
    return found


__all__ = ["SymbolResolver"]
