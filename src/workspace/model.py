"""In-memory model of a parsed Go workspace.

A ``Workspace`` owns its packages; a ``Package`` owns its files; every
``File`` keeps a non-owning back-reference to its package. Syntax trees are
tree-sitter trees and are never mutated after parsing.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from workspace.positions import PositionRegistry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tree_sitter import Node, Tree

    from artifacts.models.artifacts.symbols import Symbol
    from workspace.positions import Position, RegisteredFile

GO_EXT = ".go"
TEST_SUFFIX = "_test.go"
GO_MOD = "go.mod"


@dataclass(frozen=True)
class Module:
    """Module descriptor read from ``go.mod``."""

    path: str
    go_mod: str
    go_version: str | None = None


class ModificationType(Enum):
    INSERT = "insert"
    DELETE = "delete"
    REPLACE = "replace"


@dataclass(frozen=True)
class Modification:
    """A pending byte-range edit to a file."""

    start: int
    end: int
    new_text: str
    type: ModificationType


@dataclass(eq=False)
class File:
    """A parsed Go source file."""

    path: str
    content: bytes
    tree: Tree
    registered: RegisteredFile
    package: Package | None = field(default=None, repr=False)
    modifications: list[Modification] = field(default_factory=list)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def name(self) -> str:
        return Path(self.path).name

    @property
    def is_test(self) -> bool:
        return self.path.endswith(TEST_SUFFIX)

    def pos(self, offset: int) -> int:
        """Registry position of a byte offset in this file."""
        return self.registered.pos(offset)

    def position(self, offset: int) -> Position:
        return self.registered.position(offset)

    def text(self, node: Node) -> str:
        return self.content[node.start_byte : node.end_byte].decode(
            "utf8", errors="replace"
        )

    def line_text(self, line: int) -> str:
        """Return the trimmed text of a 1-based line, or ``""``."""
        lines = self.content.split(b"\n")
        if line < 1 or line > len(lines):
            return ""
        return lines[line - 1].decode("utf8", errors="replace").strip()


@dataclass(eq=False)
class SymbolTable:
    """Package-level declarations bucketed by kind.

    Methods are keyed by receiver type name (or interface name for interface
    methods) because method names repeat across receivers.
    """

    functions: dict[str, Symbol] = field(default_factory=dict)
    types: dict[str, Symbol] = field(default_factory=dict)
    variables: dict[str, Symbol] = field(default_factory=dict)
    constants: dict[str, Symbol] = field(default_factory=dict)
    methods: dict[str, list[Symbol]] = field(default_factory=dict)

    def add_method(self, receiver: str, symbol: Symbol) -> None:
        self.methods.setdefault(receiver, []).append(symbol)

    def iter_symbols(self) -> Iterator[Symbol]:
        """Yield every symbol: functions, types, variables, constants, methods."""
        yield from self.functions.values()
        yield from self.types.values()
        yield from self.variables.values()
        yield from self.constants.values()
        for methods in self.methods.values():
            yield from methods

    def find(self, name: str) -> Symbol | None:
        for bucket in (self.functions, self.types, self.variables, self.constants):
            if name in bucket:
                return bucket[name]
        return None


@dataclass(eq=False)
class Package:
    """Sibling Go files in one directory sharing a package name."""

    name: str
    path: str
    import_path: str = ""
    files: dict[str, File] = field(default_factory=dict)
    test_files: dict[str, File] = field(default_factory=dict)
    imports: list[str] = field(default_factory=list)
    symbols: SymbolTable | None = None
    typed: Any = None
    type_info: Any = None

    @property
    def key(self) -> str:
        """Import path when known, else the directory."""
        return self.import_path or self.path

    def iter_files(self, *, include_tests: bool = True) -> Iterator[File]:
        yield from self.files.values()
        if include_tests:
            yield from self.test_files.values()


@dataclass(eq=False)
class Workspace:
    """Root aggregate of all packages under one directory tree."""

    root: str
    module: Module | None = None
    packages: dict[str, Package] = field(default_factory=dict)
    import_to_path: dict[str, str] = field(default_factory=dict)
    positions: PositionRegistry = field(default_factory=PositionRegistry)
    importer: Any = field(default=None, repr=False)
    check_lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def iter_files(self, *, include_tests: bool = True) -> Iterator[File]:
        for pkg in self.packages.values():
            yield from pkg.iter_files(include_tests=include_tests)

    def find_file(self, path: str) -> File | None:
        for file in self.iter_files():
            if file.path == path:
                return file
        return None

    def package_for_import(self, import_path: str) -> Package | None:
        fs_path = self.import_to_path.get(import_path)
        if fs_path is None:
            return None
        return self.packages.get(fs_path)


__all__ = [
    "GO_EXT",
    "GO_MOD",
    "TEST_SUFFIX",
    "File",
    "Modification",
    "ModificationType",
    "Module",
    "Package",
    "SymbolTable",
    "Workspace",
]
