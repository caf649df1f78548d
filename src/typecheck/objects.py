"""Objects, scopes and typed-package handles produced by the package checker."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Literal

ObjectKind = Literal[
    "package",
    "func",
    "method",
    "type",
    "var",
    "const",
    "builtin",
    "nil",
    "external",
]


@dataclass(eq=False)
class Object:
    """A named entity a Go identifier can denote."""

    name: str
    kind: ObjectKind
    package: str = ""
    file: str | None = None
    offset: int = -1
    type: str | None = None
    methods: dict[str, Object] = field(default_factory=dict, repr=False)
    imported: TypedPackage | None = field(default=None, repr=False)

    @property
    def is_declared(self) -> bool:
        """True for objects declared in workspace source (not universe/external)."""
        return self.file is not None and self.offset >= 0


@dataclass(eq=False)
class Scope:
    """A lexical scope with a link to its parent."""

    parent: Scope | None = None
    names: dict[str, Object] = field(default_factory=dict)

    def insert(self, obj: Object) -> Object | None:
        """Insert ``obj`` unless the name is taken; return the existing object."""
        existing = self.names.get(obj.name)
        if existing is not None:
            return existing
        self.names[obj.name] = obj
        return None

    def lookup(self, name: str) -> Object | None:
        scope: Scope | None = self
        while scope is not None:
            obj = scope.names.get(name)
            if obj is not None:
                return obj
            scope = scope.parent
        return None


@dataclass(eq=False)
class TypedPackage:
    """Type-checked package handle.

    ``complete`` is False while the package is still being checked (the
    placeholder seen through an import cycle). Opaque packages come from the
    external importer and answer every member lookup.
    """

    path: str
    name: str
    scope: Scope = field(default_factory=Scope)
    complete: bool = False
    opaque: bool = False
    _members: dict[str, Object] = field(default_factory=dict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def lookup(self, name: str) -> Object | None:
        if not self.opaque:
            return self.scope.names.get(name)
        with self._lock:
            obj = self._members.get(name)
            if obj is None:
                obj = Object(name=name, kind="external", package=self.path)
                self._members[name] = obj
            return obj


@dataclass
class TypeInfo:
    """Per-node results of a package check.

    Keys are ``(file path, start byte)`` for identifiers and
    ``(file path, start byte, end byte)`` for expressions.
    """

    types: dict[tuple[str, int, int], str] = field(default_factory=dict)
    defs: dict[tuple[str, int], Object | None] = field(default_factory=dict)
    uses: dict[tuple[str, int], Object] = field(default_factory=dict)


def _build_universe() -> Scope:
    universe = Scope()
    for name in (
        "any",
        "bool",
        "byte",
        "comparable",
        "complex64",
        "complex128",
        "error",
        "float32",
        "float64",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "rune",
        "string",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
    ):
        universe.insert(Object(name=name, kind="type", type=name))
    universe.insert(Object(name="true", kind="const", type="untyped bool"))
    universe.insert(Object(name="false", kind="const", type="untyped bool"))
    universe.insert(Object(name="iota", kind="const", type="untyped int"))
    universe.insert(Object(name="nil", kind="nil", type="untyped nil"))
    for name in (
        "append",
        "cap",
        "clear",
        "close",
        "complex",
        "copy",
        "delete",
        "imag",
        "len",
        "make",
        "max",
        "min",
        "new",
        "panic",
        "print",
        "println",
        "real",
        "recover",
    ):
        universe.insert(Object(name=name, kind="builtin"))
    return universe


UNIVERSE = _build_universe()


__all__ = ["UNIVERSE", "Object", "ObjectKind", "Scope", "TypeInfo", "TypedPackage"]
