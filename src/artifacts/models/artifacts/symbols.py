"""Symbol models for Go declarations and their use-sites.

This module contains models for representing package-level declarations
(functions, methods, types, interfaces, variables, constants, fields) and the
references that point at them.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from contract.artifacts import ARTIFACT_SCHEMA_VERSION, build_symbol_id
from utils import is_exported

SymbolKind = Literal[
    "function",
    "method",
    "type",
    "interface",
    "variable",
    "constant",
    "field",
]

RefContext = Literal["call", "selector", "field", "type-use", "generic"]


class Symbol(BaseModel):
    """A named declaration in a Go package."""

    model_config = ConfigDict(frozen=True)

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    name: str
    kind: SymbolKind
    package: str = Field(description="Import path (or directory) of the owner")
    file: str
    position: int = Field(description="Registry position of the name")
    end: int = Field(description="Registry position just past the declaration")
    line: int
    column: int
    exported: bool
    signature: str | None = None
    receiver: str | None = Field(
        default=None,
        description="Receiver type name for methods (interface name for "
        "interface methods)",
    )

    @model_validator(mode="after")
    def _check_exported(self) -> Symbol:
        if self.exported != is_exported(self.name):
            msg = f"exported flag disagrees with name {self.name!r}"
            raise ValueError(msg)
        return self

    @property
    def qualified_name(self) -> str:
        if self.receiver:
            return f"{self.receiver}.{self.name}"
        return self.name

    def symbol_id(self, relative_path: str) -> str:
        return build_symbol_id(
            relative_path, self.package, self.qualified_name, self.line, self.column
        )


class Reference(BaseModel):
    """A use-site of a symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    file: str
    line: int
    column: int
    offset: int = Field(description="Byte offset within the file")
    context: RefContext = "generic"


__all__ = ["RefContext", "Reference", "Symbol", "SymbolKind"]
