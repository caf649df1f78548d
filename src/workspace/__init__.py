"""Workspace model for goscope-core."""

from workspace.errors import (
    AnalysisError,
    ErrorKind,
    FileSystemError,
    ParseError,
    SymbolNotFound,
    TypeCheckError,
)
from workspace.model import (
    File,
    Modification,
    ModificationType,
    Module,
    Package,
    SymbolTable,
    Workspace,
)
from workspace.positions import Position, PositionRegistry

__all__ = [
    "AnalysisError",
    "ErrorKind",
    "File",
    "FileSystemError",
    "Modification",
    "ModificationType",
    "Module",
    "Package",
    "ParseError",
    "Position",
    "PositionRegistry",
    "SymbolNotFound",
    "SymbolTable",
    "TypeCheckError",
    "Workspace",
]
