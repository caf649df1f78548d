"""Error types raised by the analysis pipeline."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Category of an analysis failure."""

    FILE_SYSTEM = "file_system"
    PARSE = "parse"
    SYMBOL_NOT_FOUND = "symbol_not_found"
    TYPE_CHECK = "type_check"
    INVALID_OPERATION = "invalid_operation"
    CYCLIC_DEPENDENCY = "cyclic_dependency"


class AnalysisError(Exception):
    """Base error carrying a kind, a message and an optional source location."""

    kind: ErrorKind = ErrorKind.INVALID_OPERATION

    def __init__(
        self,
        message: str,
        *,
        file: str | None = None,
        line: int = 0,
        column: int = 0,
        cause: BaseException | None = None,
        kind: ErrorKind | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.file = file
        self.line = line
        self.column = column
        self.cause = cause
        if kind is not None:
            self.kind = kind
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.file:
            return f"{self.file}:{self.line}:{self.column}: {self.message}"
        return self.message


class FileSystemError(AnalysisError):
    """Raised when the workspace cannot be read from disk."""

    kind = ErrorKind.FILE_SYSTEM


class ParseError(AnalysisError):
    """Raised when a file or package cannot be parsed."""

    kind = ErrorKind.PARSE


class SymbolNotFound(AnalysisError):
    """Raised when a name or position does not resolve to a symbol."""

    kind = ErrorKind.SYMBOL_NOT_FOUND


class TypeCheckError(AnalysisError):
    """Raised by the package checker when type errors were reported."""

    kind = ErrorKind.TYPE_CHECK


__all__ = [
    "AnalysisError",
    "ErrorKind",
    "FileSystemError",
    "ParseError",
    "SymbolNotFound",
    "TypeCheckError",
]
