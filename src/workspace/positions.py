"""Shared position registry for parsed Go sources.

Every file registered here gets a contiguous, non-overlapping range of
integer positions, so a single ``int`` identifies a byte in any file of the
workspace. Registration is safe to call from parser worker threads.
"""

from __future__ import annotations

import bisect
import threading
from dataclasses import dataclass, field

NO_POS = 0


@dataclass(frozen=True)
class Position:
    """A resolved source location (1-based line and column)."""

    filename: str
    offset: int
    line: int
    column: int


@dataclass
class RegisteredFile:
    """A file's slot in the registry."""

    name: str
    base: int
    size: int
    line_starts: list[int] = field(default_factory=lambda: [0])

    def pos(self, offset: int) -> int:
        if offset < 0 or offset > self.size:
            msg = f"offset {offset} out of range for {self.name} (size {self.size})"
            raise ValueError(msg)
        return self.base + offset

    def offset(self, pos: int) -> int:
        if pos < self.base or pos > self.base + self.size:
            msg = f"position {pos} not in {self.name}"
            raise ValueError(msg)
        return pos - self.base

    def position(self, offset: int) -> Position:
        line_index = bisect.bisect_right(self.line_starts, offset) - 1
        column = offset - self.line_starts[line_index] + 1
        return Position(
            filename=self.name,
            offset=offset,
            line=line_index + 1,
            column=column,
        )


class PositionRegistry:
    """Monotonic file/line/column table shared by every AST in a workspace."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._base = 1
        self._files: list[RegisteredFile] = []
        self._bases: list[int] = []

    def add_file(self, name: str, content: bytes) -> RegisteredFile:
        """Reserve a position range for ``content`` and index its line starts."""
        line_starts = [0]
        line_starts.extend(i + 1 for i, b in enumerate(content) if b == 0x0A)

        with self._lock:
            registered = RegisteredFile(
                name=name,
                base=self._base,
                size=len(content),
                line_starts=line_starts,
            )
            # +1 so that the end-of-file position stays inside the slot
            self._base += len(content) + 1
            self._files.append(registered)
            self._bases.append(registered.base)

        return registered

    def file(self, pos: int) -> RegisteredFile | None:
        if pos == NO_POS:
            return None
        with self._lock:
            index = bisect.bisect_right(self._bases, pos) - 1
            if index < 0:
                return None
            candidate = self._files[index]
        if pos > candidate.base + candidate.size:
            return None
        return candidate

    def position(self, pos: int) -> Position | None:
        registered = self.file(pos)
        if registered is None:
            return None
        return registered.position(registered.offset(pos))

    def __len__(self) -> int:
        with self._lock:
            return len(self._files)


__all__ = ["NO_POS", "Position", "PositionRegistry", "RegisteredFile"]
