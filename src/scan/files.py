"""Package directory discovery for goscope-core."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

from workspace.errors import FileSystemError
from workspace.model import GO_EXT

if TYPE_CHECKING:
    from collections.abc import Callable

SKIPPED_DIR_NAMES = frozenset({"vendor"})


def _is_skipped_dir(name: str) -> bool:
    return name.startswith(".") or name in SKIPPED_DIR_NAMES


def _build_gitignore_matcher(root: Path) -> Callable[[str], bool] | None:
    gitignore_path = root / ".gitignore"
    if gitignore_path.is_file() and not gitignore_path.is_symlink():
        return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
    return None


def has_go_files(directory: Path) -> bool:
    """Return True when ``directory`` directly contains a ``.go`` file."""
    try:
        with os.scandir(directory) as entries:
            return any(
                entry.name.endswith(GO_EXT) and not entry.is_dir()
                for entry in entries
            )
    except OSError as exc:
        msg = f"failed to read directory: {exc}"
        raise FileSystemError(msg, file=str(directory), cause=exc) from exc


def list_go_files(directory: Path) -> list[Path]:
    """Return the ``.go`` files directly inside ``directory``, sorted by name."""
    try:
        with os.scandir(directory) as entries:
            names = sorted(
                entry.name
                for entry in entries
                if entry.name.endswith(GO_EXT) and not entry.is_dir()
            )
    except OSError as exc:
        msg = f"failed to read directory: {exc}"
        raise FileSystemError(msg, file=str(directory), cause=exc) from exc
    return [directory / name for name in names]


def find_package_dirs(
    root: Path,
    *,
    respect_gitignore: bool = False,
) -> list[Path]:
    """Find every directory under ``root`` that holds Go source files.

    Hidden directories (leading ``.``) and ``vendor`` directories are pruned,
    as are directories matched by the root ``.gitignore`` when
    ``respect_gitignore`` is set. Symlinked directories are not followed.

    Returns:
        Package directories in path order (``root`` first when it qualifies).

    Raises:
        FileSystemError: If any directory cannot be read.
    """
    gitignore_matches = _build_gitignore_matcher(root) if respect_gitignore else None

    def _raise(exc: OSError) -> None:
        msg = f"failed to walk workspace: {exc}"
        raise FileSystemError(msg, file=exc.filename or str(root), cause=exc) from exc

    if not root.is_dir():
        msg = "workspace root is not a directory"
        raise FileSystemError(msg, file=str(root))

    package_dirs: list[Path] = []
    for dirpath, dirnames, _filenames in os.walk(root, onerror=_raise):
        current = Path(dirpath)
        kept: list[str] = []
        for name in sorted(dirnames):
            if _is_skipped_dir(name):
                continue
            if gitignore_matches is not None and gitignore_matches(
                str(current / name)
            ):
                continue
            kept.append(name)
        dirnames[:] = kept

        if has_go_files(current):
            package_dirs.append(current)

    return package_dirs


__all__ = ["find_package_dirs", "has_go_files", "list_go_files"]
