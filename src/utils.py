"""Shared utilities for goscope-core."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from workspace.model import Workspace


def is_exported(name: str) -> bool:
    """Return True when ``name`` starts with an uppercase Unicode letter.

    Examples:
        >>> is_exported("Handler")
        True
        >>> is_exported("handler")
        False
        >>> is_exported("Ärger")
        True
        >>> is_exported("_Hidden")
        False
    """
    return bool(name) and name[0].isupper()


def compute_import_path(ws: Workspace, fs_path: str) -> str:
    """Compute the import path of the package directory ``fs_path``.

    The module root maps to the module prefix itself; any other directory
    maps to ``<module>/<slash-separated relative path>``. Without a module
    descriptor there is no import path and ``""`` is returned.
    """
    if ws.module is None:
        return ""
    try:
        rel_path = Path(fs_path).relative_to(ws.root)
    except ValueError:
        return ws.module.path
    if not rel_path.parts:
        return ws.module.path
    return f"{ws.module.path}/{rel_path.as_posix()}"


def resolve_package_path(ws: Workspace, user_path: str) -> str:
    """Resolve a user-supplied package reference to a workspace package key.

    Tried in order: exact key, path relative to the workspace root, ``"."``
    for the root package, import path, then the declared package name when
    exactly one package carries it. Unmatched input is returned unchanged.
    """
    if user_path in ws.packages:
        return user_path

    joined = os.path.normpath(os.path.join(ws.root, user_path))
    if joined in ws.packages:
        return joined

    if user_path == "." and ws.root in ws.packages:
        return ws.root

    if user_path in ws.import_to_path:
        return ws.import_to_path[user_path]

    matches = [key for key, pkg in ws.packages.items() if pkg.name == user_path]
    if len(matches) == 1:
        return matches[0]

    return user_path


__all__ = ["compute_import_path", "is_exported", "resolve_package_path"]
