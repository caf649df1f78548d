"""Import resolution for the package checker.

One ``WorkspaceImporter`` exists per workspace. Workspace packages are
checked on demand; every other import path is answered by the lazily
created ``ExternalImporter``.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from parse.go_imports import default_package_name
from typecheck.checker import PackageChecker
from typecheck.objects import TypedPackage, TypeInfo
from workspace.errors import TypeCheckError

if TYPE_CHECKING:
    from workspace.model import Package, Workspace

logger = logging.getLogger(__name__)


class ExternalImporter:
    """Importer for the standard library and third-party modules.

    No export data is read: each import path yields an opaque package whose
    member lookups always succeed. Handles are cached per path, so importing
    the same path twice returns the same object.
    """

    def __init__(self) -> None:
        self._packages: dict[str, TypedPackage] = {}
        self._lock = threading.Lock()

    def import_(self, path: str) -> TypedPackage:
        with self._lock:
            package = self._packages.get(path)
            if package is None:
                package = TypedPackage(
                    path=path,
                    name=default_package_name(path),
                    complete=True,
                    opaque=True,
                )
                self._packages[path] = package
            return package


class WorkspaceImporter:
    """Resolves imports against the workspace first, externally second."""

    def __init__(self, ws: Workspace) -> None:
        self.ws = ws
        self.checker = PackageChecker()
        self._external: ExternalImporter | None = None
        self._external_lock = threading.Lock()

    @property
    def external(self) -> ExternalImporter:
        if self._external is None:
            with self._external_lock:
                if self._external is None:
                    self._external = ExternalImporter()
        return self._external

    def import_(self, path: str) -> TypedPackage:
        """Return the typed package for ``path``.

        Raises:
            TypeCheckError: If a workspace package could not be checked at all.
        """
        pkg = self.ws.package_for_import(path)
        if pkg is None:
            return self.external.import_(path)

        if pkg.typed is None:
            ensure_type_checked(self.ws, pkg)
        if pkg.typed is not None:
            return pkg.typed

        partial = self.checker.lookup(pkg.key)
        if partial is None:
            msg = f"package {path} could not be checked"
            raise TypeCheckError(msg, file=pkg.path)
        return partial


def workspace_importer(ws: Workspace) -> WorkspaceImporter:
    """Return the workspace's importer, creating it on first use."""
    with ws.check_lock:
        if ws.importer is None:
            ws.importer = WorkspaceImporter(ws)
        return ws.importer


def ensure_type_checked(ws: Workspace, pkg: Package) -> None:
    """Type-check ``pkg`` once.

    On success the typed handle and the collected info are stored on the
    package. On failure only the partial info is stored and ``pkg.typed``
    stays None; later calls do not retry.
    """
    with ws.check_lock:
        if pkg.typed is not None or pkg.type_info is not None:
            return

        importer = workspace_importer(ws)
        info = TypeInfo()
        pkg.type_info = info
        files = list(pkg.files.values())

        try:
            pkg.typed = importer.checker.check(
                pkg.key,
                files,
                importer,
                lambda _err: None,
                info,
            )
        except TypeCheckError as exc:
            logger.debug("type check of %s failed, using AST only: %s", pkg.key, exc)


__all__ = [
    "ExternalImporter",
    "WorkspaceImporter",
    "ensure_type_checked",
    "workspace_importer",
]
