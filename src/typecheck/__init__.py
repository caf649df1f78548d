"""On-demand type checking of workspace packages."""

from typecheck.checker import PackageChecker
from typecheck.importer import (
    ExternalImporter,
    WorkspaceImporter,
    ensure_type_checked,
    workspace_importer,
)
from typecheck.objects import UNIVERSE, Object, Scope, TypedPackage, TypeInfo

__all__ = [
    "UNIVERSE",
    "ExternalImporter",
    "Object",
    "PackageChecker",
    "Scope",
    "TypeInfo",
    "TypedPackage",
    "WorkspaceImporter",
    "ensure_type_checked",
    "workspace_importer",
]
