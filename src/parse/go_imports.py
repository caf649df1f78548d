"""Import declaration analysis for Go files."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from parse.treesitter_go import node_text, string_literal_value

if TYPE_CHECKING:
    from tree_sitter import Node

_VERSION_PREFIXES = ("go-",)


@dataclass(frozen=True)
class ImportSpec:
    """A single ``import`` entry of a file."""

    path: str
    alias: str | None
    line: int

    @property
    def local_name(self) -> str:
        """Name the import is referred to by inside the file.

        Examples:
            >>> ImportSpec("fmt", None, 1).local_name
            'fmt'
            >>> ImportSpec("example.com/m/v2", None, 1).local_name
            'm'
            >>> ImportSpec("gopkg.in/yaml.v3", None, 1).local_name
            'yaml'
            >>> ImportSpec("net/http", "h", 1).local_name
            'h'
        """
        if self.alias:
            return self.alias
        return default_package_name(self.path)


def default_package_name(import_path: str) -> str:
    """Guess the package name of an import path from its last element."""
    parts = [part for part in import_path.split("/") if part]
    if not parts:
        return import_path
    last = parts[-1]
    if len(parts) > 1 and last.startswith("v") and last[1:].isdigit():
        last = parts[-2]
    if ".v" in last:
        head, _, tail = last.rpartition(".v")
        if tail.isdigit():
            last = head
    for prefix in _VERSION_PREFIXES:
        if last.startswith(prefix) and len(last) > len(prefix):
            last = last[len(prefix) :]
    return last.replace("-", "_")


def extract_imports(root: Node) -> list[ImportSpec]:
    """Extract import specs from a ``source_file`` node, in source order."""
    imports: list[ImportSpec] = []
    for declaration in root.named_children:
        if declaration.type != "import_declaration":
            continue
        for spec in _iter_import_specs(declaration):
            path_node = spec.child_by_field_name("path")
            if path_node is None:
                continue
            name_node = spec.child_by_field_name("name")
            imports.append(
                ImportSpec(
                    path=string_literal_value(path_node),
                    alias=node_text(name_node) if name_node is not None else None,
                    line=spec.start_point[0] + 1,
                )
            )
    return imports


def _iter_import_specs(declaration: Node) -> list[Node]:
    specs: list[Node] = []
    for child in declaration.named_children:
        if child.type == "import_spec":
            specs.append(child)
        elif child.type == "import_spec_list":
            specs.extend(c for c in child.named_children if c.type == "import_spec")
    return specs


def package_clause_name(root: Node) -> str:
    """Declared package name of a ``source_file`` node, or ``""``."""
    for child in root.named_children:
        if child.type == "package_clause":
            for part in child.named_children:
                if part.type == "package_identifier":
                    return node_text(part)
    return ""


__all__ = [
    "ImportSpec",
    "default_package_name",
    "extract_imports",
    "package_clause_name",
]
