"""Import dependency analysis between workspace packages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from artifacts.models.artifacts.dependencies import DependencyReport
from graph.algos import build_import_graph, find_cycles, transitive_closure

if TYPE_CHECKING:
    from workspace.model import Workspace

logger = logging.getLogger(__name__)


def analyze_dependencies(ws: Workspace) -> DependencyReport:
    """Summarize direct, transitive and external imports of every package.

    Import cycles between workspace packages are reported and logged; Go
    rejects them at build time, so any cycle here is a real defect.
    """
    graph = build_import_graph(ws)
    closure = transitive_closure(graph)

    external: dict[str, list[str]] = {}
    for pkg in ws.packages.values():
        outside = sorted(
            {path for path in pkg.imports if ws.package_for_import(path) is None}
        )
        if outside:
            external[pkg.key] = outside

    cycles = find_cycles(graph)
    for cycle in cycles:
        logger.warning("import cycle: %s", " -> ".join([*cycle, cycle[0]]))

    return DependencyReport(
        package_imports={key: sorted(edges) for key, edges in sorted(graph.items())},
        package_deps={key: sorted(deps) for key, deps in sorted(closure.items())},
        external_imports=dict(sorted(external.items())),
        cycles=cycles,
    )


__all__ = ["analyze_dependencies"]
