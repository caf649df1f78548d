"""Graph algorithms for goscope-core package import graphs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from workspace.model import Workspace


def build_import_graph(ws: Workspace) -> dict[str, set[str]]:
    """Build the workspace-internal import graph.

    Args:
        ws: Parsed workspace

    Returns:
        Dictionary mapping each package key to the keys of the workspace
        packages it imports. Imports that leave the workspace are dropped.
    """
    graph: dict[str, set[str]] = {}
    for pkg in ws.packages.values():
        edges = graph.setdefault(pkg.key, set())
        for import_path in pkg.imports:
            target = ws.package_for_import(import_path)
            if target is not None:
                edges.add(target.key)
    return graph


def transitive_closure(graph: dict[str, set[str]]) -> dict[str, set[str]]:
    """Return every node reachable from each node (the node itself excluded
    unless it sits on a cycle)."""
    closure: dict[str, set[str]] = {}
    for start in graph:
        seen: set[str] = set()
        stack = sorted(graph.get(start, set()))
        while stack:
            node = stack.pop()
            if node in seen:
                continue
            seen.add(node)
            stack.extend(sorted(graph.get(node, set()) - seen))
        closure[start] = seen
    return closure


class _TarjanState:
    """Mutable state container for Tarjan's SCC algorithm."""

    def __init__(self) -> None:
        self.index = 0
        self.indices: dict[str, int] = {}
        self.low_link: dict[str, int] = {}
        self.on_stack: set[str] = set()
        self.stack: list[str] = []
        self.sccs: list[list[str]] = []


def _extract_scc(state: _TarjanState, root: str) -> list[str]:
    """Pop one strongly connected component off the stack."""
    scc: list[str] = []
    while state.stack:
        w = state.stack.pop()
        state.on_stack.remove(w)
        scc.append(w)
        if w == root:
            break
    if root not in scc:
        msg = f"Tarjan invariant violated: root {root!r} missing from stack"
        raise RuntimeError(msg)
    return scc


def _strongconnect(node: str, graph: dict[str, set[str]], state: _TarjanState) -> None:
    state.indices[node] = state.index
    state.low_link[node] = state.index
    state.index += 1
    state.stack.append(node)
    state.on_stack.add(node)

    for neighbor in sorted(graph.get(node, set())):
        if neighbor not in state.indices:
            _strongconnect(neighbor, graph, state)
            state.low_link[node] = min(state.low_link[node], state.low_link[neighbor])
        elif neighbor in state.on_stack:
            state.low_link[node] = min(state.low_link[node], state.indices[neighbor])

    if state.low_link[node] == state.indices[node]:
        scc = _extract_scc(state, node)
        if len(scc) > 1 or node in graph.get(node, set()):
            state.sccs.append(sorted(scc))


def find_cycles(graph: dict[str, set[str]]) -> list[list[str]]:
    """Find import cycles using Tarjan's algorithm.

    Args:
        graph: Dictionary representing the graph

    Returns:
        Strongly connected components with more than one node (or a
        self-loop), each sorted, in discovery order over sorted nodes.
    """
    state = _TarjanState()

    for node in sorted(graph):
        if node not in state.indices:
            _strongconnect(node, graph, state)

    return state.sccs


__all__ = ["build_import_graph", "find_cycles", "transitive_closure"]
