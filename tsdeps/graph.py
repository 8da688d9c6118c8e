"""Dependency graph builder: builds the file graph from FileAnalysis records, detects cycles."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tsdeps.language_map import strip_source_extension
from tsdeps.models import (
    Cycle,
    DependencyGraph,
    Edge,
    EdgeType,
    FileAnalysis,
    Node,
)

logger = logging.getLogger(__name__)


class DependencyGraphBuilder:
    """Build a dependency graph from per-file analyses."""

    def build(self, analyses: Sequence[FileAnalysis]) -> DependencyGraph:
        graph = DependencyGraph()

        # Step 1: Build nodes and path indexes
        files = [f for f in analyses if _is_well_formed(f)]
        if len(files) != len(analyses):
            logger.debug("Skipping %d malformed analysis entries", len(analyses) - len(files))

        by_path: dict[str, FileAnalysis] = {}
        by_stem: dict[str, FileAnalysis] = {}
        for analysis in files:
            graph.nodes[analysis.path] = _make_node(analysis)
            graph.dependents.setdefault(analysis.path, [])
            by_path.setdefault(analysis.path, analysis)
            by_stem.setdefault(strip_source_extension(analysis.path), analysis)

        # Step 2: Build edges from resolved dependencies
        for analysis in files:
            for dep in analysis.dependencies:
                target = by_path.get(dep) or by_stem.get(strip_source_extension(dep))
                if target is None:
                    continue
                self._add_edge(graph, analysis.path, target.path)
                if target.path not in graph.nodes:
                    graph.nodes[target.path] = _make_node(target)

        # Step 3: Cycles
        graph.cycles = self.detect_cycles(graph)
        return graph

    def detect_cycles(self, graph: DependencyGraph) -> list[Cycle]:
        """Find cycles closed by DFS back edges.

        Nodes stay visited across DFS roots, so this reports whether a file
        takes part in some cycle rather than enumerating every elementary
        cycle. Cycles with the same vertex set are reported once.
        """
        cycles: list[Cycle] = []
        seen: set[frozenset[str]] = set()
        visited: set[str] = set()
        on_path: set[str] = set()
        path: list[str] = []

        for root in graph.nodes:
            if root in visited:
                continue

            visited.add(root)
            on_path.add(root)
            path.append(root)
            stack = [iter(graph.edges.get(root, []))]

            while stack:
                edge = next(stack[-1], None)
                if edge is None:
                    stack.pop()
                    on_path.discard(path.pop())
                    continue

                neighbor = edge.target
                if neighbor not in visited:
                    visited.add(neighbor)
                    on_path.add(neighbor)
                    path.append(neighbor)
                    stack.append(iter(graph.edges.get(neighbor, [])))
                elif neighbor in on_path:
                    cycle_nodes = path[path.index(neighbor):]
                    key = frozenset(cycle_nodes)
                    if key not in seen:
                        seen.add(key)
                        cycles.append(_make_cycle(cycle_nodes))

        return cycles

    def _add_edge(self, graph: DependencyGraph, source: str, target: str) -> None:
        graph.edges.setdefault(source, []).append(
            Edge(source=source, target=target, type=EdgeType.IMPORT)
        )

        dependents = graph.dependents.setdefault(target, [])
        if source not in dependents:
            dependents.append(source)


def build_graph(analyses: Sequence[FileAnalysis]) -> DependencyGraph:
    return DependencyGraphBuilder().build(analyses)


def _make_node(analysis: FileAnalysis) -> Node:
    return Node(
        path=analysis.path,
        imports=len(analysis.imports),
        exports=len(analysis.exports),
    )


def _make_cycle(nodes: list[str]) -> Cycle:
    edges = [
        Edge(source=nodes[i], target=nodes[(i + 1) % len(nodes)], type=EdgeType.IMPORT)
        for i in range(len(nodes))
    ]
    return Cycle(nodes=list(nodes), edges=edges)


def _is_well_formed(analysis: object) -> bool:
    if not isinstance(analysis, FileAnalysis):
        return False
    if not analysis.path or not isinstance(analysis.path, str):
        return False
    if not isinstance(analysis.imports, (list, tuple)):
        return False
    if not isinstance(analysis.exports, (list, tuple)):
        return False
    return isinstance(analysis.dependencies, (list, tuple))
