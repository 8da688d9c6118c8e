"""Project report: most imported modules, unused exports, isolated files, complexity."""

from __future__ import annotations

from tsdeps.graph import build_graph
from tsdeps.models import (
    ComplexityMetrics,
    DependencyGraph,
    ModuleImportInfo,
    ProjectAnalysis,
    ProjectStats,
    Report,
)

# Consumed without literal name matching, so never reported as unused
_SENTINEL_EXPORTS = {"default", "*"}


def generate_report(analysis: ProjectAnalysis, top_n: int = 10) -> Report:
    """Summarize a completed project analysis."""
    graph = analysis.graph or build_graph(analysis.files)

    return Report(
        summary={
            "total_files": len(analysis.files),
            "total_imports": analysis.total_imports,
            "total_exports": analysis.total_exports,
            "total_cycles": len(graph.cycles),
        },
        most_imported=_most_imported(analysis, top_n),
        unused_exports=_unused_exports(analysis),
        circular_dependencies=list(graph.cycles),
        isolated_files=[
            f.path for f in analysis.files
            if not f.imports and not f.exports
        ],
        complexity=_complexity(analysis, graph),
    )


def compute_stats(analysis: ProjectAnalysis, top_n: int = 5) -> ProjectStats:
    graph = analysis.graph or build_graph(analysis.files)
    total_files = len(analysis.files)

    most_dependencies = sorted(
        ((f.path, len(f.dependencies)) for f in analysis.files),
        key=lambda x: -x[1],
    )
    most_dependents = sorted(
        ((path, len(sources)) for path, sources in graph.dependents.items()),
        key=lambda x: -x[1],
    )

    return ProjectStats(
        total_files=total_files,
        total_imports=analysis.total_imports,
        total_exports=analysis.total_exports,
        total_cycles=len(graph.cycles),
        avg_imports_per_file=round(analysis.total_imports / total_files, 2) if total_files else 0.0,
        avg_exports_per_file=round(analysis.total_exports / total_files, 2) if total_files else 0.0,
        most_dependencies=[x for x in most_dependencies if x[1] > 0][:top_n],
        most_dependents=[x for x in most_dependents if x[1] > 0][:top_n],
    )


def report_to_dict(report: Report) -> dict:
    complexity = None
    if report.complexity is not None:
        complexity = {
            "by_complexity": [
                {"path": path, "score": score}
                for path, score in report.complexity.by_complexity
            ],
            "max_depth": report.complexity.max_depth,
            "avg_depth": report.complexity.avg_depth,
        }

    return {
        "summary": dict(report.summary),
        "most_imported": [
            {"path": m.path, "import_count": m.import_count, "imported_by": list(m.imported_by)}
            for m in report.most_imported
        ],
        "unused_exports": list(report.unused_exports),
        "circular_dependencies": [c.to_dict() for c in report.circular_dependencies],
        "isolated_files": list(report.isolated_files),
        "complexity": complexity,
        "timestamp": report.timestamp.isoformat(),
    }


def _most_imported(analysis: ProjectAnalysis, top_n: int) -> list[ModuleImportInfo]:
    counts: dict[str, ModuleImportInfo] = {}
    for f in analysis.files:
        for dep in f.dependencies:
            info = counts.setdefault(dep, ModuleImportInfo(path=dep, import_count=0))
            info.import_count += 1
            info.imported_by.append(f.path)

    # sorted() is stable, so ties keep first-seen order
    ranked = sorted(counts.values(), key=lambda m: -m.import_count)
    return ranked[:top_n]


def _unused_exports(analysis: ProjectAnalysis) -> list[str]:
    imported_names = {
        spec
        for f in analysis.files
        for imp in f.imports
        for spec in imp.specifiers
    }
    return [
        exp.name
        for f in analysis.files
        for exp in f.exports
        if exp.name not in imported_names and exp.name not in _SENTINEL_EXPORTS
    ]


def _complexity(analysis: ProjectAnalysis, graph: DependencyGraph) -> ComplexityMetrics:
    scores = sorted(
        ((f.path, len(f.imports) + len(f.exports)) for f in analysis.files),
        key=lambda x: -x[1],
    )
    depths = dependency_depths(graph)
    return ComplexityMetrics(
        by_complexity=scores,
        max_depth=max(depths.values(), default=0),
        avg_depth=round(sum(depths.values()) / len(depths), 2) if depths else 0.0,
    )


def dependency_depths(graph: DependencyGraph) -> dict[str, int]:
    """Longest dependency chain (in edges) starting at each node.

    Edges back into the chain currently being walked are ignored, so a
    cycle contributes its length once instead of looping.
    """
    depths: dict[str, int] = {}

    def targets(path: str) -> list[str]:
        return [e.target for e in graph.edges.get(path, [])]

    for root in graph.nodes:
        if root in depths:
            continue

        best = {root: 0}
        on_path = {root}
        stack = [(root, iter(targets(root)))]

        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                on_path.discard(node)
                depths[node] = best[node]
                if stack:
                    parent = stack[-1][0]
                    best[parent] = max(best[parent], depths[node] + 1)
                continue
            if child in on_path:
                continue
            if child in depths:
                best[node] = max(best[node], depths[child] + 1)
                continue
            best[child] = 0
            on_path.add(child)
            stack.append((child, iter(targets(child))))

    return depths
