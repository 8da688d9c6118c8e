"""Tests for graph construction and cycle detection."""

from tsdeps.graph import DependencyGraphBuilder, build_graph
from tsdeps.models import (
    DependencyGraph,
    Edge,
    EdgeType,
    Export,
    ExportType,
    FileAnalysis,
    Import,
    ImportType,
    Node,
)


# ── Helpers ───────────────────────────────────────────────────

def _file(path, deps=(), n_imports=None, exports=()):
    imports = tuple(
        Import(f"./{d.rsplit('/', 1)[-1]}", ImportType.NAMED, ("x",)) for d in deps
    ) if n_imports is None else tuple(
        Import(f"./m{i}", ImportType.NAMED, ()) for i in range(n_imports)
    )
    return FileAnalysis(
        path=path,
        imports=imports,
        exports=tuple(Export(name, ExportType.NAMED) for name in exports),
        dependencies=tuple(deps),
    )


def _graph_from_edges(pairs, order=None):
    nodes = order or sorted({p for pair in pairs for p in pair})
    graph = DependencyGraph()
    for path in nodes:
        graph.nodes[path] = Node(path=path, imports=0, exports=0)
    for src, dst in pairs:
        graph.edges.setdefault(src, []).append(Edge(src, dst, EdgeType.IMPORT))
    return graph


def _assert_closed_loop(cycle):
    n = len(cycle.nodes)
    assert len(cycle.edges) == n
    for i, edge in enumerate(cycle.edges):
        assert edge.source == cycle.nodes[i]
        assert edge.target == cycle.nodes[(i + 1) % n]
        assert edge.type == EdgeType.IMPORT


# ── Build ─────────────────────────────────────────────────────

class TestBuild:
    def test_build_empty(self):
        graph = build_graph([])
        assert graph.nodes == {}
        assert graph.edges == {}
        assert graph.cycles == []

    def test_nodes_and_edges(self):
        files = [
            _file("/project/a.ts", deps=["/project/b.ts"]),
            _file("/project/b.ts", exports=["something"]),
        ]
        graph = build_graph(files)

        assert set(graph.nodes) == {"/project/a.ts", "/project/b.ts"}
        assert graph.nodes["/project/a.ts"] == Node("/project/a.ts", imports=1, exports=0)
        assert graph.nodes["/project/b.ts"] == Node("/project/b.ts", imports=0, exports=1)
        assert graph.edges == {
            "/project/a.ts": [Edge("/project/a.ts", "/project/b.ts", EdgeType.IMPORT)],
        }
        assert graph.edge_count == 1

    def test_dependents_are_derived(self):
        files = [
            _file("/p/main.ts", deps=["/p/utils.ts", "/p/helpers.ts"]),
            _file("/p/other.ts", deps=["/p/utils.ts"]),
            _file("/p/utils.ts"),
            _file("/p/helpers.ts"),
        ]
        graph = build_graph(files)

        assert graph.dependents_of("/p/utils.ts") == ["/p/main.ts", "/p/other.ts"]
        assert graph.dependents_of("/p/helpers.ts") == ["/p/main.ts"]
        assert graph.dependents_of("/p/main.ts") == []
        # inputs are left untouched
        assert all(not hasattr(f, "dependents") for f in files)

    def test_extension_tolerant_match(self):
        files = [
            _file("/p/a.ts", deps=["/p/b.js"]),
            _file("/p/b.ts"),
        ]
        graph = build_graph(files)
        assert graph.edges["/p/a.ts"] == [Edge("/p/a.ts", "/p/b.ts", EdgeType.IMPORT)]

    def test_exact_match_preferred(self):
        files = [
            _file("/p/a.ts", deps=["/p/b.tsx"]),
            _file("/p/b.ts"),
            _file("/p/b.tsx"),
        ]
        graph = build_graph(files)
        assert [e.target for e in graph.edges["/p/a.ts"]] == ["/p/b.tsx"]

    def test_unresolved_dependency_dropped(self):
        files = [_file("/p/a.ts", deps=["/p/gone.ts"])]
        graph = build_graph(files)
        assert list(graph.nodes) == ["/p/a.ts"]
        assert graph.edges == {}

    def test_one_edge_per_matched_dependency(self):
        files = [
            _file("/p/a.ts", deps=["/p/b.ts", "/p/b.js"]),
            _file("/p/b.ts"),
        ]
        graph = build_graph(files)
        assert graph.edges["/p/a.ts"] == [
            Edge("/p/a.ts", "/p/b.ts", EdgeType.IMPORT),
            Edge("/p/a.ts", "/p/b.ts", EdgeType.IMPORT),
        ]
        assert graph.edge_count == 2
        assert graph.dependents_of("/p/b.ts") == ["/p/a.ts"]

    def test_malformed_entries_skipped(self):
        files = [
            _file("/p/a.ts", deps=["/p/b.ts"]),
            FileAnalysis(path=""),
            FileAnalysis(path=None),
            FileAnalysis(path="/p/bad.ts", imports=None),
            None,
            {"path": "/p/dict.ts"},
            _file("/p/b.ts"),
        ]
        graph = build_graph(files)
        assert set(graph.nodes) == {"/p/a.ts", "/p/b.ts"}
        assert graph.edge_count == 1


# ── Cycles ────────────────────────────────────────────────────

class TestCycles:
    def test_no_cycles(self):
        graph = _graph_from_edges([("a", "b"), ("b", "c")])
        assert DependencyGraphBuilder().detect_cycles(graph) == []

    def test_three_file_cycle(self):
        graph = _graph_from_edges([("a", "b"), ("b", "c"), ("c", "a")])
        cycles = DependencyGraphBuilder().detect_cycles(graph)

        assert len(cycles) == 1
        assert cycles[0].nodes == ["a", "b", "c"]
        _assert_closed_loop(cycles[0])

    def test_detection_is_repeatable(self):
        graph = _graph_from_edges([("a", "b"), ("b", "c"), ("c", "a")])
        builder = DependencyGraphBuilder()
        first = builder.detect_cycles(graph)
        second = builder.detect_cycles(graph)
        assert [c.nodes for c in first] == [c.nodes for c in second]

    def test_different_root_same_cycle(self):
        pairs = [("a", "b"), ("b", "c"), ("c", "a")]
        cycles = DependencyGraphBuilder().detect_cycles(_graph_from_edges(pairs, order=["c", "b", "a"]))
        assert len(cycles) == 1
        assert cycles[0].nodes == ["c", "a", "b"]
        _assert_closed_loop(cycles[0])

    def test_self_import(self):
        graph = _graph_from_edges([("a", "a")])
        cycles = DependencyGraphBuilder().detect_cycles(graph)
        assert len(cycles) == 1
        assert cycles[0].nodes == ["a"]
        assert cycles[0].edges == [Edge("a", "a", EdgeType.IMPORT)]

    def test_two_separate_cycles(self):
        graph = _graph_from_edges([("a", "b"), ("b", "a"), ("c", "d"), ("d", "c"), ("b", "c")])
        cycles = DependencyGraphBuilder().detect_cycles(graph)
        assert sorted(sorted(c.nodes) for c in cycles) == [["a", "b"], ["c", "d"]]

    def test_cycle_reached_from_acyclic_prefix(self):
        graph = _graph_from_edges([("entry", "x"), ("x", "y"), ("y", "x")], order=["entry", "x", "y"])
        cycles = DependencyGraphBuilder().detect_cycles(graph)
        assert len(cycles) == 1
        assert cycles[0].nodes == ["x", "y"]

    def test_long_chain_does_not_recurse(self):
        n = 5000
        pairs = [(f"f{i}", f"f{i + 1}") for i in range(n)] + [(f"f{n}", "f0")]
        graph = _graph_from_edges(pairs, order=[f"f{i}" for i in range(n + 1)])
        cycles = DependencyGraphBuilder().detect_cycles(graph)
        assert len(cycles) == 1
        assert len(cycles[0].nodes) == n + 1

    def test_build_attaches_cycles(self):
        files = [
            _file("/p/a.ts", deps=["/p/b.ts"]),
            _file("/p/b.ts", deps=["/p/c.ts"]),
            _file("/p/c.ts", deps=["/p/a.ts"]),
        ]
        graph = build_graph(files)
        assert len(graph.cycles) == 1
        assert set(graph.cycles[0].nodes) == {"/p/a.ts", "/p/b.ts", "/p/c.ts"}
        _assert_closed_loop(graph.cycles[0])
