"""Render a DependencyGraph as JSON or Graphviz DOT."""

from __future__ import annotations

import json
import os

from tsdeps.models import DependencyGraph

CYCLE_COLOR = "red"


def graph_to_dict(graph: DependencyGraph) -> dict:
    return {
        "nodes": [
            {"path": path, "imports": node.imports, "exports": node.exports}
            for path, node in graph.nodes.items()
        ],
        "edges": [edge.to_dict() for edge in graph.iter_edges()],
        "cycles": [cycle.to_dict() for cycle in graph.cycles],
    }


def to_json(graph: DependencyGraph, indent: int = 2) -> str:
    return json.dumps(graph_to_dict(graph), indent=indent)


def to_dot(graph: DependencyGraph) -> str:
    """Graphviz digraph; files and edges on a cycle are drawn in red."""
    lines = ["digraph dependencies {", "  rankdir=LR;", "  node [shape=box];"]

    cycle_nodes = {path for cycle in graph.cycles for path in cycle.nodes}
    cycle_edges = {(e.source, e.target) for cycle in graph.cycles for e in cycle.edges}

    for path in graph.nodes:
        label = os.path.basename(path) or path
        style = f", fillcolor={CYCLE_COLOR}, style=filled" if path in cycle_nodes else ""
        lines.append(f'  "{_escape(path)}" [label="{_escape(label)}"{style}];')

    for edge in graph.iter_edges():
        color = f" [color={CYCLE_COLOR}]" if (edge.source, edge.target) in cycle_edges else ""
        lines.append(f'  "{_escape(edge.source)}" -> "{_escape(edge.target)}"{color};')

    lines.append("}")
    return "\n".join(lines)


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')
