"""Data models for the dependency analyzer."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime


class ImportType(enum.Enum):
    DEFAULT = "default"
    NAMED = "named"
    NAMESPACE = "namespace"
    COMMONJS = "commonjs"
    TYPE = "type"


class ExportType(enum.Enum):
    DEFAULT = "default"
    NAMED = "named"
    RE_EXPORT = "re-export"


class ErrorType(enum.Enum):
    PARSE = "parse"
    RESOLVE = "resolve"
    UNKNOWN = "unknown"


class EdgeType(enum.Enum):
    IMPORT = "import"
    EXPORT = "export"
    RE_EXPORT = "re-export"


@dataclass(frozen=True)
class Import:
    """One use of a module within a file."""
    source: str  # specifier as written, e.g. "./util"
    type: ImportType
    specifiers: tuple[str, ...] = ()


@dataclass(frozen=True)
class Export:
    """One declared export; name is "default" or "*" for the sentinels."""
    name: str
    type: ExportType


@dataclass(frozen=True)
class SourceLocation:
    line: int
    column: int


@dataclass(frozen=True)
class AnalysisError:
    type: ErrorType
    message: str
    location: SourceLocation | None = None


@dataclass(frozen=True)
class FileAnalysis:
    """Result from the parser stage for a single file."""
    path: str
    imports: tuple[Import, ...] = ()
    exports: tuple[Export, ...] = ()
    dependencies: tuple[str, ...] = ()
    errors: tuple[AnalysisError, ...] = ()


@dataclass(frozen=True)
class Node:
    path: str
    imports: int
    exports: int


@dataclass(frozen=True)
class Edge:
    source: str  # importer
    target: str  # imported file
    type: EdgeType = EdgeType.IMPORT

    def to_dict(self) -> dict:
        return {"from": self.source, "to": self.target, "type": self.type.value}


@dataclass
class Cycle:
    nodes: list[str] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "nodes": list(self.nodes),
            "edges": [e.to_dict() for e in self.edges],
        }


@dataclass
class DependencyGraph:
    nodes: dict[str, Node] = field(default_factory=dict)
    edges: dict[str, list[Edge]] = field(default_factory=dict)  # source -> outgoing
    cycles: list[Cycle] = field(default_factory=list)
    dependents: dict[str, list[str]] = field(default_factory=dict)  # target -> sources

    @property
    def edge_count(self) -> int:
        return sum(len(edges) for edges in self.edges.values())

    def iter_edges(self):
        for edges in self.edges.values():
            yield from edges

    def dependents_of(self, path: str) -> list[str]:
        return list(self.dependents.get(path, []))


@dataclass
class ProjectAnalysis:
    """Everything produced by one run over a project root."""
    root_path: str
    files: list[FileAnalysis] = field(default_factory=list)
    total_imports: int = 0
    total_exports: int = 0
    graph: DependencyGraph | None = None
    timestamp: datetime = field(default_factory=datetime.now)
    skipped: list[str] = field(default_factory=list)


@dataclass
class ModuleImportInfo:
    path: str
    import_count: int
    imported_by: list[str] = field(default_factory=list)


@dataclass
class ComplexityMetrics:
    by_complexity: list[tuple[str, int]] = field(default_factory=list)
    max_depth: int = 0
    avg_depth: float = 0.0


@dataclass
class Report:
    summary: dict[str, int]
    most_imported: list[ModuleImportInfo] = field(default_factory=list)
    unused_exports: list[str] = field(default_factory=list)
    circular_dependencies: list[Cycle] = field(default_factory=list)
    isolated_files: list[str] = field(default_factory=list)
    complexity: ComplexityMetrics | None = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class ProjectStats:
    total_files: int = 0
    total_imports: int = 0
    total_exports: int = 0
    total_cycles: int = 0
    avg_imports_per_file: float = 0.0
    avg_exports_per_file: float = 0.0
    most_dependencies: list[tuple[str, int]] = field(default_factory=list)
    most_dependents: list[tuple[str, int]] = field(default_factory=list)


@dataclass
class AnalyzerConfig:
    """Configuration for a project analysis run."""
    include_javascript: bool = True
    extensions: list[str] = field(default_factory=lambda: [".ts", ".tsx", ".js", ".jsx"])
    exclude_dirs: list[str] = field(default_factory=lambda: [
        "node_modules", ".git", "dist", "build",
    ])
    max_depth: int = 10
    verbose: bool = False
    workers: int = 4

    @property
    def effective_extensions(self) -> list[str]:
        if self.include_javascript:
            return list(self.extensions)
        return [ext for ext in self.extensions if ext not in (".js", ".jsx")]
