"""Project orchestrator: enumerate -> parse -> build graph -> report/export."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable

from tsdeps.errors import FileParseError, SourceEncodingError
from tsdeps.exporter import to_dot, to_json
from tsdeps.graph import DependencyGraphBuilder
from tsdeps.models import (
    AnalyzerConfig,
    Cycle,
    DependencyGraph,
    FileAnalysis,
    ProjectAnalysis,
    ProjectStats,
    Report,
)
from tsdeps.parser import SourceParser
from tsdeps.report import compute_stats, generate_report
from tsdeps.resolver import ImportResolver
from tsdeps.scanner import find_source_files

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


class DependencyAnalyzer:
    """Analyze import/export relationships across a TypeScript project."""

    def __init__(self, config: AnalyzerConfig | None = None):
        self.config = config or AnalyzerConfig()
        self.resolver = ImportResolver(self.config.extensions)
        self.parser = SourceParser(self.resolver)
        self.graph_builder = DependencyGraphBuilder()

    def analyze_file(self, path: str | Path) -> FileAnalysis:
        return self.parser.parse(path)

    def analyze_directory(
        self,
        root: str | Path,
        progress: ProgressCallback | None = None,
    ) -> ProjectAnalysis:
        """Analyze every source file below ``root`` and build the graph.

        Files that are missing, binary or fail to parse are skipped and
        listed on ``ProjectAnalysis.skipped``.
        """
        root_path = Path(root).absolute()

        if progress:
            progress("Scanning", 0, 1)
        paths = find_source_files(
            root_path,
            extensions=self.config.effective_extensions,
            exclude_dirs=self.config.exclude_dirs,
            max_depth=self.config.max_depth,
        )
        if progress:
            progress("Scanning", 1, 1)
        logger.info("Found %d source files under %s", len(paths), root_path)

        files, skipped = self._parse_all(paths, progress)

        if progress:
            progress("Building graph", 0, 1)
        graph = self.build_graph(files)
        if progress:
            progress("Building graph", 1, 1)

        analysis = ProjectAnalysis(
            root_path=str(root_path),
            files=files,
            total_imports=sum(len(f.imports) for f in files),
            total_exports=sum(len(f.exports) for f in files),
            graph=graph,
            skipped=skipped,
        )
        logger.info(
            "Analyzed %d files (%d skipped): %d edges, %d cycles",
            len(files), len(skipped), graph.edge_count, len(graph.cycles),
        )
        return analysis

    def build_graph(self, files: list[FileAnalysis]) -> DependencyGraph:
        return self.graph_builder.build(files)

    def detect_cycles(self, graph: DependencyGraph) -> list[Cycle]:
        return self.graph_builder.detect_cycles(graph)

    def export_json(self, graph: DependencyGraph) -> str:
        return to_json(graph)

    def export_dot(self, graph: DependencyGraph) -> str:
        return to_dot(graph)

    def generate_report(self, analysis: ProjectAnalysis, top_n: int = 10) -> Report:
        return generate_report(analysis, top_n=top_n)

    def compute_stats(self, analysis: ProjectAnalysis, top_n: int = 5) -> ProjectStats:
        return compute_stats(analysis, top_n=top_n)

    def _parse_all(
        self,
        paths: list[Path],
        progress: ProgressCallback | None,
    ) -> tuple[list[FileAnalysis], list[str]]:
        files: list[FileAnalysis] = []
        skipped: list[str] = []
        total = len(paths)

        workers = max(1, self.config.workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self.parser.parse, path) for path in paths]
            # Results are collected in enumeration order
            for i, (path, future) in enumerate(zip(paths, futures)):
                if progress:
                    progress("Parsing", i, total)
                try:
                    files.append(future.result())
                except (FileNotFoundError, SourceEncodingError) as e:
                    skipped.append(str(path))
                    if self.config.verbose:
                        logger.warning("Skipping %s: %s", path, e)
                    else:
                        logger.debug("Skipping %s: %s", path, e)
                except FileParseError as e:
                    skipped.append(str(path))
                    logger.warning("Skipping %s: %s", path, e)

        if progress:
            progress("Parsing", total, total)
        return files, skipped


def analyze_directory(root: str | Path, config: AnalyzerConfig | None = None) -> ProjectAnalysis:
    return DependencyAnalyzer(config).analyze_directory(root)
