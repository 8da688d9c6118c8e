"""Click CLI with analyze, report, and cycles subcommands."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import click

from tsdeps import __version__
from tsdeps.analyzer import DependencyAnalyzer
from tsdeps.errors import TsdepsError
from tsdeps.models import AnalyzerConfig, ProjectAnalysis
from tsdeps.report import report_to_dict

_SOURCE_DIR = click.Path(exists=True, file_okay=False, path_type=Path)


def _common_options(func):
    func = click.option("--workers", type=click.IntRange(min=1), default=4, show_default=True,
                        help="Parallel parser workers")(func)
    func = click.option("--max-depth", type=click.IntRange(min=0), default=10, show_default=True,
                        help="Maximum directory depth")(func)
    func = click.option("--exclude", "-x", multiple=True,
                        help="Directory name pattern to skip (repeatable)")(func)
    func = click.option("--no-js", is_flag=True, help="Skip .js/.jsx files")(func)
    return func


def _make_config(ctx: click.Context, no_js: bool, exclude: tuple[str, ...],
                 max_depth: int, workers: int) -> AnalyzerConfig:
    config = AnalyzerConfig(
        include_javascript=not no_js,
        max_depth=max_depth,
        verbose=ctx.obj.get("verbose", False),
        workers=workers,
    )
    if exclude:
        config.exclude_dirs = config.exclude_dirs + list(exclude)
    return config


def _rel(path: str, root: str) -> str:
    try:
        return os.path.relpath(path, root)
    except ValueError:
        return path


def _run(analyzer: DependencyAnalyzer, source_dir: Path) -> ProjectAnalysis:
    try:
        return analyzer.analyze_directory(source_dir)
    except (TsdepsError, OSError) as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log skipped files and progress")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """tsdeps: Map module dependencies and circular imports in TypeScript projects."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("source_dir", type=_SOURCE_DIR, default=".")
@click.option("--format", "-f", "output_format", type=click.Choice(["json", "dot"]),
              default="json", show_default=True, help="Output format")
@click.option("-o", "--output", "output_file", type=click.Path(dir_okay=False, path_type=Path),
              help="Write to a file instead of stdout")
@_common_options
@click.pass_context
def analyze(ctx: click.Context, source_dir: Path, output_format: str, output_file: Path | None,
            no_js: bool, exclude: tuple[str, ...], max_depth: int, workers: int):
    """Build the dependency graph and print it as JSON or DOT."""
    config = _make_config(ctx, no_js, exclude, max_depth, workers)
    analyzer = DependencyAnalyzer(config)
    analysis = _run(analyzer, source_dir)

    if output_format == "dot":
        text = analyzer.export_dot(analysis.graph)
    else:
        text = analyzer.export_json(analysis.graph)

    if output_file:
        output_file.write_text(text + "\n", encoding="utf-8")
        click.echo(
            f"Wrote {len(analysis.graph.nodes)} nodes, {analysis.graph.edge_count} edges "
            f"to {output_file}",
            err=True,
        )
    else:
        click.echo(text)


@cli.command()
@click.argument("source_dir", type=_SOURCE_DIR, default=".")
@click.option("--top", "top_n", type=click.IntRange(min=1), default=10, show_default=True,
              help="Number of most-imported files to list")
@click.option("--json", "as_json", is_flag=True, help="Emit the report as JSON")
@_common_options
@click.pass_context
def report(ctx: click.Context, source_dir: Path, top_n: int, as_json: bool,
           no_js: bool, exclude: tuple[str, ...], max_depth: int, workers: int):
    """Summarize imports, exports, cycles and isolated files."""
    config = _make_config(ctx, no_js, exclude, max_depth, workers)
    analyzer = DependencyAnalyzer(config)
    analysis = _run(analyzer, source_dir)
    result = analyzer.generate_report(analysis, top_n=top_n)

    if as_json:
        click.echo(json.dumps(report_to_dict(result), indent=2))
        return

    root = analysis.root_path
    summary = result.summary
    click.echo(click.style(f"\n{root}\n", fg="cyan"))
    click.echo(f"  Files:   {summary['total_files']}")
    click.echo(f"  Imports: {summary['total_imports']}")
    click.echo(f"  Exports: {summary['total_exports']}")
    cycle_color = "red" if summary["total_cycles"] else "green"
    click.echo(f"  Cycles:  {click.style(str(summary['total_cycles']), fg=cycle_color)}")
    if analysis.skipped:
        click.echo(f"  Skipped: {click.style(str(len(analysis.skipped)), fg='yellow')}")

    if result.most_imported:
        click.echo("\nMost imported:")
        for info in result.most_imported:
            click.echo(f"  {info.import_count:>4}  {_rel(info.path, root)}")

    if result.circular_dependencies:
        click.echo(click.style("\nCircular dependencies:", fg="red"))
        for i, cycle in enumerate(result.circular_dependencies, 1):
            chain = " -> ".join(_rel(p, root) for p in cycle.nodes + cycle.nodes[:1])
            click.echo(f"  {i}. {chain}")

    if result.unused_exports:
        click.echo(click.style(f"\nPotentially unused exports ({len(result.unused_exports)}):",
                               fg="yellow"))
        for name in result.unused_exports[:top_n]:
            click.echo(f"  {name}")

    if result.isolated_files:
        click.echo(f"\nIsolated files ({len(result.isolated_files)}):")
        for path in result.isolated_files:
            click.echo(f"  {click.style(_rel(path, root), dim=True)}")

    if result.complexity is not None:
        click.echo(
            f"\nDependency depth: max {result.complexity.max_depth}, "
            f"avg {result.complexity.avg_depth}"
        )
    click.echo()


@cli.command()
@click.argument("source_dir", type=_SOURCE_DIR, default=".")
@_common_options
@click.pass_context
def cycles(ctx: click.Context, source_dir: Path,
           no_js: bool, exclude: tuple[str, ...], max_depth: int, workers: int):
    """List circular dependencies; exit status 1 if any exist."""
    config = _make_config(ctx, no_js, exclude, max_depth, workers)
    analyzer = DependencyAnalyzer(config)
    analysis = _run(analyzer, source_dir)
    found = analysis.graph.cycles

    if not found:
        click.echo(click.style("No circular dependencies found.", fg="green"))
        return

    click.echo(click.style(f"Found {len(found)} circular dependenc{'y' if len(found) == 1 else 'ies'}:",
                           fg="red"))
    for i, cycle in enumerate(found, 1):
        click.echo(f"  Cycle {i}:")
        for path in cycle.nodes:
            click.echo(f"    - {_rel(path, analysis.root_path)}")
    ctx.exit(1)


if __name__ == "__main__":
    cli()
