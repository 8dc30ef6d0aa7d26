"""Legacy Hunter CLI - Main entry point."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import cast

import typer
from rich.table import Table

from legacy_hunter import __version__
from legacy_hunter.config import (
    DEFAULT_CONFIG_TEMPLATE,
    SECTION_TYPES,
    Config,
    get_config_paths,
    load_config,
    load_config_from_file,
)
from legacy_hunter.core.analyzer import Analyzer
from legacy_hunter.core.detector import DetectionContext, LegacyDetector
from legacy_hunter.core.estimator import load_dependency_graph
from legacy_hunter.core.exporter import VALID_EXPORT_FORMATS, ExportFormat, export_report
from legacy_hunter.core.parallel import ParallelConfig
from legacy_hunter.core.scanner import ScriptCollector, format_size, parse_size
from legacy_hunter.patterns import get_polyfill_patterns, get_transform_patterns, load_polyfill_module_data
from legacy_hunter.ui.console import configure_logging, create_console, print_banner, print_error, print_success

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="legacy-hunter",
    help="Find legacy JavaScript polyfills and transforms that modern browsers never need.",
    no_args_is_help=True,
)
console = create_console()


class State:
    """Global state container for CLI."""

    def __init__(self) -> None:
        self.config: Config = Config()  # Default until loaded


state = State()


def _parse_min_savings(min_savings: str) -> int:
    """Parse min_savings string to bytes, exit with error on invalid input."""
    try:
        return parse_size(min_savings)
    except ValueError as e:
        print_error(console, f"Invalid min-savings: {e}")
        raise typer.Exit(1) from e


def _load_context(config: Config) -> DetectionContext:
    """Build the detection context from the configured data files."""
    try:
        catalog = load_polyfill_module_data(config.data.module_data_path)
        graph = load_dependency_graph(config.data.graph_data_path)
    except ValueError as e:
        print_error(console, f"Data error: {e}")
        raise typer.Exit(1) from e
    return DetectionContext.create(catalog=catalog, graph=graph)


def _config_locations_table() -> Table:
    """Tabulate the user and project config files, lowest precedence first."""
    table = Table(title="Config files", show_header=True, header_style="bold magenta")
    table.add_column("Scope", style="cyan")
    table.add_column("Path")
    table.add_column("Status")

    for scope, path in zip(("global", "local"), get_config_paths()):
        status = "[green]exists[/green]" if path.exists() else "[dim]not found[/dim]"
        table.add_row(scope, str(path), status)
    return table


@app.command()
def scan(
    paths: list[Path] = typer.Argument(
        ...,
        help="JavaScript files or directories to scan",
        exists=True,
        resolve_path=True,
    ),
    map_file: Path | None = typer.Option(
        None,
        "--map",
        "-m",
        help="Source map for the script (only with a single script path)",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    show_all: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Show all scripts, not just top offenders",
    ),
    min_savings: str | None = typer.Option(
        None,
        "--min-savings",
        "-s",
        help="Hide scripts saving less than this (e.g., 1KB, 10KB)",
    ),
    compression_ratio: float | None = typer.Option(
        None,
        "--compression-ratio",
        "-r",
        help="Scale estimates to transfer size (e.g., 0.3 for gzip)",
        min=0.0,
        max=1.0,
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        help="Scripts analyzed at once (1-32)",
        min=1,
    ),
    no_parallel: bool = typer.Option(
        False,
        "--no-parallel",
        help="Analyze scripts one at a time",
    ),
    no_source_maps: bool = typer.Option(
        False,
        "--no-source-maps",
        help="Ignore source maps and match script text only",
    ),
    export: Path | None = typer.Option(
        None,
        "--export",
        "-e",
        help="Write the report to a file",
        dir_okay=False,
    ),
    export_format: str | None = typer.Option(
        None,
        "--format",
        "-f",
        help="Export format: json or csv",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show debug logging",
    ),
) -> None:
    """Scan JavaScript files for legacy polyfills and transforms."""
    configure_logging(console, verbose=verbose)
    print_banner(console)

    config = state.config
    min_savings_bytes = (
        _parse_min_savings(min_savings) if min_savings is not None else config.scan.min_savings_bytes
    )
    ratio = compression_ratio if compression_ratio is not None else config.scan.compression_ratio
    fmt = export_format or config.export.format
    if fmt not in VALID_EXPORT_FORMATS:
        print_error(console, f"Invalid export format: {fmt}")
        console.print(f"[dim]Valid options: {', '.join(VALID_EXPORT_FORMATS)}[/dim]")
        raise typer.Exit(1)

    map_overrides: dict[Path, Path] = {}
    if map_file is not None:
        if len(paths) != 1 or not paths[0].is_file():
            print_error(console, "--map needs exactly one script file")
            raise typer.Exit(1)
        map_overrides[paths[0]] = map_file

    if min_savings_bytes > 0:
        console.print(f"[dim]Minimum savings: {format_size(min_savings_bytes)}[/dim]")
    if ratio != 1.0:
        console.print(f"[dim]Compression ratio: {ratio}[/dim]")
    console.print()

    context = _load_context(config)
    collector = ScriptCollector(
        console=console,
        use_source_maps=config.scan.source_maps and not no_source_maps,
    )
    collection = collector.collect(paths, map_overrides)
    logger.debug(
        "Collected %d scripts (%s), %d with source maps",
        len(collection.scripts),
        collection.total_size_human,
        len(collection.bundles),
    )

    parallel_config = ParallelConfig(
        enabled=config.parallel.enabled and not no_parallel,
        max_workers=workers if workers is not None else config.parallel.max_workers,
    )
    detector = LegacyDetector(context=context, parallel_config=parallel_config, compression_ratio=ratio)
    report = detector.detect_across_scripts(collection.scripts, collection.bundles)
    report.scan_errors[:0] = collection.scan_errors

    analyzer = Analyzer(console=console)
    analyzer.display_results(report, show_all=show_all or config.scan.show_all, min_savings=min_savings_bytes)

    if export is not None:
        try:
            export_report(report, export, cast(ExportFormat, fmt))
        except OSError as e:
            print_error(console, f"Cannot write {export}: {e}")
            raise typer.Exit(1) from e
        print_success(console, f"\nExported {fmt.upper()} report to {export}")


@app.command()
def signals(
    transforms: bool = typer.Option(
        True,
        "--transforms/--no-transforms",
        help="Include compiler transforms (classes, regenerator, spread)",
    ),
    polyfills: bool = typer.Option(
        True,
        "--polyfills/--no-polyfills",
        help="Include polyfills from the catalog",
    ),
) -> None:
    """List every signal the detector can find."""
    context = _load_context(state.config)

    patterns = []
    if polyfills:
        patterns.extend(get_polyfill_patterns(context.catalog))
    if transforms:
        patterns.extend(get_transform_patterns())

    Analyzer(console=console).display_signals(patterns)


@app.command()
def info() -> None:
    """Show version and the loaded catalog and size graph."""
    print_banner(console)

    config = state.config
    context = _load_context(config)
    corejs = sum(1 for entry in context.catalog if entry.corejs)

    console.print("[bold]Detection Data[/bold]\n")
    console.print(f"  Polyfills:  {len(context.catalog)} ({corejs} from core-js)")
    console.print(f"  Transforms: {len(get_transform_patterns())}")
    console.print(f"  Modules:    {len(context.graph.module_sizes)}")
    console.print(f"  Max size:   {format_size(context.graph.max_size)}")
    console.print(f"  Catalog:    {config.data.module_data_path or 'bundled'}")
    console.print(f"  Graph:      {config.data.graph_data_path or 'bundled'}")

    console.print(f"\n[dim]Legacy Hunter v{__version__}[/dim]")


config_app = typer.Typer(
    name="config",
    help="Manage Legacy Hunter configuration.",
    no_args_is_help=True,
)
app.add_typer(config_app)


@config_app.command("init")
def config_init(
    global_config: bool = typer.Option(
        True,
        "--global/--local",
        help="Write the user config (--global) or ./legacyhunter.toml (--local)",
    ),
    force: bool = typer.Option(False, "--force", help="Replace an existing file"),
) -> None:
    """Write a commented config file with every default."""
    user_path, project_path = get_config_paths()
    target = user_path if global_config else project_path

    if target.exists() and not force:
        print_error(console, f"{target} already exists (use --force to replace it)")
        raise typer.Exit(1)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    except OSError as e:
        print_error(console, f"Cannot write {target}: {e}")
        raise typer.Exit(1) from e

    print_success(console, f"Wrote {target}")


@config_app.command("show")
def config_show(
    resolved: bool = typer.Option(
        True,
        "--resolved/--raw",
        help="Print effective values (--resolved) or the active file as written (--raw)",
    ),
) -> None:
    """Print the active configuration."""
    config = state.config
    console.print(f"[bold]Source:[/bold] {config._source or '[dim]built-in defaults[/dim]'}\n")

    if not resolved:
        if config._source is None:
            console.print("[dim]No config file in use[/dim]")
        else:
            console.print(config._source.read_text(encoding="utf-8"), markup=False)
        return

    for name in SECTION_TYPES:
        console.print(f"[cyan]\\[{name}][/cyan]")
        for key, value in vars(getattr(config, name)).items():
            console.print(f"  {key} = {value!r}", markup=False)


@config_app.command("path")
def config_path() -> None:
    """List where config files are looked up and which exist."""
    console.print(_config_locations_table())
    console.print("[dim]A local file overrides the global one key by key.[/dim]")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"Legacy Hunter v{__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (overrides default locations)",
        exists=True,
        readable=True,
    ),
) -> None:
    """Legacy Hunter - Find legacy JavaScript that modern browsers never run."""
    try:
        if config_file:
            state.config = load_config_from_file(config_file)
        else:
            state.config = load_config()
    except ValueError as e:
        print_error(console, f"Config error: {e}")
        raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
