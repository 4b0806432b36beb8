"""Command-line interface for the TLC developer platform."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from tlc import __version__
from tlc.architecture.command import ArchitectureCommand, ProgressEvent
from tlc.architecture.config import ArchitectureConfig
from tlc.architecture.dependency_graph import DependencyGraph
from tlc.config_validation import require_positive_int, validate_report_format
from tlc.logging_utils import configure_logging

app = typer.Typer(add_completion=False, no_args_is_help=True)
architecture_app = typer.Typer(no_args_is_help=True)
console = Console()

app.add_typer(
    architecture_app,
    name="architecture",
    help="Analyze module dependencies and circular imports.",
)


def _version_callback(value: bool) -> None:
    """Print package version and exit when requested."""
    if value:
        console.print(__version__)
        raise typer.Exit()


def _cli_error(code: str, message: str, hint: str | None = None) -> typer.BadParameter:
    """Create a standardized CLI error with error code and optional remediation hint."""
    if hint is None:
        return typer.BadParameter(f"[{code}] {message}")
    return typer.BadParameter(f"[{code}] {message} Hint: {hint}")


def _load_config(base_path: Path | None) -> ArchitectureConfig:
    """Resolve architecture config from environment and CLI base path."""
    try:
        return ArchitectureConfig.from_env(base_path)
    except ValueError as exc:
        raise _cli_error(
            "TLC-CONFIG-INVALID",
            str(exc),
            "Check TLC_ARCH_MAX_CYCLES and TLC_ARCH_IGNORE environment values.",
        ) from exc


def _validate_format(value: str) -> str:
    """Validate report format option."""
    try:
        return validate_report_format(value)
    except ValueError as exc:
        raise _cli_error("TLC-FORMAT-INVALID", str(exc)) from exc


def _ensure_positive(value: int, field_name: str) -> int:
    """Validate positive integer CLI values."""
    try:
        return require_positive_int(value, field_name)
    except ValueError as exc:
        raise _cli_error("TLC-MAX-CYCLES-INVALID", str(exc)) from exc


def _print_progress(event: ProgressEvent) -> None:
    """Print one progress notification."""
    console.print(f"[dim]{event.message}[/dim]")


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show TLC version and exit.",
            is_eager=True,
            callback=_version_callback,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose debug logging."),
    ] = False,
    log_file: Annotated[
        Path,
        typer.Option("--log-file", help="Write logs to tlc.log (default: ./tlc.log)."),
    ] = Path("tlc.log"),
) -> None:
    """TLC developer-platform CLI."""
    configure_logging(log_file=log_file, verbose=verbose)


@architecture_app.command("circular")
def architecture_circular(
    path: Annotated[
        Path | None,
        typer.Argument(help="Directory to scan, relative to the base path."),
    ] = None,
    base_path: Annotated[
        Path | None,
        typer.Option(help="Project base path (default: $TLC_BASE_PATH or current directory)."),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", help="Report format: text, json, or markdown."),
    ] = "text",
    max_cycles: Annotated[
        int | None,
        typer.Option(help="Maximum number of cycles listed in the report."),
    ] = None,
    source_root: Annotated[
        list[Path] | None,
        typer.Option("--source-root", help="Extra directory used to resolve absolute imports."),
    ] = None,
    fail_on_cycles: Annotated[
        bool,
        typer.Option("--fail-on-cycles/--no-fail-on-cycles", help="Exit 1 when cycles exist."),
    ] = False,
    show_progress: Annotated[
        bool,
        typer.Option("--progress/--no-progress", help="Print analysis phases."),
    ] = False,
) -> None:
    """Detect circular imports and suggest where to break them."""
    output_format = _validate_format(output_format)
    config = _load_config(base_path)
    config = config.with_overrides(
        max_cycles=_ensure_positive(max_cycles, "max-cycles") if max_cycles is not None else None,
        source_roots=tuple(source_root) if source_root else None,
    )
    command = ArchitectureCommand(
        config,
        on_progress=_print_progress if show_progress else None,
    )
    result = command.run(
        target_path=str(path) if path is not None else None,
        output_format=output_format,
    )
    if not result.success:
        console.print(f"Architecture analysis failed: {result.error}", markup=False)
        raise typer.Exit(code=1)
    typer.echo(result.report)
    if fail_on_cycles and result.circular is not None and result.circular.has_cycles:
        raise typer.Exit(code=1)


@architecture_app.command("graph")
def architecture_graph(
    path: Annotated[
        Path | None,
        typer.Argument(help="Directory to scan, relative to the base path."),
    ] = None,
    base_path: Annotated[
        Path | None,
        typer.Option(help="Project base path (default: $TLC_BASE_PATH or current directory)."),
    ] = None,
) -> None:
    """Show the file dependency graph with import and importer counts."""
    config = _load_config(base_path)
    graph = DependencyGraph(config.base_path, ignore=config.ignore)
    scan_path = config.base_path / path if path is not None else config.base_path
    try:
        data = graph.build_from_directory(scan_path)
    except FileNotFoundError as exc:
        raise _cli_error("TLC-PATH-MISSING", str(exc)) from exc

    if not data["nodes"]:
        console.print("No source files found.")
        return
    table = Table(title="Dependency Graph")
    table.add_column("File")
    table.add_column("Imports", justify="right")
    table.add_column("Imported By", justify="right")
    for node in sorted(data["nodes"], key=lambda item: item["name"]):
        table.add_row(node["name"], str(node["imports"]), str(node["importedBy"]))
    console.print(table)
    external = ", ".join(data["external"]) or "none"
    console.print(f"External dependencies: {external}", markup=False)


if __name__ == "__main__":
    app()
