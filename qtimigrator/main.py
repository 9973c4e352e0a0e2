#!/usr/bin/env python3
"""qti-migrator CLI - migrate IMS QTI documents between schema generations."""

from __future__ import annotations
import sys
from typing import Optional
from pathlib import Path

import typer
from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError as ConfigValidationError
from rich.table import Table
from rich.markup import escape
from rich.console import Console

from qtimigrator import __version__
from qtimigrator.config import MigratorConfig, load_config
from qtimigrator.errors import QTIError, InputOutputError
from qtimigrator.migrator import analyze as analyze_document
from qtimigrator.migrator import migrate as migrate_document
from qtimigrator.migrator import serialize, load_document
from qtimigrator.analysis.render import ReportRenderer


STDIO = "-"

app = typer.Typer(
    name="qti-migrator",
    help="qti-migrator - Migrate IMS QTI documents between schema versions (1.2 -> 2.1 -> 3.0).",
    pretty_exceptions_show_locals=False,
)
console = Console(stderr=True)


def setup(config_path: Optional[Path], debug: bool) -> MigratorConfig:
    """Load configuration and install the loguru sinks."""
    load_dotenv()
    config = load_config(config_path)
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else config.log_level)
    if config.log_file is not None:
        logger.add(config.log_file, level="DEBUG", rotation="10 MB")
    return config


def read_input(source: str) -> bytes:
    if source == STDIO:
        return sys.stdin.buffer.read()
    try:
        return Path(source).read_bytes()
    except OSError as e:
        raise InputOutputError(f"cannot read input {source}: {e}", cause=e) from e


def write_output(destination: str, data: bytes) -> None:
    if destination == STDIO:
        typer.echo(data, nl=False)
        return
    try:
        Path(destination).write_bytes(data)
    except OSError as e:
        raise InputOutputError(f"cannot write output {destination}: {e}", cause=e) from e


def fail(error: Exception) -> None:
    console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False)
    details = getattr(error, "details", "")
    if details:
        console.print(f"[red]Details:[/red] {escape(details)}", highlight=False)
    raise typer.Exit(1)


def run(
    from_version: str,
    to_version: str,
    input_path: str,
    output_path: str,
    preview: bool,
    force: bool,
    verbosity: Optional[int],
    config_path: Optional[Path],
    debug: bool,
) -> None:
    try:
        config = setup(config_path, debug)
    except (QTIError, ConfigValidationError) as e:
        fail(e)
    level = config.verbosity if verbosity is None else verbosity
    overwrite = force or config.force

    if not preview and output_path != STDIO and Path(output_path).exists() and not overwrite:
        fail(InputOutputError(f"output file {output_path} already exists (use --force to overwrite)"))

    try:
        document = load_document(read_input(input_path), from_version)
        report = analyze_document(document, from_version, to_version, level)
    except QTIError as e:
        logger.debug(f"Aborting: {e!r}")
        fail(e)

    blocked = report.has_errors()
    if level >= 1 or preview or blocked:
        typer.echo(ReportRenderer(level).render(report), err=True)
    if blocked:
        console.print("[red]Migration blocked by errors in the analysis report[/red]")
        raise typer.Exit(1)
    if preview:
        return

    try:
        data = serialize(migrate_document(document, from_version, to_version))
        write_output(output_path, data)
    except QTIError as e:
        fail(e)
    logger.info(
        f"Migrated {report.total_items} item(s) from QTI {report.source_version} to QTI {report.target_version}"
    )


@app.command()
def migrate(
    from_version: str = typer.Option(..., "--from", "-f", help="Source QTI version (1.2, 2.1, 2.2)"),
    to_version: str = typer.Option(..., "--to", "-t", help="Target QTI version (2.1, 3.0)"),
    input_path: str = typer.Option(STDIO, "--input", "-i", help="Input file, '-' for stdin"),
    output_path: str = typer.Option(STDIO, "--output", "-o", help="Output file, '-' for stdout"),
    preview: bool = typer.Option(False, "--preview", "-p", help="Only analyze; do not write output"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing output file"),
    verbosity: Optional[int] = typer.Option(
        None, "--verbosity", "-v", min=0, max=3, help="Report detail level (0-3, default from config or 1)"
    ),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a YAML configuration file"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Migrate a QTI document to the next schema version."""
    run(from_version, to_version, input_path, output_path, preview, force, verbosity, config, debug)


@app.command()
def analyze(
    from_version: str = typer.Option(..., "--from", "-f", help="Source QTI version (1.2, 2.1, 2.2)"),
    to_version: str = typer.Option(..., "--to", "-t", help="Target QTI version (2.1, 3.0)"),
    input_path: str = typer.Option(STDIO, "--input", "-i", help="Input file, '-' for stdin"),
    verbosity: Optional[int] = typer.Option(None, "--verbosity", "-v", min=0, max=3, help="Report detail level"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a YAML configuration file"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Analyze a QTI document without migrating it."""
    run(from_version, to_version, input_path, STDIO, True, False, verbosity, config, debug)


@app.command()
def version() -> None:
    """Print the qti-migrator version."""
    typer.echo(f"qti-migrator v{__version__}")


@app.command()
def help() -> None:
    """Show detailed help information for all qti-migrator commands."""
    out = Console()
    out.print("[bold green]qti-migrator CLI Help[/bold green]\n")
    out.print("qti-migrator converts IMS QTI assessment documents between schema generations.")
    out.print("Supported paths: QTI 1.2 -> 2.1 and QTI 2.1/2.2 -> 3.0.\n")

    table = Table(title="Available Commands", show_header=True, header_style="bold magenta")
    table.add_column("Command", style="cyan", width=10)
    table.add_column("Description", style="white", width=50)
    table.add_column("Usage", style="green", width=36)

    commands = [
        (
            "migrate",
            "Analyze, then migrate a document. Stops with exit code 1 when the analysis reports a blocking error.",
            "qti-migrator migrate -f 1.2 -t 2.1 -i in.xml -o out.xml",
        ),
        (
            "analyze",
            "Print the analysis report only: predicted renames, transformations, warnings and blockers.",
            "qti-migrator analyze -f 2.1 -t 3.0 -i in.xml -v 3",
        ),
        ("version", "Print the version.", "qti-migrator version"),
        ("help", "Show this detailed help information about all commands.", "qti-migrator help"),
    ]

    for cmd, desc, usage in commands:
        table.add_row(cmd, desc, usage)

    out.print(table)

    out.print("\n[bold cyan]Examples:[/bold cyan]")
    out.print("• Preview a migration:      [green]qti-migrator migrate -f 1.2 -t 2.1 -i quiz.xml -p[/green]")
    out.print(
        "• Overwrite output:         [green]qti-migrator migrate -f 2.1 -t 3.0 -i a.xml -o b.xml --force[/green]"
    )
    out.print("• Pipe through stdin:       [green]cat quiz.xml | qti-migrator migrate -f 1.2 -t 2.1[/green]")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
