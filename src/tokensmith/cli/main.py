"""
tokensmith CLI commands.

Commands:
- resolve: Print the fully resolved theme for a source
- chain: Print a source's inheritance chain
- list: Show the sources defined in a file
- validate: Check a sources file for resolution problems
"""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.table import Table

from tokensmith.core.config import UnresolvedPolicy
from tokensmith.core.errors import TokenError
from tokensmith.core.validator import validate_sources

from .utils import (
    build_resolver,
    configure_logging,
    fail,
    load_cli_config,
    load_cli_sources,
    version_callback,
)

console = Console()

app = typer.Typer(
    help="Resolve design tokens across inheriting themes.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    configure_logging(verbose)


@app.command("resolve")
def resolve_command(
    sources_file: Path = typer.Argument(..., help="YAML or JSON token sources file"),
    source_id: str = typer.Argument(..., help="Source to resolve"),
    format: str = typer.Option("json", "--format", "-f", help="Output format: json or yaml"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="tokensmith.toml path"),
    strict: bool = typer.Option(
        False, "--strict", help="Fail on unresolvable tokens instead of dropping them"
    ),
) -> None:
    """Resolve a source and print the resulting theme."""
    if format not in ("json", "yaml"):
        raise fail(f"Unknown format: {format}")

    config = load_cli_config(config_path, sources_file)
    if strict:
        config = dataclasses.replace(config, on_unresolved=UnresolvedPolicy.ERROR)
    resolver = build_resolver(sources_file, config)

    try:
        theme = resolver.resolve_to_theme(source_id)
    except TokenError as e:
        raise fail(e.message) from e

    data = theme.model_dump(by_alias=True, exclude_none=True)
    if format == "yaml":
        typer.echo(yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True))
    else:
        typer.echo(json.dumps(data, indent=2))


@app.command("chain")
def chain_command(
    sources_file: Path = typer.Argument(..., help="YAML or JSON token sources file"),
    source_id: str = typer.Argument(..., help="Source to inspect"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="tokensmith.toml path"),
) -> None:
    """Print the inheritance chain of a source, self first."""
    resolver = build_resolver(sources_file, load_cli_config(config_path, sources_file))
    if resolver.get_source(source_id) is None:
        raise fail(f"Token source not found: {source_id}")

    try:
        chain = resolver.get_inheritance_chain(source_id)
    except TokenError as e:
        raise fail(e.message) from e

    typer.echo(" -> ".join(chain))


@app.command("list")
def list_command(
    sources_file: Path = typer.Argument(..., help="YAML or JSON token sources file"),
) -> None:
    """List the sources defined in a file."""
    sources = load_cli_sources(sources_file)

    table = Table(title=f"Token sources ({len(sources)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Extends")
    table.add_column("Tokens", justify="right")
    for source in sources:
        table.add_row(source.id, source.name, source.extends or "-", str(source.token_count()))

    console.print(table)


@app.command("validate")
def validate_command(
    sources_file: Path = typer.Argument(..., help="YAML or JSON token sources file"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="tokensmith.toml path"),
) -> None:
    """Check that every source resolves cleanly."""
    config = load_cli_config(config_path, sources_file)
    result = validate_sources(load_cli_sources(sources_file), config)

    if result.errors:
        typer.echo(f"Errors ({len(result.errors)}):")
        for err in result.errors:
            typer.echo(f"  ✗ {err}")

    if result.warnings:
        typer.echo(f"Warnings ({len(result.warnings)}):")
        for warn in result.warnings:
            typer.echo(f"  ⚠ {warn}")

    if result.is_valid:
        typer.echo("Token sources are valid.")
    else:
        typer.echo("Token sources have errors.")
        raise typer.Exit(1)


def main() -> None:
    app()
