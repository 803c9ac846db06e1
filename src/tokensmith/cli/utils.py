"""
Shared CLI helpers.
"""

from __future__ import annotations

import logging
import platform
from pathlib import Path

import typer

from tokensmith._version import get_version
from tokensmith.core.config import ResolverConfig, find_config, load_config
from tokensmith.core.errors import TokenError
from tokensmith.core.ir.tokens import TokenSource
from tokensmith.core.resolver import TokenResolver
from tokensmith.core.source_loader import load_sources


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(f"tokensmith {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def fail(message: str) -> typer.Exit:
    """Echo an error to stderr and return the Exit to raise."""
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=1)


def load_cli_config(config_path: Path | None, sources_file: Path) -> ResolverConfig:
    """Load an explicit config, or search upwards from the sources file."""
    try:
        if config_path is not None:
            if not config_path.exists():
                raise fail(f"Config file not found: {config_path}")
            return load_config(config_path)
        return load_config(find_config(sources_file.parent))
    except TokenError as e:
        raise fail(e.message) from e


def load_cli_sources(sources_file: Path) -> list[TokenSource]:
    try:
        return load_sources(sources_file)
    except TokenError as e:
        raise fail(e.message) from e


def build_resolver(sources_file: Path, config: ResolverConfig) -> TokenResolver:
    resolver = TokenResolver(config)
    resolver.register_all(load_cli_sources(sources_file))
    return resolver
