"""
tokensmith CLI package.

- main.py: the typer app and its commands
- utils.py: shared loading, logging and error helpers
"""

from tokensmith.cli.main import app, main

__all__ = ["app", "main"]
