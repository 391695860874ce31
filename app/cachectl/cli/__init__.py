"""CLI package for cachectl.

This package contains the Typer application.
"""

from cachectl.cli.main import app

__all__ = ["app"]
