"""Command line interface."""

from paks.cli.main import cli, main

__all__ = ["cli", "main"]
