"""Command line interface for iecs."""

from iecs.cli.main import main

__all__ = ["main"]
