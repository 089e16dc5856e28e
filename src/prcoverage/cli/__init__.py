"""CLI entry points."""

from prcoverage.cli.main import cli

__all__ = ["cli"]
