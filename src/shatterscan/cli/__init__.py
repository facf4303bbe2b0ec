"""Command-line interface for ShatterScan."""

from shatterscan.cli.main import cli, main

__all__ = ["cli", "main"]
