"""Installation validation command."""

from __future__ import annotations

import sys

import click

from shatterscan import __version__
from shatterscan.cli.exit_codes import EXIT_ERROR
from shatterscan.utils.validators import validate_installation


@click.command()
@click.option("--full", is_flag=True, help="Also import every analysis module")
def validate(full: bool) -> None:
    """Validate ShatterScan installation and dependencies."""
    click.echo("Validating ShatterScan installation...")

    issues = validate_installation(full_check=full)
    if issues:
        click.echo("✗ Issues found:")
        for issue in issues:
            click.echo(f"  - {issue}")
        sys.exit(EXIT_ERROR)

    click.echo("✓ All checks passed!")
    click.echo(f"  ShatterScan version: {__version__}")
