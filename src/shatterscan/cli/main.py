"""Click application entrypoint for ShatterScan."""

from __future__ import annotations

import signal
import sys
from types import FrameType
from typing import Optional

import click

from shatterscan import __version__
from shatterscan.cli.exit_codes import EXIT_ERROR, EXIT_SIGINT, EXIT_SUCCESS

from .commands.config import init_config
from .commands.run import run
from .commands.validate import validate


def _handle_signal(signum: int, frame: Optional[FrameType]) -> None:
    """Turn SIGINT/SIGTERM into KeyboardInterrupt for a clean shutdown."""
    sig_name = "SIGINT" if signum == signal.SIGINT else "SIGTERM"
    click.echo(f"\n{sig_name} received, shutting down...", err=True)
    raise KeyboardInterrupt(f"{sig_name} received")


def _print_version(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if value and not ctx.resilient_parsing:
        click.echo(f"ShatterScan {__version__}")
        ctx.exit()


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
# -V avoids the clash with -v/--verbose
@click.option(
    "-V",
    "--version",
    is_flag=True,
    is_eager=True,
    expose_value=False,
    callback=_print_version,
    help="Show the version and exit.",
)
def cli() -> None:
    """ShatterScan: chromothripsis and chromoplexy detection from copy-number
    segmentation and structural variant calls.

    Run as: shatterscan run -s <segments.tsv> [-S <svs.tsv>] --seed <N> [options]
    """


cli.add_command(run)
cli.add_command(init_config)
cli.add_command(validate)


def main(argv: list[str] | None = None) -> int:
    """Main entry point with signal handling."""
    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        cli(argv)
        return EXIT_SUCCESS
    except KeyboardInterrupt:
        return EXIT_SIGINT
    except SystemExit as exc:
        # Preserve explicit exit codes from cli()
        if exc.code is None:
            return EXIT_SUCCESS
        return exc.code if isinstance(exc.code, int) else EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
