"""Shared Click options for ShatterScan CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, TypeVar

import click

F = TypeVar("F", bound=Callable[..., None])


def segments_option(func: F) -> F:
    """Segmentation table option."""
    return click.option(
        "-s",
        "--segments",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        required=True,
        help="Segmentation table (TSV: sample, chrom, start, end, probes, segmean)",
    )(func)


def svs_option(func: F) -> F:
    """Structural variant table option."""
    return click.option(
        "-S",
        "--svs",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="SV table (TSV: sample, chrom1, pos1, strand1, chrom2, pos2, strand2, svclass)",
    )(func)


def output_option(func: F) -> F:
    """Output directory option."""
    return click.option(
        "-o",
        "--output",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Output directory [default: shatterscan_output]",
    )(func)


def prefix_option(func: F) -> F:
    """Output prefix option."""
    return click.option(
        "-p",
        "--prefix",
        default=None,
        help="Output file prefix [default: cohort]",
    )(func)


def config_option(func: F) -> F:
    """Configuration file option."""
    return click.option(
        "-c",
        "--config",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Configuration file (YAML)",
    )(func)


def threads_option(func: F) -> F:
    """Threads option."""
    return click.option(
        "-t",
        "--threads",
        type=click.IntRange(min=1),
        default=None,
        help="Number of worker threads [default: 4]",
    )(func)


def seed_option(func: F) -> F:
    """Permutation seed option."""
    return click.option(
        "--seed",
        type=click.IntRange(min=0),
        default=None,
        help="Seed of the recurrence permutation test (required unless set in the config)",
    )(func)


def genome_build_option(func: F) -> F:
    """Reference build option."""
    return click.option(
        "-g",
        "--genome-build",
        type=click.Choice(["hg19", "GRCh37", "hg38", "GRCh38"]),
        default=None,
        help="Reference build for chromosome lengths [default: infer from input]",
    )(func)


def verbose_option(func: F) -> F:
    """Verbosity option."""
    return click.option(
        "-v",
        "--verbose",
        count=True,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG)",
    )(func)


def log_file_option(func: F) -> F:
    """Log file option."""
    return click.option(
        "--log-file",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Path for log file output",
    )(func)


def common_run_options(func: F) -> F:
    """Apply the standard set of `run` options to a command."""
    decorators = [
        segments_option,
        svs_option,
        output_option,
        prefix_option,
        config_option,
        genome_build_option,
        seed_option,
        threads_option,
        verbose_option,
        log_file_option,
    ]
    # Click applies decorators bottom-up
    for decorator in reversed(decorators):
        func = decorator(func)
    return func
