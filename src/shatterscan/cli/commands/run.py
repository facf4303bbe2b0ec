"""`run` subcommand implementation."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from shatterscan.cli.exit_codes import EXIT_ERROR, EXIT_SIGINT
from shatterscan.config import Config, load_config, save_config
from shatterscan.exceptions import ConfigError, ShatterScanError
from shatterscan.utils.logging import get_logger, level_from_name, setup_logging

from ..common_options import common_run_options


@dataclass
class RunOptions:
    """Container for `run` options; None means use the config or its default."""

    segments: Path
    svs: Optional[Path]
    output: Optional[Path]
    prefix: Optional[str]
    config_path: Optional[Path]
    genome_build: Optional[str]
    seed: Optional[int]
    threads: Optional[int]
    verbose: int = 0
    log_file: Optional[Path] = None


def resolve_config(opts: RunOptions) -> Config:
    """Merge defaults, the config file and CLI overrides (CLI wins)."""
    cfg = load_config(opts.config_path) if opts.config_path else Config()
    if opts.output is not None:
        cfg.output_dir = opts.output
    if opts.prefix is not None:
        cfg.prefix = opts.prefix
    if opts.genome_build is not None:
        cfg.genome_build = opts.genome_build
    if opts.seed is not None:
        cfg.recurrence.seed = opts.seed
    if opts.threads is not None:
        cfg.threads = opts.threads
    if opts.log_file is not None:
        cfg.runtime.log_file = opts.log_file
    return cfg


def _log_level(opts: RunOptions, cfg: Config) -> int:
    if opts.verbose >= 2:
        return logging.DEBUG
    if opts.verbose == 1:
        return logging.INFO
    return level_from_name(cfg.runtime.log_level)


def execute_run(opts: RunOptions) -> dict[str, Path]:
    """Load inputs, run the analysis and write the output tables."""
    from shatterscan.core.pipeline import ShatterPipeline
    from shatterscan.modules.input_tables import read_segments, read_svs

    cfg = resolve_config(opts)
    setup_logging(level=_log_level(opts, cfg), log_file=cfg.runtime.log_file)
    logger = get_logger("cli")

    # Fail fast on configuration errors before reading any input
    cfg.validate()

    segments = read_segments(opts.segments)
    svs = read_svs(opts.svs)

    pipeline = ShatterPipeline(cfg)
    result = pipeline.run(segments, svs)
    written = pipeline.write_outputs(result)

    output_dir = Path(cfg.output_dir)
    try:
        save_config(cfg, output_dir / f"{cfg.prefix}.config.yaml")
    except OSError as exc:
        logger.warning(f"Could not save config: {exc}")

    summary = result.summary()
    click.echo(
        f"Analyzed {summary['samples_analyzed']} sample(s), "
        f"skipped {summary['samples_skipped']}: "
        f"{summary['regions']} region(s), {summary['high_confidence']} HC"
    )
    if result.freq_cut is not None:
        click.echo(
            f"Recurrence cutoff: {result.freq_cut} sample(s), "
            f"{summary['recurrent_regions']} recurrent region(s)"
        )
    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)
    for path in written.values():
        click.echo(f"  {path}")
    return written


@click.command()
@common_run_options
def run(
    segments: Path,
    svs: Optional[Path],
    output: Optional[Path],
    prefix: Optional[str],
    config: Optional[Path],
    genome_build: Optional[str],
    seed: Optional[int],
    threads: Optional[int],
    verbose: int,
    log_file: Optional[Path],
) -> None:
    """Detect shattered regions and test their recurrence across a cohort."""
    opts = RunOptions(
        segments=segments,
        svs=svs,
        output=output,
        prefix=prefix,
        config_path=config,
        genome_build=genome_build,
        seed=seed,
        threads=threads,
        verbose=verbose,
        log_file=log_file,
    )
    logger = get_logger("cli")
    try:
        execute_run(opts)
    except KeyboardInterrupt:
        logger.info("Run interrupted by user")
        sys.exit(EXIT_SIGINT)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_ERROR)
    except ShatterScanError as exc:
        logger.error(f"Analysis error: {exc}")
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_ERROR)
