"""
Window Scanner - sliding-window breakpoint density per sample.

Every chromosome of the genome context is tiled with `window_size` windows
every `slide_size` bp. For one sample, the scan runs in two passes: first all
window counts genome-wide, then the sample's mean and standard deviation over
those counts, and only then the flags. A window is flagged when

    count >= num_breaks  and  count >= mean + num_sd * sd
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from shatterscan.constants import ORIGINS, ORIGIN_SEGMENT
from shatterscan.exceptions import ConfigError
from shatterscan.genome import GenomeContext
from shatterscan.modules.breakpoint_index import SampleBreakpoints
from shatterscan.utils.column_standards import ColumnStandard as C
from shatterscan.utils.logging import get_logger
from shatterscan.utils.stats import sample_sd


@dataclass
class WindowScan:
    """Scored windows of one sample plus the statistics used to flag them."""

    sample: str
    windows: pd.DataFrame  # chrom, start, end, count, flagged
    mean: float
    sd: float
    threshold: float
    origins: tuple[str, ...]

    @property
    def flagged(self) -> pd.DataFrame:
        return self.windows[self.windows[C.FLAGGED]].reset_index(drop=True)

    @property
    def n_flagged(self) -> int:
        return int(self.windows[C.FLAGGED].sum())


class WindowScanner:
    """Counts breakpoints in overlapping windows and flags dense ones."""

    def __init__(
        self,
        genome: GenomeContext,
        window_size: int = 10_000_000,
        slide_size: int = 2_000_000,
        num_breaks: int = 10,
        num_sd: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ):
        if slide_size >= window_size:
            raise ConfigError(
                f"slide_size ({slide_size}) must be smaller than window_size ({window_size})"
            )
        if slide_size < 1 or num_breaks < 1 or num_sd < 0:
            raise ConfigError("slide_size and num_breaks must be positive, num_sd non-negative")
        self.genome = genome
        self.window_size = int(window_size)
        self.slide_size = int(slide_size)
        self.num_breaks = int(num_breaks)
        self.num_sd = float(num_sd)
        self.logger = logger or get_logger(self.__class__.__name__)

        # Same tiling for every sample
        self._tiles = genome.tile(self.window_size, self.slide_size)
        self._tile_slices = {
            chrom: (group.index[0], group.index[-1] + 1)
            for chrom, group in self._tiles.groupby(C.CHROM, sort=False)
        }

    @property
    def tiles(self) -> pd.DataFrame:
        return self._tiles.copy()

    def count_windows(self, breakpoints: SampleBreakpoints, origins=ORIGINS) -> np.ndarray:
        """First pass: breakpoint count of every window, in tiling order."""
        counts = np.zeros(len(self._tiles), dtype=np.int64)
        starts = self._tiles[C.START].to_numpy()
        ends = self._tiles[C.END].to_numpy()
        for chrom in breakpoints.chromosomes:
            pos = breakpoints.positions(chrom, origins)
            if pos.size == 0:
                continue
            if chrom not in self._tile_slices:
                self.logger.debug(
                    f"{breakpoints.sample}: {pos.size} breakpoints on {chrom} "
                    "outside the genome context ignored"
                )
                continue
            lo, hi = self._tile_slices[chrom]
            left = np.searchsorted(pos, starts[lo:hi], side="left")
            right = np.searchsorted(pos, ends[lo:hi], side="right")
            counts[lo:hi] = right - left
        return counts

    def threshold(self, mean: float, sd: float) -> float:
        return mean + self.num_sd * sd

    def scan(self, breakpoints: SampleBreakpoints, use_sv: bool = True) -> WindowScan:
        """Score and flag every window of one sample.

        Args:
            breakpoints: The sample's indexed breakpoints
            use_sv: Count SV breakpoints too (SV-aware mode)
        """
        origins = ORIGINS if use_sv else (ORIGIN_SEGMENT,)
        counts = self.count_windows(breakpoints, origins)

        mean = float(counts.mean()) if counts.size else 0.0
        sd = sample_sd(counts)
        threshold = self.threshold(mean, sd)

        flagged = (counts >= self.num_breaks) & (counts >= threshold)

        windows = self._tiles.copy()
        windows.insert(0, C.SAMPLE, breakpoints.sample)
        windows[C.COUNT] = counts
        windows[C.FLAGGED] = flagged

        self.logger.debug(
            f"{breakpoints.sample}: mean={mean:.2f} sd={sd:.2f} "
            f"threshold={threshold:.2f} flagged={int(flagged.sum())}/{counts.size}"
        )
        return WindowScan(
            sample=breakpoints.sample,
            windows=windows,
            mean=mean,
            sd=sd,
            threshold=threshold,
            origins=origins,
        )
