"""
Region Merger - candidate shattered regions from flagged windows.

Flagged windows of one sample and chromosome are merged in coordinate order
when they overlap or are separated by at most one stride, so the overlap of
the tiling never fragments a single dense cluster. Each merged span collects
the breakpoints inside it; the sorted breakpoints are split wherever two
neighbours lie more than `max_gap` apart, and every piece is trimmed to its
first and last breakpoint.

Pieces are kept when they still reach the window floor (`num_breaks` distinct
breakpoints) and hold at least `min_num_probes` segment breakpoints, which
drops single-artifact density spikes.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pandas as pd

from shatterscan.constants import ORIGIN_SEGMENT, ORIGIN_SV, IQM_HIGH_QUANTILE, IQM_LOW_QUANTILE
from shatterscan.genome import chrom_sort_key
from shatterscan.modules.breakpoint_index import SampleBreakpoints
from shatterscan.modules.window_scanner import WindowScan
from shatterscan.utils.column_standards import ColumnStandard as C, REGION_COLUMNS
from shatterscan.utils.logging import get_logger
from shatterscan.utils.stats import consecutive_gaps, iqm, iqsd


def empty_regions() -> pd.DataFrame:
    return pd.DataFrame(columns=REGION_COLUMNS)


def _within(pos: np.ndarray, start: int, end: int) -> np.ndarray:
    lo = np.searchsorted(pos, start, side="left")
    hi = np.searchsorted(pos, end, side="right")
    return pos[lo:hi]


class RegionMerger:
    """Merges flagged windows into non-overlapping candidate regions."""

    def __init__(
        self,
        slide_size: int,
        num_breaks: int = 10,
        min_num_probes: int = 2,
        max_gap: Optional[int] = 1_000_000,
        iqm_low: float = IQM_LOW_QUANTILE,
        iqm_high: float = IQM_HIGH_QUANTILE,
        logger: Optional[logging.Logger] = None,
    ):
        self.slide_size = int(slide_size)
        self.num_breaks = int(num_breaks)
        self.min_num_probes = int(min_num_probes)
        self.max_gap = None if max_gap is None else int(max_gap)
        self.iqm_low = iqm_low
        self.iqm_high = iqm_high
        self.logger = logger or get_logger(self.__class__.__name__)

    def merge_windows(self, flagged: pd.DataFrame) -> list[tuple[str, int, int, int]]:
        """Greedy merge of flagged windows into maximal spans.

        Returns:
            (chrom, start, end, n_windows) per span, in coordinate order
        """
        spans = []
        for chrom, group in flagged.groupby(C.CHROM, sort=False):
            group = group.sort_values(C.START)
            cur_start = cur_end = None
            n = 0
            for start, end in zip(group[C.START].to_numpy(), group[C.END].to_numpy()):
                # gap = start - cur_end - 1 bases between the two windows
                if cur_end is not None and start <= cur_end + self.slide_size + 1:
                    cur_end = max(cur_end, int(end))
                    n += 1
                    continue
                if cur_end is not None:
                    spans.append((str(chrom), cur_start, cur_end, n))
                cur_start, cur_end, n = int(start), int(end), 1
            if cur_end is not None:
                spans.append((str(chrom), cur_start, cur_end, n))
        spans.sort(key=lambda s: (chrom_sort_key(s[0]), s[1]))
        return spans

    def split_span(self, positions: np.ndarray) -> list[np.ndarray]:
        """Split sorted positions wherever consecutive ones lie more than max_gap apart."""
        if positions.size == 0:
            return []
        if self.max_gap is None or positions.size == 1:
            return [positions]
        cuts = np.flatnonzero(np.diff(positions) > self.max_gap) + 1
        return np.split(positions, cuts)

    def _summarize(
        self,
        sample: str,
        chrom: str,
        piece: np.ndarray,
        n_windows: int,
        breakpoints: SampleBreakpoints,
        use_sv: bool,
    ) -> dict:
        start, end = int(piece[0]), int(piece[-1])
        seg = _within(breakpoints.positions(chrom, (ORIGIN_SEGMENT,)), start, end)
        sv = _within(breakpoints.positions(chrom, (ORIGIN_SV,)), start, end) if use_sv else piece[:0]
        seg_gaps = consecutive_gaps(seg)
        sv_gaps = consecutive_gaps(sv)
        return {
            C.SAMPLE: sample,
            C.CHROM: chrom,
            C.START: start,
            C.END: end,
            C.N_WINDOWS: n_windows,
            C.N_BREAKS: int(piece.size),
            C.N_BRK_SEG: int(seg.size),
            C.N_BRK_SV: int(sv.size),
            C.DIST_IQM_SEG: iqm(seg_gaps, self.iqm_low, self.iqm_high),
            C.DIST_IQM_SV: iqm(sv_gaps, self.iqm_low, self.iqm_high),
            C.DIST_IQSD_SEG: iqsd(seg_gaps, self.iqm_low, self.iqm_high),
            C.DIST_IQSD_SV: iqsd(sv_gaps, self.iqm_low, self.iqm_high),
        }

    def build_regions(self, scan: WindowScan, breakpoints: SampleBreakpoints) -> pd.DataFrame:
        """Candidate regions of one sample, sorted by chromosome and start."""
        flagged = scan.flagged
        if flagged.empty:
            return empty_regions()

        use_sv = ORIGIN_SV in scan.origins
        rows = []
        dropped = 0
        for chrom, span_start, span_end, _ in self.merge_windows(flagged):
            chrom_windows = flagged[flagged[C.CHROM] == chrom]
            positions = _within(breakpoints.positions(chrom, scan.origins), span_start, span_end)
            for piece in self.split_span(positions):
                start, end = int(piece[0]), int(piece[-1])
                n_windows = int(
                    ((chrom_windows[C.START] <= end) & (chrom_windows[C.END] >= start)).sum()
                )
                row = self._summarize(scan.sample, chrom, piece, n_windows, breakpoints, use_sv)
                if (
                    start >= end
                    or n_windows == 0
                    or row[C.N_BREAKS] < self.num_breaks
                    or row[C.N_BRK_SEG] < self.min_num_probes
                ):
                    dropped += 1
                    continue
                rows.append(row)

        if dropped:
            self.logger.debug(f"{scan.sample}: {dropped} sparse candidate piece(s) discarded")
        if not rows:
            return empty_regions()
        return pd.DataFrame(rows, columns=REGION_COLUMNS)
