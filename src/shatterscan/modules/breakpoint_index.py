"""
Breakpoint Index - per-sample, per-chromosome breakpoint positions.

Segmentation breakpoints are segment boundaries with a copy-number change of
at least log2(1 + fc_pct) between the two adjacent segments; the breakpoint
sits on the end coordinate of the left segment. SV breakpoints are both ends
of every SV pair. Within one sample, chromosome and origin, chains of
breakpoints closer than `clean_brk` collapse onto their first position to
absorb over-segmentation.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from shatterscan.constants import ORIGIN_SEGMENT, ORIGIN_SV, ORIGINS
from shatterscan.exceptions import InvalidInputError
from shatterscan.utils.column_standards import BREAKPOINT_COLUMNS, ColumnStandard as C
from shatterscan.utils.logging import get_logger

_EMPTY = np.empty(0, dtype=np.int64)
_EMPTY.setflags(write=False)


def collapse_close(positions: Sequence[int], min_spacing: int) -> np.ndarray:
    """Sorted unique positions with chains closer than min_spacing reduced to their first member."""
    pos = np.unique(np.asarray(positions, dtype=np.int64))
    if pos.size < 2 or min_spacing <= 0:
        return pos
    keep = np.ones(pos.size, dtype=bool)
    keep[1:] = np.diff(pos) >= min_spacing
    return pos[keep]


def segment_breakpoints(segments: pd.DataFrame, fc_pct: float) -> pd.DataFrame:
    """Breakpoints between consecutive segments whose values differ enough.

    Args:
        segments: Canonical segmentation table
        fc_pct: Fold-change cutoff; boundaries need |delta| >= log2(1 + fc_pct)

    Returns:
        DataFrame with sample, chrom, pos
    """
    cut = math.log2(1.0 + fc_pct)
    seg = segments.sort_values([C.SAMPLE, C.CHROM, C.START]).reset_index(drop=True)
    nxt = seg.shift(-1)
    same_run = (seg[C.SAMPLE] == nxt[C.SAMPLE]) & (seg[C.CHROM] == nxt[C.CHROM])
    delta = (nxt[C.SEGMEAN] - seg[C.SEGMEAN]).abs()
    # tolerance keeps exact-cut boundaries despite float rounding
    keep = same_run & (delta >= cut - 1e-12)
    brk = seg.loc[keep, [C.SAMPLE, C.CHROM, C.END]].rename(columns={C.END: C.POS})
    return brk.reset_index(drop=True)


def sv_breakpoints(svs: pd.DataFrame) -> pd.DataFrame:
    """Both ends of every SV pair as (sample, chrom, pos)."""
    ends1 = svs[[C.SAMPLE, C.CHROM1, C.POS1]].set_axis([C.SAMPLE, C.CHROM, C.POS], axis=1)
    ends2 = svs[[C.SAMPLE, C.CHROM2, C.POS2]].set_axis([C.SAMPLE, C.CHROM, C.POS], axis=1)
    return pd.concat([ends1, ends2], ignore_index=True)


@dataclass
class SampleBreakpoints:
    """Read-only breakpoint positions of one sample, split by origin."""

    sample: str
    segment: dict[str, np.ndarray] = field(default_factory=dict)
    sv: dict[str, np.ndarray] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for arrays in (self.segment, self.sv):
            for arr in arrays.values():
                arr.setflags(write=False)

    @property
    def chromosomes(self) -> list[str]:
        return sorted(set(self.segment) | set(self.sv))

    def positions(self, chrom: str, origins: Optional[Iterable[str]] = None) -> np.ndarray:
        """Sorted unique positions on a chromosome for the requested origins."""
        origins = ORIGINS if origins is None else tuple(origins)
        parts = []
        if ORIGIN_SEGMENT in origins:
            parts.append(self.segment.get(chrom, _EMPTY))
        if ORIGIN_SV in origins:
            parts.append(self.sv.get(chrom, _EMPTY))
        if not parts:
            return _EMPTY
        if len(parts) == 1:
            return parts[0]
        return np.unique(np.concatenate(parts))

    def snap(self, chrom: str, pos: int, origin: str = ORIGIN_SV) -> int:
        """Indexed position that a raw position of `origin` collapsed onto.

        Close chains keep their first member, so the representative is the
        last indexed position at or before `pos`. Positions the sample never
        indexed are returned unchanged.
        """
        arr = (self.sv if origin == ORIGIN_SV else self.segment).get(chrom, _EMPTY)
        k = int(np.searchsorted(arr, pos, side="right")) - 1
        if k < 0:
            return int(pos)
        return int(arr[k])

    def count(self, origin: Optional[str] = None) -> int:
        origins = ORIGINS if origin is None else (origin,)
        total = 0
        if ORIGIN_SEGMENT in origins:
            total += sum(arr.size for arr in self.segment.values())
        if ORIGIN_SV in origins:
            total += sum(arr.size for arr in self.sv.values())
        return total

    @property
    def is_empty(self) -> bool:
        return self.count() == 0


class BreakpointIndex:
    """Cohort-wide breakpoint index, built once per run."""

    def __init__(
        self,
        fc_pct: float = 0.2,
        clean_brk: int = 1000,
        logger: Optional[logging.Logger] = None,
    ):
        self.fc_pct = float(fc_pct)
        self.clean_brk = int(clean_brk)
        self.logger = logger or get_logger(self.__class__.__name__)

        self._samples: dict[str, SampleBreakpoints] = {}
        self._sv_pairs: dict[str, pd.DataFrame] = {}
        self._table = pd.DataFrame(columns=BREAKPOINT_COLUMNS)
        self.has_sv = False

    def build(self, segments: pd.DataFrame, svs: Optional[pd.DataFrame] = None) -> "BreakpointIndex":
        """Index canonical segmentation (and optional SV) tables."""
        seg_brk = segment_breakpoints(segments, self.fc_pct)
        seg_arrays = self._collapse_by_sample(seg_brk)

        # an empty SV table runs the segment-only mode
        self.has_sv = svs is not None and not svs.empty
        sv_arrays: dict[str, dict[str, np.ndarray]] = {}
        if self.has_sv:
            sv_arrays = self._collapse_by_sample(sv_breakpoints(svs))
            self._sv_pairs = {
                str(sample): group.reset_index(drop=True)
                for sample, group in svs.groupby(C.SAMPLE, sort=True)
            }

        samples = set(segments[C.SAMPLE].astype(str))
        if svs is not None:
            samples |= set(svs[C.SAMPLE].astype(str))

        self._samples = {
            sample: SampleBreakpoints(
                sample=sample,
                segment=seg_arrays.get(sample, {}),
                sv=sv_arrays.get(sample, {}),
            )
            for sample in sorted(samples)
        }
        self._table = self._build_table()

        n_seg = int((self._table[C.ORIGIN] == ORIGIN_SEGMENT).sum())
        n_sv = len(self._table) - n_seg
        self.logger.info(
            f"Indexed {n_seg:,} segment and {n_sv:,} SV breakpoints "
            f"across {len(self._samples):,} samples"
        )
        return self

    def _collapse_by_sample(self, brk: pd.DataFrame) -> dict[str, dict[str, np.ndarray]]:
        arrays: dict[str, dict[str, np.ndarray]] = {}
        for (sample, chrom), group in brk.groupby([C.SAMPLE, C.CHROM], sort=True):
            collapsed = collapse_close(group[C.POS].to_numpy(), self.clean_brk)
            arrays.setdefault(str(sample), {})[str(chrom)] = collapsed
        return arrays

    def _build_table(self) -> pd.DataFrame:
        rows = []
        for sample, sbp in self._samples.items():
            for origin, arrays in ((ORIGIN_SEGMENT, sbp.segment), (ORIGIN_SV, sbp.sv)):
                for chrom, arr in arrays.items():
                    rows.extend((sample, chrom, int(p), origin) for p in arr)
        return pd.DataFrame(rows, columns=BREAKPOINT_COLUMNS)

    @property
    def samples(self) -> list[str]:
        return list(self._samples)

    @property
    def table(self) -> pd.DataFrame:
        """All indexed breakpoints (sample, chrom, pos, origin)."""
        return self._table.copy()

    def get(self, sample: str) -> SampleBreakpoints:
        """Breakpoints of one sample.

        Raises:
            InvalidInputError: unknown sample or no usable breakpoints
        """
        sbp = self._samples.get(sample)
        if sbp is None:
            raise InvalidInputError(f"Sample not in breakpoint index: {sample}", sample=sample)
        if sbp.is_empty:
            raise InvalidInputError(f"Sample {sample} has no usable breakpoints", sample=sample)
        return sbp

    def sv_pairs(self, sample: str) -> pd.DataFrame:
        """SV pairs of one sample (empty frame when none)."""
        pairs = self._sv_pairs.get(sample)
        if pairs is None:
            return pd.DataFrame(
                columns=[C.SAMPLE, C.CHROM1, C.POS1, C.STRAND1, C.CHROM2, C.POS2, C.STRAND2, C.SVCLASS]
            )
        return pairs

    def query(
        self, chrom: str, start: int, end: int, sample: Optional[str] = None
    ) -> pd.DataFrame:
        """Breakpoints within [start, end] on a chromosome, optionally for one sample."""
        t = self._table
        mask = (t[C.CHROM] == chrom) & (t[C.POS] >= start) & (t[C.POS] <= end)
        if sample is not None:
            mask &= t[C.SAMPLE] == sample
        hits = t.loc[mask]
        if hits.empty:
            self.logger.debug(f"No breakpoints in {chrom}:{start}-{end}")
        return hits.sort_values([C.SAMPLE, C.POS]).reset_index(drop=True)
