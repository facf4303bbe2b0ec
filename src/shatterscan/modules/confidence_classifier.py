"""
Confidence Classifier - HC/LC tiers for candidate regions.

A region is high-confidence (HC) when either

- SV data is available and both the segment and the SV breakpoint densities
  reach `disp_cut` (two orthogonal data types agree), or
- it belongs to a linked cluster of two or more regions whose interleaving
  fraction reaches `interleave_cut` (chromoplexy signature).

Density is the median absolute deviation of the breakpoint positions from
their mean, divided by the region span. Everything else is low-confidence.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pandas as pd

from shatterscan.constants import ORIGIN_SEGMENT, ORIGIN_SV, TIER_HIGH, TIER_LOW
from shatterscan.modules.breakpoint_index import SampleBreakpoints
from shatterscan.utils.column_standards import ColumnStandard as C
from shatterscan.utils.logging import get_logger
from shatterscan.utils.stats import dispersion_density


class ConfidenceClassifier:
    """Assigns confidence tiers from breakpoint dispersion and linkage."""

    def __init__(
        self,
        disp_cut: float = 0.05,
        interleave_cut: float = 0.0,
        logger: Optional[logging.Logger] = None,
    ):
        self.disp_cut = float(disp_cut)
        self.interleave_cut = float(interleave_cut)
        self.logger = logger or get_logger(self.__class__.__name__)

    def densities(
        self, regions: pd.DataFrame, breakpoints: SampleBreakpoints, origin: str
    ) -> np.ndarray:
        values = np.zeros(len(regions), dtype=float)
        for k, (chrom, start, end) in enumerate(
            zip(regions[C.CHROM], regions[C.START], regions[C.END])
        ):
            pos = breakpoints.positions(chrom, (origin,))
            lo = np.searchsorted(pos, start, side="left")
            hi = np.searchsorted(pos, end, side="right")
            values[k] = dispersion_density(pos[lo:hi], float(end - start))
        return values

    def tier(
        self,
        density_seg: float,
        density_sv: Optional[float],
        cluster_n_regions,
        interleave_frac,
    ) -> str:
        """Tier of a single region; None/NA linkage means SV data was absent."""
        corroborated = (
            density_sv is not None
            and density_seg >= self.disp_cut
            and density_sv >= self.disp_cut
        )
        linked = (
            not pd.isna(cluster_n_regions)
            and int(cluster_n_regions) >= 2
            and not pd.isna(interleave_frac)
            and float(interleave_frac) >= self.interleave_cut
        )
        return TIER_HIGH if corroborated or linked else TIER_LOW

    def classify(
        self, regions: pd.DataFrame, breakpoints: SampleBreakpoints, has_sv: bool
    ) -> pd.DataFrame:
        """Add density_seg, density_sv and tier columns to a linkage-annotated region table."""
        out = regions.reset_index(drop=True).copy()
        if out.empty:
            out[C.DENSITY_SEG] = pd.Series(dtype=float)
            out[C.DENSITY_SV] = pd.Series(dtype="Float64")
            out[C.TIER] = pd.Series(dtype=object)
            return out

        dens_seg = self.densities(out, breakpoints, ORIGIN_SEGMENT)
        dens_sv = self.densities(out, breakpoints, ORIGIN_SV) if has_sv else None

        tiers = [
            self.tier(
                dens_seg[k],
                None if dens_sv is None else dens_sv[k],
                out.at[k, C.CLUSTER_N_REGIONS] if C.CLUSTER_N_REGIONS in out else pd.NA,
                out.at[k, C.INTERLEAVE_FRAC] if C.INTERLEAVE_FRAC in out else pd.NA,
            )
            for k in range(len(out))
        ]

        out[C.DENSITY_SEG] = dens_seg
        if dens_sv is None:
            out[C.DENSITY_SV] = pd.array([pd.NA] * len(out), dtype="Float64")
        else:
            out[C.DENSITY_SV] = pd.array(dens_sv, dtype="Float64")
        out[C.TIER] = tiers

        n_hc = tiers.count(TIER_HIGH)
        self.logger.debug(f"{n_hc}/{len(tiers)} regions classified {TIER_HIGH}")
        return out
