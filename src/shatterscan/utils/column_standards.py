"""
ShatterScan Column Naming Standards and Standardization Module

Defines the canonical column names of the input tables and of every table
the analysis stages produce, plus the alias map used to bring raw tables onto
the canonical schema.

Naming Philosophy:
- Simple snake_case names
- Coordinates are 1-based and inclusive
- Per-origin metrics carry a `_seg` / `_sv` suffix
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd


@dataclass
class ColumnStandard:
    """Defines the unified column naming standard for ShatterScan."""

    # === Identity ===
    SAMPLE = "sample"

    # === Segmentation input ===
    CHROM = "chrom"
    START = "start"
    END = "end"
    PROBES = "probes"
    SEGMEAN = "segmean"

    # === SV input ===
    CHROM1 = "chrom1"
    POS1 = "pos1"
    STRAND1 = "strand1"
    CHROM2 = "chrom2"
    POS2 = "pos2"
    STRAND2 = "strand2"
    SVCLASS = "svclass"

    # === Breakpoints ===
    POS = "pos"
    ORIGIN = "origin"

    # === Window scores ===
    COUNT = "count"
    FLAGGED = "flagged"

    # === Candidate regions ===
    N_WINDOWS = "n_windows"
    N_BREAKS = "n_breaks"
    N_BRK_SEG = "n_brk_seg"
    N_BRK_SV = "n_brk_sv"
    DIST_IQM_SEG = "dist_iqm_seg"
    DIST_IQM_SV = "dist_iqm_sv"
    DIST_IQSD_SEG = "dist_iqsd_seg"
    DIST_IQSD_SV = "dist_iqsd_sv"

    # === Linkage ===
    CLUSTER_ID = "cluster_id"
    CLUSTER_SIZE = "cluster_size"  # summed member spans (bp)
    CLUSTER_N_REGIONS = "cluster_n_regions"
    DEGREE = "degree"
    N_SV_INTERNAL = "n_sv_internal"
    N_SV_LINKS = "n_sv_links"
    INTERLEAVE_FRAC = "interleave_frac"

    # === Confidence ===
    DENSITY_SEG = "density_seg"
    DENSITY_SV = "density_sv"
    TIER = "tier"

    # === Recurrence ===
    BIN_ID = "bin_id"
    N_SAMPLES = "n_samples"
    P_VALUE = "p_value"
    PEAK_START = "peak_start"
    PEAK_END = "peak_end"
    PEAK_COUNT = "peak_count"
    SAMPLES = "samples"


SEGMENT_COLUMNS = [
    ColumnStandard.SAMPLE,
    ColumnStandard.CHROM,
    ColumnStandard.START,
    ColumnStandard.END,
    ColumnStandard.PROBES,
    ColumnStandard.SEGMEAN,
]

SV_COLUMNS = [
    ColumnStandard.SAMPLE,
    ColumnStandard.CHROM1,
    ColumnStandard.POS1,
    ColumnStandard.STRAND1,
    ColumnStandard.CHROM2,
    ColumnStandard.POS2,
    ColumnStandard.STRAND2,
    ColumnStandard.SVCLASS,
]

BREAKPOINT_COLUMNS = [
    ColumnStandard.SAMPLE,
    ColumnStandard.CHROM,
    ColumnStandard.POS,
    ColumnStandard.ORIGIN,
]

REGION_COLUMNS = [
    ColumnStandard.SAMPLE,
    ColumnStandard.CHROM,
    ColumnStandard.START,
    ColumnStandard.END,
    ColumnStandard.N_WINDOWS,
    ColumnStandard.N_BREAKS,
    ColumnStandard.N_BRK_SEG,
    ColumnStandard.N_BRK_SV,
    ColumnStandard.DIST_IQM_SEG,
    ColumnStandard.DIST_IQM_SV,
    ColumnStandard.DIST_IQSD_SEG,
    ColumnStandard.DIST_IQSD_SV,
]

LINKAGE_COLUMNS = [
    ColumnStandard.CLUSTER_ID,
    ColumnStandard.CLUSTER_SIZE,
    ColumnStandard.CLUSTER_N_REGIONS,
    ColumnStandard.DEGREE,
    ColumnStandard.N_SV_INTERNAL,
    ColumnStandard.N_SV_LINKS,
    ColumnStandard.INTERLEAVE_FRAC,
]

RECURRENT_COLUMNS = [
    ColumnStandard.CHROM,
    ColumnStandard.START,
    ColumnStandard.END,
    ColumnStandard.PEAK_START,
    ColumnStandard.PEAK_END,
    ColumnStandard.PEAK_COUNT,
    ColumnStandard.N_SAMPLES,
    ColumnStandard.SAMPLES,
]


# Raw column names seen in segmentation/SV exports, lower-cased
COLUMN_ALIASES = {
    "id": ColumnStandard.SAMPLE,
    "sample_id": ColumnStandard.SAMPLE,
    "samplename": ColumnStandard.SAMPLE,
    "chr": ColumnStandard.CHROM,
    "chromosome": ColumnStandard.CHROM,
    "loc.start": ColumnStandard.START,
    "loc_start": ColumnStandard.START,
    "startpos": ColumnStandard.START,
    "loc.end": ColumnStandard.END,
    "loc_end": ColumnStandard.END,
    "endpos": ColumnStandard.END,
    "num.mark": ColumnStandard.PROBES,
    "num_mark": ColumnStandard.PROBES,
    "num_probes": ColumnStandard.PROBES,
    "seg.mean": ColumnStandard.SEGMEAN,
    "seg_mean": ColumnStandard.SEGMEAN,
    "segment_mean": ColumnStandard.SEGMEAN,
    "log2ratio": ColumnStandard.SEGMEAN,
    "chr1": ColumnStandard.CHROM1,
    "chr2": ColumnStandard.CHROM2,
    "class": ColumnStandard.SVCLASS,
    "sv_class": ColumnStandard.SVCLASS,
    "svtype": ColumnStandard.SVCLASS,
}


def standardize_columns(
    df: pd.DataFrame, aliases: Optional[dict[str, str]] = None
) -> pd.DataFrame:
    """Return a copy of df with known aliases renamed to canonical names.

    Matching is case-insensitive. A canonical column that is already present
    is never overwritten by an alias.
    """
    aliases = COLUMN_ALIASES if aliases is None else aliases
    rename: dict[str, str] = {}
    present = {str(c) for c in df.columns}
    for col in df.columns:
        key = str(col).strip().lower()
        if key in present and key != col:
            # e.g. "Sample" -> "sample"
            continue
        target = aliases.get(key, key)
        if target != col and target not in present and target not in rename.values():
            rename[col] = target
    return df.rename(columns=rename)
