"""
Input tables - canonical segmentation and SV schemas.

Raw exports from segmentation and SV callers use many column spellings. These
helpers bring them onto the canonical schema consumed by the analysis stages:

- segments: sample, chrom, start, end, probes, segmean
- SVs:      sample, chrom1, pos1, strand1, chrom2, pos2, strand2, svclass
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from shatterscan.constants import STRANDS, SV_CLASS_CODES, SV_CLASSES
from shatterscan.exceptions import FileFormatError, InvalidInputError
from shatterscan.utils.column_standards import (
    ColumnStandard as C,
    SEGMENT_COLUMNS,
    SV_COLUMNS,
    standardize_columns,
)
from shatterscan.utils.logging import LogTemplates, get_logger

logger = get_logger("input_tables")


def _prefix_chrom(series: pd.Series) -> pd.Series:
    chroms = series.astype(str).str.strip()
    bare = ~chroms.str.lower().str.startswith("chr")
    return chroms.where(~bare, "chr" + chroms)


def _require(df: pd.DataFrame, columns: list[str], table: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise InvalidInputError(f"{table} table is missing column(s): {', '.join(missing)}")


def _to_int(df: pd.DataFrame, column: str, table: str) -> pd.Series:
    values = pd.to_numeric(df[column], errors="coerce")
    if values.isna().any():
        raise InvalidInputError(f"{table} column '{column}' has non-numeric or missing values")
    return values.round().astype("int64")


def normalize_segments(df: pd.DataFrame) -> pd.DataFrame:
    """Return the segmentation table on the canonical schema.

    Raises:
        InvalidInputError: missing columns, non-numeric coordinates or start >= end
    """
    df = standardize_columns(df)
    if C.PROBES not in df.columns:
        df = df.assign(**{C.PROBES: 0})
    _require(df, SEGMENT_COLUMNS, "Segmentation")

    out = pd.DataFrame(
        {
            C.SAMPLE: df[C.SAMPLE].astype(str),
            C.CHROM: _prefix_chrom(df[C.CHROM]),
            C.START: _to_int(df, C.START, "Segmentation"),
            C.END: _to_int(df, C.END, "Segmentation"),
            C.PROBES: pd.to_numeric(df[C.PROBES], errors="coerce").fillna(0).astype("int64"),
            C.SEGMEAN: pd.to_numeric(df[C.SEGMEAN], errors="coerce"),
        }
    )

    bad = out[C.START] >= out[C.END]
    if bad.any():
        raise InvalidInputError(
            f"Segmentation table has {int(bad.sum())} segment(s) with start >= end"
        )
    if (out[C.START] < 1).any():
        raise InvalidInputError("Segmentation coordinates must be 1-based (start >= 1)")
    if (out[C.PROBES] < 0).any():
        raise InvalidInputError("Segmentation column 'probes' must be non-negative")

    n_missing = int(out[C.SEGMEAN].isna().sum())
    if n_missing:
        logger.warning(f"Dropping {n_missing} segment(s) without a segment value")
        out = out[out[C.SEGMEAN].notna()]

    return out.sort_values([C.SAMPLE, C.CHROM, C.START]).reset_index(drop=True)


def _canonical_svclass(value) -> str:
    text = str(value).strip()
    if text.lower() in SV_CLASSES:
        return text.lower()
    return SV_CLASS_CODES.get(text.upper(), "other")


def normalize_svs(df: pd.DataFrame) -> pd.DataFrame:
    """Return the SV table on the canonical schema.

    Unknown SV classes map to 'other'; unknown strands are kept as '.' and
    logged, since strand never enters the scoring.
    """
    df = standardize_columns(df)
    if C.SVCLASS not in df.columns:
        df = df.assign(**{C.SVCLASS: "other"})
    for strand_col in (C.STRAND1, C.STRAND2):
        if strand_col not in df.columns:
            df = df.assign(**{strand_col: "."})
    _require(df, SV_COLUMNS, "SV")

    out = pd.DataFrame(
        {
            C.SAMPLE: df[C.SAMPLE].astype(str),
            C.CHROM1: _prefix_chrom(df[C.CHROM1]),
            C.POS1: _to_int(df, C.POS1, "SV"),
            C.STRAND1: df[C.STRAND1].astype(str).str.strip(),
            C.CHROM2: _prefix_chrom(df[C.CHROM2]),
            C.POS2: _to_int(df, C.POS2, "SV"),
            C.STRAND2: df[C.STRAND2].astype(str).str.strip(),
            C.SVCLASS: df[C.SVCLASS].map(_canonical_svclass),
        }
    )

    if ((out[C.POS1] < 1) | (out[C.POS2] < 1)).any():
        raise InvalidInputError("SV positions must be 1-based (pos >= 1)")

    for strand_col in (C.STRAND1, C.STRAND2):
        odd = ~out[strand_col].isin(STRANDS)
        if odd.any():
            logger.debug(f"{int(odd.sum())} SV(s) with unrecognized {strand_col}")
            out.loc[odd, strand_col] = "."

    return out.reset_index(drop=True)


def _read_table(path: Union[str, Path], table: str) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileFormatError(f"{table} file not found: {path}")
    try:
        df = pd.read_csv(path, sep="\t", comment="#")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise FileFormatError(f"Cannot parse {table} file {path}: {e}") from e
    logger.info(LogTemplates.FILE_LOADED.format(count=len(df), path=path))
    return df


def read_segments(path: Union[str, Path]) -> pd.DataFrame:
    """Read a tab-separated segmentation file onto the canonical schema."""
    return normalize_segments(_read_table(path, "Segmentation"))


def read_svs(path: Optional[Union[str, Path]]) -> Optional[pd.DataFrame]:
    """Read a tab-separated SV file onto the canonical schema (None passes through)."""
    if path is None:
        return None
    return normalize_svs(_read_table(path, "SV"))


def log_table_summary(
    segments: pd.DataFrame, svs: Optional[pd.DataFrame], log: Optional[logging.Logger] = None
) -> None:
    log = log or logger
    log.info(
        f"Segmentation: {len(segments):,} segments from {segments[C.SAMPLE].nunique():,} samples"
    )
    if svs is not None:
        log.info(f"SVs: {len(svs):,} pairs from {svs[C.SAMPLE].nunique():,} samples")
