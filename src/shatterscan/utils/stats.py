"""Robust statistics used by region scoring.

All helpers return finite floats. Empty inputs and zero denominators map to
0.0 so that downstream threshold comparisons never see NaN or Inf.
"""

from __future__ import annotations

import numpy as np

from shatterscan.constants import IQM_HIGH_QUANTILE, IQM_LOW_QUANTILE


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide two numbers, returning default if the denominator is zero."""
    if denominator == 0 or not np.isfinite(denominator):
        return default
    return float(numerator) / float(denominator)


def _central_values(values, low_q: float, high_q: float) -> np.ndarray:
    """Values whose ordinal rank lies strictly inside the [low_q, high_q] rank quantiles."""
    x = np.asarray(values, dtype=float)
    # Ordinal ranks (1-based), ties broken by input order
    ranks = np.empty(len(x), dtype=float)
    ranks[np.argsort(x, kind="stable")] = np.arange(1, len(x) + 1)
    q1 = np.quantile(ranks, low_q)
    q2 = np.quantile(ranks, high_q)
    return x[(ranks > q1) & (ranks < q2)]


def iqm(values, low_q: float = IQM_LOW_QUANTILE, high_q: float = IQM_HIGH_QUANTILE) -> float:
    """Interquantile mean.

    Args:
        values: Numeric values
        low_q: Lower rank quantile to trim below
        high_q: Upper rank quantile to trim above

    Returns:
        Mean of the central values; the plain mean when trimming leaves
        nothing (fewer than three values); 0.0 for empty input.
    """
    x = np.asarray(values, dtype=float)
    if x.size == 0:
        return 0.0
    central = _central_values(x, low_q, high_q)
    if central.size == 0:
        return float(np.mean(x))
    return float(np.mean(central))


def iqsd(values, low_q: float = IQM_LOW_QUANTILE, high_q: float = IQM_HIGH_QUANTILE) -> float:
    """Interquantile standard deviation (ddof=1), 0.0 when undefined."""
    x = np.asarray(values, dtype=float)
    if x.size == 0:
        return 0.0
    central = _central_values(x, low_q, high_q)
    if central.size == 0:
        central = x
    if central.size < 2:
        return 0.0
    return float(np.std(central, ddof=1))


def sample_sd(values) -> float:
    """Sample standard deviation, 0.0 for fewer than two values."""
    x = np.asarray(values, dtype=float)
    if x.size < 2:
        return 0.0
    return float(np.std(x, ddof=1))


def consecutive_gaps(positions) -> np.ndarray:
    """Distances between consecutive sorted unique positions."""
    pos = np.unique(np.asarray(positions, dtype=np.int64))
    if pos.size < 2:
        return np.empty(0, dtype=np.int64)
    return np.diff(pos)


def dispersion_density(positions, span: float) -> float:
    """Median absolute deviation from the mean position, normalized by span."""
    pos = np.unique(np.asarray(positions, dtype=float))
    if pos.size == 0 or span <= 0:
        return 0.0
    mad = float(np.median(np.abs(pos - pos.mean())))
    return safe_divide(mad, span)
