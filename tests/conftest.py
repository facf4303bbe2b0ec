"""Pytest configuration for ShatterScan tests."""

import logging
import sys
from pathlib import Path

import pandas as pd
import pytest

# Add src directory to Python path
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# GRCh37 chr1
CHR1_LENGTH = 249_250_621


def segments_from_breakpoints(sample, chrom, positions, length, probes=10):
    """Contiguous segments whose left-segment ends fall on `positions`.

    Segment values alternate between 0 and 1, so every boundary is a
    copy-number change well above the default fold-change cutoff.
    """
    positions = sorted(positions)
    rows = []
    start = 1
    for k, end in enumerate(positions + [length]):
        rows.append(
            {
                "sample": sample,
                "chrom": chrom,
                "start": start,
                "end": end,
                "probes": probes,
                "segmean": float(k % 2),
            }
        )
        start = end + 1
    return pd.DataFrame(rows)


def sv_table(sample, pairs, svclass="translocation"):
    """SV table from (chrom1, pos1, chrom2, pos2) tuples."""
    return pd.DataFrame(
        [
            {
                "sample": sample,
                "chrom1": c1,
                "pos1": p1,
                "strand1": "+",
                "chrom2": c2,
                "pos2": p2,
                "strand2": "-",
                "svclass": svclass,
            }
            for c1, p1, c2, p2 in pairs
        ]
    )


@pytest.fixture
def make_segments():
    return segments_from_breakpoints


@pytest.fixture
def make_svs():
    return sv_table


@pytest.fixture
def chr1_length():
    return CHR1_LENGTH


@pytest.fixture(autouse=True)
def reset_logging_after_test():
    """Reset shatterscan logger state after each test.

    setup_logging() sets propagate=False, which breaks caplog in later tests.
    """
    yield
    app_logger = logging.getLogger("shatterscan")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True
