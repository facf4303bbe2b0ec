"""Shared pipeline types.

Only lightweight dataclasses live here so the CLI and tests can import the
result containers without pulling in the analysis stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from shatterscan.constants import TIER_HIGH
from shatterscan.utils.column_standards import ColumnStandard as C, RECURRENT_COLUMNS


class StageNames:
    """Canonical stage labels used in logs and warnings."""

    INDEX = "breakpoint_index"
    SCAN = "window_scan"
    RECURRENCE = "recurrence"


@dataclass
class SampleResult:
    """Per-sample output: scored windows and the classified region table."""

    sample: str
    windows: pd.DataFrame
    regions: pd.DataFrame
    window_mean: float = 0.0
    window_sd: float = 0.0
    window_threshold: float = 0.0

    @property
    def n_flagged(self) -> int:
        return int(self.windows[C.FLAGGED].sum()) if not self.windows.empty else 0

    @property
    def n_regions(self) -> int:
        return len(self.regions)

    @property
    def n_high_confidence(self) -> int:
        if self.regions.empty or C.TIER not in self.regions:
            return 0
        return int((self.regions[C.TIER] == TIER_HIGH).sum())


@dataclass
class CohortResult:
    """Everything one pipeline run produces."""

    samples: Dict[str, SampleResult] = field(default_factory=dict)
    bins: Optional[pd.DataFrame] = None
    bin_matrix: Optional[pd.DataFrame] = None
    freq_cut: Optional[int] = None
    recurrent: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=RECURRENT_COLUMNS))
    count_pvalues: Optional[np.ndarray] = None
    skipped_samples: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def regions_table(self) -> pd.DataFrame:
        """Region tables of all analyzed samples stacked in sample order."""
        frames = [r.regions for _, r in sorted(self.samples.items()) if not r.regions.empty]
        if not frames:
            first = next(iter(self.samples.values()), None)
            columns = list(first.regions.columns) if first is not None else []
            return pd.DataFrame(columns=columns)
        return pd.concat(frames, ignore_index=True)

    def bins_table(self) -> Optional[pd.DataFrame]:
        """Bin table with one flag column per sample appended, or None."""
        if self.bins is None:
            return None
        if self.bin_matrix is None:
            return self.bins.copy()
        flags = self.bin_matrix.astype(int).reset_index(drop=True)
        return pd.concat([self.bins.reset_index(drop=True), flags], axis=1)

    def summary(self) -> Dict[str, Any]:
        return {
            "samples_analyzed": len(self.samples),
            "samples_skipped": len(self.skipped_samples),
            "regions": sum(r.n_regions for r in self.samples.values()),
            "high_confidence": sum(r.n_high_confidence for r in self.samples.values()),
            "freq_cut": self.freq_cut,
            "recurrent_regions": len(self.recurrent),
            "warnings": len(self.warnings),
        }
