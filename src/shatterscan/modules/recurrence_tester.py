"""
Recurrence Tester - cohort-level recurrence of shattered bins.

The genome is cut into non-overlapping bins and every sample flags the bins
its (high-confidence) regions overlap. The null model keeps each sample's
number of flagged bins and scatters them uniformly over the genome: each
permutation draw tallies how many bins end up with 0, 1, 2, ... samples, and
the draw tallies are summed. The tail probability of seeing at least c
samples in a bin under that null gives the per-count p-value; after the
multiple-testing correction, the smallest significant count is `freq_cut`.

Draws are independent: each gets its own generator spawned from the seed, so
the summed tally (and therefore `freq_cut`) is identical for any number of
worker threads.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Mapping, Optional

import numpy as np
import pandas as pd
from statsmodels.stats.multitest import multipletests

from shatterscan.constants import CORRECTION_METHODS, SAMPLE_SEPARATOR, TIER_HIGH
from shatterscan.exceptions import ConfigError, InsufficientDataError
from shatterscan.genome import GenomeContext
from shatterscan.utils.column_standards import ColumnStandard as C, RECURRENT_COLUMNS
from shatterscan.utils.logging import get_logger


def genome_bins(genome: GenomeContext, bin_size: int) -> pd.DataFrame:
    """Non-overlapping bins (bin_id, chrom, start, end) over the genome context."""
    bins = genome.tile(bin_size)
    bins.insert(0, C.BIN_ID, np.arange(len(bins)))
    return bins


def flag_matrix(
    bins: pd.DataFrame,
    regions_by_sample: Mapping[str, pd.DataFrame],
    bin_size: int,
    include_low_confidence: bool = False,
) -> pd.DataFrame:
    """Bin x sample boolean matrix: True where a sample's region overlaps the bin.

    `bins` must come from genome_bins() with the same bin_size. Only HC
    regions count unless include_low_confidence is set. Samples without
    qualifying regions are kept as all-False columns.
    """
    offsets = bins.groupby(C.CHROM, sort=False)[C.BIN_ID].first().to_dict()
    last = bins.groupby(C.CHROM, sort=False)[C.BIN_ID].last().to_dict()

    samples = sorted(regions_by_sample)
    matrix = np.zeros((len(bins), len(samples)), dtype=bool)
    for col, sample in enumerate(samples):
        regions = regions_by_sample[sample]
        if regions is None or regions.empty:
            continue
        if not include_low_confidence and C.TIER in regions:
            regions = regions[regions[C.TIER] == TIER_HIGH]
        for chrom, start, end in zip(regions[C.CHROM], regions[C.START], regions[C.END]):
            if chrom not in offsets:
                continue
            first = offsets[chrom] + (int(start) - 1) // bin_size
            stop = min(offsets[chrom] + (int(end) - 1) // bin_size, last[chrom])
            matrix[first : stop + 1, col] = True

    return pd.DataFrame(matrix, index=bins[C.BIN_ID].to_numpy(), columns=samples)


@dataclass
class RecurrenceResult:
    """Outcome of one recurrence test. Never mutated after construction."""

    freq_cut: int
    threshold: float
    correction: str
    alpha: float
    n_permutations: int
    null_histogram: np.ndarray
    count_pvalues: np.ndarray  # p(count >= c) for c = 0..n_samples
    bins: pd.DataFrame  # bin_id, chrom, start, end, n_samples, p_value, recurrent
    regions: pd.DataFrame
    region_samples: list[frozenset] = field(default_factory=list)

    @property
    def n_recurrent_bins(self) -> int:
        return int(self.bins["recurrent"].sum())


class RecurrenceTester:
    """Permutation test for recurrently shattered bins.

    Args:
        seed: Seed of the permutation generator (required for reproducibility)
        n_permutations: Number of null draws
        alpha: Family-wise (bonferroni/none) or false-discovery (fdr) level
        correction: 'bonferroni', 'fdr' or 'none'
        threads: Worker threads for the permutation draws
    """

    def __init__(
        self,
        seed: int,
        n_permutations: int = 1000,
        alpha: float = 0.05,
        correction: str = "bonferroni",
        threads: int = 1,
        logger: Optional[logging.Logger] = None,
    ):
        if seed is None:
            raise ConfigError("A permutation seed is required")
        if correction not in CORRECTION_METHODS:
            raise ConfigError(f"Unknown correction method: {correction}")
        if n_permutations < 1:
            raise ConfigError("n_permutations must be >= 1")
        if not 0.0 < alpha < 1.0:
            raise ConfigError("alpha must lie in (0, 1)")
        self.seed = int(seed)
        self.n_permutations = int(n_permutations)
        self.alpha = float(alpha)
        self.correction = correction
        self.threads = max(1, int(threads))
        self.logger = logger or get_logger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Null model
    # ------------------------------------------------------------------
    @staticmethod
    def _draw(rng: np.random.Generator, flagged_per_sample: np.ndarray, n_bins: int) -> np.ndarray:
        per_bin = np.zeros(n_bins, dtype=np.int64)
        for k in flagged_per_sample:
            if k == 0:
                continue
            per_bin[rng.choice(n_bins, size=int(k), replace=False)] += 1
        return np.bincount(per_bin, minlength=len(flagged_per_sample) + 1)

    def _run_chunk(
        self, seeds: list[np.random.SeedSequence], flagged_per_sample: np.ndarray, n_bins: int
    ) -> np.ndarray:
        tally = np.zeros(len(flagged_per_sample) + 1, dtype=np.int64)
        for seq in seeds:
            tally += self._draw(np.random.default_rng(seq), flagged_per_sample, n_bins)
        return tally

    def null_histogram(self, flagged_per_sample, n_bins: int) -> np.ndarray:
        """Summed histogram of per-bin sample counts over all permutation draws."""
        flagged_per_sample = np.asarray(flagged_per_sample, dtype=np.int64)
        seeds = np.random.SeedSequence(self.seed).spawn(self.n_permutations)
        n_chunks = min(self.threads, self.n_permutations)
        chunks = [seeds[i::n_chunks] for i in range(n_chunks)]

        if n_chunks == 1:
            return self._run_chunk(chunks[0], flagged_per_sample, n_bins)

        with ThreadPoolExecutor(max_workers=n_chunks) as pool:
            futures = [
                pool.submit(self._run_chunk, chunk, flagged_per_sample, n_bins) for chunk in chunks
            ]
            # Additive reduction; order does not matter
            return sum((f.result() for f in futures), np.zeros(len(flagged_per_sample) + 1, dtype=np.int64))

    @staticmethod
    def tail_pvalues(histogram: np.ndarray) -> np.ndarray:
        """p(c) = (#null bins with count >= c + 1) / (#null bins + 1)."""
        tail = np.cumsum(histogram[::-1])[::-1]
        return (tail + 1) / (histogram.sum() + 1)

    # ------------------------------------------------------------------
    # Cutoff
    # ------------------------------------------------------------------
    def significance_threshold(self, observed_p: np.ndarray) -> float:
        n_tests = len(observed_p)
        if self.correction == "bonferroni":
            return self.alpha / n_tests
        if self.correction == "none":
            return self.alpha
        reject, _, _, _ = multipletests(observed_p, alpha=self.alpha, method="fdr_bh")
        return float(observed_p[reject].max()) if reject.any() else 0.0

    @staticmethod
    def frequency_cutoff(count_pvalues: np.ndarray, threshold: float) -> int:
        """Smallest sample count c >= 1 with p(c) <= threshold (n_samples + 1 if none)."""
        n_samples = len(count_pvalues) - 1
        significant = np.flatnonzero(count_pvalues[1:] <= threshold)
        if significant.size == 0:
            return n_samples + 1
        return int(significant[0]) + 1

    # ------------------------------------------------------------------
    # Recurrent regions
    # ------------------------------------------------------------------
    @staticmethod
    def collapse(
        bins: pd.DataFrame, matrix: pd.DataFrame, recurrent: np.ndarray
    ) -> tuple[pd.DataFrame, list[frozenset]]:
        """Merge adjacent/overlapping recurrent bins per chromosome."""
        counts = matrix.sum(axis=1).to_numpy()
        groups: list[list[int]] = []
        prev_chrom, prev_end = None, None
        for k in np.flatnonzero(recurrent):
            chrom, start, end = bins[C.CHROM].iat[k], int(bins[C.START].iat[k]), int(bins[C.END].iat[k])
            if groups and chrom == prev_chrom and start <= prev_end + 1:
                groups[-1].append(k)
            else:
                groups.append([k])
            prev_chrom, prev_end = chrom, end

        rows = []
        sample_sets = []
        for members in groups:
            peak = members[int(np.argmax(counts[members]))]
            flagged = matrix.iloc[members].any(axis=0)
            samples = frozenset(str(s) for s in flagged.index[flagged.to_numpy()])
            sample_sets.append(samples)
            rows.append(
                {
                    C.CHROM: bins[C.CHROM].iat[members[0]],
                    C.START: int(bins[C.START].iat[members[0]]),
                    C.END: int(bins[C.END].iat[members[-1]]),
                    C.PEAK_START: int(bins[C.START].iat[peak]),
                    C.PEAK_END: int(bins[C.END].iat[peak]),
                    C.PEAK_COUNT: int(counts[peak]),
                    C.N_SAMPLES: len(samples),
                    C.SAMPLES: SAMPLE_SEPARATOR.join(sorted(samples)),
                }
            )
        return pd.DataFrame(rows, columns=RECURRENT_COLUMNS), sample_sets

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------
    def test(self, bins: pd.DataFrame, matrix: pd.DataFrame) -> RecurrenceResult:
        """Run the permutation test on a bin x sample flag matrix.

        Raises:
            InsufficientDataError: fewer than two samples or no flagged bins
        """
        n_bins, n_samples = matrix.shape
        if n_samples < 2:
            raise InsufficientDataError(
                f"Recurrence testing needs at least 2 samples, got {n_samples}"
            )
        flagged_per_sample = matrix.sum(axis=0).to_numpy(dtype=np.int64)
        if flagged_per_sample.sum() == 0:
            raise InsufficientDataError("No flagged bins in the cohort")

        t0 = time.time()
        histogram = self.null_histogram(flagged_per_sample, n_bins)
        count_p = self.tail_pvalues(histogram)

        observed = matrix.sum(axis=1).to_numpy(dtype=np.int64)
        observed_p = count_p[observed]
        threshold = self.significance_threshold(observed_p)
        freq_cut = self.frequency_cutoff(count_p, threshold)
        recurrent = observed >= freq_cut

        bin_table = bins.reset_index(drop=True).copy()
        bin_table[C.N_SAMPLES] = observed
        bin_table[C.P_VALUE] = observed_p
        bin_table["recurrent"] = recurrent

        regions, sample_sets = self.collapse(bin_table, matrix, recurrent)
        self.logger.info(
            f"Recurrence: {self.n_permutations} permutations in {time.time() - t0:.1f}s, "
            f"freq_cut={freq_cut} ({self.correction}, alpha={self.alpha}), "
            f"{int(recurrent.sum())} recurrent bins in {len(regions)} regions"
        )
        return RecurrenceResult(
            freq_cut=freq_cut,
            threshold=threshold,
            correction=self.correction,
            alpha=self.alpha,
            n_permutations=self.n_permutations,
            null_histogram=histogram,
            count_pvalues=count_p,
            bins=bin_table,
            regions=regions,
            region_samples=sample_sets,
        )
