"""Tests for flagged-window merging and region filtering."""

from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from shatterscan.genome import GenomeContext
from shatterscan.modules.breakpoint_index import BreakpointIndex
from shatterscan.modules.input_tables import normalize_segments
from shatterscan.modules.region_merger import RegionMerger
from shatterscan.modules.window_scanner import WindowScanner
from shatterscan.utils.column_standards import REGION_COLUMNS


def flagged_windows(rows):
    return pd.DataFrame(rows, columns=["chrom", "start", "end"])


class TestMergeWindows:
    def test_overlapping_and_stride_adjacent_windows_merge(self):
        merger = RegionMerger(slide_size=2_000_000)
        spans = merger.merge_windows(
            flagged_windows(
                [
                    ("chr1", 1, 10_000_000),
                    ("chr1", 2_000_001, 12_000_000),
                    # gap of exactly one stride
                    ("chr1", 14_000_001, 24_000_000),
                    # gap larger than one stride
                    ("chr1", 26_000_002, 36_000_001),
                ]
            )
        )
        assert spans == [
            ("chr1", 1, 24_000_000, 3),
            ("chr1", 26_000_002, 36_000_001, 1),
        ]

    def test_chromosomes_never_merge(self):
        merger = RegionMerger(slide_size=2_000_000)
        spans = merger.merge_windows(
            flagged_windows([("chr2", 1, 10_000_000), ("chr1", 1, 10_000_000)])
        )
        assert [s[0] for s in spans] == ["chr1", "chr2"]

    def test_split_span(self):
        merger = RegionMerger(slide_size=2_000_000, max_gap=1_000)
        pieces = merger.split_span(np.array([10, 20, 5_000, 5_500, 9_000]))
        assert [p.tolist() for p in pieces] == [[10, 20], [5_000, 5_500], [9_000]]

    def test_split_disabled(self):
        merger = RegionMerger(slide_size=2_000_000, max_gap=None)
        pieces = merger.split_span(np.array([10, 20, 5_000]))
        assert len(pieces) == 1


class TestBuildRegions:
    @pytest.fixture
    def genome(self):
        return GenomeContext({"chr1": 60_000_000, "chr2": 60_000_000})

    def run(self, genome, segments, num_breaks=8, min_num_probes=2, max_gap=1_000_000):
        index = BreakpointIndex(clean_brk=0).build(normalize_segments(segments))
        sample = index.samples[0]
        sbp = index.get(sample)
        scan = WindowScanner(genome, num_breaks=num_breaks, num_sd=2.0).scan(sbp)
        merger = RegionMerger(
            slide_size=2_000_000,
            num_breaks=num_breaks,
            min_num_probes=min_num_probes,
            max_gap=max_gap,
        )
        return merger.build_regions(scan, sbp)

    def test_two_clusters_in_one_window_give_two_regions(self, genome, make_segments):
        positions = list(range(20_000_000, 20_200_000, 20_000)) + list(
            range(24_000_000, 24_200_000, 20_000)
        )
        regions = self.run(genome, make_segments("A", "chr1", positions, 60_000_000))
        assert list(regions.columns) == REGION_COLUMNS
        assert regions[["start", "end"]].values.tolist() == [
            [20_000_000, 20_180_000],
            [24_000_000, 24_180_000],
        ]
        assert (regions["n_brk_seg"] == 10).all()
        assert (regions["dist_iqm_seg"] == 20_000).all()
        assert (regions["dist_iqsd_seg"] == 0).all()
        assert (regions["n_brk_sv"] == 0).all()

    def test_regions_invariants(self, genome, make_segments):
        rng = np.random.default_rng(5)
        frames = []
        positions = sorted(
            set(rng.integers(1_000_000, 59_000_000, size=40).tolist())
            | set(range(30_000_000, 30_600_000, 15_000))
            | set(range(31_500_000, 31_800_000, 30_000))
        )
        frames.append(make_segments("A", "chr1", positions, 60_000_000))
        regions = self.run(genome, pd.concat(frames), max_gap=1_000_000)
        assert not regions.empty
        assert (regions["start"] < regions["end"]).all()
        assert (regions["n_breaks"] >= 8).all()
        assert (regions["n_brk_seg"] >= 2).all()
        ordered = regions.sort_values(["chrom", "start"])
        for (_, a), (_, b) in zip(ordered.iloc[:-1].iterrows(), ordered.iloc[1:].iterrows()):
            if a["chrom"] == b["chrom"]:
                assert a["end"] < b["start"]

    def test_sparse_piece_is_dropped(self, genome, make_segments):
        # dense cluster flags the window; the lone far breakpoint must not
        # survive as its own region
        positions = list(range(20_000_000, 20_200_000, 20_000)) + [27_000_000]
        regions = self.run(genome, make_segments("A", "chr1", positions, 60_000_000))
        assert len(regions) == 1
        assert regions.iloc[0]["end"] == 20_180_000

    def test_min_num_probes(self, genome, make_segments):
        positions = list(range(20_000_000, 20_200_000, 20_000))
        regions = self.run(
            genome, make_segments("A", "chr1", positions, 60_000_000), min_num_probes=11
        )
        assert regions.empty
        assert list(regions.columns) == REGION_COLUMNS

    def test_no_flagged_windows(self, genome, make_segments):
        regions = self.run(genome, make_segments("A", "chr1", [5_000_000, 40_000_000], 60_000_000))
        assert regions.empty
