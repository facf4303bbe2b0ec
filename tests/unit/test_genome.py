"""Tests for the genome context."""

from pathlib import Path
import sys

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from shatterscan.exceptions import InvalidInputError
from shatterscan.genome import GenomeContext, sort_chromosomes


def test_natural_chromosome_order():
    assert sort_chromosomes(["chr10", "chrX", "chr2", "chr1", "chrUn_gl1", "chrY"]) == [
        "chr1",
        "chr2",
        "chr10",
        "chrX",
        "chrY",
        "chrUn_gl1",
    ]


class TestGenomeContext:
    def test_from_build(self):
        genome = GenomeContext.from_build("hg19")
        assert len(genome) == 24
        assert genome.length("chr1") == 249_250_621
        assert genome.chrom_rank("chr1") == 0
        assert genome.chrom_rank("chrX") == 22

    def test_builds_are_aliases(self):
        assert GenomeContext.from_build("hg38").length("chr1") == GenomeContext.from_build(
            "GRCh38"
        ).length("chr1")

    def test_rejects_empty_and_non_positive(self):
        with pytest.raises(InvalidInputError):
            GenomeContext({})
        with pytest.raises(InvalidInputError):
            GenomeContext({"chr1": 0})

    def test_from_tables_uses_largest_coordinate(self):
        segments = pd.DataFrame(
            {"sample": ["A", "A"], "chrom": ["chr1", "chr2"], "start": [1, 1], "end": [500, 300]}
        )
        svs = pd.DataFrame(
            {"chrom1": ["chr1"], "pos1": [900], "chrom2": ["chr3"], "pos2": [50]}
        )
        genome = GenomeContext.from_tables(segments, svs)
        assert genome.chromosomes == ("chr1", "chr2", "chr3")
        assert genome.length("chr1") == 900
        assert genome.length("chr3") == 50
        assert "chr2" in genome
        assert "chr4" not in genome

    def test_tile_overlapping(self):
        genome = GenomeContext({"chr1": 25})
        tiles = genome.tile(10, 4)
        assert tiles["start"].tolist() == [1, 5, 9, 13, 17]
        # last window is the first one reaching the chromosome end, clipped
        assert tiles["end"].tolist() == [10, 14, 18, 22, 25]

    def test_tile_bins(self):
        genome = GenomeContext({"chr1": 25, "chr2": 10})
        tiles = genome.tile(10)
        assert list(zip(tiles["chrom"], tiles["start"], tiles["end"])) == [
            ("chr1", 1, 10),
            ("chr1", 11, 20),
            ("chr1", 21, 25),
            ("chr2", 1, 10),
        ]

    def test_total_length(self):
        assert GenomeContext({"chr1": 25, "chr2": 10}).total_length == 35
