"""Tests for input table normalization."""

from pathlib import Path
import sys

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from shatterscan.exceptions import FileFormatError, InvalidInputError
from shatterscan.modules.input_tables import (
    normalize_segments,
    normalize_svs,
    read_segments,
    read_svs,
)
from shatterscan.utils.column_standards import SEGMENT_COLUMNS, SV_COLUMNS, standardize_columns


class TestStandardizeColumns:
    def test_aliases_are_case_insensitive(self):
        df = pd.DataFrame(columns=["ID", "Chromosome", "loc.start", "loc.end", "num.mark", "seg.mean"])
        out = standardize_columns(df)
        assert list(out.columns) == SEGMENT_COLUMNS

    def test_canonical_column_is_not_overwritten(self):
        df = pd.DataFrame(columns=["sample", "id", "chrom"])
        out = standardize_columns(df)
        assert list(out.columns) == ["sample", "id", "chrom"]


class TestNormalizeSegments:
    def raw(self, **overrides):
        data = {
            "ID": ["S2", "S1", "S1"],
            "chrom": ["1", "chr1", "1"],
            "loc.start": [1, 5001, 1],
            "loc.end": [1000, 9000, 5000],
            "num.mark": [4, 6, 8],
            "seg.mean": [0.1, -0.5, 0.2],
        }
        data.update(overrides)
        return pd.DataFrame(data)

    def test_canonical_schema_and_order(self):
        out = normalize_segments(self.raw())
        assert list(out.columns) == SEGMENT_COLUMNS
        assert out["chrom"].unique().tolist() == ["chr1"]
        assert out[["sample", "start"]].values.tolist() == [["S1", 1], ["S1", 5001], ["S2", 1]]

    def test_missing_probes_defaults_to_zero(self):
        out = normalize_segments(self.raw().drop(columns=["num.mark"]))
        assert (out["probes"] == 0).all()

    def test_missing_column(self):
        with pytest.raises(InvalidInputError, match="segmean"):
            normalize_segments(self.raw().drop(columns=["seg.mean"]))

    def test_start_not_before_end(self):
        with pytest.raises(InvalidInputError, match="start >= end"):
            normalize_segments(self.raw(**{"loc.end": [1, 9000, 5000]}))

    def test_non_numeric_coordinates(self):
        with pytest.raises(InvalidInputError, match="non-numeric"):
            normalize_segments(self.raw(**{"loc.start": ["a", 5001, 1]}))

    def test_rows_without_value_are_dropped(self):
        out = normalize_segments(self.raw(**{"seg.mean": [None, -0.5, 0.2]}))
        assert out["sample"].tolist() == ["S1", "S1"]


class TestNormalizeSVs:
    def test_class_codes_and_defaults(self):
        raw = pd.DataFrame(
            {
                "sample": ["A", "A", "A"],
                "chr1": ["1", "1", "2"],
                "pos1": [100, 200, 300],
                "chr2": ["1", "3", "2"],
                "pos2": [150, 250, 350],
                "svtype": ["DEL", "BND", "weird"],
            }
        )
        out = normalize_svs(raw)
        assert list(out.columns) == SV_COLUMNS
        assert out["svclass"].tolist() == ["deletion", "translocation", "other"]
        assert out["strand1"].unique().tolist() == ["."]
        assert out["chrom2"].tolist() == ["chr1", "chr3", "chr2"]

    def test_canonical_class_names_pass_through(self):
        raw = pd.DataFrame(
            {
                "sample": ["A"],
                "chrom1": ["chr1"],
                "pos1": [10],
                "strand1": ["+"],
                "chrom2": ["chr1"],
                "pos2": [20],
                "strand2": ["?"],
                "svclass": ["Inversion"],
            }
        )
        out = normalize_svs(raw)
        assert out["svclass"].tolist() == ["inversion"]
        assert out["strand2"].tolist() == ["."]

    def test_non_positive_position(self):
        raw = pd.DataFrame(
            {"sample": ["A"], "chrom1": ["chr1"], "pos1": [0], "chrom2": ["chr1"], "pos2": [20]}
        )
        with pytest.raises(InvalidInputError):
            normalize_svs(raw)


class TestReaders:
    def test_read_segments(self, tmp_path):
        path = tmp_path / "segments.tsv"
        path.write_text(
            "# exported by a segmentation caller\n"
            "ID\tchrom\tloc.start\tloc.end\tnum.mark\tseg.mean\n"
            "A\t1\t1\t1000\t5\t0.3\n"
        )
        out = read_segments(path)
        assert out.iloc[0]["chrom"] == "chr1"
        assert out.iloc[0]["segmean"] == pytest.approx(0.3)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileFormatError, match="not found"):
            read_segments(tmp_path / "nope.tsv")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.tsv"
        path.write_text("")
        with pytest.raises(FileFormatError):
            read_segments(path)

    def test_read_svs_none(self):
        assert read_svs(None) is None
