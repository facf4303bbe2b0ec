"""Tests for the robust statistics helpers."""

from pathlib import Path
import sys

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from shatterscan.utils.stats import (
    consecutive_gaps,
    dispersion_density,
    iqm,
    iqsd,
    safe_divide,
    sample_sd,
)


class TestIQM:
    def test_trims_outliers(self):
        assert iqm([1, 2, 3, 4, 100]) == pytest.approx(3.0)

    def test_empty_is_zero(self):
        assert iqm([]) == 0.0
        assert iqsd([]) == 0.0

    def test_too_few_values_fall_back_to_mean(self):
        assert iqm([10, 20]) == pytest.approx(15.0)
        assert iqm([7]) == pytest.approx(7.0)

    def test_constant_values(self):
        assert iqm([5, 5, 5, 5, 5, 5]) == pytest.approx(5.0)
        assert iqsd([5, 5, 5, 5, 5, 5]) == 0.0

    def test_iqsd_ignores_tails(self):
        values = [1, 10, 11, 12, 1000]
        assert iqsd(values) == pytest.approx(float(np.std([10, 11, 12], ddof=1)))

    def test_single_value_iqsd(self):
        assert iqsd([3]) == 0.0


class TestHelpers:
    def test_safe_divide(self):
        assert safe_divide(1, 0) == 0.0
        assert safe_divide(1, float("inf")) == 0.0
        assert safe_divide(3, 2) == 1.5

    def test_sample_sd(self):
        assert sample_sd([]) == 0.0
        assert sample_sd([4]) == 0.0
        assert sample_sd([1, 3]) == pytest.approx(np.sqrt(2))

    def test_consecutive_gaps_sorts_and_dedups(self):
        gaps = consecutive_gaps([30, 10, 10, 20])
        assert gaps.tolist() == [10, 10]
        assert consecutive_gaps([5]).size == 0

    def test_dispersion_density(self):
        # mean 20, |dev| = 10, 0, 10 -> median 10
        assert dispersion_density([10, 20, 30], 100.0) == pytest.approx(0.1)
        assert dispersion_density([], 100.0) == 0.0
        assert dispersion_density([10, 20], 0.0) == 0.0
