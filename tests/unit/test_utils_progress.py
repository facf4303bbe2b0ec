"""Tests for utils progress module."""

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from shatterscan.utils.progress import iter_progress


class TestIterProgress:
    """Test cases for iter_progress function."""

    def test_disabled_passes_items_through(self):
        data = ["a", "b", "c"]
        assert list(iter_progress(data, enabled=False)) == data

    def test_enabled_preserves_order(self):
        data = [3, 1, 4, 1, 5, 9, 2, 6]
        assert list(iter_progress(data, total=len(data), desc="Samples")) == data

    def test_returns_iterator(self):
        progress_iter = iter_progress([1, 2, 3], enabled=False)
        assert hasattr(progress_iter, "__next__")
        assert next(progress_iter) == 1

    def test_generator_without_total(self):
        result = list(iter_progress((x * 2 for x in range(4)), desc="Bins"))
        assert result == [0, 2, 4, 6]

    def test_empty_iterable(self):
        assert list(iter_progress([])) == []
