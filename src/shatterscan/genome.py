"""Genome reference context.

Chromosome lengths and ordering are passed explicitly to every stage that
tiles or orders the genome. A context comes from a named build, from an
explicit mapping, or from the largest coordinates of the input tables.
"""

from __future__ import annotations

import re
from typing import Iterable, Mapping, Optional

import pandas as pd

from shatterscan.exceptions import InvalidInputError
from shatterscan.resources import get_chromosome_lengths
from shatterscan.utils.column_standards import ColumnStandard as C

_SPECIAL_ORDER = {"X": 23, "Y": 24, "M": 25, "MT": 25}


def chrom_sort_key(chrom: str) -> tuple:
    """Natural sort key: chr1..chr22, chrX, chrY, chrM, then anything else."""
    name = re.sub(r"^chr", "", str(chrom), flags=re.IGNORECASE)
    if name.isdigit():
        return (0, int(name), "")
    if name.upper() in _SPECIAL_ORDER:
        return (0, _SPECIAL_ORDER[name.upper()], "")
    return (1, 0, name)


def sort_chromosomes(chroms: Iterable[str]) -> list[str]:
    return sorted(set(chroms), key=chrom_sort_key)


class GenomeContext:
    """Read-only chromosome length table in natural chromosome order."""

    def __init__(self, lengths: Mapping[str, int]):
        if not lengths:
            raise InvalidInputError("Genome context needs at least one chromosome")
        for chrom, length in lengths.items():
            if int(length) < 1:
                raise InvalidInputError(f"Chromosome {chrom} has non-positive length {length}")
        self._chroms = tuple(sort_chromosomes(lengths))
        self._lengths = {c: int(lengths[c]) for c in self._chroms}
        self._rank = {c: i for i, c in enumerate(self._chroms)}

    @classmethod
    def from_build(cls, build: str) -> "GenomeContext":
        """Context for a bundled reference build (hg19/GRCh37, hg38/GRCh38)."""
        return cls(get_chromosome_lengths(build))

    @classmethod
    def from_tables(
        cls, segments: pd.DataFrame, svs: Optional[pd.DataFrame] = None
    ) -> "GenomeContext":
        """Infer chromosome lengths from the largest coordinate seen per chromosome."""
        frames = [segments[[C.CHROM, C.END]].rename(columns={C.END: "coord"})]
        if svs is not None and not svs.empty:
            frames.append(svs[[C.CHROM1, C.POS1]].set_axis([C.CHROM, "coord"], axis=1))
            frames.append(svs[[C.CHROM2, C.POS2]].set_axis([C.CHROM, "coord"], axis=1))
        coords = pd.concat(frames, ignore_index=True)
        if coords.empty:
            raise InvalidInputError("Cannot infer a genome context from empty tables")
        lengths = coords.groupby(C.CHROM)["coord"].max()
        return cls({str(k): int(v) for k, v in lengths.items()})

    @property
    def chromosomes(self) -> tuple[str, ...]:
        return self._chroms

    def length(self, chrom: str) -> int:
        return self._lengths[chrom]

    def __contains__(self, chrom: object) -> bool:
        return chrom in self._lengths

    def __len__(self) -> int:
        return len(self._chroms)

    def chrom_rank(self, chrom: str) -> int:
        """Position of a chromosome along the linear genome order."""
        return self._rank[chrom]

    @property
    def total_length(self) -> int:
        return sum(self._lengths.values())

    def tile(self, size: int, stride: Optional[int] = None) -> pd.DataFrame:
        """Tile every chromosome with windows of `size` bp every `stride` bp.

        Windows start at 1; the last window of a chromosome is the first whose
        end reaches the chromosome length, and ends are clipped to it. With
        stride == size the tiling is a plain non-overlapping binning.
        """
        stride = size if stride is None else stride
        rows = []
        for chrom in self._chroms:
            length = self._lengths[chrom]
            start = 1
            while True:
                end = min(start + size - 1, length)
                rows.append((chrom, start, end))
                if end >= length:
                    break
                start += stride
        return pd.DataFrame(rows, columns=[C.CHROM, C.START, C.END])

    def __repr__(self) -> str:
        return f"GenomeContext({len(self._chroms)} chromosomes, {self.total_length:,} bp)"
