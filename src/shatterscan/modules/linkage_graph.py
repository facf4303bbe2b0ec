"""
Linkage Graph - SV-implied links between candidate regions (chromoplexy).

Nodes are the integer indices of one sample's candidate regions. An SV pair
with one end in region i and the other in region j adds (or reinforces) the
undirected edge i-j; an SV with both ends in one region only increments that
region's internal SV count. Connected components are linked-region clusters.

Interleaving: the inter-region SVs of a cluster are placed on the linear
genome (chromosome order, then position). Two SVs cross when their ends read
X,Y,X,Y along the genome, as opposed to nested (X,Y,Y,X) or disjoint
(X,X,Y,Y). The interleaving fraction is the share of inter-region SVs that
cross at least one other inter-region SV of the same cluster.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import networkx as nx
import numpy as np
import pandas as pd

from shatterscan.genome import GenomeContext
from shatterscan.modules.breakpoint_index import SampleBreakpoints
from shatterscan.utils.column_standards import ColumnStandard as C, LINKAGE_COLUMNS
from shatterscan.utils.logging import get_logger


@dataclass
class LinkedCluster:
    """Connected component of a sample's region graph."""

    cluster_id: int
    members: tuple[int, ...]
    size: int
    n_links: int
    interleave_frac: float

    @property
    def n_regions(self) -> int:
        return len(self.members)


@dataclass
class LinkageResult:
    graph: nx.Graph
    clusters: list[LinkedCluster] = field(default_factory=list)
    internal_svs: Optional[np.ndarray] = None

    def cluster_of(self, region_idx: int) -> LinkedCluster:
        """Cluster holding a region; every region belongs to exactly one."""
        for cluster in self.clusters:
            if region_idx in cluster.members:
                return cluster
        raise KeyError(region_idx)


def svs_cross(a: tuple, b: tuple) -> bool:
    """True when two SV intervals on the linear genome partially overlap (X,Y,X,Y)."""
    a1, a2 = a
    b1, b2 = b
    return (a1 < b1 < a2 < b2) or (b1 < a1 < b2 < a2)


def interleave_fraction(intervals: list[tuple]) -> float:
    """Share of intervals crossing at least one other interval; 0.0 below two."""
    n = len(intervals)
    if n < 2:
        return 0.0
    crossing = np.zeros(n, dtype=bool)
    for i in range(n):
        for j in range(i + 1, n):
            if svs_cross(intervals[i], intervals[j]):
                crossing[i] = crossing[j] = True
    return float(crossing.sum()) / n


class LinkageGraph:
    """Builds the per-sample region graph and its linked clusters."""

    def __init__(self, genome: GenomeContext, logger: Optional[logging.Logger] = None):
        self.genome = genome
        self.logger = logger or get_logger(self.__class__.__name__)

    @staticmethod
    def _region_lookup(regions: pd.DataFrame) -> dict[str, tuple[np.ndarray, np.ndarray, np.ndarray]]:
        lookup = {}
        for chrom, group in regions.groupby(C.CHROM, sort=False):
            group = group.sort_values(C.START)
            lookup[str(chrom)] = (
                group[C.START].to_numpy(dtype=np.int64),
                group[C.END].to_numpy(dtype=np.int64),
                group.index.to_numpy(),
            )
        return lookup

    @staticmethod
    def locate(lookup: dict, chrom: str, pos: int) -> Optional[int]:
        """Index of the region containing chrom:pos, or None."""
        entry = lookup.get(chrom)
        if entry is None:
            return None
        starts, ends, idx = entry
        k = int(np.searchsorted(starts, pos, side="right")) - 1
        if k >= 0 and pos <= ends[k]:
            return int(idx[k])
        return None

    @staticmethod
    def _anchor(breakpoints: Optional[SampleBreakpoints], chrom, pos) -> int:
        if breakpoints is None:
            return int(pos)
        return breakpoints.snap(str(chrom), int(pos))

    def _genome_coord(self, chrom: str, pos: int) -> tuple[int, int]:
        return (self.genome.chrom_rank(chrom), int(pos))

    def build(
        self,
        regions: pd.DataFrame,
        sv_pairs: pd.DataFrame,
        breakpoints: Optional[SampleBreakpoints] = None,
    ) -> LinkageResult:
        """Graph and clusters for one sample's regions (index 0..n-1).

        With `breakpoints`, each SV end is located through the indexed
        breakpoint it collapsed onto, matching the coordinates the regions
        were trimmed to.
        """
        regions = regions.reset_index(drop=True)
        graph = nx.Graph()
        graph.add_nodes_from(range(len(regions)))
        internal = np.zeros(len(regions), dtype=np.int64)
        # edge -> SV intervals on the linear genome
        link_svs: dict[tuple[int, int], list[tuple]] = {}

        if len(regions) and not sv_pairs.empty:
            lookup = self._region_lookup(regions)
            for chrom1, pos1, chrom2, pos2 in zip(
                sv_pairs[C.CHROM1], sv_pairs[C.POS1], sv_pairs[C.CHROM2], sv_pairs[C.POS2]
            ):
                i = self.locate(lookup, str(chrom1), self._anchor(breakpoints, chrom1, pos1))
                j = self.locate(lookup, str(chrom2), self._anchor(breakpoints, chrom2, pos2))
                if i is None or j is None:
                    continue
                if i == j:
                    internal[i] += 1
                    continue
                end1 = self._genome_coord(str(chrom1), pos1)
                end2 = self._genome_coord(str(chrom2), pos2)
                key = (min(i, j), max(i, j))
                link_svs.setdefault(key, []).append(tuple(sorted((end1, end2))))
                if graph.has_edge(i, j):
                    graph[i][j]["weight"] += 1
                else:
                    graph.add_edge(i, j, weight=1)

        spans = (regions[C.END] - regions[C.START]).to_numpy(dtype=np.int64) if len(regions) else []
        components = sorted((sorted(c) for c in nx.connected_components(graph)), key=lambda c: c[0])
        clusters = []
        for cid, members in enumerate(components, start=1):
            member_set = set(members)
            intervals = [
                sv
                for (i, j), svs in link_svs.items()
                if i in member_set and j in member_set
                for sv in svs
            ]
            clusters.append(
                LinkedCluster(
                    cluster_id=cid,
                    members=tuple(members),
                    size=int(sum(spans[m] for m in members)),
                    n_links=len(intervals),
                    interleave_frac=interleave_fraction(intervals),
                )
            )

        n_multi = sum(1 for c in clusters if c.n_regions > 1)
        if n_multi:
            self.logger.debug(f"{n_multi} linked cluster(s) spanning multiple regions")
        return LinkageResult(graph=graph, clusters=clusters, internal_svs=internal)

    def annotate(self, regions: pd.DataFrame, result: LinkageResult) -> pd.DataFrame:
        """Region table with the linkage columns filled from a LinkageResult."""
        out = regions.reset_index(drop=True).copy()
        n = len(out)
        cluster_id = pd.array([pd.NA] * n, dtype="Int64")
        cluster_size = pd.array([pd.NA] * n, dtype="Int64")
        cluster_n = pd.array([pd.NA] * n, dtype="Int64")
        interleave = pd.array([pd.NA] * n, dtype="Float64")
        links = pd.array([pd.NA] * n, dtype="Int64")
        for m in range(n):
            cluster = result.cluster_of(m)
            cluster_id[m] = cluster.cluster_id
            cluster_size[m] = cluster.size
            cluster_n[m] = cluster.n_regions
            interleave[m] = cluster.interleave_frac
            links[m] = cluster.n_links
        out[C.CLUSTER_ID] = cluster_id
        out[C.CLUSTER_SIZE] = cluster_size
        out[C.CLUSTER_N_REGIONS] = cluster_n
        out[C.DEGREE] = pd.array([result.graph.degree(i) for i in range(n)], dtype="Int64")
        out[C.N_SV_INTERNAL] = pd.array(result.internal_svs, dtype="Int64")
        out[C.N_SV_LINKS] = links
        out[C.INTERLEAVE_FRAC] = interleave
        return out

    @staticmethod
    def annotate_unlinked(regions: pd.DataFrame) -> pd.DataFrame:
        """Null linkage columns for segment-only samples."""
        out = regions.reset_index(drop=True).copy()
        for col in LINKAGE_COLUMNS:
            dtype = "Float64" if col == C.INTERLEAVE_FRAC else "Int64"
            out[col] = pd.array([pd.NA] * len(out), dtype=dtype)
        return out
