"""Main pipeline orchestrator for ShatterScan"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Optional

import pandas as pd

from shatterscan.config import Config
from shatterscan.constants import OUTPUT_DECIMAL_PRECISION
from shatterscan.core.pipeline_types import CohortResult, SampleResult, StageNames
from shatterscan.exceptions import InsufficientDataError, InvalidInputError
from shatterscan.genome import GenomeContext
from shatterscan.modules.breakpoint_index import BreakpointIndex
from shatterscan.modules.confidence_classifier import ConfidenceClassifier
from shatterscan.modules.input_tables import log_table_summary, normalize_segments, normalize_svs
from shatterscan.modules.linkage_graph import LinkageGraph
from shatterscan.modules.recurrence_tester import RecurrenceTester, flag_matrix, genome_bins
from shatterscan.modules.region_merger import RegionMerger
from shatterscan.modules.window_scanner import WindowScanner
from shatterscan.utils.logging import LogTemplates, get_logger
from shatterscan.utils.progress import iter_progress


class ShatterPipeline:
    """Runs the per-sample stages on a worker pool, then the cohort recurrence test.

    Args:
        config: Validated (or validatable) run configuration
        genome: Explicit genome context; defaults to `config.genome_build`,
            or to lengths inferred from the input tables
    """

    def __init__(self, config: Config, genome: Optional[GenomeContext] = None):
        config.validate()
        self.config = config
        self.genome = genome
        self.logger = get_logger("pipeline")

    def _resolve_genome(
        self, segments: pd.DataFrame, svs: Optional[pd.DataFrame]
    ) -> GenomeContext:
        if self.genome is not None:
            return self.genome
        if self.config.genome_build:
            return GenomeContext.from_build(self.config.genome_build)
        genome = GenomeContext.from_tables(segments, svs)
        self.logger.info(f"Inferred {genome!r} from the input tables")
        return genome

    def _analyze_sample(
        self,
        sample: str,
        index: BreakpointIndex,
        scanner: WindowScanner,
        merger: RegionMerger,
        linker: LinkageGraph,
        classifier: ConfidenceClassifier,
    ) -> SampleResult:
        """Window scan, region merge, linkage and classification for one sample."""
        breakpoints = index.get(sample)
        scan = scanner.scan(breakpoints, use_sv=index.has_sv)
        regions = merger.build_regions(scan, breakpoints)

        if index.has_sv:
            linkage = linker.build(regions, index.sv_pairs(sample), breakpoints)
            regions = linker.annotate(regions, linkage)
        else:
            regions = linker.annotate_unlinked(regions)

        regions = classifier.classify(regions, breakpoints, has_sv=index.has_sv)
        return SampleResult(
            sample=sample,
            windows=scan.windows,
            regions=regions,
            window_mean=scan.mean,
            window_sd=scan.sd,
            window_threshold=scan.threshold,
        )

    def run(
        self, segments: pd.DataFrame, svs: Optional[pd.DataFrame] = None
    ) -> CohortResult:
        """Analyze a cohort.

        Args:
            segments: Segmentation table (any supported column spelling)
            svs: Optional SV table; None or an empty table runs the segment-only mode

        Returns:
            CohortResult with per-sample results and the recurrence outcome
        """
        cfg = self.config
        result = CohortResult()

        segments = normalize_segments(segments)
        svs = normalize_svs(svs) if svs is not None else None
        log_table_summary(segments, svs, self.logger)
        genome = self._resolve_genome(segments, svs)

        t0 = time.time()
        index = BreakpointIndex(
            fc_pct=cfg.breakpoints.fc_pct, clean_brk=cfg.breakpoints.clean_brk
        ).build(segments, svs)
        self.logger.debug(
            LogTemplates.STAGE_SUCCESS.format(stage=StageNames.INDEX, duration=time.time() - t0)
        )

        scanner = WindowScanner(
            genome,
            window_size=cfg.windows.window_size,
            slide_size=cfg.windows.slide_size,
            num_breaks=cfg.windows.num_breaks,
            num_sd=cfg.windows.num_sd,
        )
        merger = RegionMerger(
            slide_size=cfg.windows.slide_size,
            num_breaks=cfg.windows.num_breaks,
            min_num_probes=cfg.regions.min_num_probes,
            max_gap=cfg.regions.max_gap,
            iqm_low=cfg.regions.iqm_low,
            iqm_high=cfg.regions.iqm_high,
        )
        linker = LinkageGraph(genome)
        classifier = ConfidenceClassifier(
            disp_cut=cfg.classifier.disp_cut, interleave_cut=cfg.classifier.interleave_cut
        )

        samples = index.samples
        self.logger.info(LogTemplates.STAGE_START.format(stage=StageNames.SCAN, count=len(samples)))
        t0 = time.time()
        with ThreadPoolExecutor(max_workers=cfg.threads) as pool:
            futures = {
                pool.submit(
                    self._analyze_sample, sample, index, scanner, merger, linker, classifier
                ): sample
                for sample in samples
            }
            for future in iter_progress(
                as_completed(futures),
                total=len(futures),
                desc="Samples",
                enabled=cfg.runtime.enable_progress,
            ):
                sample = futures[future]
                try:
                    sample_result = future.result()
                except InvalidInputError as exc:
                    reason = str(exc)
                    self.logger.warning(LogTemplates.SAMPLE_SKIPPED.format(sample=sample, reason=reason))
                    result.skipped_samples[sample] = reason
                    result.warnings.append(f"{sample}: {reason}")
                    continue
                result.samples[sample] = sample_result
                self.logger.info(
                    LogTemplates.SAMPLE_SUMMARY.format(
                        sample=sample,
                        flagged=sample_result.n_flagged,
                        regions=sample_result.n_regions,
                        hc=sample_result.n_high_confidence,
                    )
                )
        # Sample order must not depend on completion order
        result.samples = dict(sorted(result.samples.items()))
        self.logger.info(
            LogTemplates.STAGE_SUCCESS.format(stage=StageNames.SCAN, duration=time.time() - t0)
        )

        self._run_recurrence(genome, result)
        return result

    def _run_recurrence(self, genome: GenomeContext, result: CohortResult) -> None:
        rec = self.config.recurrence
        if not rec.enabled:
            self.logger.info(
                LogTemplates.STAGE_SKIPPED.format(stage=StageNames.RECURRENCE, reason="disabled")
            )
            return

        bins = genome_bins(genome, rec.bin_size)
        matrix = flag_matrix(
            bins,
            {sample: r.regions for sample, r in result.samples.items()},
            bin_size=rec.bin_size,
            include_low_confidence=rec.include_low_confidence,
        )
        result.bins = bins
        result.bin_matrix = matrix

        tester = RecurrenceTester(
            seed=rec.seed,
            n_permutations=rec.n_permutations,
            alpha=rec.alpha,
            correction=rec.correction,
            threads=self.config.threads,
        )
        try:
            outcome = tester.test(bins, matrix)
        except InsufficientDataError as exc:
            self.logger.warning(
                LogTemplates.STAGE_SKIPPED.format(stage=StageNames.RECURRENCE, reason=exc)
            )
            result.warnings.append(f"{StageNames.RECURRENCE}: {exc}")
            return

        result.bins = outcome.bins
        result.freq_cut = outcome.freq_cut
        result.recurrent = outcome.regions
        result.count_pvalues = outcome.count_pvalues

    def write_outputs(
        self,
        result: CohortResult,
        output_dir: Optional[Path] = None,
        prefix: Optional[str] = None,
    ) -> dict[str, Path]:
        """Write the region, bin and recurrent-region tables as TSV.

        Returns:
            Mapping of table name to written path
        """
        output_dir = Path(output_dir or self.config.output_dir)
        prefix = prefix or self.config.prefix
        output_dir.mkdir(parents=True, exist_ok=True)
        float_format = f"%.{OUTPUT_DECIMAL_PRECISION}g"

        tables = {
            "regions": result.regions_table(),
            "bins": result.bins_table(),
            "recurrent": result.recurrent,
        }
        written = {}
        for name, table in tables.items():
            if table is None:
                continue
            path = output_dir / f"{prefix}.{name}.tsv"
            table.to_csv(path, sep="\t", index=False, float_format=float_format, na_rep="NA")
            self.logger.info(LogTemplates.FILE_CREATED.format(path=path, rows=len(table)))
            written[name] = path
        return written
