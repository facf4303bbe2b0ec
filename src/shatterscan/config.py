"""Configuration management for ShatterScan."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any

import yaml

from shatterscan.constants import CORRECTION_METHODS
from shatterscan.exceptions import ConfigError
from shatterscan.resources import GENOME_BUILDS


@dataclass
class RuntimeConfig:
    """Runtime configuration."""

    log_level: str = "WARNING"
    log_file: Optional[Path] = None
    # Enable tqdm progress where available
    enable_progress: bool = True


@dataclass
class PerformanceConfig:
    """Performance-related configuration."""

    threads: int = 4


@dataclass
class BreakpointConfig:
    """Breakpoint extraction from segmentation."""

    # Minimum relative copy-number change between adjacent segments
    fc_pct: float = 0.2
    # Breakpoints closer than this (bp) collapse onto one position
    clean_brk: int = 1000


@dataclass
class WindowConfig:
    """Sliding-window density scan."""

    window_size: int = 10_000_000
    slide_size: int = 2_000_000
    num_breaks: int = 10
    num_sd: float = 5.0


@dataclass
class RegionConfig:
    """Candidate region merging and filtering."""

    # Minimum number of segment breakpoints a region must contain
    min_num_probes: int = 2
    # Breakpoints further apart than this split a merged span
    max_gap: Optional[int] = 1_000_000
    iqm_low: float = 0.2
    iqm_high: float = 0.8


@dataclass
class ClassifierConfig:
    """Confidence classification."""

    disp_cut: float = 0.05
    interleave_cut: float = 0.0


@dataclass
class RecurrenceConfig:
    """Cohort recurrence test."""

    enabled: bool = True
    bin_size: int = 1_000_000
    n_permutations: int = 1000
    alpha: float = 0.05
    correction: str = "bonferroni"
    # Required whenever the test runs; there is no implicit default seed
    seed: Optional[int] = None
    include_low_confidence: bool = False


@dataclass
class Config:
    """Main configuration class."""

    # None infers chromosome lengths from the input tables
    genome_build: Optional[str] = None
    output_dir: Path = Path("shatterscan_output")
    prefix: str = "cohort"

    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    breakpoints: BreakpointConfig = field(default_factory=BreakpointConfig)
    windows: WindowConfig = field(default_factory=WindowConfig)
    regions: RegionConfig = field(default_factory=RegionConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    recurrence: RecurrenceConfig = field(default_factory=RecurrenceConfig)

    @property
    def threads(self) -> int:
        return self.performance.threads

    @threads.setter
    def threads(self, value: int):
        self.performance.threads = value

    def validate(self) -> None:
        """Validate configuration, raising ConfigError on the first problem."""
        if self.genome_build is not None and self.genome_build not in GENOME_BUILDS:
            raise ConfigError(
                f"Unknown genome_build '{self.genome_build}' "
                f"(expected one of: {', '.join(sorted(GENOME_BUILDS))})"
            )

        _check_int("performance.threads", self.performance.threads, minimum=1)

        bp = self.breakpoints
        _check_number("breakpoints.fc_pct", bp.fc_pct, minimum=0.0, exclusive=True)
        _check_int("breakpoints.clean_brk", bp.clean_brk, minimum=0)

        win = self.windows
        _check_int("windows.window_size", win.window_size, minimum=1)
        _check_int("windows.slide_size", win.slide_size, minimum=1)
        if win.slide_size >= win.window_size:
            raise ConfigError(
                f"windows.slide_size ({win.slide_size}) must be smaller than "
                f"windows.window_size ({win.window_size})"
            )
        _check_int("windows.num_breaks", win.num_breaks, minimum=1)
        _check_number("windows.num_sd", win.num_sd, minimum=0.0)

        reg = self.regions
        _check_int("regions.min_num_probes", reg.min_num_probes, minimum=0)
        if reg.max_gap is not None:
            _check_int("regions.max_gap", reg.max_gap, minimum=1)
        _check_number("regions.iqm_low", reg.iqm_low, minimum=0.0, maximum=1.0)
        _check_number("regions.iqm_high", reg.iqm_high, minimum=0.0, maximum=1.0)
        if reg.iqm_low >= reg.iqm_high:
            raise ConfigError("regions.iqm_low must be smaller than regions.iqm_high")

        cls = self.classifier
        _check_number("classifier.disp_cut", cls.disp_cut, minimum=0.0, exclusive=True)
        _check_number("classifier.interleave_cut", cls.interleave_cut, minimum=0.0, maximum=1.0)

        rec = self.recurrence
        if rec.enabled:
            _check_int("recurrence.bin_size", rec.bin_size, minimum=1)
            _check_int("recurrence.n_permutations", rec.n_permutations, minimum=1)
            _check_number("recurrence.alpha", rec.alpha, minimum=0.0, maximum=1.0, exclusive=True)
            if rec.alpha >= 1.0:
                raise ConfigError("recurrence.alpha must be < 1")
            if rec.correction not in CORRECTION_METHODS:
                raise ConfigError(
                    f"recurrence.correction must be one of {', '.join(CORRECTION_METHODS)}, "
                    f"got '{rec.correction}'"
                )
            if rec.seed is None:
                raise ConfigError(
                    "recurrence.seed is required for a reproducible permutation test"
                )
            _check_int("recurrence.seed", rec.seed, minimum=0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""

        def path_to_str(obj):
            if isinstance(obj, Path):
                return str(obj)
            elif isinstance(obj, dict):
                return {k: path_to_str(v) for k, v in obj.items()}
            elif isinstance(obj, (list, tuple)):
                return [path_to_str(item) for item in obj]
            return obj

        return path_to_str(asdict(self))


def _check_number(
    name: str,
    value: Any,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    exclusive: bool = False,
) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be numeric, got {value!r}")
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be finite, got {value!r}")
    if minimum is not None:
        if exclusive and value <= minimum:
            raise ConfigError(f"{name} must be > {minimum}, got {value}")
        if not exclusive and value < minimum:
            raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    if maximum is not None and value > maximum:
        raise ConfigError(f"{name} must be <= {maximum}, got {value}")


def _check_int(name: str, value: Any, minimum: Optional[int] = None) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if minimum is not None and value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")


_SECTIONS = (
    "runtime",
    "performance",
    "breakpoints",
    "windows",
    "regions",
    "classifier",
    "recurrence",
)


def load_config(path: Path) -> Config:
    """Load configuration from YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return config_from_dict(data)


def config_from_dict(data: Dict[str, Any]) -> Config:
    """Build a Config from a nested mapping, rejecting unknown keys."""
    cfg = Config()

    if "genome_build" in data:
        cfg.genome_build = data["genome_build"]
    if "output_dir" in data and data["output_dir"] is not None:
        cfg.output_dir = Path(data["output_dir"])
    if "prefix" in data and data["prefix"] is not None:
        cfg.prefix = str(data["prefix"])
    if "threads" in data and data["threads"] is not None:
        cfg.performance.threads = data["threads"]

    known_top = {"genome_build", "output_dir", "prefix", "threads", *_SECTIONS}
    unknown = sorted(set(data) - known_top)
    if unknown:
        raise ConfigError("Unsupported config option(s): " + ", ".join(unknown))

    for section in _SECTIONS:
        values = data.get(section)
        if not values:
            continue
        if not isinstance(values, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")
        target = getattr(cfg, section)
        for key, value in values.items():
            if not hasattr(target, key):
                raise ConfigError(f"Unsupported config option: {section}.{key}")
            if key == "log_file" and value:
                value = Path(value)
            setattr(target, key, value)

    return cfg


def save_config(cfg: Config, path: Path) -> None:
    """Save configuration to YAML file."""
    data = cfg.to_dict()
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
