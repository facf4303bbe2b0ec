"""Tests for config module."""

from pathlib import Path
import sys

import pytest
import yaml

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from shatterscan.config import (
    Config,
    RecurrenceConfig,
    WindowConfig,
    config_from_dict,
    load_config,
    save_config,
)
from shatterscan.exceptions import ConfigError
from shatterscan.resources import get_default_config


def valid_config(**overrides):
    cfg = Config()
    cfg.recurrence.seed = 1
    for key, value in overrides.items():
        setattr(cfg, key, value)
    return cfg


class TestDefaults:
    """Default values of the config sections."""

    def test_window_defaults(self):
        config = WindowConfig()
        assert config.window_size == 10_000_000
        assert config.slide_size == 2_000_000
        assert config.num_breaks == 10
        assert config.num_sd == 5.0

    def test_recurrence_defaults(self):
        config = RecurrenceConfig()
        assert config.enabled is True
        assert config.bin_size == 1_000_000
        assert config.correction == "bonferroni"
        assert config.seed is None

    def test_threads_property(self):
        cfg = Config()
        assert cfg.threads == 4
        cfg.threads = 2
        assert cfg.performance.threads == 2

    def test_to_dict_serializes_paths(self):
        data = Config().to_dict()
        assert data["output_dir"] == "shatterscan_output"
        assert data["windows"]["slide_size"] == 2_000_000


class TestValidate:
    """Config.validate() raises ConfigError before any computation."""

    def test_valid_config_passes(self):
        valid_config().validate()

    def test_missing_seed_rejected_when_recurrence_enabled(self):
        with pytest.raises(ConfigError, match="seed"):
            Config().validate()

    def test_missing_seed_allowed_when_recurrence_disabled(self):
        cfg = Config()
        cfg.recurrence.enabled = False
        cfg.validate()

    def test_stride_not_smaller_than_window(self):
        cfg = valid_config()
        cfg.windows.slide_size = cfg.windows.window_size
        with pytest.raises(ConfigError, match="slide_size"):
            cfg.validate()

    @pytest.mark.parametrize("alpha", [0.0, 1.0, -0.1, 1.5])
    def test_alpha_outside_unit_interval(self, alpha):
        cfg = valid_config()
        cfg.recurrence.alpha = alpha
        with pytest.raises(ConfigError):
            cfg.validate()

    def test_unknown_correction(self):
        cfg = valid_config()
        cfg.recurrence.correction = "holm"
        with pytest.raises(ConfigError, match="correction"):
            cfg.validate()

    def test_negative_cutoffs(self):
        cfg = valid_config()
        cfg.classifier.disp_cut = -0.1
        with pytest.raises(ConfigError):
            cfg.validate()

        cfg = valid_config()
        cfg.windows.num_sd = -1.0
        with pytest.raises(ConfigError):
            cfg.validate()

    def test_non_finite_value(self):
        cfg = valid_config()
        cfg.breakpoints.fc_pct = float("nan")
        with pytest.raises(ConfigError, match="finite"):
            cfg.validate()

    def test_unknown_genome_build(self):
        cfg = valid_config(genome_build="hg17")
        with pytest.raises(ConfigError, match="genome_build"):
            cfg.validate()

    def test_iqm_quantiles_ordered(self):
        cfg = valid_config()
        cfg.regions.iqm_low = 0.9
        with pytest.raises(ConfigError):
            cfg.validate()


class TestLoadSave:
    """YAML round trip and key checking."""

    def test_default_template_loads_and_validates(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(get_default_config())
        cfg = load_config(path)
        cfg.validate()
        assert cfg.recurrence.seed == 20240101

    def test_save_and_load(self, tmp_path):
        cfg = valid_config(prefix="run1")
        cfg.windows.num_breaks = 8
        path = tmp_path / "saved.yaml"
        save_config(cfg, path)

        with open(path) as f:
            raw = yaml.safe_load(f)
        assert raw["prefix"] == "run1"

        loaded = load_config(path)
        assert loaded.prefix == "run1"
        assert loaded.windows.num_breaks == 8
        assert loaded.recurrence.seed == 1
        assert loaded.output_dir == Path("shatterscan_output")

    def test_unknown_top_level_key(self):
        with pytest.raises(ConfigError, match="Unsupported"):
            config_from_dict({"reference": "hg19.fa"})

    def test_unknown_section_key(self):
        with pytest.raises(ConfigError, match="windows.step"):
            config_from_dict({"windows": {"step": 5}})

    def test_top_level_threads(self):
        cfg = config_from_dict({"threads": 12})
        assert cfg.threads == 12

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        cfg = load_config(path)
        assert cfg.windows.window_size == 10_000_000
