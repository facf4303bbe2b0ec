"""Tests for utils validators module."""

from pathlib import Path
import sys
from unittest.mock import MagicMock, patch

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from shatterscan.utils.validators import REQUIRED_MODULES, validate_installation


class TestValidateInstallation:
    """Test cases for validate_installation function."""

    @patch("importlib.import_module")
    def test_all_modules_available(self, mock_import):
        mock_import.return_value = MagicMock()

        assert validate_installation(full_check=False) == []

        checked = [call[0][0] for call in mock_import.call_args_list]
        for module in ("pandas", "numpy", "networkx", "statsmodels", "yaml", "click", "tqdm"):
            assert module in checked

    @patch("importlib.import_module")
    def test_missing_module_names_distribution(self, mock_import):
        def import_side_effect(module_name):
            if module_name == "yaml":
                raise ImportError(f"No module named '{module_name}'")
            return MagicMock()

        mock_import.side_effect = import_side_effect

        issues = validate_installation(full_check=False)
        assert issues == ["Missing Python module: yaml (install 'pyyaml')"]

    @patch("importlib.import_module")
    def test_multiple_missing_modules(self, mock_import):
        def import_side_effect(module_name):
            if module_name in ("networkx", "statsmodels"):
                raise ImportError(f"No module named '{module_name}'")
            return MagicMock()

        mock_import.side_effect = import_side_effect

        issues = validate_installation(full_check=False)
        assert len(issues) == 2
        assert any("networkx" in issue for issue in issues)
        assert any("statsmodels" in issue for issue in issues)

    def test_full_check_imports_analysis_modules(self):
        assert validate_installation(full_check=True) == []

    def test_import_names_map_to_distributions(self):
        assert REQUIRED_MODULES["yaml"] == "pyyaml"
        assert set(REQUIRED_MODULES) >= {"pandas", "numpy", "click"}
