"""Validation utilities for ShatterScan."""

from __future__ import annotations

import importlib
from typing import List

# import name -> distribution name
REQUIRED_MODULES = {
    "pandas": "pandas",
    "numpy": "numpy",
    "networkx": "networkx",
    "statsmodels": "statsmodels",
    "yaml": "pyyaml",
    "click": "click",
    "tqdm": "tqdm",
}


def validate_installation(full_check: bool = False) -> List[str]:
    """
    Validate ShatterScan installation and dependencies.

    Args:
        full_check: If True, also import every analysis module

    Returns:
        List of validation issues (empty if all good)
    """
    issues = []

    for module, dist in REQUIRED_MODULES.items():
        try:
            importlib.import_module(module)
        except ImportError:
            issues.append(f"Missing Python module: {module} (install '{dist}')")

    if full_check:
        try:
            from shatterscan.core.pipeline import ShatterPipeline  # noqa: F401
            from shatterscan.config import Config  # noqa: F401
            from shatterscan.modules.recurrence_tester import RecurrenceTester  # noqa: F401
        except ImportError as e:
            issues.append(f"ShatterScan module import error: {e}")

    return issues
