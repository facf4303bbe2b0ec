"""Utility functions (ShatterScan)."""

from shatterscan.utils.logging import get_logger, setup_logging
from shatterscan.utils.column_standards import ColumnStandard

__all__ = ["get_logger", "setup_logging", "ColumnStandard"]
