"""Analysis stages (ShatterScan)."""

from shatterscan.modules.breakpoint_index import BreakpointIndex, SampleBreakpoints
from shatterscan.modules.confidence_classifier import ConfidenceClassifier
from shatterscan.modules.linkage_graph import LinkageGraph
from shatterscan.modules.recurrence_tester import RecurrenceResult, RecurrenceTester
from shatterscan.modules.region_merger import RegionMerger
from shatterscan.modules.window_scanner import WindowScan, WindowScanner

__all__ = [
    "BreakpointIndex",
    "SampleBreakpoints",
    "WindowScanner",
    "WindowScan",
    "RegionMerger",
    "LinkageGraph",
    "ConfidenceClassifier",
    "RecurrenceTester",
    "RecurrenceResult",
]
