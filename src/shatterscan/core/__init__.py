"""Core pipeline functionality (ShatterScan)."""

from shatterscan.core.pipeline import ShatterPipeline
from shatterscan.core.pipeline_types import CohortResult, SampleResult, StageNames

__all__ = ["ShatterPipeline", "CohortResult", "SampleResult", "StageNames"]
