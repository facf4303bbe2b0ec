"""Version information for ShatterScan."""

__version__ = "0.3.1"
__author__ = "ShatterScan developers"
__license__ = "GPL-2.0"
__description__ = "Detection and cohort recurrence testing of shattered genomic regions from CNV segments and SV calls"
