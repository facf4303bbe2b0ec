"""Unified constants for ShatterScan.

Labels and defaults shared by the analysis modules, the configuration layer
and the CLI.
"""

# ================== Breakpoint origins ==================
ORIGIN_SEGMENT: str = "segment"
ORIGIN_SV: str = "sv"
ORIGINS = (ORIGIN_SEGMENT, ORIGIN_SV)

# ================== Confidence tiers ==================
TIER_HIGH: str = "HC"
TIER_LOW: str = "LC"

# ================== SV classes ==================
SV_CLASSES = ("deletion", "duplication", "inversion", "translocation", "insertion", "other")

# Common caller codes mapped onto the canonical class names
SV_CLASS_CODES = {
    "DEL": "deletion",
    "DUP": "duplication",
    "TDUP": "duplication",
    "INV": "inversion",
    "TRA": "translocation",
    "BND": "translocation",
    "CTX": "translocation",
    "INS": "insertion",
}

STRANDS = ("+", "-")

# ================== Multiple-testing corrections ==================
CORRECTION_METHODS = ("bonferroni", "fdr", "none")

# ================== Interquantile trimming ==================
# Central 60% of ranks by default
IQM_LOW_QUANTILE: float = 0.2
IQM_HIGH_QUANTILE: float = 0.8

# ================== Output ==================
OUTPUT_DECIMAL_PRECISION: int = 4
SAMPLE_SEPARATOR: str = ";"
