"""Resource files and configuration templates."""

# Chromosome lengths (bp) of the primary assembly
GRCH37_LENGTHS = {
    "chr1": 249250621,
    "chr2": 243199373,
    "chr3": 198022430,
    "chr4": 191154276,
    "chr5": 180915260,
    "chr6": 171115067,
    "chr7": 159138663,
    "chr8": 146364022,
    "chr9": 141213431,
    "chr10": 135534747,
    "chr11": 135006516,
    "chr12": 133851895,
    "chr13": 115169878,
    "chr14": 107349540,
    "chr15": 102531392,
    "chr16": 90354753,
    "chr17": 81195210,
    "chr18": 78077248,
    "chr19": 59128983,
    "chr20": 63025520,
    "chr21": 48129895,
    "chr22": 51304566,
    "chrX": 155270560,
    "chrY": 59373566,
}

GRCH38_LENGTHS = {
    "chr1": 248956422,
    "chr2": 242193529,
    "chr3": 198295559,
    "chr4": 190214555,
    "chr5": 181538259,
    "chr6": 170805979,
    "chr7": 159345973,
    "chr8": 145138636,
    "chr9": 138394717,
    "chr10": 133797422,
    "chr11": 135086622,
    "chr12": 133275309,
    "chr13": 114364328,
    "chr14": 107043718,
    "chr15": 101991189,
    "chr16": 90338345,
    "chr17": 83257441,
    "chr18": 80373285,
    "chr19": 58617616,
    "chr20": 64444167,
    "chr21": 46709983,
    "chr22": 50818468,
    "chrX": 156040895,
    "chrY": 57227415,
}

GENOME_BUILDS = {
    "hg19": GRCH37_LENGTHS,
    "GRCh37": GRCH37_LENGTHS,
    "hg38": GRCH38_LENGTHS,
    "GRCh38": GRCH38_LENGTHS,
}


def get_chromosome_lengths(build: str) -> dict[str, int]:
    """Return a copy of the chromosome length table for a genome build."""
    if build not in GENOME_BUILDS:
        raise KeyError(f"Unknown genome build: {build}")
    return dict(GENOME_BUILDS[build])


def get_default_config() -> str:
    """Return default configuration YAML content."""
    return """# ShatterScan Configuration File

# hg19 / GRCh37 / hg38 / GRCh38, or ~ to infer chromosome lengths from the inputs
genome_build: ~
output_dir: "shatterscan_output"
prefix: "cohort"

# Runtime settings
runtime:
  log_level: "WARNING"
  log_file: ~
  enable_progress: true

# Performance settings
performance:
  threads: 4

# Breakpoint extraction from segmentation
breakpoints:
  fc_pct: 0.2        # |log2 ratio change| >= log2(1 + fc_pct)
  clean_brk: 1000    # collapse breakpoints closer than this (bp)

# Sliding-window scan
windows:
  window_size: 10000000
  slide_size: 2000000
  num_breaks: 10
  num_sd: 5.0

# Candidate regions
regions:
  min_num_probes: 2
  max_gap: 1000000
  iqm_low: 0.2
  iqm_high: 0.8

# Confidence classification
classifier:
  disp_cut: 0.05
  interleave_cut: 0.0

# Cohort recurrence test
recurrence:
  enabled: true
  bin_size: 1000000
  n_permutations: 1000
  alpha: 0.05
  correction: "bonferroni"   # bonferroni | fdr | none
  seed: 20240101             # required when enabled
  include_low_confidence: false
"""
