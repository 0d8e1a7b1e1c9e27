"""
Centralized default values for the wave analysis pipeline.

This is the SINGLE SOURCE OF TRUTH for all tunable constants.
All modules should import from here to ensure consistency.
"""

# Pivot extraction
PIVOT_THRESHOLD = 0.05  # 5% swing before a move counts as a reversal
PIVOT_SENSITIVE_THRESHOLD = 0.03  # Alternate caller setting for choppier series
PIVOT_FALLBACK_THRESHOLD = 0.02  # Retry threshold when too few pivots are found
MIN_BARS = 7  # Fewer bars than this is insufficient data
MIN_PIVOT_SPACING = 4  # Minimum bar distance between consecutive pivots
CONFIRMATION_BARS = 2  # Consecutive bars needed to confirm a reversal
MIN_PIVOTS_FOR_FALLBACK = 5  # Retry with the fallback threshold below this count

# Wave labeling
MIN_PIVOTS = 3  # At least two segments are needed to label anything
MAX_RESETS_PER_SEGMENT = 8  # Bound on invalidate-and-reprocess cycles per segment
ENFORCE_WAVE3_NOT_SHORTEST = True
ENFORCE_WAVE4_OVERLAP = False  # Diagonals overlap wave 1; keep lenient by default
PROGRESS_CHUNK_SIZE = 500  # Bars per progress notification window

# Sampling
SAMPLE_THRESHOLD = 300  # Inputs longer than this are downsampled

# Analysis cache
CACHE_MAX_ENTRIES = 100
CACHE_TTL_SECONDS = 10 * 60

# Fibonacci ratios
RETRACEMENT_RATIOS = (0.236, 0.382, 0.5, 0.618, 0.786)
EXTENSION_RATIOS = (1.236, 1.618, 2.0, 2.618)
