"""
Shared types and defaults for the wave analysis engine.

This module provides:
- Bar, Trend and FibTarget value types
- Centralized default values for all pipeline parameters
"""
from .types import Bar, Trend, FibTarget
from .defaults import (
    PIVOT_THRESHOLD, PIVOT_SENSITIVE_THRESHOLD, PIVOT_FALLBACK_THRESHOLD,
    MIN_BARS, MIN_PIVOT_SPACING, CONFIRMATION_BARS, MIN_PIVOTS_FOR_FALLBACK,
    MIN_PIVOTS, MAX_RESETS_PER_SEGMENT,
    ENFORCE_WAVE3_NOT_SHORTEST, ENFORCE_WAVE4_OVERLAP, PROGRESS_CHUNK_SIZE,
    SAMPLE_THRESHOLD, CACHE_MAX_ENTRIES, CACHE_TTL_SECONDS,
    RETRACEMENT_RATIOS, EXTENSION_RATIOS,
)

__all__ = [
    'Bar',
    'Trend',
    'FibTarget',
    'PIVOT_THRESHOLD', 'PIVOT_SENSITIVE_THRESHOLD', 'PIVOT_FALLBACK_THRESHOLD',
    'MIN_BARS', 'MIN_PIVOT_SPACING', 'CONFIRMATION_BARS', 'MIN_PIVOTS_FOR_FALLBACK',
    'MIN_PIVOTS', 'MAX_RESETS_PER_SEGMENT',
    'ENFORCE_WAVE3_NOT_SHORTEST', 'ENFORCE_WAVE4_OVERLAP', 'PROGRESS_CHUNK_SIZE',
    'SAMPLE_THRESHOLD', 'CACHE_MAX_ENTRIES', 'CACHE_TTL_SECONDS',
    'RETRACEMENT_RATIOS', 'EXTENSION_RATIOS',
]
