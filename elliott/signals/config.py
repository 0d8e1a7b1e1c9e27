"""
Analysis configuration for the wave detection pipeline.

Contains the AnalysisConfig dataclass and named presets.
Config validation runs at construction time (fail fast with clear errors).
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from ..shared.defaults import (
    PIVOT_THRESHOLD, PIVOT_SENSITIVE_THRESHOLD, PIVOT_FALLBACK_THRESHOLD,
    MIN_BARS, MIN_PIVOT_SPACING, CONFIRMATION_BARS, MIN_PIVOTS_FOR_FALLBACK,
    MIN_PIVOTS, MAX_RESETS_PER_SEGMENT,
    ENFORCE_WAVE3_NOT_SHORTEST, ENFORCE_WAVE4_OVERLAP, PROGRESS_CHUNK_SIZE,
    SAMPLE_THRESHOLD, CACHE_MAX_ENTRIES, CACHE_TTL_SECONDS,
)


def _validate_config(
    *,
    threshold: float,
    fallback_threshold: Optional[float],
    min_bars: int,
    min_pivot_spacing: int,
    confirmation_bars: int,
    min_pivots: int,
    max_resets_per_segment: int,
    progress_chunk_size: int,
    sample_threshold: Optional[int],
    cache_max_entries: int,
    cache_ttl_seconds: float,
) -> None:
    """Validate pipeline parameters. Raises ValueError with clear message on failure."""
    if not (0 < threshold < 1):
        raise ValueError(f"threshold must be in (0, 1), got {threshold}")
    if fallback_threshold is not None and not (0 < fallback_threshold < threshold):
        raise ValueError(
            f"fallback_threshold ({fallback_threshold}) must be in (0, threshold={threshold})"
        )
    if min_bars < 3:
        raise ValueError(f"min_bars must be >= 3, got {min_bars}")
    if min_pivot_spacing < 1:
        raise ValueError(f"min_pivot_spacing must be >= 1, got {min_pivot_spacing}")
    if confirmation_bars < 1:
        raise ValueError(f"confirmation_bars must be >= 1, got {confirmation_bars}")
    if min_pivots < 2:
        raise ValueError(f"min_pivots must be >= 2, got {min_pivots}")
    if max_resets_per_segment < 1:
        raise ValueError(f"max_resets_per_segment must be >= 1, got {max_resets_per_segment}")
    if progress_chunk_size < 1:
        raise ValueError(f"progress_chunk_size must be >= 1, got {progress_chunk_size}")
    if sample_threshold is not None and sample_threshold < min_bars:
        raise ValueError(
            f"sample_threshold ({sample_threshold}) must be >= min_bars ({min_bars})"
        )
    if cache_max_entries < 1:
        raise ValueError(f"cache_max_entries must be >= 1, got {cache_max_entries}")
    if cache_ttl_seconds <= 0:
        raise ValueError(f"cache_ttl_seconds must be > 0, got {cache_ttl_seconds}")


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Complete configuration of one analyzer.

    sample_threshold=None disables downsampling; fallback_threshold=None
    disables the low-pivot-count retry.
    """
    name: str = "default"
    description: str = ""

    # Pivot extraction
    threshold: float = PIVOT_THRESHOLD
    fallback_threshold: Optional[float] = None
    min_bars: int = MIN_BARS
    min_pivot_spacing: int = MIN_PIVOT_SPACING
    confirmation_bars: int = CONFIRMATION_BARS
    min_pivots_for_fallback: int = MIN_PIVOTS_FOR_FALLBACK

    # Wave labeling
    min_pivots: int = MIN_PIVOTS
    enforce_wave3_not_shortest: bool = ENFORCE_WAVE3_NOT_SHORTEST
    enforce_wave4_overlap: bool = ENFORCE_WAVE4_OVERLAP
    max_resets_per_segment: int = MAX_RESETS_PER_SEGMENT
    progress_chunk_size: int = PROGRESS_CHUNK_SIZE

    # Sampling
    sample_threshold: Optional[int] = SAMPLE_THRESHOLD

    # Cache
    cache_max_entries: int = CACHE_MAX_ENTRIES
    cache_ttl_seconds: float = CACHE_TTL_SECONDS

    def __post_init__(self):
        _validate_config(
            threshold=self.threshold,
            fallback_threshold=self.fallback_threshold,
            min_bars=self.min_bars,
            min_pivot_spacing=self.min_pivot_spacing,
            confirmation_bars=self.confirmation_bars,
            min_pivots=self.min_pivots,
            max_resets_per_segment=self.max_resets_per_segment,
            progress_chunk_size=self.progress_chunk_size,
            sample_threshold=self.sample_threshold,
            cache_max_entries=self.cache_max_entries,
            cache_ttl_seconds=self.cache_ttl_seconds,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = AnalysisConfig()

PRESET_CONFIGS = {
    "default": DEFAULT_CONFIG,
    "sensitive": AnalysisConfig(
        name="sensitive",
        description="Smaller swings for choppy series, retrying lower when pivots are scarce",
        threshold=PIVOT_SENSITIVE_THRESHOLD,
        fallback_threshold=PIVOT_FALLBACK_THRESHOLD,
    ),
    "strict": AnalysisConfig(
        name="strict",
        description="Also rejects impulses whose wave 4 overlaps wave 1",
        enforce_wave4_overlap=True,
    ),
}
