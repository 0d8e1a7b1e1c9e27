"""
Pipeline entry point: bars in, AnalysisResult out.

Runs the stages in order (sampling, pivot extraction, labeling, target
calculation) behind a shared result cache. Each call works on its own local
state; the cache is the only thing shared between calls and is guarded by
the analyzer's lock, so one analyzer can serve several threads.

Cancellation is cooperative: the cancel event is polled between stages and
a set event raises AnalysisCancelled. A cancelled run caches nothing.
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Optional, Sequence

from ..data.preparation import downsample_bars, validate_bars
from ..indicators.elliott_types import AnalysisResult
from ..indicators.elliott_wave import ProgressCallback, WaveLabeler, determine_overall_trend
from ..indicators.pivots import PivotExtractor
from ..shared.types import Bar
from ..signals.config import DEFAULT_CONFIG, AnalysisConfig
from ..signals.target_calculator import TargetCalculator
from .cache import AnalysisCache, compute_config_fingerprint, compute_fingerprint

logger = logging.getLogger(__name__)


class PipelineStage(Enum):
    IDLE = "idle"
    SAMPLING = "sampling"
    PIVOT_EXTRACTION = "pivot_extraction"
    LABELING = "labeling"
    TARGET_CALCULATION = "target_calculation"
    DONE = "done"


class AnalysisCancelled(Exception):
    """Raised when an analysis is cancelled between pipeline stages."""

    def __init__(self, stage: PipelineStage):
        super().__init__(f"Analysis cancelled before {stage.value}")
        self.stage = stage


class ElliottWaveAnalyzer:
    """
    Runs the wave detection pipeline with result caching.

    Example:
        analyzer = ElliottWaveAnalyzer()
        result = analyzer.analyze(bars)
        if result.current_wave is not None:
            print(result.current_wave.label, result.trend)
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        cache: Optional[AnalysisCache] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            config: Pipeline configuration (defaults to DEFAULT_CONFIG)
            cache: Result cache; a private one sized from config is created if None
        """
        self.config = config or DEFAULT_CONFIG
        if cache is None:
            cache = AnalysisCache(
                max_entries=self.config.cache_max_entries,
                ttl_seconds=self.config.cache_ttl_seconds,
            )
        self.cache = cache
        self._config_fingerprint = compute_config_fingerprint(self.config)
        self._lock = threading.Lock()

        self.extractor = PivotExtractor(
            min_spacing=self.config.min_pivot_spacing,
            confirmation_bars=self.config.confirmation_bars,
            min_bars=self.config.min_bars,
        )
        self.labeler = WaveLabeler(
            min_pivots=self.config.min_pivots,
            enforce_wave3_not_shortest=self.config.enforce_wave3_not_shortest,
            enforce_wave4_overlap=self.config.enforce_wave4_overlap,
            max_resets_per_segment=self.config.max_resets_per_segment,
            progress_chunk_size=self.config.progress_chunk_size,
        )
        self.target_calculator = TargetCalculator()

        # Pipeline runs that actually computed (cache misses)
        self.computations = 0

    def analyze(
        self,
        bars: Sequence[Bar],
        threshold: Optional[float] = None,
        cancel_event=None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> AnalysisResult:
        """
        Detect waves, trend and Fibonacci targets in a bar series.

        Args:
            bars: Chronologically ordered bars
            threshold: Pivot threshold; defaults to the configured one
            cancel_event: Anything with is_set() (e.g. threading.Event),
                          polled between stages
            on_progress: Receives the partial wave list during labeling

        Returns:
            AnalysisResult; empty when the series is too short to analyze

        Raises:
            ValueError: If timestamps decrease or the threshold is out of range
            AnalysisCancelled: If cancel_event is set between stages
        """
        if threshold is None:
            threshold = self.config.threshold
        if not (0 < threshold < 1):
            raise ValueError(f"threshold must be in (0, 1), got {threshold}")

        if not bars:
            return AnalysisResult.empty()
        validate_bars(bars)

        key = compute_fingerprint(bars, threshold, self._config_fingerprint)
        with self._lock:
            cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return cached
        logger.debug(f"Cache miss for {key}")

        result = self._run_pipeline(bars, threshold, cancel_event, on_progress)

        with self._lock:
            self.computations += 1
            self.cache.put(key, result)
        return result

    def _run_pipeline(
        self,
        bars: Sequence[Bar],
        threshold: float,
        cancel_event,
        on_progress: Optional[ProgressCallback],
    ) -> AnalysisResult:
        if len(bars) < self.config.min_bars:
            logger.debug(f"Only {len(bars)} bars (< {self.config.min_bars}), nothing to analyze")
            return AnalysisResult.empty()

        _enter(PipelineStage.SAMPLING, cancel_event)
        sample_threshold = self.config.sample_threshold
        sampled = sample_threshold is not None and len(bars) > sample_threshold
        working = downsample_bars(bars, sample_threshold) if sampled else list(bars)

        _enter(PipelineStage.PIVOT_EXTRACTION, cancel_event)
        pivots, threshold_used = self._extract_pivots(working, threshold)

        _enter(PipelineStage.LABELING, cancel_event)
        waves = self.labeler.identify_waves(pivots, working, on_progress)

        _enter(PipelineStage.TARGET_CALCULATION, cancel_event)
        targets = self.target_calculator.targets_for_waves(waves)
        trend = determine_overall_trend(waves)

        _enter(PipelineStage.DONE, cancel_event)
        return AnalysisResult(
            waves=tuple(waves),
            fib_targets=tuple(targets),
            trend=trend,
            pivots=tuple(pivots),
            threshold_used=threshold_used,
            sampled=sampled,
        )

    def _extract_pivots(self, bars: Sequence[Bar], threshold: float):
        """Find pivots, retrying once at the fallback threshold when too few are found."""
        pivots = self.extractor.find_pivots(bars, threshold)
        fallback = self.config.fallback_threshold
        if (
            len(pivots) >= self.config.min_pivots_for_fallback
            or fallback is None
            or fallback >= threshold
        ):
            return pivots, threshold

        retry = self.extractor.find_pivots(bars, fallback)
        if len(retry) > len(pivots):
            logger.info(
                f"Only {len(pivots)} pivots at threshold {threshold}, "
                f"using {len(retry)} found at {fallback}"
            )
            return retry, fallback
        return pivots, threshold

    def clear_cache(self) -> None:
        with self._lock:
            self.cache.clear()


def _enter(stage: PipelineStage, cancel_event) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.debug(f"Cancelled before {stage.value}")
        raise AnalysisCancelled(stage)
    logger.debug(f"Stage: {stage.value}")


def analyze_elliott_waves(
    bars: Sequence[Bar],
    threshold: Optional[float] = None,
    cancel_event=None,
    on_progress: Optional[ProgressCallback] = None,
    config: Optional[AnalysisConfig] = None,
) -> AnalysisResult:
    """Analyze bars with a one-off analyzer (no cache shared between calls)."""
    analyzer = ElliottWaveAnalyzer(config=config)
    return analyzer.analyze(
        bars,
        threshold=threshold,
        cancel_event=cancel_event,
        on_progress=on_progress,
    )
