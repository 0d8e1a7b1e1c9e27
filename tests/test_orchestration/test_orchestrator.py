"""
Tests for ElliottWaveAnalyzer: pipeline, caching, sampling, cancellation.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from elliott.indicators.elliott_types import AnalysisResult, WaveLabel
from elliott.orchestration.cache import AnalysisCache
from elliott.orchestration.orchestrator import (
    AnalysisCancelled,
    ElliottWaveAnalyzer,
    PipelineStage,
    analyze_elliott_waves,
)
from elliott.shared.types import Bar, Trend
from elliott.signals.config import PRESET_CONFIGS, AnalysisConfig


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _bars_from_closes(closes, spread=0.002):
    return [
        Bar(
            timestamp=1_600_000_000 + i * 86_400,
            open=closes[i - 1] if i else c,
            high=c * (1 + spread),
            low=c * (1 - spread),
            close=c,
        )
        for i, c in enumerate(closes)
    ]


def _legs(levels, bars_per_leg=10):
    closes = [float(levels[0])]
    for start, end in zip(levels, levels[1:]):
        closes.extend(np.linspace(start, end, bars_per_leg + 1)[1:].tolist())
    return _bars_from_closes(closes)


@pytest.fixture
def impulse_abc_bars():
    return _legs([100, 130, 115, 170, 150, 185, 160, 172, 140])


@pytest.fixture
def long_bars():
    t = np.arange(900)
    closes = 100 + 15 * np.sin(t * 2 * np.pi / 150) + 0.02 * t
    return _bars_from_closes(closes.tolist())


class TestAnalyze:
    """Test end-to-end analysis results."""

    def test_clean_pattern(self, impulse_abc_bars):
        result = ElliottWaveAnalyzer().analyze(impulse_abc_bars)
        assert [w.label.value for w in result.waves] == ["1", "2", "3", "4", "5", "A", "B", "C"]
        assert result.current_wave is result.waves[-1]
        assert result.current_wave.label is WaveLabel.WAVE_C
        assert result.trend is Trend.BULLISH
        assert result.is_impulse_pattern
        assert result.is_corrective_pattern
        assert result.threshold_used == 0.05
        assert not result.sampled
        assert len(result.pivots) == 9

    def test_targets_measure_last_completed_wave(self, impulse_abc_bars):
        result = ElliottWaveAnalyzer().analyze(impulse_abc_bars)
        wave_b = result.waves[-2]
        assert len(result.fib_targets) == 9
        first = result.fib_targets[0]
        expected = wave_b.end_price - (wave_b.end_price - wave_b.start_price) * 0.236
        assert first.price == pytest.approx(expected)

    def test_empty_input(self):
        analyzer = ElliottWaveAnalyzer()
        result = analyzer.analyze([])
        assert result.waves == ()
        assert len(analyzer.cache) == 0
        assert analyzer.computations == 0

    def test_short_input_is_empty(self):
        result = ElliottWaveAnalyzer().analyze(_bars_from_closes([100, 101, 102, 101, 100]))
        assert result == AnalysisResult.empty()

    def test_descending_timestamps(self, impulse_abc_bars):
        bars = list(impulse_abc_bars)
        bars[10], bars[11] = bars[11], bars[10]
        with pytest.raises(ValueError, match="non-decreasing"):
            ElliottWaveAnalyzer().analyze(bars)

    def test_invalid_threshold(self, impulse_abc_bars):
        with pytest.raises(ValueError):
            ElliottWaveAnalyzer().analyze(impulse_abc_bars, threshold=1.5)

    def test_module_level_function(self, impulse_abc_bars):
        result = analyze_elliott_waves(impulse_abc_bars)
        assert len(result.waves) == 8

    def test_progress_callback(self, impulse_abc_bars):
        calls = []
        ElliottWaveAnalyzer().analyze(impulse_abc_bars, on_progress=calls.append)
        assert len(calls) >= 1
        assert len(calls[-1]) == 8


class TestCaching:
    """Test result caching around the pipeline."""

    def test_hit_skips_recomputation(self):
        analyzer = ElliottWaveAnalyzer()
        bars = _bars_from_closes([100, 101, 102, 103])
        first = analyzer.analyze(bars)
        second = analyzer.analyze(bars)
        assert second is first
        assert analyzer.computations == 1

    def test_threshold_changes_key(self, impulse_abc_bars):
        analyzer = ElliottWaveAnalyzer()
        analyzer.analyze(impulse_abc_bars, threshold=0.05)
        analyzer.analyze(impulse_abc_bars, threshold=0.04)
        assert analyzer.computations == 2

    def test_stale_entry_recomputed(self, impulse_abc_bars):
        clock = FakeClock()
        analyzer = ElliottWaveAnalyzer(cache=AnalysisCache(clock=clock))
        analyzer.analyze(impulse_abc_bars)
        clock.now += 11 * 60
        analyzer.analyze(impulse_abc_bars)
        assert analyzer.computations == 2

    def test_shared_cache(self, impulse_abc_bars):
        cache = AnalysisCache()
        first = ElliottWaveAnalyzer(cache=cache).analyze(impulse_abc_bars)
        second_analyzer = ElliottWaveAnalyzer(cache=cache)
        assert second_analyzer.analyze(impulse_abc_bars) is first
        assert second_analyzer.computations == 0

    def test_shared_cache_separates_presets(self):
        bars = _legs([100, 120, 110, 140, 115, 150])
        cache = AnalysisCache()
        default = ElliottWaveAnalyzer(PRESET_CONFIGS["default"], cache=cache)
        strict = ElliottWaveAnalyzer(PRESET_CONFIGS["strict"], cache=cache)
        assert [w.label.value for w in default.analyze(bars).waves] == ["1", "2", "3", "4", "5"]
        # Wave 4 overlaps wave 1, so the strict rules reject the impulse
        assert [w.label.value for w in strict.analyze(bars).waves] == ["A", "B"]
        assert strict.computations == 1
        assert len(cache) == 2

    def test_clear_cache(self, impulse_abc_bars):
        analyzer = ElliottWaveAnalyzer()
        analyzer.analyze(impulse_abc_bars)
        analyzer.clear_cache()
        analyzer.analyze(impulse_abc_bars)
        assert analyzer.computations == 2

    def test_concurrent_calls(self, impulse_abc_bars):
        analyzer = ElliottWaveAnalyzer()
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: analyzer.analyze(impulse_abc_bars), range(16)))
        expected = results[0].to_dict()
        assert all(r.to_dict() == expected for r in results)
        assert 1 <= analyzer.computations <= 16
        assert len(analyzer.cache) == 1


class TestSampling:
    """Test downsampling of long inputs."""

    def test_long_input_is_sampled(self, long_bars):
        result = ElliottWaveAnalyzer().analyze(long_bars)
        assert result.sampled
        assert result.pivots
        assert all(p.index < 300 for p in result.pivots)

    def test_sampling_disabled(self, long_bars):
        result = ElliottWaveAnalyzer(AnalysisConfig(sample_threshold=None)).analyze(long_bars)
        assert not result.sampled
        assert max(p.index for p in result.pivots) >= 300

    def test_short_input_not_sampled(self, impulse_abc_bars):
        assert not ElliottWaveAnalyzer().analyze(impulse_abc_bars).sampled


class TestThresholdFallback:
    """Test the retry at a lower threshold when too few pivots are found."""

    @pytest.fixture
    def small_swings(self):
        # 3.5% swings: invisible at 5%, visible at 2%
        return _legs([100, 103.5, 100, 103.5, 100, 103.5, 100, 103.5, 100])

    def test_fallback_used(self, small_swings):
        config = AnalysisConfig(threshold=0.05, fallback_threshold=0.02)
        result = ElliottWaveAnalyzer(config).analyze(small_swings)
        assert result.threshold_used == 0.02
        assert len(result.pivots) > 0

    def test_no_fallback_by_default(self, small_swings):
        result = ElliottWaveAnalyzer().analyze(small_swings)
        assert result.threshold_used == 0.05
        assert result.pivots == ()


class TestCancellation:
    """Test cooperative cancellation between stages."""

    def test_cancel_before_start(self, impulse_abc_bars):
        event = threading.Event()
        event.set()
        analyzer = ElliottWaveAnalyzer()
        with pytest.raises(AnalysisCancelled) as exc_info:
            analyzer.analyze(impulse_abc_bars, cancel_event=event)
        assert exc_info.value.stage is PipelineStage.SAMPLING
        assert len(analyzer.cache) == 0
        assert analyzer.computations == 0

    def test_cancel_during_labeling(self, impulse_abc_bars):
        event = threading.Event()
        analyzer = ElliottWaveAnalyzer()
        with pytest.raises(AnalysisCancelled) as exc_info:
            analyzer.analyze(
                impulse_abc_bars,
                cancel_event=event,
                on_progress=lambda waves: event.set(),
            )
        assert exc_info.value.stage is PipelineStage.TARGET_CALCULATION
        assert len(analyzer.cache) == 0

    def test_unset_event_completes(self, impulse_abc_bars):
        result = ElliottWaveAnalyzer().analyze(impulse_abc_bars, cancel_event=threading.Event())
        assert len(result.waves) == 8
