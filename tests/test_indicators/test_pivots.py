"""
Tests for PivotExtractor: swing scan, spacing and alternation passes.
"""
import numpy as np
import pytest

from elliott.indicators.elliott_types import Pivot, PivotKind
from elliott.indicators.pivots import PivotExtractor, find_pivots
from elliott.shared.types import Bar


def _bars(closes, spread=0.001):
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


@pytest.fixture
def single_dip_bars():
    """Steady uptrend with one V-shaped 10% dip centered on bar 50."""
    closes = []
    for i in range(100):
        close = 100 * 1.004 ** i
        if 45 <= i <= 55:
            close *= 1 - 0.10 * (1 - abs(i - 50) / 5)
        closes.append(close)
    return _bars(closes)


@pytest.fixture
def five_pct_dip_bars():
    """Slow 0.1%/bar uptrend with one V-shaped 5% dip centered on bar 50."""
    closes = []
    for i in range(100):
        close = 100 * 1.001 ** i
        if 45 <= i <= 55:
            close *= 1 - 0.05 * (1 - abs(i - 50) / 5)
        closes.append(close)
    return _bars(closes)


@pytest.fixture
def random_walk_bars():
    rng = np.random.default_rng(7)
    closes = 100 * np.exp(np.cumsum(rng.normal(0, 0.02, 500)))
    return _bars(closes.tolist(), spread=0.005)


def _pivot(index, kind, price=100.0):
    return Pivot(price=price, timestamp=index, index=index, kind=kind)


class TestPivotExtractorInit:
    """Test constructor validation."""

    def test_defaults(self):
        extractor = PivotExtractor()
        assert extractor.min_spacing == 4
        assert extractor.confirmation_bars == 2
        assert extractor.min_bars == 7

    def test_invalid_spacing(self):
        with pytest.raises(ValueError):
            PivotExtractor(min_spacing=0)

    def test_invalid_confirmation(self):
        with pytest.raises(ValueError):
            PivotExtractor(confirmation_bars=0)


class TestFindPivots:
    """Test find_pivots on characteristic series."""

    def test_too_few_bars(self):
        assert find_pivots(_bars([100, 101, 102, 101, 100])) == []

    def test_plateau_has_no_pivots(self):
        assert find_pivots(_bars([100.0] * 20)) == []

    def test_single_dip(self, single_dip_bars):
        pivots = find_pivots(single_dip_bars, 0.05)
        troughs_near_dip = [
            p for p in pivots if p.kind is PivotKind.TROUGH and 40 <= p.index <= 60
        ]
        assert len(troughs_near_dip) == 1
        assert troughs_near_dip[0].index == 50

    def test_dip_at_threshold(self, five_pct_dip_bars):
        pivots = find_pivots(five_pct_dip_bars, 0.05)
        troughs_near_dip = [
            p for p in pivots if p.kind is PivotKind.TROUGH and 40 <= p.index <= 60
        ]
        assert len(troughs_near_dip) == 1
        assert troughs_near_dip[0].index == 50

    def test_single_dip_full_sequence(self, single_dip_bars):
        pivots = find_pivots(single_dip_bars, 0.05)
        assert [p.index for p in pivots] == [0, 45, 50, 99]
        assert [p.kind for p in pivots] == [
            PivotKind.TROUGH, PivotKind.PEAK, PivotKind.TROUGH, PivotKind.PEAK,
        ]

    def test_prices_are_extremes(self, single_dip_bars):
        for pivot in find_pivots(single_dip_bars, 0.05):
            bar = single_dip_bars[pivot.index]
            expected = bar.high if pivot.kind is PivotKind.PEAK else bar.low
            assert pivot.price == expected
            assert pivot.timestamp == bar.timestamp

    def test_alternation_and_spacing(self, random_walk_bars):
        pivots = find_pivots(random_walk_bars, 0.05)
        assert len(pivots) > 2
        for prev, cur in zip(pivots, pivots[1:]):
            assert cur.kind is prev.kind.opposite
            assert cur.index - prev.index >= 4

    def test_larger_threshold_finds_fewer_pivots(self, random_walk_bars):
        fine = find_pivots(random_walk_bars, 0.03)
        coarse = find_pivots(random_walk_bars, 0.10)
        assert len(coarse) <= len(fine)

    def test_does_not_mutate_input(self, single_dip_bars):
        before = list(single_dip_bars)
        find_pivots(single_dip_bars, 0.05)
        assert single_dip_bars == before


class TestPostProcessing:
    """Test the spacing and alternation passes in isolation."""

    def test_enforce_spacing_keeps_earlier(self):
        extractor = PivotExtractor(min_spacing=4)
        raw = [
            _pivot(0, PivotKind.TROUGH),
            _pivot(2, PivotKind.PEAK),
            _pivot(6, PivotKind.TROUGH),
        ]
        kept = extractor.enforce_spacing(raw)
        assert [p.index for p in kept] == [0, 6]

    def test_enforce_alternation_keeps_first_of_run(self):
        raw = [
            _pivot(0, PivotKind.TROUGH),
            _pivot(6, PivotKind.TROUGH),
            _pivot(12, PivotKind.PEAK),
        ]
        kept = PivotExtractor.enforce_alternation(raw)
        assert [p.index for p in kept] == [0, 12]

    def test_spacing_then_alternation(self):
        extractor = PivotExtractor(min_spacing=4)
        raw = [
            _pivot(0, PivotKind.TROUGH),
            _pivot(2, PivotKind.PEAK),
            _pivot(5, PivotKind.TROUGH),
            _pivot(10, PivotKind.PEAK),
        ]
        kept = extractor.enforce_alternation(extractor.enforce_spacing(raw))
        assert [(p.index, p.kind) for p in kept] == [(0, PivotKind.TROUGH), (10, PivotKind.PEAK)]
