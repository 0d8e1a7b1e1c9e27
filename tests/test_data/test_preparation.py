"""
Tests for bar validation and downsampling.
"""
import pytest

from elliott.data.preparation import bars_to_frame, downsample_bars, validate_bars
from elliott.shared.types import Bar


def _bar(ts, open_=10.0, high=11.0, low=9.0, close=10.5):
    return Bar(timestamp=ts, open=open_, high=high, low=low, close=close)


class TestValidateBars:
    """Test chronological order validation."""

    def test_ordered(self):
        validate_bars([_bar(1), _bar(2), _bar(3)])

    def test_equal_timestamps_allowed(self):
        validate_bars([_bar(1), _bar(1), _bar(2)])

    def test_empty_and_single(self):
        validate_bars([])
        validate_bars([_bar(5)])

    def test_descending_rejected(self):
        with pytest.raises(ValueError, match="bar 2"):
            validate_bars([_bar(1), _bar(3), _bar(2)])


class TestDownsampleBars:
    """Test window aggregation."""

    def test_short_series_unchanged(self):
        bars = [_bar(i) for i in range(5)]
        result = downsample_bars(bars, 10)
        assert result == bars
        assert result is not bars

    def test_window_aggregation(self):
        bars = [
            _bar(i, open_=10.0 + i, high=20.0 + i, low=5.0 + i, close=12.0 + i)
            for i in range(10)
        ]
        # ceil(10 / 4) = 3 bars per window -> 4 windows
        result = downsample_bars(bars, 4)
        assert len(result) == 4
        first = result[0]
        assert first.timestamp == 0
        assert first.open == 10.0
        assert first.high == 22.0
        assert first.low == 5.0
        assert first.close == 14.0
        last = result[-1]
        assert last.timestamp == 9
        assert last.close == 21.0

    def test_never_exceeds_target(self):
        bars = [_bar(i) for i in range(901)]
        assert len(downsample_bars(bars, 300)) <= 300

    def test_timestamps_are_ints(self):
        bars = [_bar(i * 60) for i in range(20)]
        result = downsample_bars(bars, 7)
        assert all(isinstance(b.timestamp, int) for b in result)


class TestBarsToFrame:
    """Test columnar conversion."""

    def test_columns(self):
        df = bars_to_frame([_bar(1), _bar(2)])
        assert list(df.columns) == ["timestamp", "open", "high", "low", "close"]
        assert len(df) == 2
