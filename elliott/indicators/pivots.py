"""
Pivot extraction: turns a bar series into alternating swing highs and lows.

A swing-threshold (zigzag) scan with two noise filters:
- a direction is only established, and a reversal only committed, after
  CONFIRMATION_BARS consecutive closes move past the running extreme by
  the threshold
- the committed pivot is the extreme itself, priced at the bar's high for
  peaks and its low for troughs, since swing extremes are intrabar

Spacing and alternation are enforced afterwards in separate passes so the
scan can be tested on its own.
"""
import logging
from typing import List, Sequence

import numpy as np

from ..shared.defaults import (
    PIVOT_THRESHOLD, MIN_BARS, MIN_PIVOT_SPACING, CONFIRMATION_BARS,
)
from ..shared.types import Bar
from .elliott_types import Pivot, PivotKind

logger = logging.getLogger(__name__)


class PivotExtractor:
    """Extracts confirmed pivots from OHLC bars."""

    def __init__(
        self,
        min_spacing: int = MIN_PIVOT_SPACING,
        confirmation_bars: int = CONFIRMATION_BARS,
        min_bars: int = MIN_BARS,
    ):
        """
        Initialize the pivot extractor.

        Args:
            min_spacing: Minimum number of bars between consecutive pivots
            confirmation_bars: Consecutive confirming bars needed before a
                               direction or reversal is accepted
            min_bars: Series shorter than this yield no pivots
        """
        if min_spacing < 1:
            raise ValueError(f"min_spacing must be >= 1, got {min_spacing}")
        if confirmation_bars < 1:
            raise ValueError(f"confirmation_bars must be >= 1, got {confirmation_bars}")
        self.min_spacing = min_spacing
        self.confirmation_bars = confirmation_bars
        self.min_bars = min_bars

    def find_pivots(self, bars: Sequence[Bar], threshold: float = PIVOT_THRESHOLD) -> List[Pivot]:
        """
        Find significant pivots in the bar series.

        Args:
            bars: Chronologically ordered bars
            threshold: Fractional swing size (0.05 = 5%) below which a move
                       is not treated as a reversal

        Returns:
            Alternating peaks and troughs, possibly empty
        """
        if len(bars) < self.min_bars:
            return []

        raw = self.scan(bars, threshold)
        pivots = self.enforce_alternation(self.enforce_spacing(raw))
        logger.debug(
            f"Found {len(pivots)} pivots ({len(raw)} raw) in {len(bars)} bars "
            f"at threshold {threshold}"
        )
        return pivots

    def scan(self, bars: Sequence[Bar], threshold: float) -> List[Pivot]:
        """
        Run the swing scan without the spacing/alternation passes.

        Returns:
            Raw pivots in the order they were committed
        """
        n = len(bars)
        if n == 0:
            return []
        highs = np.fromiter((b.high for b in bars), dtype=float, count=n)
        lows = np.fromiter((b.low for b in bars), dtype=float, count=n)
        closes = np.fromiter((b.close for b in bars), dtype=float, count=n)
        down_factor = 1.0 - threshold
        up_factor = 1.0 + threshold
        needed = self.confirmation_bars

        pivots: List[Pivot] = []
        direction = 0  # 0 undetermined, +1 rising toward a peak, -1 falling toward a trough

        # Undetermined phase: track both extremes until one side confirms
        hi_idx = lo_idx = 0
        down_count = up_count = 0

        # Established phase: running extreme in the current direction
        ext = 0
        confirm = 0

        for i in range(1, n):
            if direction == 0:
                if highs[i] > highs[hi_idx]:
                    hi_idx = i
                    down_count = 0
                elif closes[i] <= highs[hi_idx] * down_factor:
                    down_count += 1
                else:
                    down_count = 0

                if lows[i] < lows[lo_idx]:
                    lo_idx = i
                    up_count = 0
                elif closes[i] >= lows[lo_idx] * up_factor:
                    up_count += 1
                else:
                    up_count = 0

                if down_count >= needed:
                    pivots.append(_make_pivot(bars, hi_idx, PivotKind.PEAK))
                    direction = -1
                    ext = _argmin(lows, hi_idx + 1, i)
                    confirm = 0
                elif up_count >= needed:
                    pivots.append(_make_pivot(bars, lo_idx, PivotKind.TROUGH))
                    direction = 1
                    ext = _argmax(highs, lo_idx + 1, i)
                    confirm = 0
                continue

            if direction == 1:
                if highs[i] > highs[ext]:
                    ext = i
                    confirm = 0
                    continue
                confirm = confirm + 1 if closes[i] <= highs[ext] * down_factor else 0
                if confirm >= needed:
                    pivots.append(_make_pivot(bars, ext, PivotKind.PEAK))
                    direction = -1
                    ext = _argmin(lows, ext + 1, i)
                    confirm = 0
            else:
                if lows[i] < lows[ext]:
                    ext = i
                    confirm = 0
                    continue
                confirm = confirm + 1 if closes[i] >= lows[ext] * up_factor else 0
                if confirm >= needed:
                    pivots.append(_make_pivot(bars, ext, PivotKind.TROUGH))
                    direction = 1
                    ext = _argmax(highs, ext + 1, i)
                    confirm = 0

        if direction != 0:
            self._append_tail(pivots, bars, highs, lows, ext, direction)
        return pivots

    def _append_tail(self, pivots, bars, highs, lows, ext, direction) -> None:
        """Emit the trailing unconfirmed extreme when the last bars do not exceed it."""
        if direction == 1:
            kind = PivotKind.PEAK
            exceeded = highs[-2:].max() > highs[ext]
        else:
            kind = PivotKind.TROUGH
            exceeded = lows[-2:].min() < lows[ext]
        if exceeded:
            return
        if pivots and pivots[-1].index == ext:
            return
        pivots.append(_make_pivot(bars, ext, kind))

    def enforce_spacing(self, pivots: List[Pivot]) -> List[Pivot]:
        """Drop pivots closer than min_spacing bars to the previous retained pivot."""
        kept: List[Pivot] = []
        for pivot in pivots:
            if kept and pivot.index - kept[-1].index < self.min_spacing:
                continue
            kept.append(pivot)
        return kept

    @staticmethod
    def enforce_alternation(pivots: List[Pivot]) -> List[Pivot]:
        """Keep the first pivot of any run of same-kind pivots."""
        kept: List[Pivot] = []
        for pivot in pivots:
            if kept and pivot.kind is kept[-1].kind:
                continue
            kept.append(pivot)
        return kept


def _make_pivot(bars: Sequence[Bar], idx: int, kind: PivotKind) -> Pivot:
    bar = bars[idx]
    price = bar.high if kind is PivotKind.PEAK else bar.low
    return Pivot(price=price, timestamp=bar.timestamp, index=idx, kind=kind)


def _argmax(values: np.ndarray, start: int, stop: int) -> int:
    """Index of the maximum in values[start..stop] (inclusive)."""
    start = min(start, stop)
    return start + int(np.argmax(values[start:stop + 1]))


def _argmin(values: np.ndarray, start: int, stop: int) -> int:
    """Index of the minimum in values[start..stop] (inclusive)."""
    start = min(start, stop)
    return start + int(np.argmin(values[start:stop + 1]))


def find_pivots(bars: Sequence[Bar], threshold: float = PIVOT_THRESHOLD) -> List[Pivot]:
    """Find pivots with the default extractor settings."""
    return PivotExtractor().find_pivots(bars, threshold)
