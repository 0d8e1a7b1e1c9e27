"""
Input validation and downsampling for bar series.

Validation is fail-fast: contract violations raise ValueError before any
analysis work starts. Downsampling aggregates long series into fixed windows
so pivot extraction stays bounded on multi-year intraday input.
"""
from __future__ import annotations

import logging
import math
from typing import List, Sequence

import numpy as np
import pandas as pd

from ..shared.types import Bar

logger = logging.getLogger(__name__)


def validate_bars(bars: Sequence[Bar]) -> None:
    """
    Check that bars are in chronological order.

    Equal timestamps are allowed; a timestamp earlier than its predecessor
    is not.

    Raises:
        ValueError: On the first descending timestamp, naming its position
    """
    if len(bars) < 2:
        return
    timestamps = np.fromiter((b.timestamp for b in bars), dtype=np.int64, count=len(bars))
    descending = np.flatnonzero(np.diff(timestamps) < 0)
    if descending.size:
        i = int(descending[0]) + 1
        raise ValueError(
            f"Bar timestamps must be non-decreasing: bar {i} "
            f"({timestamps[i]}) precedes bar {i - 1} ({timestamps[i - 1]})"
        )


def bars_to_frame(bars: Sequence[Bar]) -> pd.DataFrame:
    """Columnar view of a bar list (timestamp, open, high, low, close)."""
    return pd.DataFrame(
        {
            "timestamp": [b.timestamp for b in bars],
            "open": [b.open for b in bars],
            "high": [b.high for b in bars],
            "low": [b.low for b in bars],
            "close": [b.close for b in bars],
        }
    )


def downsample_bars(bars: Sequence[Bar], target: int) -> List[Bar]:
    """
    Aggregate consecutive bars into windows of ceil(len(bars) / target).

    Each window becomes one bar: first timestamp, first open, highest high,
    lowest low, last close. Series at or below target are returned as a
    plain copy.

    Args:
        bars: Chronologically ordered bars
        target: Bar count above which the series is aggregated

    Returns:
        At most target bars
    """
    n = len(bars)
    if n <= target:
        return list(bars)

    stride = math.ceil(n / target)
    frame = bars_to_frame(bars)
    grouped = frame.groupby(np.arange(n) // stride, sort=True).agg(
        timestamp=("timestamp", "first"),
        open=("open", "first"),
        high=("high", "max"),
        low=("low", "min"),
        close=("close", "last"),
    )

    sampled = [
        Bar(
            timestamp=int(row.timestamp),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
        )
        for row in grouped.itertuples(index=False)
    ]
    logger.info(f"Downsampled {n} bars to {len(sampled)} (window of {stride})")
    return sampled
