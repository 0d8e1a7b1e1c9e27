"""
Shared value types for the wave analysis modules.

This module holds the input bar type and the small result types that
several packages exchange (trend classification, Fibonacci targets), so
that indicators and signals do not import each other for them.
"""
import math
from dataclasses import dataclass
from enum import Enum


class Trend(Enum):
    """Overall direction of an analyzed series."""
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class Bar:
    """
    One OHLC sample.

    Bars are supplied by the caller and never mutated by the engine.
    Timestamps are plain integers (seconds or milliseconds, caller's choice).
    """
    timestamp: int
    open: float
    high: float
    low: float
    close: float

    def __post_init__(self):
        for name in ("open", "high", "low", "close"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"Bar {name} must be a positive finite number, got {value!r}")


@dataclass(frozen=True)
class FibTarget:
    """A Fibonacci retracement or extension price level."""
    ratio: float
    price: float
    label: str  # Human readable ratio, e.g. "61.8%"
    is_extension: bool

    def to_dict(self) -> dict:
        return {
            "ratio": self.ratio,
            "price": self.price,
            "label": self.label,
            "is_extension": self.is_extension,
        }
