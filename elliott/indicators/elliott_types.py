"""
Elliott Wave types: pivot, wave mode, label, Wave and AnalysisResult dataclasses.

Kept apart from the detectors so renderers and persistence layers can use
the result types without pulling in the extraction or labeling code.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..shared.types import FibTarget, Trend


class PivotKind(Enum):
    """Kind of a confirmed local extremum."""
    PEAK = "peak"
    TROUGH = "trough"

    @property
    def opposite(self) -> "PivotKind":
        return PivotKind.TROUGH if self is PivotKind.PEAK else PivotKind.PEAK


class WaveMode(Enum):
    """Role of a wave inside its pattern."""
    IMPULSE = "impulse"  # Waves 1, 3, 5, a, c
    CORRECTIVE = "corrective"  # Waves 2, 4, b


class WaveLabel(Enum):
    """Labels for Elliott Waves: impulse numbers 1-5 and corrective letters A-C."""
    WAVE_1 = "1"
    WAVE_2 = "2"
    WAVE_3 = "3"
    WAVE_4 = "4"
    WAVE_5 = "5"
    WAVE_A = "A"
    WAVE_B = "B"
    WAVE_C = "C"

    @classmethod
    def impulse(cls, number: int) -> "WaveLabel":
        """Label for impulse wave ``number`` (1..5)."""
        if not 1 <= number <= 5:
            raise ValueError(f"Impulse wave number must be in 1..5, got {number}")
        return _IMPULSE_LABELS[number - 1]

    @classmethod
    def corrective(cls, position: int) -> "WaveLabel":
        """Label for corrective wave at ``position`` (1=A, 2=B, 3=C)."""
        if not 1 <= position <= 3:
            raise ValueError(f"Corrective wave position must be in 1..3, got {position}")
        return _CORRECTIVE_LABELS[position - 1]

    @property
    def is_impulse_number(self) -> bool:
        return self in _IMPULSE_LABELS

    @property
    def is_corrective_letter(self) -> bool:
        return self in _CORRECTIVE_LABELS

    @property
    def position(self) -> int:
        """1-based position of this wave inside its pattern."""
        if self.is_impulse_number:
            return _IMPULSE_LABELS.index(self) + 1
        return _CORRECTIVE_LABELS.index(self) + 1

    @property
    def pattern_length(self) -> int:
        return 5 if self.is_impulse_number else 3

    @property
    def opens_pattern(self) -> bool:
        return self.position == 1

    @property
    def closes_pattern(self) -> bool:
        return self.position == self.pattern_length

    @property
    def role(self) -> WaveMode:
        """Impulse role for 1, 3, 5, A, C; corrective role for 2, 4, B."""
        return WaveMode.IMPULSE if self.position % 2 == 1 else WaveMode.CORRECTIVE

    @property
    def successor(self) -> "WaveLabel":
        """Next label in the grammar: 1..5, then A..C, then back to 1."""
        if self is WaveLabel.WAVE_5:
            return WaveLabel.WAVE_A
        if self is WaveLabel.WAVE_C:
            return WaveLabel.WAVE_1
        if self.is_impulse_number:
            return WaveLabel.impulse(self.position + 1)
        return WaveLabel.corrective(self.position + 1)

    def moves_with_trend(self) -> bool:
        """Whether this wave travels in the prevailing trend direction."""
        if self.is_impulse_number:
            return self.position % 2 == 1
        # A and C run against the trend, B with it
        return self is WaveLabel.WAVE_B


_IMPULSE_LABELS = (
    WaveLabel.WAVE_1, WaveLabel.WAVE_2, WaveLabel.WAVE_3, WaveLabel.WAVE_4, WaveLabel.WAVE_5,
)
_CORRECTIVE_LABELS = (WaveLabel.WAVE_A, WaveLabel.WAVE_B, WaveLabel.WAVE_C)


@dataclass(frozen=True)
class Pivot:
    """A confirmed local extremum: the bar's high for peaks, its low for troughs."""
    price: float
    timestamp: int
    index: int
    kind: PivotKind

    def to_dict(self) -> Dict[str, Any]:
        return {
            "price": self.price,
            "timestamp": self.timestamp,
            "index": self.index,
            "kind": self.kind.value,
        }


@dataclass(frozen=True)
class Wave:
    """Represents a single labeled swing between two pivots."""
    label: Optional[WaveLabel]
    start_timestamp: int
    start_price: float
    end_timestamp: Optional[int] = None
    end_price: Optional[float] = None
    mode: WaveMode = WaveMode.IMPULSE
    is_complete: bool = False
    start_index: Optional[int] = None
    end_index: Optional[int] = None

    def __post_init__(self):
        if self.is_complete and (self.end_timestamp is None or self.end_price is None):
            raise ValueError("A complete wave needs both end_timestamp and end_price")

    @property
    def direction(self) -> int:
        """+1 for an up move, -1 for a down move, 0 when flat or still open."""
        if self.end_price is None or self.end_price == self.start_price:
            return 0
        return 1 if self.end_price > self.start_price else -1

    @property
    def size(self) -> float:
        if self.end_price is None:
            return 0.0
        return abs(self.end_price - self.start_price)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label.value if self.label is not None else None,
            "start_timestamp": self.start_timestamp,
            "end_timestamp": self.end_timestamp,
            "start_price": self.start_price,
            "end_price": self.end_price,
            "mode": self.mode.value,
            "is_complete": self.is_complete,
            "start_index": self.start_index,
            "end_index": self.end_index,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Aggregate output of one analysis run. Immutable once returned."""
    waves: Tuple[Wave, ...] = ()
    fib_targets: Tuple[FibTarget, ...] = ()
    trend: Trend = Trend.NEUTRAL
    pivots: Tuple[Pivot, ...] = ()
    threshold_used: Optional[float] = None
    sampled: bool = False
    current_wave: Optional[Wave] = field(init=False, default=None)

    def __post_init__(self):
        object.__setattr__(self, "current_wave", self.waves[-1] if self.waves else None)

    @classmethod
    def empty(cls) -> "AnalysisResult":
        """Result for inputs where no pattern can be found."""
        return cls()

    @property
    def is_impulse_pattern(self) -> bool:
        return any(w.label is WaveLabel.WAVE_5 for w in self.waves)

    @property
    def is_corrective_pattern(self) -> bool:
        return any(w.label is WaveLabel.WAVE_C for w in self.waves)

    def to_dict(self) -> Dict[str, Any]:
        """Plain structured data suitable for JSON serialization."""
        return {
            "waves": [w.to_dict() for w in self.waves],
            "current_wave": self.current_wave.to_dict() if self.current_wave else None,
            "fib_targets": [t.to_dict() for t in self.fib_targets],
            "trend": self.trend.value,
            "is_impulse_pattern": self.is_impulse_pattern,
            "is_corrective_pattern": self.is_corrective_pattern,
            "pivots": [p.to_dict() for p in self.pivots],
            "threshold_used": self.threshold_used,
            "sampled": self.sampled,
        }
