"""
Elliott Wave labeling module for turning pivots into labeled waves.

Elliott Wave Theory identifies recurring patterns in price movements:
- Impulse waves: 5 waves in the direction of the trend (1, 2, 3, 4, 5)
- Corrective waves: 3 waves against the trend (A, B, C)

Key rules:
- Wave 2 cannot retrace more than 100% of Wave 1
- Wave 3 cannot be the shortest of waves 1, 3, and 5
- Wave 4 cannot overlap with Wave 1 (except in diagonal triangles)

Labels are provisional: when a rule fails, every wave after the last
complete pattern is discarded and the failing segment is labeled again
from a fresh pattern start.
"""
import logging
from dataclasses import replace
from typing import Callable, List, Optional, Sequence

from ..shared.defaults import (
    MIN_PIVOTS, MAX_RESETS_PER_SEGMENT, PROGRESS_CHUNK_SIZE,
    ENFORCE_WAVE3_NOT_SHORTEST, ENFORCE_WAVE4_OVERLAP,
)
from ..shared.types import Bar, Trend
from .elliott_types import Pivot, Wave, WaveLabel

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[List[Wave]], None]


class WaveLabeler:
    """Labels pivot-to-pivot segments with Elliott Wave labels."""

    def __init__(
        self,
        min_pivots: int = MIN_PIVOTS,
        enforce_wave3_not_shortest: bool = ENFORCE_WAVE3_NOT_SHORTEST,
        enforce_wave4_overlap: bool = ENFORCE_WAVE4_OVERLAP,
        max_resets_per_segment: int = MAX_RESETS_PER_SEGMENT,
        progress_chunk_size: int = PROGRESS_CHUNK_SIZE,
    ):
        """
        Initialize the wave labeler.

        Args:
            min_pivots: Fewer pivots than this produce no waves
            enforce_wave3_not_shortest: Reject impulses whose wave 3 is the
                                        shortest of waves 1, 3 and 5
            enforce_wave4_overlap: Reject impulses whose wave 4 ends inside
                                   wave 1's price territory (off by default,
                                   diagonals legitimately overlap)
            max_resets_per_segment: Upper bound on invalidate-and-reprocess
                                    cycles for a single segment
            progress_chunk_size: Bar window between progress notifications
        """
        if progress_chunk_size < 1:
            raise ValueError(f"progress_chunk_size must be >= 1, got {progress_chunk_size}")
        self.min_pivots = min_pivots
        self.enforce_wave3_not_shortest = enforce_wave3_not_shortest
        self.enforce_wave4_overlap = enforce_wave4_overlap
        self.max_resets_per_segment = max_resets_per_segment
        self.progress_chunk_size = progress_chunk_size

    def identify_waves(
        self,
        pivots: Sequence[Pivot],
        bars: Optional[Sequence[Bar]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[Wave]:
        """
        Label the swings between consecutive pivots.

        Args:
            pivots: Alternating pivots, oldest first
            bars: The bars the pivots were taken from; only used to log the
                  covered range
            on_progress: Optional callback receiving the waves labeled so far
                         each time the scan crosses a progress window

        Returns:
            Waves in chronological order, possibly empty
        """
        if len(pivots) < self.min_pivots:
            return []

        segments = build_segments(pivots)
        trend = 1 if pivots[-1].price >= pivots[0].price else -1
        labeled = self._label_segments(segments, trend, on_progress)
        waves = finalize_wave_labels(labeled)

        logger.debug(
            f"Labeled {len(waves)} of {len(segments)} segments "
            f"({'up' if trend == 1 else 'down'} trend"
            f"{f', {len(bars)} bars' if bars is not None else ''})"
        )
        if on_progress is not None:
            on_progress(list(waves))
        return waves

    def _label_segments(
        self,
        segments: List[Wave],
        trend: int,
        on_progress: Optional[ProgressCallback],
    ) -> List[Wave]:
        """Run the labeling state machine over all segments."""
        labeled: List[Wave] = []
        expected = WaveLabel.WAVE_1
        cursor = 0
        resets = 0
        reported_chunk = 0

        while cursor < len(segments):
            segment = segments[cursor]
            label = self._match(segment, expected, labeled, trend)

            if label is not None:
                labeled.append(replace(segment, label=label, mode=label.role))
                expected = label.successor
                cursor += 1
                resets = 0

                if on_progress is not None and segment.end_index is not None:
                    chunk = segment.end_index // self.progress_chunk_size
                    if chunk > reported_chunk:
                        reported_chunk = chunk
                        on_progress(list(labeled))
                continue

            boundary = last_complete_pattern_end(labeled)
            if boundary == len(labeled) or resets >= self.max_resets_per_segment:
                # Nothing left to discard: leave this segment unlabeled
                logger.debug(f"Segment {cursor} fits no label, skipping")
                del labeled[boundary:]
                expected = _opening_state(labeled)
                cursor += 1
                resets = 0
                continue

            logger.debug(
                f"Wave {expected.value} rejected at segment {cursor}; "
                f"discarding {len(labeled) - boundary} provisional waves"
            )
            del labeled[boundary:]
            expected = _opening_state(labeled)
            resets += 1

        return labeled

    def _match(
        self,
        segment: Wave,
        expected: WaveLabel,
        labeled: List[Wave],
        trend: int,
    ) -> Optional[WaveLabel]:
        """Label for the segment under the current state, or None if it is invalid."""
        direction = segment.direction
        if direction == 0:
            return None
        with_trend = direction == trend

        if expected.opens_pattern:
            # Open an impulse when the move follows the trend, otherwise a correction
            return WaveLabel.WAVE_1 if with_trend else WaveLabel.WAVE_A

        if with_trend != expected.moves_with_trend():
            return None

        if expected is WaveLabel.WAVE_2:
            if not self._check_wave2_retracement(labeled[-1], segment, trend):
                return None
        elif expected is WaveLabel.WAVE_4 and self.enforce_wave4_overlap:
            if not self._check_wave_overlap(labeled[-3], segment, trend):
                return None
        elif expected is WaveLabel.WAVE_5 and self.enforce_wave3_not_shortest:
            if not self._validate_wave3_length(labeled[-4], labeled[-2], segment):
                return None

        return expected

    @staticmethod
    def _check_wave2_retracement(wave1: Wave, wave2: Wave, trend: int) -> bool:
        """True if wave 2 ends strictly short of wave 1's start."""
        return (wave2.end_price - wave1.start_price) * trend > 0

    @staticmethod
    def _check_wave_overlap(wave1: Wave, wave4: Wave, trend: int) -> bool:
        """True if wave 4 stays out of wave 1's price territory."""
        return (wave4.end_price - wave1.end_price) * trend > 0

    @staticmethod
    def _validate_wave3_length(wave1: Wave, wave3: Wave, wave5: Wave) -> bool:
        """True if wave 3 is not the shortest of waves 1, 3 and 5."""
        return wave3.size >= min(wave1.size, wave5.size)


def build_segments(pivots: Sequence[Pivot]) -> List[Wave]:
    """Unlabeled candidate waves between consecutive pivots; only the last is open."""
    last = len(pivots) - 2
    return [
        Wave(
            label=None,
            start_timestamp=start.timestamp,
            start_price=start.price,
            end_timestamp=end.timestamp,
            end_price=end.price,
            is_complete=i < last,
            start_index=start.index,
            end_index=end.index,
        )
        for i, (start, end) in enumerate(zip(pivots, pivots[1:]))
    ]


def last_complete_pattern_end(waves: Sequence[Wave]) -> int:
    """
    Length of the prefix ending with the last complete 1-5 or A-B-C pattern.

    Returns:
        0 when no complete pattern exists
    """
    for end in range(len(waves), 0, -1):
        label = waves[end - 1].label
        if label is None or not label.closes_pattern:
            continue
        start = end - label.pattern_length
        if start < 0:
            continue
        run = [w.label for w in waves[start:end]]
        if all(
            lbl is not None
            and lbl.is_impulse_number == label.is_impulse_number
            and lbl.position == k + 1
            for k, lbl in enumerate(run)
        ):
            return end
    return 0


def _opening_state(labeled: Sequence[Wave]) -> WaveLabel:
    if not labeled:
        return WaveLabel.WAVE_1
    return labeled[-1].label.successor


def finalize_wave_labels(waves: Sequence[Wave]) -> List[Wave]:
    """
    Renumber waves canonically in chronological order.

    Waves are grouped into patterns: a group opens on a 1 or an A, when the
    label family changes, or when the previous group is full. Each group is
    then numbered 1..5 or lettered A..C by position, and every wave's mode
    is re-derived from its label. Running this on its own output is a no-op.

    Only order and labels change: wave direction is not checked against a
    trend here. The overall trend is re-derived separately from first-to-last
    price by determine_overall_trend.
    """
    ordered = sorted(waves, key=lambda w: w.start_timestamp)
    finalized: List[Wave] = []
    group_is_impulse: Optional[bool] = None
    group_size = 0

    for wave in ordered:
        label = wave.label
        if label is not None:
            is_impulse = label.is_impulse_number
        else:
            is_impulse = group_is_impulse if group_is_impulse is not None else True

        opens_group = (
            group_is_impulse is None
            or (label is not None and label.opens_pattern)
            or is_impulse != group_is_impulse
            or group_size >= (5 if group_is_impulse else 3)
        )
        if opens_group:
            group_is_impulse = is_impulse
            group_size = 0
        group_size += 1

        if group_is_impulse:
            canonical = WaveLabel.impulse(group_size)
        else:
            canonical = WaveLabel.corrective(group_size)
        if wave.label is not canonical or wave.mode is not canonical.role:
            wave = replace(wave, label=canonical, mode=canonical.role)
        finalized.append(wave)

    return finalized


def determine_overall_trend(waves: Sequence[Wave]) -> Trend:
    """Trend from the first wave's start price to the last wave's end price."""
    if not waves:
        return Trend.NEUTRAL
    start_price = waves[0].start_price
    last = waves[-1]
    end_price = last.end_price if last.end_price is not None else last.start_price
    if end_price > start_price:
        return Trend.BULLISH
    if end_price < start_price:
        return Trend.BEARISH
    return Trend.NEUTRAL


def identify_waves(pivots: Sequence[Pivot], bars: Optional[Sequence[Bar]] = None) -> List[Wave]:
    """Label waves with the default labeler settings."""
    return WaveLabeler().identify_waves(pivots, bars)
