"""
Calculates Fibonacci price targets for the next expected move.

Retracements project back into the prior swing, extensions project beyond
its end. Both are pure functions of a swing's start and end price.
"""
from typing import List, Sequence

from ..shared.defaults import RETRACEMENT_RATIOS, EXTENSION_RATIOS
from ..shared.types import FibTarget
from ..indicators.elliott_types import Wave


def _ratio_label(ratio: float) -> str:
    return f"{ratio * 100:.1f}%"


def retracement_price(start_price: float, end_price: float, ratio: float) -> float:
    """Price ``ratio`` of the way back from end_price toward start_price."""
    if ratio == 1.0:
        # end - (end - start) can land an ulp away from start
        return start_price
    return end_price - (end_price - start_price) * ratio


def extension_price(start_price: float, end_price: float, ratio: float) -> float:
    """Price beyond end_price by ``ratio`` swing-lengths, measured upward from end_price."""
    diff = end_price - start_price
    direction = (diff > 0) - (diff < 0)
    return end_price + diff * ratio * direction


class TargetCalculator:
    """Calculates Fibonacci retracement and extension targets."""

    def __init__(
        self,
        retracement_ratios: Sequence[float] = RETRACEMENT_RATIOS,
        extension_ratios: Sequence[float] = EXTENSION_RATIOS,
    ):
        """
        Initialize the target calculator.

        Args:
            retracement_ratios: Ratios for levels inside the swing
            extension_ratios: Ratios for levels beyond the swing's end
        """
        self.retracement_ratios = tuple(retracement_ratios)
        self.extension_ratios = tuple(extension_ratios)

    def retracements(self, start_price: float, end_price: float) -> List[FibTarget]:
        """Retracement levels within the swing from start_price to end_price."""
        return [
            FibTarget(
                ratio=ratio,
                price=retracement_price(start_price, end_price, ratio),
                label=_ratio_label(ratio),
                is_extension=False,
            )
            for ratio in self.retracement_ratios
        ]

    def extensions(self, start_price: float, end_price: float) -> List[FibTarget]:
        """Extension levels continuing the swing beyond end_price."""
        return [
            FibTarget(
                ratio=ratio,
                price=extension_price(start_price, end_price, ratio),
                label=_ratio_label(ratio),
                is_extension=True,
            )
            for ratio in self.extension_ratios
        ]

    def targets_for_waves(self, waves: Sequence[Wave]) -> List[FibTarget]:
        """
        Targets for the wave currently forming.

        The swing measured is the most recent completed wave: the wave after
        it either retraces into that swing or extends beyond it. At least two
        waves are required.

        Args:
            waves: Labeled waves in chronological order

        Returns:
            Retracements followed by extensions, or [] if there is no swing
        """
        if len(waves) < 2:
            return []
        completed = [w for w in waves[-2:] if w.is_complete]
        if not completed:
            return []
        swing = completed[-1]
        return (
            self.retracements(swing.start_price, swing.end_price)
            + self.extensions(swing.start_price, swing.end_price)
        )


def retracements(start_price: float, end_price: float) -> List[FibTarget]:
    """Standard five retracement levels (.236/.382/.5/.618/.786)."""
    return TargetCalculator().retracements(start_price, end_price)


def extensions(start_price: float, end_price: float) -> List[FibTarget]:
    """Standard four extension levels (1.236/1.618/2.0/2.618)."""
    return TargetCalculator().extensions(start_price, end_price)
