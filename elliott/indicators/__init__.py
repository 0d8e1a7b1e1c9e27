"""
Indicator module.

Provides the wave detection building blocks:
- Pivot extraction (swing highs and lows)
- Elliott Wave labeling with rule validation and reset
- The value types exchanged between them
"""
from .elliott_types import (
    PivotKind,
    Pivot,
    WaveMode,
    WaveLabel,
    Wave,
    AnalysisResult,
)
from .pivots import PivotExtractor, find_pivots
from .elliott_wave import (
    WaveLabeler,
    identify_waves,
    finalize_wave_labels,
    determine_overall_trend,
)

__all__ = [
    'PivotKind',
    'Pivot',
    'WaveMode',
    'WaveLabel',
    'Wave',
    'AnalysisResult',
    'PivotExtractor',
    'find_pivots',
    'WaveLabeler',
    'identify_waves',
    'finalize_wave_labels',
    'determine_overall_trend',
]
