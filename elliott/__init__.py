"""
Elliott Wave detection engine.

Turns OHLC bars into pivots, Elliott Wave labels (1-5 impulse, A-B-C
corrective) and Fibonacci retracement/extension targets.

    from elliott import ElliottWaveAnalyzer
    result = ElliottWaveAnalyzer().analyze(bars)
"""
from .shared import Bar, Trend, FibTarget
from .indicators import Pivot, PivotKind, Wave, WaveLabel, WaveMode, AnalysisResult
from .signals import AnalysisConfig, PRESET_CONFIGS
from .orchestration import (
    ElliottWaveAnalyzer,
    AnalysisCache,
    AnalysisCancelled,
    analyze_elliott_waves,
)

__version__ = "0.1.0"

__all__ = [
    'Bar',
    'Trend',
    'FibTarget',
    'Pivot',
    'PivotKind',
    'Wave',
    'WaveLabel',
    'WaveMode',
    'AnalysisResult',
    'AnalysisConfig',
    'PRESET_CONFIGS',
    'ElliottWaveAnalyzer',
    'AnalysisCache',
    'AnalysisCancelled',
    'analyze_elliott_waves',
]
