"""
Orchestration layer: the cached analysis pipeline.
"""
from .cache import AnalysisCache, CacheKey, compute_config_fingerprint, compute_fingerprint
from .orchestrator import (
    ElliottWaveAnalyzer,
    AnalysisCancelled,
    PipelineStage,
    analyze_elliott_waves,
)

__all__ = [
    'AnalysisCache',
    'CacheKey',
    'compute_config_fingerprint',
    'compute_fingerprint',
    'ElliottWaveAnalyzer',
    'AnalysisCancelled',
    'PipelineStage',
    'analyze_elliott_waves',
]
