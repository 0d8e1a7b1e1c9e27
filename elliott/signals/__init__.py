"""
Signal module.

Fibonacci target projection and the analysis configuration that drives the
pipeline (dataclass, presets, YAML loading).
"""
from .target_calculator import TargetCalculator, retracements, extensions
from .config import AnalysisConfig, DEFAULT_CONFIG, PRESET_CONFIGS
from .config_loader import load_config_from_yaml, save_config_to_yaml

__all__ = [
    'TargetCalculator',
    'retracements',
    'extensions',
    'AnalysisConfig',
    'DEFAULT_CONFIG',
    'PRESET_CONFIGS',
    'load_config_from_yaml',
    'save_config_to_yaml',
]
