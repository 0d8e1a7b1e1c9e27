"""
Data module for reading and preparing bar series.
"""
from .loader import DataLoader, DataLoadError, bars_from_frame
from .preparation import validate_bars, downsample_bars, bars_to_frame

__all__ = [
    'DataLoader',
    'DataLoadError',
    'bars_from_frame',
    'validate_bars',
    'downsample_bars',
    'bars_to_frame',
]
