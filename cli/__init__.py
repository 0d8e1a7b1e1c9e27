"""
CLI entry points.

Provides command-line interfaces for:
- Elliott Wave analysis of OHLC CSV files
"""
