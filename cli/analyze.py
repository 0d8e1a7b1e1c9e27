#!/usr/bin/env python3
"""
Elliott Wave analysis CLI.

Loads OHLC bars from a CSV file and prints the detected waves, trend and
Fibonacci targets, as a readable summary or as JSON.
"""
import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from elliott.data.loader import DataLoader, DataLoadError
from elliott.indicators.elliott_types import AnalysisResult
from elliott.orchestration.orchestrator import ElliottWaveAnalyzer
from elliott.signals.config import DEFAULT_CONFIG, PRESET_CONFIGS
from elliott.signals.config_loader import load_config_from_yaml

logger = logging.getLogger(__name__)


def setup_logging(log_path: Optional[Path] = None, verbose: bool = False, quiet: bool = False):
    """
    Setup logging to stdout and optionally to file.

    Args:
        log_path: Path to log file (None = stdout only)
        verbose: If True, use DEBUG level, otherwise INFO
        quiet: If True and not verbose, only warnings and errors are logged
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def _format_time(timestamp: Optional[int]) -> str:
    if timestamp is None:
        return "-"
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime('%Y-%m-%d')


def format_summary(result: AnalysisResult, bar_count: int) -> str:
    """Human readable report of an analysis result."""
    lines = [
        "=" * 60,
        "ELLIOTT WAVE ANALYSIS",
        "=" * 60,
        f"Bars analyzed:      {bar_count}{' (downsampled)' if result.sampled else ''}",
        f"Pivots found:       {len(result.pivots)}",
        f"Threshold used:     {result.threshold_used if result.threshold_used is not None else '-'}",
        f"Trend:              {result.trend.value}",
        f"Impulse pattern:    {'yes' if result.is_impulse_pattern else 'no'}",
        f"Corrective pattern: {'yes' if result.is_corrective_pattern else 'no'}",
        "",
    ]

    if not result.waves:
        lines.append("No waves detected.")
        return "\n".join(lines)

    lines.append("Waves:")
    for wave in result.waves:
        end_price = f"{wave.end_price:.2f}" if wave.end_price is not None else "-"
        status = "" if wave.is_complete else "  (in progress)"
        lines.append(
            f"  {wave.label.value:>2}  {_format_time(wave.start_timestamp)} {wave.start_price:>10.2f}"
            f"  ->  {_format_time(wave.end_timestamp)} {end_price:>10}{status}"
        )

    if result.fib_targets:
        lines.append("")
        lines.append("Fibonacci targets:")
        for target in result.fib_targets:
            kind = "extension" if target.is_extension else "retracement"
            lines.append(f"  {target.label:>7}  {target.price:>10.2f}  {kind}")

    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Detect Elliott Wave patterns in an OHLC CSV file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Analyze with default settings
    python -m cli.analyze --data data/sp500.csv

    # Smaller swings, restricted to a date range
    python -m cli.analyze --data data/sp500.csv --threshold 0.03 --start-date 2020-01-01

    # Use a preset configuration
    python -m cli.analyze --data data/sp500.csv --preset sensitive

    # Load configuration from YAML and print JSON
    python -m cli.analyze --data data/sp500.csv --config configs/default.yaml --json
        """
    )

    parser.add_argument(
        "--data", "-d",
        required=True,
        help="CSV file with a date column followed by Open/High/Low/Close columns",
    )
    parser.add_argument(
        "--threshold", "-t",
        type=float,
        help="Pivot threshold as a fraction (default: from config, 0.05)",
    )
    parser.add_argument(
        "--preset", "-p",
        type=str,
        choices=list(PRESET_CONFIGS.keys()),
        help="Use a preset configuration",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Load configuration from YAML file",
    )
    parser.add_argument(
        "--start-date", "-s",
        type=str,
        help="Start date for analysis (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--end-date", "-e",
        type=str,
        help="End date for analysis (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON instead of a summary",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write log output to this file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)
    # JSON goes to stdout too; keep it parseable
    setup_logging(Path(args.log_file) if args.log_file else None, args.verbose, quiet=args.json)

    config = DEFAULT_CONFIG
    if args.preset:
        config = PRESET_CONFIGS[args.preset]
        logger.info(f"Using preset configuration: {args.preset}")
    elif args.config:
        try:
            config = load_config_from_yaml(args.config)
            logger.info(f"Loaded configuration from: {args.config}")
        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Error loading config file: {e}")
            return 1

    try:
        bars = DataLoader(args.data).load(start_date=args.start_date, end_date=args.end_date)
    except (FileNotFoundError, DataLoadError) as e:
        logger.error(f"Error loading data: {e}")
        return 1

    try:
        result = ElliottWaveAnalyzer(config=config).analyze(bars, threshold=args.threshold)
    except ValueError as e:
        logger.error(f"Analysis failed: {e}")
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_summary(result, len(bars)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
