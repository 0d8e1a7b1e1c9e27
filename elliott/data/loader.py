"""
Loads OHLC bars from CSV files or DataFrames.

Supports:
- Any CSV with a date/datetime first column and open/high/low/close columns
  (column names are matched case-insensitively)
- Date range filtering
- Plain DataFrames, with a datetime index or an integer timestamp column
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd

from ..shared.types import Bar

logger = logging.getLogger(__name__)

OHLC_COLUMNS = ("open", "high", "low", "close")


class DataLoadError(Exception):
    """Raised when bar data cannot be read or is missing required columns."""
    pass


def _column_map(df: pd.DataFrame) -> Dict[str, str]:
    """Map lower-case OHLC names to the frame's actual column names."""
    lookup = {str(col).strip().lower(): col for col in df.columns}
    missing = [name for name in OHLC_COLUMNS if name not in lookup]
    if missing:
        raise DataLoadError(
            f"Missing required columns {missing}. Available: {list(df.columns)}"
        )
    return {name: lookup[name] for name in OHLC_COLUMNS}


def _timestamps(df: pd.DataFrame) -> np.ndarray:
    """Epoch seconds from a datetime index, else from a 'timestamp' column."""
    if isinstance(df.index, pd.DatetimeIndex):
        index = df.index
        if index.tz is not None:
            index = index.tz_convert("UTC").tz_localize(None)
        seconds = (index - pd.Timestamp("1970-01-01")) // pd.Timedelta(seconds=1)
        return np.asarray(seconds, dtype=np.int64)

    lookup = {str(col).strip().lower(): col for col in df.columns}
    if "timestamp" not in lookup:
        raise DataLoadError(
            "Frame needs a DatetimeIndex or a 'timestamp' column"
        )
    return df[lookup["timestamp"]].to_numpy(dtype=np.int64)


def bars_from_frame(df: pd.DataFrame) -> List[Bar]:
    """
    Convert a DataFrame of OHLC rows to Bars.

    Rows with a missing price are dropped. Rows with a non-positive price
    raise, since such a series cannot be analyzed.

    Args:
        df: Frame with open/high/low/close columns (any case)

    Returns:
        Bars in the frame's row order

    Raises:
        DataLoadError: If required columns are missing or a price is invalid
    """
    if df.empty:
        return []

    columns = _column_map(df)
    prices = df[[columns[name] for name in OHLC_COLUMNS]].apply(pd.to_numeric, errors="coerce")
    valid = prices.notna().all(axis=1).to_numpy()
    dropped = int((~valid).sum())
    if dropped:
        logger.warning(f"Dropping {dropped} rows with missing prices")

    timestamps = _timestamps(df)[valid]
    values = prices.to_numpy(dtype=float)[valid]

    try:
        return [
            Bar(timestamp=int(ts), open=row[0], high=row[1], low=row[2], close=row[3])
            for ts, row in zip(timestamps, values.tolist())
        ]
    except ValueError as e:
        raise DataLoadError(f"Invalid bar data: {e}") from e


class DataLoader:
    """
    Loads bars from a CSV file.

    The first column is parsed as the date index.
    """

    def __init__(self, data_path: Union[str, Path]):
        """
        Initialize the data loader.

        Args:
            data_path: Path to the CSV file containing the data
        """
        self.data_path = Path(data_path)
        if not self.data_path.exists():
            raise FileNotFoundError(f"Data file not found: {self.data_path}")

    def load_frame(
        self,
        start_date: Optional[Union[str, datetime, pd.Timestamp]] = None,
        end_date: Optional[Union[str, datetime, pd.Timestamp]] = None,
    ) -> pd.DataFrame:
        """
        Load the CSV as a date-sorted DataFrame with optional filtering.

        Args:
            start_date: Start date for filtering (inclusive). If None, no start filter.
            end_date: End date for filtering (inclusive). If None, no end filter.
        """
        try:
            df = pd.read_csv(
                self.data_path,
                index_col=0,
                parse_dates=True,
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise DataLoadError(f"Could not read {self.data_path}: {e}") from e

        # Ensure index is datetime
        if not isinstance(df.index, pd.DatetimeIndex):
            try:
                df.index = pd.to_datetime(df.index)
            except (ValueError, TypeError) as e:
                raise DataLoadError(
                    f"First column of {self.data_path} is not a date column: {e}"
                ) from e

        df = df.sort_index()

        if start_date is not None:
            df = df[df.index >= pd.to_datetime(start_date)]
        if end_date is not None:
            df = df[df.index <= pd.to_datetime(end_date)]

        return df

    def load(
        self,
        start_date: Optional[Union[str, datetime, pd.Timestamp]] = None,
        end_date: Optional[Union[str, datetime, pd.Timestamp]] = None,
    ) -> List[Bar]:
        """
        Load bars from the CSV file with optional date filtering.

        Returns:
            Bars ordered by date, timestamps in epoch seconds
        """
        df = self.load_frame(start_date=start_date, end_date=end_date)
        bars = bars_from_frame(df)
        logger.debug(f"Loaded {len(bars)} bars from {self.data_path}")
        return bars
