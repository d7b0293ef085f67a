"""
Data loading and caching module for market data.

This module handles fetching OHLC data from yfinance, caching raw downloads
to parquet/CSV files and in memory, and validating price series before they
reach the estimators.
"""

import logging
import time
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np
import pandas as pd
import yaml
import yfinance as yf
from tqdm import tqdm

from histvol.data.returns import PRICE_SERIES_COLUMNS, build_price_series
from histvol.utils import (
    DataError,
    DatasetCache,
    ValidationError,
    get_cache_path,
    validate_date_range,
)

logger = logging.getLogger(__name__)

# Shared in-memory cache used by get_market_data when none is supplied
_DATASET_CACHE = DatasetCache(capacity=8)


def fetch_data(
    tickers: Union[str, Iterable[str]],
    start_date: str,
    end_date: str,
    retry_attempts: int = 3,
    rate_limit_delay: float = 1.0,
    progress: bool = True
) -> List[pd.DataFrame]:
    """
    Fetch OHLC data from yfinance API with retry logic.

    Args:
        tickers: Ticker symbol or iterable of symbols (e.g., 'JPM')
        start_date: Start date (YYYY-MM-DD)
        end_date: End date (YYYY-MM-DD)
        retry_attempts: Number of retry attempts on failure
        rate_limit_delay: Delay between API requests (seconds)
        progress: Show a progress bar over tickers

    Returns:
        List of price series (one per ticker, in request order) with columns
        date, open, high, low, close, return

    Raises:
        DataError: If data cannot be fetched after retries
    """
    if isinstance(tickers, str):
        tickers = [tickers]
    tickers = list(tickers)
    if not tickers:
        raise DataError("No tickers requested")

    start, end = validate_date_range(start_date, end_date)

    results = []
    for symbol in tqdm(tickers, desc='Fetching data', disable=not progress):
        results.append(
            _fetch_symbol(symbol, start, end, retry_attempts, rate_limit_delay)
        )

    return results


def _fetch_symbol(
    symbol: str,
    start: pd.Timestamp,
    end: pd.Timestamp,
    retry_attempts: int,
    rate_limit_delay: float
) -> pd.DataFrame:
    # Rate limiting
    time.sleep(rate_limit_delay)

    for attempt in range(1, retry_attempts + 1):
        try:
            ticker = yf.Ticker(symbol)
            df = ticker.history(start=start, end=end, auto_adjust=False)

            if df.empty:
                raise DataError(f"No data returned for {symbol}")

            df = df.reset_index()
            missing = [col for col in ['Date', 'Open', 'High', 'Low', 'Close'] if col not in df.columns]
            if missing:
                raise DataError(f"Missing time series for ticker {symbol}: {missing}")

            df['Date'] = pd.to_datetime(df['Date']).dt.date
            return build_price_series(df[['Date', 'Open', 'High', 'Low', 'Close']])

        except Exception as e:
            if attempt < retry_attempts:
                wait_time = 2 ** (attempt - 1)  # Exponential backoff
                logger.warning(
                    f"Fetching {symbol} failed (attempt {attempt}/{retry_attempts}): {e}"
                )
                time.sleep(wait_time)
                continue
            raise DataError(
                f"Failed to fetch data for {symbol} after {retry_attempts} attempts: {str(e)}"
            ) from e

    raise DataError(f"Unexpected error fetching data for {symbol}")


def validate_price_series(df: pd.DataFrame) -> pd.DataFrame:
    """
    Validate a price series before it is handed to the estimators.

    Checks:
    - All of date, open, high, low, close, return are present
    - Prices are finite and non-negative
    - Dates are unique and sorted ascending

    Args:
        df: Price series DataFrame

    Returns:
        The same DataFrame

    Raises:
        ValidationError: If validation fails
    """
    if df is None or df.empty:
        raise ValidationError("Input DataFrame is empty")

    missing_cols = [col for col in PRICE_SERIES_COLUMNS if col not in df.columns]
    if missing_cols:
        raise ValidationError(f"Missing required columns: {missing_cols}")

    prices = df[['open', 'high', 'low', 'close']].to_numpy(dtype=float)
    if not np.isfinite(prices).all():
        raise ValidationError("Missing or non-finite prices found in OHLC data")
    if (prices < 0).any():
        raise ValidationError("Negative prices found in OHLC data")

    dates = pd.Series(df['date'])
    if dates.duplicated().any():
        raise ValidationError("Duplicate observation dates found")
    if not dates.is_monotonic_increasing:
        raise ValidationError("Unsorted observation dates found")

    return df


def save_to_cache(df: pd.DataFrame, symbol: str, cache_dir: str,
                  cache_format: str = 'parquet',
                  start_date: Optional[str] = None,
                  end_date: Optional[str] = None) -> Path:
    """
    Save downloaded OHLC data to the cache directory.

    When the requested range is given it is written to a YAML file beside
    the data, since the first and last trading days rarely equal the
    requested bounds.

    Args:
        df: DataFrame to cache
        symbol: Asset symbol
        cache_dir: Cache directory path
        cache_format: Format to save ('parquet' or 'csv')
        start_date: Requested start of the download
        end_date: Requested end of the download

    Returns:
        Path to cached file
    """
    file_path = get_cache_path(cache_dir, f"{symbol}.{cache_format}")

    if cache_format == 'parquet':
        df.to_parquet(file_path, index=False)
    elif cache_format == 'csv':
        df.to_csv(file_path, index=False)
    else:
        raise ValueError(f"Unsupported cache format: {cache_format}")

    range_path = _range_path(file_path)
    if start_date is not None and end_date is not None:
        start, end = validate_date_range(start_date, end_date)
        with open(range_path, 'w') as f:
            yaml.safe_dump({'start': start.strftime('%Y-%m-%d'),
                            'end': end.strftime('%Y-%m-%d')}, f)
    elif range_path.exists():
        range_path.unlink()

    return file_path


def _range_path(file_path: Path) -> Path:
    return file_path.with_name(f"{file_path.name}.range.yaml")


def load_cache_range(symbol: str, cache_dir: str,
                     cache_format: str = 'parquet') -> Optional[Tuple[pd.Timestamp, pd.Timestamp]]:
    """
    Load the requested range recorded with a cached download.

    Returns:
        (start, end) Timestamps, or None when no readable range is recorded
    """
    range_path = _range_path(Path(cache_dir) / f"{symbol}.{cache_format}")

    if not range_path.exists():
        return None

    try:
        with open(range_path, 'r') as f:
            bounds = yaml.safe_load(f)
        return validate_date_range(bounds['start'], bounds['end'])
    except (OSError, yaml.YAMLError, KeyError, TypeError, ValidationError) as e:
        logger.warning(f"Ignoring unreadable cache range {range_path}: {e}")
        return None


def load_from_cache(symbol: str, cache_dir: str,
                    cache_format: str = 'parquet') -> Optional[pd.DataFrame]:
    """
    Load cached data for a symbol.

    Args:
        symbol: Asset symbol
        cache_dir: Cache directory path
        cache_format: Format to load ('parquet' or 'csv')

    Returns:
        DataFrame if cache exists and is readable, None otherwise
    """
    file_path = Path(cache_dir) / f"{symbol}.{cache_format}"

    if not file_path.exists():
        return None

    try:
        if cache_format == 'parquet':
            df = pd.read_parquet(file_path)
        elif cache_format == 'csv':
            df = pd.read_csv(file_path)
        else:
            raise ValueError(f"Unsupported cache format: {cache_format}")
    except (OSError, ValueError) as e:
        # Corrupted cache file, caller re-fetches
        logger.warning(f"Ignoring unreadable cache file {file_path}: {e}")
        return None

    if 'date' in df.columns:
        df['date'] = pd.to_datetime(df['date']).dt.date

    return df


def get_market_data(
    symbol: str,
    start_date: str,
    end_date: str,
    use_cache: bool = True,
    cache_dir: str = './data/cache',
    cache_format: str = 'parquet',
    retry_attempts: int = 3,
    rate_limit_delay: float = 1.0,
    memory_cache: Optional[DatasetCache] = None
) -> pd.DataFrame:
    """
    Main interface to get a validated price series with caching.

    Flow:
    1. Check the in-memory cache
    2. Check the disk cache if use_cache=True and it covers the range
    3. On a miss, fetch from yfinance and save to disk
    4. Validate, remember in memory and return

    Args:
        symbol: Asset symbol
        start_date: Start date (YYYY-MM-DD)
        end_date: End date (YYYY-MM-DD)
        use_cache: Whether to use the disk cache
        cache_dir: Cache directory path
        cache_format: Cache format ('parquet' or 'csv')
        retry_attempts: Number of retry attempts for API calls
        rate_limit_delay: Delay between API requests
        memory_cache: In-memory cache (module-wide cache when omitted)

    Returns:
        Validated price series DataFrame
    """
    memory_cache = _DATASET_CACHE if memory_cache is None else memory_cache
    key = DatasetCache.make_key(symbol, start_date, end_date)

    cached = memory_cache.get(key)
    if cached is not None:
        logger.debug(f"In-memory cache hit for {symbol}")
        return cached.copy()

    start, end = validate_date_range(start_date, end_date)
    df = None

    if use_cache:
        cached_df = load_from_cache(symbol, cache_dir, cache_format)
        if cached_df is not None and not cached_df.empty:
            dates = pd.to_datetime(cached_df['date'])
            covered = load_cache_range(symbol, cache_dir, cache_format) or (dates.min(), dates.max())
            if covered[0] <= start and covered[1] >= end:
                mask = (dates >= start) & (dates <= end)
                df = build_price_series(cached_df[mask.to_numpy()])
                logger.info(f"Loaded {symbol} from disk cache")

    if df is None:
        df = fetch_data(symbol, start_date, end_date, retry_attempts,
                        rate_limit_delay, progress=False)[0]
        if use_cache:
            try:
                save_to_cache(df[PRICE_SERIES_COLUMNS[:-1]], symbol, cache_dir, cache_format,
                              start_date=start_date, end_date=end_date)
            except (OSError, ValueError, ImportError) as e:
                # Cache save failure is non-critical
                logger.warning(f"Could not cache {symbol}: {e}")

    if df.empty:
        raise DataError(f"No data available for {symbol} between {start_date} and {end_date}")

    validate_price_series(df)
    memory_cache.put(key, df)

    return df.copy()
