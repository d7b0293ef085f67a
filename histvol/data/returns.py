"""
Return calculation module for volatility estimation.

This module provides functions to calculate log returns and the log price
ratios used by the range-based estimators, and to assemble the price
series table consumed by the estimators.
"""

import numpy as np
import pandas as pd

# Columns of a price series, in order
PRICE_SERIES_COLUMNS = ['date', 'open', 'high', 'low', 'close', 'return']


def calculate_returns(prices: pd.Series, method: str = 'log') -> pd.Series:
    """
    Calculate returns from price series.

    Args:
        prices: Series of prices (typically closing prices)
        method: Return calculation method ('log' or 'simple')

    Returns:
        Series of returns (first value will be NaN)

    Formula:
        Log returns: r_t = ln(P_t / P_{t-1})
        Simple returns: r_t = (P_t - P_{t-1}) / P_{t-1}
    """
    if method == 'log':
        with np.errstate(divide='ignore', invalid='ignore'):
            returns = np.log(prices / prices.shift(1))
    elif method == 'simple':
        returns = (prices - prices.shift(1)) / prices.shift(1)
    else:
        raise ValueError(f"Unknown return method: {method}. Use 'log' or 'simple'")

    return returns


def calculate_ranges(high: pd.Series, low: pd.Series,
                     open: pd.Series, close: pd.Series) -> pd.DataFrame:
    """
    Calculate same-day log price ratios for the range-based estimators.

    Returns:
        DataFrame with columns:
        - high_low: ln(H/L) - Parkinson, Garman-Klass
        - close_open: ln(C/O) - Garman-Klass, Rogers-Satchell, Meilijson
        - high_open: ln(H/O) - Rogers-Satchell, Meilijson
        - low_open: ln(L/O) - Rogers-Satchell, Meilijson

    Edge cases:
        - Zero prices give -inf/inf/NaN, which propagate into the estimates
    """
    ranges = pd.DataFrame(index=high.index)

    with np.errstate(divide='ignore', invalid='ignore'):
        ranges['high_low'] = np.log(high / low)
        ranges['close_open'] = np.log(close / open)
        ranges['high_open'] = np.log(high / open)
        ranges['low_open'] = np.log(low / open)

    return ranges


def calculate_overnight_returns(open_prices: pd.Series,
                                close_prices: pd.Series) -> pd.Series:
    """
    Calculate overnight returns (previous close to open).

    Used by the Garman-Klass-Yang-Zhang and Yang-Zhang estimators.

    Args:
        open_prices: Series of opening prices
        close_prices: Series of closing prices

    Returns:
        Series of overnight returns, NaN on the first row
    """
    # Overnight return = ln(O_t / C_{t-1})
    prev_close = close_prices.shift(1)
    with np.errstate(divide='ignore', invalid='ignore'):
        overnight_returns = np.log(open_prices / prev_close)

    return overnight_returns


def build_price_series(df: pd.DataFrame) -> pd.DataFrame:
    """
    Assemble a price series table from raw OHLC data.

    Column names are lower-cased, rows are sorted by date and the log
    return of the closing price is appended.

    Args:
        df: DataFrame with Date/Open/High/Low/Close columns (any case)

    Returns:
        New DataFrame with columns date, open, high, low, close, return
    """
    renamed = df.rename(columns={col: str(col).strip().lower() for col in df.columns})

    missing_cols = [col for col in PRICE_SERIES_COLUMNS[:-1] if col not in renamed.columns]
    if missing_cols:
        raise ValueError(f"Data must contain columns: {missing_cols}")

    series = renamed[PRICE_SERIES_COLUMNS[:-1]].copy()
    series = series.sort_values('date').reset_index(drop=True)
    for col in ['open', 'high', 'low', 'close']:
        series[col] = series[col].astype(float)
    series['return'] = calculate_returns(series['close'], method='log')

    return series
