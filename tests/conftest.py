"""
Shared fixtures: synthetic OHLC price series.
"""

import matplotlib
import numpy as np
import pandas as pd
import pytest

from histvol.data.returns import build_price_series

matplotlib.use('Agg')


def _synthetic_ohlc(periods: int, seed: int) -> pd.DataFrame:
    np.random.seed(seed)
    close = 100 * np.exp(np.cumsum(np.random.randn(periods) * 0.01))

    # Open gaps away from the previous close
    open_prices = np.empty(periods)
    open_prices[0] = 100.0
    open_prices[1:] = close[:-1] * np.exp(np.random.randn(periods - 1) * 0.003)

    high = np.maximum(open_prices, close) * (1 + np.abs(np.random.randn(periods)) * 0.005)
    low = np.minimum(open_prices, close) * (1 - np.abs(np.random.randn(periods)) * 0.005)

    return pd.DataFrame({
        'Date': pd.bdate_range('2015-01-01', periods=periods),
        'Open': open_prices,
        'High': high,
        'Low': low,
        'Close': close,
    })


@pytest.fixture
def make_prices():
    """Factory for synthetic price series with date/open/high/low/close/return."""
    def _make(periods: int = 300, seed: int = 42) -> pd.DataFrame:
        return build_price_series(_synthetic_ohlc(periods, seed))
    return _make


@pytest.fixture
def price_series(make_prices):
    """300 business days of synthetic prices starting 2015-01-01."""
    return make_prices()


@pytest.fixture
def raw_ohlc():
    """Synthetic OHLC table with capitalised column names."""
    return _synthetic_ohlc(120, 7)
