"""
Data loading, parsing and preprocessing module.

This module handles:
- Market data fetching from APIs (yfinance)
- Excel dataset parsing (one sheet per ticker)
- Data caching (parquet/CSV files and in memory)
- Price series validation
- Return calculations (log returns, range ratios, overnight returns)
"""

from histvol.data.returns import (
    PRICE_SERIES_COLUMNS,
    build_price_series,
    calculate_overnight_returns,
    calculate_ranges,
    calculate_returns,
)
from histvol.data.loader import (
    fetch_data,
    get_market_data,
    load_cache_range,
    load_from_cache,
    save_to_cache,
    validate_price_series,
)
from histvol.data.parser import parse_dataset, validate_date_format

__all__ = [
    # Returns
    'PRICE_SERIES_COLUMNS',
    'build_price_series',
    'calculate_overnight_returns',
    'calculate_ranges',
    'calculate_returns',
    # Loader
    'fetch_data',
    'get_market_data',
    'load_cache_range',
    'load_from_cache',
    'save_to_cache',
    'validate_price_series',
    # Parser
    'parse_dataset',
    'validate_date_format',
]
