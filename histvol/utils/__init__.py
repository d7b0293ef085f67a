"""
Utility functions for the historical volatility toolkit.

This module provides helper functions for:
- Custom exception classes
- Configuration loading
- Logging configuration
- Caching utilities
- Date parsing and date range validation
"""

from datetime import datetime
from typing import Union

import pandas as pd

from histvol.utils.config_loader import (
    DEFAULT_CONFIG,
    ConfigError,
    DataError,
    InvalidArgument,
    ValidationError,
    load_config,
    merge_config,
    validate_config,
)
from histvol.utils.logging import setup_logging
from histvol.utils.cache import DatasetCache, ensure_directory, get_cache_path


def parse_date(date_str: Union[str, datetime, pd.Timestamp]) -> pd.Timestamp:
    """
    Parse a date string or date object into a pandas Timestamp.

    Args:
        date_str: Date as string (YYYY-MM-DD), datetime, or Timestamp

    Returns:
        pandas Timestamp object

    Raises:
        ValidationError: If date cannot be parsed
    """
    try:
        if isinstance(date_str, pd.Timestamp):
            return date_str
        if isinstance(date_str, datetime):
            return pd.Timestamp(date_str)
        if isinstance(date_str, str):
            return pd.Timestamp(date_str)
        raise ValidationError(f"Cannot parse date: {date_str}")
    except (ValueError, TypeError) as e:
        raise ValidationError(f"Invalid date format: {date_str}") from e


def validate_date_range(
    start_date: Union[str, pd.Timestamp],
    end_date: Union[str, pd.Timestamp]
) -> tuple:
    """
    Validate that start_date is before end_date.

    Args:
        start_date: Start date
        end_date: End date

    Returns:
        Tuple of (start_date, end_date) as Timestamps

    Raises:
        ValidationError: If dates are invalid or start_date >= end_date
    """
    start = parse_date(start_date)
    end = parse_date(end_date)

    if start >= end:
        raise ValidationError(
            f"Start date ({start}) must be before end date ({end})"
        )

    return start, end


__all__ = [
    # Exceptions
    'ConfigError',
    'DataError',
    'InvalidArgument',
    'ValidationError',
    # Config
    'DEFAULT_CONFIG',
    'load_config',
    'merge_config',
    'validate_config',
    # Logging
    'setup_logging',
    # Cache
    'DatasetCache',
    'ensure_directory',
    'get_cache_path',
    # Date utilities
    'parse_date',
    'validate_date_range',
]
