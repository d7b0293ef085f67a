"""
Excel dataset parser.

A dataset is an .xlsx workbook with one sheet per ticker. Each sheet must
define exactly the columns Date, Open, High, Low, Close, in that order.
"""

import logging
import re
import zipfile
from datetime import datetime
from pathlib import Path
from typing import List, Tuple, Union

import numpy as np
import pandas as pd

from histvol.data.returns import build_price_series
from histvol.utils import DataError, ValidationError

logger = logging.getLogger(__name__)

SHEET_COLUMNS = ['Date', 'Open', 'High', 'Low', 'Close']

# strftime directives carrying time of day
_TIME_DIRECTIVES = re.compile(r'%[HIMSfpXcLzZ]')


def validate_date_format(date_format: str) -> str:
    """
    Check that a strftime date format is usable and has no time component.

    Raises:
        ValidationError: If the format is empty, invalid or includes time
    """
    if not isinstance(date_format, str) or not date_format.strip():
        raise ValidationError("The date format must be a non-empty string")

    if _TIME_DIRECTIVES.search(date_format):
        raise ValidationError("The date format must not include time information")

    try:
        datetime.now().strftime(date_format)
    except ValueError as e:
        raise ValidationError(f"The date format '{date_format}' is invalid: {e}") from e

    return date_format


def _validate_file(file: Union[str, Path]) -> Path:
    path = Path(file)
    if not path.exists():
        raise DataError(f"The dataset file '{file}' could not be found")
    if path.suffix.lower() != '.xlsx':
        raise DataError(f"The dataset file '{file}' is not a valid Excel spreadsheet")
    return path


def _parse_sheet(workbook: pd.ExcelFile, name: str, date_format: str) -> pd.DataFrame:
    tab = workbook.parse(sheet_name=name)

    columns = [str(col) for col in tab.columns]
    if any(col.startswith('Unnamed') for col in columns):
        raise ValidationError(f"The '{name}' sheet contains unnamed columns")
    if columns != SHEET_COLUMNS:
        raise ValidationError(
            f"The '{name}' sheet must define the following columns, in the exact same "
            f"order: {', '.join(SHEET_COLUMNS)}"
        )

    if tab.isna().any().any():
        raise ValidationError(f"The '{name}' sheet contains invalid or missing values")

    if pd.api.types.is_datetime64_any_dtype(tab['Date']):
        dates = pd.to_datetime(tab['Date'])
    else:
        try:
            dates = pd.to_datetime(tab['Date'].astype(str), format=date_format)
        except (ValueError, TypeError) as e:
            raise ValidationError(
                f"The '{name}' sheet contains dates not matching '{date_format}'"
            ) from e

    try:
        prices = tab[SHEET_COLUMNS[1:]].apply(pd.to_numeric).to_numpy(dtype=float)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"The '{name}' sheet contains invalid or missing values") from e

    if not np.isfinite(prices).all():
        raise ValidationError(f"The '{name}' sheet contains invalid or missing values")
    if (prices < 0).any():
        raise ValidationError(f"The '{name}' sheet contains negative values")
    if dates.duplicated().any():
        raise ValidationError(f"The '{name}' sheet contains duplicate observation dates")
    if not dates.is_monotonic_increasing:
        raise ValidationError(f"The '{name}' sheet contains unsorted observation dates")

    frame = pd.DataFrame(prices, columns=SHEET_COLUMNS[1:])
    frame.insert(0, 'Date', dates.dt.date.to_numpy())
    return build_price_series(frame)


def parse_dataset(
    file: Union[str, Path],
    date_format: str = '%d/%m/%Y'
) -> Tuple[List[str], List[pd.DataFrame]]:
    """
    Parse an Excel dataset into price series.

    Args:
        file: Path to the .xlsx workbook
        date_format: strftime format of text dates (default: '%d/%m/%Y');
            cells already stored as Excel dates are used as they are

    Returns:
        Tuple of (tickers, price series) where tickers are the sheet names
        and each price series has columns date, open, high, low, close,
        return

    Raises:
        DataError: If the file cannot be found or read
        ValidationError: If a sheet violates the dataset rules
    """
    path = _validate_file(file)
    date_format = validate_date_format(date_format)

    try:
        workbook = pd.ExcelFile(path)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise DataError(f"The dataset file '{file}' is not a valid Excel spreadsheet") from e

    with workbook:
        tickers = [str(name) for name in workbook.sheet_names]
        data = [_parse_sheet(workbook, name, date_format) for name in tickers]

    logger.info(f"Parsed {len(tickers)} sheets from {path.name}")
    return tickers, data
