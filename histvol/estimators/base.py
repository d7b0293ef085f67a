"""
Base estimator class for volatility estimators.

Every estimator works in two phases:
1. transform(): compute a raw per-observation quantity from the price series
2. reduce(): collapse one rolling window of raw values into an annualized
   volatility

compute() runs both phases over the windows produced by extract_windows and
aligns each estimate to the last row of its window.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from numbers import Integral

import numpy as np
import pandas as pd

from histvol.data.returns import PRICE_SERIES_COLUMNS
from histvol.utils import InvalidArgument
from histvol.windows import extract_windows

logger = logging.getLogger(__name__)

# Trading days per year
TRADING_DAYS = 252

MIN_BANDWIDTH = 2
MAX_BANDWIDTH = 252


class EstimatorCode(str, Enum):
    """Closed set of supported historical volatility estimators."""

    CC = 'CC'
    CCD = 'CCD'
    GK = 'GK'
    GKYZ = 'GKYZ'
    HT = 'HT'
    M = 'M'
    P = 'P'
    RS = 'RS'
    YZ = 'YZ'

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def parse(cls, value) -> 'EstimatorCode':
        """
        Resolve an estimator code, case-insensitively.

        Raises:
            InvalidArgument: If the value names no known estimator
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        available = ', '.join(code.value for code in cls)
        raise InvalidArgument(
            f"Unknown estimator '{value}'. Available estimators: {available}"
        )


_DESCRIPTIONS = {
    EstimatorCode.CC: 'Close-to-Close',
    EstimatorCode.CCD: 'Close-to-Close (demeaned)',
    EstimatorCode.GK: 'Garman-Klass',
    EstimatorCode.GKYZ: 'Garman-Klass-Yang-Zhang',
    EstimatorCode.HT: 'Hodges-Tompkins',
    EstimatorCode.M: 'Meilijson',
    EstimatorCode.P: 'Parkinson',
    EstimatorCode.RS: 'Rogers-Satchell',
    EstimatorCode.YZ: 'Yang-Zhang',
}


def validate_bandwidth(bandwidth) -> int:
    """
    Check that a bandwidth is an integer within [MIN_BANDWIDTH, MAX_BANDWIDTH].

    Raises:
        InvalidArgument: If the bandwidth is not acceptable
    """
    if isinstance(bandwidth, bool) or not isinstance(bandwidth, Integral):
        raise InvalidArgument(f"Bandwidth must be an integer, got {bandwidth!r}")
    if not MIN_BANDWIDTH <= bandwidth <= MAX_BANDWIDTH:
        raise InvalidArgument(
            f"Bandwidth must be between {MIN_BANDWIDTH} and {MAX_BANDWIDTH}, got {bandwidth}"
        )
    return int(bandwidth)


class BaseEstimator(ABC):
    """
    Abstract base class for volatility estimators.

    Subclasses must implement:
    - transform(): raw per-observation series
    - annualization_scalar(): factor applied to sqrt(sum(window))

    and may override reduce() when the window reduction is not a plain
    scaled root of the sum.
    """

    code: EstimatorCode = None

    def __init__(self, bandwidth: int = 30, annualization_factor: int = TRADING_DAYS):
        """
        Initialize estimator.

        Args:
            bandwidth: Rolling window size (trading days)
            annualization_factor: Days per year for annualization (default: 252)
        """
        self.bandwidth = validate_bandwidth(bandwidth)
        self.annualization_factor = annualization_factor

    @property
    def name(self) -> str:
        return self.code.description

    @abstractmethod
    def transform(self, data: pd.DataFrame) -> np.ndarray:
        """
        Compute the raw per-observation series.

        Args:
            data: Price series table

        Returns:
            Array with one row per observation
        """
        pass

    def annualization_scalar(self, observations: int) -> float:
        """Scalar applied to sqrt(sum(window)) to annualize one window."""
        raise NotImplementedError

    def reduce(self, window: np.ndarray, observations: int) -> float:
        """
        Reduce one window of raw values to an annualized volatility.

        NaN values inside the window propagate to the result.

        Args:
            window: Raw values for one window
            observations: Length of the whole series

        Returns:
            Annualized volatility for the window
        """
        return self.annualization_scalar(observations) * np.sqrt(np.sum(window))

    def validate_inputs(self, data: pd.DataFrame) -> None:
        """
        Validate input data.

        Args:
            data: DataFrame to validate

        Raises:
            InvalidArgument: If data is invalid
        """
        if not isinstance(data, pd.DataFrame):
            raise InvalidArgument(f"Data must be a DataFrame, got {type(data).__name__}")

        missing_cols = [col for col in PRICE_SERIES_COLUMNS if col not in data.columns]
        if missing_cols:
            raise InvalidArgument(
                f"Data must contain the following time series: "
                f"{', '.join(PRICE_SERIES_COLUMNS)} (missing: {missing_cols})"
            )

        if data.empty:
            raise InvalidArgument("Input data is empty")

        if self.bandwidth >= len(data):
            raise InvalidArgument(
                f"Bandwidth must be less than the number of observations "
                f"({self.bandwidth} >= {len(data)})"
            )

    def compute(self, data: pd.DataFrame, compact: bool = True) -> pd.Series:
        """
        Main interface: validate, transform, window and reduce.

        Args:
            data: Price series table
            compact: Drop the bandwidth - 1 leading positions that precede
                the first complete window

        Returns:
            Series of annualized volatility estimates aligned to the index
            of data (shortened to t - bandwidth + 1 when compact)
        """
        self.validate_inputs(data)

        t = len(data)
        raw = self.transform(data)
        windows = extract_windows(raw, self.bandwidth)
        offset = t - len(windows)

        volatility = np.full(t, np.nan)
        with np.errstate(invalid='ignore', divide='ignore'):
            for i, window in enumerate(windows):
                volatility[i + offset] = self.reduce(window, t)

        logger.debug(
            f"{self.code.value}: {len(windows)} windows of {self.bandwidth} "
            f"over {t} observations"
        )

        result = pd.Series(volatility, index=data.index, name=self.code.value)
        if compact:
            result = result.iloc[offset:]
        return result
