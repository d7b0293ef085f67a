"""
Parkinson Volatility Estimator.

Uses intraday high/low range instead of just closing prices.

Formula:
    σ = √(252/(4n·ln2)) * √(Σ ln(Hᵢ/Lᵢ)²)

Where:
    Hᵢ = High price on day i
    Lᵢ = Low price on day i
    n = window size

Reference:
    Parkinson, M. (1980). "The Extreme Value Method for Estimating the Variance
    of the Rate of Return." Journal of Business, 53(1), 61-65.
"""

import numpy as np
import pandas as pd

from histvol.estimators.base import BaseEstimator, EstimatorCode


class ParkinsonEstimator(BaseEstimator):
    """
    Parkinson volatility estimator using high/low range.

    Zero-range days contribute zero to the window sum.
    """

    code = EstimatorCode.P

    def transform(self, data: pd.DataFrame) -> np.ndarray:
        high = data['high'].to_numpy(dtype=float)
        low = data['low'].to_numpy(dtype=float)
        with np.errstate(divide='ignore', invalid='ignore'):
            return np.log(high / low) ** 2

    def annualization_scalar(self, observations: int) -> float:
        return np.sqrt(self.annualization_factor / (self.bandwidth * 4 * np.log(2)))
