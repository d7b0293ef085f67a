"""
Close-to-Close Volatility Estimators.

The traditional estimator uses squared log returns of closing prices.

Formula:
    σ = √(252/(n-1)) * √(Σ rᵢ²)

Where:
    rᵢ = ln(Cᵢ / Cᵢ₋₁) - log returns
    n = window size

The demeaned variant subtracts the mean return of the whole series before
squaring:
    σ = √(252/(n-1)) * √(Σ (rᵢ - r̄)²)

Reference:
    Standard realized volatility measure, widely used in finance.
"""

import numpy as np
import pandas as pd

from histvol.estimators.base import BaseEstimator, EstimatorCode


class CloseToCloseEstimator(BaseEstimator):
    """
    Close-to-Close volatility estimator.

    The window containing the first (undefined) return yields NaN.
    """

    code = EstimatorCode.CC

    def transform(self, data: pd.DataFrame) -> np.ndarray:
        returns = data['return'].to_numpy(dtype=float)
        return returns ** 2

    def annualization_scalar(self, observations: int) -> float:
        return np.sqrt(self.annualization_factor / (self.bandwidth - 1))


class DemeanedCloseToCloseEstimator(CloseToCloseEstimator):
    """
    Close-to-Close estimator on returns demeaned by the series mean.
    """

    code = EstimatorCode.CCD

    def transform(self, data: pd.DataFrame) -> np.ndarray:
        returns = data['return'].to_numpy(dtype=float)
        # Mean over the whole series, ignoring the undefined first return
        return (returns - np.nanmean(returns)) ** 2
