"""
Hodges-Tompkins Volatility Estimator.

Corrects the bias of close-to-close volatility computed over overlapping
windows.

Formula:
    σ = √(252 / (1 - n/d + (n² - 1)/(3d²))) * std(r)

Where:
    std(r) = sample standard deviation (n-1 denominator) of the window returns
    n = window size
    d = t - n, with t the length of the whole series

Reference:
    Hodges, S., & Tompkins, R. (2002). "Volatility Cones and Their Sampling
    Properties." Journal of Derivatives, 10(1), 15-25.
"""

import numpy as np
import pandas as pd

from histvol.estimators.base import BaseEstimator, EstimatorCode


class HodgesTompkinsEstimator(BaseEstimator):
    """
    Hodges-Tompkins bias-corrected volatility estimator.

    The correction term is non-negative and is zero only at n = 2, d = 1,
    where the estimate is infinite. It exceeds one, shrinking the estimate,
    only when d < (n² - 1)/(3n).
    """

    code = EstimatorCode.HT

    def transform(self, data: pd.DataFrame) -> np.ndarray:
        return data['return'].to_numpy(dtype=float)

    def annualization_scalar(self, observations: int) -> float:
        n = self.bandwidth
        d = observations - n
        correction = 1 - (n / d) + ((n ** 2) - 1) / (3 * (d ** 2))
        return np.sqrt(np.float64(self.annualization_factor) / correction)

    def reduce(self, window: np.ndarray, observations: int) -> float:
        return self.annualization_scalar(observations) * np.std(window, ddof=1)
