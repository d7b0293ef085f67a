"""
Garman-Klass Volatility Estimators.

Combines the intraday range with the open-to-close move.

Formula:
    σ = √(252/n) * √(Σ [0.5 * ln(Hᵢ/Lᵢ)² - (2ln2 - 1) * ln(Cᵢ/Oᵢ)²])

The Yang-Zhang extension adds the overnight jump ln(Oᵢ/Cᵢ₋₁)² to every term,
so the first observation is undefined.

References:
    Garman, M. B., & Klass, M. J. (1980). "On the Estimation of Security
    Price Volatilities from Historical Data." Journal of Business, 53(1), 67-78.
    Yang, D., & Zhang, Q. (2000). "Drift-Independent Volatility Estimation
    Based on High, Low, Open, and Close Prices." Journal of Business,
    73(3), 477-491.
"""

import numpy as np
import pandas as pd

from histvol.data.returns import calculate_overnight_returns, calculate_ranges
from histvol.estimators.base import BaseEstimator, EstimatorCode


class GarmanKlassEstimator(BaseEstimator):
    """
    Garman-Klass volatility estimator.

    Assumes no drift and no opening jumps.
    """

    code = EstimatorCode.GK

    def __init__(self, bandwidth: int = 30, annualization_factor: int = 252):
        super().__init__(bandwidth, annualization_factor)
        self.constant = 2 * np.log(2) - 1  # 2ln2 - 1

    def _range_terms(self, data: pd.DataFrame) -> np.ndarray:
        ranges = calculate_ranges(
            high=data['high'],
            low=data['low'],
            open=data['open'],
            close=data['close']
        )
        hl = ranges['high_low'].to_numpy(dtype=float)
        co = ranges['close_open'].to_numpy(dtype=float)
        return 0.5 * hl ** 2 - self.constant * co ** 2

    def transform(self, data: pd.DataFrame) -> np.ndarray:
        return self._range_terms(data)

    def annualization_scalar(self, observations: int) -> float:
        return np.sqrt(self.annualization_factor / self.bandwidth)


class GarmanKlassYangZhangEstimator(GarmanKlassEstimator):
    """
    Garman-Klass estimator extended with the overnight jump component.
    """

    code = EstimatorCode.GKYZ

    def transform(self, data: pd.DataFrame) -> np.ndarray:
        overnight = calculate_overnight_returns(
            open_prices=data['open'],
            close_prices=data['close']
        ).to_numpy(dtype=float)
        return overnight ** 2 + self._range_terms(data)
