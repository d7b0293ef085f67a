"""
Yang-Zhang Volatility Estimator.

Most comprehensive range-based estimator. Accounts for:
- Overnight volatility (previous close to open)
- Open-to-close volatility
- Intraday range (via Rogers-Satchell)

Formula:
    σ² = (252/(n-1)) Σ oᵢ² + k (252/(n-1)) Σ cᵢ² + (1-k) (252/n) Σ RSᵢ

Where:
    oᵢ = ln(Oᵢ/Cᵢ₋₁)
    cᵢ = ln(Cᵢ/Oᵢ)
    RSᵢ = Rogers-Satchell daily term
    k = 0.34/(1.34 + (n+1)/(n-1))

Reference:
    Yang, D., & Zhang, Q. (2000). "Drift-Independent Volatility Estimation
    Based on High, Low, Open, and Close Prices." Journal of Business,
    73(3), 477-491.
"""

import numpy as np
import pandas as pd

from histvol.data.returns import calculate_overnight_returns, calculate_ranges
from histvol.estimators.base import BaseEstimator, EstimatorCode
from histvol.estimators.rogers_satchell import rogers_satchell_terms


class YangZhangEstimator(BaseEstimator):
    """
    Yang-Zhang volatility estimator.

    The raw series has three columns (overnight, open-to-close and
    Rogers-Satchell terms) reduced jointly. The first window is NaN because
    the first overnight return is undefined.
    """

    code = EstimatorCode.YZ

    def __init__(self, bandwidth: int = 30, annualization_factor: int = 252):
        super().__init__(bandwidth, annualization_factor)

        n = self.bandwidth
        self.k = 0.34 / (1.34 + (n + 1) / (n - 1))

        # Per-column scaling of the window sums
        self.weights = np.array([
            self.annualization_factor / (n - 1),
            self.k * self.annualization_factor / (n - 1),
            (1 - self.k) * self.annualization_factor / n,
        ])

    def transform(self, data: pd.DataFrame) -> np.ndarray:
        overnight = calculate_overnight_returns(
            open_prices=data['open'],
            close_prices=data['close']
        ).to_numpy(dtype=float)
        ranges = calculate_ranges(
            high=data['high'],
            low=data['low'],
            open=data['open'],
            close=data['close']
        )
        co = ranges['close_open'].to_numpy(dtype=float)

        return np.column_stack([overnight ** 2, co ** 2, rogers_satchell_terms(data)])

    def reduce(self, window: np.ndarray, observations: int) -> float:
        return np.sqrt(np.sum(self.weights * np.sum(window, axis=0)))
