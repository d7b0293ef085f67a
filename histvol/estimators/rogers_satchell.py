"""
Rogers-Satchell Volatility Estimator.

Range-based estimator that accounts for drift (trending markets).

Formula:
    σ = √(252/n) * √(Σ [ln(Hᵢ/Oᵢ)(ln(Hᵢ/Oᵢ) - ln(Cᵢ/Oᵢ)) + ln(Lᵢ/Oᵢ)(ln(Lᵢ/Oᵢ) - ln(Cᵢ/Oᵢ))])

Where:
    Hᵢ, Lᵢ, Oᵢ, Cᵢ = High, Low, Open, Close on day i
    n = window size

Reference:
    Rogers, L. C. G., & Satchell, S. E. (1991). "Estimating Variance from High,
    Low, Open, and Close Prices." The Annals of Applied Probability, 1(4), 504-512.
"""

import numpy as np
import pandas as pd

from histvol.data.returns import calculate_ranges
from histvol.estimators.base import BaseEstimator, EstimatorCode


def rogers_satchell_terms(data: pd.DataFrame) -> np.ndarray:
    """
    Daily Rogers-Satchell variance terms.

    Args:
        data: DataFrame with 'high', 'low', 'open', 'close' columns

    Returns:
        Array of per-day terms (non-negative when H >= max(O, C) and L <= min(O, C))
    """
    ranges = calculate_ranges(
        high=data['high'],
        low=data['low'],
        open=data['open'],
        close=data['close']
    )
    co = ranges['close_open'].to_numpy(dtype=float)
    ho = ranges['high_open'].to_numpy(dtype=float)
    lo = ranges['low_open'].to_numpy(dtype=float)

    return ho * (ho - co) + lo * (lo - co)


class RogersSatchellEstimator(BaseEstimator):
    """
    Rogers-Satchell volatility estimator accounting for drift.
    """

    code = EstimatorCode.RS

    def transform(self, data: pd.DataFrame) -> np.ndarray:
        return rogers_satchell_terms(data)

    def annualization_scalar(self, observations: int) -> float:
        return np.sqrt(self.annualization_factor / self.bandwidth)
