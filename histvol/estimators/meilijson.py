"""
Meilijson Volatility Estimator.

Refines Garman-Klass by normalising each day so that the open-to-close move
is non-negative: on down days the high and low are swapped and negated.

With c = ln(C/O), h = ln(H/O), l = ln(L/O) and, after normalisation,
c' = |c|, h' and l' the (possibly swapped) extremes:
    s₁ = 2[(h' - c')² + l'²]
    s₂ = c²
    s₃ = 2(h' - c' - l')c'
    s₄ = -(h' - c')l' / (2ln2 - 5/4)

    σ = √(252/n) * √(Σ [0.273520 s₁ + 0.160358 s₂ + 0.365212 s₃ + 0.200910 s₄])

Reference:
    Meilijson, I. (2009). "The Garman-Klass Volatility Estimator Revisited."
    arXiv:0807.3492.
"""

import numpy as np
import pandas as pd

from histvol.data.returns import calculate_ranges
from histvol.estimators.base import BaseEstimator, EstimatorCode

COEFFICIENTS = (0.273520, 0.160358, 0.365212, 0.200910)


class MeilijsonEstimator(BaseEstimator):
    """
    Meilijson volatility estimator.
    """

    code = EstimatorCode.M

    def transform(self, data: pd.DataFrame) -> np.ndarray:
        ranges = calculate_ranges(
            high=data['high'],
            low=data['low'],
            open=data['open'],
            close=data['close']
        )
        co = ranges['close_open'].to_numpy(dtype=float)
        ho = ranges['high_open'].to_numpy(dtype=float)
        lo = ranges['low_open'].to_numpy(dtype=float)

        down = co < 0
        co_sw = np.where(down, -co, co)
        ho_sw = np.where(down, -lo, ho)
        lo_sw = np.where(down, -ho, lo)

        s1 = 2 * ((ho_sw - co_sw) ** 2 + lo_sw ** 2)
        s2 = co ** 2
        s3 = 2 * (ho_sw - co_sw - lo_sw) * co_sw
        s4 = -((ho_sw - co_sw) * lo_sw) / (2 * np.log(2) - 1.25)

        a1, a2, a3, a4 = COEFFICIENTS
        return a1 * s1 + a2 * s2 + a3 * s3 + a4 * s4

    def annualization_scalar(self, observations: int) -> float:
        return np.sqrt(self.annualization_factor / self.bandwidth)
