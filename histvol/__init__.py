"""
Historical volatility toolkit.

Rolling-window annualized volatility from daily OHLC prices:
- Nine estimators (CC, CCD, GK, GKYZ, HT, M, P, RS, YZ)
- Volatility cones, curves and distributions
- Estimator comparison (correlation, efficiency, regressions)
"""

from histvol.estimators import EstimatorCode, estimate_volatility, get_estimator, list_estimators
from histvol.utils import InvalidArgument
from histvol.windows import extract_windows, iter_windows

__version__ = '1.0.0'

__all__ = [
    'EstimatorCode',
    'InvalidArgument',
    'estimate_volatility',
    'extract_windows',
    'get_estimator',
    'iter_windows',
    'list_estimators',
]
