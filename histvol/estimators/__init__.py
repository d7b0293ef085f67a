"""
Volatility estimator modules.

This package contains implementations of the historical volatility estimators:
- CC / CCD: Close-to-Close and its demeaned variant
- GK / GKYZ: Garman-Klass and its Yang-Zhang extension
- HT: Hodges-Tompkins bias-corrected estimator
- M: Meilijson estimator
- P: Parkinson range-based estimator
- RS: Rogers-Satchell estimator accounting for drift
- YZ: Yang-Zhang estimator
"""

from histvol.estimators.base import (
    BaseEstimator,
    EstimatorCode,
    MAX_BANDWIDTH,
    MIN_BANDWIDTH,
    TRADING_DAYS,
    validate_bandwidth,
)
from histvol.estimators.close_to_close import (
    CloseToCloseEstimator,
    DemeanedCloseToCloseEstimator,
)
from histvol.estimators.garman_klass import (
    GarmanKlassEstimator,
    GarmanKlassYangZhangEstimator,
)
from histvol.estimators.hodges_tompkins import HodgesTompkinsEstimator
from histvol.estimators.meilijson import MeilijsonEstimator
from histvol.estimators.parkinson import ParkinsonEstimator
from histvol.estimators.rogers_satchell import RogersSatchellEstimator
from histvol.estimators.yang_zhang import YangZhangEstimator
from histvol.estimators.factory import (
    ESTIMATORS,
    estimate_volatility,
    get_estimator,
    list_estimators,
)

__all__ = [
    # Base
    'BaseEstimator',
    'EstimatorCode',
    'MAX_BANDWIDTH',
    'MIN_BANDWIDTH',
    'TRADING_DAYS',
    'validate_bandwidth',
    # Estimators
    'CloseToCloseEstimator',
    'DemeanedCloseToCloseEstimator',
    'GarmanKlassEstimator',
    'GarmanKlassYangZhangEstimator',
    'HodgesTompkinsEstimator',
    'MeilijsonEstimator',
    'ParkinsonEstimator',
    'RogersSatchellEstimator',
    'YangZhangEstimator',
    # Factory
    'ESTIMATORS',
    'estimate_volatility',
    'get_estimator',
    'list_estimators',
]
