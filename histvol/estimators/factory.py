"""
Factory module for creating volatility estimator instances.

Estimators form a closed set: each EstimatorCode maps to exactly one
estimator class carrying its own raw transform and window reduction.
"""

import logging
from typing import Dict, List, Type, Union

import pandas as pd

from histvol.estimators.base import BaseEstimator, EstimatorCode, TRADING_DAYS
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

logger = logging.getLogger(__name__)


# Registry of available estimators, in canonical order
ESTIMATORS: Dict[EstimatorCode, Type[BaseEstimator]] = {
    EstimatorCode.CC: CloseToCloseEstimator,
    EstimatorCode.CCD: DemeanedCloseToCloseEstimator,
    EstimatorCode.GK: GarmanKlassEstimator,
    EstimatorCode.GKYZ: GarmanKlassYangZhangEstimator,
    EstimatorCode.HT: HodgesTompkinsEstimator,
    EstimatorCode.M: MeilijsonEstimator,
    EstimatorCode.P: ParkinsonEstimator,
    EstimatorCode.RS: RogersSatchellEstimator,
    EstimatorCode.YZ: YangZhangEstimator,
}


def get_estimator(
    name: Union[str, EstimatorCode],
    bandwidth: int = 30,
    annualization_factor: int = TRADING_DAYS
) -> BaseEstimator:
    """
    Create an estimator instance by code.

    Args:
        name: Estimator code (e.g., 'YZ', 'cc') or EstimatorCode member
        bandwidth: Rolling window size (trading days)
        annualization_factor: Days per year for annualization (default: 252)

    Returns:
        Estimator instance

    Raises:
        InvalidArgument: If the code or the bandwidth is invalid
    """
    code = EstimatorCode.parse(name)
    return ESTIMATORS[code](
        bandwidth=bandwidth,
        annualization_factor=annualization_factor
    )


def list_estimators() -> List[str]:
    """
    Get the list of available estimator codes.

    Returns:
        List of estimator codes
    """
    return [code.value for code in ESTIMATORS]


def estimate_volatility(
    data: pd.DataFrame,
    estimator: Union[str, EstimatorCode],
    bandwidth: int,
    compact: bool = True
) -> pd.Series:
    """
    Estimate annualized historical volatility over rolling windows.

    Args:
        data: Price series with date, open, high, low, close and return columns
        estimator: Estimator code
        bandwidth: Rolling window size, an integer in [2, 252] smaller than
            the number of observations
        compact: Drop the bandwidth - 1 leading positions (default: True)

    Returns:
        Series of length t, or t - bandwidth + 1 when compact; each value
        summarises the window ending at its position

    Raises:
        InvalidArgument: For an unknown estimator, a bad bandwidth or
            malformed data
    """
    instance = get_estimator(estimator, bandwidth)
    logger.debug(f"Estimating {instance.name} volatility with bandwidth {bandwidth}")
    return instance.compute(data, compact=compact)


__all__ = [
    'ESTIMATORS',
    'estimate_volatility',
    'get_estimator',
    'list_estimators',
]
