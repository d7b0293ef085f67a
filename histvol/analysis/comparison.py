"""
Estimator comparison module.

This module runs several volatility estimators over the same price series
and measures how they relate to the Close-to-Close benchmark: correlation
matrix with significance, relative efficiency and OLS regressions.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from scipy import stats

from histvol.analysis.cones import make_title
from histvol.estimators import EstimatorCode, estimate_volatility
from histvol.utils import InvalidArgument

logger = logging.getLogger(__name__)

# CCD is left out: it differs from CC only by the demeaning of returns
DEFAULT_ESTIMATORS = (
    EstimatorCode.CC,
    EstimatorCode.GK,
    EstimatorCode.GKYZ,
    EstimatorCode.HT,
    EstimatorCode.M,
    EstimatorCode.P,
    EstimatorCode.RS,
    EstimatorCode.YZ,
)

SIGNIFICANCE_LEVEL = 0.05
CONFIDENCE_LEVEL = 0.95


@dataclass
class RegressionResult:
    """OLS fit of the benchmark estimates on one estimator."""
    intercept: float
    slope: float
    adjusted_r2: float
    x: np.ndarray
    fitted: np.ndarray
    lower: np.ndarray
    upper: np.ndarray


@dataclass
class EstimatorComparison:
    """Results of compare_estimators."""
    ticker: Optional[str]
    bandwidth: int
    estimators: List[EstimatorCode]
    dates: pd.Series
    volatilities: pd.DataFrame
    clean: pd.DataFrame
    correlations: pd.DataFrame
    p_values: pd.DataFrame
    efficiency: pd.Series
    regressions: Dict[str, RegressionResult]
    statistics: Dict[str, Dict]
    title: str

    @property
    def most_efficient(self) -> str:
        return str(self.efficiency.idxmax())


def run_all_estimators(
    data: pd.DataFrame,
    bandwidth: int = 30,
    estimators: Sequence[Union[str, EstimatorCode]] = DEFAULT_ESTIMATORS
) -> pd.DataFrame:
    """
    Run estimators on the same data and return results side-by-side.

    Args:
        data: Price series
        bandwidth: Rolling window size
        estimators: Estimator codes, the first one is the benchmark

    Returns:
        DataFrame with one full (non-compact) column per estimator,
        aligned to data
    """
    codes = [EstimatorCode.parse(e) for e in estimators]
    results = pd.DataFrame(index=data.index)
    for code in codes:
        results[code.value] = estimate_volatility(data, code, bandwidth, compact=False)
    return results


def calculate_correlation_matrix(volatility_df: pd.DataFrame):
    """
    Pearson correlations between estimators and their p-values.

    Args:
        volatility_df: DataFrame with volatility estimates (columns are
            estimators), without missing values

    Returns:
        Tuple of (correlation DataFrame, p-value DataFrame)
    """
    columns = list(volatility_df.columns)
    rho = pd.DataFrame(np.eye(len(columns)), index=columns, columns=columns)
    p_values = pd.DataFrame(np.zeros((len(columns), len(columns))), index=columns, columns=columns)

    for i, first in enumerate(columns):
        for second in columns[i + 1:]:
            r, p = stats.pearsonr(volatility_df[first], volatility_df[second])
            rho.loc[first, second] = rho.loc[second, first] = float(r)
            p_values.loc[first, second] = p_values.loc[second, first] = float(p)

    return rho, p_values


def calculate_efficiency(volatility_df: pd.DataFrame) -> pd.Series:
    """
    Relative efficiency of each estimator against the first one.

    Efficiency is the variance of the benchmark divided by the variance of
    the estimator, so the benchmark scores 1.

    Args:
        volatility_df: DataFrame with volatility estimates, benchmark first

    Returns:
        Series of efficiencies indexed by estimator
    """
    variances = volatility_df.var(ddof=1)
    efficiency = variances.iloc[0] / variances
    efficiency.iloc[0] = 1.0
    efficiency.name = 'efficiency'
    return efficiency


def fit_regression(x: np.ndarray, y: np.ndarray,
                   confidence: float = CONFIDENCE_LEVEL) -> RegressionResult:
    """
    Ordinary least squares of y on x with intercept.

    The confidence bounds are those of the mean response at each x.

    Args:
        x: Regressor values
        y: Response values
        confidence: Confidence level of the bounds (default: 0.95)

    Returns:
        RegressionResult
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    n = x.size
    if n < 3:
        raise InvalidArgument(f"At least 3 observations are needed for a regression, got {n}")

    x_mean = x.mean()
    y_mean = y.mean()
    sxx = np.sum((x - x_mean) ** 2)
    if sxx == 0:
        raise InvalidArgument("Regressor has zero variance")

    slope = np.sum((x - x_mean) * (y - y_mean)) / sxx
    intercept = y_mean - slope * x_mean
    fitted = intercept + slope * x

    sse = np.sum((y - fitted) ** 2)
    sst = np.sum((y - y_mean) ** 2)
    r2 = 1 - sse / sst if sst > 0 else 1.0
    adjusted_r2 = 1 - (1 - r2) * (n - 1) / (n - 2)

    s = np.sqrt(sse / (n - 2))
    t_crit = stats.t.ppf(0.5 + confidence / 2, df=n - 2)
    half_width = t_crit * s * np.sqrt(1 / n + (x - x_mean) ** 2 / sxx)

    return RegressionResult(
        intercept=float(intercept),
        slope=float(slope),
        adjusted_r2=float(adjusted_r2),
        x=x,
        fitted=fitted,
        lower=fitted - half_width,
        upper=fitted + half_width
    )


def calculate_regressions(volatility_df: pd.DataFrame) -> Dict[str, RegressionResult]:
    """
    Regress the first estimator on every estimator (itself included).

    Args:
        volatility_df: DataFrame with volatility estimates, benchmark first

    Returns:
        Dictionary of {estimator: RegressionResult}
    """
    y = volatility_df.iloc[:, 0].to_numpy(dtype=float)
    return {
        col: fit_regression(volatility_df[col].to_numpy(dtype=float), y)
        for col in volatility_df.columns
    }


def generate_comparison_statistics(volatility_df: pd.DataFrame) -> dict:
    """
    Generate summary statistics for each estimator.

    Args:
        volatility_df: DataFrame with volatility estimates

    Returns:
        Dictionary with statistics for each estimator
    """
    if 'date' in volatility_df.columns:
        vol_data = volatility_df.drop(columns=['date'])
    else:
        vol_data = volatility_df

    summary = {}
    for estimator in vol_data.columns:
        vol_series = vol_data[estimator].dropna()
        if len(vol_series) > 0:
            summary[estimator] = {
                'mean': float(vol_series.mean()),
                'std': float(vol_series.std()),
                'min': float(vol_series.min()),
                'max': float(vol_series.max()),
                'count': int(len(vol_series))
            }
        else:
            summary[estimator] = {
                'mean': np.nan,
                'std': np.nan,
                'min': np.nan,
                'max': np.nan,
                'count': 0
            }

    return summary


def compare_estimators(
    data: pd.DataFrame,
    bandwidth: int = 30,
    estimators: Sequence[Union[str, EstimatorCode]] = DEFAULT_ESTIMATORS,
    ticker: Optional[str] = None
) -> EstimatorComparison:
    """
    Compare estimators on one price series.

    Args:
        data: Price series
        bandwidth: Rolling window size (default: 30)
        estimators: Estimator codes, the first one is the benchmark
            (default: CC, GK, GKYZ, HT, M, P, RS, YZ)
        ticker: Ticker symbol used in titles

    Returns:
        EstimatorComparison

    Raises:
        InvalidArgument: If arguments are invalid or too few observations
            remain once incomplete rows are dropped
    """
    codes = [EstimatorCode.parse(e) for e in estimators]
    if len(codes) < 2:
        raise InvalidArgument("At least 2 estimators are needed for a comparison")
    if len(set(codes)) != len(codes):
        raise InvalidArgument(f"Duplicate estimators: {[c.value for c in codes]}")

    logger.info(f"Comparing {len(codes)} estimators with bandwidth {bandwidth}")

    volatilities = run_all_estimators(data, bandwidth, codes)
    clean = volatilities.dropna(how='any')
    if len(clean) < 3:
        raise InvalidArgument(
            f"Only {len(clean)} complete rows of estimates, at least 3 are needed"
        )

    correlations, p_values = calculate_correlation_matrix(clean)

    return EstimatorComparison(
        ticker=ticker,
        bandwidth=int(bandwidth),
        estimators=codes,
        dates=data['date'],
        volatilities=volatilities,
        clean=clean,
        correlations=correlations,
        p_values=p_values,
        efficiency=calculate_efficiency(clean),
        regressions=calculate_regressions(clean),
        statistics=generate_comparison_statistics(clean),
        title=make_title('Estimators', ticker, data['date']),
    )
