"""
Volatility cone analysis.

For one estimator and several bandwidths, computes the statistics needed to
draw volatility cones, the rolling percentile curves of the shortest
bandwidth and the distribution of its estimates.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from scipy.stats import norm

from histvol.estimators import EstimatorCode, estimate_volatility, validate_bandwidth
from histvol.utils import InvalidArgument
from histvol.windows import extract_windows

logger = logging.getLogger(__name__)

DEFAULT_BANDWIDTHS = (30, 60, 90, 120)
DEFAULT_QUANTILES = (0.25, 0.75)
HISTOGRAM_BINS = 100

# Quantile definition matching the (i - 0.5)/n plotting positions
QUANTILE_METHOD = 'hazen'

CONE_COLUMNS = ['max', 'high', 'median', 'low', 'min', 'end']


@dataclass
class VolatilityDistribution:
    """Density histogram of a volatility series with a fitted normal pdf."""
    density: np.ndarray
    edges: np.ndarray
    normal_pdf: np.ndarray
    mean: float
    std: float


@dataclass
class VolatilityAnalysis:
    """Results of analyze_volatility."""
    estimator: EstimatorCode
    ticker: Optional[str]
    bandwidths: Tuple[int, ...]
    quantiles: Tuple[float, float]
    dates: pd.Series
    volatilities: pd.DataFrame
    cones: pd.DataFrame
    curves: pd.DataFrame
    distribution: VolatilityDistribution
    axis_min: float
    axis_max: float
    title: str

    @property
    def realized(self) -> pd.Series:
        """Full series of the shortest bandwidth."""
        return self.volatilities[self.bandwidths[0]]

    @property
    def realized_end(self) -> float:
        return float(self.realized.iloc[-1])


def validate_bandwidths(bandwidths: Sequence[int], observations: int) -> Tuple[int, ...]:
    """
    Validate the bandwidths of a cone analysis.

    Raises:
        InvalidArgument: Unless there are at least two strictly increasing
            bandwidths in range, the last one below the number of observations
    """
    bandwidths = tuple(bandwidths)
    if len(bandwidths) < 2:
        raise InvalidArgument("Expected at least 2 bandwidths")

    for bw in bandwidths:
        validate_bandwidth(bw)
    bandwidths = tuple(int(bw) for bw in bandwidths)

    if any(b <= a for a, b in zip(bandwidths, bandwidths[1:])):
        raise InvalidArgument(f"Bandwidths must be strictly increasing, got {list(bandwidths)}")

    if bandwidths[-1] >= observations:
        raise InvalidArgument(
            f"The last bandwidth must be less than the number of observations "
            f"({bandwidths[-1]} >= {observations})"
        )

    return bandwidths


def validate_quantiles(quantiles: Sequence[float]) -> Tuple[float, float]:
    """
    Validate the lower and upper quantiles.

    Raises:
        InvalidArgument: Unless two increasing values in (0, 1) summing to 1
    """
    quantiles = tuple(float(q) for q in quantiles)
    if len(quantiles) != 2:
        raise InvalidArgument(f"Expected 2 quantiles, got {len(quantiles)}")

    low, high = quantiles
    if not (0 < low < high < 1):
        raise InvalidArgument(f"Quantiles must be increasing values in (0, 1), got {list(quantiles)}")
    if not np.isclose(low + high, 1.0):
        raise InvalidArgument(f"Quantiles must sum to 1, got {list(quantiles)}")

    return low, high


def _summary(values: np.ndarray, quantiles: Tuple[float, float]) -> Dict[str, float]:
    valid = values[~np.isnan(values)]
    if valid.size == 0:
        return {'max': np.nan, 'high': np.nan, 'median': np.nan, 'low': np.nan, 'min': np.nan}

    low, high = np.quantile(valid, quantiles, method=QUANTILE_METHOD)
    return {
        'max': float(valid.max()),
        'high': float(high),
        'median': float(np.median(valid)),
        'low': float(low),
        'min': float(valid.min()),
    }


def calculate_cones(
    volatilities: pd.DataFrame,
    quantiles: Tuple[float, float] = DEFAULT_QUANTILES
) -> pd.DataFrame:
    """
    Cone statistics for each bandwidth.

    Args:
        volatilities: Full (non-compact) series, one column per bandwidth
        quantiles: Lower and upper quantiles

    Returns:
        DataFrame indexed by bandwidth with columns max, high, median, low,
        min and end (the latest estimate)
    """
    rows = {}
    for bw in volatilities.columns:
        values = volatilities[bw].to_numpy(dtype=float)
        stats = _summary(values, quantiles)
        stats['end'] = float(values[-1])
        rows[bw] = stats

    cones = pd.DataFrame.from_dict(rows, orient='index')[CONE_COLUMNS]
    cones.index.name = 'bandwidth'
    return cones


def calculate_curves(
    volatility: pd.Series,
    bandwidth: int,
    quantiles: Tuple[float, float] = DEFAULT_QUANTILES
) -> pd.DataFrame:
    """
    Rolling percentile curves of a volatility series.

    Each row summarises the window of ``bandwidth`` estimates ending there;
    rows before the first window are NaN.

    Args:
        volatility: Full (non-compact) volatility series
        bandwidth: Window length of the curves
        quantiles: Lower and upper quantiles

    Returns:
        DataFrame aligned to the series with columns max, high, median, low,
        min and realized
    """
    values = volatility.to_numpy(dtype=float)
    windows = extract_windows(values, bandwidth)
    offset = len(values) - len(windows)

    stats = [_summary(window, quantiles) for window in windows]
    padding = [dict.fromkeys(CONE_COLUMNS[:-1], np.nan)] * offset

    curves = pd.DataFrame(padding + stats, index=volatility.index, columns=CONE_COLUMNS[:-1])
    curves['realized'] = values
    return curves


def calculate_distribution(volatility: pd.Series, bins: int = HISTOGRAM_BINS) -> VolatilityDistribution:
    """
    Density histogram of the defined estimates with a normal fit.

    Args:
        volatility: Volatility series (NaN ignored)
        bins: Number of histogram bins

    Returns:
        VolatilityDistribution
    """
    valid = volatility.dropna().to_numpy(dtype=float)
    if valid.size < 2:
        raise InvalidArgument("At least 2 defined estimates are needed for a distribution")

    density, edges = np.histogram(valid, bins=bins, density=True)
    mean = float(valid.mean())
    std = float(valid.std(ddof=1))
    normal_pdf = norm.pdf(edges, loc=mean, scale=std) if std > 0 else np.full(edges.shape, np.nan)

    return VolatilityDistribution(
        density=density,
        edges=edges,
        normal_pdf=normal_pdf,
        mean=mean,
        std=std
    )


def make_title(estimator: Union[str, EstimatorCode], ticker: Optional[str], dates: pd.Series,
               suffix: Optional[str] = None) -> str:
    """
    Chart title such as 'YZ (JPM, 2010-2017)'.

    Years are omitted when dates are plain numbers.
    """
    code = estimator.value if isinstance(estimator, EstimatorCode) else str(estimator)
    parts = [ticker] if ticker else []

    if len(dates) > 0 and not pd.api.types.is_numeric_dtype(dates):
        years = pd.to_datetime(pd.Series(dates)).dt.year
        first, last = int(years.min()), int(years.max())
        parts.append(str(first) if first == last else f"{first}-{last}")

    title = f"{code} ({', '.join(parts)})" if parts else code
    if suffix:
        title = f"{title} > {suffix}"
    return title


def analyze_volatility(
    data: pd.DataFrame,
    estimator: Union[str, EstimatorCode],
    bandwidths: Sequence[int] = DEFAULT_BANDWIDTHS,
    quantiles: Sequence[float] = DEFAULT_QUANTILES,
    ticker: Optional[str] = None
) -> VolatilityAnalysis:
    """
    Run a volatility cone analysis for one estimator.

    Args:
        data: Price series
        estimator: Estimator code
        bandwidths: At least two strictly increasing bandwidths
            (default: 30, 60, 90, 120)
        quantiles: Lower and upper quantiles summing to 1 (default: 0.25, 0.75)
        ticker: Ticker symbol used in titles

    Returns:
        VolatilityAnalysis

    Raises:
        InvalidArgument: If any argument is invalid
    """
    code = EstimatorCode.parse(estimator)
    if not isinstance(data, pd.DataFrame):
        raise InvalidArgument(f"Data must be a DataFrame, got {type(data).__name__}")
    bandwidths = validate_bandwidths(bandwidths, len(data))
    quantiles = validate_quantiles(quantiles)

    logger.info(f"Analyzing {code.description} volatility for bandwidths {list(bandwidths)}")

    volatilities = pd.DataFrame(
        {bw: estimate_volatility(data, code, bw, compact=False) for bw in bandwidths},
        index=data.index
    )

    cones = calculate_cones(volatilities, quantiles)
    realized = volatilities[bandwidths[0]]
    curves = calculate_curves(realized, bandwidths[0], quantiles)
    distribution = calculate_distribution(realized)

    axis_max = float(np.ceil(cones['max'].max() * 100) / 100)
    axis_min = float(np.floor(cones['min'].min() * 100) / 100)

    return VolatilityAnalysis(
        estimator=code,
        ticker=ticker,
        bandwidths=bandwidths,
        quantiles=quantiles,
        dates=data['date'],
        volatilities=volatilities,
        cones=cones,
        curves=curves,
        distribution=distribution,
        axis_min=axis_min,
        axis_max=axis_max,
        title=make_title(code, ticker, data['date']),
    )
