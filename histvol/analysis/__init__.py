"""
Analysis module for volatility estimation and comparison.

Includes:
- Volatility cones, rolling percentile curves and distributions
- Multi-estimator comparison (correlation, efficiency, regressions)
"""

from histvol.analysis.cones import (
    VolatilityAnalysis,
    VolatilityDistribution,
    analyze_volatility,
    calculate_cones,
    calculate_curves,
    calculate_distribution,
    validate_bandwidths,
    validate_quantiles,
)
from histvol.analysis.comparison import (
    DEFAULT_ESTIMATORS,
    EstimatorComparison,
    RegressionResult,
    calculate_correlation_matrix,
    calculate_efficiency,
    calculate_regressions,
    compare_estimators,
    fit_regression,
    generate_comparison_statistics,
    run_all_estimators,
)

__all__ = [
    # Cones
    'VolatilityAnalysis',
    'VolatilityDistribution',
    'analyze_volatility',
    'calculate_cones',
    'calculate_curves',
    'calculate_distribution',
    'validate_bandwidths',
    'validate_quantiles',
    # Comparison
    'DEFAULT_ESTIMATORS',
    'EstimatorComparison',
    'RegressionResult',
    'calculate_correlation_matrix',
    'calculate_efficiency',
    'calculate_regressions',
    'compare_estimators',
    'fit_regression',
    'generate_comparison_statistics',
    'run_all_estimators',
]
