"""
Visualization module for volatility analysis.

Includes:
- Volatility cones, curves and distribution charts
- Estimator comparison charts (overview, correlations, efficiency, regressions)
"""

from histvol.visualization.charts import (
    plot_cones,
    plot_correlations,
    plot_curves,
    plot_distribution,
    plot_efficiency,
    plot_overview,
    plot_regressions,
)

__all__ = [
    # Single estimator analysis
    'plot_cones',
    'plot_curves',
    'plot_distribution',
    # Estimator comparison
    'plot_correlations',
    'plot_efficiency',
    'plot_overview',
    'plot_regressions',
]
