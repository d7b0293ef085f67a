"""
Chart generation for volatility analysis.

Each function renders one figure with matplotlib, saves it as an image and
returns the path of the saved file.
"""

import math
from pathlib import Path
from typing import Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.ticker import PercentFormatter

from histvol.analysis.comparison import SIGNIFICANCE_LEVEL, EstimatorComparison
from histvol.analysis.cones import VolatilityAnalysis
from histvol.utils import ensure_directory

# Line styles of the cone/curve statistics
STAT_STYLES = [
    ('max', 'r', 'Maximum'),
    ('high', 'b', None),
    ('median', 'g', 'Median'),
    ('low', 'c', None),
    ('min', 'k', 'Minimum'),
]

BAR_COLOR = '#ADEBFF'
HIGHLIGHT_COLOR = '#FF0000'
GRID_COLUMNS = 4


def _x_values(dates: pd.Series):
    if pd.api.types.is_numeric_dtype(dates):
        return np.asarray(dates)
    return pd.to_datetime(pd.Series(dates)).to_numpy()


def _stat_label(key: str, label: str, quantiles) -> str:
    if label is not None:
        return label
    q = quantiles[1] if key == 'high' else quantiles[0]
    return f"{q * 100:.0f} Percentile"


def _save(fig, output_path: Union[str, Path], dpi: int) -> Path:
    output_file = Path(output_path)
    ensure_directory(output_file.parent)
    fig.savefig(output_file, dpi=dpi, bbox_inches='tight')
    plt.close(fig)
    return output_file


def _grid(count: int):
    rows = max(1, math.ceil(count / GRID_COLUMNS))
    cols = min(count, GRID_COLUMNS)
    fig, axes = plt.subplots(rows, cols, figsize=(4 * cols, 3.5 * rows), squeeze=False)
    flat = axes.ravel()
    for ax in flat[count:]:
        ax.set_visible(False)
    return fig, flat[:count]


def plot_cones(
    analysis: VolatilityAnalysis,
    output_path: Union[str, Path] = './outputs/charts/volatility_cones.png',
    dpi: int = 150
) -> Path:
    """
    Plot volatility cones across bandwidths with a box plot per bandwidth.

    Args:
        analysis: Result of analyze_volatility
        output_path: Path to save chart
        dpi: Image resolution

    Returns:
        Path to saved chart
    """
    bandwidths = list(analysis.bandwidths)
    cones = analysis.cones

    fig = plt.figure(figsize=(14, 7))
    grid = fig.add_gridspec(1, 3)
    ax_lines = fig.add_subplot(grid[0, :2])
    ax_box = fig.add_subplot(grid[0, 2])

    for key, color, label in STAT_STYLES:
        ax_lines.plot(bandwidths, cones[key].to_numpy(), f'-{color}',
                      label=_stat_label(key, label, analysis.quantiles))
    ax_lines.plot(bandwidths, cones['end'].to_numpy(), '--m', label='Realized')

    ax_lines.set_xlabel('Bandwidth', fontsize=12, fontweight='bold')
    ax_lines.set_ylabel('Volatility', fontsize=12, fontweight='bold')
    ax_lines.set_xlim(min(bandwidths), max(bandwidths))
    ax_lines.set_xticks(bandwidths)
    ax_lines.grid(True, alpha=0.3)
    ax_lines.legend(loc='best', fontsize=9)

    samples = [analysis.volatilities[bw].dropna().to_numpy() for bw in bandwidths]
    positions = np.arange(1, len(bandwidths) + 1)
    ax_box.boxplot(samples, positions=positions, notch=True, sym='k.',
                   medianprops={'color': 'g'})
    ax_box.plot(positions, cones['end'].to_numpy(), '-m', marker='*', markeredgecolor='k')
    ax_box.set_xticks(positions)
    ax_box.set_xticklabels([str(bw) for bw in bandwidths])
    ax_box.yaxis.tick_right()

    for ax in (ax_lines, ax_box):
        ax.set_ylim(analysis.axis_min, analysis.axis_max)
        ax.yaxis.set_major_formatter(PercentFormatter(xmax=1, decimals=0))

    fig.suptitle(f"{analysis.title} > Volatility Cones", fontsize=14, fontweight='bold')
    return _save(fig, output_path, dpi)


def plot_curves(
    analysis: VolatilityAnalysis,
    output_path: Union[str, Path] = './outputs/charts/volatility_curves.png',
    dpi: int = 150
) -> Path:
    """
    Plot rolling percentile curves of the shortest bandwidth over time.

    Args:
        analysis: Result of analyze_volatility
        output_path: Path to save chart
        dpi: Image resolution

    Returns:
        Path to saved chart
    """
    curves = analysis.curves
    x = _x_values(analysis.dates)

    fig = plt.figure(figsize=(14, 7))
    grid = fig.add_gridspec(1, 5)
    ax_lines = fig.add_subplot(grid[0, :4])
    ax_box = fig.add_subplot(grid[0, 4])

    for key, color, label in STAT_STYLES:
        ax_lines.plot(x, curves[key].to_numpy(), f':{color}',
                      label=_stat_label(key, label, analysis.quantiles))
    ax_lines.plot(x, curves['realized'].to_numpy(), '-m', label='Realized')

    ax_lines.set_xlabel('Time', fontsize=12, fontweight='bold')
    ax_lines.set_ylabel('Volatility', fontsize=12, fontweight='bold')
    ax_lines.tick_params(axis='x', rotation=45)
    ax_lines.grid(True, alpha=0.3)
    ax_lines.legend(loc='best', fontsize=9)

    ax_box.boxplot([analysis.realized.dropna().to_numpy()], notch=True, sym='k.',
                   medianprops={'color': 'g'})
    ax_box.plot([1], [analysis.realized_end], 'm', marker='*', markeredgecolor='k')
    ax_box.set_xticks([])
    ax_box.yaxis.tick_right()

    for ax in (ax_lines, ax_box):
        ax.set_ylim(analysis.axis_min, analysis.axis_max)
        ax.yaxis.set_major_formatter(PercentFormatter(xmax=1, decimals=0))

    fig.suptitle(f"{analysis.title} > Volatility Curves", fontsize=14, fontweight='bold')
    return _save(fig, output_path, dpi)


def plot_distribution(
    analysis: VolatilityAnalysis,
    output_path: Union[str, Path] = './outputs/charts/volatility_distribution.png',
    dpi: int = 150
) -> Path:
    """
    Plot the density histogram of the shortest bandwidth with a normal fit.

    Args:
        analysis: Result of analyze_volatility
        output_path: Path to save chart
        dpi: Image resolution

    Returns:
        Path to saved chart
    """
    dist = analysis.distribution

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.stairs(dist.density, dist.edges, fill=True, facecolor='#BFDCEE', edgecolor='#7FAFCF')
    ax.plot(dist.edges, dist.normal_pdf, color='#0072BD', label='Normal Fit')
    ax.axvline(x=analysis.realized_end, color='#FF6666', label='Realized')

    ax.xaxis.set_major_formatter(PercentFormatter(xmax=1, decimals=0))
    ax.grid(True, axis='y', alpha=0.3)
    ax.legend(loc='upper right', fontsize=9)
    ax.set_title(f"{analysis.title} > Volatility Distribution", fontsize=14, fontweight='bold')

    plt.tight_layout()
    return _save(fig, output_path, dpi)


def plot_overview(
    comparison: EstimatorComparison,
    output_path: Union[str, Path] = './outputs/charts/estimators_overview.png',
    dpi: int = 150
) -> Path:
    """
    Plot each estimator's series on a shared scale.

    Args:
        comparison: Result of compare_estimators
        output_path: Path to save chart
        dpi: Image resolution

    Returns:
        Path to saved chart
    """
    volatilities = comparison.volatilities
    x = _x_values(comparison.dates)
    y_max = math.ceil(np.nanmax(volatilities.to_numpy()) * 100) / 100
    y_min = math.floor(np.nanmin(volatilities.to_numpy()) * 100) / 100

    fig, axes = _grid(len(volatilities.columns))
    for ax, col in zip(axes, volatilities.columns):
        ax.plot(x, volatilities[col].to_numpy(), linewidth=1)
        ax.set_title(col, fontweight='bold')
        ax.set_xticks([])
        ax.set_ylim(y_min, y_max)
        ax.yaxis.set_major_formatter(PercentFormatter(xmax=1, decimals=0))
        ax.grid(True, alpha=0.3)

    fig.suptitle(f"{comparison.title} > Overview", fontsize=14, fontweight='bold')
    plt.tight_layout()
    return _save(fig, output_path, dpi)


def plot_correlations(
    comparison: EstimatorComparison,
    output_path: Union[str, Path] = './outputs/charts/estimators_correlations.png',
    dpi: int = 150
) -> Path:
    """
    Plot the scatter matrix of estimators with least squares lines.

    Correlations significant at the 5% level are annotated in red.

    Args:
        comparison: Result of compare_estimators
        output_path: Path to save chart
        dpi: Image resolution

    Returns:
        Path to saved chart
    """
    clean = comparison.clean
    columns = list(clean.columns)
    n = len(columns)

    fig, axes = plt.subplots(n, n, figsize=(2 * n, 2 * n), squeeze=False)
    for i, row_name in enumerate(columns):
        for j, col_name in enumerate(columns):
            ax = axes[i, j]
            x = clean[col_name].to_numpy()
            y = clean[row_name].to_numpy()

            if i == j:
                ax.hist(x, bins=20, color=BAR_COLOR, edgecolor='k', linewidth=0.3)
            else:
                ax.plot(x, y, 'o', markersize=2)
                slope, intercept = np.polyfit(x, y, 1)
                line_x = np.array([x.min(), x.max()])
                ax.plot(line_x, intercept + slope * line_x, 'r-', linewidth=1)

                rho = comparison.correlations.loc[row_name, col_name]
                p_value = comparison.p_values.loc[row_name, col_name]
                color = 'r' if p_value < SIGNIFICANCE_LEVEL else 'k'
                ax.text(0.05, 0.85, f"{rho:0.2f}", transform=ax.transAxes,
                        color=color, fontweight='bold')

            ax.set_xticks([])
            ax.set_yticks([])
            if i == n - 1:
                ax.set_xlabel(col_name, fontweight='bold')
            if j == 0:
                ax.set_ylabel(row_name, fontweight='bold')

    fig.suptitle(f"{comparison.title} > Correlation Matrix", fontsize=14, fontweight='bold')
    return _save(fig, output_path, dpi)


def plot_efficiency(
    comparison: EstimatorComparison,
    output_path: Union[str, Path] = './outputs/charts/estimators_efficiency.png',
    dpi: int = 150
) -> Path:
    """
    Plot relative efficiencies, highlighting the most efficient estimator.

    Args:
        comparison: Result of compare_estimators
        output_path: Path to save chart
        dpi: Image resolution

    Returns:
        Path to saved chart
    """
    efficiency = comparison.efficiency
    best = comparison.most_efficient
    colors = [HIGHLIGHT_COLOR if name == best else BAR_COLOR for name in efficiency.index]

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.bar(efficiency.index.tolist(), efficiency.to_numpy(), color=colors, edgecolor='k')
    ax.set_ylabel('Efficiency', fontsize=12, fontweight='bold')
    ax.grid(True, axis='y', alpha=0.3)
    ax.set_title(f"{comparison.title} > Efficiency", fontsize=14, fontweight='bold')

    plt.tight_layout()
    return _save(fig, output_path, dpi)


def plot_regressions(
    comparison: EstimatorComparison,
    output_path: Union[str, Path] = './outputs/charts/estimators_regressions.png',
    dpi: int = 150
) -> Path:
    """
    Plot the OLS fit of the benchmark on each estimator with 95% bounds.

    Args:
        comparison: Result of compare_estimators
        output_path: Path to save chart
        dpi: Image resolution

    Returns:
        Path to saved chart
    """
    regressions = comparison.regressions
    fig, axes = _grid(len(regressions))

    for i, (ax, (name, result)) in enumerate(zip(axes, regressions.items())):
        order = np.argsort(result.x)
        x = result.x[order]

        band = ax.fill_between(x, result.lower[order], result.upper[order],
                               color='c', alpha=0.5, linewidth=0)
        line, = ax.plot(x, result.fitted[order], '-b')

        ax.text(0.03, 0.97,
                f"a: {result.intercept:.4f}\nb: {result.slope:.4f}\nAdj. R²: {result.adjusted_r2:.4f}",
                transform=ax.transAxes, fontsize=7, verticalalignment='top')
        ax.set_title(name, fontweight='bold')
        ax.grid(True, alpha=0.3)

        if i == 0:
            ax.legend([line, band], ['OLS Estimation', '95% Confidence Bounds'],
                      loc='lower right', fontsize=7)

    fig.suptitle(f"{comparison.title} > Regressions", fontsize=14, fontweight='bold')
    plt.tight_layout()
    return _save(fig, output_path, dpi)
