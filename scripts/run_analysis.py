#!/usr/bin/env python3
"""Reference analysis: JPM 2010-2017 cones (Yang-Zhang) and estimator comparison."""

import argparse
from pathlib import Path

import matplotlib

from histvol.analysis import analyze_volatility, compare_estimators
from histvol.data import get_market_data
from histvol.utils import setup_logging
from histvol.visualization import (
    plot_cones,
    plot_correlations,
    plot_curves,
    plot_distribution,
    plot_efficiency,
    plot_overview,
    plot_regressions,
)


def main():
    parser = argparse.ArgumentParser(description='Run the reference volatility analysis')
    parser.add_argument('--symbol', default='JPM')
    parser.add_argument('--start', default='2010-01-01')
    parser.add_argument('--end', default='2017-12-31')
    parser.add_argument('--estimator', default='YZ')
    parser.add_argument('--bandwidth', type=int, default=90)
    parser.add_argument('--output_dir', default='./outputs/charts')
    args = parser.parse_args()
    matplotlib.use('Agg')

    logger = setup_logging()
    output_dir = Path(args.output_dir)

    df = get_market_data(args.symbol, args.start, args.end)
    logger.info(f"{args.symbol}: {len(df)} observations")

    analysis = analyze_volatility(df, args.estimator, ticker=args.symbol)
    for plot, name in ((plot_cones, 'cones'), (plot_curves, 'curves'),
                       (plot_distribution, 'distribution')):
        path = plot(analysis, output_dir / f"{args.symbol}_{analysis.estimator.value}_{name}.png")
        print(f"✓ {path}")

    comparison = compare_estimators(df, args.bandwidth, ticker=args.symbol)
    for plot, name in ((plot_overview, 'overview'), (plot_correlations, 'correlations'),
                       (plot_efficiency, 'efficiency'), (plot_regressions, 'regressions')):
        path = plot(comparison, output_dir / f"{args.symbol}_estimators_{args.bandwidth}_{name}.png")
        print(f"✓ {path}")

    print(f"\nMost efficient estimator at bandwidth {args.bandwidth}: {comparison.most_efficient}")


if __name__ == '__main__':
    main()
