"""
Command-line interface for the historical volatility toolkit.

Usage:
    histvol analyze --symbol JPM --estimator YZ --bandwidths 30 60 90 120
    histvol compare --symbol JPM --bandwidth 90
    histvol estimate --symbol JPM --estimator CC --bandwidth 30 --compact
    histvol analyze --symbol JPM --xlsx data/Dataset.xlsx
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import matplotlib
import pandas as pd

from histvol.analysis import analyze_volatility, compare_estimators
from histvol.data import get_market_data, parse_dataset
from histvol.estimators import get_estimator, list_estimators
from histvol.utils import (
    ConfigError,
    DataError,
    DatasetCache,
    ValidationError,
    load_config,
    merge_config,
    setup_logging,
)
from histvol.visualization import (
    plot_cones,
    plot_correlations,
    plot_curves,
    plot_distribution,
    plot_efficiency,
    plot_overview,
    plot_regressions,
)

logger = logging.getLogger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--symbol',
        type=str,
        required=True,
        help='Ticker symbol, or sheet name when --xlsx is given (e.g., JPM)'
    )

    parser.add_argument(
        '--xlsx',
        type=str,
        default=None,
        help='Read prices from an Excel workbook instead of downloading them'
    )

    parser.add_argument(
        '--start',
        type=str,
        default=None,
        help='Start date YYYY-MM-DD (default: from config)'
    )

    parser.add_argument(
        '--end',
        type=str,
        default=None,
        help='End date YYYY-MM-DD (default: from config)'
    )

    parser.add_argument(
        '--config',
        type=str,
        default='config.yaml',
        help='Path to config file (default: config.yaml)'
    )

    parser.add_argument(
        '--output_dir',
        type=str,
        default=None,
        help='Output directory for charts (default: from config)'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog='histvol',
        description='Historical volatility estimation, cones and estimator comparison'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    analyze = subparsers.add_parser('analyze', help='Volatility cones, curves and distribution')
    _add_common_arguments(analyze)
    analyze.add_argument(
        '--estimator',
        type=str.upper,
        default=None,
        choices=list_estimators(),
        help='Estimator code (default: from config, or YZ)'
    )
    analyze.add_argument(
        '--bandwidths',
        type=int,
        nargs='+',
        default=None,
        help='Strictly increasing bandwidths (default: from config)'
    )
    analyze.add_argument(
        '--quantiles',
        type=float,
        nargs=2,
        default=None,
        help='Lower and upper quantiles summing to 1 (default: from config)'
    )

    compare = subparsers.add_parser('compare', help='Compare all estimators')
    _add_common_arguments(compare)
    compare.add_argument(
        '--bandwidth',
        type=int,
        default=None,
        help='Rolling window size in trading days (default: from config)'
    )

    estimate = subparsers.add_parser('estimate', help='Estimate one volatility series')
    _add_common_arguments(estimate)
    estimate.add_argument(
        '--estimator',
        type=str.upper,
        default=None,
        choices=list_estimators(),
        help='Estimator code (default: from config, or YZ)'
    )
    estimate.add_argument(
        '--bandwidth',
        type=int,
        default=None,
        help='Rolling window size in trading days (default: from config)'
    )
    estimate.add_argument(
        '--compact',
        action='store_true',
        help='Drop the leading positions without a complete window'
    )

    return parser


def load_settings(config_path: str) -> dict:
    """
    Load the configuration file merged over the defaults.

    A missing file falls back to the defaults; a malformed one raises.
    """
    if not Path(config_path).exists():
        logger.warning(f"Config file not found at {config_path}, using defaults")
        return merge_config({})
    return merge_config(load_config(config_path))


def load_data(args: argparse.Namespace, config: dict) -> pd.DataFrame:
    """
    Load the price series of ``args.symbol`` from a workbook or the market.

    Raises:
        DataError: If the symbol is not in the workbook or cannot be fetched
    """
    data_config = config['data']

    if args.xlsx:
        logger.info(f"Parsing dataset {args.xlsx}...")
        tickers, data = parse_dataset(args.xlsx, data_config['date_format'])
        if args.symbol not in tickers:
            raise DataError(f"Sheet '{args.symbol}' not found, available sheets: {tickers}")
        df = data[tickers.index(args.symbol)]
    else:
        start_date = args.start or data_config['start_date']
        end_date = args.end or data_config['end_date']
        logger.info(f"Loading market data for {args.symbol} from {start_date} to {end_date}...")
        df = get_market_data(
            symbol=args.symbol,
            start_date=start_date,
            end_date=end_date,
            use_cache=True,
            cache_dir=data_config['cache_dir'],
            cache_format=data_config['cache_format'],
            retry_attempts=data_config['retry_attempts'],
            rate_limit_delay=data_config['rate_limit_delay'],
            memory_cache=DatasetCache(data_config['cache_capacity'])
        )

    if args.xlsx and (args.start or args.end):
        dates = pd.to_datetime(df['date'])
        mask = pd.Series(True, index=df.index)
        if args.start:
            mask &= dates >= pd.Timestamp(args.start)
        if args.end:
            mask &= dates <= pd.Timestamp(args.end)
        df = df[mask].reset_index(drop=True)

    logger.info(f"Data loaded successfully: {len(df)} rows")
    return df


def run_analyze(args: argparse.Namespace, config: dict, df: pd.DataFrame) -> List[Path]:
    """Run the cone analysis, print its summary and save its charts."""
    vol_config = config['volatility']
    estimator = args.estimator or vol_config['default_estimator']
    bandwidths = args.bandwidths or vol_config['bandwidths']
    quantiles = args.quantiles or vol_config['quantiles']

    analysis = analyze_volatility(df, estimator, bandwidths, quantiles, ticker=args.symbol)

    print("\n" + "="*70)
    print(f"Volatility Cones: {analysis.title}")
    print("="*70)
    print(f"Estimator: {analysis.estimator.value} ({analysis.estimator.description})")
    print(f"Bandwidths: {list(analysis.bandwidths)}")
    print(f"Quantiles: {list(analysis.quantiles)}")
    print("\n" + "-"*70)
    print("Cone Statistics (Annualized %):")
    print("-"*70)
    print((analysis.cones * 100).round(2))
    print("="*70)

    output_dir = Path(args.output_dir or config['output']['charts_dir'])
    dpi = config['output']['dpi']
    prefix = f"{args.symbol}_{analysis.estimator.value}"
    return [
        plot_cones(analysis, output_dir / f"{prefix}_cones.png", dpi),
        plot_curves(analysis, output_dir / f"{prefix}_curves.png", dpi),
        plot_distribution(analysis, output_dir / f"{prefix}_distribution.png", dpi),
    ]


def run_compare(args: argparse.Namespace, config: dict, df: pd.DataFrame) -> List[Path]:
    """Run the estimator comparison, print its summary and save its charts."""
    bandwidth = args.bandwidth or config['volatility']['comparison_bandwidth']

    comparison = compare_estimators(df, bandwidth, ticker=args.symbol)

    print("\n" + "="*70)
    print(f"Volatility Estimator Comparison: {comparison.title}")
    print("="*70)
    print(f"Bandwidth: {comparison.bandwidth} days")
    print(f"Complete Estimates: {len(comparison.clean)}")

    print("\n" + "-"*70)
    print("Summary Statistics (Annualized %):")
    print("-"*70)
    print(f"{'Estimator':<10} {'Mean':>10} {'Std':>10} {'Min':>10} {'Max':>10} {'Efficiency':>12}")
    print("-"*70)
    for est_name, est_stats in comparison.statistics.items():
        print(f"{est_name:<10} {est_stats['mean'] * 100:>10.2f} {est_stats['std'] * 100:>10.2f} "
              f"{est_stats['min'] * 100:>10.2f} {est_stats['max'] * 100:>10.2f} "
              f"{comparison.efficiency[est_name]:>12.4f}")
    print(f"\nMost Efficient: {comparison.most_efficient}")

    print("\n" + "-"*70)
    print("Correlation Matrix:")
    print("-"*70)
    print(comparison.correlations.round(4))
    print("="*70)

    output_dir = Path(args.output_dir or config['output']['charts_dir'])
    dpi = config['output']['dpi']
    prefix = f"{args.symbol}_estimators_{comparison.bandwidth}"
    return [
        plot_overview(comparison, output_dir / f"{prefix}_overview.png", dpi),
        plot_correlations(comparison, output_dir / f"{prefix}_correlations.png", dpi),
        plot_efficiency(comparison, output_dir / f"{prefix}_efficiency.png", dpi),
        plot_regressions(comparison, output_dir / f"{prefix}_regressions.png", dpi),
    ]


def run_estimate(args: argparse.Namespace, config: dict, df: pd.DataFrame) -> pd.Series:
    """Estimate one volatility series and print its summary statistics."""
    vol_config = config['volatility']
    estimator = args.estimator or vol_config['default_estimator']
    bandwidth = args.bandwidth or vol_config['comparison_bandwidth']

    instance = get_estimator(estimator, bandwidth, vol_config['annualization_factor'])
    volatility = instance.compute(df, compact=args.compact)
    valid = volatility.dropna()

    print("\n" + "="*60)
    print(f"Volatility Estimation Results: {args.symbol}")
    print("="*60)
    print(f"Estimator: {estimator}")
    print(f"Bandwidth: {bandwidth} days")
    print(f"Total Positions: {len(volatility)}")
    print(f"Defined Estimates: {len(valid)}")
    if len(valid) > 0:
        print("\nSummary Statistics (Annualized %):")
        print(f"  Mean:   {valid.mean() * 100:.2f}%")
        print(f"  Std:    {valid.std() * 100:.2f}%")
        print(f"  Min:    {valid.min() * 100:.2f}%")
        print(f"  Max:    {valid.max() * 100:.2f}%")
        print(f"  Latest: {volatility.iloc[-1] * 100:.2f}%")
    print("="*60)

    return volatility


COMMANDS = {
    'analyze': run_analyze,
    'compare': run_compare,
    'estimate': run_estimate,
}


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    # Charts are only written to files
    matplotlib.use('Agg')

    try:
        config = load_settings(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    # Set up logging
    log_config = config['logging']
    log_level = 'DEBUG' if args.verbose else log_config['level']
    setup_logging(
        log_file=log_config['file'],
        log_level=log_level,
        console=log_config['console']
    )

    logger.info(f"Starting '{args.command}' for {args.symbol}")

    try:
        df = load_data(args, config)
        result = COMMANDS[args.command](args, config, df)
    except (DataError, ValidationError) as e:
        logger.error(f"Failed to run '{args.command}': {e}")
        sys.exit(1)

    if isinstance(result, list):
        for chart in result:
            logger.info(f"Chart saved to {chart}")


if __name__ == '__main__':
    main()
