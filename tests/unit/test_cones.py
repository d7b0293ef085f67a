"""
Unit tests for volatility cone analysis.
"""

import numpy as np
import pandas as pd
import pytest

from histvol.analysis import (
    analyze_volatility,
    calculate_cones,
    calculate_curves,
    calculate_distribution,
    validate_bandwidths,
    validate_quantiles,
)
from histvol.analysis.cones import make_title
from histvol.estimators import EstimatorCode, estimate_volatility
from histvol.utils import InvalidArgument


class TestValidateBandwidths:
    """Tests for validate_bandwidths function."""

    def test_valid(self):
        """Test accepted bandwidths."""
        assert validate_bandwidths([30, 60, 90], 300) == (30, 60, 90)

    def test_single_bandwidth(self):
        """Test that cones need at least two bandwidths."""
        with pytest.raises(InvalidArgument, match="at least 2"):
            validate_bandwidths([30], 300)

    @pytest.mark.parametrize('bandwidths', [[60, 30], [30, 30, 60]])
    def test_not_increasing(self, bandwidths):
        """Test that bandwidths must be strictly increasing."""
        with pytest.raises(InvalidArgument, match="strictly increasing"):
            validate_bandwidths(bandwidths, 300)

    def test_last_too_large(self):
        """Test that the last bandwidth must be below the number of rows."""
        with pytest.raises(InvalidArgument, match="less than the number of observations"):
            validate_bandwidths([30, 100], 100)

    def test_out_of_range(self):
        """Test the per-bandwidth bounds."""
        with pytest.raises(InvalidArgument, match="between 2 and 252"):
            validate_bandwidths([1, 30], 300)


class TestValidateQuantiles:
    """Tests for validate_quantiles function."""

    @pytest.mark.parametrize('quantiles', [(0.25, 0.75), [0.1, 0.9], (0.3, 0.7)])
    def test_valid(self, quantiles):
        """Test accepted quantiles."""
        assert validate_quantiles(quantiles) == tuple(quantiles)

    def test_wrong_count(self):
        """Test that exactly two quantiles are required."""
        with pytest.raises(InvalidArgument, match="Expected 2 quantiles"):
            validate_quantiles([0.25, 0.5, 0.75])

    def test_not_summing_to_one(self):
        """Test that quantiles must be symmetric."""
        with pytest.raises(InvalidArgument, match="sum to 1"):
            validate_quantiles([0.2, 0.7])

    @pytest.mark.parametrize('quantiles', [(0.75, 0.25), (0.0, 1.0), (0.5, 0.5)])
    def test_bad_order_or_range(self, quantiles):
        """Test quantiles outside (0, 1) or not increasing."""
        with pytest.raises(InvalidArgument, match="increasing values"):
            validate_quantiles(quantiles)


class TestCalculateCones:
    """Tests for calculate_cones function."""

    def test_statistics(self):
        """Test cone statistics with midpoint quantiles."""
        volatilities = pd.DataFrame({2: [np.nan, 1.0, 2.0, 3.0, 4.0]})
        cones = calculate_cones(volatilities, (0.25, 0.75))

        row = cones.loc[2]
        assert row['max'] == 4.0
        assert row['high'] == pytest.approx(3.5)
        assert row['median'] == pytest.approx(2.5)
        assert row['low'] == pytest.approx(1.5)
        assert row['min'] == 1.0
        assert row['end'] == 4.0

    def test_layout(self, price_series):
        """Test index and column layout."""
        volatilities = pd.DataFrame({
            bw: estimate_volatility(price_series, 'P', bw, compact=False)
            for bw in (20, 40)
        })
        cones = calculate_cones(volatilities)

        assert list(cones.index) == [20, 40]
        assert cones.index.name == 'bandwidth'
        assert list(cones.columns) == ['max', 'high', 'median', 'low', 'min', 'end']
        assert (cones['max'] >= cones['high']).all()
        assert (cones['high'] >= cones['median']).all()
        assert (cones['median'] >= cones['low']).all()
        assert (cones['low'] >= cones['min']).all()


class TestCalculateCurves:
    """Tests for calculate_curves function."""

    def test_padding_and_realized(self, price_series):
        """Test left padding and the realized column."""
        bw = 20
        volatility = estimate_volatility(price_series, 'P', bw, compact=False)
        curves = calculate_curves(volatility, bw)

        assert len(curves) == len(volatility)
        assert list(curves.columns) == ['max', 'high', 'median', 'low', 'min', 'realized']
        assert curves[['max', 'median', 'min']].iloc[:bw - 1].isna().all().all()
        assert curves['max'].iloc[bw - 1:].notna().all()
        pd.testing.assert_series_equal(curves['realized'], volatility, check_names=False)

    def test_rolling_statistics(self, price_series):
        """Test that each row summarises the trailing window of estimates."""
        bw = 20
        volatility = estimate_volatility(price_series, 'RS', bw, compact=False)
        curves = calculate_curves(volatility, bw)

        window = volatility.iloc[-bw:]
        assert curves['max'].iloc[-1] == pytest.approx(window.max())
        assert curves['min'].iloc[-1] == pytest.approx(window.min())
        assert curves['median'].iloc[-1] == pytest.approx(window.median())


class TestCalculateDistribution:
    """Tests for calculate_distribution function."""

    def test_histogram(self, price_series):
        """Test the density histogram and normal fit."""
        volatility = estimate_volatility(price_series, 'GK', 20, compact=False)
        dist = calculate_distribution(volatility)

        assert len(dist.density) == 100
        assert len(dist.edges) == 101
        assert len(dist.normal_pdf) == 101
        assert np.sum(dist.density * np.diff(dist.edges)) == pytest.approx(1.0)
        assert dist.mean == pytest.approx(volatility.mean())
        assert dist.std == pytest.approx(volatility.std())

    def test_too_few_values(self):
        """Test error handling for series without enough estimates."""
        with pytest.raises(InvalidArgument, match="At least 2"):
            calculate_distribution(pd.Series([np.nan, 0.2]))


class TestMakeTitle:
    """Tests for make_title function."""

    def test_years(self, price_series):
        """Test the year span of calendar dates."""
        assert make_title(EstimatorCode.YZ, 'JPM', price_series['date']) == 'YZ (JPM, 2015-2016)'

    def test_single_year(self, price_series):
        """Test a range within one year."""
        assert make_title('P', 'JPM', price_series['date'].iloc[:50]) == 'P (JPM, 2015)'

    def test_numeric_dates(self):
        """Test that day indices carry no year."""
        dates = pd.Series([1, 2, 3])
        assert make_title('GK', None, dates) == 'GK'
        assert make_title('GK', 'JPM', dates, suffix='Volatility Cones') == 'GK (JPM) > Volatility Cones'


class TestAnalyzeVolatility:
    """Tests for analyze_volatility function."""

    def test_analysis(self, price_series):
        """Test a complete cone analysis."""
        analysis = analyze_volatility(price_series, 'yz', (20, 40, 60), ticker='JPM')

        assert analysis.estimator is EstimatorCode.YZ
        assert analysis.bandwidths == (20, 40, 60)
        assert analysis.quantiles == (0.25, 0.75)
        assert list(analysis.volatilities.columns) == [20, 40, 60]
        assert list(analysis.cones.index) == [20, 40, 60]
        assert len(analysis.curves) == len(price_series)
        assert analysis.title == 'YZ (JPM, 2015-2016)'

    def test_realized(self, price_series):
        """Test the realized series is the shortest bandwidth's."""
        analysis = analyze_volatility(price_series, 'P', (20, 40))
        expected = estimate_volatility(price_series, 'P', 20, compact=False)

        pd.testing.assert_series_equal(analysis.realized, expected, check_names=False)
        assert analysis.realized_end == pytest.approx(expected.iloc[-1])
        assert analysis.cones.loc[20, 'end'] == pytest.approx(expected.iloc[-1])

    def test_axis_bounds(self, price_series):
        """Test plot bounds rounded outward to 0.01."""
        analysis = analyze_volatility(price_series, 'GK', (20, 40))

        assert analysis.axis_max >= analysis.cones['max'].max()
        assert analysis.axis_min <= analysis.cones['min'].min()
        assert analysis.axis_max - analysis.cones['max'].max() < 0.01
        assert round(analysis.axis_max * 100) == pytest.approx(analysis.axis_max * 100)

    def test_invalid_estimator(self, price_series):
        """Test error handling for unknown codes."""
        with pytest.raises(InvalidArgument, match="Unknown estimator"):
            analyze_volatility(price_series, 'XYZ')

    def test_invalid_quantiles(self, price_series):
        """Test error handling for bad quantiles."""
        with pytest.raises(InvalidArgument, match="sum to 1"):
            analyze_volatility(price_series, 'CC', (20, 40), quantiles=(0.1, 0.8))

    def test_bandwidths_too_long(self, make_prices):
        """Test error handling when data is shorter than the last bandwidth."""
        with pytest.raises(InvalidArgument, match="less than the number of observations"):
            analyze_volatility(make_prices(periods=100), 'CC')
