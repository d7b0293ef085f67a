"""
Unit tests for estimator comparison.
"""

import numpy as np
import pandas as pd
import pytest

from histvol.analysis import (
    DEFAULT_ESTIMATORS,
    calculate_correlation_matrix,
    calculate_efficiency,
    calculate_regressions,
    compare_estimators,
    fit_regression,
    generate_comparison_statistics,
    run_all_estimators,
)
from histvol.utils import InvalidArgument


@pytest.fixture
def volatility_df():
    np.random.seed(42)
    base = 0.2 + 0.05 * np.random.rand(200)
    return pd.DataFrame({
        'CC': base,
        'GK': base * 0.9 + 0.01 * np.random.rand(200),
        'P': 0.5 * base,
    })


class TestRunAllEstimators:
    """Tests for run_all_estimators function."""

    def test_columns_and_alignment(self, price_series):
        """Test one full-length column per estimator."""
        results = run_all_estimators(price_series, bandwidth=20)

        assert list(results.columns) == [code.value for code in DEFAULT_ESTIMATORS]
        assert len(results) == len(price_series)
        assert results.iloc[:19].isna().all().all()

    def test_subset(self, price_series):
        """Test a custom list of estimators."""
        results = run_all_estimators(price_series, bandwidth=20, estimators=['p', 'RS'])
        assert list(results.columns) == ['P', 'RS']


class TestCorrelationMatrix:
    """Tests for calculate_correlation_matrix function."""

    def test_symmetric_with_unit_diagonal(self, volatility_df):
        """Test the shape of the correlation matrix."""
        rho, p_values = calculate_correlation_matrix(volatility_df)

        assert list(rho.columns) == ['CC', 'GK', 'P']
        np.testing.assert_allclose(np.diag(rho), 1.0)
        np.testing.assert_allclose(rho.to_numpy(), rho.to_numpy().T)
        np.testing.assert_allclose(p_values.to_numpy(), p_values.to_numpy().T)

    def test_proportional_series(self, volatility_df):
        """Test perfect correlation of scaled series."""
        rho, p_values = calculate_correlation_matrix(volatility_df)

        assert rho.loc['CC', 'P'] == pytest.approx(1.0)
        assert p_values.loc['CC', 'P'] < 0.05
        assert 0 < rho.loc['CC', 'GK'] < 1


class TestEfficiency:
    """Tests for calculate_efficiency function."""

    def test_variance_ratio(self, volatility_df):
        """Test benchmark variance over estimator variance."""
        efficiency = calculate_efficiency(volatility_df)

        assert efficiency['CC'] == 1.0
        assert efficiency['P'] == pytest.approx(4.0)
        expected = volatility_df['CC'].var() / volatility_df['GK'].var()
        assert efficiency['GK'] == pytest.approx(expected)
        assert efficiency.idxmax() == 'P'


class TestFitRegression:
    """Tests for fit_regression function."""

    def test_exact_line(self):
        """Test a noiseless linear relation."""
        x = np.linspace(0.1, 0.5, 20)
        result = fit_regression(x, 2 + 3 * x)

        assert result.intercept == pytest.approx(2.0)
        assert result.slope == pytest.approx(3.0)
        assert result.adjusted_r2 == pytest.approx(1.0)
        np.testing.assert_allclose(result.lower, result.fitted, atol=1e-9)
        np.testing.assert_allclose(result.upper, result.fitted, atol=1e-9)

    def test_confidence_bounds(self):
        """Test that bounds bracket the fit and widen away from the mean."""
        np.random.seed(0)
        x = np.linspace(0, 1, 50)
        y = 1 + 2 * x + 0.1 * np.random.randn(50)
        result = fit_regression(x, y)

        assert (result.lower < result.fitted).all()
        assert (result.upper > result.fitted).all()
        width = result.upper - result.lower
        assert width[0] > width[25]
        assert 0 < result.adjusted_r2 < 1

    def test_too_few_points(self):
        """Test error handling for fewer than 3 observations."""
        with pytest.raises(InvalidArgument, match="At least 3"):
            fit_regression([1.0, 2.0], [1.0, 2.0])

    def test_constant_regressor(self):
        """Test error handling for a regressor without variance."""
        with pytest.raises(InvalidArgument, match="zero variance"):
            fit_regression([1.0, 1.0, 1.0], [1.0, 2.0, 3.0])


class TestRegressions:
    """Tests for calculate_regressions function."""

    def test_benchmark_on_each(self, volatility_df):
        """Test one regression of the benchmark per estimator."""
        regressions = calculate_regressions(volatility_df)

        assert list(regressions) == ['CC', 'GK', 'P']
        assert regressions['CC'].slope == pytest.approx(1.0)
        assert regressions['CC'].intercept == pytest.approx(0.0, abs=1e-12)
        assert regressions['P'].slope == pytest.approx(2.0)


class TestComparisonStatistics:
    """Tests for generate_comparison_statistics function."""

    def test_statistics(self, volatility_df):
        """Test summary statistics for each estimator."""
        stats = generate_comparison_statistics(volatility_df)

        assert set(stats) == {'CC', 'GK', 'P'}
        assert stats['CC']['count'] == 200
        assert stats['P']['mean'] == pytest.approx(volatility_df['P'].mean())

    def test_empty_column(self):
        """Test an estimator without defined values."""
        stats = generate_comparison_statistics(pd.DataFrame({'CC': [np.nan, np.nan]}))

        assert stats['CC']['count'] == 0
        assert np.isnan(stats['CC']['mean'])


class TestCompareEstimators:
    """Tests for compare_estimators function."""

    def test_comparison(self, price_series):
        """Test a complete comparison."""
        comparison = compare_estimators(price_series, bandwidth=30, ticker='JPM')

        codes = [code.value for code in DEFAULT_ESTIMATORS]
        assert list(comparison.volatilities.columns) == codes
        assert not comparison.clean.isna().any().any()
        assert len(comparison.clean) == len(price_series) - 30
        assert list(comparison.correlations.index) == codes
        assert comparison.efficiency['CC'] == 1.0
        assert comparison.most_efficient in codes
        assert list(comparison.regressions) == codes
        assert comparison.title == 'Estimators (JPM, 2015-2016)'

    def test_measures_use_complete_rows(self, price_series):
        """Test that every measure is computed on the rows without gaps."""
        comparison = compare_estimators(price_series, bandwidth=30, estimators=['CC', 'P', 'YZ'])

        pd.testing.assert_series_equal(comparison.efficiency, calculate_efficiency(comparison.clean))
        rho, _ = calculate_correlation_matrix(comparison.clean)
        pd.testing.assert_frame_equal(comparison.correlations, rho)
        assert comparison.statistics['P']['count'] == len(comparison.clean)

    def test_single_estimator(self, price_series):
        """Test that a comparison needs two estimators."""
        with pytest.raises(InvalidArgument, match="At least 2"):
            compare_estimators(price_series, estimators=['CC'])

    def test_duplicate_estimators(self, price_series):
        """Test that estimators must be distinct."""
        with pytest.raises(InvalidArgument, match="Duplicate"):
            compare_estimators(price_series, estimators=['CC', 'cc'])

    def test_too_few_rows(self, make_prices):
        """Test error handling when almost every row is missing."""
        with pytest.raises(InvalidArgument, match="complete rows"):
            compare_estimators(make_prices(periods=32), bandwidth=30)
