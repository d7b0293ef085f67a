"""
Unit tests for the Excel dataset parser.
"""

import numpy as np
import pandas as pd
import pytest

from histvol.data.parser import parse_dataset, validate_date_format
from histvol.utils import DataError, ValidationError


def sheet(periods: int = 40, seed: int = 0, text_dates: bool = True) -> pd.DataFrame:
    np.random.seed(seed)
    close = 50 * np.exp(np.cumsum(np.random.randn(periods) * 0.01))
    dates = pd.bdate_range('2016-03-01', periods=periods)
    return pd.DataFrame({
        'Date': dates.strftime('%d/%m/%Y') if text_dates else dates,
        'Open': close * 0.99,
        'High': close * 1.02,
        'Low': close * 0.97,
        'Close': close,
    })


def write_workbook(path, sheets: dict):
    with pd.ExcelWriter(path, engine='openpyxl') as writer:
        for name, frame in sheets.items():
            frame.to_excel(writer, sheet_name=name, index=False)
    return path


class TestParseDataset:
    """Tests for parse_dataset function."""

    def test_parse_text_dates(self, tmp_path):
        """Test a workbook with two tickers and dd/mm/yyyy text dates."""
        file = write_workbook(tmp_path / 'dataset.xlsx', {
            'JPM': sheet(seed=1),
            'MSFT': sheet(periods=30, seed=2),
        })

        tickers, data = parse_dataset(file)

        assert tickers == ['JPM', 'MSFT']
        assert [len(df) for df in data] == [40, 30]
        assert list(data[0].columns) == ['date', 'open', 'high', 'low', 'close', 'return']
        assert pd.Timestamp(data[0]['date'].iloc[0]) == pd.Timestamp('2016-03-01')
        assert pd.isna(data[0]['return'].iloc[0])

    def test_parse_excel_dates(self, tmp_path):
        """Test cells stored as Excel dates."""
        file = write_workbook(tmp_path / 'dataset.xlsx', {'JPM': sheet(text_dates=False)})

        tickers, data = parse_dataset(file, date_format='%Y-%m-%d')

        assert tickers == ['JPM']
        assert pd.Timestamp(data[0]['date'].iloc[-1]) == pd.bdate_range('2016-03-01', periods=40)[-1]

    def test_custom_date_format(self, tmp_path):
        """Test text dates in another format."""
        frame = sheet()
        frame['Date'] = pd.bdate_range('2016-03-01', periods=40).strftime('%Y%m%d')
        file = write_workbook(tmp_path / 'dataset.xlsx', {'JPM': frame})

        _, data = parse_dataset(file, date_format='%Y%m%d')

        assert pd.Timestamp(data[0]['date'].iloc[1]) == pd.Timestamp('2016-03-02')

    def test_dates_not_matching_format(self, tmp_path):
        """Test text dates that do not follow the format."""
        file = write_workbook(tmp_path / 'dataset.xlsx', {'JPM': sheet()})

        with pytest.raises(ValidationError, match="dates not matching"):
            parse_dataset(file, date_format='%Y-%m-%d')

    def test_wrong_column_order(self, tmp_path):
        """Test that columns must appear in order."""
        frame = sheet()[['Date', 'High', 'Open', 'Low', 'Close']]
        file = write_workbook(tmp_path / 'dataset.xlsx', {'JPM': frame})

        with pytest.raises(ValidationError, match="exact same order"):
            parse_dataset(file)

    def test_unnamed_column(self, tmp_path):
        """Test that columns without a header are rejected."""
        frame = sheet()
        frame[''] = 1.0
        file = write_workbook(tmp_path / 'dataset.xlsx', {'JPM': frame})

        with pytest.raises(ValidationError, match="unnamed columns"):
            parse_dataset(file)

    def test_missing_value(self, tmp_path):
        """Test that empty cells are rejected."""
        frame = sheet()
        frame.loc[5, 'Close'] = np.nan
        file = write_workbook(tmp_path / 'dataset.xlsx', {'JPM': frame})

        with pytest.raises(ValidationError, match="'JPM' sheet contains invalid or missing"):
            parse_dataset(file)

    def test_negative_value(self, tmp_path):
        """Test that negative prices are rejected."""
        frame = sheet()
        frame.loc[5, 'Low'] = -1.0
        file = write_workbook(tmp_path / 'dataset.xlsx', {'JPM': frame})

        with pytest.raises(ValidationError, match="negative values"):
            parse_dataset(file)

    def test_duplicate_dates(self, tmp_path):
        """Test that repeated dates are rejected."""
        frame = sheet()
        frame.loc[6, 'Date'] = frame.loc[5, 'Date']
        file = write_workbook(tmp_path / 'dataset.xlsx', {'JPM': frame})

        with pytest.raises(ValidationError, match="duplicate observation dates"):
            parse_dataset(file)

    def test_unsorted_dates(self, tmp_path):
        """Test that dates out of order are rejected."""
        frame = sheet()
        frame.loc[[5, 6], 'Date'] = frame.loc[[6, 5], 'Date'].to_numpy()
        file = write_workbook(tmp_path / 'dataset.xlsx', {'JPM': frame})

        with pytest.raises(ValidationError, match="unsorted observation dates"):
            parse_dataset(file)

    def test_bad_sheet_reported_by_name(self, tmp_path):
        """Test that the failing sheet is named in the error."""
        bad = sheet()
        bad.loc[3, 'High'] = -5.0
        file = write_workbook(tmp_path / 'dataset.xlsx', {'JPM': sheet(), 'BAC': bad})

        with pytest.raises(ValidationError, match="'BAC'"):
            parse_dataset(file)

    def test_missing_file(self, tmp_path):
        """Test error handling for a file that does not exist."""
        with pytest.raises(DataError, match="could not be found"):
            parse_dataset(tmp_path / 'missing.xlsx')

    def test_wrong_extension(self, tmp_path):
        """Test error handling for non-Excel files."""
        file = tmp_path / 'dataset.csv'
        sheet().to_csv(file, index=False)

        with pytest.raises(DataError, match="not a valid Excel spreadsheet"):
            parse_dataset(file)

    def test_corrupted_workbook(self, tmp_path):
        """Test error handling for a file that is not a workbook."""
        file = tmp_path / 'dataset.xlsx'
        file.write_text('not a workbook')

        with pytest.raises(DataError, match="not a valid Excel spreadsheet"):
            parse_dataset(file)


class TestValidateDateFormat:
    """Tests for validate_date_format function."""

    @pytest.mark.parametrize('date_format', ['%d/%m/%Y', '%Y-%m-%d', '%b %d, %Y'])
    def test_valid(self, date_format):
        """Test accepted formats."""
        assert validate_date_format(date_format) == date_format

    @pytest.mark.parametrize('date_format', ['%d/%m/%Y %H:%M', '%Y-%m-%d %I%p', '%Y%m%d%S'])
    def test_time_component(self, date_format):
        """Test that formats with time information are rejected."""
        with pytest.raises(ValidationError, match="time information"):
            validate_date_format(date_format)

    @pytest.mark.parametrize('date_format', ['', '   ', None])
    def test_empty(self, date_format):
        """Test that empty formats are rejected."""
        with pytest.raises(ValidationError, match="non-empty"):
            validate_date_format(date_format)
