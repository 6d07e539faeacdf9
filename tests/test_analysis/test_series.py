"""Tests for OHLCV normalisation."""

import sys
from datetime import date

import pandas as pd
import pytest

sys.path.append("src")
from catalyst_watch.analysis.series import OHLCV_COLUMNS, bar_date, normalize_ohlcv
from catalyst_watch.exceptions import MalformedSeriesError


class TestNormalizeOHLCV:
    def test_none_gives_empty_frame(self):
        result = normalize_ohlcv(None)

        assert result.empty
        assert list(result.columns) == OHLCV_COLUMNS

    def test_yfinance_columns_are_lowercased(self, ohlcv_factory):
        frame = ohlcv_factory([1.0, 2.0, 3.0]).rename(columns=str.title)
        frame["Dividends"] = 0.0

        result = normalize_ohlcv(frame)

        assert list(result.columns) == OHLCV_COLUMNS
        assert result["close"].tolist() == [1.0, 2.0, 3.0]

    def test_date_column_becomes_index(self):
        frame = pd.DataFrame(
            {
                "Date": pd.to_datetime(["2024-01-02", "2024-01-03"]),
                "Open": [1, 2],
                "High": [1, 2],
                "Low": [1, 2],
                "Close": [1, 2],
                "Volume": [10, 20],
            }
        )

        result = normalize_ohlcv(frame)

        assert bar_date(result.index[0]) == date(2024, 1, 2)
        assert result["volume"].dtype == float

    def test_missing_columns(self, ohlcv_factory):
        frame = ohlcv_factory([1.0, 2.0]).drop(columns=["volume"])

        with pytest.raises(MalformedSeriesError) as exc_info:
            normalize_ohlcv(frame)

        assert exc_info.value.details["missing"] == ["volume"]

    def test_descending_index_raises(self, ohlcv_factory):
        frame = ohlcv_factory([1.0, 2.0, 3.0]).iloc[::-1]

        with pytest.raises(MalformedSeriesError):
            normalize_ohlcv(frame)

    def test_input_is_not_mutated(self, ohlcv_factory):
        frame = ohlcv_factory([1.0, 2.0]).rename(columns=str.upper)

        normalize_ohlcv(frame)

        assert "CLOSE" in frame.columns


class TestBarDate:
    def test_timestamp(self):
        assert bar_date(pd.Timestamp("2024-05-06 15:30")) == date(2024, 5, 6)

    def test_passthrough(self):
        assert bar_date(7) == 7
