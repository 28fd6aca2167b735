"""
Load & clean tests.

Malformed dates fail loudly; non-numeric temperatures become NA and are
removed by the single NA-drop step.
"""

import numpy as np
import pandas as pd
import pytest

from src.temperature.config import TemperatureConfig
from src.temperature.ingest import (drop_missing, glimpse, incomplete_rows,
                                    load_temperature_data, missing_report,
                                    normalize_columns, read_raw, summarize)
from src.temperature.validate import validate_time_index


@pytest.mark.fail_loud
class TestReadAndNormalize:
    """Raw CSV -> [Date, Temp]"""

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_raw(tmp_path / "nope.csv")

    def test_columns_renamed_and_typed(self, raw_csv):
        df = normalize_columns(read_raw(raw_csv), TemperatureConfig())

        assert list(df.columns) == ["Date", "Temp"]
        assert pd.api.types.is_datetime64_any_dtype(df["Date"])
        assert df["Temp"].dtype == float
        assert df["Date"].iloc[0] == pd.Timestamp("1988-01-01")

    def test_non_numeric_temperature_becomes_nan(self, raw_csv):
        df = normalize_columns(read_raw(raw_csv), TemperatureConfig())

        assert np.isnan(df.loc[10, "Temp"])
        assert np.isnan(df.loc[200, "Temp"])
        assert df["Temp"].isna().sum() == 2

    def test_malformed_date_raises(self):
        raw = pd.DataFrame({
            "Date": ["01/01/1981", "NOT_A_DATE", "01/03/1981"],
            "Temp": ["20.7", "17.9", "18.8"],
        })
        with pytest.raises((ValueError, TypeError)):
            normalize_columns(raw, TemperatureConfig())

    def test_wrong_column_count_raises(self):
        raw = pd.DataFrame({"a": ["01/01/1981"], "b": ["1.0"], "c": ["x"]})
        with pytest.raises(ValueError, match="Expected 2 columns"):
            normalize_columns(raw, TemperatureConfig())

    def test_inferred_date_format(self):
        raw = pd.DataFrame({"d": ["1981-01-01", "1981-01-02"], "t": ["20.7", " 17.9 "]})
        df = normalize_columns(raw, TemperatureConfig(date_format=None))

        assert df["Date"].iloc[1] == pd.Timestamp("1981-01-02")
        assert df["Temp"].iloc[1] == pytest.approx(17.9)


class TestProfiles:
    """glimpse / summarize / missing_report"""

    def test_glimpse_one_row_per_column(self, raw_csv):
        raw = read_raw(raw_csv)
        result = glimpse(raw)

        assert len(result) == 2
        assert set(result.columns) == {"column", "dtype", "non_null", "values"}

    def test_summarize_numeric_and_date(self, daily_df):
        result = summarize(daily_df).set_index("column")

        assert result.loc["Temp", "n_missing"] == 0
        assert result.loc["Temp", "complete_rate"] == 1.0
        assert result.loc["Temp", "p0"] <= result.loc["Temp", "p50"] <= result.loc["Temp", "p100"]
        assert result.loc["Date", "n_unique"] == len(daily_df)

    def test_missing_report_sorted(self):
        df = pd.DataFrame({
            "Date": pd.date_range("1981-01-01", periods=4),
            "Temp": [1.0, np.nan, np.nan, 4.0],
        })
        report = missing_report(df)

        assert report.iloc[0]["column"] == "Temp"
        assert report.iloc[0]["cnt"] == 2
        assert report.iloc[0]["pcnt"] == pytest.approx(50.0)
        assert len(incomplete_rows(df)) == 2


class TestDropMissing:
    """The only cleaning step"""

    def test_drop_missing_removes_na_rows(self):
        df = pd.DataFrame({
            "Date": pd.date_range("1981-01-01", periods=5),
            "Temp": [1.0, np.nan, 3.0, np.nan, 5.0],
        })
        cleaned = drop_missing(df)

        assert len(cleaned) == 3
        assert cleaned["Temp"].notna().all()
        assert cleaned.index.tolist() == [0, 1, 2]

    def test_load_temperature_data_end_to_end(self, raw_csv, daily_df):
        cfg = TemperatureConfig(data_path=str(raw_csv))
        df = load_temperature_data(cfg)

        assert len(df) == len(daily_df) - 2
        assert df["Temp"].notna().all()
        assert df["Date"].is_monotonic_increasing

    def test_incomplete_rows_logged_before_drop(self, raw_csv, caplog):
        cfg = TemperatureConfig(data_path=str(raw_csv))
        with caplog.at_level("INFO", logger="src.temperature.ingest"):
            load_temperature_data(cfg)

        assert "2 incomplete rows" in caplog.text
        assert "1988-01-11" in caplog.text


class TestValidation:
    """Integrity report is informational, never raises on gaps"""

    def test_clean_series_passes(self, daily_df):
        result = validate_time_index(daily_df)

        assert result.is_valid
        assert result.n_missing_days == 0
        assert result.is_monotonic

    def test_gaps_and_duplicates_reported(self, daily_df):
        df = pd.concat([daily_df.drop(index=[5, 6]), daily_df.iloc[[20]]], ignore_index=True)
        result = validate_time_index(df)

        assert not result.is_valid
        assert result.n_missing_days == 2
        assert result.n_duplicates == 2
        assert not result.is_monotonic
        assert result.missing_days[0] == daily_df.loc[5, "Date"]

    @pytest.mark.fail_loud
    def test_empty_frame_raises(self):
        with pytest.raises(ValueError):
            validate_time_index(pd.DataFrame({"Date": [], "Temp": []}))
