"""Calendar signature + holdout split tests."""

import numpy as np
import pandas as pd
import pytest

from src.temperature.config import TemperatureConfig
from src.temperature.features import (INTRADAY_COLUMNS, augment_timeseries_signature,
                                      build_feature_frame, future_frame,
                                      prepare_model_frame, split_by_year)


def _frame(dates):
    return pd.DataFrame({"Date": pd.to_datetime(dates), "Temp": np.arange(len(dates), dtype=float)})


class TestSignature:
    """augment_timeseries_signature values on known dates"""

    def test_known_thursday(self):
        # 1981-01-01 was a Thursday
        sig = augment_timeseries_signature(_frame(["1981-01-01"])).iloc[0]

        assert sig["year"] == 1981
        assert sig["year_iso"] == 1981
        assert sig["half"] == 1
        assert sig["quarter"] == 1
        assert sig["month"] == 1
        assert sig["month_xts"] == 0
        assert sig["month_lbl"] == "January"
        assert sig["wday"] == 5
        assert sig["wday_xts"] == 4
        assert sig["wday_lbl"] == "Thursday"
        assert sig["mday"] == 1
        assert sig["qday"] == 1
        assert sig["yday"] == 1
        assert sig["week"] == 1
        assert sig["week_iso"] == 1
        assert sig["mweek"] == 1
        assert sig["mday7"] == 1

    def test_week_of_month_starts_sunday(self):
        # 1981-01-04 is the first Sunday of the month
        sig = augment_timeseries_signature(_frame(["1981-01-03", "1981-01-04"]))

        assert sig["mweek"].tolist() == [1, 2]
        assert sig["mday7"].tolist() == [1, 1]

    def test_quarter_day_and_half(self):
        sig = augment_timeseries_signature(_frame(["1981-08-15"])).iloc[0]

        assert sig["quarter"] == 3
        assert sig["half"] == 2
        # Jul 31 + Aug 15
        assert sig["qday"] == 46

    def test_index_num_and_diff(self):
        sig = augment_timeseries_signature(_frame(["1970-01-02", "1970-01-03"]))

        assert sig["index_num"].tolist() == [86400, 172800]
        assert np.isnan(sig["diff"].iloc[0])
        assert sig["diff"].iloc[1] == 86400

    def test_labels_are_ordered(self):
        sig = augment_timeseries_signature(_frame(["1981-01-01"]))

        assert sig["month_lbl"].cat.ordered
        assert sig["wday_lbl"].cat.ordered

    def test_missing_date_column_raises(self):
        with pytest.raises(ValueError, match="Missing datetime column"):
            augment_timeseries_signature(pd.DataFrame({"x": [1]}))


class TestModelFrame:
    """prepare_model_frame / build_feature_frame"""

    def test_intraday_columns_dropped(self):
        frame = build_feature_frame(_frame(pd.date_range("1981-01-01", periods=10)))

        for col in INTRADAY_COLUMNS:
            assert col not in frame.columns

    def test_labels_become_unordered_factors(self):
        frame = build_feature_frame(_frame(["1981-01-02", "1981-01-01"]))

        assert isinstance(frame["wday_lbl"].dtype, pd.CategoricalDtype)
        assert not frame["wday_lbl"].cat.ordered
        # Levels follow first appearance, like as_factor()
        assert list(frame["wday_lbl"].cat.categories) == ["Friday", "Thursday"]

    def test_string_columns_become_factors(self):
        df = pd.DataFrame({"site": ["a", "b", "a"], "Temp": [1.0, 2.0, 3.0]})
        frame = prepare_model_frame(df)

        assert isinstance(frame["site"].dtype, pd.CategoricalDtype)
        assert frame["Temp"].dtype == float


class TestFutureFrameAndSplit:
    """future_frame / split_by_year"""

    def test_future_frame_covers_next_year(self):
        new_data = future_frame(TemperatureConfig())

        assert len(new_data) == 365
        assert (new_data["Temp"] == 0).all()
        assert new_data["Date"].min() == pd.Timestamp("1991-01-01")
        assert new_data["Date"].max() == pd.Timestamp("1991-12-31")

    def test_future_frame_matches_training_columns(self, daily_df):
        features = build_feature_frame(daily_df)
        new_data = future_frame(TemperatureConfig())

        assert list(new_data.columns) == list(features.columns)

    def test_future_frame_empty_range_raises(self):
        with pytest.raises(ValueError, match="Empty forecast range"):
            future_frame(TemperatureConfig(), start="1991-02-01", end="1991-01-01")

    def test_split_by_year(self, daily_df):
        train, test = split_by_year(build_feature_frame(daily_df), 1990)

        assert train["year"].max() == 1989
        assert test["year"].min() == 1990
        assert len(train) + len(test) == len(daily_df)

    def test_split_without_year_column(self, daily_df):
        train, test = split_by_year(daily_df, 1990)

        assert len(test) == 365
        assert train["Date"].max() < test["Date"].min()

    def test_split_empty_side_raises(self, daily_df):
        with pytest.raises(ValueError, match="empty side"):
            split_by_year(daily_df, 2000)
