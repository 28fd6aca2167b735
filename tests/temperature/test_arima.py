"""AutoARIMA track tests (StatsForecast runs for real on synthetic data)."""

import numpy as np
import pandas as pd
import pytest

from src.temperature.arima import AutoARIMAForecaster
from src.temperature.config import TemperatureConfig
from src.temperature.evaluation import ACCURACY_COLUMNS
from src.temperature.features import split_by_year


@pytest.fixture
def config():
    return TemperatureConfig(horizon_days=30)


@pytest.fixture
def calibrated(daily_df, config):
    train, test = split_by_year(daily_df, config.split_year)
    forecaster = AutoARIMAForecaster(config).fit(train)
    forecaster.calibrate(test)
    return forecaster, train, test


class TestUnfitted:
    """Misuse raises before any model exists"""

    def test_forecast_before_fit_raises(self, config):
        with pytest.raises(RuntimeError, match="fitted"):
            AutoARIMAForecaster(config).forecast(10)

    def test_accuracy_before_calibrate_raises(self, config):
        with pytest.raises(RuntimeError, match="calibrate"):
            AutoARIMAForecaster(config).accuracy()

    def test_empty_train_raises(self, config):
        with pytest.raises(ValueError):
            AutoARIMAForecaster(config).fit(pd.DataFrame({"Date": [], "Temp": []}))


class TestCalibration:
    """Fit on training years, score the holdout"""

    def test_calibration_aligned_to_test(self, calibrated):
        forecaster, _, test = calibrated
        cal = forecaster.calibration

        assert list(cal.columns) == ["Date", "actual", "pred", "residual", "conf_lo", "conf_hi"]
        assert len(cal) == len(test)
        assert (cal["Date"].values == test["Date"].values).all()
        np.testing.assert_allclose(cal["residual"], cal["actual"] - cal["pred"])
        assert (cal["conf_lo"] <= cal["pred"]).all()
        assert (cal["pred"] <= cal["conf_hi"]).all()

    def test_model_description(self, calibrated):
        forecaster, _, _ = calibrated
        assert forecaster.model_desc.startswith("ARIMA(")

    def test_accuracy_table(self, calibrated):
        forecaster, _, _ = calibrated
        acc = forecaster.accuracy()

        assert len(acc) == 1
        assert set(ACCURACY_COLUMNS).issubset(acc.columns)
        assert np.isfinite(acc.loc[0, "rmse"])
        # Temperatures stay within a few degrees of the seasonal cycle
        assert acc.loc[0, "rmse"] < 10

    def test_forecast_table_stacks_actual_and_prediction(self, calibrated, daily_df):
        forecaster, _, test = calibrated
        table = forecaster.forecast_table(daily_df)

        assert set(table["key"]) == {"actual", "prediction"}
        assert (table["key"] == "actual").sum() == len(daily_df)
        assert (table["key"] == "prediction").sum() == len(test)
        assert table.loc[table["key"] == "actual", "conf_lo"].isna().all()


class TestRefitForecast:
    """Refit on all data and forecast the next horizon"""

    def test_forecast_continues_after_last_date(self, calibrated, daily_df, config):
        forecaster, _, _ = calibrated
        forecaster.refit(daily_df)
        future = forecaster.forecast()

        assert list(future.columns) == ["Date", "pred", "conf_lo", "conf_hi"]
        assert len(future) == config.horizon_days
        assert future["Date"].iloc[0] == daily_df["Date"].max() + pd.Timedelta(days=1)
        assert future["pred"].notna().all()

    def test_refit_keeps_calibration(self, calibrated, daily_df):
        forecaster, _, _ = calibrated
        before = forecaster.calibration
        forecaster.refit(daily_df)

        assert forecaster.calibration is before

    def test_non_positive_horizon_raises(self, calibrated):
        forecaster, _, _ = calibrated
        with pytest.raises(ValueError, match="Horizon"):
            forecaster._predict(0)

    def test_zero_horizon_forecast_raises(self, calibrated, daily_df):
        forecaster, _, _ = calibrated
        forecaster.refit(daily_df)
        with pytest.raises(ValueError, match="Horizon"):
            forecaster.forecast(0)
