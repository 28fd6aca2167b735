# file: src/temperature/tasks.py
"""
Pipeline steps for the temperature analysis.

load -> clean -> diagnostics -> features -> split -> AutoML -> AutoARIMA
     -> evaluate -> forecast -> plot

Each step logs with a [step] prefix. Failures are logged with the step
name and re-raised unchanged.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Optional

import pandas as pd

from .arima import AutoARIMAForecaster
from .automl import H2OAutoMLModel
from .config import TemperatureConfig
from .diagnostics import acf_diagnostics, anomaly_diagnostics, seasonal_diagnostics
from .evaluation import error_table, summarize_errors
from .features import build_feature_frame, future_frame, split_by_year
from .ingest import load_temperature_data
from .plots import (accuracy_figure, forecast_long_table, plot_acf_diagnostics,
                    plot_anomaly_diagnostics, plot_forecast, plot_modeltime_forecast,
                    plot_prediction, plot_seasonal_diagnostics, render)
from .validate import log_validation_report, validate_time_index

logger = logging.getLogger(__name__)


@contextmanager
def _step(name: str):
    logger.info(f"[{name}] start")
    try:
        yield
    except Exception:
        logger.exception(f"[{name}] failed")
        raise
    logger.info(f"[{name}] done")


def _record_chart(charts: Dict[str, str], name: str, path: Optional[Path]) -> None:
    if path is not None:
        charts[name] = str(path)


def load_and_clean(config: TemperatureConfig) -> pd.DataFrame:
    """Task 1: read, coerce and drop NA; log the integrity report"""
    with _step("load"):
        df = load_temperature_data(config)
        report = validate_time_index(df, date_col=config.date_col, value_col=config.value_col)
        log_validation_report(report)
    return df


def run_diagnostics(
    df: pd.DataFrame,
    config: TemperatureConfig,
    charts: Optional[Dict[str, str]] = None,
) -> Dict[str, pd.DataFrame]:
    """Task 2: anomaly, seasonal and ACF diagnostics with their charts"""
    charts = charts if charts is not None else {}

    with _step("diagnostics"):
        anomalies = anomaly_diagnostics(
            df,
            date_col=config.date_col,
            value_col=config.value_col,
            alpha=config.anomaly_alpha,
            max_anomalies=config.anomaly_max_anomalies,
            period=config.stl_period,
            trend=config.stl_trend,
            seasonal=config.stl_seasonal,
        )
        seasonal = seasonal_diagnostics(df, date_col=config.date_col, value_col=config.value_col)
        lags = acf_diagnostics(df, value_col=config.value_col, lags=config.acf_lags)

        _record_chart(charts, "anomaly_diagnostics", render(
            plot_anomaly_diagnostics(anomalies, date_col=config.date_col,
                                     anom_color=config.anomaly_color),
            "anomaly_diagnostics", config,
        ))
        _record_chart(charts, "seasonal_diagnostics", render(
            plot_seasonal_diagnostics(seasonal, value_col=config.value_col),
            "seasonal_diagnostics", config,
        ))
        _record_chart(charts, "acf_diagnostics", render(
            plot_acf_diagnostics(lags), "acf_diagnostics", config,
        ))

    return {"anomalies": anomalies, "seasonal": seasonal, "acf": lags}


def run_automl(
    features: pd.DataFrame,
    new_data: pd.DataFrame,
    config: TemperatureConfig,
    automl_factory: Callable[[TemperatureConfig], H2OAutoMLModel] = H2OAutoMLModel,
) -> Dict:
    """
    Task 3: AutoML fit, holdout predictions and next-year forecast.

    The cluster is shut down on exit, including on failure.
    """
    train, test = split_by_year(features, config.split_year, date_col=config.date_col)

    with _step("automl"), automl_factory(config) as automl:
        automl.fit(train, test, target=config.value_col)
        leaderboard = automl.leaderboard()
        rmse = automl.rmse_summary()
        leader_id = automl.leader.model_id

        errors = error_table(test, automl.predict(test),
                             date_col=config.date_col, value_col=config.value_col)
        future = pd.DataFrame({
            config.date_col: new_data[config.date_col].values,
            "pred": automl.predict(new_data),
        })

    return {
        "leaderboard": leaderboard,
        "rmse": rmse,
        "leader_id": leader_id,
        "errors": errors,
        "metrics": summarize_errors(errors, train[config.value_col].values),
        "future": future,
        "train_rows": len(train),
        "test_rows": len(test),
    }


def run_arima(df: pd.DataFrame, config: TemperatureConfig) -> Dict:
    """
    Task 4: AutoARIMA calibration on the holdout, then refit and forecast.
    """
    train, test = split_by_year(df, config.split_year, date_col=config.date_col)

    with _step("arima"):
        forecaster = AutoARIMAForecaster(config).fit(train)
        calibration = forecaster.calibrate(test)
        accuracy = forecaster.accuracy()
        holdout_table = forecaster.forecast_table(df)
        calibrated_desc = forecaster.model_desc

        forecaster.refit(df)
        future = forecaster.forecast(config.horizon_days)

    return {
        "calibration": calibration,
        "accuracy": accuracy,
        "holdout_table": holdout_table,
        "model_desc": calibrated_desc,
        "refit_desc": forecaster.model_desc,
        "future": future,
    }


def run_eda(config: TemperatureConfig) -> Dict:
    """Load + diagnostics only"""
    charts: Dict[str, str] = {}
    df = load_and_clean(config)
    diagnostics = run_diagnostics(df, config, charts)

    return {
        "rows": len(df),
        "start": df[config.date_col].min().date().isoformat(),
        "end": df[config.date_col].max().date().isoformat(),
        "anomalies": int((diagnostics["anomalies"]["anomaly"] == "Yes").sum()),
        "charts": charts,
    }


def run_full_pipeline(
    config: TemperatureConfig,
    automl_factory: Callable[[TemperatureConfig], H2OAutoMLModel] = H2OAutoMLModel,
) -> Dict:
    """
    Run every step and return a flat summary for the CLI.
    """
    charts: Dict[str, str] = {}

    df = load_and_clean(config)
    diagnostics = run_diagnostics(df, config, charts)

    with _step("features"):
        features = build_feature_frame(df, date_col=config.date_col)
        new_data = future_frame(config)
        logger.info(f"[features] {features.shape[1]} columns, {len(new_data)} future rows")

    automl = run_automl(features, new_data, config, automl_factory=automl_factory)
    arima = run_arima(df, config)

    with _step("plots"):
        _record_chart(charts, "automl_predict", render(
            plot_prediction(automl["errors"], date_col=config.date_col), "automl_predict", config,
        ))
        _record_chart(charts, "automl_forecast", render(
            plot_forecast(df, automl["future"], date_col=config.date_col,
                          value_col=config.value_col),
            "automl_forecast", config,
        ))
        _record_chart(charts, "arima_holdout", render(
            plot_modeltime_forecast(arima["holdout_table"], date_col=config.date_col),
            "arima_holdout", config,
        ))
        _record_chart(charts, "arima_accuracy", render(
            accuracy_figure(arima["accuracy"]), "arima_accuracy", config,
        ))
        refit_table = forecast_long_table(
            df, arima["future"], arima["refit_desc"],
            date_col=config.date_col, value_col=config.value_col,
        )
        _record_chart(charts, "arima_forecast", render(
            plot_modeltime_forecast(refit_table, date_col=config.date_col,
                                    show_conf=False, show_legend=False),
            "arima_forecast", config,
        ))

    arima_acc = arima["accuracy"].iloc[0]
    return {
        "rows": len(df),
        "anomalies": int((diagnostics["anomalies"]["anomaly"] == "Yes").sum()),
        "train_rows": automl["train_rows"],
        "test_rows": automl["test_rows"],
        "automl_leader": automl["leader_id"],
        "automl_rmse_train": automl["rmse"].get("train"),
        "automl_rmse_valid": automl["rmse"].get("valid"),
        "automl_rmse_xval": automl["rmse"].get("xval"),
        "automl_holdout_rmse": round(automl["metrics"]["rmse"], 4),
        "arima_model": arima["model_desc"],
        "arima_rmse": round(float(arima_acc["rmse"]), 4),
        "arima_mae": round(float(arima_acc["mae"]), 4),
        "forecast_rows": len(automl["future"]),
        "arima_forecast_rows": len(arima["future"]),
        "charts": charts,
    }
