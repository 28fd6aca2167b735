# file: src/temperature/evaluation.py
"""
Holdout accuracy metrics.

Computes forecasting metrics with explicit NaN handling (fail-loud principle).
"""

import logging
from typing import Dict, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

ACCURACY_COLUMNS = ["mae", "mape", "mase", "smape", "rmse", "rsq"]


def _as_float_array(values) -> np.ndarray:
    return np.asarray(values, dtype=float)


class ForecastMetrics:
    """Compute holdout evaluation metrics"""

    @staticmethod
    def _valid(y_true: np.ndarray, y_pred: np.ndarray) -> np.ndarray:
        return np.isfinite(y_pred) & np.isfinite(y_true)

    @staticmethod
    def rmse(y_true, y_pred) -> float:
        """
        Root Mean Squared Error

        Explicit NaN masking (fail-loud):
        - Returns NaN if no valid predictions
        - Masks NaN/inf values before computation
        """
        y_true, y_pred = _as_float_array(y_true), _as_float_array(y_pred)
        valid_mask = ForecastMetrics._valid(y_true, y_pred)

        if valid_mask.sum() == 0:
            return np.nan

        return float(np.sqrt(np.mean((y_pred[valid_mask] - y_true[valid_mask]) ** 2)))

    @staticmethod
    def mae(y_true, y_pred) -> float:
        """Mean Absolute Error (NaN-masked)"""
        y_true, y_pred = _as_float_array(y_true), _as_float_array(y_pred)
        valid_mask = ForecastMetrics._valid(y_true, y_pred)

        if valid_mask.sum() == 0:
            return np.nan

        return float(np.mean(np.abs(y_pred[valid_mask] - y_true[valid_mask])))

    @staticmethod
    def mape(y_true, y_pred) -> float:
        """
        Mean Absolute Percentage Error (%)

        Zero actuals are masked out; minimum temperatures do hit 0.0.
        """
        y_true, y_pred = _as_float_array(y_true), _as_float_array(y_pred)
        valid_mask = ForecastMetrics._valid(y_true, y_pred) & (np.abs(y_true) > 1e-10)

        if valid_mask.sum() == 0:
            return np.nan

        ape = np.abs((y_pred[valid_mask] - y_true[valid_mask]) / np.abs(y_true[valid_mask]))
        return float(100 * np.mean(ape))

    @staticmethod
    def smape(y_true, y_pred) -> float:
        """Symmetric MAPE (%), denominator is the mean of |actual| and |pred|"""
        y_true, y_pred = _as_float_array(y_true), _as_float_array(y_pred)
        denom = (np.abs(y_true) + np.abs(y_pred)) / 2
        valid_mask = ForecastMetrics._valid(y_true, y_pred) & (denom > 1e-10)

        if valid_mask.sum() == 0:
            return np.nan

        ratio = np.abs(y_pred[valid_mask] - y_true[valid_mask]) / denom[valid_mask]
        return float(100 * np.mean(ratio))

    @staticmethod
    def mase(
        y_true,
        y_pred,
        y_train,
        season_length: int = 1
    ) -> float:
        """
        Mean Absolute Scaled Error

        Scales error relative to the in-sample (seasonal) naive forecast.
        Returns NaN if training data is too short or perfectly flat.
        """
        y_true, y_pred = _as_float_array(y_true), _as_float_array(y_pred)
        y_train = _as_float_array(y_train)
        y_train = y_train[np.isfinite(y_train)]

        if len(y_train) <= season_length:
            return np.nan

        mae_train = np.mean(np.abs(y_train[season_length:] - y_train[:-season_length]))
        if mae_train < 1e-10:
            return np.nan

        valid_mask = ForecastMetrics._valid(y_true, y_pred)
        if valid_mask.sum() == 0:
            return np.nan

        mae_test = np.mean(np.abs(y_pred[valid_mask] - y_true[valid_mask]))
        return float(mae_test / mae_train)

    @staticmethod
    def rsq(y_true, y_pred) -> float:
        """R-squared as the squared Pearson correlation of actual and prediction"""
        y_true, y_pred = _as_float_array(y_true), _as_float_array(y_pred)
        valid_mask = ForecastMetrics._valid(y_true, y_pred)

        if valid_mask.sum() < 2:
            return np.nan

        a, p = y_true[valid_mask], y_pred[valid_mask]
        if np.std(a) < 1e-12 or np.std(p) < 1e-12:
            return np.nan

        return float(np.corrcoef(a, p)[0, 1] ** 2)

    @staticmethod
    def coverage(y_true, lower, upper) -> float:
        """
        Prediction Interval Coverage (%)

        Denominator counts valid (non-NaN) rows only.
        """
        y_true = _as_float_array(y_true)
        lower, upper = _as_float_array(lower), _as_float_array(upper)
        valid_mask = np.isfinite(y_true) & np.isfinite(lower) & np.isfinite(upper)

        if valid_mask.sum() == 0:
            return np.nan

        covered = (y_true[valid_mask] >= lower[valid_mask]) & \
                  (y_true[valid_mask] <= upper[valid_mask])

        return float(100 * np.mean(covered))

    @staticmethod
    def compute_all(
        y_true,
        y_pred,
        y_train=None,
        season_length: int = 1
    ) -> Dict[str, float]:
        """
        Compute all accuracy metrics at once

        Args:
            y_true: Actual values
            y_pred: Predictions
            y_train: Training values (for MASE)
            season_length: Naive lag used by MASE

        Returns:
            Dictionary keyed by ACCURACY_COLUMNS
        """
        metrics = {
            "mae": ForecastMetrics.mae(y_true, y_pred),
            "mape": ForecastMetrics.mape(y_true, y_pred),
            "mase": np.nan,
            "smape": ForecastMetrics.smape(y_true, y_pred),
            "rmse": ForecastMetrics.rmse(y_true, y_pred),
            "rsq": ForecastMetrics.rsq(y_true, y_pred),
        }

        if y_train is not None:
            metrics["mase"] = ForecastMetrics.mase(
                y_true, y_pred, y_train, season_length=season_length
            )

        return metrics


def accuracy_table(
    model_desc: str,
    y_true,
    y_pred,
    y_train=None,
    model_id: int = 1,
    season_length: int = 1,
) -> pd.DataFrame:
    """
    One-row accuracy table for a calibrated model.

    Columns: model_id, model_desc, type, mae, mape, mase, smape, rmse, rsq
    """
    metrics = ForecastMetrics.compute_all(y_true, y_pred, y_train, season_length=season_length)
    row = {"model_id": model_id, "model_desc": model_desc, "type": "Test"}
    row.update(metrics)
    return pd.DataFrame([row], columns=["model_id", "model_desc", "type"] + ACCURACY_COLUMNS)


def error_table(
    test: pd.DataFrame,
    predictions,
    date_col: str = "Date",
    value_col: str = "Temp",
) -> pd.DataFrame:
    """
    Holdout error table with columns [Date, actual, pred].
    """
    predictions = _as_float_array(predictions).ravel()
    if len(predictions) != len(test):
        raise ValueError(
            f"Prediction length {len(predictions)} does not match test rows {len(test)}"
        )

    return pd.DataFrame({
        date_col: test[date_col].values,
        "actual": test[value_col].values,
        "pred": predictions,
    })


def summarize_errors(errors: pd.DataFrame, y_train: Optional[np.ndarray] = None) -> Dict[str, float]:
    """Metrics dictionary for an error_table()"""
    return ForecastMetrics.compute_all(errors["actual"].values, errors["pred"].values, y_train)
