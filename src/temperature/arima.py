"""
Classical AutoARIMA track.

Wraps StatsForecast's AutoARIMA with the calibrate / accuracy / refit /
forecast workflow:
1. fit on the training years
2. calibrate against the holdout year(s)
3. refit on all data and forecast the next horizon
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pandas as pd

from .config import TemperatureConfig
from .evaluation import accuracy_table

logger = logging.getLogger(__name__)

SERIES_ID = "temperature"


class AutoARIMAForecaster:
    """AutoARIMA over a single daily series"""

    def __init__(self, config: TemperatureConfig):
        self.config = config
        self.sf = None
        self.model_desc = "AutoARIMA"
        self._train: Optional[pd.DataFrame] = None
        self.calibration: Optional[pd.DataFrame] = None

    @property
    def fitted(self) -> bool:
        return self.sf is not None

    def _to_long(self, df: pd.DataFrame) -> pd.DataFrame:
        """[Date, Temp] -> StatsForecast's [unique_id, ds, y]"""
        cfg = self.config
        return pd.DataFrame({
            "unique_id": SERIES_ID,
            "ds": pd.to_datetime(df[cfg.date_col]).values,
            "y": df[cfg.value_col].astype(float).values,
        })

    def _describe(self) -> str:
        fitted = getattr(self.sf, "fitted_", None)
        if fitted is None:
            return "AutoARIMA"
        model_ = getattr(fitted[0, 0], "model_", None)
        if not model_ or "arma" not in model_:
            return "AutoARIMA"
        p, q, P, Q, m, d, D = model_["arma"]
        if P or D or Q:
            return f"ARIMA({p},{d},{q})({P},{D},{Q})[{m}]"
        return f"ARIMA({p},{d},{q})"

    def fit(self, train: pd.DataFrame) -> "AutoARIMAForecaster":
        """Fit AutoARIMA to the training frame"""
        from statsforecast import StatsForecast
        from statsforecast.models import AutoARIMA

        if train.empty:
            raise ValueError("Cannot fit AutoARIMA on an empty frame")

        self._train = self._to_long(train)
        self.sf = StatsForecast(
            models=[AutoARIMA(season_length=self.config.season_length)],
            freq=self.config.freq,
            n_jobs=1,
        )
        self.sf.fit(df=self._train)
        self.model_desc = self._describe()

        logger.info(f"[arima] fitted {self.model_desc} on {len(self._train)} rows")
        return self

    def _predict(self, h: int) -> pd.DataFrame:
        if not self.fitted:
            raise RuntimeError("Model must be fitted before prediction. Call fit() first.")
        if h < 1:
            raise ValueError(f"Horizon must be positive, got {h}")

        level = self.config.confidence_level
        fc = self.sf.predict(h=h, level=[level])
        if "unique_id" not in fc.columns:
            fc = fc.reset_index()

        return pd.DataFrame({
            "ds": pd.to_datetime(fc["ds"]).values,
            "pred": fc["AutoARIMA"].values,
            "conf_lo": fc[f"AutoARIMA-lo-{level}"].values,
            "conf_hi": fc[f"AutoARIMA-hi-{level}"].values,
        })

    def calibrate(self, test: pd.DataFrame) -> pd.DataFrame:
        """
        Forecast len(test) steps and align them to the test rows by position.

        Returns:
            DataFrame with columns [Date, actual, pred, residual, conf_lo, conf_hi]
        """
        cfg = self.config
        fc = self._predict(len(test))

        calibration = pd.DataFrame({
            cfg.date_col: pd.to_datetime(test[cfg.date_col]).values,
            "actual": test[cfg.value_col].astype(float).values,
            "pred": fc["pred"].values,
            "conf_lo": fc["conf_lo"].values,
            "conf_hi": fc["conf_hi"].values,
        })
        calibration["residual"] = calibration["actual"] - calibration["pred"]
        self.calibration = calibration[
            [cfg.date_col, "actual", "pred", "residual", "conf_lo", "conf_hi"]
        ]

        logger.info(f"[arima] calibrated on {len(test)} holdout rows")
        return self.calibration

    def accuracy(self) -> pd.DataFrame:
        """Accuracy table for the calibrated holdout"""
        if self.calibration is None:
            raise RuntimeError("Call calibrate() before accuracy()")

        y_train = self._train["y"].values if self._train is not None else None
        return accuracy_table(
            self.model_desc,
            self.calibration["actual"].values,
            self.calibration["pred"].values,
            y_train=y_train,
        )

    def forecast_table(self, actual: pd.DataFrame) -> pd.DataFrame:
        """
        Actual data stacked on top of the holdout predictions.

        Returns:
            Long DataFrame [Date, key, value, conf_lo, conf_hi, model_desc]
        """
        if self.calibration is None:
            raise RuntimeError("Call calibrate() before forecast_table()")

        cfg = self.config
        actual_part = pd.DataFrame({
            cfg.date_col: pd.to_datetime(actual[cfg.date_col]).values,
            "key": "actual",
            "value": actual[cfg.value_col].astype(float).values,
            "conf_lo": np.nan,
            "conf_hi": np.nan,
            "model_desc": "ACTUAL",
        })
        pred_part = pd.DataFrame({
            cfg.date_col: self.calibration[cfg.date_col].values,
            "key": "prediction",
            "value": self.calibration["pred"].values,
            "conf_lo": self.calibration["conf_lo"].values,
            "conf_hi": self.calibration["conf_hi"].values,
            "model_desc": self.model_desc,
        })
        return pd.concat([actual_part, pred_part], ignore_index=True)

    def refit(self, full: pd.DataFrame) -> "AutoARIMAForecaster":
        """Refit on all data, keeping the calibration for reporting"""
        calibration = self.calibration
        self.fit(full)
        self.calibration = calibration
        return self

    def forecast(self, h: Optional[int] = None) -> pd.DataFrame:
        """
        Forecast h days past the end of the fitted data.

        Returns:
            DataFrame with columns [Date, pred, conf_lo, conf_hi]
        """
        if h is None:
            h = self.config.horizon_days
        fc = self._predict(h)
        return fc.rename(columns={"ds": self.config.date_col})
