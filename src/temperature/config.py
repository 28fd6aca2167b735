from __future__ import annotations

import os
from dataclasses import dataclass, replace
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class TemperatureConfig:
    # Input
    data_path: str = "data/daily-minimum-temperatures-in-me.csv"
    date_format: Optional[str] = "%m/%d/%Y"  # None -> let pandas infer
    date_col: str = "Date"
    value_col: str = "Temp"

    # Holdout split
    split_year: int = 1990

    # Diagnostics
    anomaly_alpha: float = 0.05
    anomaly_max_anomalies: float = 0.07
    anomaly_color: str = "#FB3029"
    stl_period: int = 7
    stl_trend: int = 91
    stl_seasonal: Optional[int] = None  # None -> periodic seasonal
    acf_lags: int = 365

    # H2O AutoML
    automl_seed: int = 123
    automl_nfolds: int = 10
    automl_max_runtime_secs: int = 120
    automl_stopping_metric: str = "RMSE"
    h2o_max_mem_size: Optional[str] = None
    h2o_nthreads: int = -1

    # AutoARIMA
    season_length: int = 7
    confidence_level: int = 95
    freq: str = "D"

    # Forecast horizon
    forecast_start: str = "1991-01-01"
    forecast_end: str = "1991-12-31"
    horizon_days: int = 365

    # Output
    output_dir: Optional[str] = None
    show_plots: bool = True

    def data_file(self) -> Path:
        return Path(self.data_path)

    def output_path(self) -> Optional[Path]:
        if self.output_dir is None:
            return None
        return Path(self.output_dir)

    def chart_path(self, name: str) -> Optional[Path]:
        out = self.output_path()
        if out is None:
            return None
        return out / f"{name}.html"


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def load_config(**overrides) -> TemperatureConfig:
    """
    Build a config from defaults, then .env / environment, then keyword overrides.

    Recognized variables:
    - TEMPERATURE_DATA_PATH
    - TEMPERATURE_OUTPUT_DIR
    - TEMPERATURE_SPLIT_YEAR
    - TEMPERATURE_AUTOML_SECONDS
    - H2O_MAX_MEM_SIZE

    Overriding horizon_days without forecast_end also sets forecast_end, so
    the AutoML and AutoARIMA forecasts cover the same number of days.
    """
    load_dotenv()

    env = {}
    if os.getenv("TEMPERATURE_DATA_PATH"):
        env["data_path"] = os.environ["TEMPERATURE_DATA_PATH"]
    if os.getenv("TEMPERATURE_OUTPUT_DIR"):
        env["output_dir"] = os.environ["TEMPERATURE_OUTPUT_DIR"]
    if os.getenv("H2O_MAX_MEM_SIZE"):
        env["h2o_max_mem_size"] = os.environ["H2O_MAX_MEM_SIZE"]

    split_year = _env_int("TEMPERATURE_SPLIT_YEAR")
    if split_year is not None:
        env["split_year"] = split_year

    automl_seconds = _env_int("TEMPERATURE_AUTOML_SECONDS")
    if automl_seconds is not None:
        env["automl_max_runtime_secs"] = automl_seconds

    env.update({k: v for k, v in overrides.items() if v is not None})

    # A horizon override moves the AutoML future window with it
    if "horizon_days" in env and "forecast_end" not in env:
        start = date.fromisoformat(env.get("forecast_start", TemperatureConfig.forecast_start))
        env["forecast_end"] = (start + timedelta(days=env["horizon_days"] - 1)).isoformat()

    return replace(TemperatureConfig(), **env)
