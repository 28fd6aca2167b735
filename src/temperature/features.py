# file: src/temperature/features.py
"""
Calendar feature helpers (pandas only).

augment_timeseries_signature() expands a date column into the full set of
calendar fields (timetk's time series signature). prepare_model_frame()
trims the intraday fields a daily series never uses and turns label
columns into plain categoricals the AutoML frame can consume.
"""

from __future__ import annotations

import calendar
from typing import Optional, Tuple

import numpy as np
import pandas as pd

from .config import TemperatureConfig

INTRADAY_COLUMNS = ("hour", "hour12", "minute", "second", "am_pm")

MONTH_LABELS = list(calendar.month_name)[1:]
WDAY_LABELS = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def augment_timeseries_signature(df: pd.DataFrame, date_col: str = "Date") -> pd.DataFrame:
    """
    Append calendar features derived from a datetime column.

    Weekday numbering follows the Sunday-first convention:
    wday is 1..7 and wday_xts is 0..6, both with Sunday first.
    """
    features = df.copy()
    if date_col not in features.columns:
        raise ValueError(f"Missing datetime column: {date_col}")

    ds = pd.to_datetime(features[date_col], errors="raise")
    iso = ds.dt.isocalendar()

    features["index_num"] = (ds - pd.Timestamp("1970-01-01")).dt.total_seconds().astype("int64")
    features["diff"] = ds.diff().dt.total_seconds()
    features["year"] = ds.dt.year
    features["year_iso"] = iso["year"].astype("int64").values
    features["half"] = np.where(ds.dt.month <= 6, 1, 2)
    features["quarter"] = ds.dt.quarter
    features["month"] = ds.dt.month
    features["month_xts"] = ds.dt.month - 1
    features["month_lbl"] = pd.Categorical(
        ds.dt.month.map(lambda m: MONTH_LABELS[m - 1]),
        categories=MONTH_LABELS,
        ordered=True,
    )
    features["day"] = ds.dt.day
    features["hour"] = ds.dt.hour
    features["minute"] = ds.dt.minute
    features["second"] = ds.dt.second
    features["hour12"] = (ds.dt.hour % 12).replace(0, 12)
    features["am_pm"] = np.where(ds.dt.hour < 12, 1, 2)

    # pandas: Monday=0 .. Sunday=6
    wday_xts = (ds.dt.dayofweek + 1) % 7
    features["wday"] = wday_xts + 1
    features["wday_xts"] = wday_xts
    features["wday_lbl"] = pd.Categorical(
        wday_xts.map(lambda d: WDAY_LABELS[d]),
        categories=WDAY_LABELS,
        ordered=True,
    )
    features["mday"] = ds.dt.day

    quarter_start = ds.dt.to_period("Q").dt.start_time
    features["qday"] = (ds.dt.normalize() - quarter_start).dt.days + 1
    features["yday"] = ds.dt.dayofyear

    # Week of month, with weeks starting on Sunday
    first_of_month = ds - pd.to_timedelta(ds.dt.day - 1, unit="D")
    first_offset = (first_of_month.dt.dayofweek + 1) % 7
    features["mweek"] = (ds.dt.day + first_offset - 1) // 7 + 1

    week = (ds.dt.dayofyear - 1) // 7 + 1
    features["week"] = week
    features["week_iso"] = iso["week"].astype("int64").values
    features["week2"] = week % 2
    features["week3"] = week % 3
    features["week4"] = week % 4
    features["mday7"] = (ds.dt.day - 1) // 7 + 1

    return features


def _as_factor(values: pd.Series) -> pd.Series:
    """Unordered categorical with levels in order of first appearance."""
    as_str = values.astype(str)
    return pd.Series(
        pd.Categorical(as_str, categories=pd.unique(as_str)),
        index=values.index,
        name=values.name,
    )


def prepare_model_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Drop intraday fields and convert ordered/string columns to categoricals.
    """
    frame = df.drop(columns=[c for c in INTRADAY_COLUMNS if c in df.columns])

    for col in frame.columns:
        s = frame[col]
        if isinstance(s.dtype, pd.CategoricalDtype) and s.cat.ordered:
            frame[col] = _as_factor(s)
        elif pd.api.types.is_object_dtype(s) or pd.api.types.is_string_dtype(s):
            frame[col] = _as_factor(s)

    return frame


def build_feature_frame(df: pd.DataFrame, date_col: str = "Date") -> pd.DataFrame:
    """Signature augmentation + model frame preparation in one step."""
    return prepare_model_frame(augment_timeseries_signature(df, date_col=date_col))


def future_frame(
    config: TemperatureConfig,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> pd.DataFrame:
    """
    Daily rows over [start, end] with a placeholder Temp of 0 and the same
    feature columns as the training frame.
    """
    start = start or config.forecast_start
    end = end or config.forecast_end

    dates = pd.date_range(start=start, end=end, freq="D")
    if len(dates) == 0:
        raise ValueError(f"Empty forecast range: {start} to {end}")

    new_data = pd.DataFrame({
        config.date_col: dates,
        config.value_col: 0.0,
    })
    return build_feature_frame(new_data, date_col=config.date_col)


def split_by_year(
    df: pd.DataFrame,
    split_year: int,
    date_col: str = "Date",
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Holdout split: rows before split_year train, the rest test.
    """
    if "year" in df.columns:
        years = df["year"]
    else:
        years = pd.to_datetime(df[date_col]).dt.year

    train = df[years < split_year].reset_index(drop=True)
    test = df[years >= split_year].reset_index(drop=True)

    if train.empty or test.empty:
        raise ValueError(
            f"Split at {split_year} leaves an empty side: train={len(train)}, test={len(test)}"
        )

    return train, test
