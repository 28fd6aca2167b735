# file: src/temperature/diagnostics.py
"""
Exploratory diagnostics for the daily temperature series.

1. Anomaly diagnostics - STL decomposition + IQR limits on the remainder
2. Seasonal diagnostics - value distribution per calendar feature
3. ACF / PACF diagnostics - autocorrelation up to one year of lags

Each function returns a tidy DataFrame; plots.py turns them into charts.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from .features import augment_timeseries_signature

logger = logging.getLogger(__name__)

SEASONAL_FEATURES = ("wday_lbl", "week", "month_lbl", "quarter", "year")


def iqr_limits(
    remainder: np.ndarray,
    alpha: float = 0.05,
    max_anomalies: float = 0.2,
) -> Tuple[np.ndarray, float, float]:
    """
    Flag outliers in a remainder series with the IQR method.

    limits = [Q1, Q3] -/+ (0.15 / alpha) * IQR. When more than
    max_anomalies * n points fall outside, only the ones furthest from
    the centre of the limits are kept.

    Returns:
        (is_anomaly mask, lower limit, upper limit)
    """
    if not 0 < alpha < 1:
        raise ValueError(f"alpha must be in (0, 1), got {alpha}")
    if not 0 < max_anomalies <= 1:
        raise ValueError(f"max_anomalies must be in (0, 1], got {max_anomalies}")

    x = np.asarray(remainder, dtype=float)
    q1, q3 = np.nanquantile(x, [0.25, 0.75])
    iq_range = q3 - q1
    lower = q1 - (0.15 / alpha) * iq_range
    upper = q3 + (0.15 / alpha) * iq_range

    outside = (x < lower) | (x > upper)

    centerline = (lower + upper) / 2
    distance = np.abs(x - centerline)
    distance[~np.isfinite(distance)] = -np.inf
    max_count = int(max_anomalies * len(x))

    # Rank by distance from the centre, largest first
    order = np.argsort(-distance, kind="stable")
    within_budget = np.zeros(len(x), dtype=bool)
    within_budget[order[:max_count]] = True

    return outside & within_budget, float(lower), float(upper)


def anomaly_diagnostics(
    df: pd.DataFrame,
    date_col: str = "Date",
    value_col: str = "Temp",
    alpha: float = 0.05,
    max_anomalies: float = 0.07,
    period: int = 7,
    trend: int = 91,
    seasonal: Optional[int] = None,
) -> pd.DataFrame:
    """
    Decompose the series with STL and flag remainder anomalies.

    Args:
        df: Clean frame with date and value columns
        alpha: Width control for the IQR limits (smaller -> wider)
        max_anomalies: Upper bound on the share of points flagged
        period: Seasonal period in observations
        trend: Trend smoother window (forced odd)
        seasonal: Seasonal smoother window (forced odd). None means a
            periodic seasonal: a window spanning the whole series with a
            degree-0 smoother, so each cycle position is near constant.

    Returns:
        DataFrame with observed, season, trend, remainder, seasadj,
        remainder_l1, remainder_l2, anomaly, recomposed_l1, recomposed_l2
    """
    from statsmodels.tsa.seasonal import STL

    if len(df) < 2 * period:
        raise ValueError(f"Need at least {2 * period} rows for STL, got {len(df)}")

    data = df[[date_col, value_col]].sort_values(date_col).reset_index(drop=True)

    if trend % 2 == 0:
        trend += 1
    if trend <= period:
        trend = period + 2 if period % 2 == 1 else period + 1

    observed = data[value_col].astype(float).to_numpy()
    if seasonal is None:
        seasonal, seasonal_deg = 10 * len(observed) + 1, 0
    else:
        seasonal, seasonal_deg = max(seasonal | 1, 3), 1

    result = STL(
        observed,
        period=period,
        seasonal=seasonal,
        trend=trend,
        seasonal_deg=seasonal_deg,
        robust=True,
    ).fit()

    season = np.asarray(result.seasonal)
    trend_component = np.asarray(result.trend)
    remainder = np.asarray(result.resid)

    is_anomaly, lower, upper = iqr_limits(remainder, alpha=alpha, max_anomalies=max_anomalies)

    out = pd.DataFrame({
        date_col: data[date_col].values,
        "observed": observed,
        "season": season,
        "trend": trend_component,
        "remainder": remainder,
        "seasadj": observed - season,
        "remainder_l1": lower,
        "remainder_l2": upper,
        "anomaly": np.where(is_anomaly, "Yes", "No"),
    })
    out["recomposed_l1"] = out["season"] + out["trend"] + out["remainder_l1"]
    out["recomposed_l2"] = out["season"] + out["trend"] + out["remainder_l2"]

    logger.info(f"[diagnostics] anomalies flagged: {int(is_anomaly.sum())} of {len(out)}")
    return out


def seasonal_diagnostics(
    df: pd.DataFrame,
    date_col: str = "Date",
    value_col: str = "Temp",
    features: Iterable[str] = SEASONAL_FEATURES,
) -> pd.DataFrame:
    """
    Long table of (feature, value) groups for seasonal box plots.

    Returns:
        DataFrame with columns [Date, Temp, feature, value] where value is
        the group label as a string
    """
    features = list(features)
    signature = augment_timeseries_signature(df[[date_col, value_col]], date_col=date_col)

    missing = [f for f in features if f not in signature.columns]
    if missing:
        raise ValueError(f"Unknown seasonal features: {missing}")

    frames = []
    for feature in features:
        frames.append(pd.DataFrame({
            date_col: signature[date_col].values,
            value_col: signature[value_col].values,
            "feature": feature,
            "value": signature[feature].astype(str).values,
        }))

    return pd.concat(frames, ignore_index=True)


def acf_diagnostics(
    df: pd.DataFrame,
    value_col: str = "Temp",
    lags: int = 365,
) -> pd.DataFrame:
    """
    ACF and PACF for lags 1..lags.

    PACF is only defined for lags below half the sample size; longer lags
    are NaN. The white-noise band is +/- 1.96 / sqrt(n).
    """
    from statsmodels.tsa.stattools import acf, pacf

    x = df[value_col].astype(float).to_numpy()
    n = len(x)
    if n < 4:
        raise ValueError(f"Need at least 4 observations for ACF/PACF, got {n}")
    if lags < 1:
        raise ValueError(f"lags must be positive, got {lags}")

    acf_lags = min(lags, n - 1)
    pacf_lags = min(lags, n // 2 - 1)

    acf_vals = acf(x, nlags=acf_lags, fft=True)
    pacf_vals = pacf(x, nlags=pacf_lags)

    lag_index = np.arange(1, lags + 1)
    acf_col = np.full(lags, np.nan)
    pacf_col = np.full(lags, np.nan)
    acf_col[:acf_lags] = acf_vals[1:acf_lags + 1]
    pacf_col[:pacf_lags] = pacf_vals[1:pacf_lags + 1]

    bound = 1.96 / np.sqrt(n)
    return pd.DataFrame({
        "lag": lag_index,
        "acf": acf_col,
        "pacf": pacf_col,
        "white_noise_upper": bound,
        "white_noise_lower": -bound,
    })
