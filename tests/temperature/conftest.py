"""Shared synthetic data for the temperature tests."""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest


def make_daily_temperatures(start="1988-01-01", end="1990-12-31", seed=42) -> pd.DataFrame:
    """Yearly cycle + weekly wiggle + noise, shaped like the Melbourne data."""
    rng = np.random.default_rng(seed)
    dates = pd.date_range(start, end, freq="D")
    t = np.arange(len(dates))
    temp = (
        11.0
        + 4.0 * np.cos(2 * np.pi * (dates.dayofyear.values - 15) / 365.25)
        + 0.5 * np.sin(2 * np.pi * t / 7)
        + rng.normal(0, 1.0, len(dates))
    )
    return pd.DataFrame({"Date": dates, "Temp": np.round(temp, 1)})


def write_raw_csv(df: pd.DataFrame, path: Path, bad_values=()) -> Path:
    """Write the two-column CSV with m/d/Y dates and the published header."""
    raw = pd.DataFrame({
        "Date": df["Date"].dt.strftime("%m/%d/%Y"),
        "Daily minimum temperatures": df["Temp"].astype(str),
    })
    for idx, value in bad_values:
        raw.iloc[idx, 1] = value
    raw.to_csv(path, index=False)
    return path


@pytest.fixture
def daily_df() -> pd.DataFrame:
    return make_daily_temperatures()


@pytest.fixture
def raw_csv(tmp_path, daily_df) -> Path:
    return write_raw_csv(
        daily_df,
        tmp_path / "temperatures.csv",
        bad_values=[(10, "?0.2"), (200, "")],
    )
