"""
Load and clean the daily minimum temperature CSV.

Steps:
1. Read the raw CSV
2. Glimpse names and dtypes
3. Rename to Date / Temp and coerce types
4. Report NA values
5. Drop rows with missing temperature
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

from .config import TemperatureConfig

logger = logging.getLogger(__name__)


def read_raw(path: Union[str, Path]) -> pd.DataFrame:
    """Read the raw two-column CSV without any type coercion."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Temperature CSV not found: {path}")

    df = pd.read_csv(path, dtype=str, skip_blank_lines=True)
    logger.info(f"[load] read {len(df)} rows, {df.shape[1]} columns from {path}")
    return df


def glimpse(df: pd.DataFrame, n_values: int = 5) -> pd.DataFrame:
    """
    One row per column: dtype, non-null count and the first few values.
    """
    rows = []
    for col in df.columns:
        head = df[col].head(n_values).tolist()
        rows.append({
            "column": col,
            "dtype": str(df[col].dtype),
            "non_null": int(df[col].notna().sum()),
            "values": ", ".join(str(v) for v in head),
        })

    result = pd.DataFrame(rows)
    logger.info(f"[load] glimpse: {len(df)} rows x {df.shape[1]} columns")
    for row in rows:
        logger.debug(f"  {row['column']} <{row['dtype']}> {row['values']}")
    return result


def normalize_columns(df: pd.DataFrame, config: TemperatureConfig) -> pd.DataFrame:
    """
    Rename to canonical columns and coerce their types.

    Dates are parsed with errors="raise" so malformed dates fail loudly.
    Temperatures are coerced: anything non-numeric becomes NaN and is left
    for drop_missing().

    Args:
        df: Raw DataFrame from read_raw
        config: Pipeline configuration (column names, date format)

    Returns:
        DataFrame with columns [Date, Temp]
    """
    if df.shape[1] != 2:
        raise ValueError(
            f"Expected 2 columns (date, temperature), got {df.shape[1]}: {df.columns.tolist()}"
        )

    df = df.copy()
    df.columns = [config.date_col, config.value_col]

    df[config.date_col] = pd.to_datetime(
        df[config.date_col],
        format=config.date_format,
        errors="raise",
    )

    values = df[config.value_col]
    if not pd.api.types.is_numeric_dtype(values):
        values = values.map(lambda v: v.strip() if isinstance(v, str) else v)
    df[config.value_col] = pd.to_numeric(values, errors="coerce").astype(float)

    n_coerced = int(df[config.value_col].isna().sum())
    if n_coerced:
        logger.warning(f"[load] {n_coerced} temperature values are missing or non-numeric")

    return df


def summarize(df: pd.DataFrame) -> pd.DataFrame:
    """
    Column profile in the spirit of skim(): type, missingness and
    distribution stats for numeric and datetime columns.
    """
    rows = []
    n = len(df)

    for col in df.columns:
        s = df[col]
        n_missing = int(s.isna().sum())
        row = {
            "column": col,
            "type": str(s.dtype),
            "n_missing": n_missing,
            "complete_rate": (n - n_missing) / n if n else np.nan,
        }

        if pd.api.types.is_numeric_dtype(s) and not pd.api.types.is_bool_dtype(s):
            q = s.quantile([0.0, 0.25, 0.5, 0.75, 1.0])
            row.update({
                "mean": s.mean(),
                "sd": s.std(),
                "p0": q.iloc[0],
                "p25": q.iloc[1],
                "p50": q.iloc[2],
                "p75": q.iloc[3],
                "p100": q.iloc[4],
            })
        elif pd.api.types.is_datetime64_any_dtype(s):
            row.update({
                "min": s.min(),
                "max": s.max(),
                "n_unique": int(s.nunique()),
            })
        else:
            row["n_unique"] = int(s.nunique())

        rows.append(row)

    return pd.DataFrame(rows)


def missing_report(df: pd.DataFrame) -> pd.DataFrame:
    """NA count and percentage per column, most missing first."""
    counts = df.isna().sum()
    report = pd.DataFrame({
        "column": counts.index,
        "cnt": counts.values.astype(int),
        "pcnt": (100 * counts.values / len(df)) if len(df) else np.nan,
    })
    return report.sort_values("cnt", ascending=False).reset_index(drop=True)


def incomplete_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Rows with at least one NA value."""
    return df[df.isna().any(axis=1)]


def drop_missing(df: pd.DataFrame, value_col: str = "Temp") -> pd.DataFrame:
    """Drop rows whose temperature is NA. The only cleaning step."""
    before = len(df)
    cleaned = df[df[value_col].notna()].reset_index(drop=True)
    dropped = before - len(cleaned)
    logger.info(f"[clean] dropped {dropped} rows with missing {value_col}, {len(cleaned)} remain")
    return cleaned


def load_temperature_data(config: TemperatureConfig) -> pd.DataFrame:
    """
    Full load path: read -> glimpse -> normalize -> NA report -> incomplete
    rows -> drop NA.
    """
    raw = read_raw(config.data_file())
    glimpse(raw)

    df = normalize_columns(raw, config)

    na = missing_report(df)
    for row in na.itertuples(index=False):
        if row.cnt:
            logger.info(f"[clean] {row.column}: {row.cnt} NA ({row.pcnt:.2f}%)")

    incomplete = incomplete_rows(df)
    if len(incomplete):
        dates = [d.date().isoformat() for d in incomplete[config.date_col].head(5)]
        logger.info(f"[clean] {len(incomplete)} incomplete rows, first dates: {dates}")

    df = drop_missing(df, value_col=config.value_col)

    profile = summarize(df).set_index("column")
    if config.value_col in profile.index:
        stats = profile.loc[config.value_col]
        logger.info(
            f"[clean] {config.value_col}: mean={stats['mean']:.2f} sd={stats['sd']:.2f} "
            f"min={stats['p0']:.1f} max={stats['p100']:.1f}"
        )
    return df
