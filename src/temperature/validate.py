"""
Daily time index integrity report.

Checks (reported, never enforced):
- Uniqueness: no duplicate dates
- Frequency: expected daily index vs observed
- Monotonic: non-decreasing dates
- Values: nulls, min/max
"""

import logging
from dataclasses import dataclass
from typing import List

import pandas as pd

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Results of time index validation"""
    is_valid: bool
    n_rows: int
    n_duplicates: int
    n_missing_days: int
    missing_days: List[pd.Timestamp]
    n_nulls: int
    value_min: float
    value_max: float
    is_monotonic: bool


def validate_time_index(
    df: pd.DataFrame,
    date_col: str = "Date",
    value_col: str = "Temp",
    freq: str = "D",
) -> ValidationResult:
    """
    Validate a single daily series.

    Args:
        df: DataFrame with a date and a value column
        date_col: Name of the datetime column
        value_col: Name of the numeric column
        freq: Expected pandas frequency of the index

    Returns:
        ValidationResult with detailed findings
    """
    if df.empty:
        raise ValueError("Cannot validate an empty frame")

    n_duplicates = int(df.duplicated(subset=[date_col], keep=False).sum())

    # Monotonic check runs on the row order as read
    is_monotonic = bool(df[date_col].is_monotonic_increasing)

    dates = df[date_col].sort_values()
    expected = pd.date_range(start=dates.min(), end=dates.max(), freq=freq)
    missing_days = sorted(set(expected) - set(dates))

    n_nulls = int(df[value_col].isna().sum())

    is_valid = (n_duplicates == 0) and (len(missing_days) == 0) and is_monotonic

    return ValidationResult(
        is_valid=is_valid,
        n_rows=len(df),
        n_duplicates=n_duplicates,
        n_missing_days=len(missing_days),
        missing_days=missing_days[:10],
        n_nulls=n_nulls,
        value_min=float(df[value_col].min()),
        value_max=float(df[value_col].max()),
        is_monotonic=is_monotonic,
    )


def log_validation_report(result: ValidationResult) -> None:
    """Log a human-readable validation report"""
    status = "PASS" if result.is_valid else "WARN"
    logger.info(f"[validate] {status}: {result.n_rows} rows")
    logger.info(f"[validate] duplicates={result.n_duplicates} missing_days={result.n_missing_days}")
    if result.missing_days:
        logger.info(f"[validate] first missing: {[d.date().isoformat() for d in result.missing_days[:5]]}")
    logger.info(f"[validate] nulls={result.n_nulls} range={result.value_min:.1f}..{result.value_max:.1f}")
    logger.info(f"[validate] monotonic={result.is_monotonic}")
