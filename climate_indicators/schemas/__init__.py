"""
Climate Indicators Schemas - Canonical Table Layouts

Column names for the in-memory monthly series, the on-disk file headers
and the compiled table, plus validation of the monthly series invariants.
"""

import logging
from typing import List, Optional

import numpy as np
import pandas as pd

from ..exceptions import SchemaError

logger = logging.getLogger(__name__)

__all__ = [
    "DATE",
    "RAW_VALUE",
    "ANOMALY",
    "TEMPERATURE_FILE_COLUMNS",
    "ONI_FILE_COLUMNS",
    "TEMPERATURE_PREFIXES",
    "ONI_COLUMN",
    "as_dates",
    "compiled_columns",
    "raw_column",
    "temp_column",
    "make_monthly_series",
    "validate_monthly_series",
]

# In-memory MonthlySeries columns
DATE = "date"
RAW_VALUE = "raw_value"
ANOMALY = "anomaly"

# Per-source file headers
TEMPERATURE_FILE_COLUMNS = ["Date", "RawTemperature", "Temp"]
ONI_FILE_COLUMNS = ["Date", "Anom"]

# Compiled table, in column order
TEMPERATURE_PREFIXES = ["HadCRUT", "GISTEMP", "NOAA", "Berkeley"]
ONI_COLUMN = "ONI_Anomaly"


def raw_column(prefix: str) -> str:
    return f"{prefix}_RawTemperature"


def temp_column(prefix: str) -> str:
    return f"{prefix}_Temp"


def compiled_columns() -> List[str]:
    """Return the compiled table's columns in file order."""
    columns = ["Date"]
    for prefix in TEMPERATURE_PREFIXES:
        columns.extend([raw_column(prefix), temp_column(prefix)])
    columns.append(ONI_COLUMN)
    return columns


def as_dates(values) -> pd.Series:
    """Convert date-like values to a datetime64[ns] Series."""
    return pd.Series(pd.to_datetime(list(values))).astype("datetime64[ns]")


def make_monthly_series(
    dates,
    values,
    value_column: str = RAW_VALUE,
) -> pd.DataFrame:
    """
    Build a MonthlySeries frame from parallel date and value sequences.

    Args:
        dates: Sequence of first-of-month dates
        values: Sequence of floats (NaN marks absent)
        value_column: Column to hold the values (raw_value or anomaly)

    Returns:
        DataFrame with 'date' and the value column
    """
    return pd.DataFrame({
        DATE: as_dates(dates),
        value_column: np.asarray(values, dtype=float),
    })


def validate_monthly_series(
    series: pd.DataFrame,
    name: str = "series",
    required: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Check the MonthlySeries invariants.

    Dates must be first-of-month, unique and strictly increasing. Gaps
    between months are allowed.

    Args:
        series: Frame to validate
        name: Source name used in error messages
        required: Columns that must be present (default: date only)

    Returns:
        The same frame, for chaining

    Raises:
        SchemaError: If any invariant is violated
    """
    required = required or [DATE]
    missing = [c for c in required if c not in series.columns]
    if missing:
        raise SchemaError(f"{name}: missing columns {missing}")

    dates = series[DATE]
    if not pd.api.types.is_datetime64_any_dtype(dates):
        raise SchemaError(f"{name}: '{DATE}' column is not datetime")
    if dates.isna().any():
        raise SchemaError(f"{name}: contains missing dates")
    if len(dates) == 0:
        return series

    if not (dates.dt.day == 1).all():
        raise SchemaError(f"{name}: dates must fall on the first of the month")

    if dates.duplicated().any():
        dup = dates[dates.duplicated()].iloc[0]
        raise SchemaError(f"{name}: duplicate date {dup.date()}")

    if not dates.is_monotonic_increasing:
        raise SchemaError(f"{name}: dates are not strictly increasing")

    return series
