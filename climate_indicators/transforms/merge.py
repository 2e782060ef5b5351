"""
Dataset Merge

Builds the compiled table: a contiguous monthly axis spanning every
source, with each source left-joined onto it by exact date.
"""

import logging
from typing import Mapping, Optional

import pandas as pd

from ..exceptions import MissingSourceError, SchemaError
from ..schemas import (
    ANOMALY,
    DATE,
    ONI_COLUMN,
    RAW_VALUE,
    TEMPERATURE_PREFIXES,
    compiled_columns,
    raw_column,
    temp_column,
)

logger = logging.getLogger(__name__)


def monthly_axis(start, end) -> pd.DataFrame:
    """
    Contiguous month-start axis from start to end inclusive.

    Args:
        start: First month (any date-like)
        end: Last month (any date-like)

    Returns:
        DataFrame with a single 'date' column
    """
    dates = pd.date_range(start=pd.Timestamp(start), end=pd.Timestamp(end), freq="MS")
    return pd.DataFrame({DATE: dates.astype("datetime64[ns]")})


def _join(table: pd.DataFrame, series: pd.DataFrame, columns: Mapping[str, str]) -> pd.DataFrame:
    """Left-join selected series columns onto the table, keeping date order."""
    right = series[[DATE, *columns.keys()]].rename(columns=columns)
    right = right.assign(**{DATE: right[DATE].astype("datetime64[ns]")})
    merged = table.merge(right, on=DATE, how="left", validate="one_to_one")
    return merged.sort_values(DATE, kind="stable").reset_index(drop=True)


def merge_datasets(
    temperatures: Mapping[str, Optional[pd.DataFrame]],
    oni: Optional[pd.DataFrame],
) -> pd.DataFrame:
    """
    Merge the four temperature series and ONI into the compiled table.

    Args:
        temperatures: Mapping of column prefix (HadCRUT, GISTEMP, NOAA,
            Berkeley) to MonthlySeries with 'raw_value' and 'anomaly'
        oni: ONI MonthlySeries with 'anomaly'

    Returns:
        CompiledTable with a 'Date' column followed by the source columns

    Raises:
        MissingSourceError: If any source is absent
        SchemaError: If a source lacks the expected columns
    """
    missing = [p for p in TEMPERATURE_PREFIXES if temperatures.get(p) is None]
    if oni is None:
        missing.append("ONI")
    if missing:
        raise MissingSourceError(f"Cannot merge without sources: {missing}")

    inputs = [temperatures[p] for p in TEMPERATURE_PREFIXES] + [oni]
    for prefix, series in zip(TEMPERATURE_PREFIXES + ["ONI"], inputs):
        needed = [DATE, ANOMALY] if prefix == "ONI" else [DATE, RAW_VALUE, ANOMALY]
        absent = [c for c in needed if c not in series.columns]
        if absent:
            raise SchemaError(f"{prefix}: missing columns {absent} for merge")

    non_empty = [s for s in inputs if len(s) > 0]
    if not non_empty:
        raise SchemaError("All sources are empty")

    min_date = min(s[DATE].min() for s in non_empty)
    max_date = max(s[DATE].max() for s in non_empty)
    logger.info(f"Compiled axis: {min_date.date()} to {max_date.date()}")

    table = monthly_axis(min_date, max_date)
    for prefix in TEMPERATURE_PREFIXES:
        table = _join(table, temperatures[prefix], {
            RAW_VALUE: raw_column(prefix),
            ANOMALY: temp_column(prefix),
        })
    table = _join(table, oni, {ANOMALY: ONI_COLUMN})

    table = table.rename(columns={DATE: "Date"})
    logger.info(f"Compiled table: {len(table)} rows x {len(table.columns)} columns")
    return table[compiled_columns()]
