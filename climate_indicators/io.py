"""
Tabular I/O for canonical series and the compiled table.

File layouts:
    temperature source:  Date,RawTemperature,Temp
    ONI source:          Date,Anom
    compiled table:      Date,HadCRUT_RawTemperature,...,ONI_Anomaly
    episodes:            Label,StartDate,EndDate,Months

Dates are written as YYYY-MM-DD. Existing files are overwritten.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from .exceptions import SchemaError
from .indicators.enso import EpisodeRun
from .schemas import (
    ANOMALY,
    DATE,
    ONI_FILE_COLUMNS,
    RAW_VALUE,
    TEMPERATURE_FILE_COLUMNS,
    compiled_columns,
    validate_monthly_series,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DATE_FORMAT = "%Y-%m-%d"
EPISODE_FILE_COLUMNS = ["Label", "StartDate", "EndDate", "Months"]


def _write(path: PathLike, table: pd.DataFrame, float_format: Optional[str]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(path, index=False, date_format=DATE_FORMAT, float_format=float_format)
    logger.info(f"Wrote {len(table)} rows to {path}")
    return path


def _read(path: PathLike, expected: List[str]) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Table not found: {path}")

    table = pd.read_csv(path)
    if list(table.columns) != expected:
        raise SchemaError(f"{path}: expected columns {expected}, got {list(table.columns)}")

    try:
        dates = pd.to_datetime(table["Date"], format=DATE_FORMAT)
    except (ValueError, TypeError) as e:
        raise SchemaError(f"{path}: bad Date value: {e}") from e
    return table.assign(Date=dates.astype("datetime64[ns]"))


def write_series(path: PathLike, series: pd.DataFrame,
                 float_format: Optional[str] = None) -> Path:
    """Write a temperature MonthlySeries as Date,RawTemperature,Temp."""
    table = series[[DATE, RAW_VALUE, ANOMALY]].copy()
    table.columns = TEMPERATURE_FILE_COLUMNS
    return _write(path, table, float_format)


def read_series(path: PathLike) -> pd.DataFrame:
    """Read a temperature file back into a MonthlySeries."""
    table = _read(path, TEMPERATURE_FILE_COLUMNS)
    series = table.rename(columns=dict(zip(TEMPERATURE_FILE_COLUMNS, [DATE, RAW_VALUE, ANOMALY])))
    return validate_monthly_series(series, str(path), [DATE, RAW_VALUE, ANOMALY])


def write_oni(path: PathLike, series: pd.DataFrame,
              float_format: Optional[str] = None) -> Path:
    """Write the ONI MonthlySeries as Date,Anom."""
    table = series[[DATE, ANOMALY]].copy()
    table.columns = ONI_FILE_COLUMNS
    return _write(path, table, float_format)


def read_oni(path: PathLike) -> pd.DataFrame:
    """Read an ONI file back into a MonthlySeries."""
    table = _read(path, ONI_FILE_COLUMNS)
    series = table.rename(columns=dict(zip(ONI_FILE_COLUMNS, [DATE, ANOMALY])))
    return validate_monthly_series(series, str(path), [DATE, ANOMALY])


def write_compiled(path: PathLike, table: pd.DataFrame,
                   float_format: Optional[str] = None) -> Path:
    """Write the compiled table in canonical column order."""
    return _write(path, table[compiled_columns()], float_format)


def read_compiled(path: PathLike) -> pd.DataFrame:
    """Read a compiled table, checking its header."""
    return _read(path, compiled_columns())


def write_episodes(path: PathLike, episodes: List[EpisodeRun]) -> Path:
    """Write the episode list as Label,StartDate,EndDate,Months."""
    table = pd.DataFrame(
        [[e.label.value, e.start_date, e.end_date, e.length] for e in episodes],
        columns=EPISODE_FILE_COLUMNS,
    )
    return _write(path, table, None)
