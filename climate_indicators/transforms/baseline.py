"""
Baseline Anomaly Transforms

Computes the mean of a series over a fixed reference window and
subtracts it, producing anomalies relative to the preindustrial level.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from . import BaseTransform
from ..exceptions import BaselineUndefinedError, SchemaError
from ..schemas import ANOMALY, DATE, RAW_VALUE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BaselineWindow:
    """Half-open reference window [start, end)."""

    start: pd.Timestamp
    end: pd.Timestamp

    @classmethod
    def from_strings(cls, start: str, end: str) -> "BaselineWindow":
        return cls(pd.Timestamp(start), pd.Timestamp(end))

    def contains(self, dates: pd.Series) -> pd.Series:
        """Boolean mask of dates inside the window."""
        return (dates >= self.start) & (dates < self.end)

    def __str__(self) -> str:
        return f"[{self.start.date()}, {self.end.date()})"


BASELINE_WINDOW = BaselineWindow.from_strings("1850-01-01", "1900-01-01")


def compute_baseline(
    series: pd.DataFrame,
    window: BaselineWindow = BASELINE_WINDOW,
) -> float:
    """
    Mean raw value over the reference window.

    Args:
        series: MonthlySeries with 'date' and 'raw_value'
        window: Reference window

    Returns:
        Arithmetic mean of raw values whose date falls in the window

    Raises:
        BaselineUndefinedError: If the window holds no values
    """
    for column in (DATE, RAW_VALUE):
        if column not in series.columns:
            raise SchemaError(f"Baseline needs a '{column}' column")

    in_window = series.loc[window.contains(series[DATE]), RAW_VALUE].dropna()
    if in_window.empty:
        raise BaselineUndefinedError(f"No data in baseline window {window}")

    return float(in_window.mean())


def apply_baseline(
    series: pd.DataFrame,
    window: BaselineWindow = BASELINE_WINDOW,
    name: str = "series",
) -> pd.DataFrame:
    """
    Return a copy of the series with an 'anomaly' column added.

    anomaly = raw_value - baseline; missing raw values stay missing.
    """
    baseline = compute_baseline(series, window)
    logger.info(f"{name}: baseline over {window} = {baseline:.4f}")
    return series.assign(**{ANOMALY: series[RAW_VALUE] - baseline})


class BaselineAnomaly(BaseTransform):
    """
    Baseline anomaly transform.

    Remembers the baseline computed on the last call.
    """

    def __init__(self, window: Optional[BaselineWindow] = None):
        """
        Initialize baseline transform.

        Args:
            window: Reference window (default 1850-01-01 to 1900-01-01)
        """
        super().__init__()
        self._transform_name = "baseline_anomaly"
        self.window = window or BASELINE_WINDOW
        self.baseline: Optional[float] = None

    def transform(self, data: pd.DataFrame, **kwargs) -> pd.DataFrame:
        self.baseline = compute_baseline(data, self.window)
        return data.assign(**{ANOMALY: data[RAW_VALUE] - self.baseline})
