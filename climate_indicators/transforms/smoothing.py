"""
Running Mean Transform

Centred running mean of a monthly series on its calendar axis. Months
missing from the series break the window rather than being skipped, so a
value is only produced where every month of its window is present.
"""

import logging

import pandas as pd

from . import BaseTransform
from ..exceptions import SchemaError
from ..schemas import ANOMALY, DATE

logger = logging.getLogger(__name__)

DEFAULT_MONTHS = 3


def running_mean(
    series: pd.DataFrame,
    column: str = ANOMALY,
    months: int = DEFAULT_MONTHS,
) -> pd.DataFrame:
    """
    Return a copy of the series with `column` replaced by its centred running mean.

    Args:
        series: MonthlySeries with unique, increasing first-of-month dates
        column: Value column to smooth
        months: Window length; must be odd so the window is centred

    Returns:
        New frame with the same dates. Months whose window is incomplete
        (series edges, gaps, missing values) are NaN.
    """
    if months < 1 or months % 2 == 0:
        raise ValueError(f"Running mean window must be a positive odd number, got {months}")
    for name in (DATE, column):
        if name not in series.columns:
            raise SchemaError(f"Running mean needs a '{name}' column")

    if series.empty or months == 1:
        return series.copy()

    values = series.set_index(DATE)[column].astype(float).asfreq("MS")
    smoothed = values.rolling(months, center=True, min_periods=months).mean()
    return series.assign(**{column: smoothed.reindex(series[DATE]).to_numpy()})


class RunningMean(BaseTransform):
    """Centred running-mean transform."""

    def __init__(self, months: int = DEFAULT_MONTHS, column: str = ANOMALY):
        super().__init__()
        self._transform_name = "running_mean"
        self.months = months
        self.column = column

    def transform(self, data: pd.DataFrame, **kwargs) -> pd.DataFrame:
        return running_mean(data, self.column, self.months)
