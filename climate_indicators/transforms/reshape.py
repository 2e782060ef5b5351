"""
Wide-to-Long Reshaping

Converts a table with one row per year and one column per month into a
flat monthly sequence, row-major. The final row is usually a partial
year: only its leading non-missing values are kept.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from . import BaseTransform
from ..exceptions import SchemaError

logger = logging.getLogger(__name__)

MONTH_COLUMNS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                 "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


class WideToLongReshaper(BaseTransform):
    """
    Flatten year-by-month tables.

    Output length is (rows - 1) * 12 + count_non_missing(last_row).
    Missing values inside earlier rows are kept as NaN.
    """

    def __init__(self, value_columns: Optional[Sequence[str]] = None):
        """
        Initialize reshaper.

        Args:
            value_columns: Month columns in calendar order (default Jan..Dec)
        """
        super().__init__()
        self._transform_name = "wide_to_long"
        self.value_columns: List[str] = list(value_columns or MONTH_COLUMNS)

    def transform(self, data: pd.DataFrame, **kwargs) -> np.ndarray:
        """
        Reshape a wide table to a flat array of monthly values.

        Args:
            data: Table with one row per year

        Returns:
            1-D float array, one entry per month

        Raises:
            SchemaError: If any month column is missing
        """
        missing = [c for c in self.value_columns if c not in data.columns]
        if missing:
            raise SchemaError(f"Wide table is missing month columns: {missing}")

        if len(data) == 0:
            return np.array([], dtype=float)

        try:
            values = data[self.value_columns].apply(pd.to_numeric)
        except (ValueError, TypeError) as e:
            raise SchemaError(f"Non-numeric value in wide table: {e}") from e
        values = values.to_numpy(dtype=float)

        head = values[:-1].ravel()
        last = values[-1]
        keep = int(np.count_nonzero(~np.isnan(last)))

        result = np.concatenate([head, last[:keep]])
        logger.debug(f"Reshaped {len(values)} rows into {len(result)} monthly values")
        return result


def wide_to_long(
    data: pd.DataFrame,
    value_columns: Optional[Sequence[str]] = None,
) -> np.ndarray:
    """Functional wrapper around WideToLongReshaper."""
    return WideToLongReshaper(value_columns).transform(data)
