"""
Oceanic Nino Index Source Handler

CPC monthly Nino-region SST table. One header line, then one row per
month: year, month and pairs of (total, anomaly) per Nino region. The
anomalies are relative to the fixed (not shifting) 1991-2020 base period.

The ONI is the 3-month running mean of the Nino-3.4 anomaly, centred on
each month. It is used as computed, with no baseline step. The first and
last month of the record, and months next to a gap, have no complete
window and are left missing.
"""

from typing import Optional

import pandas as pd

from .base import BaseClimateSource, SourceFormat, read_delimited, to_float, year_month_dates
from ..exceptions import ConfigError
from ..schemas import ANOMALY, DATE, validate_monthly_series
from ..transforms.smoothing import running_mean


class ONISource(BaseClimateSource):
    """3-month running mean Nino-3.4 anomaly used for ENSO classification."""

    source_name = "oni"
    column_prefix = "ONI"
    description = "Oceanic Nino Index, 3-month running mean on a fixed 1991-2020 base"
    default_url = "https://www.cpc.ncep.noaa.gov/data/indices/ersst5.nino.mth.91-20.ascii"

    has_baseline = False

    # Last column of the table: NINO3.4 ANOM
    DEFAULT_ANOMALY_COLUMN = -1
    DEFAULT_RUNNING_MONTHS = 3
    MISSING_TOKEN = "-99.99"

    def __init__(
        self,
        url: Optional[str] = None,
        anomaly_column: Optional[int] = None,
        running_months: Optional[int] = None,
    ):
        """
        Initialize ONI source handler.

        Args:
            url: Download URL
            anomaly_column: Position of the monthly anomaly field (negative
                counts from the end of the row)
            running_months: Length of the centred running mean
        """
        super().__init__(url)
        column = self.DEFAULT_ANOMALY_COLUMN if anomaly_column is None else anomaly_column
        if not isinstance(column, int):
            raise ConfigError(f"ONI anomaly column must be a position, got {column!r}")
        self.running_months = running_months or self.DEFAULT_RUNNING_MONTHS
        if self.running_months < 1 or self.running_months % 2 == 0:
            raise ConfigError(
                f"ONI running mean must span an odd number of months, got {self.running_months}"
            )
        self.FORMAT = SourceFormat(
            header=True,
            columns={"year": 0, "month": 1, ANOMALY: column},
            na_values=("NaN", self.MISSING_TOKEN),
        )

    def _parse_text(self, text: str) -> pd.DataFrame:
        table = read_delimited(text, self.FORMAT)
        monthly = pd.DataFrame({
            DATE: year_month_dates(table["year"], table["month"]),
            ANOMALY: to_float(table[ANOMALY], ANOMALY),
        })
        validate_monthly_series(monthly, self.source_name, [DATE, ANOMALY])
        return running_mean(monthly, ANOMALY, self.running_months)
