"""
Berkeley Earth Source Handler

Berkeley Earth Land + Ocean global monthly series.

Lines starting with '%' are commentary. Each data row holds year, month,
monthly anomaly and uncertainty, then annual, five-, ten- and twenty-year
aggregates with their uncertainties; only the monthly anomaly is kept.

The published file contains two tables with the same dates: the first
uses air temperature over sea ice, the second water temperature under
sea ice. The first occurrence of each month is kept.
"""

import logging

import pandas as pd

from .base import BaseClimateSource, SourceFormat, read_delimited, to_float, year_month_dates
from ..schemas import DATE, RAW_VALUE

logger = logging.getLogger(__name__)


class BerkeleySource(BaseClimateSource):
    """Berkeley Earth monthly anomalies (air temperature over sea ice)."""

    source_name = "berkeley"
    column_prefix = "Berkeley"
    description = "Berkeley Earth Land + Ocean temperature anomaly"
    default_url = (
        "https://berkeley-earth-temperature.s3.us-west-1.amazonaws.com/"
        "Global/Land_and_Ocean_complete.txt"
    )

    MISSING_TOKEN = "NaN"

    FORMAT = SourceFormat(
        comment="%",
        columns={"year": 0, "month": 1, RAW_VALUE: 2},
        na_values=(MISSING_TOKEN,),
        expected_fields=12,
    )

    def _parse_text(self, text: str) -> pd.DataFrame:
        table = read_delimited(text, self.FORMAT)
        series = pd.DataFrame({
            DATE: year_month_dates(table["year"], table["month"]),
            RAW_VALUE: to_float(table[RAW_VALUE], RAW_VALUE),
        })

        repeated = series[DATE].duplicated(keep="first")
        if repeated.any():
            logger.info(f"berkeley: dropping {int(repeated.sum())} rows of the second table")
            series = series[~repeated].reset_index(drop=True)
        return series
