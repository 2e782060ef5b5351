"""
NOAAGlobalTemp Source Handler

NCEI NOAA Global Surface Temperature v6, global land-ocean average.

The ASCII series has one row per month: year, month, anomaly, followed by
error-variance and diagnostic columns that are not used. Columns are
separated by variable runs of spaces.

NCEI publishes the series under a new file name for every monthly build
(...v6.0.0.YYYYMM.asc). When the URL is the timeseries directory, the
handler reads its listing and downloads the newest build.
"""

import logging
import re

import pandas as pd

from .base import (
    BaseClimateSource,
    SourceFormat,
    decode,
    read_delimited,
    to_float,
    year_month_dates,
)
from ..exceptions import SchemaError
from ..schemas import DATE, RAW_VALUE

logger = logging.getLogger(__name__)


class NOAASource(BaseClimateSource):
    """NOAAGlobalTemp monthly anomalies."""

    source_name = "noaa"
    column_prefix = "NOAA"
    description = "NOAAGlobalTemp v6 global land-ocean temperature anomaly"
    default_url = (
        "https://www.ncei.noaa.gov/data/noaa-global-surface-temperature/v6/"
        "access/timeseries/"
    )

    BUILD_FILE = re.compile(r"aravg\.mon\.land_ocean\.90S\.90N\.v6\.0\.0\.(\d{6})\.asc")

    FORMAT = SourceFormat(
        columns={"year": 0, "month": 1, RAW_VALUE: 2},
        na_values=("NaN",),
    )

    def resolve_url(self, fetcher) -> str:
        """Pick the newest monthly build when pointed at the directory."""
        if not self.url.endswith("/"):
            return self.url

        listing = decode(fetcher.fetch(self.url))
        builds = {m.group(1): m.group(0) for m in self.BUILD_FILE.finditer(listing)}
        if not builds:
            raise SchemaError(f"noaa: no land_ocean series listed at {self.url}")

        latest = max(builds)
        logger.info(f"noaa: using build {latest}")
        return self.url + builds[latest]

    def _parse_text(self, text: str) -> pd.DataFrame:
        table = read_delimited(text, self.FORMAT)
        return pd.DataFrame({
            DATE: year_month_dates(table["year"], table["month"]),
            RAW_VALUE: to_float(table[RAW_VALUE], RAW_VALUE),
        })
