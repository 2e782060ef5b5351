"""
NASA GISTEMP Source Handler

GISS Surface Temperature Analysis v4, Land-Ocean Temperature Index.

The CSV is wide: one metadata line, then a header with Year, Jan..Dec and
seasonal/annual aggregates, one row per year. Months not yet published
are marked '***'. Coverage starts in 1880, so the baseline is only the
1880-1899 part of the preindustrial window.
"""

from typing import Optional

import pandas as pd

from .base import BaseClimateSource, SourceFormat, read_delimited
from ..exceptions import SchemaError
from ..schemas import DATE, RAW_VALUE
from ..transforms.baseline import BaselineWindow
from ..transforms.reshape import MONTH_COLUMNS, wide_to_long


class GISTEMPSource(BaseClimateSource):
    """NASA GISS global monthly anomalies."""

    source_name = "gistemp"
    column_prefix = "GISTEMP"
    description = "NASA GISTEMP v4 Land-Ocean Temperature Index"
    default_url = "https://data.giss.nasa.gov/gistemp/tabledata_v4/GLB.Ts+dSST.csv"

    DEFAULT_START = "1880-01-01"
    MISSING_TOKEN = "***"

    FORMAT = SourceFormat(
        delimiter=",",
        skip_rows=1,
        header=True,
        na_values=(MISSING_TOKEN,),
    )

    def __init__(
        self,
        url: Optional[str] = None,
        window: Optional[BaselineWindow] = None,
        start_date: Optional[str] = None,
    ):
        """
        Initialize GISTEMP source handler.

        Args:
            url: Download URL
            window: Baseline reference window
            start_date: Date of the first monthly value (default 1880-01-01)
        """
        super().__init__(url, window)
        self.start_date = pd.Timestamp(start_date or self.DEFAULT_START)

    def _parse_text(self, text: str) -> pd.DataFrame:
        table = read_delimited(text, self.FORMAT)

        if "Year" not in table.columns:
            raise SchemaError(f"gistemp: no 'Year' column in header {list(table.columns)}")

        if len(table):
            first_year = pd.to_numeric(table["Year"].iloc[0], errors="coerce")
            if first_year != self.start_date.year:
                raise SchemaError(
                    f"gistemp: first row is year {table['Year'].iloc[0]}, "
                    f"expected {self.start_date.year}"
                )

        values = wide_to_long(table, MONTH_COLUMNS)
        dates = pd.date_range(start=self.start_date, periods=len(values), freq="MS")

        return pd.DataFrame({
            DATE: dates.astype("datetime64[ns]"),
            RAW_VALUE: values,
        })
