"""
HadCRUT5 Source Handler

Met Office Hadley Centre / CRU global mean surface temperature, monthly
summary series. The CSV carries a 'Time' column (YYYY-MM) and the
ensemble-mean anomaly relative to 1961-1990.
"""

import pandas as pd

from .base import BaseClimateSource, SourceFormat, read_delimited, to_float
from ..exceptions import DateParseError
from ..schemas import DATE, RAW_VALUE


class HadCRUTSource(BaseClimateSource):
    """HadCRUT5 global monthly anomalies."""

    source_name = "hadcrut"
    column_prefix = "HadCRUT"
    description = "HadCRUT5 global mean surface temperature anomaly"
    default_url = (
        "https://www.metoffice.gov.uk/hadobs/hadcrut5/data/HadCRUT.5.0.2.0/"
        "analysis/diagnostics/"
        "HadCRUT.5.0.2.0.analysis.summary_series.global.monthly.csv"
    )

    FORMAT = SourceFormat(
        delimiter=",",
        header=True,
        columns={DATE: "Time", RAW_VALUE: "Anomaly (deg C)"},
    )

    def _parse_text(self, text: str) -> pd.DataFrame:
        table = read_delimited(text, self.FORMAT)
        try:
            dates = pd.to_datetime(table[DATE].astype(str).str.strip(), format="mixed")
        except (ValueError, TypeError) as e:
            raise DateParseError(f"hadcrut: unparseable date: {e}") from e

        return pd.DataFrame({
            DATE: dates.astype("datetime64[ns]"),
            RAW_VALUE: to_float(table[RAW_VALUE], RAW_VALUE),
        })
