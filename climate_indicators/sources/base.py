"""
Shared machinery for climate source parsers.

Every source describes its raw layout as a SourceFormat record and hands
it to read_delimited(), so the five parsers share one tokenizer and one
set of failure modes.
"""

import logging
import re
from dataclasses import dataclass, field
from io import StringIO
from typing import Dict, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..exceptions import DateParseError, SchemaError
from ..schemas import ANOMALY, DATE, RAW_VALUE, validate_monthly_series
from ..transforms.baseline import BASELINE_WINDOW, BaselineWindow, apply_baseline

logger = logging.getLogger(__name__)

WHITESPACE = re.compile(r"\s+")

ColumnRef = Union[int, str]


@dataclass(frozen=True)
class SourceFormat:
    """
    Layout of one raw source file.

    Attributes:
        delimiter: Field delimiter, or None for runs of whitespace
        skip_rows: Metadata lines to drop before the header/data
        header: Whether a header line follows the skipped lines
        comment: Lines starting with this marker are ignored
        columns: Canonical name -> column index (negative counts from the
            end) or header name. Empty keeps every column.
        na_values: Tokens that mark a missing value
        expected_fields: Exact field count per data line, if fixed
    """

    delimiter: Optional[str] = None
    skip_rows: int = 0
    header: bool = False
    comment: Optional[str] = None
    columns: Mapping[str, ColumnRef] = field(default_factory=dict)
    na_values: Tuple[str, ...] = ()
    expected_fields: Optional[int] = None

    @property
    def min_fields(self) -> int:
        needed = 0
        for ref in self.columns.values():
            if isinstance(ref, int):
                needed = max(needed, ref + 1 if ref >= 0 else -ref)
        return needed


def split_fields(line: str) -> List[str]:
    """Split a line on runs of whitespace."""
    return WHITESPACE.split(line.strip())


def _resolve(ref: ColumnRef, header: Optional[List[str]], n_fields: int) -> int:
    if isinstance(ref, int):
        return ref if ref >= 0 else n_fields + ref
    if header is None or ref not in header:
        raise SchemaError(f"Expected column '{ref}' not found in header {header}")
    if header.count(ref) > 1:
        raise SchemaError(
            f"Column name '{ref}' is ambiguous in header {header}; select it by position"
        )
    return header.index(ref)


def _read_whitespace(text: str, fmt: SourceFormat) -> pd.DataFrame:
    lines = text.splitlines()[fmt.skip_rows:]
    header: Optional[List[str]] = None
    rows: List[List[str]] = []

    for lineno, line in enumerate(lines, start=fmt.skip_rows + 1):
        if not line.strip():
            continue
        if fmt.comment and line.lstrip().startswith(fmt.comment):
            continue
        fields = split_fields(line)
        if fmt.header and header is None:
            header = fields
            continue
        if fmt.expected_fields is not None and len(fields) != fmt.expected_fields:
            raise SchemaError(
                f"Line {lineno}: expected {fmt.expected_fields} fields, got {len(fields)}"
            )
        if len(fields) < fmt.min_fields:
            raise SchemaError(
                f"Line {lineno}: expected at least {fmt.min_fields} fields, got {len(fields)}"
            )
        rows.append(fields)

    if fmt.header and header is None:
        raise SchemaError("Missing header line")

    if not fmt.columns:
        return pd.DataFrame(rows, columns=header)

    data: Dict[str, list] = {}
    for name, ref in fmt.columns.items():
        values = []
        for fields in rows:
            values.append(fields[_resolve(ref, header, len(fields))])
        data[name] = values

    df = pd.DataFrame(data, columns=list(fmt.columns))
    if fmt.na_values:
        df = df.replace(list(fmt.na_values), np.nan)
    return df


def _read_csv(text: str, fmt: SourceFormat) -> pd.DataFrame:
    try:
        df = pd.read_csv(
            StringIO(text),
            sep=fmt.delimiter,
            skiprows=fmt.skip_rows,
            header=0 if fmt.header else None,
            comment=fmt.comment,
            na_values=list(fmt.na_values),
            skipinitialspace=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise SchemaError(f"Could not parse delimited data: {e}") from e

    if fmt.header:
        df.columns = [str(c).strip() for c in df.columns]
    if not fmt.columns:
        return df

    header = list(df.columns) if fmt.header else None
    if fmt.expected_fields is not None and len(df.columns) != fmt.expected_fields:
        raise SchemaError(f"Expected {fmt.expected_fields} columns, got {len(df.columns)}")
    if len(df.columns) < fmt.min_fields:
        raise SchemaError(f"Expected at least {fmt.min_fields} columns, got {len(df.columns)}")

    selected = {
        name: df.iloc[:, _resolve(ref, header, len(df.columns))]
        for name, ref in fmt.columns.items()
    }
    return pd.DataFrame(selected).reset_index(drop=True)


def read_delimited(text: str, fmt: SourceFormat) -> pd.DataFrame:
    """
    Read a raw text table according to its SourceFormat.

    Args:
        text: Decoded file contents
        fmt: Layout description

    Returns:
        DataFrame with the canonical column names from fmt.columns

    Raises:
        SchemaError: On missing header/columns or wrong field counts
    """
    if fmt.delimiter is None:
        return _read_whitespace(text, fmt)
    return _read_csv(text, fmt)


def to_float(values: pd.Series, name: str) -> pd.Series:
    """Convert a column to float, raising SchemaError on bad tokens."""
    try:
        return pd.to_numeric(values).astype(float)
    except (ValueError, TypeError) as e:
        raise SchemaError(f"Non-numeric value in column '{name}': {e}") from e


def year_month_dates(years: pd.Series, months: pd.Series) -> pd.Series:
    """
    Build first-of-month dates from year and month columns.

    Raises:
        DateParseError: On non-integer tokens or months outside 1..12
    """
    try:
        y = pd.to_numeric(years)
        m = pd.to_numeric(months)
    except (ValueError, TypeError) as e:
        raise DateParseError(f"Malformed year/month token: {e}") from e

    if y.isna().any() or m.isna().any():
        raise DateParseError("Missing year or month value")
    if not ((y % 1 == 0).all() and (m % 1 == 0).all()):
        raise DateParseError("Year and month must be whole numbers")
    if not m.between(1, 12).all():
        bad = m[~m.between(1, 12)].iloc[0]
        raise DateParseError(f"Month out of range: {bad}")

    parts = pd.DataFrame({"year": y.astype(int), "month": m.astype(int), "day": 1})
    try:
        dates = pd.to_datetime(parts)
    except (ValueError, OverflowError) as e:
        raise DateParseError(f"Invalid year/month combination: {e}") from e
    return dates.astype("datetime64[ns]")


def decode(raw: Union[bytes, str]) -> str:
    """Decode downloaded bytes; comment lines may carry non-UTF-8 symbols."""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw


class BaseClimateSource:
    """
    Base class for climate data sources.

    Subclasses set the class attributes and implement _parse_text(),
    returning a frame with 'date' and 'raw_value' (or 'anomaly' for
    sources that publish anomalies directly).
    """

    source_name = "base"
    column_prefix = "base"
    description = ""
    default_url: Optional[str] = None
    FORMAT = SourceFormat()

    # Temperature sources get a baseline anomaly; index sources do not
    has_baseline = True

    def __init__(
        self,
        url: Optional[str] = None,
        window: Optional[BaselineWindow] = None,
    ):
        """
        Initialize the source handler.

        Args:
            url: Download URL (default: the source's published location)
            window: Baseline reference window
        """
        self.url = url or self.default_url
        self.window = window or BASELINE_WINDOW

    def _parse_text(self, text: str) -> pd.DataFrame:
        raise NotImplementedError(
            f"Climate source '{self.source_name}' does not implement _parse_text()"
        )

    def parse(self, raw: Union[bytes, str]) -> pd.DataFrame:
        """
        Parse raw downloaded content into a canonical MonthlySeries.

        Args:
            raw: File contents as bytes or text

        Returns:
            DataFrame with date, raw_value and anomaly (temperature
            sources) or date and anomaly (index sources)
        """
        series = self._parse_text(decode(raw))

        if self.has_baseline:
            validate_monthly_series(series, self.source_name, [DATE, RAW_VALUE])
            series = apply_baseline(series, self.window, name=self.source_name)
            series = series[[DATE, RAW_VALUE, ANOMALY]]
        else:
            validate_monthly_series(series, self.source_name, [DATE, ANOMALY])
            series = series[[DATE, ANOMALY]]

        series = series.reset_index(drop=True)
        if len(series):
            logger.info(
                f"{self.source_name}: parsed {len(series)} months "
                f"({series[DATE].iloc[0].date()} to {series[DATE].iloc[-1].date()})"
            )
        else:
            logger.warning(f"{self.source_name}: parsed 0 months")
        return series

    def fetch(self, fetcher) -> pd.DataFrame:
        """
        Download and parse this source.

        Args:
            fetcher: Object with a fetch(url) -> bytes method
        """
        if not self.url:
            raise SchemaError(f"No URL set for source '{self.source_name}'")
        url = self.resolve_url(fetcher)
        logger.debug(f"{self.source_name}: fetching {url}")
        return self.parse(fetcher.fetch(url))

    def resolve_url(self, fetcher) -> str:
        """Return the file URL to download; sources published by build override this."""
        return self.url

    def get_metadata(self) -> dict:
        """Describe the source for listings."""
        return {
            "source": self.source_name,
            "column_prefix": self.column_prefix,
            "description": self.description,
            "url": self.url,
            "baseline": str(self.window) if self.has_baseline else None,
        }
