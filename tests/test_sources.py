"""
Tests for the source parsers and the shared delimited-table reader.

These tests verify:
- Whitespace normalization and column selection in read_delimited()
- Each parser's canonical output (dates, raw values, anomalies)
- Schema and date errors for malformed input
"""

import numpy as np
import pandas as pd
import pytest

from climate_indicators.exceptions import ConfigError, DateParseError, SchemaError
from climate_indicators.schemas import ANOMALY, DATE, RAW_VALUE
from climate_indicators.sources import (
    AVAILABLE_SOURCES,
    BerkeleySource,
    GISTEMPSource,
    HadCRUTSource,
    NOAASource,
    ONISource,
    get_source,
    list_sources,
)
from climate_indicators.sources.base import (
    SourceFormat,
    read_delimited,
    split_fields,
    to_float,
    year_month_dates,
)


def _dates(*values):
    return [pd.Timestamp(v) for v in values]


def assert_strictly_increasing(series):
    dates = series[DATE]
    assert not dates.duplicated().any()
    assert dates.is_monotonic_increasing


class TestReadDelimited:
    """Tests for the generic reader."""

    def test_split_collapses_whitespace(self):
        """Runs of spaces and tabs count as one delimiter."""
        assert split_fields("  1850 \t  1   -0.4  ") == ["1850", "1", "-0.4"]

    def test_whitespace_column_map(self):
        """Columns are selected by position and renamed."""
        fmt = SourceFormat(columns={"year": 0, "value": 2})
        table = read_delimited("1850  1  0.5  9\n1851 2   0.7 9\n", fmt)
        assert list(table.columns) == ["year", "value"]
        assert table["value"].tolist() == ["0.5", "0.7"]

    def test_negative_index_counts_from_end(self):
        """A negative index picks from the end of each line."""
        fmt = SourceFormat(columns={"last": -1})
        table = read_delimited("1 2 3\n4 5 6\n", fmt)
        assert table["last"].tolist() == ["3", "6"]

    def test_comment_and_blank_lines_skipped(self):
        """Comment-marked and empty lines are ignored."""
        fmt = SourceFormat(comment="%", columns={"a": 0})
        table = read_delimited("% note\n\n1\n  % indented note\n2\n", fmt)
        assert table["a"].tolist() == ["1", "2"]

    def test_missing_tokens_become_nan(self):
        """Declared missing tokens are NaN before any numeric conversion."""
        fmt = SourceFormat(columns={"a": 0, "b": 1}, na_values=("NaN",))
        table = read_delimited("1 0.5\n2 NaN\n", fmt)
        assert table["b"].iloc[0] == "0.5"
        assert pd.isna(table["b"].iloc[1])
        assert to_float(table["b"], "b").iloc[:1].tolist() == pytest.approx([0.5])

    def test_header_line_consumed(self):
        """With header=True the first non-comment line is not data."""
        fmt = SourceFormat(header=True, columns={"a": 0})
        table = read_delimited("YR MON\n1950 1\n", fmt)
        assert table["a"].tolist() == ["1950"]

    def test_missing_header(self):
        """An empty file with header=True is a schema error."""
        fmt = SourceFormat(header=True, columns={"a": 0})
        with pytest.raises(SchemaError):
            read_delimited("\n\n", fmt)

    def test_short_line_rejected(self):
        """A line with too few fields is a schema error."""
        fmt = SourceFormat(columns={"a": 0, "b": 2})
        with pytest.raises(SchemaError, match="Line 2"):
            read_delimited("1 2 3\n1 2\n", fmt)

    def test_expected_field_count(self):
        """expected_fields enforces an exact count."""
        fmt = SourceFormat(columns={"a": 0}, expected_fields=3)
        with pytest.raises(SchemaError):
            read_delimited("1 2 3 4\n", fmt)

    def test_repeated_header_name_rejected(self):
        """A name that occurs more than once in the header cannot select a column."""
        fmt = SourceFormat(header=True, columns={"a": "ANOM"})
        with pytest.raises(SchemaError, match="ambiguous"):
            read_delimited("YR ANOM X ANOM\n1950 -1.5 0 -2.0\n", fmt)

    def test_csv_named_column_missing(self):
        """A named column absent from the CSV header is a schema error."""
        fmt = SourceFormat(delimiter=",", header=True, columns={"v": "Value"})
        with pytest.raises(SchemaError, match="Value"):
            read_delimited("Time,Other\n1850-01,1\n", fmt)


class TestYearMonthDates:
    """Tests for year/month date construction."""

    def test_builds_first_of_month(self):
        dates = year_month_dates(pd.Series(["1850", "2001"]), pd.Series(["1", "12"]))
        assert dates.tolist() == _dates("1850-01-01", "2001-12-01")

    def test_bad_token(self):
        with pytest.raises(DateParseError):
            year_month_dates(pd.Series(["18x0"]), pd.Series(["1"]))

    def test_month_out_of_range(self):
        with pytest.raises(DateParseError, match="Month out of range"):
            year_month_dates(pd.Series(["1850"]), pd.Series(["13"]))

    def test_fractional_month(self):
        with pytest.raises(DateParseError):
            year_month_dates(pd.Series(["1850"]), pd.Series(["1.5"]))


class TestHadCRUT:
    """Tests for the HadCRUT5 parser."""

    def test_parse(self, raw_samples):
        series = HadCRUTSource().parse(raw_samples["hadcrut"].encode())

        assert list(series.columns) == [DATE, RAW_VALUE, ANOMALY]
        assert series[DATE].tolist() == _dates(
            "1850-01-01", "1850-02-01", "1899-12-01", "1900-01-01"
        )
        assert series[RAW_VALUE].tolist() == pytest.approx([-0.6, -0.4, -0.2, 1.0])
        # Baseline is the mean of the three pre-1900 values: -0.4
        assert series[ANOMALY].tolist() == pytest.approx([-0.2, 0.0, 0.2, 1.4])
        assert_strictly_increasing(series)

    def test_missing_anomaly_column(self):
        with pytest.raises(SchemaError):
            HadCRUTSource().parse("Time,Value\n1850-01,0.1\n")

    def test_bad_date(self):
        with pytest.raises(DateParseError):
            HadCRUTSource().parse("Time,Anomaly (deg C)\nnot-a-date,0.1\n")


class TestGISTEMP:
    """Tests for the GISTEMP parser."""

    def test_parse_truncates_partial_year(self, raw_samples):
        series = GISTEMPSource().parse(raw_samples["gistemp"])

        # Two full years plus three months of the third
        assert len(series) == 27
        assert series[DATE].iloc[0] == pd.Timestamp("1880-01-01")
        assert series[DATE].iloc[-1] == pd.Timestamp("1882-03-01")
        assert not series[RAW_VALUE].isna().any()
        assert_strictly_increasing(series)

    def test_row_major_order(self, raw_samples):
        series = GISTEMPSource().parse(raw_samples["gistemp"])
        assert series[RAW_VALUE].iloc[:12].tolist() == pytest.approx([0.1] * 12)
        assert series[RAW_VALUE].iloc[12:24].tolist() == pytest.approx([0.3] * 12)
        assert series[RAW_VALUE].iloc[24:].tolist() == pytest.approx([0.5] * 3)

    def test_baseline_uses_available_overlap(self, raw_samples):
        """Coverage starts in 1880, so the baseline is the mean of all 27 values."""
        series = GISTEMPSource().parse(raw_samples["gistemp"])
        expected = (12 * 0.1 + 12 * 0.3 + 3 * 0.5) / 27
        anomaly = series[RAW_VALUE] - expected
        assert series[ANOMALY].tolist() == pytest.approx(anomaly.tolist())

    def test_wrong_start_year(self, raw_samples):
        """A file whose first row is not the configured start year is rejected."""
        with pytest.raises(SchemaError, match="expected 1879"):
            GISTEMPSource(start_date="1879-01-01").parse(raw_samples["gistemp"])

    def test_missing_month_column(self):
        text = "Land-Ocean: Global Means\nYear,Jan,Feb\n1880,.1,.2\n"
        with pytest.raises(SchemaError):
            GISTEMPSource().parse(text)


class TestNOAA:
    """Tests for the NOAAGlobalTemp parser."""

    def test_parse_irregular_whitespace(self, raw_samples):
        series = NOAASource().parse(raw_samples["noaa"])

        assert series[DATE].tolist() == _dates("1850-01-01", "1850-02-01", "1900-01-01")
        assert series[RAW_VALUE].tolist() == pytest.approx([-0.4, -0.2, 0.6])
        assert series[ANOMALY].tolist() == pytest.approx([-0.1, 0.1, 0.9])

    def test_non_numeric_value(self):
        with pytest.raises(SchemaError):
            NOAASource().parse("1850 1 abc\n")

    def test_directory_resolves_newest_build(self, raw_samples):
        """The default URL is the timeseries directory; the newest land_ocean build is used."""
        listing = (
            '<a href="aravg.mon.land_ocean.90S.90N.v6.0.0.202409.asc">old</a>\n'
            '<a href="aravg.mon.land_ocean.90S.90N.v6.0.0.202412.asc">new</a>\n'
            '<a href="aravg.ann.land_ocean.90S.90N.v6.0.0.202501.asc">annual</a>\n'
        )
        source = NOAASource()
        newest = source.url + "aravg.mon.land_ocean.90S.90N.v6.0.0.202412.asc"

        class Stub:
            requested = []

            def fetch(self, url):
                self.requested.append(url)
                return listing.encode() if url == source.url else raw_samples["noaa"].encode()

        stub = Stub()
        series = source.fetch(stub)
        assert stub.requested == [source.url, newest]
        assert len(series) == 3

    def test_directory_without_series(self):
        class Stub:
            def fetch(self, url):
                return b"<html>no files</html>"

        with pytest.raises(SchemaError, match="no land_ocean series"):
            NOAASource().fetch(Stub())

    def test_nan_token_is_missing(self):
        series = NOAASource().parse("1850 1 0.4\n1850 2 NaN\n")
        assert series[RAW_VALUE].iloc[0] == pytest.approx(0.4)
        assert np.isnan(series[ANOMALY].iloc[1])

    def test_duplicate_month_rejected(self):
        with pytest.raises(SchemaError, match="duplicate"):
            NOAASource().parse("1850 1 0.1\n1850 1 0.2\n")

    def test_out_of_order_rejected(self):
        with pytest.raises(SchemaError, match="increasing"):
            NOAASource().parse("1850 2 0.1\n1850 1 0.2\n")

    def test_no_baseline_data(self):
        from climate_indicators.exceptions import BaselineUndefinedError

        with pytest.raises(BaselineUndefinedError):
            NOAASource().parse("1950 1 0.1\n1950 2 0.2\n")


class TestBerkeley:
    """Tests for the Berkeley Earth parser."""

    def test_keeps_first_table(self, raw_samples):
        series = BerkeleySource().parse(raw_samples["berkeley"])

        assert len(series) == 3
        assert series[RAW_VALUE].tolist() == pytest.approx([-0.7, -0.3, 0.5])
        assert series[ANOMALY].tolist() == pytest.approx([-0.2, 0.2, 1.0])
        assert_strictly_increasing(series)

    def test_wrong_field_count(self):
        with pytest.raises(SchemaError):
            BerkeleySource().parse("  1850  1  -0.7  0.38\n")

    def test_nan_tokens_are_missing(self):
        row = "  {y} {m}  {v}  0.1  NaN NaN NaN NaN NaN NaN NaN NaN\n"
        text = row.format(y=1850, m=1, v="0.2") + row.format(y=1850, m=2, v="NaN")
        series = BerkeleySource().parse(text)
        assert np.isnan(series[RAW_VALUE].iloc[1])
        assert np.isnan(series[ANOMALY].iloc[1])
        assert series[ANOMALY].iloc[0] == pytest.approx(0.0)


class TestONI:
    """Tests for the ONI parser."""

    def test_centred_three_month_mean(self, raw_samples):
        """The ONI is the centred 3-month mean of the last (NINO3.4 ANOM) column."""
        series = ONISource().parse(raw_samples["oni"])

        assert list(series.columns) == [DATE, ANOMALY]
        assert len(series) == 7
        assert series[DATE].iloc[0] == pd.Timestamp("1950-01-01")
        assert series[ANOMALY].iloc[1:6].tolist() == pytest.approx(
            [-1.70, -1.55, -1.57, -1.4233333, -1.0433333]
        )

    def test_edge_months_missing(self, raw_samples):
        """First and last months have no complete window."""
        series = ONISource().parse(raw_samples["oni"])
        assert np.isnan(series[ANOMALY].iloc[0])
        assert np.isnan(series[ANOMALY].iloc[-1])

    def test_anomaly_column_configurable(self, raw_samples):
        series = ONISource(anomaly_column=3).parse(raw_samples["oni"])
        # NINO1+2 ANOM: mean of -1.55, -1.78, -1.38
        assert series[ANOMALY].iloc[1] == pytest.approx(-1.57)

    def test_named_anomaly_column_rejected(self):
        """The header repeats ANOM per region, so only a position is accepted."""
        with pytest.raises(ConfigError):
            ONISource(anomaly_column="ANOM")

    def test_single_month_window(self, raw_samples):
        series = ONISource(running_months=1).parse(raw_samples["oni"])
        assert series[ANOMALY].iloc[:3].tolist() == pytest.approx([-1.99, -1.69, -1.42])

    def test_even_window_rejected(self):
        with pytest.raises(ConfigError):
            ONISource(running_months=2)

    def test_gap_breaks_window(self):
        text = " YR MON ANOM\n1950 1 1.0\n1950 2 2.0\n1950 3 3.0\n1950 5 5.0\n1950 6 6.0\n1950 7 7.0\n"
        series = ONISource().parse(text)
        values = series[ANOMALY].tolist()
        assert values[1] == pytest.approx(2.0)
        assert np.isnan(values[2])
        assert np.isnan(values[3])
        assert values[4] == pytest.approx(6.0)

    def test_missing_token(self):
        text = " YR MON ANOM\n1950 1 1.0\n1950 2 2.0\n1950 3 -99.99\n1950 4 4.0\n1950 5 5.0\n1950 6 6.0\n"
        series = ONISource().parse(text)
        assert series[ANOMALY].iloc[1:4].isna().all()
        assert series[ANOMALY].iloc[4] == pytest.approx(5.0)

    def test_no_baseline_applied(self, raw_samples):
        """ONI values need no 1850-1900 data."""
        series = ONISource().parse(raw_samples["oni"])
        assert series[ANOMALY].iloc[5] == pytest.approx(-1.0433333)


class TestRegistry:
    """Tests for the source registry."""

    def test_all_sources_registered(self):
        assert list_sources() == ["hadcrut", "gistemp", "noaa", "berkeley", "oni"]

    def test_prefixes(self):
        prefixes = [cls.column_prefix for cls in AVAILABLE_SOURCES.values()]
        assert prefixes == ["HadCRUT", "GISTEMP", "NOAA", "Berkeley", "ONI"]

    def test_get_source(self):
        assert isinstance(get_source("NOAA"), NOAASource)

    def test_unknown_source(self):
        with pytest.raises(KeyError):
            get_source("era5")

    def test_fetch_uses_url(self, raw_samples):
        class Stub:
            def fetch(self, url):
                self.url = url
                return raw_samples["noaa"].encode()

        stub = Stub()
        series = NOAASource(url="http://example.test/noaa.asc").fetch(stub)
        assert stub.url == "http://example.test/noaa.asc"
        assert len(series) == 3
