"""Tests for partial date parsing and filter bounds."""

import logging
from datetime import date

import pytest

from logbook_notes.dates import (
    DateFilter,
    Intent,
    PartialDate,
    parse_partial_date,
    resolve_bound,
    resolve_range,
)
from logbook_notes.errors import (
    ConflictingFilters,
    DateOutOfRange,
    MalformedDate,
    ParseError,
    UnrecognizedDateFormat,
    ValidationError,
)


class TestParsePartialDate:
    """Tests for parse_partial_date."""

    def test_year_only(self):
        assert parse_partial_date("2021") == PartialDate(2021, None, None)

    def test_year_month(self):
        assert parse_partial_date("2021-06") == PartialDate(2021, 6, None)

    def test_full_date(self):
        assert parse_partial_date("2021-06-15") == PartialDate(2021, 6, 15)

    def test_whitespace_stripped(self):
        assert parse_partial_date("  2021-06\n") == PartialDate(2021, 6)

    def test_out_of_range_fields_parse(self):
        """Calendar validity is only checked when resolving a bound."""
        assert parse_partial_date("2021-13") == PartialDate(2021, 13)
        assert parse_partial_date("2021-06-31") == PartialDate(2021, 6, 31)

    @pytest.mark.parametrize("text", ["", "21", "June 2021", "06-2021", "x2021", "２０２１", "٢٠٢١"])
    def test_unrecognized_shapes(self, text):
        with pytest.raises(UnrecognizedDateFormat):
            parse_partial_date(text)

    def test_too_many_fields(self):
        with pytest.raises(UnrecognizedDateFormat, match="more fields"):
            parse_partial_date("2021-06-15-01")

    @pytest.mark.parametrize("text", ["2021x", "2021-", "2021-06-1a", "2021-06-", "2021-+6", "2021- 6"])
    def test_malformed_fields(self, text):
        with pytest.raises(MalformedDate):
            parse_partial_date(text)

    def test_errors_are_parse_errors(self):
        with pytest.raises(ParseError):
            parse_partial_date("nope")

    def test_str_round_trip(self):
        assert str(parse_partial_date("2021-06")) == "2021-06"
        assert str(PartialDate(987, 1, 2)) == "0987-01-02"


class TestResolveBound:
    """Tests for resolve_bound defaults."""

    def test_before_defaults_low(self):
        assert resolve_bound(PartialDate(2021), Intent.BEFORE) == date(2021, 1, 1)
        assert resolve_bound(PartialDate(2021, 6), Intent.BEFORE) == date(2021, 6, 1)

    def test_after_defaults_high(self):
        assert resolve_bound(PartialDate(2021), Intent.AFTER) == date(2021, 12, 31)
        assert resolve_bound(PartialDate(2021, 6), Intent.AFTER) == date(2021, 6, 30)

    def test_after_uses_last_day_of_february(self):
        assert resolve_bound(PartialDate(2021, 2), Intent.AFTER) == date(2021, 2, 28)
        assert resolve_bound(PartialDate(2024, 2), Intent.AFTER) == date(2024, 2, 29)

    def test_on_defaults_low(self):
        assert resolve_bound(PartialDate(2021, 6), Intent.ON) == date(2021, 6, 1)

    @pytest.mark.parametrize("intent", list(Intent))
    def test_full_date_unchanged(self, intent):
        assert resolve_bound(PartialDate(2021, 6, 15), intent) == date(2021, 6, 15)

    @pytest.mark.parametrize("intent", list(Intent))
    @pytest.mark.parametrize("text", ["2021-13", "2021-00", "2021-06-31", "2021-02-29", "2021-06-00", "0000"])
    def test_out_of_range(self, intent, text):
        ymd = parse_partial_date(text)
        with pytest.raises(DateOutOfRange):
            resolve_bound(ymd, intent)

    def test_range_covers_period(self):
        assert resolve_range(PartialDate(2021)) == (date(2021, 1, 1), date(2021, 12, 31))
        assert resolve_range(PartialDate(2021, 6, 15)) == (date(2021, 6, 15), date(2021, 6, 15))


class TestDateFilter:
    """Tests for DateFilter construction and matching."""

    def test_empty_filter_matches_everything(self):
        f = DateFilter.from_strings()
        assert f.matches(date(1970, 1, 1))
        assert f.matches(date(2999, 12, 31))

    def test_on_with_before_conflicts(self):
        with pytest.raises(ConflictingFilters):
            DateFilter.from_strings(before="2021", on="2021")

    def test_on_with_after_conflicts(self):
        with pytest.raises(ConflictingFilters):
            DateFilter.from_strings(after="2021", on="2021")

    def test_conflict_detected_before_parsing(self):
        """Unparseable strings still report the conflict, not a parse error."""
        with pytest.raises(ConflictingFilters):
            DateFilter.from_strings(before="garbage", on="also garbage")

    def test_conflict_is_validation_error(self):
        with pytest.raises(ValidationError):
            DateFilter.from_strings(after="2021", on="2022")

    def test_parse_error_propagates(self):
        with pytest.raises(UnrecognizedDateFormat):
            DateFilter.from_strings(before="last week")

    def test_before_year_excludes_that_year(self):
        f = DateFilter.from_strings(before="2021")
        assert f.matches(date(2020, 12, 31))
        assert not f.matches(date(2021, 1, 1))
        assert not f.matches(date(2021, 12, 31))

    def test_after_year_excludes_that_year(self):
        f = DateFilter.from_strings(after="2021")
        assert not f.matches(date(2021, 1, 1))
        assert not f.matches(date(2021, 12, 31))
        assert f.matches(date(2022, 1, 1))

    def test_before_and_after_day_are_strict(self):
        f = DateFilter.from_strings(before="2021-06-15", after="2021-06-15")
        assert not f.matches(date(2021, 6, 15))
        assert f.is_empty_range()

    def test_on_month(self):
        f = DateFilter.from_strings(on="2021-06")
        assert not f.matches(date(2021, 5, 31))
        assert f.matches(date(2021, 6, 1))
        assert f.matches(date(2021, 6, 30))
        assert not f.matches(date(2021, 7, 1))

    def test_on_day(self):
        f = DateFilter.from_strings(on="2021-06-15")
        assert f.matches(date(2021, 6, 15))
        assert not f.matches(date(2021, 6, 16))

    def test_window(self):
        f = DateFilter.from_strings(after="2021-05", before="2021-07")
        assert not f.matches(date(2021, 5, 31))
        assert f.matches(date(2021, 6, 1))
        assert f.matches(date(2021, 6, 30))
        assert not f.matches(date(2021, 7, 1))
        assert not f.is_empty_range()

    def test_empty_window_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="logbook_notes.dates"):
            f = DateFilter.from_strings(after="2022", before="2021")
        assert f.is_empty_range()
        assert "nothing will match" in caplog.text

    def test_out_of_range_filter(self):
        with pytest.raises(DateOutOfRange):
            DateFilter.from_strings(on="2021-13")
