"""
Unit tests for the tolerant date/time parser
"""
from datetime import date, timedelta

import pytest

from calpal.errors import OutOfRangeComponent, ParseError, UnknownTimezoneError, UnrecognizedFormat
from calpal.models import ParsingStrategy
from calpal.parsing import DateTimeParser, SiteParserInfo, nearest_future_year, parse_datetime, tokenize

from .conftest import utc


class TestExactStrategy:
    """Weekday label agrees with the calendar date"""

    def test_label_matches_current_year(self, parser):
        dt, meta = parser.parse("Sun Jul 27 15:30", None, utc(2025, 7, 27, 12))
        assert meta.parsing_strategy is ParsingStrategy.EXACT
        assert meta.weekday_mismatch is None
        # BST in July
        assert dt == utc(2025, 7, 27, 14, 30)

    def test_full_names_and_explicit_year(self, parser):
        dt, meta = parser.parse("Sunday July 27 2025 15:30", "GMT", utc(2025, 1, 1))
        assert meta.parsing_strategy is ParsingStrategy.EXACT
        assert dt == utc(2025, 7, 27, 15, 30)

    def test_comma_after_weekday(self, parser):
        _, meta = parser.parse("Sun, Jul 27 2025 15:30", "GMT", utc(2025, 1, 1))
        assert meta.parsing_strategy is ParsingStrategy.EXACT

    def test_day_first_with_year(self, parser):
        dt, meta = parser.parse("Sat 15 Feb 2025 17:30", "GMT", utc(2025, 1, 1))
        assert meta.parsing_strategy is ParsingStrategy.EXACT
        assert dt == utc(2025, 2, 15, 17, 30)

    def test_twelve_hour_clock_and_long_weekday_abbreviation(self, parser):
        dt, meta = parser.parse("Tues 4 Mar 2025 7.45pm", None, utc(2025, 1, 1))
        assert meta.parsing_strategy is ParsingStrategy.EXACT
        assert dt == utc(2025, 3, 4, 19, 45)

    def test_ordinal_day_and_noon(self, parser):
        dt, meta = parser.parse("Sat 1st Mar 2025 12 noon", "GMT", utc(2025, 1, 1))
        assert meta.parsing_strategy is ParsingStrategy.EXACT
        assert dt == utc(2025, 3, 1, 12, 0)

    def test_numeric_date_without_label(self, parser):
        dt, meta = parser.parse("15/02/2025 3pm", "GMT", utc(2025, 1, 1))
        assert meta.parsing_strategy is ParsingStrategy.EXACT
        assert dt == utc(2025, 2, 15, 15, 0)

    def test_iso_timestamp_offset_wins(self, parser):
        dt, meta = parser.parse("2025-08-15T16:30:00+01:00", "GMT", utc(2025, 1, 1))
        assert dt == utc(2025, 8, 15, 15, 30)
        assert meta.parsing_strategy is ParsingStrategy.EXACT
        assert "+01:00" in meta.timezone_assumptions
        assert "GMT not applied" in meta.timezone_assumptions


class TestWeekdayTolerantStrategy:
    """Stale weekday labels are tolerated and recorded"""

    def test_sunday_label_on_a_wednesday(self, parser):
        dt, meta = parser.parse("Sun Jan 15, 15:00", "GMT", utc(2025, 1, 1))
        assert meta.parsing_strategy is ParsingStrategy.WEEKDAY_TOLERANT
        assert dt == utc(2025, 1, 15, 15, 0)
        mismatch = meta.weekday_mismatch
        assert mismatch is not None
        assert mismatch.claimed_weekday == "Sun"
        assert mismatch.actual_weekday == "Wednesday"
        assert mismatch.date == "2025-01-15"
        assert mismatch.tolerated is True

    def test_monday_label_on_a_sunday(self, parser):
        _, meta = parser.parse("Mon Jul 27 15:30", None, utc(2025, 7, 27, 12))
        assert meta.parsing_strategy is ParsingStrategy.WEEKDAY_TOLERANT
        assert meta.weekday_mismatch.claimed_weekday == "Mon"
        assert meta.weekday_mismatch.actual_weekday == "Sunday"

    def test_label_kept_verbatim(self, parser):
        _, meta = parser.parse("SUNDAY 15 Jan 2025 15:00", "GMT", utc(2025, 1, 1))
        assert meta.weekday_mismatch.claimed_weekday == "SUNDAY"

    def test_numeric_date_stays_authoritative_with_explicit_year(self, parser):
        dt, meta = parser.parse("Mon 1 Jan 2025 12:00", "GMT", utc(2025, 1, 1))
        assert dt == utc(2025, 1, 1, 12, 0)
        assert meta.parsing_strategy is ParsingStrategy.WEEKDAY_TOLERANT

    def test_timezone_info_summary(self, parser):
        _, meta = parser.parse("Mon Jul 27 15:30", None, utc(2025, 7, 1))
        info = meta.timezone_info()
        assert "claimed Mon, actually Sunday" in info
        assert "weekday-tolerant parsing" in info
        assert "Europe/London" in info
        assert meta.has_data_quality_issues()


class TestYearInferredStrategy:
    """Year-less dates resolve to the nearest non-past occurrence"""

    def test_later_this_year(self, parser):
        dt, meta = parser.parse("Aug 15, 14:30", "GMT", utc(2025, 7, 1))
        assert meta.parsing_strategy is ParsingStrategy.YEAR_INFERRED
        assert meta.weekday_mismatch is None
        assert dt == utc(2025, 8, 15, 14, 30)

    def test_already_passed_rolls_to_next_year(self, parser):
        dt, meta = parser.parse("Feb 1, 14:30", "GMT", utc(2025, 7, 1))
        assert meta.parsing_strategy is ParsingStrategy.YEAR_INFERRED
        assert dt.year == 2026

    def test_same_day_is_not_in_the_past(self, parser):
        dt, _ = parser.parse("1 Jul 09:00", "GMT", utc(2025, 7, 1, 12))
        assert dt == utc(2025, 7, 1, 9, 0)

    def test_leap_day_waits_for_a_leap_year(self, parser):
        dt, _ = parser.parse("Feb 29 15:00", "GMT", utc(2025, 3, 1))
        assert dt == utc(2028, 2, 29, 15, 0)

    @pytest.mark.parametrize("reference", [utc(2025, 1, 1), utc(2025, 6, 30, 23), utc(2025, 12, 31, 12)])
    def test_never_infers_a_past_year(self, parser, reference):
        day = date(2025, 1, 1)
        while day.year == 2025:
            dt, _ = parser.parse(f"{day:%b} {day.day} 15:00", "GMT", reference)
            assert dt.date() >= reference.date()
            # smallest such year: one year earlier would already be past
            assert date(dt.year - 1, dt.month, dt.day) < reference.date()
            day += timedelta(days=11)

    def test_nearest_future_year_helper(self):
        assert nearest_future_year(8, 15, date(2025, 7, 1)) == 2025
        assert nearest_future_year(2, 1, date(2025, 7, 1)) == 2026
        assert nearest_future_year(2, 29, date(2024, 2, 29)) == 2024


class TestTimezoneConventions:
    def test_fixed_offset_convention(self, parser):
        dt, meta = parser.parse("Sat 15 Feb 2025 17:30", "UTC+2", utc(2025, 1, 1))
        assert dt == utc(2025, 2, 15, 15, 30)
        assert meta.timezone_assumptions == "Parsed as UTC+2 timezone"

    def test_default_convention_used_when_none_given(self):
        parser = DateTimeParser("UTC-03:00")
        dt, meta = parser.parse("Sat 15 Feb 2025 17:30", None, utc(2025, 1, 1))
        assert dt == utc(2025, 2, 15, 20, 30)
        assert "UTC-03:00" in meta.timezone_assumptions

    def test_unknown_convention(self, parser):
        with pytest.raises(UnknownTimezoneError):
            parser.parse("Sat 15 Feb 2025 17:30", "Mars/Olympus", utc(2025, 1, 1))

    def test_dst_gap_is_noted(self, parser):
        dt, meta = parser.parse("Sun 30 Mar 2025 01:30", "Europe/London", utc(2025, 1, 1))
        assert dt == utc(2025, 3, 30, 1, 30)
        assert "non-existent local time" in meta.timezone_assumptions

    def test_dst_overlap_uses_earlier_offset(self, parser):
        dt, meta = parser.parse("Sun 26 Oct 2025 01:30", "Europe/London", utc(2025, 1, 1))
        assert dt == utc(2025, 10, 26, 0, 30)
        assert "ambiguous local time" in meta.timezone_assumptions


class TestParseFailures:
    def test_garbage(self, parser):
        with pytest.raises(UnrecognizedFormat) as exc:
            parser.parse("InvalidDay Blah 99 25:99", "GMT", utc(2025, 1, 1))
        assert exc.value.raw_text == "InvalidDay Blah 99 25:99"

    @pytest.mark.parametrize("text", ["", "TBC", "Postponed", "Jan 2025 15:00", "Sun Jan 15"])
    def test_not_a_fixture_date(self, parser, text):
        with pytest.raises(UnrecognizedFormat):
            parser.parse(text, "GMT", utc(2025, 1, 1))

    @pytest.mark.parametrize(
        "text",
        [
            "Jan 32 2025 15:00",
            "13/13/2025 15:00",
            "Feb 30, 15:00",
            "Feb 29 2025 15:00",
            "Jan 15 2025 25:00",
            "Jan 15 2025 14:75",
            "2025-08-15T16:30+25:00",
            "2025-08-15T16:30+23:99",
        ],
    )
    def test_out_of_range_components(self, parser, text):
        with pytest.raises(OutOfRangeComponent) as exc:
            parser.parse(text, "GMT", utc(2025, 1, 1))
        assert exc.value.raw_text == text
        assert isinstance(exc.value, ParseError)

    def test_three_dotted_pairs_are_ambiguous(self, parser):
        with pytest.raises(UnrecognizedFormat):
            parser.parse("Sat 15.03 19.45 20.00", "GMT", utc(2025, 1, 1))

    def test_error_kinds(self):
        assert UnrecognizedFormat("x").kind == "unrecognized_format"
        assert OutOfRangeComponent("x").kind == "out_of_range_component"


class TestDeterminism:
    def test_identical_inputs_identical_output(self, parser):
        first = parser.parse("Sun Jan 15, 15:00", "GMT", utc(2025, 1, 1))
        second = parser.parse("Sun Jan 15, 15:00", "GMT", utc(2025, 1, 1))
        assert first == second

    def test_future_reference_time(self, parser):
        dt, meta = parser.parse("Mar 3, 20:00", "GMT", utc(2031, 6, 1))
        assert dt == utc(2032, 3, 3, 20, 0)
        assert meta.parsing_strategy is ParsingStrategy.YEAR_INFERRED

    def test_module_level_helper(self):
        dt, meta = parse_datetime("Sun Jan 15, 15:00", "GMT", utc(2025, 1, 1))
        assert dt == utc(2025, 1, 15, 15, 0)
        assert meta.original_source == "Sun Jan 15, 15:00"


class TestSeparateCells:
    def test_parse_parts(self, parser):
        dt, meta = parser.parse_parts("Sun Jul 27", "15:30", None, utc(2025, 7, 1))
        assert meta.parsing_strategy is ParsingStrategy.EXACT
        assert meta.original_source == "Sun Jul 27 15:30"
        assert dt == utc(2025, 7, 27, 14, 30)


class TestTokenize:
    def test_components(self):
        parts = tokenize("Thurs 7th Aug, KO 19:45", SiteParserInfo())
        assert (parts.day, parts.month, parts.year) == (7, 8, None)
        assert (parts.hour, parts.minute) == (19, 45)
        assert parts.weekday_label == "Thurs"
        assert parts.weekday == 3

    def test_two_digit_year(self):
        parts = tokenize("15/02/25 15:00", SiteParserInfo())
        assert (parts.day, parts.month, parts.year) == (15, 2, 2025)


class TestDottedDatesAndTimes:
    """Dotted day.month dates written before dotted kickoff times"""

    def test_date_before_time_resolves_exactly(self, parser):
        dt, meta = parser.parse("Tue 11.03 10.04", "GMT", utc(2025, 1, 1))
        assert dt == utc(2025, 3, 11, 10, 4)
        assert meta.parsing_strategy is ParsingStrategy.EXACT
        assert meta.weekday_mismatch is None

    def test_evening_kickoff(self, parser):
        dt, meta = parser.parse("Sat 15.03 19.45", "GMT", utc(2025, 1, 1))
        assert dt == utc(2025, 3, 15, 19, 45)
        assert meta.parsing_strategy is ParsingStrategy.EXACT

    def test_single_dotted_time(self, parser):
        dt, _ = parser.parse("Sat 15 Mar 2025 19.45", "GMT", utc(2025, 1, 1))
        assert dt == utc(2025, 3, 15, 19, 45)

    def test_source_offset_at_the_edge(self, parser):
        dt, meta = parser.parse("2025-08-15T23:30-23:59", "GMT", utc(2025, 1, 1))
        assert dt == utc(2025, 8, 16, 23, 29)
        assert "-23:59" in meta.timezone_assumptions
