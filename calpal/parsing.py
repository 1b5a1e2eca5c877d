"""Tolerant kickoff date/time parsing.

Fixture pages publish dates like ``"Sun Jan 15, 15:00"`` with stale weekday
labels, no year, and times in whatever zone the site happens to use. The
parser resolves such text against an explicit reference time, trying
strategies from strictest to loosest:

1. exact: the weekday label (if any) agrees with the calendar date
2. weekday-tolerant: the label disagrees; the numeric date wins and the
   mismatch is recorded
3. year-inferred: no label and no year; the nearest non-past year is used

Every liberty taken ends up in :class:`ParseMetadata`.
"""
from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Callable, List, NamedTuple, Optional

from dateutil import parser as dtparser

from .errors import OutOfRangeComponent, UnrecognizedFormat
from .models import ParseMetadata, ParsingStrategy, WeekdayMismatch
from .normalise import clean_text, strip_diacritics
from .utils import LONDON_TZ, ensure_utc, resolve_timezone

logger = logging.getLogger(__name__)


class SiteParserInfo(dtparser.parserinfo):
    # dateutil's defaults plus the abbreviations fixture sites actually use
    WEEKDAYS = [
        ("Mon", "Monday"),
        ("Tue", "Tues", "Tuesday"),
        ("Wed", "Weds", "Wednesday"),
        ("Thu", "Thur", "Thurs", "Thursday"),
        ("Fri", "Friday"),
        ("Sat", "Saturday"),
        ("Sun", "Sunday"),
    ]
    MONTHS = [
        ("Jan", "January"),
        ("Feb", "February"),
        ("Mar", "March"),
        ("Apr", "April"),
        ("May", "May"),
        ("Jun", "June"),
        ("Jul", "July"),
        ("Aug", "August"),
        ("Sep", "Sept", "September"),
        ("Oct", "October"),
        ("Nov", "November"),
        ("Dec", "December"),
    ]


WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

FILLER_WORDS = {
    "at", "on", "the", "of", "ko", "k.o", "k/o", "kick-off", "kickoff", "kick", "off",
    "gmt", "bst", "uk", "local", "time", "-", "–", "—", "|", "@",
}

_ISO_RE = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})[T ]"
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::\d{2}(?:\.\d+)?)?"
    r"\s*(?P<offset>Z|[+-]\d{2}(?::?\d{2})?)?$",
    re.I,
)
_TIME_12H_RE = re.compile(
    r"(?<![\d/.:-])(?P<hour>\d{1,2})(?:[:.](?P<minute>\d{2}))?\s*(?P<ampm>[ap])\.?\s?m\b\.?",
    re.I,
)
_TIME_COLON_RE = re.compile(r"(?<![\d/.:-])(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::\d{2})?(?![\d/.:-])")
_TIME_DOT_RE = re.compile(r"(?<![\d/.:-])(?P<hour>\d{1,2})[.h](?P<minute>\d{2})(?![\d/.:-])", re.I)
_NOON_RE = re.compile(r"\b(?:12\s*)?(?:noon|midday)\b", re.I)
_NUMERIC_DATE_RE = re.compile(r"^(?P<day>\d{1,2})(?P<sep>[/.-])(?P<month>\d{1,2})(?:(?P=sep)(?P<year>\d{4}|\d{2}))?$")
_ISO_DATE_RE = re.compile(r"^(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})$")
_ORDINAL_RE = re.compile(r"^(\d{1,2})(?:st|nd|rd|th)$", re.I)
_PUNCT_RE = re.compile(r"[,;()\[\]]")


class ParsedDateTime(NamedTuple):
    datetime: datetime  # UTC
    metadata: ParseMetadata


@dataclass(frozen=True)
class DateParts:
    day: int
    month: int
    year: Optional[int]
    hour: int
    minute: int
    weekday_label: Optional[str] = None
    weekday: Optional[int] = None  # Monday == 0
    source_offset: Optional[str] = None  # offset written in the text itself


@dataclass(frozen=True)
class _Resolution:
    local_date: date
    strategy: ParsingStrategy
    weekday_mismatch: Optional[WeekdayMismatch] = None


def _two_digit_year(y: int) -> int:
    return 2000 + y if y < 100 else y


def _expand_year(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    return _two_digit_year(int(raw))


def _offset_fields(raw: str) -> tuple[int, int, int]:
    """Split "+01:00", "-0330" or "Z" into (sign, hours, minutes)."""
    if raw.upper() == "Z":
        return 1, 0, 0
    digits = raw[1:].replace(":", "")
    return (-1 if raw[0] == "-" else 1), int(digits[:2]), int(digits[2:4] or 0)


def _offset_tz(raw: str) -> tzinfo:
    sign, hours, minutes = _offset_fields(raw)
    if not (hours or minutes):
        return timezone.utc
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def _extract_time(text: str, raw_text: str) -> tuple[int, int, str]:
    """Find the kickoff time, returning (hour, minute, text with the time removed)."""
    m = _TIME_12H_RE.search(text)
    if m:
        hour = int(m.group("hour"))
        minute = int(m.group("minute") or 0)
        if not 1 <= hour <= 12:
            raise OutOfRangeComponent(raw_text, f"hour {hour} is not a 12-hour clock value")
        if m.group("ampm").lower() == "p":
            hour = 12 if hour == 12 else hour + 12
        elif hour == 12:
            hour = 0
        return hour, minute, text[: m.start()] + " " + text[m.end():]

    m = _TIME_COLON_RE.search(text)
    if m:
        return int(m.group("hour")), int(m.group("minute")), text[: m.start()] + " " + text[m.end():]

    # "15.03 19.45": a dotted day.month comes first, the kickoff last
    dotted = list(_TIME_DOT_RE.finditer(text))
    if len(dotted) > 2:
        raise UnrecognizedFormat(raw_text, "cannot tell the kickoff time apart from the date")
    if dotted:
        m = dotted[-1]
        return int(m.group("hour")), int(m.group("minute")), text[: m.start()] + " " + text[m.end():]

    m = _NOON_RE.search(text)
    if m:
        return 12, 0, text[: m.start()] + " " + text[m.end():]

    raise UnrecognizedFormat(raw_text, "no kickoff time found")


def tokenize(raw_text: str, info: dtparser.parserinfo) -> DateParts:
    """Split raw schedule text into date/time components without judging them."""
    text = strip_diacritics(clean_text(raw_text))
    if not text:
        raise UnrecognizedFormat(raw_text, "empty date text")

    m = _ISO_RE.match(text)
    if m:
        return DateParts(
            day=int(m.group("day")),
            month=int(m.group("month")),
            year=int(m.group("year")),
            hour=int(m.group("hour")),
            minute=int(m.group("minute")),
            source_offset=m.group("offset"),
        )

    hour, minute, rest = _extract_time(text, raw_text)

    weekday_label: Optional[str] = None
    weekday: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None
    year: Optional[int] = None
    numeric_date = False
    numbers: List[int] = []

    for tok in _PUNCT_RE.sub(" ", rest).split():
        word = tok.rstrip(".")
        low = word.lower()
        if not word or low in FILLER_WORDS:
            continue

        nm = _NUMERIC_DATE_RE.match(word) or _ISO_DATE_RE.match(word)
        if nm:
            if numeric_date or month is not None:
                raise UnrecognizedFormat(raw_text, "more than one date in text")
            numeric_date = True
            day = int(nm.group("day"))
            month = int(nm.group("month"))
            if nm.group("year") is not None:
                if year is not None:
                    raise UnrecognizedFormat(raw_text, "more than one year in text")
                year = _expand_year(nm.group("year"))
            continue

        om = _ORDINAL_RE.match(word)
        if om:
            numbers.append(int(om.group(1)))
            continue

        if word.isdigit():
            if len(word) == 4:
                if year is not None:
                    raise UnrecognizedFormat(raw_text, "more than one year in text")
                year = int(word)
            elif len(word) <= 2:
                numbers.append(int(word))
            else:
                raise UnrecognizedFormat(raw_text, f"unexpected number {word!r}")
            continue

        wd = info.weekday(word)
        if wd is not None:
            if weekday is not None:
                raise UnrecognizedFormat(raw_text, "more than one weekday label")
            weekday, weekday_label = wd, word
            continue

        mo = info.month(word)
        if mo is not None:
            if month is not None:
                raise UnrecognizedFormat(raw_text, "more than one month")
            month = mo
            continue

        raise UnrecognizedFormat(raw_text, f"unexpected word {word!r}")

    if month is None:
        raise UnrecognizedFormat(raw_text, "no month found")

    if numeric_date:
        if numbers:
            raise UnrecognizedFormat(raw_text, "stray numbers next to a numeric date")
    else:
        if not numbers:
            raise UnrecognizedFormat(raw_text, "no day of month found")
        day = numbers[0]
        if len(numbers) == 2 and year is None:
            year = _two_digit_year(numbers[1])
        elif len(numbers) > 1:
            raise UnrecognizedFormat(raw_text, "too many numbers in date")

    return DateParts(
        day=day,
        month=month,
        year=year,
        hour=hour,
        minute=minute,
        weekday_label=weekday_label,
        weekday=weekday,
    )


def check_ranges(parts: DateParts, raw_text: str) -> None:
    if not 1 <= parts.month <= 12:
        raise OutOfRangeComponent(raw_text, f"month {parts.month} out of range")
    # Feb 29 stays possible until a year is known
    max_day = calendar.monthrange(parts.year if parts.year is not None else 2000, parts.month)[1]
    if not 1 <= parts.day <= max_day:
        raise OutOfRangeComponent(raw_text, f"day {parts.day} out of range for month {parts.month}")
    if parts.hour > 23:
        raise OutOfRangeComponent(raw_text, f"hour {parts.hour} out of range")
    if parts.minute > 59:
        raise OutOfRangeComponent(raw_text, f"minute {parts.minute} out of range")
    if parts.year is not None and not 1900 <= parts.year <= 9998:
        raise OutOfRangeComponent(raw_text, f"year {parts.year} out of range")
    if parts.source_offset is not None:
        _, off_hours, off_minutes = _offset_fields(parts.source_offset)
        if off_hours > 23 or off_minutes > 59:
            raise OutOfRangeComponent(raw_text, f"utc offset {parts.source_offset} out of range")


def nearest_future_year(month: int, day: int, reference_date: date) -> int:
    """Smallest year >= the reference year whose month/day is not before reference_date."""
    year = reference_date.year
    # nine years covers the longest gap between leap years
    for _ in range(9):
        try:
            candidate = date(year, month, day)
        except ValueError:
            year += 1
            continue
        if candidate >= reference_date:
            return year
        year += 1
    raise ValueError(f"no calendar year found for month={month} day={day}")


def _resolve_date(parts: DateParts, reference_date: date) -> date:
    year = parts.year if parts.year is not None else nearest_future_year(parts.month, parts.day, reference_date)
    return date(year, parts.month, parts.day)


def _exact(parts: DateParts, reference_date: date) -> Optional[_Resolution]:
    # needs something that pins the year: an explicit year or a weekday label
    if parts.weekday is None and parts.year is None:
        return None
    local_date = _resolve_date(parts, reference_date)
    if parts.weekday is not None and local_date.weekday() != parts.weekday:
        return None
    return _Resolution(local_date, ParsingStrategy.EXACT)


def _weekday_tolerant(parts: DateParts, reference_date: date) -> Optional[_Resolution]:
    if parts.weekday is None:
        return None
    local_date = _resolve_date(parts, reference_date)
    mismatch = None
    if local_date.weekday() != parts.weekday:
        mismatch = WeekdayMismatch(
            claimed_weekday=parts.weekday_label or WEEKDAY_NAMES[parts.weekday],
            actual_weekday=WEEKDAY_NAMES[local_date.weekday()],
            date=local_date.isoformat(),
        )
    return _Resolution(local_date, ParsingStrategy.WEEKDAY_TOLERANT, mismatch)


def _year_inferred(parts: DateParts, reference_date: date) -> Optional[_Resolution]:
    if parts.year is not None:
        return None
    return _Resolution(_resolve_date(parts, reference_date), ParsingStrategy.YEAR_INFERRED)


Strategy = Callable[[DateParts, date], Optional[_Resolution]]

STRATEGIES: tuple[tuple[ParsingStrategy, Strategy], ...] = (
    (ParsingStrategy.EXACT, _exact),
    (ParsingStrategy.WEEKDAY_TOLERANT, _weekday_tolerant),
    (ParsingStrategy.YEAR_INFERRED, _year_inferred),
)


def localize(naive: datetime, tz: tzinfo) -> tuple[datetime, list[str]]:
    """Attach tz to a wall-clock time and convert to UTC, noting DST oddities."""
    notes: list[str] = []
    aware = naive.replace(tzinfo=tz, fold=0)
    if aware.utcoffset() != naive.replace(tzinfo=tz, fold=1).utcoffset():
        roundtrip = aware.astimezone(timezone.utc).astimezone(tz).replace(tzinfo=None)
        if roundtrip != naive:
            notes.append("non-existent local time, shifted past the DST gap")
        else:
            notes.append("ambiguous local time, earlier offset used")
    return aware.astimezone(timezone.utc), notes


class DateTimeParser:
    def __init__(self, default_timezone: str = LONDON_TZ, info: Optional[dtparser.parserinfo] = None) -> None:
        resolve_timezone(default_timezone)
        self.default_timezone = default_timezone
        self.info = info or SiteParserInfo()

    def parse(
        self,
        raw_text: str,
        site_timezone: Optional[str],
        reference_time: datetime,
    ) -> ParsedDateTime:
        """Resolve raw_text to a UTC instant.

        site_timezone is the convention the source publishes in ("GMT",
        "UTC+2", "Europe/London"); None falls back to the parser default.
        reference_time anchors year inference and is never read from the
        wall clock.

        Raises UnrecognizedFormat or OutOfRangeComponent.
        """
        convention = site_timezone or self.default_timezone
        tz = resolve_timezone(convention)
        reference = ensure_utc(reference_time)

        parts = tokenize(raw_text, self.info)
        check_ranges(parts, raw_text)

        if parts.source_offset is not None:
            tz = _offset_tz(parts.source_offset)
            assumptions = f"Offset {parts.source_offset} taken from source timestamp; site convention {convention} not applied"
        else:
            assumptions = f"Parsed as {convention} timezone"

        reference_date = reference.astimezone(tz).date()

        for strategy, attempt in STRATEGIES:
            resolution = attempt(parts, reference_date)
            if resolution is None:
                continue
            d = resolution.local_date
            naive = datetime(d.year, d.month, d.day, parts.hour, parts.minute)
            utc_dt, notes = localize(naive, tz)
            if notes:
                assumptions = f"{assumptions} ({'; '.join(notes)})"
            metadata = ParseMetadata(
                original_source=raw_text,
                weekday_mismatch=resolution.weekday_mismatch,
                timezone_assumptions=assumptions,
                parsing_strategy=strategy,
            )
            logger.debug("parsed %r via %s -> %s", raw_text, strategy.value, utc_dt.isoformat())
            return ParsedDateTime(utc_dt, metadata)

        raise UnrecognizedFormat(raw_text, "tried exact, weekday-tolerant and year-inferred strategies")

    def parse_parts(
        self,
        date_text: str,
        time_text: str,
        site_timezone: Optional[str],
        reference_time: datetime,
    ) -> ParsedDateTime:
        """Parse date and time scraped from separate cells."""
        raw = " ".join(p for p in (clean_text(date_text), clean_text(time_text)) if p)
        return self.parse(raw, site_timezone, reference_time)


_default_parser: Optional[DateTimeParser] = None


def parse_datetime(raw_text: str, site_timezone: Optional[str], reference_time: datetime) -> ParsedDateTime:
    global _default_parser
    if _default_parser is None:
        _default_parser = DateTimeParser()
    return _default_parser.parse(raw_text, site_timezone, reference_time)
