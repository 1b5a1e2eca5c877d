from .clock import FixedClock, SystemClock
from .errors import OutOfRangeComponent, ParseError, UnknownTimezoneError, UnrecognizedFormat
from .models import (
    Fixture,
    Historical,
    Invalid,
    Issue,
    IssueCategory,
    IssueSeverity,
    ParseMetadata,
    ParsingStrategy,
    RawFixture,
    Valid,
    ValidatedFixture,
    ValidWithWarnings,
    WeekdayMismatch,
)
from .parsing import DateTimeParser, parse_datetime
from .pipeline import BatchResult, ParseFailure, process_batch, run_sources
from .validation import FixtureValidator, describe, validate

__all__ = [
    "BatchResult",
    "DateTimeParser",
    "FixedClock",
    "Fixture",
    "FixtureValidator",
    "Historical",
    "Invalid",
    "Issue",
    "IssueCategory",
    "IssueSeverity",
    "OutOfRangeComponent",
    "ParseError",
    "ParseFailure",
    "ParseMetadata",
    "ParsingStrategy",
    "RawFixture",
    "SystemClock",
    "UnknownTimezoneError",
    "UnrecognizedFormat",
    "Valid",
    "ValidWithWarnings",
    "ValidatedFixture",
    "WeekdayMismatch",
    "describe",
    "parse_datetime",
    "process_batch",
    "run_sources",
    "validate",
]
