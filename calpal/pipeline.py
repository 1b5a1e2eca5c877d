from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Any, Iterable, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from .adapters import FixtureSource
from .clock import Clock
from .errors import ParseError, UnknownTimezoneError
from .models import Fixture, RawFixture, ValidatedFixture
from .parsing import DateTimeParser
from .utils import LONDON_TZ, ensure_utc, iso_z, now_utc
from .validation import FixtureValidator

logger = logging.getLogger(__name__)

FailureKind = Literal[
    "parse_error",
    "unrecognized_format",
    "out_of_range_component",
    "unknown_timezone",
    "invalid_record",
    "source_error",
]


class ParseFailure(BaseModel):
    source: Optional[str] = None
    kind: FailureKind
    message: str
    raw: dict[str, Any] = Field(default_factory=dict)

    def to_export(self) -> dict[str, Any]:
        return {"source": self.source, "kind": self.kind, "message": self.message, "raw": self.raw}


class BatchResult(BaseModel):
    reference_time: datetime
    validated: List[ValidatedFixture] = Field(default_factory=list)
    failures: List[ParseFailure] = Field(default_factory=list)

    def usable(self) -> List[ValidatedFixture]:
        return [v for v in self.validated if v.is_usable()]

    def counts_by_tier(self) -> dict[str, int]:
        return dict(Counter(v.validation.tier for v in self.validated))

    def extend(self, other: BatchResult) -> None:
        self.validated.extend(other.validated)
        self.failures.extend(other.failures)


def _failure(record: dict[str, Any], kind: FailureKind, message: str) -> ParseFailure:
    return ParseFailure(source=record.get("source"), kind=kind, message=message, raw=dict(record))


def process_record(
    record: dict[str, Any],
    reference_time: datetime,
    default_timezone: str,
    parser: DateTimeParser,
    validator: FixtureValidator,
) -> ValidatedFixture | ParseFailure:
    try:
        raw = RawFixture(**record)
    except ValidationError as e:
        return _failure(record, "invalid_record", str(e))

    try:
        parsed = parser.parse(raw.raw_date, raw.timezone or default_timezone, reference_time)
    except ParseError as e:
        return _failure(record, e.kind, str(e))
    except UnknownTimezoneError as e:
        return _failure(record, e.kind, str(e))

    fixture = Fixture(
        team=raw.team,
        opponent=raw.opponent,
        datetime=parsed.datetime,
        venue=raw.venue,
        competition=raw.competition,
        parse_metadata=parsed.metadata,
    )
    return validator.validated(fixture, reference_time)


def process_batch(
    records: Iterable[dict[str, Any] | RawFixture],
    reference_time: datetime,
    default_timezone: str = LONDON_TZ,
    parser: Optional[DateTimeParser] = None,
    validator: Optional[FixtureValidator] = None,
) -> BatchResult:
    """Parse and validate every record against one reference time.

    A record that fails to parse is collected as a failure; the rest of the
    batch carries on. Output order follows input order.
    """
    reference = ensure_utc(reference_time)
    parser = parser or DateTimeParser(default_timezone)
    validator = validator or FixtureValidator()

    result = BatchResult(reference_time=reference)
    for record in records:
        if isinstance(record, RawFixture):
            record = record.model_dump(exclude_none=True)
        outcome = process_record(record, reference, default_timezone, parser, validator)
        if isinstance(outcome, ParseFailure):
            logger.warning("skipping fixture from %s: %s (%s)", outcome.source or "input", outcome.message, outcome.kind)
            result.failures.append(outcome)
        else:
            result.validated.append(outcome)
    return result


def run_sources(
    sources: Iterable[FixtureSource],
    clock: Clock,
    default_timezone: str = LONDON_TZ,
    parser: Optional[DateTimeParser] = None,
    validator: Optional[FixtureValidator] = None,
) -> BatchResult:
    # one reference time for the whole cycle so tiers are consistent across sources
    reference = ensure_utc(clock.now())
    parser = parser or DateTimeParser(default_timezone)
    validator = validator or FixtureValidator()

    combined = BatchResult(reference_time=reference)
    for source in sources:
        try:
            records = source.fetch()
        except (OSError, ValueError) as e:
            logger.error("source %s failed: %s", source.name, e)
            combined.failures.append(ParseFailure(source=source.name, kind="source_error", message=str(e)))
            continue
        batch = process_batch(records, reference, default_timezone, parser, validator)
        logger.info(
            "%s: %d fixtures, %d failures, tiers %s",
            source.name,
            len(batch.validated),
            len(batch.failures),
            batch.counts_by_tier(),
        )
        combined.extend(batch)
    return combined


def export_payload(result: BatchResult, generated_at: Optional[datetime] = None) -> dict[str, Any]:
    return {
        "generated_at": iso_z(generated_at or now_utc()),
        "reference_time": iso_z(result.reference_time),
        "counts": result.counts_by_tier(),
        "fixtures": [v.to_export() for v in result.validated],
        "failures": [f.to_export() for f in result.failures],
    }
