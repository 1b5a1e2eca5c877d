"""Quality tiers for parsed fixtures.

Precedence is fixed: past fixtures are Historical whatever else is wrong with
them, fixtures beyond the planning horizon are Invalid (almost always a bad
year guess), and only then are metadata issues collected and graded.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from .config import ValidationSettings
from .models import (
    Fixture,
    FixtureValidation,
    Historical,
    Invalid,
    Issue,
    IssueCategory,
    IssueSeverity,
    ParsingStrategy,
    Valid,
    ValidatedFixture,
    ValidWithWarnings,
)
from .normalise import is_placeholder_team, is_placeholder_text
from .utils import LONDON_TZ, ensure_utc, iso_z, to_local

logger = logging.getLogger(__name__)

TIER_LABELS = {
    "valid": "Confirmed",
    "valid_with_warnings": "Confirmed with warnings",
    "invalid": "Unreliable, keep off calendars",
    "historical": "Already played",
}


class FixtureValidator:
    def __init__(self, settings: Optional[ValidationSettings] = None, display_timezone: str = LONDON_TZ) -> None:
        self.settings = settings or ValidationSettings()
        self.display_timezone = display_timezone

    def validate(self, fixture: Fixture, reference_time: datetime) -> FixtureValidation:
        reference = ensure_utc(reference_time)

        if fixture.datetime < reference:
            return Historical(original_datetime=fixture.datetime)

        horizon = reference + relativedelta(years=self.settings.horizon_years)
        if fixture.datetime > horizon:
            return Invalid(issues=(self._too_far_ahead(fixture, horizon),))

        issues = self.collect_issues(fixture)
        if any(i.severity.at_least(IssueSeverity.ERROR) for i in issues):
            return Invalid(issues=tuple(issues))
        if issues:
            return ValidWithWarnings(issues=tuple(issues))
        return Valid()

    def collect_issues(self, fixture: Fixture) -> List[Issue]:
        """Metadata and field anomalies, in detection order."""
        issues: List[Issue] = []
        meta = fixture.parse_metadata

        mismatch = meta.weekday_mismatch
        if mismatch is not None:
            issues.append(
                Issue(
                    severity=IssueSeverity.WARNING,
                    category=IssueCategory.WEEKDAY_MISMATCH,
                    message=(
                        f"Weekday mismatch: source listed {mismatch.claimed_weekday} "
                        f"but {mismatch.date} is a {mismatch.actual_weekday}"
                    ),
                    fields=("parse_metadata.weekday_mismatch",),
                    suggested_fix="Verify the fixture date; if it is right, ignore the weekday label.",
                )
            )

        if meta.parsing_strategy is ParsingStrategy.YEAR_INFERRED:
            issues.append(
                Issue(
                    severity=IssueSeverity.WARNING,
                    category=IssueCategory.YEAR_INFERRED,
                    message=f"Year {self._local_year(fixture)} was assumed, not stated by the source",
                    fields=("parse_metadata.parsing_strategy", "parse_metadata.original_source"),
                    suggested_fix="Confirm the season on the source page.",
                )
            )

        if is_placeholder_text(fixture.venue):
            issues.append(
                Issue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.MISSING_DATA,
                    message="Venue information missing",
                    fields=("venue",),
                )
            )

        if is_placeholder_text(fixture.competition):
            issues.append(
                Issue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.MISSING_DATA,
                    message="Competition information missing",
                    fields=("competition",),
                )
            )

        if self.settings.flag_placeholder_opponent and is_placeholder_team(fixture.opponent):
            issues.append(
                Issue(
                    severity=IssueSeverity.WARNING,
                    category=IssueCategory.MISSING_DATA,
                    message=f"Opponent not yet determined ({fixture.opponent})",
                    fields=("opponent",),
                    suggested_fix="Check the source closer to the fixture date.",
                )
            )

        if self.settings.flag_unusual_kickoff:
            local = fixture.local_time(self.display_timezone)
            if not self.settings.earliest_kickoff_hour <= local.hour <= self.settings.latest_kickoff_hour:
                issues.append(
                    Issue(
                        severity=IssueSeverity.WARNING,
                        category=IssueCategory.SUSPICIOUS_TIME,
                        message=f"Unusual kickoff time: {local:%H:%M} {self.display_timezone}",
                        fields=("datetime", "parse_metadata.timezone_assumptions"),
                        suggested_fix="Verify the site's timezone convention.",
                    )
                )

        return issues

    def describe(self, fixture: Fixture, validation: FixtureValidation) -> str:
        """One-line, human-facing summary. Advisory only: consumers branch on the tier."""
        text = (
            f"{fixture.team} vs {fixture.opponent} at {fixture.venue} "
            f"({fixture.competition}) - {TIER_LABELS[validation.tier]}"
        )
        notes = [self._note(fixture, issue) for issue in validation.issues]
        if isinstance(validation, Historical):
            notes.append(f"kicked off {to_local(validation.original_datetime, self.display_timezone):%Y-%m-%d}")
        if notes:
            text += f" ({'; '.join(notes)})"
        return text

    def validated(self, fixture: Fixture, reference_time: datetime) -> ValidatedFixture:
        validation = self.validate(fixture, reference_time)
        logger.debug("%s vs %s -> %s", fixture.team, fixture.opponent, validation.tier)
        return ValidatedFixture(
            fixture=fixture,
            validation=validation,
            description=self.describe(fixture, validation),
        )

    def _note(self, fixture: Fixture, issue: Issue) -> str:
        mismatch = fixture.parse_metadata.weekday_mismatch
        if issue.category is IssueCategory.WEEKDAY_MISMATCH and mismatch is not None:
            return f"weekday originally listed as {mismatch.claimed_weekday}, resolved to {mismatch.actual_weekday}"
        if issue.category is IssueCategory.YEAR_INFERRED:
            return f"year assumed as {self._local_year(fixture)}"
        return issue.message[:1].lower() + issue.message[1:]

    def _local_year(self, fixture: Fixture) -> int:
        return fixture.local_time(self.display_timezone).year

    def _too_far_ahead(self, fixture: Fixture, horizon: datetime) -> Issue:
        return Issue(
            severity=IssueSeverity.CRITICAL,
            category=IssueCategory.DATE_OUT_OF_RANGE,
            message=(
                f"date too far in future: {iso_z(fixture.datetime)} is after the "
                f"{self.settings.horizon_years}-year horizon ({iso_z(horizon)})"
            ),
            fields=("datetime", "parse_metadata.parsing_strategy"),
            suggested_fix="Check year inference and the source data.",
        )


_default_validator: Optional[FixtureValidator] = None


def _validator() -> FixtureValidator:
    global _default_validator
    if _default_validator is None:
        _default_validator = FixtureValidator()
    return _default_validator


def validate(fixture: Fixture, reference_time: datetime) -> FixtureValidation:
    return _validator().validate(fixture, reference_time)


def describe(fixture: Fixture, validation: FixtureValidation) -> str:
    return _validator().describe(fixture, validation)
