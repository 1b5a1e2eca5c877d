from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .normalise import clean_text
from .utils import LONDON_TZ, ensure_utc, iso_z, to_local


class ParsingStrategy(str, Enum):
    EXACT = "exact"
    WEEKDAY_TOLERANT = "weekday_tolerant"
    YEAR_INFERRED = "year_inferred"

    @property
    def label(self) -> str:
        return self.value.replace("_", "-")


class IssueSeverity(str, Enum):
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def at_least(self, other: IssueSeverity) -> bool:
        return self.rank >= other.rank


_SEVERITY_RANK = {IssueSeverity.WARNING: 0, IssueSeverity.ERROR: 1, IssueSeverity.CRITICAL: 2}


class IssueCategory(str, Enum):
    WEEKDAY_MISMATCH = "weekday_mismatch"
    YEAR_INFERRED = "year_inferred"
    DATE_OUT_OF_RANGE = "date_out_of_range"
    MISSING_DATA = "missing_data"
    SUSPICIOUS_TIME = "suspicious_time"


class WeekdayMismatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    claimed_weekday: str  # label as written by the source, e.g. "Sun"
    actual_weekday: str  # full English name of the resolved local date
    date: str  # YYYY-MM-DD in the site timezone
    tolerated: bool = True


class ParseMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    original_source: str
    weekday_mismatch: Optional[WeekdayMismatch] = None
    timezone_assumptions: str
    parsing_strategy: ParsingStrategy

    @model_validator(mode="after")
    def _mismatch_is_never_exact(self) -> ParseMetadata:
        if self.weekday_mismatch is not None and self.parsing_strategy is ParsingStrategy.EXACT:
            raise ValueError("weekday mismatch recorded on an exact parse")
        return self

    def has_data_quality_issues(self) -> bool:
        return self.weekday_mismatch is not None or self.parsing_strategy is not ParsingStrategy.EXACT

    def timezone_info(self) -> str:
        info = f"{self.timezone_assumptions} - {self.original_source}"
        if self.weekday_mismatch is not None:
            info += f" (claimed {self.weekday_mismatch.claimed_weekday}, actually {self.weekday_mismatch.actual_weekday})"
        if self.parsing_strategy is not ParsingStrategy.EXACT:
            info += f" [{self.parsing_strategy.label} parsing]"
        return info


class Fixture(BaseModel):
    model_config = ConfigDict(frozen=True)

    team: str
    opponent: str
    datetime: dt.datetime  # always UTC
    venue: str
    competition: str
    parse_metadata: ParseMetadata

    @field_validator("team", "opponent", "venue", "competition", mode="before")
    @classmethod
    def _non_empty(cls, v: Any) -> str:
        s = clean_text(v)
        if not s:
            raise ValueError("must not be empty")
        return s

    @field_validator("datetime")
    @classmethod
    def _to_utc(cls, v: dt.datetime) -> dt.datetime:
        return ensure_utc(v)

    def local_time(self, tz_name: str = LONDON_TZ) -> dt.datetime:
        return to_local(self.datetime, tz_name)


class RawFixture(BaseModel):
    """Text fields for one fixture as handed over by the extraction layer."""

    model_config = ConfigDict(frozen=True)

    team: str
    opponent: str
    raw_date: str
    venue: str
    competition: str
    timezone: Optional[str] = None  # overrides the source's convention
    source: Optional[str] = None

    @field_validator("team", "opponent", "venue", "competition", mode="before")
    @classmethod
    def _non_empty(cls, v: Any) -> str:
        s = clean_text(v)
        if not s:
            raise ValueError("must not be empty")
        return s

    @field_validator("raw_date", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str:
        return "" if v is None else str(v)


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: IssueSeverity
    category: IssueCategory
    message: str
    fields: Tuple[str, ...] = ()
    suggested_fix: Optional[str] = None

    def to_export(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "category": self.category.value,
            "message": self.message,
            "fields": list(self.fields),
            "suggested_fix": self.suggested_fix,
        }


class Valid(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier: Literal["valid"] = "valid"

    @property
    def issues(self) -> Tuple[Issue, ...]:
        return ()

    def to_export(self) -> dict[str, Any]:
        return {"tier": self.tier, "issues": []}


class ValidWithWarnings(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier: Literal["valid_with_warnings"] = "valid_with_warnings"
    issues: Tuple[Issue, ...]

    def to_export(self) -> dict[str, Any]:
        return {"tier": self.tier, "issues": [i.to_export() for i in self.issues]}


class Invalid(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier: Literal["invalid"] = "invalid"
    issues: Tuple[Issue, ...]

    def to_export(self) -> dict[str, Any]:
        return {"tier": self.tier, "issues": [i.to_export() for i in self.issues]}


class Historical(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier: Literal["historical"] = "historical"
    original_datetime: dt.datetime

    @field_validator("original_datetime")
    @classmethod
    def _to_utc(cls, v: dt.datetime) -> dt.datetime:
        return ensure_utc(v)

    @property
    def issues(self) -> Tuple[Issue, ...]:
        return ()

    def to_export(self) -> dict[str, Any]:
        return {"tier": self.tier, "issues": [], "original_datetime": iso_z(self.original_datetime)}


FixtureValidation = Annotated[
    Union[Valid, ValidWithWarnings, Invalid, Historical],
    Field(discriminator="tier"),
]

TIERS = ("valid", "valid_with_warnings", "invalid", "historical")
USABLE_TIERS = ("valid", "valid_with_warnings")


class ValidatedFixture(BaseModel):
    model_config = ConfigDict(frozen=True)

    fixture: Fixture
    validation: FixtureValidation
    description: str

    def is_usable(self) -> bool:
        return self.validation.tier in USABLE_TIERS

    def to_export(self) -> dict[str, Any]:
        f = self.fixture
        meta = f.parse_metadata
        return {
            "team": f.team,
            "opponent": f.opponent,
            "datetime": iso_z(f.datetime),
            "venue": f.venue,
            "competition": f.competition,
            "parsing_strategy": meta.parsing_strategy.value,
            "timezone_assumptions": meta.timezone_assumptions,
            "original_source": meta.original_source,
            "weekday_mismatch": meta.weekday_mismatch.model_dump() if meta.weekday_mismatch else None,
            "validation": self.validation.to_export(),
            "usable": self.is_usable(),
            "description": self.description,
        }
