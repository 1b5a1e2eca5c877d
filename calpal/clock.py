from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .utils import ensure_utc, now_utc, parse_iso_z


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time. Only read at the orchestration edge, once per batch."""

    def now(self) -> datetime:
        return now_utc()


class FixedClock:
    def __init__(self, instant: datetime) -> None:
        self._instant = ensure_utc(instant)

    @classmethod
    def from_iso(cls, value: str) -> FixedClock:
        return cls(parse_iso_z(value))

    def now(self) -> datetime:
        return self._instant

    def __repr__(self) -> str:
        return f"FixedClock({self._instant.isoformat()})"
