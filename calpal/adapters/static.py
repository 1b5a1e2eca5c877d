from __future__ import annotations

from typing import Any, Iterable, List, Optional

from .base import fill_defaults


class StaticSource:
    """In-memory records, for replays and tests."""

    def __init__(self, name: str, records: Iterable[dict[str, Any]], team: Optional[str] = None, timezone: Optional[str] = None) -> None:
        self.name = name
        self.team = team
        self.timezone = timezone
        self._records = [dict(r) for r in records]

    def fetch(self) -> List[dict[str, Any]]:
        return [fill_defaults(r, self) for r in self._records]
