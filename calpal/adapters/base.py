from __future__ import annotations

from typing import Any, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class FixtureSource(Protocol):
    """Anything that can hand over raw fixture fields for one site.

    Records are plain dicts with team, opponent, raw_date, venue and
    competition keys; they are validated downstream so one bad row does not
    sink the rest.
    """

    name: str
    team: Optional[str]
    timezone: Optional[str]

    def fetch(self) -> List[dict[str, Any]]: ...


def fill_defaults(record: dict[str, Any], source: FixtureSource) -> dict[str, Any]:
    out = dict(record)
    if source.team and not out.get("team"):
        out["team"] = source.team
    if source.timezone and not out.get("timezone"):
        out["timezone"] = source.timezone
    out.setdefault("source", source.name)
    return out
