from __future__ import annotations

from typing import List

from ..config import Settings
from .base import FixtureSource, fill_defaults
from .json_file import JsonFileSource
from .static import StaticSource


def sources_from_settings(settings: Settings) -> List[FixtureSource]:
    return [
        JsonFileSource(
            name=s.name,
            path=settings.resolve_path(s.path),
            team=s.team,
            timezone=s.timezone,
        )
        for s in settings.sources
    ]


__all__ = [
    "FixtureSource",
    "JsonFileSource",
    "StaticSource",
    "fill_defaults",
    "sources_from_settings",
]
