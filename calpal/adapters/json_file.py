from __future__ import annotations

import logging
import pathlib
from typing import Any, List, Optional

from ..utils import read_json
from .base import fill_defaults

logger = logging.getLogger(__name__)


class JsonFileSource:
    """Raw records cached on disk by the extraction layer.

    Accepts either a bare list or ``{"fixtures": [...]}``.
    """

    def __init__(self, name: str, path: str | pathlib.Path, team: Optional[str] = None, timezone: Optional[str] = None) -> None:
        self.name = name
        self.path = pathlib.Path(path)
        self.team = team
        self.timezone = timezone

    def fetch(self) -> List[dict[str, Any]]:
        data = read_json(self.path)
        rows = data.get("fixtures", []) if isinstance(data, dict) else data
        if not isinstance(rows, list):
            raise ValueError(f"{self.path}: expected a list of fixture records")
        out: List[dict[str, Any]] = []
        for idx, row in enumerate(rows):
            if not isinstance(row, dict):
                logger.warning("%s[%d]: skipping non-object record", self.path.name, idx)
                continue
            out.append(fill_defaults(row, self))
        logger.debug("%s: %d raw records from %s", self.name, len(out), self.path)
        return out

    def __repr__(self) -> str:
        return f"JsonFileSource({self.name!r}, {str(self.path)!r})"
