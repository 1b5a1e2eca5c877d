from __future__ import annotations

import re
import unicodedata
from typing import Any


_WS_RE = re.compile(r"\s+")


def strip_diacritics(s: str) -> str:
    return unicodedata.normalize("NFD", s).encode("ascii", "ignore").decode("ascii")


def clean_text(value: Any) -> str:
    """Collapse whitespace (including non-breaking spaces) in a scraped field."""
    if value is None:
        return ""
    return _WS_RE.sub(" ", str(value).replace("\xa0", " ")).strip()


_PLACEHOLDER_SIMPLE = re.compile(r"(^|\b)(tbd|tba|tbc|bye|unknown|to be (confirmed|decided|announced))($|\b)", re.I)
_PLACEHOLDER_STAGE = re.compile(
    r"(quarter\s*final|semi\s*final|final|prelim|preliminary|qualifier|play[- ]?off|round\s*\d+)",
    re.I,
)
_PLACEHOLDER_GROUP = re.compile(r"(group\s*[a-z]\b|group\s*\d+|pool\s*[a-z]\b|pool\s*\d+)", re.I)
_PLACEHOLDER_SHORT = re.compile(r"(^|\b)(qf|sf|rf|r\d{1,2})(\b|$)", re.I)

_PLACEHOLDER_WORDS = [
    "winner",
    "loser",
    "runner-up",
    "runner up",
    "runners-up",
    "runners up",
    "1st place",
    "2nd place",
    "3rd place",
]


def is_placeholder_text(value: str) -> bool:
    """Blank or an explicit "TBC"/"Unknown" marker."""
    raw = clean_text(value)
    if not raw or raw in {"-", "?", "n/a", "N/A"}:
        return True
    return bool(_PLACEHOLDER_SIMPLE.search(raw))


def is_placeholder_team(name: str) -> bool:
    """Opponent slots that are not a real side yet ("Winner QF1", "Group A runner-up")."""
    if is_placeholder_text(name):
        return True
    s = strip_diacritics(clean_text(name)).lower()

    if any(w in s for w in _PLACEHOLDER_WORDS):
        return True
    if _PLACEHOLDER_STAGE.search(s):
        return True
    if _PLACEHOLDER_GROUP.search(s):
        return True
    if _PLACEHOLDER_SHORT.search(s):
        return True

    # "Team A/Team B" pending a decider
    if re.match(r"^[^/]+/.+$", s) and not re.search(r"\b(v|vs|versus)\b", s):
        return True

    return False
