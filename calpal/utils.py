from __future__ import annotations

import os
import pathlib
import re
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import orjson

from .errors import UnknownTimezoneError

LONDON_TZ = "Europe/London"

_UTC_ALIASES = {"utc", "gmt", "z", "zulu", "etc/utc", "etc/gmt"}
_OFFSET_RE = re.compile(r"^(?:utc|gmt)?\s*([+-])\s*(\d{1,2})(?::?(\d{2}))?$", re.I)


def ensure_dir(p: str | pathlib.Path) -> None:
    pathlib.Path(p).mkdir(parents=True, exist_ok=True)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    # naive values are taken as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def iso_z(dt: datetime) -> str:
    return ensure_utc(dt).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def parse_iso_z(value: str) -> datetime:
    return ensure_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))


def resolve_timezone(convention: str) -> tzinfo:
    """Map a site timezone convention ("GMT", "UTC+2", "Europe/London") to a tzinfo."""
    name = (convention or "").strip()
    if not name:
        raise UnknownTimezoneError(convention)
    if name.lower() in _UTC_ALIASES:
        return timezone.utc
    m = _OFFSET_RE.match(name)
    if m:
        sign = -1 if m.group(1) == "-" else 1
        hours = int(m.group(2))
        minutes = int(m.group(3) or 0)
        if hours > 14 or minutes > 59:
            raise UnknownTimezoneError(convention)
        return timezone(sign * timedelta(hours=hours, minutes=minutes), name=name)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise UnknownTimezoneError(convention) from e


def to_local(dt: datetime, tz_name: str = LONDON_TZ) -> datetime:
    return ensure_utc(dt).astimezone(resolve_timezone(tz_name))


def write_json(path: str | pathlib.Path, data) -> None:
    ensure_dir(pathlib.Path(path).parent)
    with open(path, "wb") as f:
        f.write(orjson.dumps(data, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS))


def read_json(path: str | pathlib.Path):
    return orjson.loads(pathlib.Path(path).read_bytes())


def read_env(name: str, default: str | None = None) -> str | None:
    return os.environ.get(name, default)
