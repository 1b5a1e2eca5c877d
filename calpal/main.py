from __future__ import annotations

import argparse
import json
import logging
import pathlib
from typing import List, Optional

from .adapters import sources_from_settings
from .clock import Clock, FixedClock, SystemClock
from .config import Settings, load_config
from .errors import ParseError, UnknownTimezoneError
from .logging_utils import setup_logging
from .models import TIERS
from .parsing import DateTimeParser
from .pipeline import export_payload, run_sources
from .utils import iso_z, read_json, write_json
from .validation import FixtureValidator

logger = logging.getLogger("calpal")

REQUIRED_KEYS = (
    "team",
    "opponent",
    "datetime",
    "venue",
    "competition",
    "parsing_strategy",
    "validation",
    "description",
)


def _clock(now: Optional[str]) -> Clock:
    return FixedClock.from_iso(now) if now else SystemClock()


def _output_path(settings: Settings, explicit: Optional[str]) -> pathlib.Path:
    return pathlib.Path(explicit) if explicit else settings.resolve_path(settings.output)


def parse_cmd(text: str, tz: Optional[str], now: Optional[str], settings: Settings) -> None:
    parser = DateTimeParser(settings.default_timezone)
    reference = _clock(now).now()
    try:
        parsed = parser.parse(text, tz, reference)
    except ParseError as e:
        print(f"{e.kind}: {e}")
        raise SystemExit(1)
    except UnknownTimezoneError as e:
        print(e)
        raise SystemExit(1)
    out = {
        "datetime": iso_z(parsed.datetime),
        "reference_time": iso_z(reference),
        "metadata": parsed.metadata.model_dump(mode="json"),
        "summary": parsed.metadata.timezone_info(),
    }
    print(json.dumps(out, indent=2))


def build_cmd(settings: Settings, now: Optional[str], output: Optional[str]) -> None:
    sources = sources_from_settings(settings)
    if not sources:
        logger.warning("no sources configured")

    parser = DateTimeParser(settings.default_timezone)
    validator = FixtureValidator(settings.validation, settings.display_timezone)
    result = run_sources(sources, _clock(now), settings.default_timezone, parser, validator)

    path = _output_path(settings, output)
    write_json(path, export_payload(result))
    logger.info(
        "wrote %d fixtures (%d usable, %d failures) to %s",
        len(result.validated),
        len(result.usable()),
        len(result.failures),
        path,
    )


def validate_cmd(settings: Settings, input_path: Optional[str]) -> None:
    # Basic validation: file exists, fixtures carry the export keys and a known tier
    ok = True
    p = _output_path(settings, input_path)
    if not p.exists():
        print(f"missing {p}")
        raise SystemExit(1)
    data = read_json(p)
    fixtures = data.get("fixtures") if isinstance(data, dict) else None
    if not isinstance(fixtures, list):
        print(f"{p.name}: fixtures not a list")
        raise SystemExit(1)
    for idx, f in enumerate(fixtures):
        for field in REQUIRED_KEYS:
            if not f.get(field):
                print(f"fixtures[{idx}] missing {field}")
                ok = False
                break
        else:
            tier = (f.get("validation") or {}).get("tier")
            if tier not in TIERS:
                print(f"fixtures[{idx}] unknown tier {tier!r}")
                ok = False
    if not ok:
        raise SystemExit(1)
    print("ok")


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="calpal", description="Fixture date parsing and validation")
    parser.add_argument("--config", help="path to config.yaml")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_parse = sub.add_parser("parse", help="parse one raw date string")
    p_parse.add_argument("text")
    p_parse.add_argument("--tz", help="site timezone convention, e.g. GMT or UTC+2")
    p_parse.add_argument("--now", help="reference time (ISO 8601), defaults to the wall clock")

    p_build = sub.add_parser("build", help="parse and validate all configured sources")
    p_build.add_argument("--now", help="reference time (ISO 8601), defaults to the wall clock")
    p_build.add_argument("--output")

    p_validate = sub.add_parser("validate", help="sanity-check an export file")
    p_validate.add_argument("--input")

    args = parser.parse_args(argv)
    settings = load_config(args.config)
    setup_logging(settings.log_level)

    if args.cmd == "parse":
        parse_cmd(args.text, args.tz, args.now, settings)
    elif args.cmd == "build":
        build_cmd(settings, args.now, args.output)
    elif args.cmd == "validate":
        validate_cmd(settings, args.input)


if __name__ == "__main__":
    main()
