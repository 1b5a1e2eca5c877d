"""
Pytest fixtures for testing
"""
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from calpal.models import Fixture, ParseMetadata, ParsingStrategy, WeekdayMismatch  # noqa: E402
from calpal.parsing import DateTimeParser  # noqa: E402
from calpal.validation import FixtureValidator  # noqa: E402


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def reference_time():
    """2025-01-01T00:00Z, a Wednesday"""
    return utc(2025, 1, 1)


@pytest.fixture
def parser():
    return DateTimeParser("Europe/London")


@pytest.fixture
def validator():
    return FixtureValidator()


@pytest.fixture
def make_fixture():
    """Factory for fixtures with sensible defaults"""

    def _make(
        when=None,
        strategy=ParsingStrategy.EXACT,
        mismatch=None,
        team="Arsenal",
        opponent="Chelsea",
        venue="Emirates Stadium",
        competition="Premier League",
        original_source="Fri Aug 15 16:30",
    ):
        metadata = ParseMetadata(
            original_source=original_source,
            weekday_mismatch=mismatch,
            timezone_assumptions="Parsed as Europe/London timezone",
            parsing_strategy=strategy,
        )
        return Fixture(
            team=team,
            opponent=opponent,
            datetime=when or utc(2025, 8, 15, 16, 30),
            venue=venue,
            competition=competition,
            parse_metadata=metadata,
        )

    return _make


@pytest.fixture
def sunday_mismatch():
    return WeekdayMismatch(claimed_weekday="Sun", actual_weekday="Friday", date="2025-08-15")


@pytest.fixture
def write_config(tmp_path):
    """Write a config.yaml into tmp_path and return its path"""

    def _write(text):
        path = tmp_path / "config.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
