from __future__ import annotations

import pathlib
from typing import List, Optional

import yaml  # type: ignore
from pydantic import BaseModel, Field, field_validator, model_validator

from .utils import LONDON_TZ, read_env, resolve_timezone

PACKAGE_DIR = pathlib.Path(__file__).resolve().parent
DEFAULT_CONFIG = PACKAGE_DIR / "config.yaml"


class ValidationSettings(BaseModel):
    horizon_years: int = Field(default=2, ge=1)
    flag_placeholder_opponent: bool = False
    flag_unusual_kickoff: bool = False
    earliest_kickoff_hour: int = Field(default=8, ge=0, le=23)
    latest_kickoff_hour: int = Field(default=23, ge=0, le=23)

    @model_validator(mode="after")
    def _window_order(self) -> ValidationSettings:
        if self.earliest_kickoff_hour > self.latest_kickoff_hour:
            raise ValueError("earliest_kickoff_hour must not be after latest_kickoff_hour")
        return self


class SourceSettings(BaseModel):
    name: str
    team: Optional[str] = None
    path: str
    timezone: Optional[str] = None

    @field_validator("timezone")
    @classmethod
    def _known_tz(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            resolve_timezone(v)
        return v


class Settings(BaseModel):
    default_timezone: str = LONDON_TZ
    display_timezone: str = LONDON_TZ
    log_level: str = "INFO"
    output: str = "public/data/fixtures.json"
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    sources: List[SourceSettings] = Field(default_factory=list)
    # relative source paths resolve against this directory
    base_dir: Optional[str] = None

    @field_validator("default_timezone", "display_timezone")
    @classmethod
    def _known_tz(cls, v: str) -> str:
        resolve_timezone(v)
        return v

    def resolve_path(self, p: str) -> pathlib.Path:
        path = pathlib.Path(p)
        if path.is_absolute() or not self.base_dir:
            return path
        return pathlib.Path(self.base_dir) / path


def config_path(explicit: str | pathlib.Path | None = None) -> pathlib.Path:
    if explicit:
        return pathlib.Path(explicit)
    env = read_env("CALPAL_CONFIG")
    return pathlib.Path(env) if env else DEFAULT_CONFIG


def load_config(path: str | pathlib.Path | None = None) -> Settings:
    cfg_path = config_path(path)
    raw = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    raw.setdefault("base_dir", str(cfg_path.resolve().parent))
    level = read_env("CALPAL_LOG_LEVEL")
    if level:
        raw["log_level"] = level
    return Settings(**raw)
