"""
Settings and the list of monitored water bodies.

Settings live in ``config/settings.yaml`` under the ``default`` key; set
``RIVER_WATCH_SETTINGS`` to load another file.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from app.exceptions import ConfigurationError
from app.models.schemas import Thresholds

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_SETTINGS_PATH = PROJECT_ROOT / "config" / "settings.yaml"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/91.0.4472.124 Safari/537.36"
)


class WaterBodyConfig(BaseModel):
    name: str
    location: str
    is_lake: bool = False
    level_url: str | None = None
    flow_url: str | None = None
    temperature_url: str | None = None
    temperature_parser: Literal["table", "lake"] = "table"
    chart_reference_year: int | None = Field(
        default=None,
        ge=1900,
        le=2100,
        description="Year the lake chart's day-of-year offsets count from; defaults to the current year.",
    )
    flow_thresholds: Thresholds | None = None
    webcam_url: str | None = None

    @model_validator(mode="after")
    def _check_lake_sources(self) -> "WaterBodyConfig":
        if self.is_lake:
            if self.level_url or self.flow_url:
                raise ValueError(f"{self.name}: lakes only publish temperature")
            if not self.temperature_url:
                raise ValueError(f"{self.name}: lakes need a temperature_url")
        return self


class Settings(BaseModel):
    timezone: str = "Europe/Berlin"
    cache_ttl_seconds: int = 900
    request_timeout: float = 30.0
    log_level: str = "INFO"
    user_agent: str = USER_AGENT
    water_bodies: list[WaterBodyConfig] = Field(default_factory=list)


def load_settings(settings_path: Path) -> Settings:
    try:
        with settings_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read settings from {settings_path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Settings file {settings_path} must be a mapping")

    try:
        return Settings.model_validate(raw.get("default", {}))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings in {settings_path}: {exc}") from exc


@lru_cache
def get_settings() -> Settings:
    return load_settings(Path(os.getenv("RIVER_WATCH_SETTINGS", DEFAULT_SETTINGS_PATH)))
