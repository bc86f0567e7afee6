# src/cheapruler/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/cheapruler/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `CHEAPRULER_CONFIG_PATH`
- environment variables (`CHEAPRULER_LOG_LEVEL`, `CHEAPRULER_UNIT`, `CHEAPRULER_LATITUDE`)

The measurement engine never reads settings itself; entrypoints (the CLI) use them to
pick the default unit and reference latitude of the rulers they build.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from cheapruler.core.env import load_dotenv_if_present
from cheapruler.core.units import DistanceUnit


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `cheapruler.config`."""
    text = resources.files("cheapruler.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "cheapruler"
    log_level: str = "INFO"


class RulerSettings(BaseModel):
    unit: DistanceUnit = DistanceUnit.KILOMETERS
    # None means "use the latitude of the first input coordinate".
    latitude: float | None = Field(default=None, ge=-90, le=90)

    @field_validator("unit", mode="before")
    @classmethod
    def _parse_unit(cls, value: Any) -> Any:
        if isinstance(value, str):
            return DistanceUnit.parse(value)
        return value


class OutputSettings(BaseModel):
    json_indent: int = Field(2, ge=0)
    precision: int = Field(10, ge=0, le=17)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    ruler: RulerSettings = Field(default_factory=RulerSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload."""
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("CHEAPRULER_LOG_LEVEL")
    if log_level:
        data["app"] = {**(data.get("app") or {}), "log_level": log_level}

    unit = os.getenv("CHEAPRULER_UNIT")
    if unit:
        data["ruler"] = {**(data.get("ruler") or {}), "unit": unit}

    latitude = os.getenv("CHEAPRULER_LATITUDE")
    if latitude:
        data["ruler"] = {**(data.get("ruler") or {}), "latitude": latitude}

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("CHEAPRULER_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    # An empty section (`ruler:`) parses as None; fall back to its defaults.
    raw = {key: value for key, value in raw.items() if value is not None}
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
