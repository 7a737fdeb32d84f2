from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Final

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pvpc_collector.core.enums import WindowEnd

DEFAULT_BASE_URL: Final[str] = "https://apidatos.ree.es/es/datos/mercados/precios-mercados-tiempo-real"

_DURATION_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS: Final[dict[str, float]] = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration_seconds(value: str | float | int) -> float:
    """Parse ``10``, ``10.5``, ``"10s"``, ``"500ms"``, ``"1m"`` or ``"1h"`` into seconds."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    match = _DURATION_PATTERN.match(value)
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit or "s"]


class Settings(BaseSettings):
    """Collector settings, read from ``PVPC_*`` environment variables or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_prefix="PVPC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    time_trunc: str = "hour"
    geo_id: int = Field(default=0, ge=0, le=2**32 - 1)
    start_date: datetime | None = None
    end_date: datetime | None = None
    http_timeout: float = 10.0
    window_end: WindowEnd = WindowEnd.TODAY
    measurement: str = "pvpc"
    base_url: str = DEFAULT_BASE_URL
    log_level: str = "INFO"

    @field_validator("time_trunc")
    @classmethod
    def _require_time_trunc(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("time_trunc must not be empty")
        return value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _blank_as_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("start_date", "end_date")
    @classmethod
    def _assume_local_zone(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.astimezone()
        return value

    @field_validator("http_timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: Any) -> float:
        return parse_duration_seconds(value)

    @field_validator("http_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("http_timeout must be positive")
        return value

    @model_validator(mode="after")
    def _check_range(self) -> Settings:
        if self.start_date is not None and self.end_date is not None and self.start_date > self.end_date:
            raise ValueError("start_date must be <= end_date")
        return self
