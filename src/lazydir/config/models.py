"""Settings schema for lazydir."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevelSetting = Literal["off", "error", "warning", "info", "debug"]


class WalkSettings(BaseModel):
    multithreaded: bool = Field(default=False, description="Use the fan-out producer")
    max_workers: int = Field(default=8, ge=1, le=512)
    follow_symlinks: bool = Field(default=False)


class LoggingSettings(BaseModel):
    level: LogLevelSetting | None = Field(default=None, description="Falls back to LAZYDIR_LOG_LEVEL")
    file: str | None = Field(default=None)

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, value: object) -> object:
        if isinstance(value, str):
            normalized = value.strip().lower()
            return "warning" if normalized == "warn" else normalized
        return value


class AppSettings(BaseModel):
    schema_version: int = Field(default=1)
    walk: WalkSettings = Field(default_factory=WalkSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
