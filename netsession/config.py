"""Settings loading and validation for netsession."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import BadConfig

MIN_PRIORITY = 1
MAX_PRIORITY = 100


class SessionIdSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    alg: Literal["sha256", "sha512"] = "sha256"
    secret_key: str | None = None


class LoggingSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    output: Literal["stderr", "file"] = "stderr"
    file_path: str = "netsession-audit.log"
    rotate_bytes: int = 10_485_760


class Settings(BaseModel):
    """Process-wide NetworkSession configuration.

    ``users`` is kept as raw entries on purpose: a broken entry must not
    stop the file from loading, it is reported when a request reaches it.
    """

    model_config = ConfigDict(frozen=True)

    tenant_id: str = "default"
    priority: int = 40
    can_always_autocreate: bool = False
    allowed_user_rights: list[str] | None = None
    users: list[Any] = Field(default_factory=list)
    session: SessionIdSettings = Field(default_factory=SessionIdSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("tenant_id")
    @classmethod
    def validate_tenant(cls, value: str) -> str:
        if not value:
            raise ValueError("tenant_id must not be empty")
        return value

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, value: int) -> int:
        if value < MIN_PRIORITY or value > MAX_PRIORITY:
            raise ValueError(f"priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}")
        return value

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise BadConfig(message=str(exc)) from exc


def load_settings(path: str | Path) -> Settings:
    """Load settings from a YAML file."""

    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise BadConfig(message=f"Failed to read settings: {exc}") from exc
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - YAML parse errors
        raise BadConfig(message=f"Failed to parse settings YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise BadConfig(message="Settings file must contain a mapping")
    return Settings.from_dict(data)
