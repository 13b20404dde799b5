"""Runtime settings loaded from environment variables."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from markup.errors import ConfigurationError

DEFAULT_FETCH_TIMEOUT = 15.0
DEFAULT_WEBHOOK_TIMEOUT = 10.0


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    fetch_timeout: float = Field(default=DEFAULT_FETCH_TIMEOUT, gt=0)
    webhook_timeout: float = Field(default=DEFAULT_WEBHOOK_TIMEOUT, gt=0)
    audit_log_path: str | None = None
    audit_log_max_bytes: int = Field(default=10_485_760, gt=0)
    audit_log_backup_count: int = Field(default=5, ge=0)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``MARKUP_*`` environment variables.

        Raises ConfigurationError when a value is present but unusable.
        """
        origins_raw = os.environ.get("MARKUP_CORS_ORIGINS", "*")
        origins = [o.strip() for o in origins_raw.split(",") if o.strip()]
        try:
            return cls(
                fetch_timeout=_positive_float("MARKUP_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT),
                webhook_timeout=_positive_float(
                    "MARKUP_WEBHOOK_TIMEOUT", DEFAULT_WEBHOOK_TIMEOUT,
                ),
                audit_log_path=os.environ.get("MARKUP_AUDIT_LOG_PATH") or None,
                audit_log_max_bytes=_int("AUDIT_LOG_MAX_BYTES", 10_485_760),
                audit_log_backup_count=_int("AUDIT_LOG_BACKUP_COUNT", 5),
                cors_origins=origins or ["*"],
            )
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid settings: {exc}") from exc


def _positive_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def _int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
