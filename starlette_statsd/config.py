from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application configuration.

    All runtime options (env vars, .env file) are defined here so the rest of
    the codebase can simply do `from starlette_statsd.config import get_settings`
    and retrieve a cached, validated instance.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=Path(__file__).resolve().parent.parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ---------------------------------------------------------------------
    # Core runtime settings
    # ---------------------------------------------------------------------
    log_level: str = Field("INFO", alias="LOG_LEVEL", description="Application log level (DEBUG, INFO …), applied by create_app")
    log_format: str = Field("console", alias="LOG_FORMAT", description="pretty console vs json, applied by create_app")

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------
    port: int = Field(8000, alias="PORT", description="FastAPI / Uvicorn port to bind to")

    # ------------------------------------------------------------------
    # StatsD
    # ------------------------------------------------------------------
    statsd_address: str = Field(
        "localhost:8125",
        alias="STATSD_ADDRESS",
        description="host:port of the statsd daemon (UDP)",
    )
    statsd_prefix: str = Field("app", alias="STATSD_PREFIX", description="Namespace prepended to every metric")
    statsd_global_metrics: bool = Field(
        True,
        alias="STATSD_GLOBAL_METRICS",
        description="Emit path-agnostic timing and count metrics for every request",
    )
    statsd_global_label: str = Field(
        "request",
        alias="STATSD_GLOBAL_LABEL",
        description="Label of the global metrics: <prefix>.<label>.timing / .count",
    )

    # ----------------------- Validators / hooks ------------------------
    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, v: str) -> str:  # noqa: D401
        allowed = {"console", "json"}
        v = v.lower()
        if v not in allowed:
            raise ValueError(f"LOG_FORMAT must be one of {allowed}, got '{v}'")
        return v

    @field_validator("statsd_global_label")
    @classmethod
    def _validate_global_label(cls, v: str) -> str:  # noqa: D401
        if not v.strip() or v != v.strip():
            raise ValueError(f"STATSD_GLOBAL_LABEL must be a non-empty name without surrounding spaces, got '{v}'")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:  # noqa: D401
    """Return a singleton Settings instance (cached)."""

    return Settings()
