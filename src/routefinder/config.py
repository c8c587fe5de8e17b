"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="BRF_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Bus Route Finder API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level.")
    request_id_header: str = Field(default="X-Request-ID")

    osrm_base_url: str = Field(
        default="http://router.project-osrm.org",
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "car", "bike", "foot"] = Field(
        default="driving",
        description="OSRM profile to use when computing travel distances.",
    )
    osrm_timeout_seconds: float = Field(default=30.0, gt=0.0)
    osrm_health_timeout_seconds: float = Field(default=5.0, gt=0.0)
    max_concurrent_osrm_requests: int = Field(
        default=8,
        ge=1,
        description="Upper bound on OSRM table requests in flight per process.",
    )

    max_osrm_candidates: int = Field(
        default=10,
        ge=1,
        description="Stops kept after geometric ranking before the OSRM call.",
    )
    max_discovery_candidates: int = Field(default=25, ge=1)
    default_threshold_km: float = Field(default=1.5, gt=0.0)
    min_threshold_km: float = Field(default=0.1, gt=0.0)
    max_threshold_km: float = Field(default=10.0, gt=0.0)
    min_discovery_threshold_m: float = Field(default=100.0, gt=0.0)
    max_discovery_threshold_m: float = Field(default=5000.0, gt=0.0)
    average_bus_speed_kmh: float = Field(
        default=20.0,
        gt=0.0,
        description="Used to estimate durations for segments without an OSRM duration.",
    )

    cache_ttl_seconds: float = Field(default=300.0, ge=0.0)
    cache_sweep_interval_seconds: float = Field(default=300.0, gt=0.0)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase key used for read-only stop and route queries.",
    )

    @field_validator("osrm_base_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @model_validator(mode="after")
    def _check_ranges(self) -> "Settings":
        if self.min_threshold_km > self.max_threshold_km:
            raise ValueError("min_threshold_km must not exceed max_threshold_km")
        if self.min_discovery_threshold_m > self.max_discovery_threshold_m:
            raise ValueError("min_discovery_threshold_m must not exceed max_discovery_threshold_m")
        return self


settings = Settings()
