"""
Core configuration using Pydantic Settings.
Loads from environment variables.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # App
    app_name: str = Field(default="talentflow", alias="APP_NAME")
    app_env: Literal["development", "staging", "production", "test"] = Field(
        default="development", alias="APP_ENV"
    )
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    json_logs: bool = Field(default=False, alias="JSON_LOGS")
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000"], alias="ALLOWED_ORIGINS"
    )

    # Logging
    log_request_body: bool = Field(default=False, alias="LOG_REQUEST_BODY")
    log_max_body_size: int = Field(default=1024, alias="LOG_MAX_BODY_SIZE")

    # Backend client
    api_base_url: str = Field(default="http://localhost:8000/api", alias="API_BASE_URL")
    request_timeout_seconds: float = Field(default=10.0, alias="REQUEST_TIMEOUT_SECONDS")

    # Readiness / retry
    readiness_timeout_seconds: float = Field(default=5.0, alias="READINESS_TIMEOUT_SECONDS")
    retry_max_attempts: int = Field(default=5, ge=1, alias="RETRY_MAX_ATTEMPTS")
    retry_delay_seconds: float = Field(default=1.0, ge=0, alias="RETRY_DELAY_SECONDS")

    # Overlay store
    overlay_database_path: str = Field(
        default="local_data/overlay.db", alias="OVERLAY_DATABASE_PATH"
    )

    # Backend simulator
    simulator_database_url: str = Field(
        default="sqlite+aiosqlite:///./local_data/simulator.db",
        alias="SIMULATOR_DATABASE_URL",
    )
    simulator_min_latency_ms: int = Field(default=200, ge=0, alias="SIMULATOR_MIN_LATENCY_MS")
    simulator_max_latency_ms: int = Field(default=1200, ge=0, alias="SIMULATOR_MAX_LATENCY_MS")
    simulator_error_rate: float = Field(default=0.05, ge=0, le=1, alias="SIMULATOR_ERROR_RATE")
    simulator_reorder_error_rate: float = Field(
        default=0.30, ge=0, le=1, alias="SIMULATOR_REORDER_ERROR_RATE"
    )
    simulator_job_create_error_rate: float = Field(
        default=0.02, ge=0, le=1, alias="SIMULATOR_JOB_CREATE_ERROR_RATE"
    )
    simulator_startup_delay_seconds: float = Field(
        default=0.0, ge=0, alias="SIMULATOR_STARTUP_DELAY_SECONDS"
    )
    simulator_random_seed: Optional[int] = Field(default=None, alias="SIMULATOR_RANDOM_SEED")
    simulator_seed_jobs: int = Field(default=25, ge=0, alias="SIMULATOR_SEED_JOBS")
    simulator_seed_candidates: int = Field(default=200, ge=0, alias="SIMULATOR_SEED_CANDIDATES")


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
