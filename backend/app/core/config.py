"""Application configuration."""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # API Settings
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "TubeJourneyPlanner"
    DEBUG: bool = False
    ALLOWED_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    @field_validator("ALLOWED_ORIGINS", mode="after")
    @classmethod
    def parse_cors(cls, v: str | list[str]) -> list[str]:
        """Parse comma-separated CORS origins or pass through list."""
        return v if isinstance(v, list) else [origin.strip() for origin in v.split(",")]

    # TfL API Settings
    TFL_API_KEY: str | None = Field(default=None, validation_alias="SECRET_TFL_API_KEY")
    TFL_REQUEST_TIMEOUT: float = 8.0  # Journey planner and StopPoint calls (seconds)
    TFL_SEQUENCE_TIMEOUT: float = 5.0  # Line route sequence calls (seconds)

    @field_validator("TFL_REQUEST_TIMEOUT", "TFL_SEQUENCE_TIMEOUT", mode="after")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Reject non-positive timeouts; every TfL call must be bounded."""
        if v <= 0:
            msg = f"Timeout must be positive, got {v}"
            raise ValueError(msg)
        return v

    # Journey planning limits
    MAX_ROUTE_GROUPS: int = 6  # Distinct route signatures enriched per request
    MAX_DEPARTURES_PER_ROUTE: int = 3  # Itineraries enriched per route signature
    LEG_MERGE_MAX_GAP_SECONDS: int = 60  # Max gap between back-to-back legs of one train

    # OpenTelemetry Settings (for observability)
    OTEL_ENABLED: bool = True
    OTEL_SERVICE_NAME: str = "tube-journey-planner"
    OTEL_ENVIRONMENT: str = "production"

    OTEL_EXPORTER_OTLP_TRACES_ENDPOINT: str | None = None
    OTEL_EXPORTER_OTLP_HEADERS: str | None = Field(default=None, validation_alias="SECRET_OTEL_HEADERS")
    OTEL_EXCLUDED_URLS: str = "/health,/ready"

    @field_validator("OTEL_EXCLUDED_URLS", mode="after")
    @classmethod
    def parse_otel_excluded_urls(cls, v: str | list[str]) -> list[str]:
        """Parse comma-separated excluded URLs or pass through list, filtering out empty strings."""
        if isinstance(v, list):
            return [url for url in v if url]
        return [url.strip() for url in v.split(",") if url.strip()]

    # Logging Settings
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        normalized = v.upper()
        valid_levels = logging.getLevelNamesMapping()
        if normalized not in valid_levels:
            msg = f"Invalid LOG_LEVEL '{v}'. Must be one of: {', '.join(sorted(valid_levels.keys()))}"
            raise ValueError(msg)
        return normalized


settings = Settings()


def require_config(*field_names: str) -> None:
    """
    Validate that required configuration fields are set.

    Args:
        *field_names: Names of required configuration fields

    Raises:
        ValueError: If any required field is missing or None

    Example:
        from app.core.config import require_config, settings
        require_config("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")
    """
    missing = []
    for field in field_names:
        value = getattr(settings, field, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)

    if missing:
        msg = f"Required configuration missing: {', '.join(missing)}"
        raise ValueError(msg)
