"""
Configuration module for the xlcompare service.
All settings are loaded from environment variables (and an optional .env file).
"""
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="allow")

    # Server Settings
    HOST: str = Field(default="0.0.0.0", description="API server host")
    PORT: int = Field(default=8000, description="API server port")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_DIR: Optional[Path] = Field(default=None, description="Directory for log files (unset = console only)")

    # Job Queue
    WORKER_CONCURRENCY: int = Field(default=4, description="Number of concurrent comparison workers")

    # Upload & Processing Limits
    MAX_UPLOAD_BYTES: int = Field(
        default=200 * 1024 * 1024,  # 200 MB
        description="Maximum upload file size in bytes"
    )

    # Job & Result Storage
    RESULT_TTL_SECONDS: int = Field(
        default=36000,  # 10 hours
        description="Time to live for finished jobs"
    )
    TEMP_STORAGE_PATH: Path = Field(
        default=Path("/tmp/xlcompare"),
        description="Path for uploaded workbooks awaiting comparison"
    )

    # Application Metadata
    APP_NAME: str = "xlcompare"
    APP_VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is a standard level name."""
        v = v.upper()
        if v not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return v

    @field_validator("WORKER_CONCURRENCY")
    @classmethod
    def validate_concurrency(cls, v):
        if v < 1:
            raise ValueError("WORKER_CONCURRENCY must be at least 1")
        return v

    @field_validator("TEMP_STORAGE_PATH")
    @classmethod
    def ensure_path_exists(cls, v):
        """Create the directory if it doesn't exist."""
        path = Path(v)
        path.mkdir(parents=True, exist_ok=True)
        return path


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance (created on first use)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
