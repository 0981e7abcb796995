"""
Finalizer: Application Configuration
======================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by `finalizer.main` when wiring the demo server and the
       access logger.

The middleware and the accessors take no configuration; only the server
wiring and the access-log consumer read from here.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    """

    # ── Server ────────────────────────────────────────────────────────────
    app_name: str = Field(default="finalizer")
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Access Log ────────────────────────────────────────────────────────
    # Logger that receives one record per completed request
    access_logger_name: str = Field(default="finalizer.access")

    # Comma-separated paths whose requests are finalized but not logged
    # (e.g. "/health" for noisy load balancer probes)
    access_log_exclude_paths: str = Field(default="")

    @property
    def access_log_exclude_paths_list(self) -> List[str]:
        """Splits the comma-separated exclusion list, dropping blanks."""
        return [p.strip() for p in self.access_log_exclude_paths.split(",") if p.strip()]

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


settings = Settings()
