"""
StayPulse Configuration Module
==============================

Centralized configuration management using environment variables.
Supports both .env files and system environment variables.

Environment Variables:
    REVIEWS_API_BASE_URL: Upstream reviews service (default: http://localhost:8000)
    REVIEWS_API_TIMEOUT: Request timeout in seconds (default: 10)

    LOG_LEVEL: Root log level (default: INFO)
    LOG_FILE: Optional log file path (rotated)
    LOG_JSON: Emit JSON log lines (default: false)

    CORS_ORIGINS: Extra allowed origins for the API, comma separated
    ENVIRONMENT: development | production (default: development)
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional
from pathlib import Path
from dotenv import load_dotenv


# Load environment variables from .env file if present
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """
    Get environment variable with optional default and required validation.

    Args:
        key: Environment variable name
        default: Default value if not set
        required: If True, raises ValueError when not set

    Returns:
        Environment variable value or default

    Raises:
        ValueError: If required=True and variable is not set
    """
    value = os.getenv(key, default)
    if required and value is None:
        raise ValueError(f"Required environment variable '{key}' is not set")
    return value


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be an integer, got: {value}")


def get_env_float(key: str, default: float) -> float:
    """Get environment variable as float."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be a float, got: {value}")


def get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def get_env_list(key: str) -> List[str]:
    """Comma-separated environment variable as a list (empty entries dropped)."""
    value = os.getenv(key, "")
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class ReviewsApiConfig:
    """Upstream reviews service configuration."""

    base_url: str = field(default_factory=lambda: get_env("REVIEWS_API_BASE_URL", "http://localhost:8000"))
    timeout: float = field(default_factory=lambda: get_env_float("REVIEWS_API_TIMEOUT", 10.0))

    def __post_init__(self):
        """Validate configuration."""
        if not self.base_url:
            raise ValueError("REVIEWS_API_BASE_URL cannot be empty")
        if self.timeout <= 0:
            raise ValueError("REVIEWS_API_TIMEOUT must be positive")
        self.base_url = self.base_url.rstrip("/")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: get_env("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: get_env("LOG_FILE"))

    # Structured logging
    json_logs: bool = field(default_factory=lambda: get_env_bool("LOG_JSON", False))


@dataclass
class ApiConfig:
    """Dashboard REST API configuration."""

    cors_origins: List[str] = field(default_factory=lambda: [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
        *get_env_list("CORS_ORIGINS"),
    ])
    host: str = field(default_factory=lambda: get_env("API_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: get_env_int("API_PORT", 8080))


@dataclass
class Settings:
    """Main application settings container."""

    reviews_api: ReviewsApiConfig = field(default_factory=ReviewsApiConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    api: ApiConfig = field(default_factory=ApiConfig)

    # Application metadata
    app_name: str = "staypulse"
    app_version: str = "0.1.0"
    environment: str = field(default_factory=lambda: get_env("ENVIRONMENT", "development"))

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() in ("production", "prod")


def load_settings() -> Settings:
    """
    Load and validate all application settings.

    Raises:
        ValueError: If configuration is invalid
    """
    return Settings()


# Global settings instance (lazy-loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, created on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
