"""
Application settings for the Gemini Studio backend.

Values come from environment variables (populated from a `.env` file by
python-dotenv at startup). Model identifiers are fixed constants because the
image fallback chain keys off their identity.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from backend.exceptions import ConfigurationError


DEFAULT_CHAT_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
EXPERIMENTAL_IMAGE_MODEL = "gemini-2.0-flash-exp-image-generation"
DEFAULT_TEMPERATURE = 0.7
MAX_PROMPT_CHARS = 4000

APP_VERSION = "1.0.0"


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class AppSettings:
    """Runtime configuration for the API process."""
    gemini_api_key: Optional[str] = None
    environment: str = "production"
    rate_limit_requests: int = 10
    rate_limit_window_ms: int = 60_000
    log_level: str = "INFO"
    log_file: Optional[str] = "logs/backend.log"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])

    @classmethod
    def from_env(cls) -> "AppSettings":
        """Create AppSettings from environment variables."""
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or None,
            environment=os.getenv("ENVIRONMENT", "production"),
            rate_limit_requests=int(os.getenv("RATE_LIMIT_REQUESTS", "10")),
            rate_limit_window_ms=int(os.getenv("RATE_LIMIT_WINDOW_MS", "60000")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", "logs/backend.log") or None,
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "http://localhost:3000")),
        )

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @property
    def has_api_key(self) -> bool:
        return bool(self.gemini_api_key)

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ConfigurationError: If a rate-limit value is not positive
        """
        if self.rate_limit_requests <= 0:
            raise ConfigurationError("RATE_LIMIT_REQUESTS must be a positive integer")
        if self.rate_limit_window_ms <= 0:
            raise ConfigurationError("RATE_LIMIT_WINDOW_MS must be a positive integer")

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to a dictionary for logging. The API key is never included."""
        return {
            "environment": self.environment,
            "gemini_api_key": "configured" if self.has_api_key else "not_configured",
            "rate_limit_requests": self.rate_limit_requests,
            "rate_limit_window_ms": self.rate_limit_window_ms,
            "log_level": self.log_level,
            "log_file": self.log_file,
            "cors_origins": self.cors_origins,
        }


_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """
    Get the process-wide settings, loading them from the environment on first use.

    Returns:
        AppSettings: The validated settings instance
    """
    global _settings
    if _settings is None:
        _settings = AppSettings.from_env()
        _settings.validate()
    return _settings


def reload_settings() -> AppSettings:
    """Reload settings from environment variables."""
    global _settings
    _settings = AppSettings.from_env()
    _settings.validate()
    return _settings
