# Configuration package for the Gemini Studio backend

from .settings import (
    AppSettings,
    get_settings,
    reload_settings,
    DEFAULT_CHAT_MODEL,
    DEFAULT_IMAGE_MODEL,
    EXPERIMENTAL_IMAGE_MODEL,
    DEFAULT_TEMPERATURE,
    MAX_PROMPT_CHARS,
    APP_VERSION,
)

__all__ = [
    "AppSettings",
    "get_settings",
    "reload_settings",
    "DEFAULT_CHAT_MODEL",
    "DEFAULT_IMAGE_MODEL",
    "EXPERIMENTAL_IMAGE_MODEL",
    "DEFAULT_TEMPERATURE",
    "MAX_PROMPT_CHARS",
    "APP_VERSION",
]
