"""
Exception handling package for the Gemini Studio backend.

Provides the error taxonomy shared by the validator, rate limiter,
generation service and request handlers.
"""

from .base_exceptions import (
    StudioException,
    ConfigurationError,
    ValidationError,
    NoContentError,
    RateLimitedError,
    MissingCredentialError,
    UpstreamError,
    InvalidCredentialError,
    UpstreamQuotaError,
    EmptyResponseError,
    NoImageDataError,
    UnclassifiedUpstreamError,
)

__all__ = [
    "StudioException",
    "ConfigurationError",
    "ValidationError",
    "NoContentError",
    "RateLimitedError",
    "MissingCredentialError",
    "UpstreamError",
    "InvalidCredentialError",
    "UpstreamQuotaError",
    "EmptyResponseError",
    "NoImageDataError",
    "UnclassifiedUpstreamError",
]
