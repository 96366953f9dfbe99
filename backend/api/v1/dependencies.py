"""
FastAPI dependencies shared by the generation endpoints.

Each collaborator is resolved through a dependency so tests can swap it via
`app.dependency_overrides`.
"""

from functools import partial
from typing import Any, Callable

from fastapi import Depends, Request

from backend.config.settings import AppSettings, get_settings
from backend.exceptions import RateLimitedError, ValidationError
from backend.services.client_factory import get_client_factory
from backend.services.gemini_client import GeminiClient
from backend.services.rate_limiter import RateLimiter
from backend.utils.logging_config import get_logger

logger = get_logger("dependencies")

_rate_limiter = RateLimiter()


def get_rate_limiter() -> RateLimiter:
    """Process-wide rate limiter."""
    return _rate_limiter


ModelClientProvider = Callable[[], GeminiClient]


def get_model_client_provider(settings: AppSettings = Depends(get_settings)) -> ModelClientProvider:
    """
    Resolve a lazy model client provider.

    Handlers call the provider only after the rate limit and validation have
    passed, so a missing key is reported as MissingCredentialError at that point.
    """
    return partial(get_client_factory().get_client, settings)


def get_client_identity(request: Request) -> str:
    """
    Identify the calling client by network address.

    Prefers the first X-Forwarded-For entry, then X-Real-IP, then the socket
    peer. Falls back to "unknown".
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip() or "unknown"

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


def enforce_rate_limit(
    endpoint: str,
    identity: str,
    limiter: RateLimiter,
    settings: AppSettings,
) -> None:
    """
    Consume one request from the client's quota for `endpoint`.

    Raises:
        RateLimitedError: If the window's quota is exhausted
    """
    result = limiter.check(
        f"{identity}:{endpoint}",
        limit=settings.rate_limit_requests,
        window_ms=settings.rate_limit_window_ms,
    )
    if not result.allowed:
        logger.warning(f"Rate limit exceeded for {identity} on {endpoint}, resets at {result.reset_at}")
        raise RateLimitedError(reset_at=result.reset_at)


async def read_json_body(request: Request) -> Any:
    """
    Parse the request body as JSON.

    Raises:
        ValidationError: If the body is not valid JSON
    """
    try:
        return await request.json()
    except (ValueError, RecursionError):
        raise ValidationError("Invalid JSON body.")

