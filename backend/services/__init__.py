# Services package

from .gemini_client import GeminiClient
from .client_factory import ClientFactory, get_client_factory
from .rate_limiter import RateLimiter, RateLimitResult
from .generation_service import GenerationService, ImageGenerationState
from .upstream_errors import UpstreamErrorInfo, parse_upstream_error

__all__ = [
    "GeminiClient",
    "ClientFactory",
    "get_client_factory",
    "RateLimiter",
    "RateLimitResult",
    "GenerationService",
    "ImageGenerationState",
    "UpstreamErrorInfo",
    "parse_upstream_error",
]
