"""
Custom exception hierarchy for the Gemini Studio backend.

Every exception carries the HTTP status it maps to, so request handlers can
raise them and a single exception handler renders the client-facing body.
"""

from typing import Optional


class StudioException(Exception):
    """Base exception for the Gemini Studio backend."""

    status_code: int = 500

    def __init__(self, message: str, error_code: str = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        super().__init__(self.message)


class ConfigurationError(StudioException):
    """Raised when configuration is invalid."""
    pass


class ValidationError(StudioException):
    """Raised when a request body fails validation."""

    status_code = 400


class NoContentError(StudioException):
    """Raised when a chat request holds no non-system message."""

    status_code = 400

    def __init__(self, message: str = "At least one non-system message is required."):
        super().__init__(message)


class RateLimitedError(StudioException):
    """Raised when the local per-client quota is exhausted."""

    status_code = 429

    def __init__(self, reset_at: int, message: str = "Quota reached: please wait a minute and try again."):
        super().__init__(message)
        self.reset_at = reset_at


class MissingCredentialError(StudioException):
    """Raised when the server has no Gemini API key configured."""

    def __init__(self, message: str = "Server is missing GEMINI_API_KEY."):
        super().__init__(message)


class UpstreamError(StudioException):
    """Base for failures reported by the generative AI backend."""

    def __init__(self, message: str, debug: Optional[str] = None, original_error: Exception = None):
        super().__init__(message)
        self.debug = debug
        self.original_error = original_error


class InvalidCredentialError(UpstreamError):
    """Raised when the upstream rejects the configured API key."""

    status_code = 401

    def __init__(self, message: str = (
        "Invalid API key. Create a key in Google AI Studio and set "
        "GEMINI_API_KEY in the server environment."
    ), original_error: Exception = None):
        # The raw upstream message may echo the key, so no debug detail here.
        super().__init__(message, original_error=original_error)


class UpstreamQuotaError(UpstreamError):
    """Raised when the upstream reports quota exhaustion."""

    status_code = 429

    def __init__(
        self,
        message: str = "Quota reached. Please wait a bit and try again (or check your AI Studio quota).",
        debug: Optional[str] = None,
        retry_after_seconds: Optional[int] = None,
        original_error: Exception = None,
    ):
        super().__init__(message, debug=debug, original_error=original_error)
        self.retry_after_seconds = retry_after_seconds


class EmptyResponseError(UpstreamError):
    """Raised when the model answered without any usable text."""

    status_code = 502

    def __init__(self, message: str = "No text response returned by the model."):
        super().__init__(message)


class NoImageDataError(UpstreamError):
    """Raised when a successful image response carried no inline image."""

    status_code = 502

    def __init__(self, message: str = "No image data returned by the model. Try a different prompt or model."):
        super().__init__(message)


class UnclassifiedUpstreamError(UpstreamError):
    """Raised for any upstream failure that matches no known class."""

    status_code = 500
