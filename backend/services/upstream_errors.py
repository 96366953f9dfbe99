"""
Classification of Gemini API failures.

The upstream reports errors as `{"error": {"code", "status", "message",
"details": [...]}}`. This module is the only place that knows that shape:
everything else works with UpstreamErrorInfo. Parsing is best effort and
never raises.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

from google.genai import errors

from backend.exceptions import (
    InvalidCredentialError,
    StudioException,
    UnclassifiedUpstreamError,
    UpstreamQuotaError,
)

_RETRY_DELAY_PATTERN = re.compile(r"([0-9]+)s")

QUOTA_STATUS = "RESOURCE_EXHAUSTED"
INVALID_KEY_MARKERS = ("api_key_invalid", "api key not valid")


@dataclass(frozen=True)
class UpstreamErrorInfo:
    """Normalized upstream error. Every field is None when it could not be read."""
    code: Optional[int] = None
    status: Optional[str] = None
    message: Optional[str] = None
    retry_after_seconds: Optional[int] = None

    @property
    def is_quota_exhausted(self) -> bool:
        return self.code == 429 or self.status == QUOTA_STATUS


def _retry_after(details: Any) -> Optional[int]:
    if not isinstance(details, list):
        return None

    retry_after = None
    for detail in details:
        if not isinstance(detail, Mapping):
            continue
        type_name = detail.get("@type")
        retry_delay = detail.get("retryDelay")
        if not isinstance(type_name, str) or not isinstance(retry_delay, str):
            continue
        if "RetryInfo" in type_name:
            match = _RETRY_DELAY_PATTERN.fullmatch(retry_delay)
            if match:
                retry_after = int(match.group(1))
    return retry_after


def parse_upstream_error(payload: Union[str, Mapping[str, Any], None]) -> UpstreamErrorInfo:
    """
    Parse an upstream error payload.

    Args:
        payload: The error's string form (JSON or not) or an already decoded body

    Returns:
        UpstreamErrorInfo: Extracted fields; all None if the payload has another shape
    """
    body = payload
    if isinstance(payload, (str, bytes)):
        try:
            body = json.loads(payload)
        except (ValueError, RecursionError):
            return UpstreamErrorInfo()

    if not isinstance(body, Mapping):
        return UpstreamErrorInfo()

    error = body.get("error")
    if not isinstance(error, Mapping):
        return UpstreamErrorInfo()

    code = error.get("code")
    status = error.get("status")
    message = error.get("message")

    return UpstreamErrorInfo(
        code=code if isinstance(code, int) and not isinstance(code, bool) else None,
        status=status if isinstance(status, str) else None,
        message=message if isinstance(message, str) else None,
        retry_after_seconds=_retry_after(error.get("details")),
    )


def describe_upstream_error(error: BaseException) -> Tuple[UpstreamErrorInfo, str]:
    """
    Classify an exception raised by the model client.

    google-genai keeps the decoded response body on `APIError.details`; any
    other exception is classified from its string form.

    Args:
        error: The exception raised by the model client

    Returns:
        Tuple of the classified info and the raw error message
    """
    raw_message = str(error) or type(error).__name__

    payload: Any = raw_message
    if isinstance(error, errors.APIError):
        details = error.details
        if isinstance(details, list) and len(details) == 1:
            details = details[0]
        if isinstance(details, Mapping):
            payload = details

    return parse_upstream_error(payload), raw_message


def is_invalid_api_key(raw_message: str) -> bool:
    lowered = raw_message.lower()
    return any(marker in lowered for marker in INVALID_KEY_MARKERS)


def to_studio_error(error: BaseException, failure_message: str, include_debug: bool) -> StudioException:
    """
    Map any exception raised while generating into the client-facing taxonomy.

    Args:
        error: The exception to map
        failure_message: Message used when the failure matches no known class
        include_debug: Attach the raw upstream message (non-production only)

    Returns:
        StudioException: The error to render
    """
    if isinstance(error, StudioException):
        return error

    info, raw_message = describe_upstream_error(error)

    if is_invalid_api_key(raw_message):
        return InvalidCredentialError(original_error=error)

    if info.is_quota_exhausted:
        return UpstreamQuotaError(
            debug=(info.message or raw_message) if include_debug else None,
            retry_after_seconds=info.retry_after_seconds,
            original_error=error,
        )

    return UnclassifiedUpstreamError(
        failure_message,
        debug=raw_message if include_debug else None,
        original_error=error,
    )
