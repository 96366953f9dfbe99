"""
Shared builders for fake Gemini responses and a controllable clock.
"""

from typing import Any, List, Optional

from google.genai import errors, types


def text_response(text: Optional[str]) -> types.GenerateContentResponse:
    """Build a Gemini response carrying a single text part."""
    parts: List[types.Part] = [] if text is None else [types.Part(text=text)]
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=parts))]
    )


def parts_response(*parts: Any) -> types.GenerateContentResponse:
    """Build a Gemini response from the given parts."""
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=list(parts)))]
    )


def image_part(data: bytes = b"\x89PNG", mime_type: str = "image/png") -> types.Part:
    return types.Part(inline_data=types.Blob(mime_type=mime_type, data=data))


def quota_error(retry_delay: Optional[str] = None) -> errors.ClientError:
    """A 429 RESOURCE_EXHAUSTED error as raised by google-genai."""
    details = []
    if retry_delay is not None:
        details.append({
            "@type": "type.googleapis.com/google.rpc.RetryInfo",
            "retryDelay": retry_delay,
        })
    return errors.ClientError(429, {
        "error": {
            "code": 429,
            "message": "You exceeded your current quota, please check your plan and billing details.",
            "status": "RESOURCE_EXHAUSTED",
            "details": details,
        }
    })


def modality_error() -> errors.ClientError:
    """The error the experimental image model returns for explicit modalities."""
    return errors.ClientError(400, {
        "error": {
            "code": 400,
            "message": "The requested combination of response modalities is not supported by the model.",
            "status": "INVALID_ARGUMENT",
        }
    })


def invalid_key_error() -> errors.ClientError:
    return errors.ClientError(400, {
        "error": {
            "code": 400,
            "message": "API key not valid. Please pass a valid API key.",
            "status": "INVALID_ARGUMENT",
            "details": [{
                "@type": "type.googleapis.com/google.rpc.ErrorInfo",
                "reason": "API_KEY_INVALID",
            }],
        }
    })


def server_error() -> errors.ServerError:
    return errors.ServerError(500, {
        "error": {
            "code": 500,
            "message": "An internal error has occurred.",
            "status": "INTERNAL",
        }
    })


class ManualClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms
