"""
Validation of untrusted request bodies.

Turns an arbitrary parsed JSON value into a frozen ChatRequest or
ImageRequest, or raises ValidationError with a message naming the offending
field. Input values are only read, never modified.

Two details are kept on purpose because clients may rely on them:
chat message content is checked for emptiness after trimming but stored
untrimmed, and the prompt length limit applies to the untrimmed prompt.
"""

import math
from typing import Any, Mapping, Optional

from backend.config.settings import (
    DEFAULT_CHAT_MODEL,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_TEMPERATURE,
    MAX_PROMPT_CHARS,
)
from backend.exceptions import ValidationError
from backend.models.chat_models import ChatMessage, ChatRequest
from backend.models.image_models import ImageRequest

CHAT_ROLES = ("system", "user", "assistant")


def _is_non_blank_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _model_override(body: Mapping[str, Any], default: str) -> str:
    model = body.get("model")
    return model if _is_non_blank_string(model) else default


def _require_object(body: Any) -> Mapping[str, Any]:
    if not isinstance(body, Mapping):
        raise ValidationError("Invalid JSON body")
    return body


def _parse_temperature(raw: Optional[Any]) -> float:
    if raw is None:
        return DEFAULT_TEMPERATURE

    # bool is an int subclass, but `true` is not a temperature
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValidationError("'temperature' must be a finite number")

    # ints are compared exactly; huge ones would overflow a float conversion
    if isinstance(raw, float) and not math.isfinite(raw):
        raise ValidationError("'temperature' must be a finite number")

    if raw < 0 or raw > 2:
        raise ValidationError("'temperature' must be between 0 and 2")

    return float(raw)


def parse_chat_request(body: Any) -> ChatRequest:
    """
    Validate a chat request body.

    Args:
        body: Parsed JSON value from the client

    Returns:
        ChatRequest: The validated request with defaults applied

    Raises:
        ValidationError: If any rule is violated, naming the field
    """
    body = _require_object(body)

    raw_messages = body.get("messages")
    if not isinstance(raw_messages, list) or len(raw_messages) == 0:
        raise ValidationError("'messages' must be a non-empty array")

    messages = []
    for idx, raw in enumerate(raw_messages):
        if not isinstance(raw, Mapping):
            raise ValidationError(f"messages[{idx}] must be an object")

        role = raw.get("role")
        content = raw.get("content")

        if not isinstance(role, str) or role not in CHAT_ROLES:
            raise ValidationError(f"messages[{idx}].role must be system|user|assistant")

        if not _is_non_blank_string(content):
            raise ValidationError(f"messages[{idx}].content must be a non-empty string")

        messages.append(ChatMessage(role=role, content=content))

    return ChatRequest(
        messages=tuple(messages),
        temperature=_parse_temperature(body.get("temperature")),
        model=_model_override(body, DEFAULT_CHAT_MODEL),
    )


def parse_image_request(body: Any) -> ImageRequest:
    """
    Validate an image generation request body.

    Args:
        body: Parsed JSON value from the client

    Returns:
        ImageRequest: The validated request with defaults applied

    Raises:
        ValidationError: If the prompt is missing, blank or too long
    """
    body = _require_object(body)

    prompt = body.get("prompt")
    if not _is_non_blank_string(prompt):
        raise ValidationError("'prompt' must be a non-empty string")

    if len(prompt) > MAX_PROMPT_CHARS:
        raise ValidationError(f"'prompt' is too long (max {MAX_PROMPT_CHARS} chars)")

    return ImageRequest(
        prompt=prompt,
        model=_model_override(body, DEFAULT_IMAGE_MODEL),
    )
