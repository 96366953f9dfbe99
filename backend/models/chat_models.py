"""
Chat-related Pydantic models.

Requests are built by the request validator from untrusted JSON, so the
models are frozen: a validated request is never mutated afterwards.
"""

from typing import Literal, Tuple
from pydantic import BaseModel, ConfigDict, Field

from backend.config.settings import DEFAULT_CHAT_MODEL, DEFAULT_TEMPERATURE

ChatRole = Literal["system", "user", "assistant"]


class ChatMessage(BaseModel):
    """
    A single conversation turn.

    System messages are folded into the model's system instruction by the
    generation service and never sent as a turn.
    """
    model_config = ConfigDict(frozen=True)

    role: ChatRole = Field(
        ...,
        description="Sender of the message - 'system', 'user' or 'assistant'"
    )
    content: str = Field(
        ...,
        min_length=1,
        description="Message text, stored exactly as received"
    )


class ChatRequest(BaseModel):
    """Validated chat request."""
    model_config = ConfigDict(frozen=True)

    messages: Tuple[ChatMessage, ...] = Field(
        ...,
        min_length=1,
        description="Conversation in order, oldest first"
    )
    temperature: float = Field(
        default=DEFAULT_TEMPERATURE,
        ge=0,
        le=2,
        description="Sampling temperature"
    )
    model: str = Field(
        default=DEFAULT_CHAT_MODEL,
        description="Gemini model identifier"
    )


class ChatResponse(BaseModel):
    """Successful chat response body."""
    text: str = Field(
        ...,
        description="Generated reply, trimmed and never empty"
    )
