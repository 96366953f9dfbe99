# Pydantic models package

from .chat_models import ChatMessage, ChatRequest, ChatResponse, ChatRole
from .image_models import GeneratedImage, ImageRequest, ImageResponse
from .error_models import ErrorResponse

__all__ = [
    # Chat models
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ChatRole",
    # Image models
    "GeneratedImage",
    "ImageRequest",
    "ImageResponse",
    # Error models
    "ErrorResponse",
]
