"""
Chat API router.

Sequence per request: local rate limit, body parsing and validation, then a
single Gemini call. Every failure is raised as a StudioException and
rendered by the application's exception handler.
"""

from fastapi import APIRouter, Depends, Request

from backend.api.v1.dependencies import (
    ModelClientProvider,
    enforce_rate_limit,
    get_client_identity,
    get_model_client_provider,
    get_rate_limiter,
    read_json_body,
)
from backend.config.settings import AppSettings, get_settings
from backend.exceptions import StudioException, ValidationError
from backend.models.chat_models import ChatResponse
from backend.models.error_models import ErrorResponse
from backend.services.generation_service import GenerationService
from backend.services.rate_limiter import RateLimiter
from backend.services.request_validator import parse_chat_request
from backend.services.upstream_errors import to_studio_error
from backend.utils.logging_config import get_logger, log_error_context

router = APIRouter(prefix="/api", tags=["chat"])

logger = get_logger("chat_router")

CHAT_FAILURE_MESSAGE = "Chat request failed. Please try again."


@router.post("/chat", response_model=ChatResponse, responses={
    400: {"model": ErrorResponse, "description": "Invalid request body"},
    401: {"model": ErrorResponse, "description": "Gemini rejected the API key"},
    429: {"model": ErrorResponse, "description": "Local or upstream quota exhausted"},
    500: {"model": ErrorResponse, "description": "Server misconfiguration or unclassified failure"},
    502: {"model": ErrorResponse, "description": "Model returned no text"},
})
async def chat_endpoint(
    request: Request,
    identity: str = Depends(get_client_identity),
    limiter: RateLimiter = Depends(get_rate_limiter),
    settings: AppSettings = Depends(get_settings),
    client_provider: ModelClientProvider = Depends(get_model_client_provider),
) -> ChatResponse:
    """
    Generate a chat reply for a conversation.

    Body: `{"messages": [{"role", "content"}, ...], "temperature"?, "model"?}`
    """
    enforce_rate_limit("chat", identity, limiter, settings)

    body = await read_json_body(request)
    try:
        chat_request = parse_chat_request(body)
    except ValidationError as e:
        logger.warning(f"Invalid chat request from {identity}: {e.message}")
        raise

    request_context = {
        "client_ip": identity,
        "model": chat_request.model,
        "message_count": len(chat_request.messages),
    }
    logger.info("Processing chat request", extra=request_context)

    try:
        service = GenerationService(client_provider())
        text = await service.generate_chat(chat_request)
    except StudioException as e:
        logger.warning(f"Chat request failed: {e.message}", extra=request_context)
        raise
    except Exception as e:
        error = to_studio_error(e, CHAT_FAILURE_MESSAGE, include_debug=not settings.is_production)
        log_error_context(logger, e, {**request_context, "mapped_to": type(error).__name__})
        raise error from e

    logger.info("Chat request processed successfully", extra={**request_context, "response_length": len(text)})
    return ChatResponse(text=text)
