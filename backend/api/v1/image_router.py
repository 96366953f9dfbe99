"""
Image generation API router.

Same sequencing as the chat endpoint; the Gemini side runs the image
fallback chain in GenerationService.generate_image.
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
from backend.models.error_models import ErrorResponse
from backend.models.image_models import ImageResponse
from backend.services.generation_service import GenerationService
from backend.services.rate_limiter import RateLimiter
from backend.services.request_validator import parse_image_request
from backend.services.upstream_errors import to_studio_error
from backend.utils.logging_config import get_logger, log_error_context

router = APIRouter(prefix="/api", tags=["image"])

logger = get_logger("image_router")

IMAGE_FAILURE_MESSAGE = "Image request failed. Please try again."


@router.post("/image", response_model=ImageResponse, responses={
    400: {"model": ErrorResponse, "description": "Invalid request body"},
    401: {"model": ErrorResponse, "description": "Gemini rejected the API key"},
    429: {"model": ErrorResponse, "description": "Local or upstream quota exhausted"},
    500: {"model": ErrorResponse, "description": "Server misconfiguration or unclassified failure"},
    502: {"model": ErrorResponse, "description": "No image data in the model response"},
})
async def image_endpoint(
    request: Request,
    identity: str = Depends(get_client_identity),
    limiter: RateLimiter = Depends(get_rate_limiter),
    settings: AppSettings = Depends(get_settings),
    client_provider: ModelClientProvider = Depends(get_model_client_provider),
) -> ImageResponse:
    """
    Generate a single image from a text prompt.

    Body: `{"prompt": str, "model"?: str}`
    """
    enforce_rate_limit("image", identity, limiter, settings)

    body = await read_json_body(request)
    try:
        image_request = parse_image_request(body)
    except ValidationError as e:
        logger.warning(f"Invalid image request from {identity}: {e.message}")
        raise

    request_context = {
        "client_ip": identity,
        "model": image_request.model,
        "prompt_length": len(image_request.prompt),
    }
    logger.info("Processing image request", extra=request_context)

    try:
        service = GenerationService(client_provider())
        image = await service.generate_image(image_request)
    except StudioException as e:
        logger.warning(f"Image request failed: {e.message}", extra=request_context)
        raise
    except Exception as e:
        error = to_studio_error(e, IMAGE_FAILURE_MESSAGE, include_debug=not settings.is_production)
        log_error_context(logger, e, {**request_context, "mapped_to": type(error).__name__})
        raise error from e

    logger.info("Image request processed successfully", extra={**request_context, "mime_type": image.mime_type})
    return ImageResponse(images=[image])
