# FastAPI application entry point

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from datetime import datetime, timezone

# Load environment variables from .env file
load_dotenv()

from backend.api.v1.chat_router import router as chat_router
from backend.api.v1.image_router import router as image_router
from backend.config.settings import APP_VERSION, get_settings
from backend.exceptions import (
    RateLimitedError,
    StudioException,
    UpstreamError,
    UpstreamQuotaError,
)
from backend.models.error_models import ErrorResponse
from backend.utils.logging_config import setup_logging, log_error_context

settings = get_settings()
logger = setup_logging(log_level=settings.log_level, log_file=settings.log_file)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Gemini Studio API")
    logger.info(f"Settings: {settings.to_dict()}")

    if not settings.has_api_key:
        logger.warning("GEMINI_API_KEY not set - chat and image generation will fail with 500")

    yield

    # Shutdown
    logger.info("Shutting down Gemini Studio API")

app = FastAPI(
    title="Gemini Studio API",
    description="Chat and image generation proxy for Gemini",
    version=APP_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat_router)
app.include_router(image_router)


@app.get("/")
async def read_root():
    return {"message": "Gemini Studio API is running"}


@app.get("/health")
async def health_check():
    """Report configuration health without exposing secrets."""
    current = get_settings()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": current.environment,
        "services": {
            "gemini_api": "configured" if current.has_api_key else "not_configured",
            "logging": "active"
        },
        "version": APP_VERSION
    }


def render_error(exc: StudioException) -> JSONResponse:
    """Render a StudioException as `{"error", "resetAt"?, "debug"?}`."""
    body = ErrorResponse(
        error=exc.message,
        reset_at=exc.reset_at if isinstance(exc, RateLimitedError) else None,
        debug=exc.debug if isinstance(exc, UpstreamError) else None,
    )

    headers = None
    if isinstance(exc, UpstreamQuotaError) and exc.retry_after_seconds is not None:
        headers = {"Retry-After": str(exc.retry_after_seconds)}

    return JSONResponse(status_code=exc.status_code, content=body.to_content(), headers=headers)


@app.exception_handler(StudioException)
async def studio_exception_handler(request: Request, exc: StudioException):
    """Render application errors with the client-facing error body."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}")
    return render_error(exc)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render routing errors (404, 405) with the same error shape."""
    logger.warning(f"HTTP {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).to_content(),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with comprehensive logging."""
    context = {
        "method": request.method,
        "url": str(request.url),
        "client_ip": request.client.host if request.client else "unknown",
    }

    log_error_context(logger, exc, context)

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="Internal server error").to_content()
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
