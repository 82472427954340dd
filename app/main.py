"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from app.api.routes import cocktails, favorites, health, ingredients, share
from app.config import settings
from app.core.request_id import get_request_id
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import get_rate_limit_exceeded_handler, limiter
from app.middleware.security import SecurityHeadersMiddleware, setup_compression, setup_cors
from app.utils.error_messages import localized_message, pick_language
from app.utils.exceptions import (
    EmptyInputError,
    GenerationFailedError,
    IdentificationFailedError,
    ImageGenerationFailedError,
    ImageProcessingError,
    InvalidCredentialError,
    MixMasterException,
    NotFoundError,
    OfflineUnavailableError,
    QuotaExceededError,
    ShareStoreError,
    ValidationError,
)
from app.utils.logging_config import setup_logging

# Setup logging
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="MixMaster API",
    description="Cocktail generation from bar ingredients using Gemini",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Add rate limiter to app
app.state.limiter = limiter

# Add exception handler for rate limiting
app.add_exception_handler(RateLimitExceeded, get_rate_limit_exceeded_handler())

# Most specific classes first
_STATUS_BY_EXCEPTION = (
    (EmptyInputError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ImageProcessingError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (QuotaExceededError, status.HTTP_429_TOO_MANY_REQUESTS),
    (OfflineUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ShareStoreError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (InvalidCredentialError, status.HTTP_502_BAD_GATEWAY),
    (GenerationFailedError, status.HTTP_502_BAD_GATEWAY),
    (ImageGenerationFailedError, status.HTTP_502_BAD_GATEWAY),
    (IdentificationFailedError, status.HTTP_502_BAD_GATEWAY),
)


def status_code_for(exc: MixMasterException) -> int:
    for exc_type, status_code in _STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


# Add validation error handler for better error messages
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors with detailed messages."""
    request_id = get_request_id()

    logger.warning(
        f"Validation error: {str(exc)}",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "errors": exc.errors(),
        },
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "VALIDATION_ERROR",
            "detail": jsonable_errors(exc),
            "request_id": request_id,
            "message": localized_message("VALIDATION_ERROR", pick_language(request.headers.get("accept-language"))),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold exception instances that JSONResponse cannot serialize
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


# Global exception handler
@app.exception_handler(MixMasterException)
async def mixmaster_exception_handler(request: Request, exc: MixMasterException) -> JSONResponse:
    """Map MixMaster exceptions to a status code and a localized message."""
    request_id = get_request_id()
    status_code = status_code_for(exc)
    language = pick_language(request.headers.get("accept-language"))

    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"Exception: {exc.code}",
        extra={"request_id": request_id, "exception": str(exc)},
        exc_info=status_code >= 500,
    )

    content = {
        "error": exc.code,
        "detail": str(exc),
        "message": localized_message(exc.code, language),
        "request_id": request_id,
    }
    if isinstance(exc, GenerationFailedError):
        content["retry"] = True

    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    request_id = get_request_id()

    logger.error(
        f"Unexpected exception: {str(exc)}",
        extra={"request_id": request_id},
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "UNKNOWN_ERROR",
            "detail": "An unexpected error occurred",
            "message": localized_message("UNKNOWN_ERROR", pick_language(request.headers.get("accept-language"))),
            "request_id": request_id,
        },
    )


# Add middleware (order matters!)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)
setup_compression(app)
setup_cors(app)

# Include routers
app.include_router(health.router)
app.include_router(cocktails.router)
app.include_router(ingredients.router)
app.include_router(favorites.router)
app.include_router(share.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event."""
    logger.info("MixMaster API starting up...")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Rate limit: {settings.rate_limit_per_hour} requests/hour")
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; Gemini calls will be rejected")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event."""
    logger.info("MixMaster API shutting down...")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "MixMaster API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
