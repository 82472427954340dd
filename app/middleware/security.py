"""Security headers, CORS and compression middleware."""

from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.config import settings

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    # JSON only; generated images travel as data URLs inside the body
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}


def setup_cors(app: ASGIApp) -> None:
    """Setup CORS middleware."""
    origins = settings.cors_origins_list

    # Browsers reject credentials together with a wildcard origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )


def setup_compression(app: ASGIApp) -> None:
    """Setup GZip compression; batch polls return large base64 payloads."""
    app.add_middleware(GZipMiddleware, minimum_size=1000)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers."""

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        # /docs serves its own HTML and scripts
        if request.url.path.startswith(("/docs", "/redoc", "/openapi")):
            return response
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response
