"""Request/response logging middleware."""

import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.request_id import generate_request_id, set_request_id

logger = logging.getLogger(__name__)

# Cocktail bodies carry base64 image data URLs; never log them in full.
MAX_LOGGED_STRING = 200
SENSITIVE_KEYS = ("api_key", "password", "token", "secret", "auth")


def summarize_for_log(data: Any) -> Any:
    """Recursively mask sensitive fields and truncate long strings."""
    if isinstance(data, dict):
        summary: Dict[str, Any] = {}
        for key, value in data.items():
            if any(sensitive in str(key).lower() for sensitive in SENSITIVE_KEYS):
                summary[key] = "***"
            else:
                summary[key] = summarize_for_log(value)
        return summary
    if isinstance(data, list):
        return [summarize_for_log(item) for item in data]
    if isinstance(data, str) and len(data) > MAX_LOGGED_STRING:
        return f"{data[:MAX_LOGGED_STRING]}... ({len(data)} chars)"
    return data


async def get_request_params(request: Request) -> Tuple[Dict[str, Any], Optional[bytes]]:
    """
    Extract loggable request parameters from query and JSON body.
    Returns both params and the body bytes (to restore request).
    """
    params: Dict[str, Any] = {}
    body_bytes: Optional[bytes] = None

    if request.query_params:
        params["query"] = dict(request.query_params)

    content_type = request.headers.get("content-type", "").lower()

    if "application/json" in content_type:
        body_bytes = await request.body()
        if body_bytes:
            try:
                params["body"] = json.loads(body_bytes)
            except json.JSONDecodeError:
                params["body"] = body_bytes.decode("utf-8", errors="ignore")
    elif "multipart/form-data" in content_type:
        # Uploaded photos are logged by the route handler
        params["form"] = {"type": "multipart/form-data"}

    return params, body_bytes


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging requests and responses with timing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log details."""
        request_id = generate_request_id()
        set_request_id(request_id)
        request.state.request_id = request_id

        start_time = time.time()
        method = request.method
        path = request.url.path

        request_params, body_bytes = await get_request_params(request)

        if body_bytes is not None:
            # Replay the consumed body once for downstream handlers, then hand
            # back to the original receive channel so disconnects still arrive.
            original_receive = request._receive
            body_sent = False

            async def receive():
                nonlocal body_sent
                if not body_sent:
                    body_sent = True
                    return {"type": "http.request", "body": body_bytes, "more_body": False}
                message = await original_receive()
                if message["type"] == "http.request" and not message.get("more_body"):
                    return {"type": "http.disconnect"}
                return message

            request._receive = receive

        logger.info(
            f"API Request: {method} {path}",
            extra={
                "request_id": request_id,
                "method": method,
                "path": path,
                "params": summarize_for_log(request_params),
                "client_ip": request.client.host if request.client else None,
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"API Error: {method} {path} - {str(e)}",
                extra={
                    "request_id": request_id,
                    "method": method,
                    "path": path,
                    "process_time_ms": round((time.time() - start_time) * 1000, 2),
                },
                exc_info=True,
            )
            raise

        logger.info(
            f"API Response: {method} {path} - {response.status_code}",
            extra={
                "request_id": request_id,
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "process_time_ms": round((time.time() - start_time) * 1000, 2),
            },
        )

        response.headers["X-Request-ID"] = request_id
        return response
