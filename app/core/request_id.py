"""Request ID generation and management."""

import uuid
from contextvars import ContextVar

# Set per request by RequestLoggingMiddleware; background image batches
# inherit the value of the request that started them.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return uuid.uuid4().hex


def get_request_id() -> str:
    """Get current request ID from context."""
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)
