"""Health check endpoint."""

import logging
from typing import Any, Dict

from fastapi import APIRouter

from app.config import settings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {"status": "healthy"}


@router.get("/ready")
async def readiness_check() -> Dict[str, Any]:
    """
    Readiness check for Cloud Run.
    Called before traffic is routed to this instance.
    """
    return {
        "status": "ready",
        "dependencies": {
            "gemini_api_key": bool(settings.gemini_api_key),
            "storage": "file" if settings.storage_dir else "memory",
        },
    }
