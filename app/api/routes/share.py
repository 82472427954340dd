"""Link-based sharing endpoints."""

import asyncio
import logging

from fastapi import APIRouter, Depends, Query, Request, status

from app.api.dependencies import get_share_store
from app.config import settings
from app.models.cocktail import Cocktail, ShareResponse
from app.services.share_store import ShareStore, share_fragment
from app.utils.exceptions import ValidationError
from app.utils.validators import parse_share_fragment

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/share", tags=["share"])


@router.post("", response_model=ShareResponse, status_code=status.HTTP_201_CREATED)
async def share_cocktail(
    request: Request,
    cocktail: Cocktail,
    share_store: ShareStore = Depends(get_share_store),
) -> ShareResponse:
    """Publish an immutable snapshot of the cocktail and return its link."""
    logger.info(
        "Route /share called",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "route": "/share",
            "params": {"cocktail_id": cocktail.id, "has_image": bool(cocktail.imageUrl)},
        },
    )
    share_id = await asyncio.to_thread(share_store.save, cocktail.to_draft(), cocktail.imageUrl)
    return ShareResponse(id=share_id, shareUrl=f"{settings.public_base_url}{share_fragment(share_id)}")


@router.get("/resolve", response_model=Cocktail)
async def resolve_share_fragment(
    fragment: str = Query(..., description="URL fragment, e.g. '#/share/abc123'"),
    share_store: ShareStore = Depends(get_share_store),
) -> Cocktail:
    share_id = parse_share_fragment(fragment)
    if share_id is None:
        raise ValidationError(f"Not a share link: {fragment}")
    return await asyncio.to_thread(share_store.load, share_id)


@router.get("/{share_id}", response_model=Cocktail)
async def get_shared_cocktail(
    share_id: str,
    share_store: ShareStore = Depends(get_share_store),
) -> Cocktail:
    return await asyncio.to_thread(share_store.load, share_id)
