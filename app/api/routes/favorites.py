"""Favorite cocktails endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends

from app.api.dependencies import get_cocktail_service
from app.middleware.rate_limit import rate_limit_dependency
from app.models.cocktail import Cocktail, FavoriteToggleResponse, TranslateFavoritesRequest
from app.services.cocktail_service import CocktailService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=List[Cocktail])
async def list_favorites(
    cocktail_service: CocktailService = Depends(get_cocktail_service),
) -> List[Cocktail]:
    return cocktail_service.favorites.list()


@router.post("/toggle", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    cocktail: Cocktail,
    cocktail_service: CocktailService = Depends(get_cocktail_service),
) -> FavoriteToggleResponse:
    """Add the cocktail to favorites, or remove it if already there."""
    is_favorite = await cocktail_service.toggle_favorite(cocktail)
    return FavoriteToggleResponse(
        id=cocktail.id,
        isFavorite=is_favorite,
        favorites=cocktail_service.favorites.list(),
    )


@router.post("/translate", response_model=List[Cocktail])
async def translate_favorites(
    body: TranslateFavoritesRequest,
    _: None = Depends(rate_limit_dependency),
    cocktail_service: CocktailService = Depends(get_cocktail_service),
) -> List[Cocktail]:
    return await cocktail_service.translate_favorites(body.targetLanguage, body.sourceLanguage)
