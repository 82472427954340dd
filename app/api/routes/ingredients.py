"""Ingredient endpoints: starter suggestions, name translation, photo scanning."""

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile, status

from app.api.dependencies import get_cocktail_service
from app.config import settings
from app.middleware.rate_limit import rate_limit_dependency
from app.models.cocktail import IngredientsResponse, Language, TranslateIngredientsRequest
from app.services.cocktail_service import CocktailService
from app.utils.validators import validate_language

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/ingredients", tags=["ingredients"])


@router.get("/random", response_model=IngredientsResponse)
async def random_ingredients(language: Language = Query("es")) -> IngredientsResponse:
    """One random spirit, mixer and modifier to start with."""
    return IngredientsResponse(ingredients=CocktailService.random_ingredients(language))


@router.post("/translate", response_model=IngredientsResponse)
async def translate_ingredients(body: TranslateIngredientsRequest) -> IngredientsResponse:
    """Translate known bar staples; unknown names are returned as sent."""
    return IngredientsResponse(
        ingredients=CocktailService.translate_ingredient_names(
            body.ingredients, body.sourceLanguage, body.targetLanguage
        )
    )


@router.post("/identify", response_model=IngredientsResponse)
async def identify_ingredients(
    request: Request,
    file: UploadFile = File(...),
    language: str = Form("es"),
    _: None = Depends(rate_limit_dependency),
    cocktail_service: CocktailService = Depends(get_cocktail_service),
) -> IngredientsResponse:
    """
    Identify ingredients in a photo of a bar.

    - **file**: Image file (JPEG, PNG, or WebP, max 10MB)
    - **language**: Language of the returned names (en/es)
    """
    logger.info(
        "Route /ingredients/identify called",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "route": "/ingredients/identify",
            "params": {"filename": file.filename, "content_type": file.content_type, "language": language},
        },
    )

    language = validate_language(language)
    image_data = await file.read()
    if len(image_data) > settings.max_request_size:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail={
                "error": "File too large",
                "detail": f"Max size is {settings.max_request_size} bytes",
            },
        )

    names = await cocktail_service.identify(image_data, file.filename or "image", language)
    return IngredientsResponse(ingredients=names)
