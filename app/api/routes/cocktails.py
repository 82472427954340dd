"""Cocktail generation endpoints."""

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status

from app.api.dependencies import get_cocktail_service
from app.middleware.rate_limit import rate_limit_dependency
from app.models.cocktail import (
    Cocktail,
    CocktailBatch,
    GenerateRequest,
    Language,
    TranslateCocktailsRequest,
)
from app.services.cocktail_service import CocktailService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/cocktails", tags=["cocktails"])


@router.post("/generate", response_model=CocktailBatch, status_code=status.HTTP_202_ACCEPTED)
async def generate_cocktails(
    request: Request,
    body: GenerateRequest,
    background_tasks: BackgroundTasks,
    _: None = Depends(rate_limit_dependency),
    cocktail_service: CocktailService = Depends(get_cocktail_service),
) -> CocktailBatch:
    """
    Generate three cocktails from the given ingredients.

    The recipes are returned right away with `imageState=pending`; images are
    generated one at a time in the background. Poll
    `GET /cocktails/batches/{id}` to follow their progress.
    """
    logger.info(
        "Route /cocktails/generate called",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "route": "/cocktails/generate",
            "params": {"ingredients": body.ingredients, "language": body.language},
        },
    )

    batch = await cocktail_service.start_batch(body.ingredients, body.language)
    background_tasks.add_task(cocktail_service.run_images, batch.id)
    return batch


@router.get("/batches/{batch_id}", response_model=CocktailBatch)
async def get_batch(
    batch_id: str,
    cocktail_service: CocktailService = Depends(get_cocktail_service),
) -> CocktailBatch:
    """Latest snapshot of a generation batch."""
    return cocktail_service.get_batch(batch_id)


@router.post("/batches/{batch_id}/translate", response_model=CocktailBatch)
async def translate_batch(
    batch_id: str,
    target_language: Language = Query(..., alias="targetLanguage"),
    _: None = Depends(rate_limit_dependency),
    cocktail_service: CocktailService = Depends(get_cocktail_service),
) -> CocktailBatch:
    """Translate a batch in place; image generation keeps running."""
    return await cocktail_service.translate_batch(batch_id, target_language)


@router.post("/translate", response_model=List[Cocktail])
async def translate_cocktails(
    request: Request,
    body: TranslateCocktailsRequest,
    _: None = Depends(rate_limit_dependency),
    cocktail_service: CocktailService = Depends(get_cocktail_service),
) -> List[Cocktail]:
    """
    Translate cocktails between English and Spanish.

    A cocktail whose translation failed is returned unchanged.
    """
    logger.info(
        "Route /cocktails/translate called",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "route": "/cocktails/translate",
            "params": {
                "count": len(body.cocktails),
                "source": body.sourceLanguage,
                "target": body.targetLanguage,
            },
        },
    )
    return await cocktail_service.translate_collection(body.cocktails, body.targetLanguage, body.sourceLanguage)
