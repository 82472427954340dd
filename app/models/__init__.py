"""Pydantic models."""

from app.models.cocktail import (
    Cocktail,
    CocktailBatch,
    CocktailDraft,
    CocktailIngredient,
    Difficulty,
    ImageState,
    ShareRecord,
)

__all__ = [
    "Cocktail",
    "CocktailBatch",
    "CocktailDraft",
    "CocktailIngredient",
    "Difficulty",
    "ImageState",
    "ShareRecord",
]
