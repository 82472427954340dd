"""Shared API dependencies."""

from functools import lru_cache

from app.config import settings
from app.services.cocktail_service import CocktailService
from app.services.favorites import FavoritesStore
from app.services.gemini_service import GeminiService
from app.services.share_store import ShareStore
from app.services.storage import KeyValueStore, create_store


@lru_cache(maxsize=1)
def get_store() -> KeyValueStore:
    """Key-value store shared by favorites and share records."""
    return create_store(settings.storage_dir)


@lru_cache(maxsize=1)
def get_gemini_service() -> GeminiService:
    return GeminiService()


@lru_cache(maxsize=1)
def get_cocktail_service() -> CocktailService:
    """Cocktail service instance; holds batches in memory, so one per process."""
    return CocktailService(get_gemini_service(), FavoritesStore(get_store()))


@lru_cache(maxsize=1)
def get_share_store() -> ShareStore:
    return ShareStore(get_store())
