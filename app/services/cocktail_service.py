"""Cocktail orchestration: batches, image runs, favorites re-sync and translation."""

from __future__ import annotations

import asyncio
import logging
import random
import time
import uuid
from typing import Dict, List, Optional

import httpx

from app.config import settings
from app.models.cocktail import BatchStatus, Cocktail, CocktailBatch, CocktailDraft, ImageState, Language
from app.services.favorites import FavoritesStore
from app.services.gemini_service import GeminiService
from app.services.image_batch import ImageBatchRunner
from app.services.image_service import ImageService
from app.services.retry import SleepFunc
from app.services.status_tracker import ACTIVE_STATES, StatusTracker, derive_image_state
from app.utils.exceptions import NotFoundError, OfflineUnavailableError
from app.utils.validators import validate_ingredients_list

logger = logging.getLogger(__name__)

# Bar staples offered as starter ingredients; entries line up index by index across languages.
STAPLE_INGREDIENTS: Dict[str, Dict[str, List[str]]] = {
    "en": {
        "spirits": ["Vodka", "Gin", "Rum", "Tequila", "Whiskey", "Brandy"],
        "mixers": ["Lime Juice", "Lemon Juice", "Tonic Water", "Soda Water", "Orange Juice", "Simple Syrup"],
        "modifiers": ["Triple Sec", "Vermouth", "Bitters", "Mint Leaves", "Agave Nectar"],
    },
    "es": {
        "spirits": ["Vodka", "Ginebra", "Ron", "Tequila", "Whisky", "Brandy"],
        "mixers": ["Jugo de Lima", "Jugo de Limón", "Agua Tónica", "Agua con Gas", "Jugo de Naranja", "Jarabe Simple"],
        "modifiers": ["Triple Seco", "Vermut", "Amargo de Angostura", "Hojas de Menta", "Néctar de Agave"],
    },
}


def _flat_staples(language: Language) -> List[str]:
    groups = STAPLE_INGREDIENTS[language]
    return [*groups["spirits"], *groups["mixers"], *groups["modifiers"]]


def new_cocktail_id() -> str:
    return f"cocktail-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


class CocktailService:
    """Entry point used by the API routes."""

    def __init__(
        self,
        gemini_service: GeminiService,
        favorites: FavoritesStore,
        *,
        sleep: Optional[SleepFunc] = None,
    ) -> None:
        self.gemini_service = gemini_service
        self.favorites = favorites
        self.image_service = ImageService()
        self._sleep = sleep
        self._batches: Dict[str, CocktailBatch] = {}

    # ---------------------------------------------------------------------
    # Preconditions
    # ---------------------------------------------------------------------

    async def ensure_online(self) -> None:
        """Raise OfflineUnavailableError when the Gemini endpoint is unreachable."""
        url = settings.connectivity_check_url
        if not url:
            return
        try:
            async with httpx.AsyncClient(timeout=settings.connectivity_timeout) as client:
                await client.head(url)
        except httpx.HTTPError as e:
            logger.warning("Connectivity check against %s failed: %s", url, str(e))
            raise OfflineUnavailableError("You appear to be offline") from e

    # ---------------------------------------------------------------------
    # Batches
    # ---------------------------------------------------------------------

    async def start_batch(self, ingredients: List[str], language: Language) -> CocktailBatch:
        """
        Generate cocktails and register a batch whose images are still pending.

        Raises:
            OfflineUnavailableError, EmptyInputError, InvalidCredentialError, GenerationFailedError
        """
        await self.ensure_online()
        names = validate_ingredients_list(ingredients)

        drafts = await self.gemini_service.generate_cocktails(names, language)
        cocktails = [
            Cocktail(**draft.model_dump(), id=new_cocktail_id(), imageState=ImageState.PENDING)
            for draft in drafts
        ]
        batch = CocktailBatch(id=uuid.uuid4().hex, language=language, ingredients=names, cocktails=cocktails)
        self._batches[batch.id] = batch
        logger.info("Registered batch %s with %d cocktails", batch.id, len(cocktails))
        self._evict_finished_batches()
        return batch

    def _evict_finished_batches(self) -> None:
        """Drop the oldest finished batches once more than `max_batches` are held."""
        excess = len(self._batches) - settings.max_batches
        if excess <= 0:
            return
        finished = [batch_id for batch_id, b in self._batches.items() if b.status != BatchStatus.RUNNING]
        for batch_id in finished[:excess]:
            del self._batches[batch_id]
            logger.debug("Evicted batch %s", batch_id)

    def get_batch(self, batch_id: str) -> CocktailBatch:
        batch = self._batches.get(batch_id)
        if batch is None:
            raise NotFoundError(f"Batch {batch_id} not found")
        return batch

    async def run_images(self, batch_id: str) -> CocktailBatch:
        """Generate the batch images one by one, re-syncing favorites as items complete."""
        batch = self.get_batch(batch_id)

        async def on_update(item: Cocktail) -> None:
            batch.cocktails = StatusTracker.update(
                batch.cocktails, item.id, imageState=item.imageState, imageUrl=item.imageUrl
            )
            await self.favorites.sync(item)

        runner = ImageBatchRunner(
            self.gemini_service,
            cooldown=settings.image_cooldown_seconds,
            sleep=self._sleep,
            on_update=on_update,
        )
        outcome = await runner.run(batch.cocktails)
        batch.status = outcome.status
        batch.error = outcome.error
        logger.info("Batch %s finished: status=%s error=%s", batch_id, outcome.status.value, outcome.error)
        return batch

    async def translate_batch(self, batch_id: str, target_language: Language) -> CocktailBatch:
        batch = self.get_batch(batch_id)
        translated = await self.translate_collection(batch.cocktails, target_language, batch.language)
        # Image fields may have moved on while translating; only text is taken over.
        for item in translated:
            current = StatusTracker.get(batch.cocktails, item.id)
            if current is not None:
                batch.cocktails = StatusTracker.update(
                    batch.cocktails,
                    item.id,
                    **{name: getattr(item, name) for name in CocktailDraft.model_fields},
                )
        batch.language = target_language
        return batch

    # ---------------------------------------------------------------------
    # Favorites
    # ---------------------------------------------------------------------

    async def toggle_favorite(self, cocktail: Cocktail) -> bool:
        """Favorite a copy of the cocktail with its latest image fields, or unfavorite it."""
        tracked = self._latest_snapshot(cocktail.id)
        if tracked is not None:
            cocktail = cocktail.model_copy(update={"imageState": tracked.imageState, "imageUrl": tracked.imageUrl})
        elif cocktail.imageState in ACTIVE_STATES:
            # Not tracked by any batch: nothing will ever finish it
            cocktail = cocktail.model_copy(update={"imageState": derive_image_state(cocktail.imageUrl)})
        return await self.favorites.toggle(cocktail)

    def _latest_snapshot(self, cocktail_id: str) -> Optional[Cocktail]:
        for batch in self._batches.values():
            item = StatusTracker.get(batch.cocktails, cocktail_id)
            if item is not None:
                return item
        return None

    async def translate_favorites(self, target_language: Language, source_language: Language) -> List[Cocktail]:
        translated = await self.translate_collection(self.favorites.list(), target_language, source_language)
        # Image fields may have moved on and favorites may have changed while translating
        await self.favorites.apply_text(translated)
        return self.favorites.list()

    # ---------------------------------------------------------------------
    # Translation
    # ---------------------------------------------------------------------

    async def translate_collection(
        self,
        cocktails: List[Cocktail],
        target_language: Language,
        source_language: Language,
    ) -> List[Cocktail]:
        """Translate every cocktail; an item whose translation failed comes back unchanged."""
        patches = await asyncio.gather(
            *(self.gemini_service.translate_cocktail(c, target_language, source_language) for c in cocktails)
        )
        return [c.model_copy(update=patch) if patch else c for c, patch in zip(cocktails, patches)]

    @staticmethod
    def translate_ingredient_names(names: List[str], source_language: Language, target_language: Language) -> List[str]:
        """Translate known bar staples between languages; other names are left as typed."""
        if source_language == target_language:
            return list(names)
        source = [s.lower() for s in _flat_staples(source_language)]
        target = _flat_staples(target_language)

        translated = []
        for name in names:
            key = name.lower()
            translated.append(target[source.index(key)] if key in source else name)
        return translated

    @staticmethod
    def random_ingredients(language: Language = "es", rng: Optional[random.Random] = None) -> List[str]:
        """One random spirit, mixer and modifier."""
        rng = rng or random.Random()
        groups = STAPLE_INGREDIENTS[language]
        return [rng.choice(groups["spirits"]), rng.choice(groups["mixers"]), rng.choice(groups["modifiers"])]

    # ---------------------------------------------------------------------
    # Ingredient scanning
    # ---------------------------------------------------------------------

    async def identify(self, image_data: bytes, filename: str, language: Language) -> List[str]:
        """
        Identify ingredients in an uploaded photo.

        Raises:
            ImageProcessingError, InvalidCredentialError, IdentificationFailedError
        """
        validated, mime_type = self.image_service.validate_image(image_data, filename)
        prepared, mime_type = self.image_service.prepare_for_vision(validated, mime_type)
        return await self.gemini_service.identify_ingredients(prepared, mime_type, language)
