"""Favorite cocktails, persisted under a fixed key as a JSON array."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Iterable, List

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.models.cocktail import Cocktail, CocktailDraft
from app.services.status_tracker import StatusTracker, derive_image_state
from app.services.storage import KeyValueStore

logger = logging.getLogger(__name__)

FAVORITES_KEY = "mixMasterFavorites"

_COCKTAIL_LIST = TypeAdapter(List[Cocktail])


class FavoritesStore:
    """
    Favorites collection; every entry is a value copy, never an alias.

    The in-memory list is changed on the event loop; only the write to the
    backing store runs in a worker thread.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self._items: List[Cocktail] = self._load()
        self._write_lock = asyncio.Lock()

    def _load(self) -> List[Cocktail]:
        raw = self.store.get(FAVORITES_KEY)
        if not raw:
            return []
        try:
            records = json.loads(raw)
            for record in records:
                # Nothing is in flight after a reload
                record["imageState"] = derive_image_state(record.get("imageUrl")).value
            return _COCKTAIL_LIST.validate_python(records)
        except (json.JSONDecodeError, TypeError, AttributeError, PydanticValidationError) as e:
            logger.error("Could not load favorites: %s", str(e))
            return []

    async def _persist(self) -> None:
        # Serialize under the lock so the last write always carries the latest list
        async with self._write_lock:
            payload = json.dumps([item.model_dump(mode="json") for item in self._items], ensure_ascii=False)
            try:
                await asyncio.to_thread(self.store.set, FAVORITES_KEY, payload)
            except (OSError, ValueError) as e:
                logger.error("Could not save favorites: %s", str(e), exc_info=True)

    def list(self) -> List[Cocktail]:
        return list(self._items)

    def contains(self, cocktail_id: str) -> bool:
        return StatusTracker.get(self._items, cocktail_id) is not None

    async def toggle(self, cocktail: Cocktail) -> bool:
        """Remove the cocktail if favorited, else add a copy. Returns the new favorite flag."""
        if self.contains(cocktail.id):
            self._items = [item for item in self._items if item.id != cocktail.id]
            await self._persist()
            logger.info("Removed %s from favorites", cocktail.id)
            return False

        self._items = [*self._items, cocktail.model_copy(deep=True)]
        await self._persist()
        logger.info("Added %s to favorites", cocktail.id)
        return True

    async def sync(self, cocktail: Cocktail) -> bool:
        """Copy the image fields of `cocktail` onto the favorite with the same id, if any."""
        if not self.contains(cocktail.id):
            return False
        self._items = StatusTracker.update(
            self._items,
            cocktail.id,
            imageState=cocktail.imageState,
            imageUrl=cocktail.imageUrl,
        )
        await self._persist()
        return True

    async def apply_text(self, translated: Iterable[Cocktail]) -> None:
        """
        Copy the recipe text of each translated cocktail onto the current
        favorite with the same id. Image fields are left as they are now;
        ids no longer favorited are skipped.
        """
        for item in translated:
            if self.contains(item.id):
                self._items = StatusTracker.update(
                    self._items,
                    item.id,
                    **{name: getattr(item, name) for name in CocktailDraft.model_fields},
                )
        await self._persist()
