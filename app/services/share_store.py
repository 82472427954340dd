"""Immutable, id-addressed cocktail snapshots for link-based sharing."""

from __future__ import annotations

import logging
import random
import string
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from app.models.cocktail import Cocktail, CocktailDraft, ShareRecord
from app.services.status_tracker import derive_image_state
from app.services.storage import KeyValueStore
from app.utils.exceptions import NotFoundError, ShareStoreError
from app.utils.validators import validate_share_id

logger = logging.getLogger(__name__)

SHARE_KEY_PREFIX = "shared_cocktail_"
SHARE_ID_ALPHABET = string.ascii_lowercase + string.digits
SHARE_ID_LENGTH = 9


def share_key(share_id: str) -> str:
    return f"{SHARE_KEY_PREFIX}{share_id}"


def share_fragment(share_id: str) -> str:
    """Client-side URL fragment resolving to a share lookup."""
    return f"#/share/{share_id}"


class ShareStore:
    """Publish and look up shared cocktails; records are never updated or deleted."""

    def __init__(self, store: KeyValueStore, rng: Optional[random.Random] = None) -> None:
        self.store = store
        self._rng = rng or random.Random()

    def _new_id(self) -> str:
        while True:
            share_id = "".join(self._rng.choices(SHARE_ID_ALPHABET, k=SHARE_ID_LENGTH))
            if self.store.get(share_key(share_id)) is None:
                return share_id

    def save(self, cocktail: CocktailDraft, image_url: Optional[str]) -> str:
        """
        Persist a snapshot and return its id.

        Raises:
            ShareStoreError: If the record cannot be written
        """
        if isinstance(cocktail, Cocktail):
            cocktail = cocktail.to_draft()
        record = ShareRecord(cocktailData=cocktail, imageUrl=image_url)
        try:
            share_id = self._new_id()
            self.store.set(share_key(share_id), record.model_dump_json())
        except (OSError, ValueError) as e:
            logger.error("Failed to save shared cocktail: %s", str(e), exc_info=True)
            raise ShareStoreError("Failed to save cocktail for sharing") from e

        logger.info("Shared cocktail %r as %s", cocktail.cocktailName, share_id)
        return share_id

    def load(self, share_id: str) -> Cocktail:
        """
        Rebuild the full cocktail for a share id.

        Raises:
            NotFoundError: No record for this id
        """
        validate_share_id(share_id)
        raw = self.store.get(share_key(share_id))
        if raw is None:
            raise NotFoundError(f"Shared cocktail {share_id} not found")

        try:
            record = ShareRecord.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.error("Corrupt share record %s: %s", share_id, str(e))
            raise NotFoundError(f"Shared cocktail {share_id} not found") from e

        return Cocktail(
            **record.cocktailData.model_dump(),
            id=share_id,
            imageUrl=record.imageUrl,
            imageState=derive_image_state(record.imageUrl),
        )
