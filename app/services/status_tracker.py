"""
Per-item image status tracking.

Works on one collection (list of Cocktail) at a time and never mutates it:
every update returns a new list where exactly the matching item is replaced.
Callers holding copies of the same id in other collections update each one.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional

from app.models.cocktail import Cocktail, ImageState
from app.utils.exceptions import StatusTransitionError

logger = logging.getLogger(__name__)

ACTIVE_STATES: FrozenSet[ImageState] = frozenset({ImageState.PENDING, ImageState.LOADING})

ALLOWED_TRANSITIONS: Dict[ImageState, FrozenSet[ImageState]] = {
    ImageState.PENDING: frozenset({ImageState.LOADING, ImageState.ERROR, ImageState.ERROR_QUOTA}),
    ImageState.LOADING: frozenset({ImageState.SUCCESS, ImageState.ERROR, ImageState.ERROR_QUOTA}),
    ImageState.SUCCESS: frozenset(),
    ImageState.ERROR: frozenset(),
    ImageState.ERROR_QUOTA: frozenset(),
}


def derive_image_state(image_url: Optional[str]) -> ImageState:
    """State of a stored cocktail: success with an image, error without."""
    return ImageState.SUCCESS if image_url else ImageState.ERROR


class StatusTracker:
    """Image status updates over a single collection."""

    @staticmethod
    def get(items: List[Cocktail], item_id: str) -> Optional[Cocktail]:
        """Latest snapshot of one item, or None."""
        for item in items:
            if item.id == item_id:
                return item
        return None

    @staticmethod
    def update(items: List[Cocktail], item_id: str, **changes) -> List[Cocktail]:
        """Return a new list with the item matching `item_id` copied with `changes`."""
        if "id" in changes:
            raise ValueError("Cocktail id is immutable")
        return [item.model_copy(update=changes) if item.id == item_id else item for item in items]

    @classmethod
    def transition(
        cls,
        items: List[Cocktail],
        item_id: str,
        state: ImageState,
        image_url: Optional[str] = None,
    ) -> List[Cocktail]:
        """
        Move one item to `state`, enforcing pending -> loading -> terminal.

        Raises:
            StatusTransitionError: Illegal transition, or success without an image
        """
        current = cls.get(items, item_id)
        if current is None:
            logger.debug("transition: %s not in collection, nothing to do", item_id)
            return items

        if state not in ALLOWED_TRANSITIONS[current.imageState]:
            raise StatusTransitionError(
                f"Cannot move {item_id} from {current.imageState.value} to {state.value}"
            )
        if state == ImageState.SUCCESS and not image_url:
            raise StatusTransitionError(f"Cannot mark {item_id} as success without an image")

        changes = {"imageState": state}
        if image_url is not None:
            changes["imageUrl"] = image_url
        return cls.update(items, item_id, **changes)

    @classmethod
    def mark_remaining(cls, items: List[Cocktail], item_ids: Iterable[str], state: ImageState) -> List[Cocktail]:
        """Move every still pending/loading item among `item_ids` to a terminal `state`."""
        targets = set(item_ids)
        for item in list(items):
            if item.id in targets and item.imageState in ACTIVE_STATES:
                items = cls.transition(items, item.id, state)
        return items
