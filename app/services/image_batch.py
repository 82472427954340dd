"""Sequential image generation for one batch of cocktails."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from app.models.cocktail import BatchStatus, Cocktail, ImageState
from app.services.gemini_service import GeminiService
from app.services.retry import SleepFunc
from app.services.status_tracker import StatusTracker
from app.utils.exceptions import (
    InvalidCredentialError,
    MixMasterException,
    QuotaExceededError,
)

logger = logging.getLogger(__name__)

UpdateListener = Callable[[Cocktail], Awaitable[None]]


@dataclass
class BatchOutcome:
    """Final state of a batch run."""

    cocktails: List[Cocktail]
    status: BatchStatus
    error: Optional[str] = None


class ImageBatchRunner:
    """
    Generate images one at a time from an explicit queue.

    - After every successful image a fixed cooldown is observed before the
      next request (rate-limit courtesy, independent of retry backoff).
    - Quota exhaustion halts the batch: all still pending/loading items end
      in error_quota.
    - An invalid API key halts the batch with the remaining items in error.
    - Any other failure marks only that item as error.
    """

    def __init__(
        self,
        gemini_service: GeminiService,
        *,
        cooldown: float,
        sleep: Optional[SleepFunc] = None,
        on_update: Optional[UpdateListener] = None,
    ) -> None:
        self.gemini_service = gemini_service
        self.cooldown = cooldown
        self._sleep = sleep or asyncio.sleep
        self._on_update = on_update
        self.cocktails: List[Cocktail] = []

    async def run(self, cocktails: List[Cocktail]) -> BatchOutcome:
        self.cocktails = list(cocktails)
        queue = deque(c.id for c in self.cocktails if c.imageState == ImageState.PENDING)
        error: Optional[str] = None

        while queue:
            item_id = queue.popleft()
            await self._apply(item_id, ImageState.LOADING)
            cocktail = StatusTracker.get(self.cocktails, item_id)

            try:
                image_url = await self.gemini_service.generate_image(cocktail)
            except QuotaExceededError as e:
                logger.error("Image quota exceeded, halting batch with %d item(s) left", len(queue) + 1)
                await self._halt([item_id, *queue], ImageState.ERROR_QUOTA)
                return BatchOutcome(self.cocktails, BatchStatus.HALTED, e.code)
            except InvalidCredentialError as e:
                logger.error("Invalid API key, halting batch with %d item(s) left", len(queue) + 1)
                await self._halt([item_id, *queue], ImageState.ERROR)
                return BatchOutcome(self.cocktails, BatchStatus.HALTED, e.code)
            except MixMasterException as e:
                logger.error("Failed to generate image for %r: %s", cocktail.cocktailName, str(e))
                await self._apply(item_id, ImageState.ERROR)
                error = e.code
                continue

            await self._apply(item_id, ImageState.SUCCESS, image_url)
            if queue:
                await self._sleep(self.cooldown)

        return BatchOutcome(self.cocktails, BatchStatus.COMPLETED, error)

    async def _apply(self, item_id: str, state: ImageState, image_url: Optional[str] = None) -> None:
        self.cocktails = StatusTracker.transition(self.cocktails, item_id, state, image_url)
        await self._notify(item_id)

    async def _halt(self, item_ids: List[str], state: ImageState) -> None:
        self.cocktails = StatusTracker.mark_remaining(self.cocktails, item_ids, state)
        for item_id in item_ids:
            await self._notify(item_id)

    async def _notify(self, item_id: str) -> None:
        if self._on_update is not None:
            item = StatusTracker.get(self.cocktails, item_id)
            if item is not None:
                await self._on_update(item)
