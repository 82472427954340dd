"""
Gemini service for cocktail generation, images, ingredient scanning and translation.

Key design:
- Every remote call goes through RetryableCall; parse + schema validation happen
  inside the attempt, so a parseable-but-wrong payload is retried like a transient error.
- Image calls treat quota exhaustion as fatal; text calls retry it.
- Translation never raises: on any failure the caller gets an empty patch.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types
from pydantic import TypeAdapter

from app.config import settings
from app.models.cocktail import (
    CocktailDraft,
    CocktailIngredient,
    CocktailTranslation,
    Difficulty,
    Language,
    canonical_difficulty,
    difficulty_label,
)
from app.services.gemini_utils import get_response_text, log_empty_response, safe_json_loads
from app.services.retry import RetryableCall, SleepFunc
from app.utils.exceptions import (
    EmptyInputError,
    GeminiError,
    GenerationFailedError,
    IdentificationFailedError,
    ImageGenerationFailedError,
    MixMasterException,
)
from app.utils.gemini_helpers import (
    INGREDIENT_NAMES_SCHEMA,
    get_cocktail_list_schema,
    get_translation_schema,
)

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {"en": "English", "es": "Spanish"}

_COCKTAIL_LIST = TypeAdapter(List[CocktailDraft])


class GeminiService:
    """Service for interacting with Gemini API."""

    def __init__(self, client: Optional[genai.Client] = None, sleep: Optional[SleepFunc] = None) -> None:
        self._client = client
        self._sleep = sleep

    @property
    def client(self) -> genai.Client:
        """Get or create Gemini client (lazy initialization)."""
        if self._client is None:
            self._client = genai.Client(
                api_key=settings.gemini_api_key,
                http_options=types.HttpOptions(timeout=settings.http_timeout * 1000),
            )
        return self._client

    def _retry(self, name: str, max_attempts: int, failure_error, quota_is_fatal: bool = False) -> RetryableCall:
        return RetryableCall(
            name=name,
            max_attempts=max_attempts,
            base_delay=settings.retry_base_delay,
            failure_error=failure_error,
            quota_is_fatal=quota_is_fatal,
            sleep=self._sleep,
        )

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------

    async def generate_cocktails(self, ingredients: List[str], language: Language) -> List[CocktailDraft]:
        """
        Generate cocktails from the given bar ingredients.

        Three are requested; any non-empty list that validates is accepted.

        Raises:
            EmptyInputError: No ingredients (checked before any remote call)
            InvalidCredentialError: API key rejected
            GenerationFailedError: All attempts failed
        """
        names = [i.strip() for i in ingredients or [] if i and i.strip()]
        if not names:
            raise EmptyInputError("Please provide at least one ingredient.")

        prompt = self._build_generation_prompt(names, language)
        schema = get_cocktail_list_schema()

        async def attempt() -> List[CocktailDraft]:
            text = await self._call_gemini(model=settings.gemini_text_model, contents=prompt, schema=schema)
            cocktails = _COCKTAIL_LIST.validate_python(safe_json_loads(text))
            if not cocktails:
                raise GeminiError("Gemini returned an empty cocktail list")
            if len(cocktails) != 3:
                logger.warning("Gemini returned %d cocktails instead of 3", len(cocktails))
            return cocktails

        logger.info("Generating cocktails from %d ingredients (language=%s)", len(names), language)
        retry = self._retry("generate_cocktails", settings.recipe_max_attempts, GenerationFailedError)
        return await retry.run(attempt)

    async def generate_image(self, cocktail: CocktailDraft) -> str:
        """
        Generate a photo of the cocktail and return it as a data URL.

        Raises:
            InvalidCredentialError: API key rejected
            QuotaExceededError: Image quota exhausted
            ImageGenerationFailedError: All attempts failed
        """
        prompt = self._build_image_prompt(cocktail)

        def _sync_call() -> Any:
            return self.client.models.generate_images(
                model=settings.gemini_image_model,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    output_mime_type="image/jpeg",
                    aspect_ratio="16:9",
                ),
            )

        async def attempt() -> str:
            resp = await asyncio.to_thread(_sync_call)
            images = getattr(resp, "generated_images", None) or []
            image = getattr(images[0], "image", None) if images else None
            image_bytes = getattr(image, "image_bytes", None)
            if not image_bytes:
                raise GeminiError("No image was generated by the API")
            if isinstance(image_bytes, bytes):
                image_bytes = base64.b64encode(image_bytes).decode("ascii")
            return f"data:image/jpeg;base64,{image_bytes}"

        logger.info("Generating image for cocktail %r", cocktail.cocktailName)
        retry = self._retry(
            f"generate_image[{cocktail.cocktailName}]",
            settings.image_max_attempts,
            ImageGenerationFailedError,
            quota_is_fatal=True,
        )
        return await retry.run(attempt)

    async def identify_ingredients(self, image_data: bytes, mime_type: str, language: Language) -> List[str]:
        """
        Identify usable cocktail ingredients in a photo.

        Returns a possibly-empty list of names.

        Raises:
            InvalidCredentialError: API key rejected
            IdentificationFailedError: All attempts failed
        """
        contents = [
            types.Part.from_bytes(data=image_data, mime_type=mime_type),
            self._build_identification_prompt(language),
        ]

        async def attempt() -> List[str]:
            text = await self._call_gemini(
                model=settings.gemini_text_model,
                contents=contents,
                schema=INGREDIENT_NAMES_SCHEMA,
            )
            result = safe_json_loads(text)
            if not isinstance(result, list):
                return []
            return [str(x).strip() for x in result if str(x).strip()]

        logger.info("Identifying ingredients from image (mime_type=%s)", mime_type)
        retry = self._retry("identify_ingredients", settings.identify_max_attempts, IdentificationFailedError)
        return await retry.run(attempt)

    async def translate_cocktail(
        self,
        cocktail: CocktailDraft,
        target_language: Language,
        source_language: Language,
    ) -> Dict[str, Any]:
        """
        Translate the free-text fields of a cocktail.

        Returns a partial update for `cocktail`; an empty dict when translation
        failed or is not needed, so the caller keeps the original text.
        """
        if target_language == source_language:
            return {}

        prompt = self._build_translation_prompt(cocktail, target_language, source_language)
        schema = get_translation_schema()

        async def attempt() -> CocktailTranslation:
            text = await self._call_gemini(model=settings.gemini_text_model, contents=prompt, schema=schema)
            return CocktailTranslation.model_validate(safe_json_loads(text))

        retry = self._retry("translate_cocktail", settings.translate_max_attempts, GeminiError)
        try:
            translated = await retry.run(attempt)
        except MixMasterException as e:
            logger.error("Error translating cocktail %r: %s", cocktail.cocktailName, str(e))
            return {}

        return self._merge_translation(cocktail, translated)

    # ---------------------------------------------------------------------
    # Prompts
    # ---------------------------------------------------------------------

    def _build_generation_prompt(self, ingredients: List[str], language: Language) -> str:
        difficulties = ", ".join(repr(d.value) for d in Difficulty)
        return f"""
You are an expert mixologist. Your task is to generate 3 unique cocktail recipes based on these ingredients: {', '.join(ingredients)}. Respond entirely in {LANGUAGE_NAMES[language]}.
- The first two recipes must STRICTLY use ONLY the provided ingredients.
- The third recipe can be more creative and add 1-2 common bar staples (like simple syrup, bitters, or a common garnish). For any added staple ingredient, set its 'isGarnish' property if it's a garnish.
- The 'difficulty' field must be one of: {difficulties}.
- Be creative and ensure the cocktail names and descriptions are appealing.
- Provide all the information required by the JSON schema.
""".strip()

    def _build_image_prompt(self, cocktail: CocktailDraft) -> str:
        return (
            f'A professional, moody, photorealistic image of a single cocktail named "{cocktail.cocktailName}". '
            "This is a mixed beverage, do not interpret the name literally (e.g., as a landscape or object). "
            f"The cocktail is perfectly served in a {cocktail.glassware}. The garnish is {cocktail.garnish}. "
            "The setting is a chic, dark, high-end night bar with subtle neon lighting in the background "
            "(pinks and blues), creating a sophisticated and modern ambiance. The image must be a close-up, "
            "sharp focus on ONLY the cocktail in its glass. Absolutely no people, hands, or other distracting objects."
        )

    def _build_identification_prompt(self, language: Language) -> str:
        return (
            "Analyze this image and identify all usable cocktail ingredients present "
            "(spirits, mixers, fruits, herbs). List only the names of the ingredients. "
            f"Respond entirely in {LANGUAGE_NAMES[language]}. The response must be a JSON array of strings."
        )

    def _build_translation_prompt(
        self,
        cocktail: CocktailDraft,
        target_language: Language,
        source_language: Language,
    ) -> str:
        translatable = {
            "cocktailName": cocktail.cocktailName,
            "description": cocktail.description,
            "ingredients": [{"name": i.name, "quantity": i.quantity} for i in cocktail.ingredients],
            "instructions": cocktail.instructions,
            "prepTime": cocktail.prepTime,
            "difficulty": cocktail.difficulty.value,
            "glassware": cocktail.glassware,
            "garnish": cocktail.garnish,
            "flavorProfile": cocktail.flavorProfile,
        }
        target = LANGUAGE_NAMES[target_language]
        english = ", ".join(repr(difficulty_label(d, "en")) for d in Difficulty)
        spanish = ", ".join(repr(difficulty_label(d, "es")) for d in Difficulty)
        return f"""
Translate the following cocktail content from {LANGUAGE_NAMES[source_language]} to {target}.
- Translate all text values, including ingredient names, quantities (e.g., 'oz', 'cup' to 'taza'), instructions, and time units (e.g., 'minutes' to 'minutos').
- For the 'difficulty' field, translate the value to its {target} equivalent. The possible English values are: {english}. The Spanish equivalents are: {spanish}.
- Respond ONLY with a JSON object matching the provided schema.

Content to translate:
{json.dumps(translatable, ensure_ascii=False, indent=2)}
""".strip()

    # ---------------------------------------------------------------------
    # Core Gemini call
    # ---------------------------------------------------------------------

    async def _call_gemini(self, *, model: str, contents: Any, schema: Dict[str, Any]) -> str:
        """
        Single Gemini call in JSON response mode.
        Raises GeminiError on an empty payload (usually safety filters).
        """
        def _sync_call() -> Any:
            return self.client.models.generate_content(
                model=model,
                contents=contents,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=schema,
                ),
            )

        resp = await asyncio.to_thread(_sync_call)

        text = get_response_text(resp)
        if not text:
            log_empty_response("Gemini", resp)
            raise GeminiError("API returned an empty response. This may be due to safety filters.")
        logger.debug("Gemini raw response:\n%s", text)
        return text

    # ---------------------------------------------------------------------
    # Translation merge
    # ---------------------------------------------------------------------

    def _merge_translation(self, cocktail: CocktailDraft, translated: CocktailTranslation) -> Dict[str, Any]:
        """Build the partial update, keeping originals wherever the translation is blank."""
        ingredients: List[CocktailIngredient] = []
        for index, original in enumerate(cocktail.ingredients):
            tr = translated.ingredients[index] if index < len(translated.ingredients) else None
            ingredients.append(
                CocktailIngredient(
                    name=(tr.name if tr and tr.name else original.name),
                    quantity=(tr.quantity if tr and tr.quantity else original.quantity),
                    isGarnish=original.isGarnish,
                )
            )

        patch: Dict[str, Any] = {
            "difficulty": canonical_difficulty(translated.difficulty) or cocktail.difficulty,
            "ingredients": ingredients,
            "instructions": translated.instructions or cocktail.instructions,
        }
        for field in ("cocktailName", "description", "prepTime", "glassware", "garnish", "flavorProfile"):
            patch[field] = getattr(translated, field) or getattr(cocktail, field)
        return patch
