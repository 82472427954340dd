"""Cocktail Pydantic models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Language = Literal["en", "es"]


class Difficulty(str, Enum):
    """Canonical (English) difficulty levels."""

    VERY_EASY = "Very Easy"
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    EXPERT = "Expert"


DIFFICULTY_EN_TO_ES: Dict[str, str] = {
    "Very Easy": "Muy Fácil",
    "Easy": "Fácil",
    "Medium": "Medio",
    "Hard": "Difícil",
    "Expert": "Experto",
}
DIFFICULTY_ES_TO_EN: Dict[str, str] = {es: en for en, es in DIFFICULTY_EN_TO_ES.items()}


def canonical_difficulty(value: str) -> Optional[Difficulty]:
    """
    Map a difficulty label in either supported language to the canonical enum.

    Returns None for labels outside both tables.
    """
    label = (value or "").strip()
    if label in DIFFICULTY_ES_TO_EN:
        label = DIFFICULTY_ES_TO_EN[label]
    try:
        return Difficulty(label)
    except ValueError:
        return None


def difficulty_label(difficulty: Difficulty, language: Language) -> str:
    """Display label for a difficulty in the given language."""
    if language == "es":
        return DIFFICULTY_EN_TO_ES[difficulty.value]
    return difficulty.value


class ImageState(str, Enum):
    """Image generation status of a single cocktail."""

    PENDING = "pending"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"
    ERROR_QUOTA = "error_quota"


class CocktailIngredient(BaseModel):
    """Single ingredient line of a cocktail."""

    quantity: str = Field(..., description="The amount/measurement, e.g., '2 oz', '1/2 lime'.")
    name: str = Field(..., description="The name of the ingredient, e.g., 'Gin', 'Simple Syrup'.")
    isGarnish: Optional[bool] = Field(None, description="True if this is primarily a garnish ingredient.")


class CocktailDraft(BaseModel):
    """Generated cocktail without identity fields."""

    cocktailName: str = Field(..., description="The name of the cocktail.")
    description: str = Field(..., description="A short, enticing description of the drink.")
    prepTime: str = Field(..., description="Estimated preparation time, e.g., '5 minutes'.")
    difficulty: Difficulty = Field(..., description="Difficulty level.")
    glassware: str = Field(..., description="The recommended type of glass, e.g., 'Martini glass'.")
    garnish: str = Field(..., description="The suggested garnish, e.g., 'Orange peel twist'.")
    flavorProfile: str = Field(..., description="The primary flavor profile, e.g., 'Sweet & Sour'.")
    ingredients: List[CocktailIngredient] = Field(..., min_length=1)
    instructions: List[str] = Field(..., min_length=1)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _accept_localized_difficulty(cls, value):
        if isinstance(value, str):
            mapped = canonical_difficulty(value)
            if mapped is not None:
                return mapped
        return value


class Cocktail(CocktailDraft):
    """Cocktail as held by a working list, the favorites or a share link."""

    id: str = Field(..., frozen=True, description="Caller-generated unique identifier")
    imageUrl: Optional[str] = Field(None, description="Embeddable image (data URL)")
    imageState: ImageState = ImageState.PENDING

    @model_validator(mode="after")
    def _success_requires_image(self) -> "Cocktail":
        if self.imageState == ImageState.SUCCESS and not self.imageUrl:
            raise ValueError("imageState 'success' requires imageUrl")
        return self

    def to_draft(self) -> CocktailDraft:
        """Drop identity and image fields."""
        return CocktailDraft(**self.model_dump(exclude={"id", "imageUrl", "imageState"}))


class TranslatedIngredient(BaseModel):
    """Translatable subset of an ingredient."""

    name: str
    quantity: str


class CocktailTranslation(BaseModel):
    """Translatable subset of a cocktail, as returned by Gemini."""

    cocktailName: str
    description: str
    ingredients: List[TranslatedIngredient]
    instructions: List[str]
    prepTime: str
    difficulty: str
    glassware: str
    garnish: str
    flavorProfile: str


class BatchStatus(str, Enum):
    """Lifecycle of an image generation batch."""

    RUNNING = "running"
    COMPLETED = "completed"
    HALTED = "halted"


class CocktailBatch(BaseModel):
    """Cocktails produced by one generation call."""

    id: str
    language: Language
    ingredients: List[str]
    cocktails: List[Cocktail]
    status: BatchStatus = BatchStatus.RUNNING
    error: Optional[str] = None
    createdAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ShareRecord(BaseModel):
    """Envelope persisted for a shared cocktail."""

    model_config = ConfigDict(frozen=True)

    cocktailData: CocktailDraft
    imageUrl: Optional[str] = None


# ---------------------------------------------------------------------
# Request / response bodies
# ---------------------------------------------------------------------


class GenerateRequest(BaseModel):
    """Request body for cocktail generation."""

    ingredients: List[str]
    language: Language = "es"


class TranslateCocktailsRequest(BaseModel):
    """Request body for translating a list of cocktails."""

    cocktails: List[Cocktail]
    targetLanguage: Language
    sourceLanguage: Language


class TranslateFavoritesRequest(BaseModel):
    """Request body for translating the stored favorites."""

    targetLanguage: Language
    sourceLanguage: Language


class TranslateIngredientsRequest(BaseModel):
    """Request body for translating staple ingredient names."""

    ingredients: List[str]
    sourceLanguage: Language
    targetLanguage: Language


class IngredientsResponse(BaseModel):
    """List of ingredient names."""

    ingredients: List[str]


class FavoriteToggleResponse(BaseModel):
    """Result of toggling a favorite."""

    id: str
    isFavorite: bool
    favorites: List[Cocktail]


class ShareResponse(BaseModel):
    """Result of publishing a share record."""

    id: str
    shareUrl: str
