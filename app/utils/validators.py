"""Input validation utilities."""

import re
from typing import Iterable, List, Optional

from app.utils.exceptions import EmptyInputError, ValidationError

SUPPORTED_LANGUAGES = ("en", "es")

SHARE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
SHARE_FRAGMENT_PATTERN = re.compile(r"^#/share/([a-zA-Z0-9]+)$")


class IngredientSet:
    """Ordered ingredient names, unique ignoring case."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: List[str] = []
        self.add_many(names)

    def __iter__(self):
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        key = name.strip().lower()
        return any(existing.lower() == key for existing in self._names)

    def add(self, name: str) -> bool:
        """Add one name; returns False for blanks and case-insensitive duplicates."""
        name = (name or "").strip()
        if not name or name in self:
            return False
        self._names.append(name)
        return True

    def add_many(self, names: Iterable[str]) -> List[str]:
        """Add several names, returning the ones actually added."""
        return [name.strip() for name in names if self.add(name)]

    def add_text(self, text: str) -> List[str]:
        """Add comma-separated names typed by a user."""
        return self.add_many(part for part in (text or "").split(","))

    def to_list(self) -> List[str]:
        return list(self._names)


def validate_ingredients_list(ingredients: list) -> list:
    """
    Validate ingredients list.

    Args:
        ingredients: List of ingredient strings

    Returns:
        Trimmed list, comma-typed entries split, case-insensitive duplicates removed

    Raises:
        EmptyInputError: If no usable ingredient remains
        ValidationError: If ingredients list is invalid
    """
    if not isinstance(ingredients, list):
        raise ValidationError("Ingredients must be a list")

    if len(ingredients) > 50:  # Reasonable limit
        raise ValidationError("Ingredients list cannot exceed 50 items")

    for ingredient in ingredients:
        if not isinstance(ingredient, str):
            raise ValidationError("All ingredients must be strings")
        if len(ingredient) > 200:
            raise ValidationError("Ingredient text cannot exceed 200 characters")

    names = IngredientSet()
    for ingredient in ingredients:
        names.add_text(ingredient)
    validated = names.to_list()
    if not validated:
        raise EmptyInputError("Please provide at least one ingredient.")

    return validated


def validate_language(language: str) -> str:
    """Validate a language code."""
    if language not in SUPPORTED_LANGUAGES:
        raise ValidationError(f"Unsupported language: {language}. Supported: {', '.join(SUPPORTED_LANGUAGES)}")
    return language


def validate_share_id(share_id: str) -> str:
    """Validate a share id (alphanumeric only)."""
    if not share_id or not SHARE_ID_PATTERN.match(share_id):
        raise ValidationError("Share id must be alphanumeric")
    return share_id


def parse_share_fragment(fragment: str) -> Optional[str]:
    """Extract the share id from a '#/share/<id>' URL fragment, or None."""
    match = SHARE_FRAGMENT_PATTERN.match(fragment or "")
    return match.group(1) if match else None
