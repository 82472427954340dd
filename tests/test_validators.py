"""Tests for input validation utilities."""

import pytest

from app.utils.error_messages import ERROR_MESSAGES, localized_message, pick_language
from app.utils import exceptions
from app.utils.exceptions import EmptyInputError, MixMasterException, ValidationError
from app.utils.validators import (
    IngredientSet,
    validate_ingredients_list,
    validate_language,
    validate_share_id,
)


def test_ingredient_set_ignores_case_duplicates():
    ingredients = IngredientSet(["Vodka", "vodka ", "Lime Juice"])

    assert ingredients.to_list() == ["Vodka", "Lime Juice"]
    assert "LIME JUICE" in ingredients
    assert ingredients.add("VODKA") is False
    assert len(ingredients) == 2


def test_ingredient_set_add_text():
    ingredients = IngredientSet(["Gin"])

    added = ingredients.add_text("Tonic Water, , gin, Cucumber")

    assert added == ["Tonic Water", "Cucumber"]
    assert ingredients.to_list() == ["Gin", "Tonic Water", "Cucumber"]


def test_validate_ingredients_list_splits_comma_entries():
    assert validate_ingredients_list(["Gin, Tonic Water", "gin", "Cucumber,"]) == ["Gin", "Tonic Water", "Cucumber"]


def test_validate_ingredients_list_valid():
    """Test ingredients list validation with valid list."""
    assert validate_ingredients_list([" Vodka", "Lime Juice", "vodka"]) == ["Vodka", "Lime Juice"]


def test_validate_ingredients_list_empty():
    """Test ingredients list validation with empty list."""
    with pytest.raises(EmptyInputError):
        validate_ingredients_list([])
    with pytest.raises(EmptyInputError):
        validate_ingredients_list(["  "])


def test_validate_ingredients_list_not_list():
    """Test ingredients list validation with non-list."""
    with pytest.raises(ValidationError):
        validate_ingredients_list("not a list")


def test_validate_ingredients_list_too_long():
    with pytest.raises(ValidationError):
        validate_ingredients_list([f"ingredient {i}" for i in range(51)])


def test_validate_language():
    assert validate_language("en") == "en"
    with pytest.raises(ValidationError):
        validate_language("fr")


def test_validate_share_id():
    assert validate_share_id("abc123") == "abc123"
    with pytest.raises(ValidationError):
        validate_share_id("abc-123")


def test_pick_language():
    assert pick_language("en-US,en;q=0.9") == "en"
    assert pick_language("fr-FR, es;q=0.8") == "es"
    assert pick_language(None) == "es"


def test_localized_message_falls_back_to_unknown():
    assert localized_message("QUOTA_EXCEEDED", "en").startswith("Image generation quota exceeded")
    assert localized_message("NOPE", "es") == "Ocurrió un error desconocido."


def test_every_error_code_has_messages():
    """Test each exception code is translated in every supported language."""
    codes = {
        obj.code for obj in vars(exceptions).values()
        if isinstance(obj, type) and issubclass(obj, MixMasterException)
    }

    for language, messages in ERROR_MESSAGES.items():
        assert codes <= set(messages), language
