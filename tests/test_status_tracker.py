"""Tests for per-item image status tracking."""

import pytest

from app.models.cocktail import ImageState
from app.services.status_tracker import StatusTracker, derive_image_state
from app.utils.exceptions import StatusTransitionError


@pytest.fixture
def items(cocktail_factory):
    return [
        cocktail_factory("cocktail-1", "Moscow Mule"),
        cocktail_factory("cocktail-2", "Vodka Gimlet"),
        cocktail_factory("cocktail-3", "Ginger Fizz"),
    ]


def test_transition_replaces_only_the_target(items):
    """Test updates return a new list and leave the input untouched."""
    updated = StatusTracker.transition(items, "cocktail-2", ImageState.LOADING)

    assert updated is not items
    assert [c.imageState for c in updated] == [ImageState.PENDING, ImageState.LOADING, ImageState.PENDING]
    assert items[1].imageState == ImageState.PENDING
    assert updated[0] is items[0]


def test_success_sets_image(items):
    items = StatusTracker.transition(items, "cocktail-1", ImageState.LOADING)
    items = StatusTracker.transition(items, "cocktail-1", ImageState.SUCCESS, "data:image/jpeg;base64,AAA")

    item = StatusTracker.get(items, "cocktail-1")
    assert item.imageState == ImageState.SUCCESS
    assert item.imageUrl == "data:image/jpeg;base64,AAA"


def test_success_requires_image(items):
    items = StatusTracker.transition(items, "cocktail-1", ImageState.LOADING)
    with pytest.raises(StatusTransitionError):
        StatusTracker.transition(items, "cocktail-1", ImageState.SUCCESS)


def test_success_requires_loading(items):
    with pytest.raises(StatusTransitionError):
        StatusTracker.transition(items, "cocktail-1", ImageState.SUCCESS, "data:image/jpeg;base64,AAA")


def test_terminal_states_are_final(items):
    items = StatusTracker.transition(items, "cocktail-1", ImageState.ERROR)
    with pytest.raises(StatusTransitionError):
        StatusTracker.transition(items, "cocktail-1", ImageState.LOADING)


def test_unknown_id_is_ignored(items):
    assert StatusTracker.transition(items, "missing", ImageState.LOADING) is items


def test_id_cannot_change(items):
    with pytest.raises(ValueError):
        StatusTracker.update(items, "cocktail-1", id="cocktail-9")


def test_mark_remaining_skips_finished_items(items):
    items = StatusTracker.transition(items, "cocktail-1", ImageState.LOADING)
    items = StatusTracker.transition(items, "cocktail-1", ImageState.SUCCESS, "data:image/jpeg;base64,AAA")
    items = StatusTracker.transition(items, "cocktail-2", ImageState.LOADING)

    items = StatusTracker.mark_remaining(items, ["cocktail-1", "cocktail-2", "cocktail-3"], ImageState.ERROR_QUOTA)

    assert [c.imageState for c in items] == [ImageState.SUCCESS, ImageState.ERROR_QUOTA, ImageState.ERROR_QUOTA]


def test_derive_image_state():
    assert derive_image_state("data:image/jpeg;base64,AAA") == ImageState.SUCCESS
    assert derive_image_state(None) == ImageState.ERROR
    assert derive_image_state("") == ImageState.ERROR
