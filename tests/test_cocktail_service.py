"""Tests for cocktail orchestration."""

import asyncio
import json
import random

import httpx
import pytest

from app.config import settings
from app.models.cocktail import BatchStatus, ImageState
from app.services.cocktail_service import STAPLE_INGREDIENTS, CocktailService
from app.utils.exceptions import EmptyInputError, NotFoundError, OfflineUnavailableError


@pytest.fixture(autouse=True)
def skip_connectivity_check(monkeypatch):
    monkeypatch.setattr(settings, "connectivity_check_url", "")


@pytest.mark.asyncio
async def test_start_batch_assigns_ids(cocktail_service, fake_client, three_cocktails_json):
    fake_client.models.content_replies = [three_cocktails_json]

    batch = await cocktail_service.start_batch(["Vodka", "Lime Juice", "Ginger Beer"], "es")

    assert batch.status == BatchStatus.RUNNING
    assert len({c.id for c in batch.cocktails}) == 3
    assert all(c.id.startswith("cocktail-") for c in batch.cocktails)
    assert all(c.imageState == ImageState.PENDING for c in batch.cocktails)
    assert cocktail_service.get_batch(batch.id) is batch


@pytest.mark.asyncio
async def test_start_batch_rejects_empty_input(cocktail_service, fake_client):
    with pytest.raises(EmptyInputError):
        await cocktail_service.start_batch([], "en")
    assert fake_client.models.content_calls == []


@pytest.mark.asyncio
async def test_offline_check(monkeypatch, cocktail_service, fake_client):
    async def unreachable(self, url, **kwargs):
        raise httpx.ConnectError("network is unreachable")

    monkeypatch.setattr(settings, "connectivity_check_url", "https://generativelanguage.googleapis.com")
    monkeypatch.setattr(httpx.AsyncClient, "head", unreachable)

    with pytest.raises(OfflineUnavailableError):
        await cocktail_service.start_batch(["Gin"], "en")
    assert fake_client.models.content_calls == []


def test_get_batch_unknown(cocktail_service):
    with pytest.raises(NotFoundError):
        cocktail_service.get_batch("missing")


@pytest.mark.asyncio
async def test_run_images_updates_batch_and_favorites(cocktail_service, fake_client, sleep, three_cocktails_json):
    """Test a favorite taken while images are pending receives its image."""
    fake_client.models.content_replies = [three_cocktails_json]
    fake_client.models.image_replies = [b"one", RuntimeError("429 quota exhausted")]
    batch = await cocktail_service.start_batch(["Vodka"], "en")
    await cocktail_service.toggle_favorite(batch.cocktails[0])
    await cocktail_service.toggle_favorite(batch.cocktails[2])

    batch = await cocktail_service.run_images(batch.id)

    assert batch.status == BatchStatus.HALTED
    assert batch.error == "QUOTA_EXCEEDED"
    assert [c.imageState for c in batch.cocktails] == [
        ImageState.SUCCESS,
        ImageState.ERROR_QUOTA,
        ImageState.ERROR_QUOTA,
    ]
    favorites = cocktail_service.favorites.list()
    assert favorites[0].imageState == ImageState.SUCCESS
    assert favorites[0].imageUrl == batch.cocktails[0].imageUrl
    assert favorites[1].imageState == ImageState.ERROR_QUOTA
    assert sleep.calls == [settings.image_cooldown_seconds]


@pytest.mark.asyncio
async def test_toggle_favorite_uses_latest_image(cocktail_service, fake_client, three_cocktails_json):
    """Test a stale client copy is stored with the tracked image fields."""
    fake_client.models.content_replies = [three_cocktails_json]
    fake_client.models.image_replies = [b"one", b"two", b"three"]
    batch = await cocktail_service.start_batch(["Vodka"], "en")
    stale = batch.cocktails[1]
    await cocktail_service.run_images(batch.id)

    assert await cocktail_service.toggle_favorite(stale) is True

    stored = cocktail_service.favorites.list()[0]
    assert stored.imageState == ImageState.SUCCESS
    assert stored.imageUrl == cocktail_service.get_batch(batch.id).cocktails[1].imageUrl


@pytest.mark.asyncio
async def test_toggle_untracked_pending_cocktail(cocktail_service, cocktail_factory):
    await cocktail_service.toggle_favorite(cocktail_factory("cocktail-77"))
    assert cocktail_service.favorites.list()[0].imageState == ImageState.ERROR


@pytest.mark.asyncio
async def test_translate_batch_keeps_image_fields(cocktail_service, fake_client, three_cocktails_json, payload):
    fake_client.models.content_replies = [three_cocktails_json]
    fake_client.models.image_replies = [b"one", b"two", b"three"]
    batch = await cocktail_service.start_batch(["Vodka"], "en")
    await cocktail_service.run_images(batch.id)

    spanish = _translation_json(payload("Mula de Moscú", difficulty="Fácil"))
    fake_client.models.content_replies = [spanish, spanish, spanish]
    batch = await cocktail_service.translate_batch(batch.id, "es")

    assert batch.language == "es"
    assert [c.cocktailName for c in batch.cocktails] == ["Mula de Moscú"] * 3
    assert batch.cocktails[0].difficulty.value == "Easy"
    assert all(c.imageState == ImageState.SUCCESS for c in batch.cocktails)


@pytest.mark.asyncio
async def test_translate_favorites(cocktail_service, fake_client, cocktail_factory, payload):
    await cocktail_service.favorites.toggle(cocktail_factory("cocktail-1"))
    fake_client.models.content_replies = [_translation_json(payload("Mula de Moscú", difficulty="Fácil"))]

    favorites = await cocktail_service.translate_favorites("es", "en")

    assert favorites[0].cocktailName == "Mula de Moscú"
    assert cocktail_service.favorites.list()[0].cocktailName == "Mula de Moscú"


def test_translate_ingredient_names():
    names = CocktailService.translate_ingredient_names(["gin", "Lime Juice", "Homemade Cordial"], "en", "es")
    assert names == ["Ginebra", "Jugo de Lima", "Homemade Cordial"]
    assert CocktailService.translate_ingredient_names(["Ron"], "es", "es") == ["Ron"]


def test_staple_tables_line_up():
    for group in ("spirits", "mixers", "modifiers"):
        assert len(STAPLE_INGREDIENTS["en"][group]) == len(STAPLE_INGREDIENTS["es"][group])


def test_random_ingredients():
    spirit, mixer, modifier = CocktailService.random_ingredients("en", rng=random.Random(3))
    assert spirit in STAPLE_INGREDIENTS["en"]["spirits"]
    assert mixer in STAPLE_INGREDIENTS["en"]["mixers"]
    assert modifier in STAPLE_INGREDIENTS["en"]["modifiers"]


def _translation_json(translated):
    return json.dumps({
        **{k: v for k, v in translated.items() if k != "ingredients"},
        "ingredients": [{"name": i["name"], "quantity": i["quantity"]} for i in translated["ingredients"]],
    })


@pytest.mark.asyncio
async def test_failed_translation_keeps_original(cocktail_service, fake_client, cocktail_factory):
    fake_client.models.content_replies = [RuntimeError("500 INTERNAL")]
    original = cocktail_factory()

    translated = await cocktail_service.translate_collection([original], "es", "en")

    assert translated == [original]


@pytest.mark.asyncio
async def test_translate_favorites_keeps_changes_made_meanwhile(monkeypatch, cocktail_service, cocktail_factory):
    """Test image updates and favorite changes during a translation are not rolled back."""
    favorites = cocktail_service.favorites
    await favorites.toggle(cocktail_factory("cocktail-1", imageState=ImageState.LOADING))
    await favorites.toggle(cocktail_factory("cocktail-2", name="Vodka Gimlet"))
    started = asyncio.Event()
    release = asyncio.Event()

    async def slow_translate(cocktail, target_language, source_language):
        started.set()
        await release.wait()
        return {"cocktailName": f"{cocktail.cocktailName} (es)"}

    monkeypatch.setattr(cocktail_service.gemini_service, "translate_cocktail", slow_translate)
    task = asyncio.create_task(cocktail_service.translate_favorites("es", "en"))
    await started.wait()

    await favorites.sync(
        cocktail_factory("cocktail-1", imageState=ImageState.SUCCESS, imageUrl="data:image/jpeg;base64,AAA")
    )
    await favorites.toggle(cocktail_factory("cocktail-2", name="Vodka Gimlet"))
    await favorites.toggle(cocktail_factory("cocktail-3", name="Negroni"))
    release.set()
    result = await task

    assert [c.id for c in result] == ["cocktail-1", "cocktail-3"]
    assert result[0].cocktailName == "Moscow Mule (es)"
    assert result[0].imageState == ImageState.SUCCESS
    assert result[0].imageUrl == "data:image/jpeg;base64,AAA"
    assert result[1].cocktailName == "Negroni"


@pytest.mark.asyncio
async def test_finished_batches_are_evicted(monkeypatch, cocktail_service, fake_client, three_cocktails_json):
    """Test only the newest batches are kept once the limit is reached."""
    monkeypatch.setattr(settings, "max_batches", 1)
    fake_client.models.content_replies = [three_cocktails_json, three_cocktails_json]
    fake_client.models.image_replies = [b"one", b"two", b"three"]
    first = await cocktail_service.start_batch(["Vodka"], "en")
    await cocktail_service.run_images(first.id)

    second = await cocktail_service.start_batch(["Gin"], "en")

    with pytest.raises(NotFoundError):
        cocktail_service.get_batch(first.id)
    assert cocktail_service.get_batch(second.id) is second


@pytest.mark.asyncio
async def test_running_batches_are_not_evicted(monkeypatch, cocktail_service, fake_client, three_cocktails_json):
    monkeypatch.setattr(settings, "max_batches", 1)
    fake_client.models.content_replies = [three_cocktails_json, three_cocktails_json]
    first = await cocktail_service.start_batch(["Vodka"], "en")

    second = await cocktail_service.start_batch(["Gin"], "en")

    assert cocktail_service.get_batch(first.id) is first
    assert cocktail_service.get_batch(second.id) is second
