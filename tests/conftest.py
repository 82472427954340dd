"""Pytest configuration and fixtures."""

import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_cocktail_service, get_share_store
from app.config import settings
from app.main import app
from app.middleware.rate_limit import limiter
from app.models.cocktail import Cocktail
from app.services.cocktail_service import CocktailService
from app.services.favorites import FavoritesStore
from app.services.gemini_service import GeminiService
from app.services.share_store import ShareStore
from app.services.storage import InMemoryKeyValueStore


def cocktail_payload(name="Moscow Mule", difficulty="Easy"):
    """Cocktail draft as Gemini returns it."""
    return {
        "cocktailName": name,
        "description": f"A crisp {name.lower()}.",
        "prepTime": "5 minutes",
        "difficulty": difficulty,
        "glassware": "Copper mug",
        "garnish": "Lime wheel",
        "flavorProfile": "Spicy & Citrus",
        "ingredients": [
            {"quantity": "2 oz", "name": "Vodka"},
            {"quantity": "1/2 oz", "name": "Lime Juice"},
            {"quantity": "4 oz", "name": "Ginger Beer"},
            {"quantity": "1", "name": "Lime wheel", "isGarnish": True},
        ],
        "instructions": ["Fill a mug with ice.", "Add vodka and lime juice.", "Top with ginger beer."],
    }


def make_cocktail(cocktail_id="cocktail-1", name="Moscow Mule", **changes):
    return Cocktail(**cocktail_payload(name), id=cocktail_id, **changes)


class FakeModels:
    """Stands in for `genai.Client().models`; replies are consumed in order."""

    def __init__(self):
        self.content_replies = []
        self.image_replies = []
        self.content_calls = []
        self.image_calls = []

    def generate_content(self, *, model, contents, config):
        self.content_calls.append({"model": model, "contents": contents, "config": config})
        reply = self._next(self.content_replies)
        return SimpleNamespace(text=reply, candidates=[])

    def generate_images(self, *, model, prompt, config):
        self.image_calls.append({"model": model, "prompt": prompt, "config": config})
        reply = self._next(self.image_replies)
        images = [SimpleNamespace(image=SimpleNamespace(image_bytes=reply))] if reply else []
        return SimpleNamespace(generated_images=images)

    @staticmethod
    def _next(replies):
        if not replies:
            raise RuntimeError("no scripted reply left")
        reply = replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeGenaiClient:
    def __init__(self):
        self.models = FakeModels()


class SleepRecorder:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.calls = []

    async def __call__(self, delay):
        self.calls.append(delay)


@pytest.fixture
def payload():
    return cocktail_payload


@pytest.fixture
def cocktail_factory():
    return make_cocktail


@pytest.fixture
def fake_client():
    return FakeGenaiClient()


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def gemini_service(fake_client, sleep):
    return GeminiService(client=fake_client, sleep=sleep)


@pytest.fixture
def three_cocktails_json():
    return json.dumps([cocktail_payload("Moscow Mule"), cocktail_payload("Vodka Gimlet"), cocktail_payload("Ginger Fizz")])


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def favorites(store):
    return FavoritesStore(store)


@pytest.fixture
def share_store(store):
    return ShareStore(store)


@pytest.fixture
def cocktail_service(gemini_service, favorites, sleep):
    return CocktailService(gemini_service, favorites, sleep=sleep)


@pytest.fixture
def client(monkeypatch, cocktail_service, share_store):
    """Create test client wired to the fake Gemini client and in-memory storage."""
    monkeypatch.setattr(settings, "connectivity_check_url", "")
    monkeypatch.setattr(limiter, "enabled", False)
    app.dependency_overrides[get_cocktail_service] = lambda: cocktail_service
    app.dependency_overrides[get_share_store] = lambda: share_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
