"""Tests for the recipe cache."""

from unittest.mock import MagicMock, patch

import pytest
import redis

from recipe_share.schemas.recipe import RecipePage, RecipeResponse, UserSummary
from recipe_share.services.cache import (
    InMemoryCacheBackend,
    RecipeCache,
    RedisCacheBackend,
    get_recipe_cache,
    recipe_key,
    recipe_response_key,
    recipes_page_key,
)
from recipe_share.services.renderer import MediaType


def make_snapshot(recipe_id: int = 7, name: str = "Paella") -> RecipeResponse:
    return RecipeResponse(
        id=recipe_id,
        name=name,
        description=None,
        steps=None,
        difficulty=None,
        kitchen="Spanish",
        rations=4,
        time=60,
        type=None,
        user=UserSummary(id=1, name="Owner"),
        ingredients=["rice"],
        tags=[],
        reviews=[],
    )


class TestKeys:
    """Tests for cache key layout."""

    def test_recipe_keys(self):
        assert recipe_key(7) == "recipe:7"
        assert recipe_response_key(7, MediaType.JSON) == "recipe:7:response:json"
        assert recipe_response_key(7, MediaType.XML) == "recipe:7:response:xml"

    def test_page_key(self):
        assert recipes_page_key(3) == "recipes:page:3"


class TestInMemoryCacheBackend:
    """Tests for the in-memory backend."""

    def test_set_get_evict(self):
        backend = InMemoryCacheBackend(default_ttl=60)
        backend.set("k", b"v")
        assert backend.get("k") == b"v"

        backend.evict("k")
        assert backend.get("k") is None
        backend.evict("k")  # evicting a missing key is fine

    def test_entries_expire(self):
        backend = InMemoryCacheBackend(default_ttl=60)
        with patch("recipe_share.services.cache.time.monotonic", return_value=1000.0):
            backend.set("short", b"1", ttl=10)
            backend.set("default", b"2")

        with patch("recipe_share.services.cache.time.monotonic", return_value=1011.0):
            assert backend.get("short") is None
            assert backend.get("default") == b"2"

        with patch("recipe_share.services.cache.time.monotonic", return_value=1061.0):
            assert backend.get("default") is None

    def test_set_drops_expired_entries(self):
        backend = InMemoryCacheBackend(default_ttl=60)
        with patch("recipe_share.services.cache.time.monotonic", return_value=1000.0):
            backend.set("recipes:page:0", b"page", ttl=120)
            backend.set("recipe:1", b"recipe")

        with patch("recipe_share.services.cache.time.monotonic", return_value=1100.0):
            backend.set("recipe:2", b"recipe")

        assert sorted(backend.keys()) == ["recipe:2", "recipes:page:0"]


class TestRedisCacheBackend:
    """Tests for the Redis backend."""

    def test_uses_default_ttl(self):
        client = MagicMock()
        backend = RedisCacheBackend(client, default_ttl=3600)

        backend.set("k", b"v")
        client.set.assert_called_once_with("k", b"v", ex=3600)

    def test_uses_explicit_ttl(self):
        client = MagicMock()
        backend = RedisCacheBackend(client, default_ttl=3600)

        backend.set("k", b"v", ttl=120)
        client.set.assert_called_once_with("k", b"v", ex=120)

    def test_get_and_evict(self):
        client = MagicMock()
        client.get.return_value = b"v"
        backend = RedisCacheBackend(client, default_ttl=3600)

        assert backend.get("k") == b"v"
        backend.evict("k")
        client.delete.assert_called_once_with("k")

    def test_failures_are_swallowed(self):
        """Test an unreachable Redis behaves like an empty cache."""
        client = MagicMock()
        client.get.side_effect = redis.ConnectionError("down")
        client.set.side_effect = redis.TimeoutError("slow")
        client.delete.side_effect = redis.ConnectionError("down")
        backend = RedisCacheBackend(client, default_ttl=3600)

        assert backend.get("k") is None
        backend.set("k", b"v")
        backend.evict("k")


class TestRecipeCache:
    """Tests for RecipeCache namespaces and eviction."""

    @pytest.fixture
    def backend(self):
        return InMemoryCacheBackend(default_ttl=3600)

    @pytest.fixture
    def recipe_cache(self, backend):
        return RecipeCache(backend, page_ttl=120)

    def test_recipe_snapshot_round_trip(self, recipe_cache, backend):
        recipe_cache.set_recipe(make_snapshot())

        assert "recipe:7" in backend.keys()
        assert recipe_cache.get_recipe(7).name == "Paella"
        assert recipe_cache.get_recipe(8) is None

    def test_unreadable_snapshot_is_a_miss(self, recipe_cache, backend):
        backend.set("recipe:7", b"{not json")

        assert recipe_cache.get_recipe(7) is None
        assert "recipe:7" not in backend.keys()

    def test_evict_recipe_removes_snapshot_and_all_responses(self, recipe_cache, backend):
        recipe_cache.set_recipe(make_snapshot(7))
        recipe_cache.set_response(7, MediaType.JSON, b"{}")
        recipe_cache.set_response(7, MediaType.XML, b"<recipe/>")
        recipe_cache.set_recipe(make_snapshot(8, "Gazpacho"))
        recipe_cache.set_page(RecipePage(page=0, total=1, recipes=[make_snapshot(7)]))

        recipe_cache.evict_recipe(7)

        assert sorted(backend.keys()) == ["recipe:8", "recipes:page:0"]

    def test_page_uses_short_ttl(self):
        backend = MagicMock()
        recipe_cache = RecipeCache(backend, page_ttl=120)

        recipe_cache.set_page(RecipePage(page=2, total=0, recipes=[]))

        args, kwargs = backend.set.call_args
        assert args[0] == "recipes:page:2"
        assert kwargs["ttl"] == 120

    def test_page_round_trip(self, recipe_cache):
        recipe_cache.set_page(RecipePage(page=0, total=1, recipes=[make_snapshot()]))

        cached = recipe_cache.get_page(0)
        assert cached.total == 1
        assert cached.recipes[0].ingredients == ["rice"]
        assert recipe_cache.get_page(1) is None


class TestGetRecipeCache:
    """Tests for the shared cache factory."""

    def test_memory_backend(self):
        import recipe_share.services.cache as cache_module

        cache_module._recipe_cache = None
        with patch.object(cache_module.settings, "cache_backend", "memory"):
            result = get_recipe_cache()

        assert isinstance(result.backend, InMemoryCacheBackend)
        assert get_recipe_cache() is result
        cache_module._recipe_cache = None

    def test_redis_backend(self):
        import recipe_share.services.cache as cache_module

        cache_module._recipe_cache = None
        with (
            patch.object(cache_module.settings, "cache_backend", "redis"),
            patch("recipe_share.services.cache.redis.from_url") as mock_from_url,
        ):
            result = get_recipe_cache()

        assert isinstance(result.backend, RedisCacheBackend)
        assert result.backend.client is mock_from_url.return_value
        cache_module._recipe_cache = None
