"""Recipe cache backed by Redis.

Three key namespaces are used:

- ``recipe:{id}`` holds the recipe snapshot (RecipeResponse JSON)
- ``recipe:{id}:response:{json|xml}`` holds the rendered body per media type
- ``recipes:page:{page}`` holds an unfiltered listing page with a short TTL

Any mutation of a recipe evicts its snapshot and every rendered response.
Listing pages are left to expire. Backend failures are logged and treated as
cache misses so a broken cache never fails a request.
"""

import logging
import time
from typing import Protocol

import redis
from pydantic import ValidationError as PydanticValidationError

from recipe_share.config import get_settings
from recipe_share.schemas.recipe import RecipePage, RecipeResponse
from recipe_share.services.renderer import MediaType

logger = logging.getLogger(__name__)
settings = get_settings()


class CacheBackend(Protocol):
    """Minimal key/value capability the recipe cache needs."""

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes, ttl: int | None = None) -> None: ...

    def evict(self, key: str) -> None: ...


class RedisCacheBackend:
    """Cache backend over a synchronous Redis client."""

    def __init__(self, client: redis.Redis, default_ttl: int):
        self.client = client
        self.default_ttl = default_ttl

    def get(self, key: str) -> bytes | None:
        try:
            return self.client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None

    def set(self, key: str, value: bytes, ttl: int | None = None) -> None:
        try:
            self.client.set(key, value, ex=ttl or self.default_ttl)
        except redis.RedisError as e:
            logger.warning(f"Cache set failed for {key}: {e}")

    def evict(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            logger.error(f"Cache evict failed for {key}: {e}")


class InMemoryCacheBackend:
    """Process-local cache backend with TTL expiry, for development and tests."""

    def __init__(self, default_ttl: int):
        self.default_ttl = default_ttl
        self._entries: dict[str, tuple[bytes, float]] = {}

    def get(self, key: str) -> bytes | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= time.monotonic():
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: bytes, ttl: int | None = None) -> None:
        now = time.monotonic()
        self._purge_expired(now)
        self._entries[key] = (value, now + (ttl or self.default_ttl))

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    def evict(self, key: str) -> None:
        self._entries.pop(key, None)

    def keys(self) -> list[str]:
        """Keys currently held, expired or not."""
        return list(self._entries)


def recipe_key(recipe_id: int) -> str:
    return f"recipe:{recipe_id}"


def recipe_response_key(recipe_id: int, media_type: MediaType) -> str:
    return f"recipe:{recipe_id}:response:{media_type.value}"


def recipes_page_key(page: int) -> str:
    return f"recipes:page:{page}"


class RecipeCache:
    """Typed access to the recipe key namespaces on top of a CacheBackend."""

    def __init__(self, backend: CacheBackend, page_ttl: int | None = None):
        self.backend = backend
        self.page_ttl = page_ttl or settings.recipes_page_ttl

    def get_recipe(self, recipe_id: int) -> RecipeResponse | None:
        data = self.backend.get(recipe_key(recipe_id))
        if data is None:
            logger.debug(f"Cache miss for recipe {recipe_id}")
            return None
        try:
            return RecipeResponse.model_validate_json(data)
        except PydanticValidationError:
            logger.warning(f"Discarding unreadable cache entry for recipe {recipe_id}")
            self.backend.evict(recipe_key(recipe_id))
            return None

    def set_recipe(self, recipe: RecipeResponse) -> None:
        self.backend.set(recipe_key(recipe.id), recipe.model_dump_json().encode("utf-8"))

    def get_response(self, recipe_id: int, media_type: MediaType) -> bytes | None:
        return self.backend.get(recipe_response_key(recipe_id, media_type))

    def set_response(self, recipe_id: int, media_type: MediaType, body: bytes) -> None:
        self.backend.set(recipe_response_key(recipe_id, media_type), body)

    def get_page(self, page: int) -> RecipePage | None:
        data = self.backend.get(recipes_page_key(page))
        if data is None:
            return None
        try:
            return RecipePage.model_validate_json(data)
        except PydanticValidationError:
            logger.warning(f"Discarding unreadable cache entry for page {page}")
            self.backend.evict(recipes_page_key(page))
            return None

    def set_page(self, recipe_page: RecipePage) -> None:
        self.backend.set(
            recipes_page_key(recipe_page.page),
            recipe_page.model_dump_json().encode("utf-8"),
            ttl=self.page_ttl,
        )

    def evict_recipe(self, recipe_id: int) -> None:
        """Evict the snapshot and every rendered response of a recipe."""
        self.backend.evict(recipe_key(recipe_id))
        for media_type in MediaType:
            self.backend.evict(recipe_response_key(recipe_id, media_type))
        logger.debug(f"Evicted cache entries for recipe {recipe_id}")


# Process-wide cache, created on first use
_recipe_cache: RecipeCache | None = None


def get_recipe_cache() -> RecipeCache:
    """Get the shared recipe cache for the configured backend."""
    global _recipe_cache
    if _recipe_cache is None:
        if settings.cache_backend == "memory":
            backend: CacheBackend = InMemoryCacheBackend(settings.cache_default_ttl)
        else:
            backend = RedisCacheBackend(
                redis.from_url(settings.redis_url, socket_timeout=1, socket_connect_timeout=1),
                settings.cache_default_ttl,
            )
        _recipe_cache = RecipeCache(backend)
    return _recipe_cache
