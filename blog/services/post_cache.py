"""
Post cache keys and invalidation.

Listing pages are keyed by a per-listing generation counter. A write bumps
the counters instead of deleting pages by pattern: old pages become
unreachable at once and expire on their own TTL.
"""

from collections.abc import Callable, Coroutine
from logging import getLogger
from typing import Any
from uuid import UUID

from blog.configs import POSTS_CACHE_NAMESPACE, file_logger, settings
from blog.errors import CacheKeyError
from blog.managers.cache_manager import CacheManager

logger = file_logger(getLogger(__name__))

Loader = Callable[[], Coroutine[Any, Any, Any]]

PUBLIC_GENERATION_KEY = "public_posts_generation"
ADMIN_GENERATION_KEY = "admin_posts_generation"
FEATURED_KEY = "featured_posts"
LATEST_KEY = "latest_posts"


def public_page_key(generation: int, page: int) -> str:
    return f"public_posts_v{generation}_{page}"


def admin_page_key(
    generation: int,
    page: int,
    publish: str | None,
    sort: str,
    trashed: str | None,
) -> str:
    return f"admin_posts_v{generation}_{publish or 'all'}_{sort}_{trashed or 'none'}_{page}"


def post_key(post_id: UUID) -> str:
    return f"post_{post_id}"


class PostCache:
    """Read-through cache for post payloads in the ``posts`` namespace."""

    def __init__(
        self,
        cache_manager: CacheManager,
        ttl: int | None = None,
        namespace: str = POSTS_CACHE_NAMESPACE,
    ) -> None:
        self.cache = cache_manager
        self.ttl = ttl if ttl is not None else settings.cache_ttl_seconds
        self.namespace = namespace

    async def remember(self, key: str, loader: Loader) -> Any:
        """Serve ``key`` from cache, computing it with ``loader`` on a miss."""
        return await self.cache.get_or_set(key, loader, self.ttl, self.namespace)

    async def generation(self, counter_key: str) -> int | None:
        """Current generation of a listing, or None when the cache can't say."""
        try:
            return await self.cache.get_counter(counter_key, self.namespace)
        except CacheKeyError:
            return None

    async def public_page(self, page: int, loader: Loader) -> Any:
        generation = await self.generation(PUBLIC_GENERATION_KEY)
        if generation is None:
            return await loader()
        return await self.remember(public_page_key(generation, page), loader)

    async def admin_page(
        self,
        page: int,
        loader: Loader,
        *,
        publish: str | None = None,
        sort: str = "-created_at",
        trashed: str | None = None,
    ) -> Any:
        generation = await self.generation(ADMIN_GENERATION_KEY)
        if generation is None:
            return await loader()
        key = admin_page_key(generation, page, publish, sort, trashed)
        return await self.remember(key, loader)

    async def post(self, post_id: UUID, loader: Loader) -> Any:
        return await self.remember(post_key(post_id), loader)

    async def featured(self, loader: Loader) -> Any:
        return await self.remember(FEATURED_KEY, loader)

    async def latest(self, loader: Loader) -> Any:
        return await self.remember(LATEST_KEY, loader)

    async def invalidate(self, post_id: UUID | None = None) -> None:
        """
        Forget everything a post write can affect.

        Failures are logged and swallowed: the write has already been
        committed and stale entries still expire by TTL.
        """
        keys = [FEATURED_KEY, LATEST_KEY]
        if post_id is not None:
            keys.append(post_key(post_id))
        try:
            await self.cache.delete(*keys, namespace=self.namespace)
        except CacheKeyError:
            logger.warning(f"Could not forget cached posts {keys}", exc_info=True)

        for counter_key in (PUBLIC_GENERATION_KEY, ADMIN_GENERATION_KEY):
            try:
                await self.cache.incr(counter_key, namespace=self.namespace)
            except CacheKeyError:
                logger.warning(f"Could not bump {counter_key}", exc_info=True)
