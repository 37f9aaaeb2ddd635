"""
Post service shared by the dashboard and public handlers.

Reads go through ``PostCache``; every write runs entity mutation, cover
reconciliation and tag sync inside one transaction and invalidates the
cache once it has committed. Results are JSON-ready dicts using the public
camelCase contract, so cached and fresh payloads are identical.
"""

from logging import getLogger
from typing import Any
from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession

from blog.auth.policy import PostAction, PostPolicy
from blog.configs import file_logger, settings
from blog.db.database import atomic
from blog.errors.posts import PostNotFoundError
from blog.models import CommentDB, PostDB, PublishState, UserDB
from blog.repositories import AdminSort, CoverRepository, PostRepository, TagRepository, Trashed
from blog.schemas.post import (
    PaginationMeta,
    PostCollection,
    PostCreate,
    PostResponse,
    PostUpdate,
    TagResponse,
)
from blog.services.cover_image import CoverImageService, CoverInput, NoChange
from blog.services.post_cache import PostCache
from blog.services.storage import StorageService

logger = file_logger(getLogger(__name__))


class PostService:
    """
    Post use cases.

    Args:
        session: Request-scoped database session
        cache: Post cache on top of the application's ``CacheManager``
        storage: Blob storage for cover images
        policy: Authorization policy, defaults to the configured roles
    """

    def __init__(
        self,
        session: AsyncSession,
        cache: PostCache,
        storage: StorageService,
        policy: PostPolicy | None = None,
    ) -> None:
        self.session = session
        self.cache = cache
        self.policy = policy or PostPolicy()
        self.posts = PostRepository(session)
        self.tags = TagRepository(session)
        self.covers = CoverImageService(storage, CoverRepository(session))

    def _shape(
        self,
        post: PostDB,
        *,
        total_comments: int | None = None,
        comments: list[CommentDB] | None = None,
        include_content: bool = True,
    ) -> PostResponse:
        return PostResponse.from_post(
            post,
            cover_url=self.covers.url_for(post.cover),
            total_comments=total_comments,
            comments=comments,
            include_content=include_content,
        )

    async def _collection(
        self,
        items: list[PostDB],
        total: int,
        page: int,
        per_page: int,
    ) -> dict[str, Any]:
        counts = await self.posts.top_level_comment_counts([p.id for p in items])
        return PostCollection(
            data=[self._shape(p, total_comments=counts.get(p.id, 0)) for p in items],
            meta=PaginationMeta.build(page, per_page, total, len(items)),
        ).to_json()

    async def _detail(self, post: PostDB) -> dict[str, Any]:
        comments = await self.posts.top_level_comments(post.id)
        counts = await self.posts.top_level_comment_counts([post.id])
        return self._shape(post, total_comments=counts[post.id], comments=comments).to_json()

    async def _fresh(self, post_id: UUID) -> dict[str, Any]:
        """Reload a post from the database after a write and shape it."""
        return await self._detail(await self.posts.get_or_404(post_id, with_trashed=True))

    async def list_admin(
        self,
        user: UserDB,
        *,
        page: int = 1,
        publish: PublishState | None = None,
        sort: AdminSort = "-created_at",
        trashed: Trashed | None = None,
    ) -> dict[str, Any]:
        """
        Paginated dashboard listing over every publish state.

        Returns:
            dict: ``{"data": [...], "meta": {...}}``
        """
        self.policy.authorize(PostAction.VIEW_ANY, user)
        per_page = settings.POSTS_PER_PAGE

        async def load() -> dict[str, Any]:
            items, total = await self.posts.list_admin(
                publish=publish,
                sort=sort,
                trashed=trashed,
                page=page,
                per_page=per_page,
            )
            return await self._collection(items, total, page, per_page)

        return await self.cache.admin_page(
            page,
            load,
            publish=publish.value if publish else None,
            sort=sort,
            trashed=trashed,
        )

    async def list_public(self, page: int = 1) -> dict[str, Any]:
        """Paginated published posts, newest first."""
        per_page = settings.POSTS_PER_PAGE

        async def load() -> dict[str, Any]:
            items, total = await self.posts.list_public(page=page, per_page=per_page)
            return await self._collection(items, total, page, per_page)

        return await self.cache.public_page(page, load)

    async def show(self, user: UserDB, post_id: UUID) -> dict[str, Any]:
        """Single post by id for the dashboard; soft-deleted posts resolve too."""
        self.policy.authorize(PostAction.VIEW, user)

        async def load() -> dict[str, Any]:
            return await self._fresh(post_id)

        return await self.cache.post(post_id, load)

    async def show_by_slug(self, slug: str) -> dict[str, Any]:
        post = await self.posts.get_published_by_slug(slug)
        if post is None:
            raise PostNotFoundError(slug)
        return await self._detail(post)

    async def create(
        self,
        user: UserDB,
        data: PostCreate,
        cover: CoverInput | None = None,
    ) -> dict[str, Any]:
        """
        Create a post authored by ``user``.

        Counters start at 0 and the slug is derived from the title; the
        cover and tags are written in the same transaction as the post.
        """
        self.policy.authorize(PostAction.CREATE, user)

        async with atomic(self.session):
            post = await self.posts.create(data.model_dump(exclude={"tags"}), user.uuid)
            await self.covers.reconcile(post.id, cover or NoChange())
            await self.tags.sync(post.id, data.tags)

        logger.info(f"Post {post.id} created by {user.uuid}")
        await self.cache.invalidate(post.id)
        return await self._fresh(post.id)

    async def update(
        self,
        user: UserDB,
        post_id: UUID,
        data: PostUpdate,
        cover: CoverInput | None = None,
    ) -> dict[str, Any]:
        """Apply ``data`` to a post; its tag list always replaces the current tags."""
        post = await self.posts.get_or_404(post_id)
        self.policy.authorize(PostAction.UPDATE, user, post)

        async with atomic(self.session):
            await self.posts.apply_update(post, data.changes())
            await self.covers.reconcile(post.id, cover or NoChange())
            await self.tags.sync(post.id, data.tags)

        logger.info(f"Post {post_id} updated by {user.uuid}")
        await self.cache.invalidate(post_id)
        return await self._fresh(post_id)

    async def destroy(self, user: UserDB, post_id: UUID) -> None:
        """Soft-delete a post; its stored cover file and record go first."""
        post = await self.posts.get_or_404(post_id)
        self.policy.authorize(PostAction.DELETE, user, post)

        async with atomic(self.session):
            await self.covers.remove(post.id)
            await self.posts.soft_delete(post)

        logger.info(f"Post {post_id} soft-deleted by {user.uuid}")
        await self.cache.invalidate(post_id)

    async def restore(self, user: UserDB, post_id: UUID) -> dict[str, Any]:
        post = await self.posts.get_or_404(post_id, with_trashed=True)
        self.policy.authorize(PostAction.RESTORE, user, post)

        async with atomic(self.session):
            await self.posts.restore(post)

        logger.info(f"Post {post_id} restored by {user.uuid}")
        await self.cache.invalidate(post_id)
        return await self._fresh(post_id)

    async def force_delete(self, user: UserDB, post_id: UUID) -> None:
        """Permanently remove a post, active or soft-deleted, with its cover file."""
        post = await self.posts.get_or_404(post_id, with_trashed=True)
        self.policy.authorize(PostAction.FORCE_DELETE, user, post)

        async with atomic(self.session):
            await self.covers.remove(post.id)
            await self.posts.purge(post)

        logger.info(f"Post {post_id} permanently deleted by {user.uuid}")
        await self.cache.invalidate(post_id)

    async def featured(self) -> list[dict[str, Any]]:
        async def load() -> list[dict[str, Any]]:
            posts = await self.posts.featured(settings.FEATURED_LIMIT)
            return [self._shape(p, include_content=False).to_json() for p in posts]

        return await self.cache.featured(load)

    async def latest(self) -> list[dict[str, Any]]:
        async def load() -> list[dict[str, Any]]:
            posts = await self.posts.latest(settings.LATEST_LIMIT)
            return [self._shape(p).to_json() for p in posts]

        return await self.cache.latest(load)

    async def search(self, query: str) -> list[dict[str, Any]]:
        """Title search over published posts; an empty query matches nothing."""
        if not query.strip():
            return []
        posts = await self.posts.search(query, settings.SEARCH_LIMIT)
        return [self._shape(p).to_json() for p in posts]

    async def list_tags(self) -> list[dict[str, Any]]:
        tags = await self.tags.list_all()
        return [TagResponse.from_tag(t).model_dump(mode="json") for t in tags]
