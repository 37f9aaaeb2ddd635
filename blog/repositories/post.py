"""Post repository: query composition for admin and public views."""

from collections.abc import Sequence
from typing import Any, Literal
from uuid import UUID

from sqlalchemy import Select, asc, delete, desc, func, select
from sqlalchemy.orm import selectinload

from blog.configs import settings
from blog.errors.posts import PostNotFoundError
from blog.models import (
    POST_COMMENTABLE,
    CommentDB,
    CoverImageDB,
    PostDB,
    PostTagLink,
    PublishState,
    purge,
    restore,
    soft_delete,
)
from blog.repositories.base import BaseRepository
from blog.utils.helpers import utcnow
from blog.utils.text import calculate_reading_time, slugify, with_suffix

AdminSort = Literal["created_at", "-created_at"]
Trashed = Literal["with", "only"]


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PostRepository(BaseRepository[PostDB]):
    """
    Repository for posts.

    Every read that feeds a response eager-loads ``author``, ``cover`` and
    ``tags`` so shaping never touches lazy relationships on the async session.
    """

    model = PostDB

    @staticmethod
    def _with_relations(statement: Select[Any]) -> Select[Any]:
        return statement.options(
            selectinload(PostDB.author),  # pyrefly: ignore [bad-argument-type]
            selectinload(PostDB.cover),  # pyrefly: ignore [bad-argument-type]
            selectinload(PostDB.tags),  # pyrefly: ignore [bad-argument-type]
        ).execution_options(populate_existing=True)

    @staticmethod
    def _published(statement: Select[Any]) -> Select[Any]:
        return statement.where(
            PostDB.publish == PublishState.PUBLISHED,
            PostDB.deleted_at.is_(None),  # pyrefly: ignore [missing-attribute]
        )

    async def get(self, post_id: UUID, *, with_trashed: bool = False) -> PostDB | None:
        """
        Get a post with its relations loaded.

        Args:
            post_id: Post UUID
            with_trashed: Also resolve soft-deleted posts

        Returns:
            PostDB | None: The post, or None when missing
        """
        statement = self._with_relations(select(PostDB).where(PostDB.id == post_id))
        if not with_trashed:
            statement = statement.where(PostDB.deleted_at.is_(None))  # pyrefly: ignore
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_or_404(self, post_id: UUID, *, with_trashed: bool = False) -> PostDB:
        post = await self.get(post_id, with_trashed=with_trashed)
        if post is None:
            raise PostNotFoundError(str(post_id))
        return post

    async def get_published_by_slug(self, slug: str) -> PostDB | None:
        """Get a published, non-deleted post by slug."""
        statement = self._published(self._with_relations(select(PostDB).where(PostDB.slug == slug)))
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        """Check the slug against every row, soft-deleted ones included."""
        statement = select(PostDB.id).where(PostDB.slug == slug)
        if exclude_id is not None:
            statement = statement.where(PostDB.id != exclude_id)
        result = await self.session.execute(statement.limit(1))
        return result.scalar_one_or_none() is not None

    async def unique_slug(self, title: str, exclude_id: UUID | None = None) -> str:
        """
        Derive a slug from ``title`` that no other post uses.

        Collisions are resolved with ``-1``, ``-2``, ... suffixes; the result
        always fits the slug column.
        """
        base = slugify(title)
        candidate = base
        n = 0
        while await self.slug_exists(candidate, exclude_id):
            n += 1
            candidate = with_suffix(base, n)
        return candidate

    async def create(self, data: dict[str, Any], author_id: UUID) -> PostDB:
        """
        Insert a post owned by ``author_id``.

        The slug and read time are derived here; counters always start at 0
        whatever ``data`` contains.
        """
        fields = {k: v for k, v in data.items() if k in PostDB.model_fields}
        fields.update(
            author_id=author_id,
            slug=await self.unique_slug(data["title"]),
            read_time_minutes=calculate_reading_time(data["content"]),
            total_views=0,
            total_shares=0,
            total_favorites=0,
        )
        return await self._add_and_flush(PostDB(**fields))

    async def apply_update(self, post: PostDB, changes: dict[str, Any]) -> PostDB:
        """
        Write ``changes`` onto ``post``.

        The slug is regenerated only when the title actually changes and the
        read time only when the content does.
        """
        if "title" in changes and changes["title"] != post.title:
            post.slug = await self.unique_slug(changes["title"], exclude_id=post.id)
        if "content" in changes and changes["content"] != post.content:
            post.read_time_minutes = calculate_reading_time(changes["content"])

        for field, value in changes.items():
            setattr(post, field, value)
        post.updated_at = utcnow()
        return await self._add_and_flush(post)

    async def _paginate(
        self,
        statement: Select[Any],
        page: int,
        per_page: int,
    ) -> tuple[list[PostDB], int]:
        count_statement = select(func.count()).select_from(statement.order_by(None).subquery())
        total = (await self.session.execute(count_statement)).scalar_one()
        result = await self.session.execute(
            self._with_relations(statement).offset((page - 1) * per_page).limit(per_page),
        )
        return list(result.scalars().all()), total

    async def list_admin(
        self,
        *,
        publish: PublishState | None = None,
        sort: AdminSort = "-created_at",
        trashed: Trashed | None = None,
        page: int = 1,
        per_page: int | None = None,
    ) -> tuple[list[PostDB], int]:
        """
        Admin listing over every publish state.

        Args:
            publish: Exact publish state filter
            sort: ``created_at`` for oldest first, ``-created_at`` for newest first
            trashed: ``with`` includes soft-deleted posts, ``only`` shows nothing else
            page: 1-based page number
            per_page: Page size, defaults to ``POSTS_PER_PAGE``

        Returns:
            tuple[list[PostDB], int]: The page of posts and the total count
        """
        statement = select(PostDB)
        if publish is not None:
            statement = statement.where(PostDB.publish == publish)
        match trashed:
            case "only":
                statement = statement.where(PostDB.deleted_at.is_not(None))  # pyrefly: ignore
            case "with":
                pass
            case _:
                statement = statement.where(PostDB.deleted_at.is_(None))  # pyrefly: ignore

        order = asc if sort == "created_at" else desc
        statement = statement.order_by(order(PostDB.created_at), order(PostDB.id))
        return await self._paginate(statement, page, per_page or settings.POSTS_PER_PAGE)

    async def list_public(
        self,
        *,
        page: int = 1,
        per_page: int | None = None,
    ) -> tuple[list[PostDB], int]:
        """Published, non-deleted posts, newest first."""
        statement = self._published(select(PostDB)).order_by(
            desc(PostDB.created_at),
            desc(PostDB.id),
        )
        return await self._paginate(statement, page, per_page or settings.POSTS_PER_PAGE)

    async def featured(self, limit: int | None = None) -> list[PostDB]:
        """Published posts flagged as featured, newest first."""
        statement = self._published(select(PostDB)).where(PostDB.featured.is_(True))  # pyrefly: ignore
        statement = statement.order_by(desc(PostDB.created_at))
        result = await self.session.execute(
            self._with_relations(statement).limit(limit or settings.FEATURED_LIMIT),
        )
        return list(result.scalars().all())

    async def latest(self, limit: int | None = None) -> list[PostDB]:
        """Most recently created published posts."""
        statement = self._published(select(PostDB)).order_by(desc(PostDB.created_at))
        result = await self.session.execute(
            self._with_relations(statement).limit(limit or settings.LATEST_LIMIT),
        )
        return list(result.scalars().all())

    async def search(self, query: str, limit: int | None = None) -> list[PostDB]:
        """
        Case-insensitive partial match on title, published posts only.

        Args:
            query: Search term; LIKE wildcards in it are matched literally
            limit: Maximum number of results

        Returns:
            list[PostDB]: Matching posts, newest first
        """
        pattern = f"%{_escape_like(query.strip())}%"
        statement = self._published(select(PostDB)).where(
            PostDB.title.ilike(pattern, escape="\\"),  # pyrefly: ignore [missing-attribute]
        )
        statement = statement.order_by(desc(PostDB.created_at))
        result = await self.session.execute(
            self._with_relations(statement).limit(limit or settings.SEARCH_LIMIT),
        )
        return list(result.scalars().all())

    async def top_level_comment_counts(self, post_ids: Sequence[UUID]) -> dict[UUID, int]:
        """Count comments without a parent for each post in ``post_ids``."""
        if not post_ids:
            return {}
        statement = (
            select(CommentDB.commentable_id, func.count())
            .where(
                CommentDB.commentable_type == POST_COMMENTABLE,
                CommentDB.commentable_id.in_(post_ids),  # pyrefly: ignore [missing-attribute]
                CommentDB.parent_id.is_(None),  # pyrefly: ignore [missing-attribute]
            )
            .group_by(CommentDB.commentable_id)
        )
        result = await self.session.execute(statement)
        counts = {post_id: count for post_id, count in result.all()}
        return {post_id: counts.get(post_id, 0) for post_id in post_ids}

    async def top_level_comments(self, post_id: UUID, limit: int = 50) -> list[CommentDB]:
        statement = (
            select(CommentDB)
            .where(
                CommentDB.commentable_type == POST_COMMENTABLE,
                CommentDB.commentable_id == post_id,
                CommentDB.parent_id.is_(None),  # pyrefly: ignore [missing-attribute]
            )
            .order_by(desc(CommentDB.created_at))
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def soft_delete(self, post: PostDB) -> PostDB:
        soft_delete(post)
        return await self._add_and_flush(post)

    async def restore(self, post: PostDB) -> PostDB:
        restore(post)
        post.updated_at = utcnow()
        return await self._add_and_flush(post)

    async def purge(self, post: PostDB) -> None:
        """
        Permanently remove ``post`` and the rows that hang off it.

        Tag links, the cover record and comments are deleted explicitly;
        SQLite does not enforce ``ON DELETE CASCADE`` by default.
        """
        purge(post)
        await self.session.execute(delete(PostTagLink).where(PostTagLink.post_id == post.id))
        await self.session.execute(delete(CoverImageDB).where(CoverImageDB.post_id == post.id))
        await self.session.execute(
            delete(CommentDB).where(
                CommentDB.commentable_type == POST_COMMENTABLE,
                CommentDB.commentable_id == post.id,
            ),
        )
        await self.session.execute(delete(PostDB).where(PostDB.id == post.id))
        await self.session.flush()
