"""Tag repository and post-tag synchronization."""

from uuid import UUID

from sqlalchemy import delete, func, select

from blog.models import PostTagLink, TagDB
from blog.repositories.base import BaseRepository
from blog.utils.text import slugify


class TagRepository(BaseRepository[TagDB]):
    """Tag lookups plus replacement of a post's tag set."""

    model = TagDB

    async def list_all(self) -> list[TagDB]:
        result = await self.session.execute(
            select(TagDB).order_by(TagDB.order_column, TagDB.name),
        )
        return list(result.scalars().all())

    async def find_or_create(self, names: list[str]) -> list[TagDB]:
        """
        Resolve tag names to tags, creating the missing ones.

        Matching is case-insensitive. The result follows the order of
        ``names``.
        """
        if not names:
            return []

        lowered = [name.lower() for name in names]
        result = await self.session.execute(
            select(TagDB).where(func.lower(TagDB.name).in_(lowered)),
        )
        by_name = {tag.name.lower(): tag for tag in result.scalars().all()}

        next_order = await self._next_order()
        tags: list[TagDB] = []
        for name in names:
            tag = by_name.get(name.lower())
            if tag is None:
                tag = TagDB(name=name, slug=slugify(name, 120), order_column=next_order)
                next_order += 1
                await self._add_and_flush(tag)
                by_name[name.lower()] = tag
            tags.append(tag)
        return tags

    async def _next_order(self) -> int:
        result = await self.session.execute(select(func.max(TagDB.order_column)))
        return (result.scalar_one_or_none() or 0) + 1

    async def sync(self, post_id: UUID, names: list[str]) -> list[TagDB]:
        """
        Replace every tag link of ``post_id`` with ``names``, in order.

        An empty list removes all tags from the post.
        """
        tags = await self.find_or_create(names)
        await self.session.execute(delete(PostTagLink).where(PostTagLink.post_id == post_id))
        self.session.add_all(
            PostTagLink(post_id=post_id, tag_id=tag.id, order_column=index)
            for index, tag in enumerate(tags)
        )
        await self.session.flush()
        return tags
