"""Cover image records."""

from uuid import UUID

from sqlalchemy import select

from blog.models import CoverImageDB
from blog.repositories.base import BaseRepository
from blog.utils.helpers import utcnow


class CoverRepository(BaseRepository[CoverImageDB]):
    """One cover row per post, keyed by ``post_id``."""

    model = CoverImageDB

    async def get_for_post(self, post_id: UUID) -> CoverImageDB | None:
        return await self.get_by_field("post_id", post_id)

    async def upsert(self, post_id: UUID, path: str) -> CoverImageDB:
        """Point the post's cover at ``path``, creating the record if needed."""
        cover = await self.get_for_post(post_id)
        if cover is None:
            return await self._add_and_flush(CoverImageDB(post_id=post_id, path=path))
        cover.path = path
        cover.updated_at = utcnow()
        return await self._add_and_flush(cover)

    async def remove(self, cover: CoverImageDB) -> None:
        await self.session.delete(cover)
        await self.session.flush()

    async def shared_with_other_post(self, cover: CoverImageDB) -> bool:
        """Whether another post's cover points at the same path."""
        statement = select(CoverImageDB.id).where(
            CoverImageDB.path == cover.path,
            CoverImageDB.post_id != cover.post_id,
        )
        result = await self.session.execute(statement.limit(1))
        return result.scalar_one_or_none() is not None
