"""User repository."""

from blog.models import UserDB
from blog.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserDB]):
    """Read access to the authors/actors known to the posts service."""

    model = UserDB
    id_field = "uuid"

    async def get_by_username(self, username: str) -> UserDB | None:
        return await self.get_by_field("username", username)
