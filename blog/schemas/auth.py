from uuid import UUID

from pydantic import BaseModel


class TokenData(BaseModel):
    """Claims extracted from a verified access token."""

    username: str
    user_id: UUID
    jti: str
