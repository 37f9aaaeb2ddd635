"""User database model using SQLModel."""

from datetime import datetime
from typing import cast
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, SQLModel, String

from blog.models.types import JSONList, utcnow


class UserDB(SQLModel, table=True):
    """
    Author/actor account as seen by the posts service.

    Accounts are owned by the identity service; this table only carries what
    the posts service needs to authorize and present authors: granted
    permission strings and role names.
    """

    __tablename__ = cast("declared_attr[str]", "users")

    uuid: UUID = Field(default_factory=uuid4, primary_key=True, nullable=False)
    username: str = Field(
        sa_column=Column(String(50), unique=True, nullable=False, index=True),
    )
    email: str = Field(sa_column=Column(String(255), unique=True, nullable=False))
    display_name: str | None = Field(default=None, sa_column=Column(String(100)))
    avatar_url: str | None = Field(default=None, sa_column=Column(String(500)))
    permissions: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSONList, nullable=False),
        description="Granted permission strings, e.g. 'blog.posts.edit'",
    )
    roles: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSONList, nullable=False),
        description="Role names, e.g. 'Administrator'",
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), onupdate=utcnow),
    )
