"""Comment database model."""

from datetime import datetime
from typing import cast
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, SQLModel, String

from blog.models.types import utcnow

POST_COMMENTABLE = "post"


class CommentDB(SQLModel, table=True):
    """
    A comment attached to any commentable resource.

    ``commentable_type``/``commentable_id`` form a polymorphic reference, so
    there is no foreign key to ``posts``. Replies carry a ``parent_id``; only
    comments without one are counted as a post's ``totalComments``.
    """

    __tablename__ = cast("declared_attr[str]", "comments")

    __table_args__ = (
        Index("ix_comments_commentable", "commentable_type", "commentable_id", "parent_id"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, nullable=False)
    commentable_type: str = Field(
        default=POST_COMMENTABLE,
        sa_column=Column(String(50), nullable=False),
    )
    commentable_id: UUID = Field(nullable=False)
    parent_id: UUID | None = Field(
        default=None,
        sa_column=Column("parent_id", ForeignKey("comments.id", ondelete="CASCADE")),
    )
    author_id: UUID | None = Field(
        default=None,
        sa_column=Column("author_id", ForeignKey("users.uuid", ondelete="SET NULL")),
    )
    body: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
