"""Tag and post-tag link models."""

from datetime import datetime
from typing import cast
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Index
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, SQLModel, String

from blog.models.types import utcnow


class PostTagLink(SQLModel, table=True):
    """Ordered association between posts and tags."""

    __tablename__ = cast("declared_attr[str]", "post_tags")

    __table_args__ = (Index("ix_post_tags_post_order", "post_id", "order_column"),)

    post_id: UUID = Field(
        sa_column=Column(
            "post_id",
            ForeignKey("posts.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    tag_id: UUID = Field(
        sa_column=Column(
            "tag_id",
            ForeignKey("tags.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    order_column: int = Field(default=0, nullable=False)


class TagDB(SQLModel, table=True):
    """A named tag that posts can be associated with."""

    __tablename__ = cast("declared_attr[str]", "tags")

    id: UUID = Field(default_factory=uuid4, primary_key=True, nullable=False)
    name: str = Field(sa_column=Column(String(100), unique=True, nullable=False))
    slug: str = Field(sa_column=Column(String(120), nullable=False, index=True))
    order_column: int = Field(default=0, nullable=False)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
