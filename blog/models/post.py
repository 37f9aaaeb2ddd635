"""Post and cover image database models using SQLModel."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional, cast
from uuid import UUID, uuid4

from pydantic import ConfigDict
from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, Relationship, SQLModel, String

from blog.configs.settings import MAX_SLUG_LENGTH, MAX_TITLE_LENGTH
from blog.models.tag import PostTagLink, TagDB
from blog.models.types import JSONList, PublishState, utcnow

if TYPE_CHECKING:
    from blog.models.user import UserDB


class PostDB(SQLModel, table=True):
    """
    Blog post.

    ``deleted_at`` is the soft-delete marker: rows with it set are hidden from
    default queries but kept in storage until purged. See
    ``blog.models.lifecycle`` for the allowed transitions.
    """

    __tablename__ = cast("declared_attr[str]", "posts")

    __table_args__ = (
        Index("ix_posts_publish_created", "publish", "created_at"),
        Index("ix_posts_featured_created", "featured", "created_at"),
        Index("ix_posts_deleted_at", "deleted_at"),
        CheckConstraint("total_views >= 0", name="ck_posts_total_views_non_negative"),
        CheckConstraint("total_shares >= 0", name="ck_posts_total_shares_non_negative"),
        CheckConstraint("total_favorites >= 0", name="ck_posts_total_favorites_non_negative"),
        CheckConstraint("publish IN ('draft', 'published')", name="ck_posts_publish_state"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, nullable=False)

    author_id: UUID = Field(
        sa_column=Column(
            "author_id",
            ForeignKey("users.uuid", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        description="Author ID (foreign key to users.uuid)",
    )

    title: str = Field(
        sa_column=Column(String(MAX_TITLE_LENGTH), nullable=False),
        description="Post title",
    )
    slug: str = Field(
        sa_column=Column(String(MAX_SLUG_LENGTH), unique=True, nullable=False, index=True),
        description="URL-friendly slug derived from the title (unique)",
    )
    content: str = Field(sa_column=Column(Text, nullable=False))
    description: str | None = Field(default=None, sa_column=Column(Text))
    publish: PublishState = Field(
        default=PublishState.DRAFT,
        sa_column=Column(String(20), nullable=False, default=PublishState.DRAFT.value),
    )
    featured: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False),
    )

    total_views: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    total_shares: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    total_favorites: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
    )

    meta_title: str | None = Field(default=None, sa_column=Column(String(255)))
    meta_keywords: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSONList, nullable=False),
    )
    meta_description: str | None = Field(default=None, sa_column=Column(String(500)))

    read_time_minutes: int = Field(
        default=1,
        sa_column=Column(Integer, nullable=False, default=1),
        description="Estimated reading time derived from content",
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True)),
    )
    deleted_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True)),
    )

    author: Optional["UserDB"] = Relationship()
    cover: Optional["CoverImageDB"] = Relationship(
        back_populates="post",
        sa_relationship_kwargs={"uselist": False, "passive_deletes": True},
    )
    tags: list[TagDB] = Relationship(
        link_model=PostTagLink,
        sa_relationship_kwargs={"viewonly": True, "order_by": PostTagLink.order_column},
    )

    model_config = ConfigDict(  # pyrefly: ignore
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "author_id": "123e4567-e89b-12d3-a456-426614174111",
                "title": "Ten Tips for Writing Better Posts",
                "slug": "ten-tips-for-writing-better-posts",
                "content": "Writing is rewriting...",
                "publish": "published",
                "featured": False,
                "total_views": 0,
            },
        },
    )


class CoverImageDB(SQLModel, table=True):
    """
    Cover image for a post; a post owns at most one.

    ``path`` is either a storage path written by the cover upload flow or an
    external URL supplied by the client.
    """

    __tablename__ = cast("declared_attr[str]", "post_covers")

    id: UUID = Field(default_factory=uuid4, primary_key=True, nullable=False)
    post_id: UUID = Field(
        sa_column=Column(
            "post_id",
            ForeignKey("posts.id", ondelete="CASCADE"),
            unique=True,
            nullable=False,
        ),
    )
    path: str = Field(sa_column=Column(String(1024), nullable=False))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True)),
    )

    post: PostDB | None = Relationship(back_populates="cover")
