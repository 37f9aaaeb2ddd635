"""
Post request and response models.

Request models accept both camelCase aliases and snake_case names. Response
models always serialize with the camelCase aliases of the public contract.
"""

from datetime import datetime
from math import ceil
from typing import Annotated, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from blog.configs.settings import (
    MAX_DESCRIPTION_LENGTH,
    MAX_META_KEYWORDS,
    MAX_TAGS,
    MAX_TITLE_LENGTH,
)
from blog.models import CommentDB, PostDB, PublishState, TagDB, UserDB
from blog.utils.text import read_time_label

NON_NULLABLE_FIELDS = frozenset({"title", "content", "publish", "featured", "meta_keywords"})

TagName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


def _dedupe(values: list[str]) -> list[str]:
    """Drop case-insensitive duplicates, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value.lower() not in seen:
            seen.add(value.lower())
            result.append(value)
    return result


class PostCreate(BaseModel):
    """Post creation payload (author, slug and counters are never client-supplied)."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH, examples=["Ten Tips"])
    content: str = Field(min_length=1)
    description: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    publish: PublishState = PublishState.DRAFT
    featured: bool = False
    meta_title: str | None = Field(default=None, max_length=255, alias="metaTitle")
    meta_keywords: list[str] = Field(
        default_factory=list,
        max_length=MAX_META_KEYWORDS,
        alias="metaKeywords",
    )
    meta_description: str | None = Field(default=None, max_length=500, alias="metaDescription")
    tags: list[TagName] = Field(default_factory=list, max_length=MAX_TAGS)

    @field_validator("tags", mode="after")
    @classmethod
    def unique_tags(cls, v: list[str]) -> list[str]:
        return _dedupe(v)


class PostUpdate(BaseModel):
    """
    Post update payload.

    Only fields present in the request are written, except ``tags``: the tag
    list always replaces the current tags, so omitting it clears them.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=1, max_length=MAX_TITLE_LENGTH)
    content: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    publish: PublishState | None = None
    featured: bool | None = None
    meta_title: str | None = Field(default=None, max_length=255, alias="metaTitle")
    meta_keywords: list[str] | None = Field(
        default=None,
        max_length=MAX_META_KEYWORDS,
        alias="metaKeywords",
    )
    meta_description: str | None = Field(default=None, max_length=500, alias="metaDescription")
    tags: list[TagName] = Field(default_factory=list, max_length=MAX_TAGS)

    @field_validator("tags", mode="after")
    @classmethod
    def unique_tags(cls, v: list[str]) -> list[str]:
        return _dedupe(v)

    def changes(self) -> dict[str, object]:
        """Entity fields explicitly set by the client, tags excluded."""
        data = self.model_dump(exclude_unset=True, exclude={"tags"})
        # Explicit nulls cannot clear required columns
        return {
            k: v for k, v in data.items() if v is not None or k not in NON_NULLABLE_FIELDS
        }


class AuthorResponse(BaseModel):
    """Author information for post responses (without sensitive data)."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    username: str
    display_name: str | None = Field(default=None, alias="displayName")
    avatar_url: str | None = Field(default=None, alias="avatarUrl")

    @classmethod
    def from_user(cls, user: UserDB) -> Self:
        return cls(
            id=user.uuid,
            username=user.username,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
        )


class TagResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: UUID
    name: str
    slug: str

    @classmethod
    def from_tag(cls, tag: TagDB) -> Self:
        return cls.model_validate(tag)


class CommentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    body: str
    author_id: UUID | None = Field(default=None, alias="authorId")
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_comment(cls, comment: CommentDB) -> Self:
        return cls(
            id=comment.id,
            body=comment.body,
            author_id=comment.author_id,
            created_at=comment.created_at,
        )


class PostResponse(BaseModel):
    """Public JSON contract for a single post."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    title: str
    slug: str
    publish: PublishState
    featured: bool
    content: str | None = None
    author_id: UUID = Field(alias="authorId")
    description: str | None = None
    duration: str
    total_views: int = Field(alias="totalViews")
    total_shares: int = Field(alias="totalShares")
    total_favorites: int = Field(alias="totalFavorites")
    meta_title: str | None = Field(default=None, alias="metaTitle")
    meta_keywords: list[str] = Field(default_factory=list, alias="metaKeywords")
    meta_description: str | None = Field(default=None, alias="metaDescription")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    deleted_at: datetime | None = Field(default=None, alias="deletedAt")
    comments: list[CommentResponse] | None = None
    total_comments: int | None = Field(default=None, alias="totalComments")
    cover_url: str | None = Field(default=None, alias="coverUrl")
    author: AuthorResponse | None = None
    tags: list[TagResponse] = Field(default_factory=list)

    @classmethod
    def from_post(
        cls,
        post: PostDB,
        *,
        cover_url: str | None = None,
        total_comments: int | None = None,
        comments: list[CommentDB] | None = None,
        include_content: bool = True,
    ) -> Self:
        """
        Shape a loaded post.

        ``author``, ``cover`` and ``tags`` must already be loaded on ``post``;
        ``cover_url`` is the cover path resolved to a public URL by the caller.
        """
        return cls(
            id=post.id,
            title=post.title,
            slug=post.slug,
            publish=PublishState(post.publish),
            featured=post.featured,
            content=post.content if include_content else None,
            author_id=post.author_id,
            description=post.description,
            duration=read_time_label(post.read_time_minutes),
            total_views=post.total_views,
            total_shares=post.total_shares,
            total_favorites=post.total_favorites,
            meta_title=post.meta_title,
            meta_keywords=list(post.meta_keywords or []),
            meta_description=post.meta_description,
            created_at=post.created_at,
            updated_at=post.updated_at,
            deleted_at=post.deleted_at,
            comments=[CommentResponse.from_comment(c) for c in comments]
            if comments is not None
            else None,
            total_comments=total_comments,
            cover_url=cover_url,
            author=AuthorResponse.from_user(post.author) if post.author else None,
            tags=[TagResponse.from_tag(t) for t in post.tags],
        )

    def to_json(self) -> dict[str, object]:
        """JSON-ready dict using the contract's camelCase names."""
        return self.model_dump(mode="json", by_alias=True)


class PaginationMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(alias="currentPage")
    per_page: int = Field(alias="perPage")
    total: int
    last_page: int = Field(alias="lastPage")
    from_: int | None = Field(default=None, alias="from")
    to: int | None = None

    @classmethod
    def build(cls, page: int, per_page: int, total: int, count: int) -> Self:
        """Pagination details for ``count`` items shown on ``page`` out of ``total``."""
        first = (page - 1) * per_page + 1
        return cls(
            current_page=page,
            per_page=per_page,
            total=total,
            last_page=max(1, ceil(total / per_page)),
            from_=first if count else None,
            to=first + count - 1 if count else None,
        )


class PostCollection(BaseModel):
    """Paginated collection: ``{"data": [...], "meta": {...}}``."""

    data: list[PostResponse]
    meta: PaginationMeta

    def to_json(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)
